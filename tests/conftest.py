"""Shared fixtures: an in-memory Ethereum node behind httpx.MockTransport."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable

import httpx
import pytest

from web3tools import Web3Tools

PROVIDER_URL = "http://node.test:8545"


class FakeNode:
    """
    Answers JSON-RPC requests from a method -> result table.

    A table value may be a callable taking the params list. Methods listed
    in `errors` answer with a JSON-RPC error object instead.
    """

    def __init__(self, results: dict[str, Any] | None = None) -> None:
        self.results: dict[str, Any] = dict(results or {})
        self.errors: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, list]] = []

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        method, params = payload["method"], payload["params"]
        self.calls.append((method, params))

        if method in self.errors:
            body = {"jsonrpc": "2.0", "id": payload["id"], "error": self.errors[method]}
            return httpx.Response(200, json=body)

        result = self.results.get(method)
        if callable(result):
            result = result(params)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": result})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture()
def node() -> FakeNode:
    return FakeNode()


@pytest.fixture()
def make_tools(node: FakeNode) -> Callable[..., Web3Tools]:
    """Build a facade wired to the fake node."""

    def factory(**kwargs: Any) -> Web3Tools:
        kwargs.setdefault("transport", node.transport())
        kwargs.setdefault("poll_interval", 0)
        return Web3Tools(PROVIDER_URL, **kwargs)

    return factory


class FakeSocket:
    """
    WebSocket connection stand-in driven by a FakeNode.

    Replies are queued for the reader as soon as a request is sent. With
    `hold` set, replies are kept back until `release()` and then delivered
    in reverse order. `silent` drops every request unanswered.
    """

    def __init__(self, node: FakeNode, hold: int = 0, silent: bool = False) -> None:
        self.node = node
        self.hold = hold
        self.silent = silent
        self.sent: list[dict[str, Any]] = []
        self.held: list[str] = []
        self.closed = False
        self._inbox: asyncio.Queue = asyncio.Queue()

    async def send(self, message: str) -> None:
        payload = json.loads(message)
        self.sent.append(payload)
        if self.silent:
            return
        request = httpx.Request("POST", PROVIDER_URL, content=message)
        reply = self.node.handler(request).text
        if self.hold:
            self.held.append(reply)
            if len(self.held) == self.hold:
                self.release()
        else:
            self.push(reply)

    def push(self, message: str) -> None:
        self._inbox.put_nowait(message)

    def release(self) -> None:
        for reply in reversed(self.held):
            self.push(reply)
        self.held.clear()

    def __aiter__(self) -> "FakeSocket":
        return self

    async def __anext__(self) -> str:
        message = await self._inbox.get()
        if message is None:
            raise StopAsyncIteration
        return message

    async def close(self) -> None:
        self.closed = True
        self._inbox.put_nowait(None)


class FakeConnector:
    """Records connection attempts and hands out one FakeSocket."""

    def __init__(self, socket: FakeSocket) -> None:
        self.socket = socket
        self.urls: list[str] = []

    async def __call__(self, url: str) -> FakeSocket:
        self.urls.append(url)
        return self.socket
