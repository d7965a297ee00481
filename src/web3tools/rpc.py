"""
JSON-RPC Clients for Ethereum nodes.

Lightweight alternative to web3.py: uses httpx for HTTP and websockets
for WebSocket endpoints. Each facade holds one client, shared by every
in-flight request.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from itertools import count
from typing import Any, Awaitable, Callable, Optional, Union

import httpx
import websockets

logger = logging.getLogger(__name__)

WebSocketConnect = Callable[[str], Awaitable[Any]]


class RPCError(RuntimeError):
    """Error object returned by the node in place of a result."""

    def __init__(self, code: Optional[int], message: str, data: Any = None) -> None:
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"RPC error {code}: {message}")


def _build_payload(method: str, params: Optional[list], request_id: int) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "method": method,
        "params": params or [],
        "id": request_id,
    }


def _unwrap(method: str, response: dict[str, Any]) -> Any:
    """Return the result of a response, raising RPCError for an error object."""
    if "error" in response:
        error = response["error"]
        logger.debug("RPC error %s id=%s: %s", method, response.get("id"), error)
        raise RPCError(
            code=error.get("code"),
            message=error.get("message", "unknown error"),
            data=error.get("data"),
        )

    logger.debug("RPC response %s id=%s", method, response.get("id"))
    return response.get("result")


class RPCClient:
    """
    Async JSON-RPC 2.0 client over HTTP.

    Args:
        url: HTTP(S) endpoint of the node
        timeout: Request timeout in seconds
        transport: Optional httpx transport (e.g. httpx.MockTransport)
    """

    def __init__(
        self,
        url: str,
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not url.startswith(("http://", "https://")):
            raise ValueError(f"Not an HTTP(S) provider URL: {url}")
        self.url = url
        self.request_id_counter = count(1)
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    @property
    def timeout(self) -> httpx.Timeout:
        return self._client.timeout

    async def request(self, method: str, params: Optional[list] = None) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_getBalance")
            params: RPC parameters

        Returns:
            Result field from the RPC response

        Raises:
            RPCError: If the node answers with an error object
            httpx.HTTPError: On transport failure or non-2xx status
        """
        payload = _build_payload(method, params, next(self.request_id_counter))
        logger.debug("RPC request %s id=%s params=%s", method, payload["id"], payload["params"])

        response = await self._client.post(self.url, json=payload)
        response.raise_for_status()
        return _unwrap(method, response.json())

    async def aclose(self) -> None:
        await self._client.aclose()


class WebSocketRPCClient:
    """
    Async JSON-RPC 2.0 client over a single WebSocket connection.

    The connection is opened on the first request. A background reader
    matches responses to pending requests by id; messages without a
    pending id (subscription notifications) are ignored.

    Args:
        url: ws:// or wss:// endpoint of the node
        timeout: Seconds to wait for the connection and for each response
        connect: Coroutine function opening the connection (default:
            websockets.connect)
    """

    def __init__(
        self,
        url: str,
        timeout: float,
        connect: Optional[WebSocketConnect] = None,
    ) -> None:
        if not url.startswith(("ws://", "wss://")):
            raise ValueError(f"Not a WebSocket provider URL: {url}")
        self.url = url
        self.request_id_counter = count(1)
        self._timeout = timeout
        self._connect = connect or websockets.connect
        self._connection: Any = None
        self._reader: Optional[asyncio.Task] = None
        self._pending: dict[int, asyncio.Future] = {}
        self._lock = asyncio.Lock()

    @property
    def timeout(self) -> float:
        return self._timeout

    async def _ensure_connection(self) -> Any:
        async with self._lock:
            if self._connection is None:
                logger.debug("Opening WebSocket connection to %s", self.url)
                self._connection = await asyncio.wait_for(self._connect(self.url), self._timeout)
                self._reader = asyncio.create_task(self._read_responses(self._connection))
        return self._connection

    async def _read_responses(self, connection: Any) -> None:
        try:
            async for message in connection:
                response = json.loads(message)
                if not isinstance(response, dict):
                    continue
                future = self._pending.get(response.get("id"))
                if future is not None and not future.done():
                    future.set_result(response)
            failure: BaseException = ConnectionError(f"WebSocket connection to {self.url} closed")
        except Exception as exc:
            failure = exc

        logger.debug("WebSocket reader stopped: %s", failure)
        for future in self._pending.values():
            if not future.done():
                future.set_exception(failure)

    async def request(self, method: str, params: Optional[list] = None) -> Any:
        """
        Make a JSON-RPC call.

        Raises:
            RPCError: If the node answers with an error object
            asyncio.TimeoutError: If no response arrives within the timeout
            websockets.exceptions.WebSocketException: On connection failure
        """
        connection = await self._ensure_connection()

        payload = _build_payload(method, params, next(self.request_id_counter))
        logger.debug("RPC request %s id=%s params=%s", method, payload["id"], payload["params"])

        future = asyncio.get_running_loop().create_future()
        self._pending[payload["id"]] = future
        try:
            await connection.send(json.dumps(payload))
            response = await asyncio.wait_for(future, self._timeout)
        finally:
            self._pending.pop(payload["id"], None)

        return _unwrap(method, response)

    async def aclose(self) -> None:
        if self._reader is not None:
            self._reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader
            self._reader = None
        if self._connection is not None:
            await self._connection.close()
            self._connection = None


def make_rpc_client(
    url: str,
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    ws_connect: Optional[WebSocketConnect] = None,
) -> Union[RPCClient, WebSocketRPCClient]:
    """
    Pick the client for a provider URL by scheme.

    Raises:
        ValueError: If the scheme is neither HTTP(S) nor WS(S)
    """
    if url.startswith(("http://", "https://")):
        return RPCClient(url, timeout=timeout, transport=transport)
    if url.startswith(("ws://", "wss://")):
        return WebSocketRPCClient(url, timeout=timeout, connect=ws_connect)
    raise ValueError(f"Unsupported provider URL scheme: {url}")
