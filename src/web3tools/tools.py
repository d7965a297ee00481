"""
Web3Tools - Named-method facade over an Ethereum node's JSON-RPC API.

Each method forwards its arguments to a single RPC call and returns the
node's result unmodified. Absent resources (unknown hash, unknown block)
come back as None. Transport and node errors propagate to the caller.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional

import httpx
from eth_account.signers.local import LocalAccount

from .accounts import sign_transaction
from .config import DEFAULT_DEPLOY_TIMEOUT, DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT_MS
from .contract import ContractDeploymentError, DeployedContract, build_deploy_data
from .formatters import (
    BlockIdentifier,
    format_block_identifier,
    format_filter,
    format_transaction,
    is_block_hash,
    to_hex_quantity,
    to_int,
)
from .rpc import WebSocketConnect, make_rpc_client

logger = logging.getLogger(__name__)


class Web3Tools:
    """
    Async convenience wrapper around an Ethereum node.

    Args:
        provider_url: HTTP(S) or WS(S) URL of the Ethereum node
        timeout: Request timeout in milliseconds (default: 10000)
        account: Local account used to sign deployments sent from its address
        transport: Optional httpx transport for HTTP(S) providers
        ws_connect: Optional coroutine function opening WS(S) connections
        poll_interval: Seconds between receipt polls while deploying
        deploy_timeout: Seconds to wait for a deployment to be mined
    """

    def __init__(
        self,
        provider_url: str,
        timeout: int = DEFAULT_TIMEOUT_MS,
        *,
        account: Optional[LocalAccount] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        ws_connect: Optional[WebSocketConnect] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        deploy_timeout: float = DEFAULT_DEPLOY_TIMEOUT,
    ) -> None:
        self.provider_url = provider_url
        self.timeout = timeout
        self.account = account
        self.poll_interval = poll_interval
        self.deploy_timeout = deploy_timeout
        self._rpc = make_rpc_client(
            provider_url, timeout=timeout / 1000, transport=transport, ws_connect=ws_connect
        )

    async def __aenter__(self) -> "Web3Tools":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection."""
        await self._rpc.aclose()

    # ============ Transactions ============

    async def fetch_transaction_receipt(self, tx_hash: str) -> Optional[dict]:
        """
        Fetch the receipt of a transaction.

        Returns:
            Receipt dict, or None while the transaction is not yet mined
        """
        return await self._rpc.request("eth_getTransactionReceipt", [tx_hash])

    async def get_transaction(self, tx_hash: str) -> Optional[dict]:
        """Fetch a transaction by hash; None if the node does not know it."""
        return await self._rpc.request("eth_getTransactionByHash", [tx_hash])

    async def estimate_gas_usage(self, tx: dict[str, Any]) -> Any:
        """
        Estimate the gas a transaction would consume.

        Integer quantity fields (gas, value, ...) are hex-encoded before
        sending. Fails with RPCError when the transaction would revert.
        """
        return await self._rpc.request("eth_estimateGas", [format_transaction(tx)])

    async def fetch_gas_price(self) -> Any:
        """Current gas price in wei."""
        return await self._rpc.request("eth_gasPrice")

    # ============ Blocks ============

    async def fetch_block_details(
        self,
        block: BlockIdentifier,
        full_transactions: bool = False,
    ) -> Optional[dict]:
        """
        Fetch a block by number, tag or hash.

        Args:
            block: Block number, tag ("latest", ...) or 32-byte block hash
            full_transactions: Return transaction objects instead of hashes

        Returns:
            Block dict, or None if the block does not exist
        """
        if is_block_hash(block):
            return await self._rpc.request("eth_getBlockByHash", [block, full_transactions])
        return await self._rpc.request(
            "eth_getBlockByNumber", [format_block_identifier(block), full_transactions]
        )

    async def fetch_latest_block_number(self) -> Any:
        return await self._rpc.request("eth_blockNumber")

    async def fetch_block_transaction_count(self, block: BlockIdentifier) -> Any:
        """Number of transactions in a block given by number, tag or hash."""
        if is_block_hash(block):
            return await self._rpc.request("eth_getBlockTransactionCountByHash", [block])
        return await self._rpc.request(
            "eth_getBlockTransactionCountByNumber", [format_block_identifier(block)]
        )

    # ============ Network ============

    async def fetch_network_id(self) -> Any:
        return await self._rpc.request("net_version")

    async def fetch_user_accounts(self) -> list[str]:
        """Addresses managed by the node (empty for most public providers)."""
        return await self._rpc.request("eth_accounts")

    # ============ Accounts ============

    async def get_balance(self, address: str, block: BlockIdentifier = "latest") -> Any:
        """
        Balance of an account.

        Args:
            address: 0x-prefixed address
            block: Block number or tag (default: "latest")

        Returns:
            Balance in wei, as returned by the node
        """
        return await self._rpc.request(
            "eth_getBalance", [address, format_block_identifier(block)]
        )

    async def get_transaction_count(self, address: str, block: BlockIdentifier = "latest") -> Any:
        """Number of transactions sent from an address (its next nonce)."""
        return await self._rpc.request(
            "eth_getTransactionCount", [address, format_block_identifier(block)]
        )

    async def get_code(self, address: str, block: BlockIdentifier = "latest") -> str:
        """Deployed bytecode at an address; "0x" for externally owned accounts."""
        return await self._rpc.request("eth_getCode", [address, format_block_identifier(block)])

    # ============ Logs ============

    async def get_past_logs(self, filter_options: dict[str, Any]) -> list[dict]:
        """
        Fetch logs matching a filter.

        Args:
            filter_options: Filter with any of address, topics, fromBlock,
                toBlock, blockHash

        Returns:
            List of log dicts
        """
        return await self._rpc.request("eth_getLogs", [format_filter(filter_options)])

    # ============ Deployment ============

    async def deploy_contract(
        self,
        abi: list[dict[str, Any]],
        bytecode: str,
        sender: str,
        gas: int,
        constructor_args: Optional[list] = None,
    ) -> DeployedContract:
        """
        Deploy a contract and wait until the creation transaction is mined.

        Sends through the local account when `sender` is its address,
        otherwise asks the node to sign with `eth_sendTransaction`.

        Args:
            abi: Contract ABI
            bytecode: Creation bytecode (hex)
            sender: Address of the deploying account
            gas: Gas limit for the deployment
            constructor_args: Constructor arguments (default: none)

        Returns:
            DeployedContract whose address is the receipt's contractAddress

        Raises:
            ContractDeploymentError: If the deployment reverted or left no code
            TimeoutError: If no receipt appears within deploy_timeout
        """
        data = build_deploy_data(abi, bytecode, constructor_args)

        if self.account is not None and sender.lower() == self.account.address.lower():
            tx_hash = await self._send_signed_creation(self.account, data, gas)
        else:
            tx = {"from": sender, "data": data, "gas": to_hex_quantity(gas)}
            tx_hash = await self._rpc.request("eth_sendTransaction", [tx])
        logger.info("Deployment submitted: %s", tx_hash)

        receipt = await self._wait_for_receipt(tx_hash)

        if receipt.get("status") == "0x0":
            raise ContractDeploymentError(
                f"Contract deployment reverted (tx {tx_hash})", receipt=receipt
            )
        address = receipt.get("contractAddress")
        if not address:
            raise ContractDeploymentError(
                f"Receipt has no contractAddress (tx {tx_hash})", receipt=receipt
            )
        code = await self.get_code(address)
        if not code or code == "0x":
            raise ContractDeploymentError(
                f"The contract code couldn't be stored at {address}", receipt=receipt
            )

        logger.info("Contract deployed at %s", address)
        return DeployedContract(
            address=address,
            abi=abi,
            transaction_hash=tx_hash,
            receipt=receipt,
        )

    async def _send_signed_creation(self, account: LocalAccount, data: str, gas: int) -> str:
        nonce, gas_price, chain_id = await asyncio.gather(
            self.get_transaction_count(account.address, "pending"),
            self.fetch_gas_price(),
            self._rpc.request("eth_chainId"),
        )
        tx = {
            "data": data,
            "value": 0,
            "nonce": to_int(nonce),
            "gas": gas,
            "gasPrice": to_int(gas_price),
            "chainId": to_int(chain_id),
        }
        raw_tx = sign_transaction(account, tx)
        return await self._rpc.request("eth_sendRawTransaction", [raw_tx])

    async def _wait_for_receipt(self, tx_hash: str) -> dict:
        start = time.monotonic()
        while True:
            receipt = await self.fetch_transaction_receipt(tx_hash)
            if receipt is not None:
                return receipt
            if time.monotonic() - start >= self.deploy_timeout:
                raise TimeoutError(
                    f"Transaction {tx_hash} not mined within {self.deploy_timeout}s"
                )
            await asyncio.sleep(self.poll_interval)
