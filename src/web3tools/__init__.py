"""
web3tools - Async convenience facade over an Ethereum node.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""

__version__ = "1.0.0"

__all__ = [
    # Facade
    "Web3Tools",
    # Transport
    "RPCClient",
    "RPCError",
    "WebSocketRPCClient",
    "make_rpc_client",
    # Contracts
    "ContractDeploymentError",
    "DeployedContract",
    "build_deploy_data",
    "load_abi",
    "load_artifact",
    "load_bytecode",
    # Accounts
    "get_account",
    "load_private_key",
    # Formatters
    "format_block_identifier",
    "format_filter",
    "format_transaction",
    "to_int",
]

from .abi import load_abi, load_artifact, load_bytecode
from .accounts import get_account, load_private_key
from .contract import ContractDeploymentError, DeployedContract, build_deploy_data
from .formatters import format_block_identifier, format_filter, format_transaction, to_int
from .rpc import RPCClient, RPCError, WebSocketRPCClient, make_rpc_client
from .tools import Web3Tools
