"""
Contract deployment helpers.

Builds deployment calldata (bytecode + ABI-encoded constructor args)
and describes the handle returned once the creation transaction is mined.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from eth_abi import encode

from .abi import find_constructor


class ContractDeploymentError(RuntimeError):
    """Creation transaction was mined but produced no contract."""

    def __init__(self, message: str, receipt: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.receipt = receipt


@dataclass(frozen=True)
class DeployedContract:
    """
    Handle for a mined contract deployment.

    Attributes:
        address: Contract address reported by the receipt
        abi: Contract ABI
        transaction_hash: Hash of the creation transaction
        receipt: Receipt as returned by the node
    """
    address: str
    abi: list[dict[str, Any]]
    transaction_hash: str
    receipt: dict[str, Any] = field(repr=False)

    @property
    def block_number(self) -> Optional[str]:
        return self.receipt.get("blockNumber")

    @property
    def gas_used(self) -> Optional[str]:
        return self.receipt.get("gasUsed")


def build_deploy_data(
    abi: list[dict[str, Any]],
    bytecode: str,
    constructor_args: Optional[list] = None,
) -> str:
    """
    Concatenate bytecode and ABI-encoded constructor arguments.

    Raises:
        ValueError: If args are given but the ABI has no constructor,
            or the argument count does not match
    """
    deploy_data = bytecode[2:] if bytecode.startswith("0x") else bytecode

    if constructor_args:
        constructor = find_constructor(abi)
        if constructor is None:
            raise ValueError(
                "Constructor not found in ABI, but constructor_args were provided."
            )

        input_types = [inp["type"] for inp in constructor.get("inputs", [])]
        if len(input_types) != len(constructor_args):
            raise ValueError(
                f"Constructor expects {len(input_types)} args, "
                f"got {len(constructor_args)}"
            )
        deploy_data += encode(input_types, constructor_args).hex()

    return "0x" + deploy_data
