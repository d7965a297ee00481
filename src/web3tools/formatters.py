"""
Input formatters: marshal Python values into JSON-RPC parameters.

Only inputs are touched. Node results are returned to callers unchanged;
`to_int` is offered for callers that want integers out of quantities.
"""

from __future__ import annotations

import string
from typing import Any, Union

BlockIdentifier = Union[int, str]

BLOCK_TAGS = frozenset({"latest", "earliest", "pending", "safe", "finalized"})

TRANSACTION_QUANTITY_FIELDS = (
    "gas",
    "gasPrice",
    "value",
    "nonce",
    "maxFeePerGas",
    "maxPriorityFeePerGas",
    "chainId",
)


def to_hex_quantity(value: int) -> str:
    """Encode a non-negative integer as a JSON-RPC quantity."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Quantity must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"Quantity must be non-negative: {value}")
    return hex(value)


def is_block_hash(value: Any) -> bool:
    """True for a 0x-prefixed 32-byte hex string."""
    if not isinstance(value, str) or len(value) != 66 or not value.startswith("0x"):
        return False
    return all(c in string.hexdigits for c in value[2:])


def format_block_identifier(block: BlockIdentifier) -> str:
    """
    Normalize a block number, tag or hash for RPC parameters.

    Integers become hex quantities; tags, hashes and hex strings pass through.
    """
    if isinstance(block, int) and not isinstance(block, bool):
        return to_hex_quantity(block)
    if isinstance(block, str):
        if block in BLOCK_TAGS or block.startswith("0x"):
            return block
        if block.isdigit():
            return hex(int(block))
        raise ValueError(f"Invalid block identifier: {block!r}")
    raise TypeError(f"Invalid block identifier type: {type(block).__name__}")


def format_transaction(tx: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of `tx` with integer quantity fields hex-encoded."""
    formatted = dict(tx)
    for key in TRANSACTION_QUANTITY_FIELDS:
        value = formatted.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            formatted[key] = to_hex_quantity(value)
    return formatted


def format_filter(filter_options: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of a log filter with block bounds normalized."""
    formatted = dict(filter_options)
    for key in ("fromBlock", "toBlock"):
        if formatted.get(key) is not None:
            formatted[key] = format_block_identifier(formatted[key])
    return formatted


def to_int(value: Union[int, str]) -> int:
    """Decode a quantity: hex string, decimal string or int."""
    if isinstance(value, int):
        return value
    if value.startswith(("0x", "0X")):
        return int(value, 16)
    return int(value)
