"""
ABI Loader - Loads contract ABIs and bytecode from compiler artifacts.

Understands Foundry (`bytecode.object`) and Truffle/Hardhat (`bytecode`
string) JSON layouts.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Union


@lru_cache(maxsize=16)
def _read_artifact(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Artifact not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_artifact(path: Union[str, Path]) -> dict[str, Any]:
    """
    Load a compiler artifact JSON file.

    Args:
        path: Path to the artifact (e.g., "out/Token.sol/Token.json")

    Returns:
        Parsed artifact dict

    Raises:
        FileNotFoundError: If the artifact file does not exist
    """
    return _read_artifact(Path(path).expanduser().resolve())


def load_abi(path: Union[str, Path]) -> list[dict[str, Any]]:
    """Load the ABI list from an artifact."""
    artifact = load_artifact(path)
    if "abi" not in artifact:
        raise ValueError(f"No ABI in artifact: {path}")
    return artifact["abi"]


def load_bytecode(path: Union[str, Path]) -> str:
    """
    Load creation bytecode from an artifact.

    Returns:
        Hex-encoded bytecode string (0x-prefixed)

    Raises:
        ValueError: If the artifact carries no bytecode
    """
    artifact = load_artifact(path)

    bytecode = artifact.get("bytecode", "")
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object", "")
    if not bytecode or bytecode == "0x":
        raise ValueError(f"No bytecode in artifact: {path}")

    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode
    return bytecode


def find_constructor(abi: list[dict[str, Any]]) -> dict[str, Any] | None:
    """Return the constructor entry of an ABI, if any."""
    for entry in abi:
        if entry.get("type") == "constructor":
            return entry
    return None
