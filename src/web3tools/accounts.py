"""
Local signing account.

A private key, when configured, lets deployments be signed client-side
instead of by a node-managed account. Keys are read from the environment
or from ~/.web3tools/.env as PRIVATE_KEY (hex format).

Dependencies: eth-account (no full web3.py needed)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from eth_account import Account
from eth_account.signers.local import LocalAccount


# Default config directory
WEB3TOOLS_DIR = Path.home() / ".web3tools"
WEB3TOOLS_ENV = WEB3TOOLS_DIR / ".env"


def load_private_key(env_path: Optional[Path] = None) -> str:
    """
    Load private key from .env file or environment.

    Args:
        env_path: Path to .env file (default: ~/.web3tools/.env)

    Returns:
        0x-prefixed hex private key

    Raises:
        ValueError: If PRIVATE_KEY is not set
    """
    env_path = env_path or WEB3TOOLS_ENV

    if env_path.exists():
        load_dotenv(env_path, override=True)

    private_key = os.environ.get("PRIVATE_KEY")
    if not private_key:
        raise ValueError(f"PRIVATE_KEY not found. Set it in the environment or in {env_path}")

    if not private_key.startswith("0x"):
        private_key = "0x" + private_key

    return private_key


def get_account(private_key: Optional[str] = None) -> LocalAccount:
    """
    Get an eth-account LocalAccount from a private key.

    Args:
        private_key: 0x-prefixed hex private key.
                     If None, loads from .env.
    """
    if private_key is None:
        private_key = load_private_key()
    return Account.from_key(private_key)


def sign_transaction(account: LocalAccount, tx: dict[str, Any]) -> str:
    """Sign a fully populated transaction; returns 0x-prefixed raw bytes."""
    signed = account.sign_transaction(tx)
    return "0x" + bytes(signed.raw_transaction).hex()
