"""Unit tests for local account loading and signing."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from eth_account import Account

from web3tools.accounts import get_account, load_private_key, sign_transaction

PRIVATE_KEY = "0x" + "11" * 32


class TestLoadPrivateKey:
    """Tests for load_private_key."""

    def test_from_environment(self, tmp_path: Path) -> None:
        with patch.dict(os.environ, {"PRIVATE_KEY": PRIVATE_KEY}):
            assert load_private_key(tmp_path / ".env") == PRIVATE_KEY

    def test_adds_prefix(self, tmp_path: Path) -> None:
        with patch.dict(os.environ, {"PRIVATE_KEY": "11" * 32}):
            assert load_private_key(tmp_path / ".env") == PRIVATE_KEY

    def test_from_env_file(self, tmp_path: Path) -> None:
        env_path = tmp_path / ".env"
        env_path.write_text(f"PRIVATE_KEY={PRIVATE_KEY}\n", encoding="utf-8")
        with patch.dict(os.environ, {}, clear=True):
            assert load_private_key(env_path) == PRIVATE_KEY

    def test_missing(self, tmp_path: Path) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="PRIVATE_KEY not found"):
                load_private_key(tmp_path / ".env")


class TestSigning:
    def test_get_account(self) -> None:
        assert get_account(PRIVATE_KEY).address == Account.from_key(PRIVATE_KEY).address

    def test_sign_creation_transaction(self) -> None:
        account = get_account(PRIVATE_KEY)
        tx = {"data": "0x6080", "value": 0, "nonce": 0, "gas": 100_000, "gasPrice": 10**9, "chainId": 1337}
        raw_tx = sign_transaction(account, tx)
        assert raw_tx.startswith("0x")
        assert not raw_tx.startswith("0x0x")
        assert Account.recover_transaction(raw_tx) == account.address
