"""
web3tools CLI

Command-line access to the Web3Tools facade. Every command opens one
facade against the configured provider, runs a single operation and
prints the node's result as JSON.

Commands:
  block-number    - Latest block number
  gas-price       - Current gas price
  network-id      - Network ID
  accounts        - Node-managed accounts
  balance         - Account balance
  nonce           - Account transaction count
  code            - Contract bytecode
  tx              - Transaction by hash
  receipt         - Transaction receipt
  block           - Block by number, tag or hash
  block-tx-count  - Transactions in a block
  estimate-gas    - Gas estimate for a transaction
  logs            - Past logs for a filter
  deploy          - Deploy a contract from a compiler artifact
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Awaitable, Callable, Optional

import click

from .abi import load_abi, load_bytecode
from .accounts import get_account, load_private_key
from .config import DEFAULT_PROVIDER_URL, DEFAULT_TIMEOUT_MS
from .formatters import to_int
from .tools import Web3Tools


# ============ Constants ============

VERSION = "1.0.0"


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=VERSION, prog_name="web3tools")
@click.option(
    "--provider-url",
    envvar="WEB3TOOLS_PROVIDER_URL",
    default=DEFAULT_PROVIDER_URL,
    show_default=True,
    help="Ethereum node HTTP(S) or WS(S) URL",
)
@click.option(
    "--timeout",
    envvar="WEB3TOOLS_TIMEOUT_MS",
    default=DEFAULT_TIMEOUT_MS,
    type=int,
    show_default=True,
    help="Request timeout in milliseconds",
)
@click.option("--verbose", "-v", is_flag=True, help="Log RPC traffic")
@click.pass_context
def cli(ctx: click.Context, provider_url: str, timeout: int, verbose: bool) -> None:
    """Ethereum node convenience commands."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = {"provider_url": provider_url, "timeout": timeout}


# ============ Helper Functions ============


def _run(
    ctx: click.Context,
    operation: Callable[[Web3Tools], Awaitable[Any]],
    account: Any = None,
) -> None:
    """Run one facade operation and print its result; exit 1 on failure."""

    async def runner() -> Any:
        async with Web3Tools(
            ctx.obj["provider_url"], ctx.obj["timeout"], account=account
        ) as tools:
            return await operation(tools)

    try:
        result = asyncio.run(runner())
    except Exception as exc:
        click.secho(f"ERROR: {exc}", fg="red", err=True)
        sys.exit(1)

    click.echo(json.dumps(result, indent=2, default=str))


def _parse_json_object(value: str, name: str) -> dict[str, Any]:
    try:
        parsed = json.loads(value)
        if not isinstance(parsed, dict):
            raise ValueError(f"{name} must be a JSON object")
    except (json.JSONDecodeError, ValueError) as exc:
        click.secho(f"ERROR: Invalid {name}: {exc}", fg="red", err=True)
        sys.exit(1)
    return parsed


def _block_arg(value: str) -> int | str:
    return int(value) if value.isdigit() else value


# ============ Chain ============


@cli.command("block-number")
@click.pass_context
def block_number(ctx: click.Context) -> None:
    """Show the latest block number."""
    _run(ctx, lambda tools: tools.fetch_latest_block_number())


@cli.command("gas-price")
@click.pass_context
def gas_price(ctx: click.Context) -> None:
    """Show the current gas price (wei)."""
    _run(ctx, lambda tools: tools.fetch_gas_price())


@cli.command("network-id")
@click.pass_context
def network_id(ctx: click.Context) -> None:
    """Show the network ID."""
    _run(ctx, lambda tools: tools.fetch_network_id())


@cli.command()
@click.pass_context
def accounts(ctx: click.Context) -> None:
    """List node-managed accounts."""
    _run(ctx, lambda tools: tools.fetch_user_accounts())


@cli.command()
@click.argument("block_id")
@click.option("--full", is_flag=True, help="Include full transaction objects")
@click.pass_context
def block(ctx: click.Context, block_id: str, full: bool) -> None:
    """Show a block by number, tag or hash."""
    _run(ctx, lambda tools: tools.fetch_block_details(_block_arg(block_id), full))


@cli.command("block-tx-count")
@click.argument("block_id")
@click.pass_context
def block_tx_count(ctx: click.Context, block_id: str) -> None:
    """Show the number of transactions in a block."""
    _run(ctx, lambda tools: tools.fetch_block_transaction_count(_block_arg(block_id)))


# ============ Accounts ============


@cli.command()
@click.argument("address")
@click.option("--block", "block_id", default="latest", help="Block number or tag")
@click.pass_context
def balance(ctx: click.Context, address: str, block_id: str) -> None:
    """Show the balance of ADDRESS (wei)."""
    _run(ctx, lambda tools: tools.get_balance(address, _block_arg(block_id)))


@cli.command()
@click.argument("address")
@click.option("--block", "block_id", default="latest", help="Block number or tag")
@click.pass_context
def nonce(ctx: click.Context, address: str, block_id: str) -> None:
    """Show the transaction count of ADDRESS."""
    _run(ctx, lambda tools: tools.get_transaction_count(address, _block_arg(block_id)))


@cli.command()
@click.argument("address")
@click.pass_context
def code(ctx: click.Context, address: str) -> None:
    """Show the bytecode deployed at ADDRESS."""
    _run(ctx, lambda tools: tools.get_code(address))


# ============ Transactions ============


@cli.command()
@click.argument("tx_hash")
@click.pass_context
def tx(ctx: click.Context, tx_hash: str) -> None:
    """Show a transaction by hash."""
    _run(ctx, lambda tools: tools.get_transaction(tx_hash))


@cli.command()
@click.argument("tx_hash")
@click.pass_context
def receipt(ctx: click.Context, tx_hash: str) -> None:
    """Show a transaction receipt."""
    _run(ctx, lambda tools: tools.fetch_transaction_receipt(tx_hash))


@cli.command("estimate-gas")
@click.option("--tx", "tx_json", required=True, help="Transaction as a JSON object")
@click.pass_context
def estimate_gas(ctx: click.Context, tx_json: str) -> None:
    """Estimate gas for a transaction."""
    transaction = _parse_json_object(tx_json, "transaction")
    _run(ctx, lambda tools: tools.estimate_gas_usage(transaction))


@cli.command()
@click.option("--filter", "filter_json", default="{}", help="Log filter as a JSON object")
@click.pass_context
def logs(ctx: click.Context, filter_json: str) -> None:
    """Show past logs matching a filter."""
    filter_options = _parse_json_object(filter_json, "filter")
    _run(ctx, lambda tools: tools.get_past_logs(filter_options))


# ============ Deployment ============


@cli.command()
@click.argument("artifact", type=click.Path(exists=True, dir_okay=False))
@click.option("--from", "sender", required=True, help="Deploying account address")
@click.option("--gas", required=True, type=int, help="Gas limit")
@click.option("--args", "args_json", default="[]", help="Constructor args as JSON array")
@click.option("--sign-locally", is_flag=True, help="Sign with PRIVATE_KEY instead of the node")
@click.pass_context
def deploy(
    ctx: click.Context,
    artifact: str,
    sender: str,
    gas: int,
    args_json: str,
    sign_locally: bool,
) -> None:
    """Deploy the contract in a compiler ARTIFACT and wait for it to be mined."""
    try:
        args = json.loads(args_json)
        if not isinstance(args, list):
            raise ValueError("Args must be a JSON array")
        abi = load_abi(artifact)
        bytecode = load_bytecode(artifact)
    except (json.JSONDecodeError, ValueError, FileNotFoundError) as exc:
        click.secho(f"ERROR: {exc}", fg="red", err=True)
        sys.exit(1)

    account = None
    if sign_locally:
        try:
            account = get_account(load_private_key())
        except ValueError as exc:
            click.secho(f"ERROR: {exc}", fg="red", err=True)
            sys.exit(1)
        if sender.lower() != account.address.lower():
            click.secho(
                f"ERROR: --from {sender} is not the PRIVATE_KEY address {account.address}",
                fg="red",
                err=True,
            )
            sys.exit(1)

    async def operation(tools: Web3Tools) -> dict[str, Any]:
        deployed = await tools.deploy_contract(abi, bytecode, sender, gas, args or None)
        return {
            "address": deployed.address,
            "transactionHash": deployed.transaction_hash,
            "gasUsed": to_int(deployed.gas_used) if deployed.gas_used else None,
        }

    _run(ctx, operation, account=account)


# ============ Entry Points ============


def main(argv: Optional[list[str]] = None) -> None:
    """web3tools CLI entry point."""
    cli(args=argv)


if __name__ == "__main__":
    main()
