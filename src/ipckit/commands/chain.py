"""
Chain commands - read-only queries against a configured network.

- networks: List configured networks
- nonce:    Pending transaction count for an address
- receipt:  Wait for a transaction receipt
- history:  Scan recent blocks for transactions touching an address
"""

from __future__ import annotations

from typing import Optional

import click

from ..chain.client import ChainClient
from ..chain.receipts import ReceiptWaiter
from ..errors import IpcError
from ..models import Address, Hash, NetworkEndpoint, TransactionInfo, TransactionReceipt
from .common import echo_field, fail, load_settings, network_option, resolve_network, run


def _address(value: str) -> Address:
    try:
        return Address.from_hex(value)
    except ValueError as exc:
        fail(f"Invalid address {value!r}: {exc}")


@click.command()
@click.pass_context
def networks(ctx: click.Context) -> None:
    """List configured networks."""
    settings = load_settings(ctx)
    click.echo(f"Configuration: {settings.source}")
    click.echo("")
    for name, endpoint in settings.networks.items():
        marker = click.style(" (default)", fg="cyan") if name == settings.default_network else ""
        click.echo(click.style(f"  {name}", bold=True) + marker)
        echo_field("Network id", f"{endpoint.network_id:#04x}", width=20)
        echo_field("RPC URL", endpoint.rpc_url, width=20)
        echo_field("Chain id", endpoint.chain_id if endpoint.chain_id is not None else "-", width=20)
        echo_field("Identity manager", endpoint.identity_manager_address or "-", width=20)
        echo_field("Registry", endpoint.registry_address or "-", width=20)
        echo_field("Faucet", "yes" if endpoint.has_faucet else "no", width=20)


@click.command()
@click.argument("address")
@network_option
@click.pass_context
def nonce(ctx: click.Context, address: str, network: Optional[str]) -> None:
    """Show the pending nonce of ADDRESS."""
    settings = load_settings(ctx)
    endpoint = resolve_network(settings, network)
    account = _address(address)

    async def _query() -> int:
        async with ChainClient(settings=settings) as chain:
            return await chain.nonces.refresh(endpoint, account)

    click.echo(run(_query()))


@click.command()
@click.argument("tx_hash")
@network_option
@click.option("--interval", type=float, default=None, help="Seconds between polls")
@click.option("--max-attempts", type=int, default=None, help="Give up after this many polls")
@click.pass_context
def receipt(
    ctx: click.Context,
    tx_hash: str,
    network: Optional[str],
    interval: Optional[float],
    max_attempts: Optional[int],
) -> None:
    """Wait until TX_HASH is mined and print its receipt."""
    settings = load_settings(ctx)
    endpoint = resolve_network(settings, network)
    try:
        target = Hash.from_hex(tx_hash)
    except IpcError as exc:
        fail(str(exc), exc.exit_code)
    if target.is_zero:
        click.echo("Zero hash: nothing to wait for.")
        return

    async def _wait() -> TransactionReceipt:
        async with ChainClient(settings=settings) as chain:
            waiter = ReceiptWaiter(
                chain.rpc,
                poll_interval=interval if interval is not None else settings.receipts.poll_interval,
                max_attempts=max_attempts or settings.receipts.max_attempts,
                timeout=settings.receipts.timeout,
            )
            return await waiter.wait(endpoint, target)

    mined = run(_wait())
    echo_field("Transaction", mined.transaction_hash)
    echo_field("Block", mined.block_number)
    echo_field("Status", mined.status if mined.status is not None else "-")
    if mined.contract_address:
        echo_field("Contract", mined.contract_address)
    echo_field("Logs", len(mined.logs))


def _print_transaction(tx: TransactionInfo) -> None:
    sender = tx.from_address.checksum if tx.from_address else "-"
    recipient = tx.to_address.checksum if tx.to_address else "(create)"
    click.echo(f"  #{tx.block_number}  {tx.hash}  {sender} -> {recipient}  {tx.value} wei")


@click.command()
@click.argument("address")
@network_option
@click.option("--start-block", type=int, default=0, help="First block (default: latest - 100)")
@click.pass_context
def history(ctx: click.Context, address: str, network: Optional[str], start_block: int) -> None:
    """List recent transactions sent from or to ADDRESS."""
    settings = load_settings(ctx)
    endpoint: NetworkEndpoint = resolve_network(settings, network)
    account = _address(address)

    async def _scan() -> list[TransactionInfo]:
        async with ChainClient(settings=settings) as chain:
            return await chain.history.scan(endpoint, account, start_block=start_block)

    found = run(_scan())
    if not found:
        click.echo("No transactions found.")
        return
    for tx in sorted(found, key=lambda t: t.block_number or 0):
        _print_transaction(tx)
