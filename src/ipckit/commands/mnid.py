"""
MNID commands - encode, decode and check chain-scoped addresses.

These work offline; no network configuration is needed.
"""

from __future__ import annotations

import click

from .. import mnid as codec
from ..errors import IpcError
from .common import echo_field, fail


@click.group()
def mnid() -> None:
    """Encode and decode MNID addresses."""


@mnid.command()
@click.argument("address")
@click.option("--chain-id", "-c", required=True, help="Chain id as hex (e.g. 0x04)")
def encode(address: str, chain_id: str) -> None:
    """Encode ADDRESS for the network CHAIN_ID."""
    try:
        click.echo(codec.encode(address, chain_id))
    except ValueError as exc:
        fail(str(exc))


@mnid.command()
@click.argument("value")
def decode(value: str) -> None:
    """Decode an MNID into its chain id and address."""
    try:
        decoded = codec.decode(value)
    except IpcError as exc:
        fail(str(exc), exc.exit_code)
    echo_field("Chain id", decoded.chain_id_hex)
    echo_field("Address", decoded.address.checksum)


@mnid.command()
@click.argument("value")
def check(value: str) -> None:
    """Exit 0 if VALUE looks like an MNID, 1 otherwise (checksum not verified)."""
    if codec.is_valid_mnid(value):
        click.secho(f"{value} is a valid MNID", fg="green")
        return
    click.secho(f"{value} is not a valid MNID", fg="red")
    raise SystemExit(1)
