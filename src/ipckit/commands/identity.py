"""
Identity commands.

- create:  New key → faucet → identity contract → profile → registry
- profile: Look up the profile registered for an identity address
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Union

import click

from ..chain.client import ChainClient
from ..config import Settings
from ..identity.faucet import FaucetClient
from ..identity.flow import FlowProgress, FlowState, IdentityFlowResult, IdentityOrchestrator
from ..identity.registry import IdentityRegistry
from ..keys import KeystoreAccountManager
from ..models import Address
from ..storage import IpfsHttpStore, LocalDirStore
from .common import echo_field, fail, load_settings, network_option, resolve_network, run

Store = Union[IpfsHttpStore, LocalDirStore]


def _store(settings: Settings, store_dir: Optional[Path]) -> Store:
    if store_dir is not None:
        return LocalDirStore(store_dir)
    if settings.content_store_url:
        return IpfsHttpStore(settings.content_store_url)
    fail("No content store: set content_store.url in the network config or pass --store-dir")


async def _close(store: Store) -> None:
    if isinstance(store, IpfsHttpStore):
        await store.close()


@click.group()
def identity() -> None:
    """Create identities and read their profiles."""


def _print_progress(progress: FlowProgress) -> None:
    if not progress.active:
        return
    label = progress.state.value.replace("_", " ")
    click.echo(click.style("  → ", fg="cyan") + label)


@identity.command()
@network_option
@click.option("--name", required=True, help="Display name for the profile")
@click.option(
    "--image",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Avatar image to publish with the profile",
)
@click.option(
    "--keys-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Keystore directory (default: ~/.ipckit/keystore)",
)
@click.option(
    "--store-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Store content in a local directory instead of IPFS",
)
@click.pass_context
def create(
    ctx: click.Context,
    network: Optional[str],
    name: str,
    image: Optional[Path],
    keys_dir: Optional[Path],
    store_dir: Optional[Path],
) -> None:
    """Create an account and a registered on-chain identity for it."""
    settings = load_settings(ctx)
    endpoint = resolve_network(settings, network)
    store = _store(settings, store_dir)
    image_bytes = image.read_bytes() if image is not None else None

    click.echo(f"=== Creating identity on {endpoint.name} ===")
    click.echo("")

    async def _create() -> IdentityFlowResult:
        faucet = FaucetClient()
        try:
            async with ChainClient(settings=settings) as chain:
                orchestrator = IdentityOrchestrator(
                    chain,
                    KeystoreAccountManager(keys_dir),
                    faucet,
                    store,
                    progress=_print_progress,
                )
                return await orchestrator.run(endpoint, name, image=image_bytes)
        finally:
            await faucet.close()
            await _close(store)

    result = run(_create())
    click.echo("")
    if result.state is not FlowState.DONE:
        error: Any = result.error
        fail(f"Identity flow failed: {error}", getattr(error, "exit_code", 1))

    record = result.identity
    click.secho("Identity created.", fg="green")
    echo_field("Account", record.sender)
    echo_field("Identity", record.identity)
    echo_field("MNID", record.mnid)
    echo_field("Profile", record.profile_hash)
    echo_field("Registration tx", record.registration_tx)


@identity.command()
@click.argument("address")
@network_option
@click.option(
    "--store-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Read content from a local directory instead of IPFS",
)
@click.pass_context
def profile(ctx: click.Context, address: str, network: Optional[str], store_dir: Optional[Path]) -> None:
    """Show the profile registered for identity ADDRESS."""
    settings = load_settings(ctx)
    endpoint = resolve_network(settings, network)
    try:
        subject = Address.from_hex(address)
    except ValueError as exc:
        fail(f"Invalid address {address!r}: {exc}")
    store = _store(settings, store_dir)

    async def _lookup() -> dict[str, Any]:
        try:
            async with ChainClient(settings=settings) as chain:
                return await IdentityRegistry(chain, store).get_profile(endpoint, subject)
        finally:
            await _close(store)

    document = run(_lookup())
    if not document:
        click.echo(f"No profile registered for {subject}.")
        return
    click.echo(json.dumps(document, indent=2, ensure_ascii=False))
