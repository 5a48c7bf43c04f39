"""
ipckit CLI

Command-line interface for the ipckit identity and transaction toolkit.

Commands:
  networks  - List configured networks
  mnid      - Encode, decode and check MNID addresses
  nonce     - Show an address's pending nonce
  receipt   - Wait for a transaction receipt
  history   - Recent transactions touching an address
  identity  - Create an identity / show a registered profile
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click


# ============ Constants ============

VERSION = "0.3.0"


# ============ Banner ============


def _print_banner() -> None:
    border = click.style("  ◆ ═════════════════════════════ ◆", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()
    click.echo(
        click.style("        I P C K I T", fg="bright_white", bold=True)
        + click.style(f"   v{VERSION}", dim=True)
    )
    click.secho("     ─── identities on chain ───", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="ipckit")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="IPCKIT_NETWORKS",
    default=None,
    help="Network configuration JSON (default: ~/.ipckit/networks.json)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log RPC calls and flow transitions")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool) -> None:
    """ipckit - Ethereum identity and transaction toolkit."""
    ctx.ensure_object(dict)
    ctx.obj["config"] = config_path
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Commands ============

from .commands.mnid import mnid
from .commands.chain import history, networks, nonce, receipt
from .commands.identity import identity

cli.add_command(networks)
cli.add_command(mnid)
cli.add_command(nonce)
cli.add_command(receipt)
cli.add_command(history)
cli.add_command(identity)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
