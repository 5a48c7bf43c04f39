"""Shared plumbing for CLI commands: settings, async execution, error exits."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Coroutine, NoReturn, Optional, TypeVar

import click

from ..config import Settings
from ..errors import IpcError
from ..models import NetworkEndpoint

T = TypeVar("T")

network_option = click.option(
    "--network",
    "-n",
    default=None,
    help="Network name or id (default: the configured default_network)",
)


def fail(message: str, exit_code: int = 1) -> NoReturn:
    click.secho(f"ERROR: {message}", fg="red", err=True)
    sys.exit(exit_code)


def load_settings(ctx: click.Context) -> Settings:
    obj = ctx.find_root().obj or {}
    config_path: Optional[Path] = obj.get("config")
    try:
        return Settings.load(config_path)
    except IpcError as exc:
        fail(str(exc), exc.exit_code)


def resolve_network(settings: Settings, selector: Optional[str]) -> NetworkEndpoint:
    try:
        return settings.network(selector)
    except IpcError as exc:
        fail(str(exc), exc.exit_code)


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion; library errors become a red message and exit code."""
    try:
        return asyncio.run(coro)
    except IpcError as exc:
        fail(str(exc), exc.exit_code)


def echo_field(label: str, value: Any, width: int = 18) -> None:
    click.echo(f"  {label + ':':<{width}}{value}")
