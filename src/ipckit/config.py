"""
Runtime configuration.

Network endpoints are never baked into the package.  They are read once
from a JSON document validated against ``schemas/networks.schema.json``:

1. an explicit path passed to ``Settings.load``
2. ``$IPCKIT_NETWORKS``
3. ``~/.ipckit/networks.json``

``~/.ipckit/.env`` is loaded (without overriding the process environment)
before the lookup so users can keep ``IPCKIT_NETWORKS`` and
``IPCKIT_KEYSTORE_PASSWORD`` there.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import jsonschema
from dotenv import load_dotenv
from jsonschema import FormatChecker

from .errors import ConfigurationError, NetworkNotConfigured
from .models import NetworkEndpoint, NetworkId

IPCKIT_DIR = Path.home() / ".ipckit"
IPCKIT_ENV = IPCKIT_DIR / ".env"
DEFAULT_NETWORKS_PATH = IPCKIT_DIR / "networks.json"
SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "networks.schema.json"

DEFAULT_GAS_LIMIT = 350_000
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_MAX_ATTEMPTS = 120


@dataclass(frozen=True)
class ReceiptSettings:
    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    timeout: Optional[float] = None


@dataclass(frozen=True)
class Settings:
    networks: dict[str, NetworkEndpoint]
    default_network: Optional[str] = None
    default_gas_limit: int = DEFAULT_GAS_LIMIT
    content_store_url: Optional[str] = None
    receipts: ReceiptSettings = field(default_factory=ReceiptSettings)
    source: Optional[Path] = None

    @classmethod
    def load(cls, path: Optional[Path] = None, env_path: Optional[Path] = None) -> "Settings":
        env_path = env_path or IPCKIT_ENV
        if env_path.exists():
            load_dotenv(env_path, override=False)

        if path is None:
            env_value = os.environ.get("IPCKIT_NETWORKS")
            path = Path(env_value).expanduser() if env_value else DEFAULT_NETWORKS_PATH

        if not path.exists():
            raise ConfigurationError(
                f"Network configuration not found: {path}. "
                f"Copy config/networks.example.json there or set IPCKIT_NETWORKS."
            )
        with path.open("r", encoding="utf-8") as f:
            try:
                payload = json.load(f)
            except json.JSONDecodeError as exc:
                raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from exc

        return cls.from_dict(payload, source=path)

    @classmethod
    def from_dict(cls, payload: dict[str, Any], source: Optional[Path] = None) -> "Settings":
        validate_config(payload)

        networks = {
            name: _endpoint(name, entry) for name, entry in payload["networks"].items()
        }
        default_network = payload.get("default_network")
        if default_network is not None and default_network not in networks:
            raise ConfigurationError(f"default_network {default_network!r} is not configured")

        receipts = payload.get("receipts", {})
        store = payload.get("content_store")
        return cls(
            networks=networks,
            default_network=default_network,
            default_gas_limit=payload.get("default_gas_limit", DEFAULT_GAS_LIMIT),
            content_store_url=store["url"] if store else None,
            receipts=ReceiptSettings(
                poll_interval=float(receipts.get("poll_interval", DEFAULT_POLL_INTERVAL)),
                max_attempts=int(receipts.get("max_attempts", DEFAULT_MAX_ATTEMPTS)),
                timeout=receipts.get("timeout"),
            ),
            source=source,
        )

    def network(self, selector: Union[str, int, NetworkId, None] = None) -> NetworkEndpoint:
        """Resolve an endpoint by name or network id (default network if None)."""
        if selector is None:
            if self.default_network is None:
                raise NetworkNotConfigured("No network given and no default_network configured")
            selector = self.default_network

        if isinstance(selector, str):
            if selector in self.networks:
                return self.networks[selector]
            try:
                selector = int(selector, 0)
            except ValueError:
                raise NetworkNotConfigured(f"Unknown network: {selector}") from None

        for endpoint in self.networks.values():
            if endpoint.network_id == int(selector):
                return endpoint
        raise NetworkNotConfigured(f"No endpoint configured for network id {int(selector):#x}")


def _endpoint(name: str, entry: dict[str, Any]) -> NetworkEndpoint:
    network_id = entry["network_id"]
    if isinstance(network_id, str):
        network_id = int(network_id, 16)
    return NetworkEndpoint(
        name=name,
        network_id=network_id,
        rpc_url=entry["rpc_url"],
        identity_manager_address=entry.get("identity_manager_address", ""),
        registry_address=entry.get("registry_address", ""),
        faucet_url_template=entry.get("faucet_url_template", ""),
        faucet_http_method=entry.get("faucet_http_method", "POST").upper(),
        chain_id=entry.get("chain_id"),
    )


def validate_config(payload: Any) -> None:
    with SCHEMA_PATH.open("r", encoding="utf-8") as f:
        schema = json.load(f)
    validator_cls = jsonschema.validators.validator_for(schema)
    validator = validator_cls(schema, format_checker=FormatChecker())
    errors = sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.path])
    if errors:
        formatted = "; ".join(_format_error(err) for err in errors)
        raise ConfigurationError(f"Invalid network configuration: {formatted}")


def _format_error(error: jsonschema.ValidationError) -> str:
    location = "/".join(str(part) for part in error.path) or "<root>"
    return f"{location}: {error.message}"
