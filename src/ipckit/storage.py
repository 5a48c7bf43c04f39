from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol

import base58
import httpx

from .errors import SchemaError, TransportError
from .utils import hex_to_bytes, sha256_digest

logger = logging.getLogger("ipckit.storage")

# multihash header for sha2-256: function code 0x12, digest length 0x20
SHA256_MULTIHASH_PREFIX = bytes([0x12, 0x20])


def multihash_sha256(data: bytes) -> str:
    return base58.b58encode(SHA256_MULTIHASH_PREFIX + sha256_digest(data)).decode("ascii")


def registry_digest(content_hash: str) -> str:
    """Strip the sha2-256 multihash header: the 32-byte digest the registry stores."""
    raw = base58.b58decode(content_hash)
    if len(raw) != 34 or raw[:2] != SHA256_MULTIHASH_PREFIX:
        raise ValueError(f"Not a sha2-256 multihash: {content_hash}")
    return "0x" + raw[2:].hex()


def multihash_from_digest(digest: str) -> str:
    raw = hex_to_bytes(digest)
    if len(raw) != 32:
        raise ValueError(f"Digest must be 32 bytes, got {len(raw)}")
    return base58.b58encode(SHA256_MULTIHASH_PREFIX + raw).decode("ascii")


class ContentStore(Protocol):
    async def put(self, data: bytes) -> str:
        ...

    async def get(self, content_hash: str) -> bytes:
        ...


@dataclass(frozen=True)
class LocalDirStore:
    """Content-addressed files under ``root``, keyed by their sha2-256 multihash."""

    root: Path

    def path_for(self, content_hash: str) -> Path:
        path = (self.root / content_hash).resolve()
        if not path.is_relative_to(self.root.resolve()):
            raise ValueError(f"Path traversal detected: {content_hash}")
        return path

    async def put(self, data: bytes) -> str:
        content_hash = multihash_sha256(data)
        target = self.path_for(content_hash)
        if not target.exists():
            self.root.mkdir(parents=True, exist_ok=True)
            self._atomic_write(target, data)
        return content_hash

    async def get(self, content_hash: str) -> bytes:
        return self.path_for(content_hash).read_bytes()

    def _atomic_write(self, path: Path, data: bytes) -> None:
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            with tmp.open("wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            tmp.replace(path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise


class IpfsHttpStore:
    """
    Content store backed by an IPFS node's HTTP API (``/api/v0``).

    Args:
        api_url: Base URL of the node API, e.g. ``http://127.0.0.1:5001``
        http_client: Shared httpx client (for connection pooling / tests)
    """

    def __init__(
        self,
        api_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self._http_client = http_client
        self._owns_client = http_client is None
        self._timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        return self._http_client

    async def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _post(self, command: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.api_url}/api/v0/{command}"
        try:
            response = await self._client().post(url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(f"IPFS {command} failed: {exc}") from exc
        return response

    async def put(self, data: bytes) -> str:
        response = await self._post("add", params={"pin": "true"}, files={"file": ("blob", data)})
        try:
            content_hash = response.json()["Hash"]
        except (ValueError, KeyError, TypeError) as exc:
            raise SchemaError(f"IPFS add returned no Hash: {response.text[:200]}") from exc
        logger.debug(f"stored {len(data)} bytes as {content_hash}")
        return content_hash

    async def get(self, content_hash: str) -> bytes:
        response = await self._post("cat", params={"arg": content_hash})
        return response.content
