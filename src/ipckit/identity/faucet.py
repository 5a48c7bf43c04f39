"""
Faucet client.

A network's faucet is an HTTP URL template with a literal ``$ADDRESS``
placeholder and a configured verb.  A faucet that answers with anything
but ``{"status": "OK", "tx": ...}`` did not send a transaction; that is
reported as the zero hash so the caller's receipt wait is a no-op.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..errors import SchemaError, TransportError
from ..models import Address, Hash, NetworkEndpoint

logger = logging.getLogger("ipckit.identity.faucet")

PLACEHOLDER = "$ADDRESS"


class FaucetClient:
    def __init__(self, http_client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0) -> None:
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

    async def fund(self, endpoint: NetworkEndpoint, address: Address) -> Hash:
        """
        Request funds for ``address``.

        Returns:
            The faucet transaction hash, or the zero hash when the network
            has no faucet or the faucet declined

        Raises:
            TransportError: HTTP failure
            SchemaError: Response body is not a JSON object
        """
        if not endpoint.has_faucet:
            logger.info(f"{endpoint.name}: no faucet configured, skipping funding")
            return Hash.zero()

        url = endpoint.faucet_url_template.replace(PLACEHOLDER, address.checksum)
        try:
            response = await self._client().request(endpoint.faucet_http_method, url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(f"Faucet request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise SchemaError("Faucet response is not JSON") from exc
        if not isinstance(body, dict):
            raise SchemaError(f"Faucet response is not an object: {body!r}")

        if body.get("status") == "OK" and body.get("tx"):
            tx_hash = Hash.from_hex(body["tx"])
            logger.info(f"{endpoint.name}: faucet funded {address} in {tx_hash}")
            return tx_hash

        logger.info(f"{endpoint.name}: faucet declined {address} (status={body.get('status')!r})")
        return Hash.zero()
