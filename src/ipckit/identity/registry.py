"""
Profile registry.

Profiles are registered on the uPort registry contract under a fixed
bytes32 key, keyed by (issuer, subject) = (identity, identity).  The
registry holds only the 32-byte sha2-256 digest of the profile document;
the document itself lives in the content store.

Writes go through the identity manager's ``forwardTo`` so the registry sees
the identity contract, not the controlling key, as the issuer.
"""

from __future__ import annotations

import logging
from typing import Any

from ..chain.client import ChainClient
from ..errors import ConfigurationError
from ..keys import Signer
from ..models import Address, Hash, NetworkEndpoint, Transaction
from ..storage import ContentStore, multihash_from_digest, registry_digest
from .profile import parse_profile

logger = logging.getLogger("ipckit.identity.registry")

REGISTRATION_IDENTIFIER = "uPortProfileIPFS1220"
IDENTITY_MANAGER = "MetaIdentityManager"
REGISTRY = "UportRegistry"


def registration_key() -> bytes:
    """The registry key as a right-padded bytes32."""
    return REGISTRATION_IDENTIFIER.encode("utf-8").ljust(32, b"\x00")


def _require(address: Any, what: str, endpoint: NetworkEndpoint) -> Address:
    if address is None:
        raise ConfigurationError(f"No {what} address configured for network {endpoint.name}")
    return address


class IdentityRegistry:
    def __init__(self, chain: ChainClient, store: ContentStore) -> None:
        self.chain = chain
        self.store = store

    def build_registration(
        self,
        endpoint: NetworkEndpoint,
        sender: Address,
        identity: Address,
        content_hash: str,
    ) -> Transaction:
        """
        Build ``forwardTo(sender, identity, registry, 0, set(key, identity, digest))``.

        Args:
            endpoint: Target network (must configure both contract addresses)
            sender: Controlling key of the identity
            identity: Identity contract address
            content_hash: Base58 sha2-256 multihash of the stored profile

        Raises:
            ConfigurationError: Network lacks the identity manager or registry
            ValueError: ``content_hash`` is not a sha2-256 multihash
        """
        manager_address = _require(endpoint.identity_manager(), "identity manager", endpoint)
        registry_address = _require(endpoint.registry(), "registry", endpoint)

        registry = self.chain.builder.resolve(REGISTRY)
        payload = registry.encode_call(
            "set", [registration_key(), identity, registry_digest(content_hash)]
        )
        return self.chain.builder.build_call(
            IDENTITY_MANAGER,
            "forwardTo",
            [sender, identity, registry_address, 0, payload],
            sender,
            manager_address,
        )

    async def register(
        self,
        endpoint: NetworkEndpoint,
        account: Signer,
        identity: Address,
        content_hash: str,
    ) -> Hash:
        tx = self.build_registration(endpoint, account.address, identity, content_hash)
        tx_hash = await self.chain.broadcaster.send_raw_transaction(endpoint, account, tx)
        logger.info(f"{endpoint.name}: registering {content_hash} for {identity} in {tx_hash}")
        return tx_hash

    async def get_digest(self, endpoint: NetworkEndpoint, identity: Address) -> bytes:
        """The raw bytes32 stored for ``identity``; all zeros when unregistered."""
        registry_address = _require(endpoint.registry(), "registry", endpoint)
        value = await self.chain.call_contract(
            endpoint,
            identity,
            REGISTRY,
            "get",
            [registration_key(), identity, identity],
            registry_address,
        )
        return value or bytes(32)

    async def get_profile(self, endpoint: NetworkEndpoint, identity: Address) -> dict[str, Any]:
        """
        Look up and fetch the profile registered for ``identity``.

        Returns:
            The profile document, or ``{}`` when nothing is registered
        """
        digest = await self.get_digest(endpoint, identity)
        if not any(digest):
            logger.info(f"{endpoint.name}: no profile registered for {identity}")
            return {}
        content_hash = multihash_from_digest("0x" + digest.hex())
        return parse_profile(await self.store.get(content_hash))
