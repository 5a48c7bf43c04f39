"""
Identity creation flow.

One ``run`` walks a fresh key through to a registered profile:

    CREATING_ACCOUNT -> UNLOCKING -> FUNDING -> AWAITING_FUNDING_RECEIPT
    -> DEPLOYING_IDENTITY -> AWAITING_DEPLOY_RECEIPT
    -> EXTRACTING_IDENTITY_ADDRESS -> BUILDING_PROFILE -> PUBLISHING_PROFILE
    -> REGISTERING_PROFILE -> AWAITING_REGISTRATION_RECEIPT -> DONE

Steps run strictly in sequence.  The first exception moves the flow to
FAILED and the remaining steps are skipped.  Transactions already
broadcast stay broadcast; nothing is rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from ..chain.client import ChainClient
from ..chain.receipts import CancelToken
from ..errors import ConfigurationError, IpcError, SchemaError
from ..keys import AccountManager, Signer
from ..models import Address, Hash, NetworkEndpoint
from ..storage import ContentStore
from .faucet import FaucetClient
from .profile import build_profile, serialize_profile
from .registry import IDENTITY_MANAGER, IdentityRegistry

logger = logging.getLogger("ipckit.identity.flow")


class FlowState(str, Enum):
    CREATING_ACCOUNT = "creating_account"
    UNLOCKING = "unlocking"
    FUNDING = "funding"
    AWAITING_FUNDING_RECEIPT = "awaiting_funding_receipt"
    DEPLOYING_IDENTITY = "deploying_identity"
    AWAITING_DEPLOY_RECEIPT = "awaiting_deploy_receipt"
    EXTRACTING_IDENTITY_ADDRESS = "extracting_identity_address"
    BUILDING_PROFILE = "building_profile"
    PUBLISHING_PROFILE = "publishing_profile"
    REGISTERING_PROFILE = "registering_profile"
    AWAITING_REGISTRATION_RECEIPT = "awaiting_registration_receipt"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class FlowProgress:
    state: FlowState
    active: bool


ProgressCallback = Callable[[FlowProgress], None]


@dataclass
class IdentityRecord:
    network: str
    sender: Optional[Address] = None
    identity: Optional[Address] = None
    mnid: Optional[str] = None
    public_key: Optional[str] = None
    profile: dict[str, Any] = field(default_factory=dict)
    profile_hash: Optional[str] = None
    image_hash: Optional[str] = None
    funding_tx: Optional[Hash] = None
    deploy_tx: Optional[Hash] = None
    registration_tx: Optional[Hash] = None


@dataclass
class IdentityFlowResult:
    state: FlowState
    identity: IdentityRecord
    error: Optional[BaseException] = None
    history: list[FlowState] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is FlowState.DONE

    def unwrap(self) -> IdentityRecord:
        """Return the record, or re-raise the error that stopped the flow."""
        if self.error is not None:
            raise self.error
        return self.identity


class IdentityOrchestrator:
    """
    Create an account, fund it, deploy its identity contract, and publish
    and register a profile for it.

    Args:
        chain: Shared chain client (one nonce cache per process)
        accounts: Where new keys are created and unlocked
        faucet: Faucet client; networks without a faucet skip funding
        store: Content store for the avatar and the profile document
        progress: Optional callback, called on start, every transition and end
    """

    def __init__(
        self,
        chain: ChainClient,
        accounts: AccountManager,
        faucet: FaucetClient,
        store: ContentStore,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.chain = chain
        self.accounts = accounts
        self.faucet = faucet
        self.store = store
        self.registry = IdentityRegistry(chain, store)
        self.progress = progress

    def _notify(self, state: FlowState, active: bool) -> None:
        if self.progress is None:
            return
        try:
            self.progress(FlowProgress(state, active))
        except Exception as exc:
            logger.warning(f"progress callback failed on {state.value}: {exc}")

    async def run(
        self,
        endpoint: NetworkEndpoint,
        name: str,
        image: Optional[bytes] = None,
        cancel: Optional[CancelToken] = None,
    ) -> IdentityFlowResult:
        cancel = cancel or CancelToken()
        record = IdentityRecord(network=endpoint.name)
        result = IdentityFlowResult(state=FlowState.CREATING_ACCOUNT, identity=record)

        def enter(state: FlowState) -> None:
            cancel.raise_if_cancelled()
            result.state = state
            result.history.append(state)
            logger.info(f"{endpoint.name}: identity flow -> {state.value}")
            self._notify(state, True)

        try:
            await self._run_steps(endpoint, name, image, cancel, record, enter)
        except Exception as exc:
            result.state = FlowState.FAILED
            result.error = exc
            result.history.append(FlowState.FAILED)
            cancel.cancel(f"identity flow failed: {exc}")
            level = logging.WARNING if isinstance(exc, IpcError) else logging.ERROR
            logger.log(level, f"{endpoint.name}: identity flow failed: {exc}")
        else:
            result.state = FlowState.DONE
            result.history.append(FlowState.DONE)
            logger.info(f"{endpoint.name}: identity {record.identity} registered ({record.mnid})")
        finally:
            self._notify(result.state, False)
        return result

    async def _run_steps(
        self,
        endpoint: NetworkEndpoint,
        name: str,
        image: Optional[bytes],
        cancel: CancelToken,
        record: IdentityRecord,
        enter: Callable[[FlowState], None],
    ) -> None:
        enter(FlowState.CREATING_ACCOUNT)
        record.sender = self.accounts.create_account()

        enter(FlowState.UNLOCKING)
        account = self.accounts.unlock(record.sender)
        record.public_key = account.public_key

        enter(FlowState.FUNDING)
        record.funding_tx = await self.faucet.fund(endpoint, record.sender)

        enter(FlowState.AWAITING_FUNDING_RECEIPT)
        await self.chain.waiter.wait(endpoint, record.funding_tx, cancel)

        enter(FlowState.DEPLOYING_IDENTITY)
        record.deploy_tx = await self._deploy_identity(endpoint, account)

        enter(FlowState.AWAITING_DEPLOY_RECEIPT)
        receipt = await self.chain.waiter.wait(endpoint, record.deploy_tx, cancel)

        enter(FlowState.EXTRACTING_IDENTITY_ADDRESS)
        created = self.chain.builder.resolve(IDENTITY_MANAGER).event_topic("LogIdentityCreated")
        found = self.chain.logs.addresses_from_topics(receipt.logs, 1, event=created)
        if not found:
            raise SchemaError(f"No identity address in logs of {record.deploy_tx}")
        record.identity = Address.from_hex(found[0])

        enter(FlowState.BUILDING_PROFILE)
        if image is not None:
            record.image_hash = await self.store.put(image)
        record.profile = build_profile(
            name, record.identity, endpoint, public_key=record.public_key, image_hash=record.image_hash
        )
        record.mnid = record.profile["address"]

        enter(FlowState.PUBLISHING_PROFILE)
        record.profile_hash = await self.store.put(serialize_profile(record.profile))

        enter(FlowState.REGISTERING_PROFILE)
        self.chain.nonces.forget(record.sender)
        record.registration_tx = await self.registry.register(
            endpoint, account, record.identity, record.profile_hash
        )

        enter(FlowState.AWAITING_REGISTRATION_RECEIPT)
        await self.chain.waiter.wait(endpoint, record.registration_tx, cancel)

    async def _deploy_identity(self, endpoint: NetworkEndpoint, account: Signer) -> Hash:
        manager = endpoint.identity_manager()
        if manager is None:
            raise ConfigurationError(f"No identity manager address configured for network {endpoint.name}")
        sender = account.address
        tx = self.chain.builder.build_call(
            IDENTITY_MANAGER, "createIdentity", [sender, sender], sender, manager
        )
        # reloaded from the node under the send lock
        self.chain.nonces.forget(sender)
        return await self.chain.broadcaster.send_raw_transaction(endpoint, account, tx)
