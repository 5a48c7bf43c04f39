__all__ = [
    # Models
    "Address",
    "BlockTag",
    "Hash",
    "NetworkEndpoint",
    "NetworkId",
    "Transaction",
    "TransactionReceipt",
    # MNID
    "DecodedMnid",
    "decode_mnid",
    "encode_mnid",
    "is_valid_mnid",
    # Configuration
    "Settings",
    # Chain
    "CancelToken",
    "ChainClient",
    "LogDecoder",
    "NonceManager",
    "ReceiptWaiter",
    "RpcTransport",
    "TransactionBroadcaster",
    "TransactionBuilder",
    "TransactionHistory",
    # Keys
    "KeystoreAccountManager",
    "LocalKeyAccount",
    # Content store
    "IpfsHttpStore",
    "LocalDirStore",
    # Identity
    "FaucetClient",
    "FlowState",
    "IdentityFlowResult",
    "IdentityOrchestrator",
    "IdentityRegistry",
    # Errors
    "ChecksumError",
    "IpcError",
    "RpcError",
    "SchemaError",
    "TransportError",
]

from .chain.client import ChainClient
from .chain.history import TransactionHistory
from .chain.logs import LogDecoder
from .chain.nonce import NonceManager
from .chain.receipts import CancelToken, ReceiptWaiter
from .chain.rpc import RpcTransport
from .chain.tx import TransactionBroadcaster, TransactionBuilder
from .config import Settings
from .errors import ChecksumError, IpcError, RpcError, SchemaError, TransportError
from .identity.faucet import FaucetClient
from .identity.flow import FlowState, IdentityFlowResult, IdentityOrchestrator
from .identity.registry import IdentityRegistry
from .keys import KeystoreAccountManager, LocalKeyAccount
from .mnid import DecodedMnid, is_valid_mnid
from .mnid import decode as decode_mnid
from .mnid import encode as encode_mnid
from .models import (
    Address,
    BlockTag,
    Hash,
    NetworkEndpoint,
    NetworkId,
    Transaction,
    TransactionReceipt,
)
from .storage import IpfsHttpStore, LocalDirStore
