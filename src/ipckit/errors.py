"""
Error taxonomy for ipckit.

Every error carries an ``exit_code`` so the CLI can map failures to a
process status without inspecting messages.  Zero hashes and zero
addresses are *values*, not errors, and never appear here.
"""

from __future__ import annotations

from typing import Any, Optional


class IpcError(RuntimeError):
    exit_code: int = 1


class TransportError(IpcError):
    """Connectivity or HTTP-level failure talking to a node or service."""

    exit_code = 10


class RpcError(IpcError):
    """The node answered with a JSON-RPC error object (or no result)."""

    exit_code = 11

    def __init__(
        self,
        method: str,
        message: str,
        code: Optional[int] = None,
        data: Any = None,
    ) -> None:
        super().__init__(f"{method}: {message}" + (f" (code {code})" if code is not None else ""))
        self.method = method
        self.message = message
        self.code = code
        self.data = data


class SchemaError(IpcError):
    """A result was present but not of the expected shape."""

    exit_code = 12


class MnidError(IpcError):
    exit_code = 20


class ChecksumError(MnidError):
    exit_code = 21


class ConfigurationError(IpcError):
    exit_code = 30


class NetworkNotConfigured(ConfigurationError):
    exit_code = 31


class ContractNotFound(ConfigurationError):
    exit_code = 32


class MethodNotFound(ConfigurationError):
    exit_code = 33


class NonceError(IpcError):
    exit_code = 40


class AccountError(IpcError):
    exit_code = 41


class ReceiptTimeout(IpcError):
    exit_code = 50

    def __init__(self, tx_hash: str, attempts: int) -> None:
        super().__init__(f"Transaction {tx_hash} not mined after {attempts} polls")
        self.tx_hash = tx_hash
        self.attempts = attempts


class FlowCancelled(IpcError):
    exit_code = 51
