"""
ECDSA / secp256k1 key custody for ipckit.

Keys never leave this module as anything but a ``Signer``: an address,
its public key, and the ability to sign a transaction dict into raw
bytes.  ``KeystoreAccountManager`` keeps one encrypted Web3 keystore file
per account in a directory and decrypts it on ``unlock``.

Dependencies: eth-account for keystore + signing, eth-keys for the
uncompressed public key that goes into published profiles.
"""

from __future__ import annotations

import json
import os
import secrets
from pathlib import Path
from typing import Any, Optional, Protocol

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_keys import keys

from .config import IPCKIT_DIR
from .errors import AccountError
from .models import Address

DEFAULT_KEYS_DIR = IPCKIT_DIR / "keystore"


class Signer(Protocol):
    @property
    def address(self) -> Address:
        ...

    @property
    def public_key(self) -> Optional[str]:
        ...

    def sign_transaction(self, tx: dict[str, Any]) -> bytes:
        ...


class AccountManager(Protocol):
    def create_account(self) -> Address:
        ...

    def unlock(self, address: Address) -> Signer:
        ...


def generate_key() -> str:
    """Generate a new secp256k1 private key (0x-prefixed hex)."""
    return "0x" + secrets.token_hex(32)


class LocalKeyAccount:
    """Signer backed by an in-memory eth-account ``LocalAccount``."""

    def __init__(self, account: LocalAccount) -> None:
        self._account = account
        public_key = keys.PrivateKey(bytes(account.key)).public_key.to_hex()
        self._address = Address.from_hex(account.address, public_key=public_key)

    @classmethod
    def from_key(cls, private_key: str) -> "LocalKeyAccount":
        return cls(Account.from_key(private_key))

    @property
    def address(self) -> Address:
        return self._address

    @property
    def public_key(self) -> Optional[str]:
        return self._address.public_key

    def sign_transaction(self, tx: dict[str, Any]) -> bytes:
        signed = self._account.sign_transaction(tx)
        return bytes(signed.raw_transaction)


class KeystoreAccountManager:
    """
    File-backed account manager.

    Args:
        keys_dir: Directory holding ``<address>.json`` keystore files
        password: Keystore password (default: $IPCKIT_KEYSTORE_PASSWORD)
        kdf: Key derivation function passed to eth-account ("scrypt"/"pbkdf2")
        iterations: KDF work factor override (lower it in tests only)
    """

    def __init__(
        self,
        keys_dir: Optional[Path] = None,
        password: Optional[str] = None,
        kdf: Optional[str] = None,
        iterations: Optional[int] = None,
    ) -> None:
        self.keys_dir = keys_dir or DEFAULT_KEYS_DIR
        self._password = password
        self.kdf = kdf
        self.iterations = iterations

    @property
    def password(self) -> str:
        password = self._password or os.environ.get("IPCKIT_KEYSTORE_PASSWORD")
        if not password:
            raise AccountError("Keystore password not set. Set IPCKIT_KEYSTORE_PASSWORD.")
        return password

    def keyfile(self, address: Address) -> Path:
        return self.keys_dir / f"{address.hex[2:]}.json"

    def accounts(self) -> list[Address]:
        if not self.keys_dir.is_dir():
            return []
        return sorted(
            (Address.from_hex(path.stem) for path in self.keys_dir.glob("*.json")),
            key=lambda a: a.value,
        )

    def create_account(self, private_key: Optional[str] = None) -> Address:
        """Create (or import) an account and persist its encrypted keystore."""
        private_key = private_key or generate_key()
        keystore = Account.encrypt(private_key, self.password, kdf=self.kdf, iterations=self.iterations)
        address = Address.from_hex(Account.from_key(private_key).address)

        self.keys_dir.mkdir(parents=True, exist_ok=True)
        target = self.keyfile(address)
        target.write_text(json.dumps(keystore), encoding="utf-8")
        if os.name != "nt":
            target.chmod(0o600)
        return address

    def unlock(self, address: Address) -> LocalKeyAccount:
        """
        Decrypt the keystore for ``address``.

        Raises:
            AccountError: If no keystore exists or the password is wrong
        """
        path = self.keyfile(address)
        if not path.exists():
            raise AccountError(f"Unlock account failed: no keystore for {address}")
        keystore = json.loads(path.read_text(encoding="utf-8"))
        try:
            private_key = Account.decrypt(keystore, self.password)
        except ValueError as exc:
            raise AccountError(f"Unlock account failed for {address}: {exc}") from exc
        return LocalKeyAccount(Account.from_key(private_key))
