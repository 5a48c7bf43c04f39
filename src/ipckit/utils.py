from __future__ import annotations

import hashlib

from eth_hash.auto import keccak


def keccak256(data: bytes) -> bytes:
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    return keccak(data)


def sha256_digest(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def strip_0x(value: str) -> str:
    return value[2:] if value[:2] in ("0x", "0X") else value


def hex_to_bytes(value: str) -> bytes:
    raw = strip_0x(value)
    if len(raw) % 2:
        raw = "0" + raw
    return bytes.fromhex(raw)


def bytes_to_hex(data: bytes) -> str:
    return "0x" + data.hex()


def to_quantity(value: int) -> str:
    if value < 0:
        raise ValueError(f"Quantity must be non-negative: {value}")
    return hex(value)


def from_quantity(value: str) -> int:
    if not isinstance(value, str) or not value.startswith(("0x", "0X")):
        raise ValueError(f"Not a hex quantity: {value!r}")
    return int(value, 16)


def to_checksum_address(address: str) -> str:
    """Convert an address to EIP-55 checksummed format."""
    addr = strip_0x(address).lower()
    addr_hash = keccak256(addr.encode("ascii")).hex()
    result = "0x"
    for i, c in enumerate(addr):
        if c in "abcdef":
            result += c.upper() if int(addr_hash[i], 16) >= 8 else c
        else:
            result += c
    return result


def int_to_min_bytes(value: int) -> bytes:
    """Big-endian encoding with no leading zero bytes (0 encodes as b"\\x00")."""
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")
