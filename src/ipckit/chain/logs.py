"""
Receipt log decoding.

Addresses show up in logs two ways: as 32-byte words in the log body
(non-indexed event arguments) or as indexed topics.  Both are plain
left-padded ABI words, so decoding is a matter of slicing the last 20
bytes of each word.
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..models import Address, LogEntry
from ..utils import hex_to_bytes

WORD = 32


def decode_words(data: str) -> list[bytes]:
    raw = hex_to_bytes(data) if data else b""
    return [raw[i : i + WORD] for i in range(0, len(raw) - len(raw) % WORD, WORD)]


def word_to_address(word: bytes) -> Address:
    return Address(word[-20:])


def _matches(entry: LogEntry, event: Optional[str]) -> bool:
    if event is None:
        return True
    return bool(entry.topics) and entry.topics[0].lower() == event.lower()


class LogDecoder:
    def addresses_from_data(
        self, logs: Iterable[LogEntry], event: Optional[str] = None
    ) -> list[str]:
        """Every data word of every matching log, decoded as a checksummed address."""
        found: list[str] = []
        for entry in logs:
            if not _matches(entry, event):
                continue
            found.extend(word_to_address(word).checksum for word in decode_words(entry.data))
        return found

    def addresses_from_topics(
        self, logs: Iterable[LogEntry], index: int, event: Optional[str] = None
    ) -> list[str]:
        """The indexed topic at ``index`` of each matching log, as an address."""
        found: list[str] = []
        for entry in logs:
            if not _matches(entry, event) or len(entry.topics) <= index:
                continue
            found.append(word_to_address(hex_to_bytes(entry.topics[index])).checksum)
        return found
