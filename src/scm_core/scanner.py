"""Enumerate the active channels of one store buffer."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .errors import FormatSizeMismatch
from .protocol import RecordLayout
from .records import checksum_ok, is_active, read_name, read_prog_nr


@dataclass(frozen=True)
class ScannedChannel:
    index: int
    prog_nr: int
    name: str


def record_count(buffer: bytes | bytearray, layout: RecordLayout, store: str = "") -> int:
    """Number of records in the buffer. A trailing partial record is a format error."""
    if len(buffer) % layout.record_size:
        raise FormatSizeMismatch(store or "store", len(buffer), layout.record_size)
    return len(buffer) // layout.record_size


def iter_active(buffer: bytes | bytearray, layout: RecordLayout, store: str = "") -> Iterator[int]:
    """Yield indices of active records in buffer order."""
    for i in range(record_count(buffer, layout, store)):
        if read_prog_nr(buffer, layout, i) == 0:
            continue
        if not is_active(buffer, layout, i):
            continue
        yield i


def scan(buffer: bytes | bytearray, layout: RecordLayout, store: str = "") -> list[ScannedChannel]:
    """Active channels in index order (not sorted by program number).

    The size check runs before any record is read.
    """
    return [
        ScannedChannel(index=i, prog_nr=read_prog_nr(buffer, layout, i), name=read_name(buffer, layout, i))
        for i in iter_active(buffer, layout, store)
    ]


def find_checksum_errors(buffer: bytes | bytearray, layout: RecordLayout, store: str = "") -> list[int]:
    return [i for i in iter_active(buffer, layout, store) if not checksum_ok(buffer, layout, i)]
