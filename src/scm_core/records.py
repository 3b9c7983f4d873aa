"""Field access for fixed-size channel records.

Every write that changes record bytes refreshes the record's checksum in the
same call, so a record is never left with a stale checksum.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass

from .protocol import ActivityRule, RecordLayout

# Program number field, little-endian, by width
PROG_NR_FMT = {1: "<B", 2: "<H"}

NAME_ENCODING = "utf-16-be"


@dataclass(frozen=True)
class ChannelFlags:
    encrypted: bool = False
    locked: bool = False
    hidden: bool = False


def _record_start(buffer: bytes | bytearray, layout: RecordLayout, index: int) -> int:
    start = index * layout.record_size
    if index < 0 or start + layout.record_size > len(buffer):
        raise IndexError(f"Record {index} out of range for {len(buffer)} byte store")
    return start


def read_prog_nr(buffer: bytes | bytearray, layout: RecordLayout, index: int) -> int:
    start = _record_start(buffer, layout, index)
    (value,) = struct.unpack_from(PROG_NR_FMT[layout.prog_nr_width], buffer, start + layout.prog_nr_offset)
    return int(value)


def write_prog_nr(buffer: bytearray, layout: RecordLayout, index: int, value: int) -> None:
    """Store a program number and refresh the checksum."""
    start = _record_start(buffer, layout, index)
    limit = 1 << (8 * layout.prog_nr_width)
    if not 0 <= value < limit:
        raise ValueError(f"Program number {value} does not fit in {layout.prog_nr_width} byte(s)")
    struct.pack_into(PROG_NR_FMT[layout.prog_nr_width], buffer, start + layout.prog_nr_offset, value)
    checksum_recompute(buffer, layout, index)


def read_name(buffer: bytes | bytearray, layout: RecordLayout, index: int) -> str:
    """Decode the fixed-width UTF-16-BE name and strip the NUL padding."""
    start = _record_start(buffer, layout, index) + layout.name_offset
    raw = bytes(buffer[start:start + layout.name_length])
    return raw.decode(NAME_ENCODING, errors="replace").rstrip("\x00")


def write_name(buffer: bytearray, layout: RecordLayout, index: int, text: str) -> None:
    """Encode a name into the fixed-width field, truncating and NUL padding as needed."""
    start = _record_start(buffer, layout, index) + layout.name_offset
    raw = text.encode(NAME_ENCODING)[:layout.name_length]
    # Do not leave half a surrogate pair at the cut.
    if len(raw) >= 2 and 0xD8 <= raw[-2] <= 0xDB:
        raw = raw[:-2]
    buffer[start:start + layout.name_length] = raw.ljust(layout.name_length, b"\x00")
    checksum_recompute(buffer, layout, index)


def is_active(buffer: bytes | bytearray, layout: RecordLayout, index: int) -> bool:
    start = _record_start(buffer, layout, index)
    if layout.activity_rule is ActivityRule.NONE:
        return True
    bit = buffer[start + layout.activity_offset] & 0x01
    if layout.activity_rule is ActivityRule.DELETED_BIT:
        return bit == 0
    return bit == 1


def set_active(buffer: bytearray, layout: RecordLayout, index: int, active: bool) -> None:
    start = _record_start(buffer, layout, index)
    if layout.activity_rule is ActivityRule.NONE:
        return
    pos = start + layout.activity_offset
    set_bit = active if layout.activity_rule is ActivityRule.IN_USE_BIT else not active
    if set_bit:
        buffer[pos] |= 0x01
    else:
        buffer[pos] &= 0xFE
    checksum_recompute(buffer, layout, index)


def compute_checksum(buffer: bytes | bytearray, layout: RecordLayout, index: int) -> int:
    """8-bit wrapping sum of every record byte before the checksum byte."""
    start = _record_start(buffer, layout, index)
    return sum(buffer[start:start + layout.checksum_offset]) & 0xFF


def read_checksum(buffer: bytes | bytearray, layout: RecordLayout, index: int) -> int:
    return buffer[_record_start(buffer, layout, index) + layout.checksum_offset]


def checksum_recompute(buffer: bytearray, layout: RecordLayout, index: int) -> None:
    start = _record_start(buffer, layout, index)
    buffer[start + layout.checksum_offset] = compute_checksum(buffer, layout, index)


def checksum_ok(buffer: bytes | bytearray, layout: RecordLayout, index: int) -> bool:
    return read_checksum(buffer, layout, index) == compute_checksum(buffer, layout, index)


def read_flags(buffer: bytes | bytearray, layout: RecordLayout, index: int) -> ChannelFlags:
    start = _record_start(buffer, layout, index)

    def bit0(offset: int | None) -> bool:
        return offset is not None and bool(buffer[start + offset] & 0x01)

    return ChannelFlags(
        encrypted=bit0(layout.encrypted_offset),
        locked=bit0(layout.locked_offset),
        hidden=layout.hidden_offset is not None and buffer[start + layout.hidden_offset] != 0,
    )
