"""Renumbering commands over the store buffers of one container.

All functions take a mapping of store name -> bytearray, mutate the buffers
in place and report which stores they changed. Buffers of unchanged stores
are never written to, so callers can persist exactly the reported set.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping
from warnings import warn

from scm_core.const import SKIPPED_ROW_NOTE
from scm_core.errors import ChannelNotFound, SnapshotRowWarning
from scm_core.ids import ProgNr, SlotId
from scm_core.protocol import LIST_ORDER, RENUMBER_ORDER, STORE_LABELS, layout_for_store
from scm_core.records import ChannelFlags, read_flags, write_prog_nr
from scm_core.scanner import find_checksum_errors, record_count, scan

StoreBuffers = Mapping[str, bytearray]


@dataclass
class MoveResult:
    slot: SlotId | None = None
    name: str = ""
    changed: int = 0
    modified: set[str] = field(default_factory=set)


@dataclass
class CompactResult:
    total: int = 0
    changed: dict[str, int] = field(default_factory=dict)
    modified: set[str] = field(default_factory=set)


@dataclass
class ImportResult:
    updated: int = 0
    skipped: int = 0
    unmatched: list[SlotId] = field(default_factory=list)
    modified: set[str] = field(default_factory=set)


@dataclass(frozen=True)
class SnapshotRow:
    prog_nr: ProgNr
    name: str
    slot: SlotId


@dataclass(frozen=True)
class ListedChannel:
    prog_nr: int
    name: str
    index: int
    flags: ChannelFlags


@dataclass
class StoreListing:
    store: str
    label: str
    channels: list[ListedChannel]


def _present(stores: StoreBuffers, order: Iterable[str]) -> list[str]:
    return [s for s in order if s in stores]


def _require_prog_nr(value: int, what: str) -> None:
    if value < 1:
        raise ValueError(f"{what} must be >= 1, got {value}")


def _check_sizes(stores: StoreBuffers) -> list[str]:
    """Renumberable stores present, after checking every one of them is well sized."""
    present = _present(stores, RENUMBER_ORDER)
    for store in present:
        record_count(stores[store], layout_for_store(store), store)
    return present


def _apply(stores: StoreBuffers, store: str, plan: list[tuple[int, int]]) -> int:
    """Write planned (index, prog_nr) pairs. Each write refreshes the record checksum."""
    layout = layout_for_store(store)
    buf = stores[store]
    # All values are range checked before the first write.
    limit = 1 << (8 * layout.prog_nr_width)
    for index, value in plan:
        if not 0 <= value < limit:
            raise ValueError(f"{store}#{index}: program number {value} out of range")
    for index, value in plan:
        write_prog_nr(buf, layout, index, value)
    return len(plan)


def move_channel(stores: StoreBuffers, from_nr: int, to_nr: int) -> MoveResult:
    """Move channel ``from_nr`` to ``to_nr``, shifting the channels in between by one.

    The first renumberable store (satellite, cable, air) holding ``from_nr``
    is edited. Within it every other active channel numbered in
    ``[min(from, to), max(from, to)]`` moves one step toward the vacated
    number; channels outside that interval are left alone.
    """
    if from_nr == to_nr:
        return MoveResult()
    _require_prog_nr(from_nr, "Source channel")
    _require_prog_nr(to_nr, "Target position")

    for store in _check_sizes(stores):
        layout = layout_for_store(store)
        channels = scan(stores[store], layout, store)
        source = next((ch for ch in channels if ch.prog_nr == from_nr), None)
        if source is None:
            continue

        lo, hi = min(from_nr, to_nr), max(from_nr, to_nr)
        step = 1 if from_nr > to_nr else -1
        plan: list[tuple[int, int]] = []
        for ch in channels:
            if ch.index == source.index:
                plan.append((ch.index, to_nr))
            elif lo <= ch.prog_nr <= hi:
                plan.append((ch.index, ch.prog_nr + step))

        changed = _apply(stores, store, plan)
        return MoveResult(
            slot=SlotId(store, source.index),
            name=source.name,
            changed=changed,
            modified={store} if changed else set(),
        )

    raise ChannelNotFound(from_nr)


def compact_channels(stores: StoreBuffers, start_from: int = 1) -> CompactResult:
    """Renumber channels numbered >= ``start_from`` sequentially from ``start_from``.

    Each store is compacted on its own. Channels below ``start_from`` keep
    their numbers. ``total`` counts every active channel seen.
    """
    _require_prog_nr(start_from, "Start position")
    result = CompactResult()

    for store in _check_sizes(stores):
        layout = layout_for_store(store)
        channels = scan(stores[store], layout, store)
        result.total += len(channels)

        # Stable sort: equal numbers stay in index order.
        ordered = sorted(channels, key=lambda ch: ch.prog_nr)
        renumber = [ch for ch in ordered if ch.prog_nr >= start_from]

        plan = [
            (ch.index, new_nr)
            for new_nr, ch in enumerate(renumber, start=start_from)
            if ch.prog_nr != new_nr
        ]
        changed = _apply(stores, store, plan)
        if changed:
            result.changed[store] = changed
            result.modified.add(store)

    return result


def export_snapshot(stores: StoreBuffers) -> list[SnapshotRow]:
    """All renumberable channels, ordered by program number across stores."""
    rows: list[SnapshotRow] = []
    for store in _present(stores, RENUMBER_ORDER):
        layout = layout_for_store(store)
        for ch in scan(stores[store], layout, store):
            rows.append(SnapshotRow(ProgNr(ch.prog_nr), ch.name, SlotId(store, ch.index)))
    rows.sort(key=lambda r: r.prog_nr)
    return rows


def import_snapshot(stores: StoreBuffers, slots: Iterable[SlotId]) -> ImportResult:
    """Renumber channels to their 1-based position in ``slots``.

    Only slot identities matter: the new number of a channel is the
    position of its slot among the accepted entries. Channels whose slot is
    not listed keep their number. A slot listed twice takes its last position.
    """
    result = ImportResult()
    present = _check_sizes(stores)
    mapping: dict[SlotId, int] = {}
    next_nr = 1
    for slot in slots:
        if slot.store not in RENUMBER_ORDER:
            warn(
                f"Skipping {slot}: store {slot.store!r} cannot be renumbered; {SKIPPED_ROW_NOTE}",
                SnapshotRowWarning,
                stacklevel=2,
            )
            result.skipped += 1
            continue
        mapping[slot] = next_nr
        next_nr += 1

    seen: set[SlotId] = set()
    for store in present:
        layout = layout_for_store(store)
        plan: list[tuple[int, int]] = []
        for ch in scan(stores[store], layout, store):
            slot = SlotId(store, ch.index)
            new_nr = mapping.get(slot)
            if new_nr is None:
                continue
            seen.add(slot)
            if new_nr != ch.prog_nr:
                plan.append((ch.index, new_nr))

        changed = _apply(stores, store, plan)
        if changed:
            result.updated += changed
            result.modified.add(store)

    result.unmatched = [slot for slot in mapping if slot not in seen]
    return result


def list_channels(stores: StoreBuffers) -> list[StoreListing]:
    """Active channels of every store, each store sorted by program number."""
    listings: list[StoreListing] = []
    for store in _present(stores, LIST_ORDER):
        layout = layout_for_store(store)
        buf = stores[store]
        channels = [
            ListedChannel(ch.prog_nr, ch.name, ch.index, read_flags(buf, layout, ch.index))
            for ch in scan(buf, layout, store)
        ]
        channels.sort(key=lambda ch: ch.prog_nr)
        listings.append(StoreListing(store, STORE_LABELS[store], channels))
    return listings


def check_stores(stores: StoreBuffers) -> dict[str, list[int]]:
    """Indices of active records with a bad checksum, per store."""
    return {
        store: find_checksum_errors(stores[store], layout_for_store(store), store)
        for store in _present(stores, LIST_ORDER)
    }
