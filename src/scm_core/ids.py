"""Channel identity types.

A program number is what the user sees and what every edit rewrites, so it
is never an identity. The slot, (store name, record index), is the only
reference to a physical record that survives renumbering.
"""
from __future__ import annotations

from typing import NamedTuple, NewType

from .protocol import STORE_KINDS
from .errors import UnknownStore

ProgNr = NewType("ProgNr", int)


class SlotId(NamedTuple):
    store: str
    index: int

    def __str__(self) -> str:
        return f"{self.store}#{self.index}"


def slot_id(store: str, index: int) -> SlotId:
    """Build a slot identity, rejecting store names the container cannot hold."""
    if store not in STORE_KINDS:
        raise UnknownStore(store)
    if index < 0:
        raise ValueError(f"Record index must be >= 0, got {index}")
    return SlotId(store, int(index))
