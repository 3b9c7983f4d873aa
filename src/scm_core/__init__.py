"""Channel list codec - record layouts, field access and scanning."""
from .protocol import ChannelKind, RecordLayout, layout_for, layout_for_store
from .ids import ProgNr, SlotId, slot_id
from .scanner import ScannedChannel, scan

__all__ = [
    "ChannelKind",
    "RecordLayout",
    "layout_for",
    "layout_for_store",
    "ProgNr",
    "SlotId",
    "slot_id",
    "ScannedChannel",
    "scan",
]
