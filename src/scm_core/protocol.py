"""Channel list store formats.

Single source of truth for the on-disk record layouts of the store files
inside a channel list container. Keep this file stable: every reader and
writer in the project derives its offsets from here.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import UnknownStore


class ChannelKind(Enum):
    CABLE_DIGITAL = "cable-digital"
    AIR_DIGITAL = "air-digital"
    SATELLITE = "satellite"
    CABLE_ANALOG = "cable-analog"
    AIR_ANALOG = "air-analog"


class ActivityRule(Enum):
    NONE = "none"
    DELETED_BIT = "deleted-bit"  # inactive when bit 0 is set
    IN_USE_BIT = "in-use-bit"    # inactive when bit 0 is clear


@dataclass(frozen=True)
class RecordLayout:
    record_size: int
    prog_nr_offset: int
    prog_nr_width: int
    name_offset: int
    name_length: int
    checksum_offset: int
    activity_rule: ActivityRule = ActivityRule.NONE
    activity_offset: int | None = None
    # Attribute flags, only read for listings.
    encrypted_offset: int | None = None
    locked_offset: int | None = None
    hidden_offset: int | None = None


# Digital terrestrial and cable: [ProgNr(2) ... Deleted(@8) ... Name(@64, 100) ... Crc(@319)]
DIGITAL_LAYOUT = RecordLayout(
    record_size=320,
    prog_nr_offset=0,
    prog_nr_width=2,
    name_offset=64,
    name_length=100,
    checksum_offset=319,
    activity_rule=ActivityRule.DELETED_BIT,
    activity_offset=8,
    encrypted_offset=24,
    locked_offset=31,
    hidden_offset=25,
)

# Satellite: [ProgNr(2) ... InUse(@7) ... Name(@36, 100) ... Crc(@167)]
SATELLITE_LAYOUT = RecordLayout(
    record_size=168,
    prog_nr_offset=0,
    prog_nr_width=2,
    name_offset=36,
    name_length=100,
    checksum_offset=167,
    activity_rule=ActivityRule.IN_USE_BIT,
    activity_offset=7,
    encrypted_offset=136,
    locked_offset=13,
)

# Analog: [.. InUse(@1) ... ProgNr(@9, 1) ... Name(@20, 10) ... Crc(@63)]
ANALOG_LAYOUT = RecordLayout(
    record_size=64,
    prog_nr_offset=9,
    prog_nr_width=1,
    name_offset=20,
    name_length=10,
    checksum_offset=63,
    activity_rule=ActivityRule.IN_USE_BIT,
    activity_offset=1,
)

_LAYOUTS = {
    ChannelKind.CABLE_DIGITAL: DIGITAL_LAYOUT,
    ChannelKind.AIR_DIGITAL: DIGITAL_LAYOUT,
    ChannelKind.SATELLITE: SATELLITE_LAYOUT,
    ChannelKind.CABLE_ANALOG: ANALOG_LAYOUT,
    ChannelKind.AIR_ANALOG: ANALOG_LAYOUT,
}

# Store file names inside the container
STORE_CABLE_DIGITAL = "map-CableD"
STORE_AIR_DIGITAL = "map-AirD"
STORE_SATELLITE = "map-SateD"
STORE_CABLE_ANALOG = "map-CableA"
STORE_AIR_ANALOG = "map-AirA"

STORE_KINDS = {
    STORE_CABLE_DIGITAL: ChannelKind.CABLE_DIGITAL,
    STORE_AIR_DIGITAL: ChannelKind.AIR_DIGITAL,
    STORE_SATELLITE: ChannelKind.SATELLITE,
    STORE_CABLE_ANALOG: ChannelKind.CABLE_ANALOG,
    STORE_AIR_ANALOG: ChannelKind.AIR_ANALOG,
}

STORE_LABELS = {
    STORE_CABLE_DIGITAL: "Digital Cable",
    STORE_AIR_DIGITAL: "Digital Antenna",
    STORE_SATELLITE: "Satellite",
    STORE_CABLE_ANALOG: "Analog Cable",
    STORE_AIR_ANALOG: "Analog Antenna",
}

# Display order for listings
LIST_ORDER = (
    STORE_CABLE_DIGITAL,
    STORE_AIR_DIGITAL,
    STORE_SATELLITE,
    STORE_CABLE_ANALOG,
    STORE_AIR_ANALOG,
)

# Search and processing priority for renumbering. Analog stores are never renumbered.
RENUMBER_ORDER = (
    STORE_SATELLITE,
    STORE_CABLE_DIGITAL,
    STORE_AIR_DIGITAL,
)


def layout_for(kind: ChannelKind) -> RecordLayout:
    """Return the fixed record layout for a channel source kind."""
    return _LAYOUTS[kind]


def layout_for_store(store: str) -> RecordLayout:
    """Return the record layout for a store file name."""
    kind = STORE_KINDS.get(store)
    if kind is None:
        raise UnknownStore(store)
    return _LAYOUTS[kind]
