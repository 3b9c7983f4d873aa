"""Tab-separated snapshot files for editing the channel order by hand.

Row order is the new channel order. Only the Source and RecordIndex columns
are read back; Number and Name are there for the person editing the file.
"""
from __future__ import annotations

import csv
from pathlib import Path
from typing import Sequence
from warnings import warn

import pandas as pd

from scm_core.const import SKIPPED_ROW_NOTE
from scm_core.errors import NotFound, SnapshotRowWarning, UnknownStore
from scm_core.ids import SlotId, slot_id

from .engine import SnapshotRow

SNAPSHOT_COLUMNS = ["Number", "Name", "Source", "RecordIndex"]
SNAPSHOT_ENCODING = "utf-8"

# Names are written verbatim. The quote character is a control code scrubbed
# from names, so no field is ever quoted or escaped.
QUOTE_CHAR = "\x1f"
_NAME_UNSAFE = str.maketrans({"\t": " ", "\r": " ", "\n": " ", QUOTE_CHAR: " "})


def write_snapshot(path: Path, rows: Sequence[SnapshotRow]) -> None:
    df = pd.DataFrame(
        [
            {
                "Number": int(r.prog_nr),
                "Name": r.name.translate(_NAME_UNSAFE),
                "Source": r.slot.store,
                "RecordIndex": int(r.slot.index),
            }
            for r in rows
        ],
        columns=SNAPSHOT_COLUMNS,
    )
    df.to_csv(
        path,
        sep="\t",
        index=False,
        encoding=SNAPSHOT_ENCODING,
        lineterminator="\n",
        quoting=csv.QUOTE_NONE,
        quotechar=QUOTE_CHAR,
    )


def parse_row(line: str, line_no: int) -> SlotId | None:
    """Slot identity of one data row, or None (with a warning) if malformed."""
    parts = line.split("\t")
    if len(parts) < 4:
        warn(f"Skipping invalid line {line_no}; {SKIPPED_ROW_NOTE}", SnapshotRowWarning, stacklevel=2)
        return None

    store = parts[2].strip()
    try:
        return slot_id(store, int(parts[3].strip()))
    except UnknownStore:
        warn(f"Unknown source {store!r} on line {line_no}; {SKIPPED_ROW_NOTE}", SnapshotRowWarning, stacklevel=2)
    except ValueError:
        warn(f"Invalid record index on line {line_no}; {SKIPPED_ROW_NOTE}", SnapshotRowWarning, stacklevel=2)
    return None


def read_snapshot(path: Path) -> list[SlotId]:
    """Slot identities in file order. Line 1 is the header and is always skipped."""
    path = Path(path)
    if not path.is_file():
        raise NotFound(str(path))

    slots: list[SlotId] = []
    # utf-8-sig: files saved by some editors start with a BOM.
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        for line_no, line in enumerate(f, start=1):
            if line_no == 1:
                continue
            slot = parse_row(line.rstrip("\r\n"), line_no)
            if slot is not None:
                slots.append(slot)
    return slots
