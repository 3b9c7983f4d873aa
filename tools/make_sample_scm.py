"""Generate a synthetic .scm channel list container.

Every store gets a block of active channels, a few unused slots and a few
deleted channels, so all record states show up in listings and edits.
"""
import random
import zipfile
from pathlib import Path

from scm_core.protocol import (
    ANALOG_LAYOUT,
    STORE_AIR_ANALOG,
    STORE_AIR_DIGITAL,
    STORE_CABLE_ANALOG,
    STORE_CABLE_DIGITAL,
    STORE_SATELLITE,
    RecordLayout,
    layout_for_store,
)
from scm_core.records import checksum_recompute, set_active, write_name, write_prog_nr

NAMES = ["News", "Sport", "Movies", "Music", "Kids", "Docs", "Weather", "Shop", "Travel", "Comedy"]

# Non-store member shipped by real containers; must survive a rewrite untouched.
CLONE_INFO = b"CLONEINFO\x00" + bytes(range(54))


def build_store(layout: RecordLayout, prefix: str, first_nr: int, active: int, rng: random.Random) -> bytearray:
    """Records: ``active`` channels, then 2 deleted ones, then 2 unused slots."""
    total = active + 4
    buf = bytearray(layout.record_size * total)
    for i in range(total):
        # Filler bytes so checksums are not trivially zero.
        start = i * layout.record_size
        for off in range(layout.record_size):
            if off not in range(layout.name_offset, layout.name_offset + layout.name_length):
                buf[start + off] = rng.randrange(256)
        buf[start + layout.activity_offset] &= 0xFE
        if layout.hidden_offset is not None:
            buf[start + layout.hidden_offset] = 0
        width = layout.prog_nr_width
        buf[start + layout.prog_nr_offset:start + layout.prog_nr_offset + width] = bytes(width)
        checksum_recompute(buf, layout, i)

    for i in range(active + 2):
        write_name(buf, layout, i, f"{prefix} {rng.choice(NAMES)} {i + 1}")
        write_prog_nr(buf, layout, i, first_nr + i)
        set_active(buf, layout, i, i < active)
    return buf


def generate_container(out: Path, channels: int = 10, seed: int = 1) -> Path:
    rng = random.Random(seed)
    out = Path(out)
    out.parent.mkdir(parents=True, exist_ok=True)

    stores = {
        STORE_CABLE_DIGITAL: ("Cable", 1),
        STORE_AIR_DIGITAL: ("Air", 1),
        STORE_SATELLITE: ("Sat", 1),
        STORE_CABLE_ANALOG: ("CA", 1),
        STORE_AIR_ANALOG: ("AA", 1),
    }

    with zipfile.ZipFile(out, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("CloneInfo", CLONE_INFO)
        for store, (prefix, first_nr) in stores.items():
            layout = layout_for_store(store)
            count = min(channels, 200) if layout is ANALOG_LAYOUT else channels
            zf.writestr(store, bytes(build_store(layout, prefix, first_nr, count, rng)))

    print(f"GENERATED: {out}")
    return out


if __name__ == "__main__":
    import sys

    # Usage:
    #   python tools/make_sample_scm.py OUT.scm [--channels N] [--seed S]

    args = [a for a in sys.argv[1:] if a]

    def pop_option(arg_list: list[str], name: str, default: int) -> tuple[int, list[str]]:
        """Remove ``name VALUE`` from an argv-style list."""
        if name not in arg_list:
            return default, arg_list
        i = arg_list.index(name)
        if i + 1 >= len(arg_list):
            raise SystemExit(f"{name} requires a value")
        return int(arg_list[i + 1]), arg_list[:i] + arg_list[i + 2:]

    channels, args = pop_option(args, "--channels", 10)
    seed, args = pop_option(args, "--seed", 1)

    out = args[0] if len(args) > 0 else "sample.scm"
    generate_container(Path(out), channels=channels, seed=seed)
