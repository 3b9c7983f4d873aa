import zipfile
from pathlib import Path

import pytest

from scm_core.protocol import RecordLayout
from scm_core.records import checksum_recompute, set_active, write_name, write_prog_nr
from scm_core.scanner import find_checksum_errors


def build_store(layout: RecordLayout, prog_nrs, inactive=(), names=None) -> bytearray:
    """One record per entry of ``prog_nrs``; indices in ``inactive`` are switched off."""
    buf = bytearray(layout.record_size * len(prog_nrs))
    for i, nr in enumerate(prog_nrs):
        start = i * layout.record_size
        for off in range(layout.record_size):
            buf[start + off] = (i * 31 + off * 7) & 0xFF
        if layout.hidden_offset is not None:
            buf[start + layout.hidden_offset] = 0
        checksum_recompute(buf, layout, i)
        write_name(buf, layout, i, names[i] if names else f"Ch {i}")
        write_prog_nr(buf, layout, i, nr)
        set_active(buf, layout, i, i not in inactive)
    return buf


@pytest.fixture
def make_store():
    return build_store


@pytest.fixture
def checksums_ok():
    def _check(buf, layout) -> bool:
        return find_checksum_errors(buf, layout) == []
    return _check


@pytest.fixture
def make_scm(tmp_path):
    def _make(stores: dict, extra: dict | None = None, name: str = "channels.scm") -> Path:
        p = tmp_path / name
        with zipfile.ZipFile(p, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for member, data in (extra or {}).items():
                zf.writestr(member, data)
            for member, data in stores.items():
                zf.writestr(member, bytes(data))
        return p
    return _make
