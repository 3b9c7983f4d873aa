"""Read and write .scm channel list containers.

A container is a zip archive. Store files are loaded into memory as
bytearrays; every other member is carried through unchanged on write.
"""
from __future__ import annotations

import os
import shutil
import tempfile
import zipfile
from dataclasses import dataclass, field
from pathlib import Path

from scm_core.const import BACKUP_SUFFIX
from scm_core.errors import ContainerError, NotFound
from scm_core.protocol import STORE_KINDS


@dataclass
class Container:
    path: Path
    stores: dict[str, bytearray] = field(default_factory=dict)


def read_container(path: Path) -> Container:
    path = Path(path)
    if not path.is_file():
        raise NotFound(str(path))
    try:
        with zipfile.ZipFile(path) as zf:
            stores = {
                info.filename: bytearray(zf.read(info))
                for info in zf.infolist()
                if info.filename in STORE_KINDS
            }
    except zipfile.BadZipFile as e:
        raise ContainerError(f"{path}: {e}") from e
    return Container(path=path, stores=stores)


def write_container(container: Container, modified: set[str], path: Path | None = None) -> bool:
    """Rewrite the archive with the modified stores replaced.

    Returns False without touching the file when nothing was modified.
    Member order and per-member settings are preserved; the new archive is
    written next to the target and moved into place.
    """
    if not modified:
        return False
    src = container.path
    dst = Path(path) if path is not None else src

    fd, tmp_name = tempfile.mkstemp(prefix=dst.name + ".", suffix=".tmp", dir=dst.parent)
    os.close(fd)
    tmp = Path(tmp_name)
    try:
        with zipfile.ZipFile(src) as zin, zipfile.ZipFile(tmp, "w") as zout:
            zout.comment = zin.comment
            for info in zin.infolist():
                if info.filename in modified:
                    data = bytes(container.stores[info.filename])
                else:
                    data = zin.read(info)
                zout.writestr(info, data)
        os.replace(tmp, dst)
    finally:
        if tmp.exists():
            tmp.unlink()
    return True


def backup_path(path: Path) -> Path:
    path = Path(path)
    return path.with_name(path.name + BACKUP_SUFFIX)


def ensure_backup(path: Path) -> Path | None:
    """Copy the container to ``<name>.backup`` unless a backup already exists."""
    target = backup_path(path)
    if target.exists():
        return None
    shutil.copy2(path, target)
    return target
