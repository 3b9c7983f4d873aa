"""Error types shared by the codec and the editing commands."""
from __future__ import annotations

from .const import ERRORS


class ChannelListError(ValueError):
    """Base error. ``code`` is a key of ``ERRORS``."""

    code = "E_CONTAINER"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        msg = ERRORS[self.code]
        super().__init__(f"{msg}: {detail}" if detail else msg)


class NotFound(ChannelListError):
    code = "E_NOT_FOUND"


class ContainerError(ChannelListError):
    code = "E_CONTAINER"


class UnknownStore(ChannelListError):
    code = "E_UNKNOWN_STORE"


class ChannelNotFound(ChannelListError):
    code = "E_CHANNEL_NOT_FOUND"

    def __init__(self, prog_nr: int) -> None:
        self.prog_nr = prog_nr
        super().__init__(str(prog_nr))


class FormatSizeMismatch(ChannelListError):
    code = "E_SIZE_MISMATCH"

    def __init__(self, store: str, length: int, record_size: int) -> None:
        self.store = store
        self.length = length
        self.record_size = record_size
        super().__init__(f"{store} is {length} bytes, record size {record_size}")


class SnapshotRowWarning(UserWarning):
    """A snapshot row was skipped."""
