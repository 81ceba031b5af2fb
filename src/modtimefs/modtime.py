"""Read-only filesystem adapter that reports one fixed modification time.

Embedded asset trees carry no timestamps, which leaves HTTP handlers with
nothing to put in ``Last-Modified``. :class:`ModTimeFS` wraps such a tree and
makes every file, directory entry and metadata object it hands out report the
same caller-supplied time. Content, sizes, modes and listing order are
passed through untouched.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from types import TracebackType
from typing import Any, List, Optional, Type

from . import fsutil
from .exceptions import UnsupportedOperation
from .types import FS, ZERO_TIME, DirEntry, File, FileInfo

log = logging.getLogger(__name__)


def _to_utc(value: Optional[datetime]) -> datetime:
    if value is None:
        return ZERO_TIME
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ModTimeFileInfo:
    """Metadata whose modification time is replaced by a fixed value."""

    __slots__ = ("_info", "_mod_time")

    def __init__(self, info: FileInfo, mod_time: datetime) -> None:
        self._info = info
        self._mod_time = mod_time

    @property
    def mod_time(self) -> datetime:
        return self._mod_time

    @property
    def name(self) -> str:
        return self._info.name

    @property
    def size(self) -> int:
        return self._info.size

    @property
    def mode(self) -> int:
        return self._info.mode

    @property
    def sys(self) -> Any:
        return self._info.sys

    def is_dir(self) -> bool:
        return self._info.is_dir()

    def __repr__(self) -> str:
        return f"ModTimeFileInfo(name={self.name!r}, mod_time={self._mod_time.isoformat()})"


class ModTimeDirEntry:
    """Directory entry that hands out :class:`ModTimeFileInfo` on demand."""

    __slots__ = ("_entry", "_mod_time")

    def __init__(self, entry: DirEntry, mod_time: datetime) -> None:
        self._entry = entry
        self._mod_time = mod_time

    @property
    def name(self) -> str:
        return self._entry.name

    @property
    def type(self) -> int:
        return self._entry.type

    def is_dir(self) -> bool:
        return self._entry.is_dir()

    def info(self) -> ModTimeFileInfo:
        return ModTimeFileInfo(self._entry.info(), self._mod_time)

    def __repr__(self) -> str:
        return f"ModTimeDirEntry(name={self.name!r})"


def _wrap_entries(entries: List[DirEntry], mod_time: datetime) -> List[DirEntry]:
    return [ModTimeDirEntry(entry, mod_time) for entry in entries]


class ModTimeFile:
    """Open handle whose metadata reports the fixed modification time.

    The wrapped handle is owned exclusively and released exactly once, either
    by :meth:`close` or by leaving a ``with`` block. Seeking and directory
    listing are optional on the wrapped handle and are probed on every call.
    """

    def __init__(self, file: File, mod_time: datetime) -> None:
        self._file = file
        self._mod_time = mod_time
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def stat(self) -> ModTimeFileInfo:
        return ModTimeFileInfo(self._file.stat(), self._mod_time)

    def read(self, size: int = -1) -> bytes:
        return self._file.read(size)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._file.close()

    def seekable(self) -> bool:
        if getattr(self._file, "seek", None) is None:
            return False
        probe = getattr(self._file, "seekable", None)
        return probe is None or bool(probe())

    def seek(self, offset: int, whence: int = 0) -> int:
        if not self.seekable():
            raise UnsupportedOperation("file does not support seek")
        return self._file.seek(offset, whence)  # type: ignore[attr-defined]

    def read_dir(self, count: int = -1) -> List[DirEntry]:
        read_dir = getattr(self._file, "read_dir", None)
        if read_dir is None:
            raise UnsupportedOperation("file is not a directory or does not support read_dir")
        return _wrap_entries(read_dir(count), self._mod_time)

    def __enter__(self) -> "ModTimeFile":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<ModTimeFile {self._file!r} ({state})>"


class ModTimeFS:
    """Wrap ``source`` so that everything it exposes reports ``mod_time``.

    ``mod_time`` is normalized to UTC; a naive value is taken to be UTC
    already. Leaving it unset keeps the zero time of the source, which
    conditional-GET handlers cannot use, so a warning is logged.
    """

    def __init__(self, source: FS, mod_time: Optional[datetime] = None) -> None:
        self._source = source
        self._mod_time = _to_utc(mod_time)
        if self._mod_time == ZERO_TIME:
            log.warning(
                "ModTimeFS created with a zero modification time; "
                "Last-Modified based caching will not work"
            )
        log.debug("Wrapping %r with fixed modification time %s", source, self._mod_time.isoformat())

    @property
    def source(self) -> FS:
        return self._source

    @property
    def mod_time(self) -> datetime:
        return self._mod_time

    def open(self, name: str) -> ModTimeFile:
        return ModTimeFile(self._source.open(name), self._mod_time)

    def read_file(self, name: str) -> bytes:
        return fsutil.read_file(self._source, name)

    def read_dir(self, name: str) -> List[DirEntry]:
        return _wrap_entries(fsutil.read_dir(self._source, name), self._mod_time)

    def stat(self, name: str) -> ModTimeFileInfo:
        return ModTimeFileInfo(fsutil.stat(self._source, name), self._mod_time)

    def __repr__(self) -> str:
        return f"ModTimeFS({self._source!r}, mod_time={self._mod_time.isoformat()})"
