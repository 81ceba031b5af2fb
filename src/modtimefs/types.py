"""Capability protocols for read-only file trees.

A provider only has to implement :class:`FS`. Everything else is an optional
capability that callers probe for at call time.
"""

from __future__ import annotations

import stat as _stat
from datetime import datetime, timezone
from typing import Any, List, Protocol, runtime_checkable

# Modification time reported by trees that carry no timestamps.
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


def mode_type(mode: int) -> int:
    return _stat.S_IFMT(mode)


def valid_path(name: str) -> bool:
    """Report whether ``name`` is a usable path inside a tree.

    Paths are slash-separated and unrooted. ``"."`` names the root; empty,
    ``.`` and ``..`` elements are rejected everywhere else.
    """
    if name == ".":
        return True
    if not name:
        return False
    return all(part not in {"", ".", ".."} for part in name.split("/"))


@runtime_checkable
class FileInfo(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def size(self) -> int: ...

    @property
    def mode(self) -> int: ...

    @property
    def mod_time(self) -> datetime: ...

    @property
    def sys(self) -> Any: ...

    def is_dir(self) -> bool: ...


@runtime_checkable
class DirEntry(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def type(self) -> int:
        """The type bits (``stat.S_IFMT``) of the entry's mode."""
        ...

    def is_dir(self) -> bool: ...

    def info(self) -> FileInfo:
        """Return the entry's metadata; may fail if the entry vanished."""
        ...


@runtime_checkable
class File(Protocol):
    def stat(self) -> FileInfo: ...

    def read(self, size: int = -1) -> bytes: ...

    def close(self) -> None: ...


@runtime_checkable
class SeekableFile(File, Protocol):
    def seek(self, offset: int, whence: int = 0) -> int: ...


@runtime_checkable
class ReadDirFile(File, Protocol):
    def read_dir(self, count: int = -1) -> List[DirEntry]:
        """List the next entries of an open directory.

        ``count <= 0`` returns everything that is left, otherwise at most
        ``count`` entries. An exhausted listing returns an empty list.
        """
        ...


@runtime_checkable
class FS(Protocol):
    def open(self, name: str) -> File: ...


@runtime_checkable
class ReadDirFS(FS, Protocol):
    def read_dir(self, name: str) -> List[DirEntry]: ...


@runtime_checkable
class ReadFileFS(FS, Protocol):
    def read_file(self, name: str) -> bytes: ...


@runtime_checkable
class StatFS(FS, Protocol):
    def stat(self, name: str) -> FileInfo: ...
