"""Helpers that work on any :class:`~modtimefs.types.FS`.

Each helper uses the provider's own fast path when it has one and otherwise
falls back to ``open``. Handles opened here are always closed again.
"""

from __future__ import annotations

import posixpath
from typing import Iterator, List, Tuple

from .exceptions import UnsupportedOperation
from .types import FS, DirEntry, FileInfo, mode_type


def stat(fsys: FS, name: str) -> FileInfo:
    fast = getattr(fsys, "stat", None)
    if fast is not None:
        return fast(name)
    f = fsys.open(name)
    try:
        return f.stat()
    finally:
        f.close()


def read_file(fsys: FS, name: str) -> bytes:
    fast = getattr(fsys, "read_file", None)
    if fast is not None:
        return fast(name)
    f = fsys.open(name)
    try:
        return f.read()
    finally:
        f.close()


def read_dir(fsys: FS, name: str) -> List[DirEntry]:
    """List directory ``name``.

    Providers with their own ``read_dir`` decide the order. Otherwise the
    directory is opened, listed in full and sorted by name.
    """
    fast = getattr(fsys, "read_dir", None)
    if fast is not None:
        return fast(name)
    f = fsys.open(name)
    try:
        listing = getattr(f, "read_dir", None)
        if listing is None:
            raise UnsupportedOperation(f"read_dir {name}: not implemented by {type(f).__name__}")
        entries = listing(-1)
    finally:
        f.close()
    return sorted(entries, key=lambda entry: entry.name)


def walk_dir(fsys: FS, root: str = ".") -> Iterator[Tuple[str, DirEntry]]:
    """Yield ``(path, entry)`` for ``root`` and everything below it.

    Traversal is depth-first pre-order, each directory's children in the
    order :func:`read_dir` returns them. Errors from the provider propagate
    to the caller.
    """
    yield from _walk(fsys, root, _InfoEntry(stat(fsys, root)))


def _walk(fsys: FS, path: str, entry: DirEntry) -> Iterator[Tuple[str, DirEntry]]:
    yield path, entry
    if not entry.is_dir():
        return
    for child in read_dir(fsys, path):
        child_path = child.name if path == "." else posixpath.join(path, child.name)
        yield from _walk(fsys, child_path, child)


class _InfoEntry:
    """Present a :class:`FileInfo` as a directory entry for the walk root."""

    __slots__ = ("_info",)

    def __init__(self, info: FileInfo) -> None:
        self._info = info

    @property
    def name(self) -> str:
        return self._info.name

    @property
    def type(self) -> int:
        return mode_type(self._info.mode)

    def is_dir(self) -> bool:
        return self._info.is_dir()

    def info(self) -> FileInfo:
        return self._info
