"""Immutable in-memory file tree for bundled assets.

An :class:`EmbedFS` is built once, from a mapping, a directory snapshot or a
package's data files, and never changes afterwards. Like other compiled-in
asset bundles it carries no timestamps: every entry reports
:data:`~modtimefs.types.ZERO_TIME`.
"""

from __future__ import annotations

import errno
import io
import logging
import os
import posixpath
import stat as _stat
from dataclasses import dataclass
from datetime import datetime
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from types import TracebackType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from .types import ZERO_TIME, mode_type, valid_path

log = logging.getLogger(__name__)

FILE_MODE = _stat.S_IFREG | 0o444
DIR_MODE = _stat.S_IFDIR | 0o555

Content = Union[bytes, bytearray, str]
_H = TypeVar("_H", bound="_Handle")


def _not_found(op: str, name: str) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, f"{op}: no such file or directory", name)


def _hidden(name: str) -> bool:
    return name.startswith((".", "_"))


@dataclass(frozen=True, slots=True)
class EmbedFileInfo:
    """Metadata of one embedded entry; doubles as its directory entry."""

    name: str
    size: int
    mode: int

    @property
    def mod_time(self) -> datetime:
        return ZERO_TIME

    @property
    def sys(self) -> Any:
        return None

    @property
    def type(self) -> int:
        return mode_type(self.mode)

    def is_dir(self) -> bool:
        return _stat.S_ISDIR(self.mode)

    def info(self) -> "EmbedFileInfo":
        return self


@dataclass(frozen=True, slots=True)
class _Node:
    path: str
    data: Optional[bytes] = None  # None for directories

    @property
    def is_dir(self) -> bool:
        return self.data is None

    def info(self) -> EmbedFileInfo:
        name = "." if self.path == "." else posixpath.basename(self.path)
        if self.data is None:
            return EmbedFileInfo(name=name, size=0, mode=DIR_MODE)
        return EmbedFileInfo(name=name, size=len(self.data), mode=FILE_MODE)


class _Handle:
    def __init__(self, node: _Node) -> None:
        self._node = node
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError(f"I/O operation on closed file: {self._node.path}")

    def stat(self) -> EmbedFileInfo:
        self._check_open()
        return self._node.info()

    def close(self) -> None:
        self._closed = True

    def __enter__(self: _H) -> _H:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._node.path!r}>"


class EmbedFile(_Handle):
    """Open regular file. Seekable."""

    def __init__(self, node: _Node) -> None:
        super().__init__(node)
        if node.data is None:
            raise IsADirectoryError(errno.EISDIR, "open: is a directory", node.path)
        self._buf = io.BytesIO(node.data)

    def read(self, size: int = -1) -> bytes:
        self._check_open()
        return self._buf.read(size)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._check_open()
        return self._buf.seek(offset, whence)

    def tell(self) -> int:
        self._check_open()
        return self._buf.tell()

    def close(self) -> None:
        super().close()
        self._buf.close()


class EmbedDir(_Handle):
    """Open directory. Lists its entries but cannot be read or seeked."""

    def __init__(self, node: _Node, entries: List[EmbedFileInfo]) -> None:
        super().__init__(node)
        self._entries = entries
        self._offset = 0

    def read(self, size: int = -1) -> bytes:
        self._check_open()
        raise IsADirectoryError(errno.EISDIR, "read: is a directory", self._node.path)

    def read_dir(self, count: int = -1) -> List[EmbedFileInfo]:
        self._check_open()
        remaining = self._entries[self._offset:]
        if count > 0:
            remaining = remaining[:count]
        self._offset += len(remaining)
        return list(remaining)


class EmbedFS:
    """A read-only tree of files held in memory."""

    def __init__(self, files: Mapping[str, Content]) -> None:
        self._nodes: Dict[str, _Node] = {".": _Node(".")}
        self._children: Dict[str, List[str]] = {".": []}
        for name in sorted(files):
            self._add_file(name, files[name])
        for names in self._children.values():
            names.sort()

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    def _add_dir(self, path: str) -> None:
        node = self._nodes.get(path)
        if node is not None:
            if not node.is_dir:
                raise ValueError(f"Path is both a file and a directory: {path}")
            return
        parent = posixpath.dirname(path) or "."
        self._add_dir(parent)
        self._nodes[path] = _Node(path)
        self._children[path] = []
        self._children[parent].append(path)

    def _add_file(self, path: str, content: Content) -> None:
        if path == "." or not valid_path(path):
            raise ValueError(f"Invalid embedded path: {path!r}")
        if path in self._nodes:
            raise ValueError(f"Path is both a file and a directory: {path}")
        if isinstance(content, str):
            data = content.encode("utf-8")
        elif isinstance(content, (bytes, bytearray)):
            data = bytes(content)
        else:
            raise TypeError(f"Unsupported content type for {path}: {type(content).__name__}")
        parent = posixpath.dirname(path) or "."
        self._add_dir(parent)
        self._nodes[path] = _Node(path, data)
        self._children[parent].append(path)

    @classmethod
    def from_directory(cls, root: Union[str, os.PathLike[str]], include_hidden: bool = False) -> "EmbedFS":
        """Snapshot every regular file below ``root``.

        Names starting with ``.`` or ``_`` are left out unless
        ``include_hidden`` is set.
        """
        base = Path(root)
        if not base.is_dir():
            raise NotADirectoryError(errno.ENOTDIR, "not a directory", str(base))
        files: Dict[str, bytes] = {}
        for dirpath, dirnames, filenames in os.walk(base):
            if not include_hidden:
                dirnames[:] = [d for d in dirnames if not _hidden(d)]
            rel_dir = Path(dirpath).relative_to(base).as_posix()
            for filename in filenames:
                if not include_hidden and _hidden(filename):
                    continue
                full = Path(dirpath) / filename
                if not full.is_file():
                    continue
                key = filename if rel_dir == "." else f"{rel_dir}/{filename}"
                files[key] = full.read_bytes()
        log.debug("Snapshotted %d files from %s", len(files), base)
        return cls(files)

    @classmethod
    def from_package(cls, package: str, subdir: str = ".", include_hidden: bool = False) -> "EmbedFS":
        """Snapshot the data files of ``package`` found below ``subdir``."""
        top = resources.files(package)
        if subdir != ".":
            if not valid_path(subdir):
                raise ValueError(f"Invalid package subdirectory: {subdir!r}")
            for part in subdir.split("/"):
                top = top.joinpath(part)
        if not top.is_dir():
            raise NotADirectoryError(errno.ENOTDIR, "not a directory", f"{package}:{subdir}")
        files = dict(_iter_traversable(top, "", include_hidden))
        log.debug("Snapshotted %d files from package %s:%s", len(files), package, subdir)
        return cls(files)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def _lookup(self, op: str, name: str) -> _Node:
        node = self._nodes.get(name) if valid_path(name) else None
        if node is None:
            raise _not_found(op, name)
        return node

    def _entries(self, path: str) -> List[EmbedFileInfo]:
        return [self._nodes[child].info() for child in self._children[path]]

    # ------------------------------------------------------------------
    # Filesystem operations
    # ------------------------------------------------------------------
    def open(self, name: str) -> Union[EmbedFile, EmbedDir]:
        node = self._lookup("open", name)
        if node.is_dir:
            return EmbedDir(node, self._entries(node.path))
        return EmbedFile(node)

    def read_file(self, name: str) -> bytes:
        node = self._lookup("read_file", name)
        if node.data is None:
            raise IsADirectoryError(errno.EISDIR, "read_file: is a directory", name)
        return node.data

    def read_dir(self, name: str) -> List[EmbedFileInfo]:
        node = self._lookup("read_dir", name)
        if not node.is_dir:
            raise NotADirectoryError(errno.ENOTDIR, "read_dir: not a directory", name)
        return self._entries(node.path)

    def stat(self, name: str) -> EmbedFileInfo:
        return self._lookup("stat", name).info()

    def __len__(self) -> int:
        return sum(1 for node in self._nodes.values() if not node.is_dir)

    def __repr__(self) -> str:
        return f"EmbedFS(files={len(self)})"


def _iter_traversable(node: Traversable, prefix: str, include_hidden: bool) -> Iterator[Tuple[str, bytes]]:
    for child in sorted(node.iterdir(), key=lambda c: c.name):
        if not include_hidden and _hidden(child.name):
            continue
        path = f"{prefix}{child.name}"
        if child.is_dir():
            yield from _iter_traversable(child, path + "/", include_hidden)
        elif child.is_file():
            yield path, child.read_bytes()
