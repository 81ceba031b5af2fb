"""Public API for modtimefs: read-only file trees with a fixed modification time."""

from .config import AppConfig, SourceConfig, build_fs, load_config, parse_mod_time
from .embed import EmbedDir, EmbedFile, EmbedFileInfo, EmbedFS
from .exceptions import ConfigurationError, ModTimeFSError, UnsupportedOperation
from .fsutil import read_dir, read_file, stat, walk_dir
from .modtime import ModTimeDirEntry, ModTimeFile, ModTimeFileInfo, ModTimeFS
from .types import (
    FS,
    ZERO_TIME,
    DirEntry,
    File,
    FileInfo,
    ReadDirFile,
    ReadDirFS,
    ReadFileFS,
    SeekableFile,
    StatFS,
)

__version__ = "0.1.0"

__all__ = [
    "ModTimeFS",
    "ModTimeFile",
    "ModTimeDirEntry",
    "ModTimeFileInfo",
    "EmbedFS",
    "EmbedFile",
    "EmbedDir",
    "EmbedFileInfo",
    "FS",
    "File",
    "FileInfo",
    "DirEntry",
    "SeekableFile",
    "ReadDirFile",
    "ReadDirFS",
    "ReadFileFS",
    "StatFS",
    "ZERO_TIME",
    "read_dir",
    "read_file",
    "stat",
    "walk_dir",
    "AppConfig",
    "SourceConfig",
    "load_config",
    "build_fs",
    "parse_mod_time",
    "ModTimeFSError",
    "UnsupportedOperation",
    "ConfigurationError",
    "__version__",
]
