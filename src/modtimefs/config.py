from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .embed import EmbedFS
from .exceptions import ConfigurationError
from .modtime import ModTimeFS
from .types import ZERO_TIME

log = logging.getLogger(__name__)


CONFIG_FILENAMES_TOML = ("modtimefs.toml",)
CONFIG_FILENAMES_YAML = ("modtimefs.yaml", "modtimefs.yml")
DEFAULT_CONFIG_DIR_UNIX = Path.home() / ".config" / "modtimefs"

ENV_CONFIG = "MODTIMEFS_CONFIG"
ENV_MOD_TIME = "MODTIMEFS_MOD_TIME"
ENV_SOURCE_DATE_EPOCH = "SOURCE_DATE_EPOCH"


@dataclass(frozen=True)
class SourceConfig:
    directory: Optional[Path] = None
    package: Optional[str] = None
    subdir: str = "."
    include_hidden: bool = False


@dataclass(frozen=True)
class AppConfig:
    source: SourceConfig = field(default_factory=SourceConfig)
    mod_time: datetime = ZERO_TIME


def parse_mod_time(value: Any) -> datetime:
    """Turn a config or environment value into an aware UTC datetime.

    Accepts ``None`` (the zero time), datetimes, dates, epoch seconds and
    ISO-8601 strings. Naive values are taken to be UTC.
    """
    if value is None:
        return ZERO_TIME
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    elif isinstance(value, bool):
        raise ConfigurationError(f"Invalid modification time: {value!r}")
    elif isinstance(value, (int, float)):
        try:
            parsed = datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise ConfigurationError(f"Invalid modification time: {value!r}") from exc
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return ZERO_TIME
        try:
            if text.lstrip("-").isdigit():
                return parse_mod_time(int(text))
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid modification time: {value!r}") from exc
    else:
        raise ConfigurationError(f"Invalid modification time: {value!r}")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _find_config_file(explicit: Optional[Path]) -> Optional[Path]:
    if explicit is not None:
        return explicit

    env_path = os.environ.get(ENV_CONFIG)
    if env_path:
        p = Path(env_path)
        if p.exists():
            return p

    cwd = Path.cwd()
    for name in (*CONFIG_FILENAMES_TOML, *CONFIG_FILENAMES_YAML):
        candidate = cwd / name
        if candidate.exists():
            return candidate

    # Home config directory
    for name in (*CONFIG_FILENAMES_TOML, *CONFIG_FILENAMES_YAML):
        candidate = DEFAULT_CONFIG_DIR_UNIX / name
        if candidate.exists():
            return candidate

    return None


def _read_toml(p: Path) -> Dict[str, Any]:
    with p.open("rb") as f:
        return tomllib.load(f)


def _read_yaml(p: Path) -> Dict[str, Any]:
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"YAML config must be a mapping at top-level: {p}")
    return data


def _read_config(p: Path) -> Dict[str, Any]:
    if not p.exists():
        raise ConfigurationError(f"Configuration file '{p}' does not exist.")
    try:
        if p.suffix.lower() == ".toml":
            return _read_toml(p)
        if p.suffix.lower() in {".yaml", ".yml"}:
            return _read_yaml(p)
    except (tomllib.TOMLDecodeError, yaml.YAMLError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Failed to parse configuration {p}: {exc}") from exc
    except OSError as exc:
        raise ConfigurationError(f"Failed to read configuration {p}: {exc}") from exc
    raise ConfigurationError(f"Unsupported configuration format '{p.suffix}'. Use TOML or YAML.")


def _typed(section: Dict[str, Any], key: str, kind: type, default: Any = None) -> Any:
    value = section.get(key, default)
    if value is not None and not isinstance(value, kind):
        raise ConfigurationError(f"source.{key} must be a {kind.__name__}, got {value!r}")
    return value


def _to_path(value: str | os.PathLike[str], *, base_dir: Path) -> Path:
    p = Path(value)
    if not p.is_absolute():
        p = (base_dir / p).resolve()
    return p


def load_config(*, config_path: Optional[Path] = None, base_dir: Optional[Path] = None) -> AppConfig:
    """Resolve the configuration from file and environment.

    ``MODTIMEFS_MOD_TIME`` wins over the file, which wins over
    ``SOURCE_DATE_EPOCH``. Relative source directories are resolved against
    ``base_dir``, defaulting to the config file's directory.
    """
    file_path = _find_config_file(config_path)
    raw: Dict[str, Any] = {}
    if file_path is not None:
        raw = _read_config(file_path)
        log.debug("Loaded config from %s", file_path)

    if base_dir is None:
        base_dir = file_path.parent if file_path is not None else Path.cwd()
    base_dir = base_dir.resolve()

    raw_source = raw.get("source") or {}
    if not isinstance(raw_source, dict):
        raise ConfigurationError("'source' must be a table/mapping")

    directory = _typed(raw_source, "directory", str)
    package = _typed(raw_source, "package", str)
    source = SourceConfig(
        directory=_to_path(directory, base_dir=base_dir) if directory else None,
        package=package or None,
        subdir=_typed(raw_source, "subdir", str, ".") or ".",
        include_hidden=bool(_typed(raw_source, "include_hidden", bool, False)),
    )

    mod_time_value: Any = raw.get("mod_time")
    if os.environ.get(ENV_MOD_TIME):
        mod_time_value = os.environ[ENV_MOD_TIME]
    elif mod_time_value is None and os.environ.get(ENV_SOURCE_DATE_EPOCH):
        mod_time_value = os.environ[ENV_SOURCE_DATE_EPOCH]

    return AppConfig(
        source=source,
        mod_time=parse_mod_time(mod_time_value),
    )


def build_fs(cfg: AppConfig) -> ModTimeFS:
    """Snapshot the configured source and wrap it with the fixed time."""
    src = cfg.source
    if src.directory is not None:
        tree = EmbedFS.from_directory(src.directory, include_hidden=src.include_hidden)
    elif src.package is not None:
        tree = EmbedFS.from_package(src.package, src.subdir, include_hidden=src.include_hidden)
    else:
        raise ConfigurationError("No source configured; set source.directory or source.package")
    return ModTimeFS(tree, cfg.mod_time)
