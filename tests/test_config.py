from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

from fakes import FIXED
from modtimefs import config as config_mod
from modtimefs.config import AppConfig, SourceConfig, build_fs, load_config, parse_mod_time
from modtimefs.exceptions import ConfigurationError
from modtimefs.modtime import ModTimeFS
from modtimefs.types import ZERO_TIME


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for var in (config_mod.ENV_CONFIG, config_mod.ENV_MOD_TIME, config_mod.ENV_SOURCE_DATE_EPOCH):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(config_mod, "DEFAULT_CONFIG_DIR_UNIX", tmp_path / "home-config")
    monkeypatch.chdir(tmp_path)


@pytest.mark.parametrize(
    "value",
    [
        "2024-01-01T00:00:00Z",
        "2024-01-01T08:00:00+08:00",
        "2024-01-01",
        "1704067200",
        1704067200,
        1704067200.0,
        datetime(2024, 1, 1),
        datetime(2023, 12, 31, 19, 0, tzinfo=timezone(timedelta(hours=-5))),
        date(2024, 1, 1),
    ],
)
def test_parse_mod_time_variants(value: object) -> None:
    parsed = parse_mod_time(value)
    assert parsed == FIXED
    assert parsed.tzinfo == timezone.utc


@pytest.mark.parametrize("value", [None, "", "   "])
def test_parse_mod_time_unset_is_zero(value: object) -> None:
    assert parse_mod_time(value) == ZERO_TIME


@pytest.mark.parametrize("value", ["yesterday", "2024-13-01", True, [2024], 10**20])
def test_parse_mod_time_rejects_garbage(value: object) -> None:
    with pytest.raises(ConfigurationError):
        parse_mod_time(value)


def test_no_config_file_gives_defaults() -> None:
    cfg = load_config()
    assert cfg == AppConfig()
    assert cfg.mod_time == ZERO_TIME


def test_toml_config_discovered_in_cwd(tmp_path: Path) -> None:
    (tmp_path / "assets").mkdir()
    (tmp_path / "modtimefs.toml").write_text(
        'mod_time = 2024-01-01T00:00:00Z\n\n[source]\ndirectory = "assets"\ninclude_hidden = true\n'
    )
    cfg = load_config()
    assert cfg.mod_time == FIXED
    assert cfg.source.directory == (tmp_path / "assets").resolve()
    assert cfg.source.include_hidden is True


def test_yaml_config_explicit_path(tmp_path: Path) -> None:
    conf_dir = tmp_path / "conf"
    conf_dir.mkdir()
    path = conf_dir / "site.yaml"
    path.write_text("mod_time: 2024-01-01T00:00:00Z\nsource:\n  package: assetpkg\n  subdir: static\n")
    cfg = load_config(config_path=path)
    assert cfg.mod_time == FIXED
    assert cfg.source == SourceConfig(package="assetpkg", subdir="static")


def test_relative_directory_resolves_against_config_file(tmp_path: Path) -> None:
    conf_dir = tmp_path / "conf"
    conf_dir.mkdir()
    path = conf_dir / "modtimefs.yml"
    path.write_text("source:\n  directory: public\n")
    cfg = load_config(config_path=path)
    assert cfg.source.directory == (conf_dir / "public").resolve()


def test_config_env_var_and_home_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    home = tmp_path / "home-config"
    home.mkdir()
    (home / "modtimefs.yaml").write_text("mod_time: '2020-05-05T00:00:00Z'\n")
    assert load_config().mod_time == datetime(2020, 5, 5, tzinfo=timezone.utc)

    other = tmp_path / "elsewhere.toml"
    other.write_text('mod_time = "2024-01-01T00:00:00Z"\n')
    monkeypatch.setenv(config_mod.ENV_CONFIG, str(other))
    assert load_config().mod_time == FIXED


def test_mod_time_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "modtimefs.toml"
    path.write_text('mod_time = "2022-02-02T00:00:00Z"\n')
    monkeypatch.setenv(config_mod.ENV_SOURCE_DATE_EPOCH, "1704067200")
    assert load_config().mod_time == datetime(2022, 2, 2, tzinfo=timezone.utc)

    monkeypatch.setenv(config_mod.ENV_MOD_TIME, "2024-01-01T00:00:00Z")
    assert load_config().mod_time == FIXED

    monkeypatch.delenv(config_mod.ENV_MOD_TIME)
    path.write_text("")
    assert load_config().mod_time == FIXED


def test_broken_config_raises(tmp_path: Path) -> None:
    bad_toml = tmp_path / "bad.toml"
    bad_toml.write_text("mod_time = = 1\n")
    with pytest.raises(ConfigurationError):
        load_config(config_path=bad_toml)

    list_yaml = tmp_path / "list.yaml"
    list_yaml.write_text("- one\n- two\n")
    with pytest.raises(ConfigurationError):
        load_config(config_path=list_yaml)

    with pytest.raises(ConfigurationError):
        load_config(config_path=tmp_path / "missing.toml")

    ini = tmp_path / "settings.ini"
    ini.write_text("[x]\n")
    with pytest.raises(ConfigurationError):
        load_config(config_path=ini)


def test_build_fs_from_directory(tmp_path: Path) -> None:
    public = tmp_path / "public"
    public.mkdir()
    (public / "a.txt").write_text("hi")
    cfg = AppConfig(source=SourceConfig(directory=public), mod_time=FIXED)
    fsys = build_fs(cfg)
    assert isinstance(fsys, ModTimeFS)
    assert fsys.read_file("a.txt") == b"hi"
    assert fsys.stat("a.txt").mod_time == FIXED


def test_build_fs_without_source_raises() -> None:
    with pytest.raises(ConfigurationError):
        build_fs(AppConfig())


def test_undecodable_toml_raises(tmp_path: Path) -> None:
    (tmp_path / "modtimefs.toml").write_bytes(b'mod_time = "\xff\xfe"\n')
    with pytest.raises(ConfigurationError) as excinfo:
        load_config()
    assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)


def test_unreadable_config_raises(tmp_path: Path) -> None:
    # a directory passes the existence check but cannot be opened
    (tmp_path / "modtimefs.toml").mkdir()
    with pytest.raises(ConfigurationError) as excinfo:
        load_config()
    assert isinstance(excinfo.value.__cause__, OSError)


@pytest.mark.parametrize(
    "body",
    [
        "source:\n  directory: 123\n",
        "source:\n  package: [a, b]\n",
        "source:\n  package: assetpkg\n  subdir: 7\n",
        "source:\n  directory: public\n  include_hidden: 'false'\n",
    ],
)
def test_source_values_must_have_the_right_type(tmp_path: Path, body: str) -> None:
    path = tmp_path / "modtimefs.yaml"
    path.write_text(body)
    with pytest.raises(ConfigurationError):
        load_config(config_path=path)


def test_null_source_values_fall_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "modtimefs.yaml"
    path.write_text("source:\n  package: assetpkg\n  subdir:\n  include_hidden:\n")
    assert load_config(config_path=path).source == SourceConfig(package="assetpkg")
