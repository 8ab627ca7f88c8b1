from __future__ import annotations

from pathlib import Path

import pytest

from rowmap.io.config import MapperSettings
from rowmap.io.errors import RowMapConfigError

ENV_KEYS = [
    "ROWMAP_OPTIONALIZE",
    "ROWMAP_CHECK_CAPABILITIES",
    "ROWMAP_FALLIBLE",
    "ROWMAP_LOG_LEVEL",
]


def _clear_env(monkeypatch) -> None:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def _write(tmp: Path, name: str, content: str) -> Path:
    p = tmp / name
    p.write_text(content)
    return p


def test_settings_precedence_env_over_toml(tmp_path: Path, monkeypatch) -> None:
    # Arrange TOML
    _write(
        tmp_path,
        "rowmap.toml",
        """
        [mapper]
        optionalize = true
        fallible = true
        log_level = "info"
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    # Arrange ENV that should override TOML
    monkeypatch.setenv("ROWMAP_OPTIONALIZE", "0")
    monkeypatch.setenv("ROWMAP_LOG_LEVEL", "debug")

    s = MapperSettings.load()

    assert s.optionalize is False  # env override
    assert s.fallible is True  # TOML
    assert s.log_level == "DEBUG"  # env override


def test_settings_from_toml_when_no_env(tmp_path: Path, monkeypatch) -> None:
    _write(tmp_path, "rowmap.toml", "check_capabilities = false\nlog_level = 'ERROR'\n")
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    s = MapperSettings.load()

    assert s.check_capabilities is False
    assert s.log_level == "ERROR"
    assert s.optionalize is False


def test_settings_from_pyproject(tmp_path: Path, monkeypatch) -> None:
    _write(
        tmp_path,
        "pyproject.toml",
        """
        [project]
        name = "demo"

        [tool.rowmap]
        optionalize = "yes"
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    assert MapperSettings.load().optionalize is True


def test_settings_defaults_when_no_config(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    s = MapperSettings.load()

    assert s == MapperSettings()
    assert s.log_level_value == 30


def test_explicit_path_must_exist(tmp_path: Path) -> None:
    with pytest.raises(RowMapConfigError):
        MapperSettings.from_toml(tmp_path / "missing.toml")


def test_invalid_values_are_rejected(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    monkeypatch.setenv("ROWMAP_LOG_LEVEL", "chatty")
    with pytest.raises(RowMapConfigError):
        MapperSettings.load()

    bad = _write(tmp_path, "bad.toml", "optionalize = = true")
    with pytest.raises(RowMapConfigError):
        MapperSettings.from_toml(bad)
