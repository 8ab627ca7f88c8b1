"""
Configuration for rowmap.

Defines MapperSettings, a frozen dataclass carrying runtime configuration for
schema compilation and the CLI. Defaults are conservative: no optional-wrapping
pre-pass, capability checks on, from_row (not try_from_row) for mapping.

Sources and precedence
- Environment variables (prefix ROWMAP_) > TOML > defaults.
- TOML search order: ./rowmap.toml ([mapper] table or top-level keys), then
  ./pyproject.toml under [tool.rowmap].

Notes
- Depends only on stdlib (tomllib) and rowmap.core.constants.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from rowmap.core.constants import CONFIG_FILE_NAME, ENV_PREFIX, PYPROJECT_TABLE

from .errors import RowMapConfigError

__all__ = ["MapperSettings"]

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}
    return False


@dataclass(frozen=True)
class MapperSettings:
    """
    Runtime settings for compiling and running row mappers.

    Attributes:
        optionalize (bool): Run the optional-wrapping pre-pass on every structure
            before compiling.
        check_capabilities (bool): Check synthesized constraints against the type
            registry at compile time.
        fallible (bool): Map rows with try_from_row instead of from_row.
        log_level (str): Logging level name applied by the CLI.

    Examples:
        >>> from rowmap.io.config import MapperSettings
        >>> MapperSettings(optionalize=True).optionalize
        True
    """

    optionalize: bool = False
    check_capabilities: bool = True
    fallible: bool = False
    log_level: str = "WARNING"

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def _apply_mapping(cls, base: MapperSettings, cfg: dict[str, Any] | None) -> MapperSettings:
        """Apply a loose config mapping onto MapperSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base
        for key in ("optionalize", "check_capabilities", "fallible"):
            if key in cfg:
                s = replace(s, **{key: _bool(cfg[key])})

        if "log_level" in cfg:
            level = str(cfg["log_level"]).strip().upper()
            if level not in _LOG_LEVELS:
                raise RowMapConfigError(f"unknown log level {cfg['log_level']!r}")
            s = replace(s, log_level=level)

        return s

    @classmethod
    def from_env(cls, base: MapperSettings | None = None, prefix: str = ENV_PREFIX) -> MapperSettings:
        """
        Build MapperSettings from environment variables. Precedence is env > base > defaults.

        Recognized variables:
            - ROWMAP_OPTIONALIZE (1/0/true/false/yes/no/on/off)
            - ROWMAP_CHECK_CAPABILITIES
            - ROWMAP_FALLIBLE
            - ROWMAP_LOG_LEVEL (DEBUG | INFO | WARNING | ERROR | CRITICAL)
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in ("optionalize", "check_capabilities", "fallible", "log_level"):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> MapperSettings:
        """
        Build MapperSettings from a TOML file.

        Search order when `path` is None:
            1) ./rowmap.toml (with either a [mapper] table or direct keys)
            2) ./pyproject.toml under [tool.rowmap]

        Returns defaults if no file is present.

        Raises:
            RowMapConfigError: If an explicit `path` does not exist or a file is not valid TOML.
        """
        s = cls()

        cand: list[Path] = []
        if path is not None:
            explicit = Path(path)
            if not explicit.exists():
                raise RowMapConfigError(f"settings file not found: {explicit}")
            cand.append(explicit)
        else:
            cand.append(Path.cwd() / CONFIG_FILE_NAME)
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            try:
                with p.open("rb") as fh:
                    data = tomllib.load(fh)
            except tomllib.TOMLDecodeError as exc:
                raise RowMapConfigError(f"invalid TOML in {p}: {exc}") from exc
            if p.name == "pyproject.toml":
                node: Any = data
                for part in PYPROJECT_TABLE:
                    node = node.get(part, {}) if isinstance(node, dict) else {}
                cfg = node if isinstance(node, dict) else None
            elif isinstance(data.get("mapper"), dict):
                cfg = data["mapper"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> MapperSettings:
        """
        Load MapperSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults
                (rowmap.toml, pyproject.toml).
        """
        s = cls.from_toml(path)
        return cls.from_env(base=s)
