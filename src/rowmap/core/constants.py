"""
rowmap core defaults.

Names and conventions shared by the compiler, the pre-pass, and the IO layer.
This module is zero-IO and uses only the Python standard library.

Notes:
    - OPTION_WRAPPER is matched by bare name only; a qualified path such as
      ``std::option::Option<T>`` is not treated as an optional wrapper.
    - CONFIG_FILE_NAME, PYPROJECT_TABLE and ENV_PREFIX are consumed by
      rowmap.io.config.
"""

from __future__ import annotations

__all__ = [
    "OPTION_WRAPPER",
    "CONFIG_FILE_NAME",
    "PYPROJECT_TABLE",
    "ENV_PREFIX",
]

# Outer type constructor recognized as "value or absence".
OPTION_WRAPPER: str = "Option"

# Project-local settings file searched by MapperSettings.from_toml().
CONFIG_FILE_NAME: str = "rowmap.toml"

# pyproject.toml table path holding the same keys ([tool.rowmap]).
PYPROJECT_TABLE: tuple[str, ...] = ("tool", "rowmap")

ENV_PREFIX: str = "ROWMAP_"
