"""
TOML schema files: the file-based front end for rowmap.

Layout
------
    [[structures]]
    name = "User"
    generics = ["T"]              # optional
    constraints = ["T: Clone"]    # optional, echoed only

    [[structures.fields]]
    name = "id"
    type = "i32"

    [[structures.fields]]
    name = "external_id"
    type = "Uuid"
    try_from = "String"
    rename = "ext_id"

Per-structure generic bindings for compilation go in an optional
``[structures.type_args]`` table (e.g. ``T = "i64"``).

Overview
- load_structures(): parse a schema file into RawStructure models.
- compile_file(): load, apply the optional-wrapping pre-pass per settings, and
  compile every structure.

Notes
- Shape errors (unknown keys, duplicate field names) are SchemaFileError.
- Compile errors (unparsable types, conflicting directives, missing
  capabilities) propagate as rowmap.core.errors.SchemaError subclasses.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from rowmap.core.compiler import GeneratedMapper, compile_structure
from rowmap.core.optionalize import optionalize
from rowmap.core.registry import TypeRegistry
from rowmap.core.schema import RawStructure

from .config import MapperSettings
from .errors import SchemaFileError

__all__ = [
    "load_schema_document",
    "load_structures",
    "compile_file",
]

logger = logging.getLogger(__name__)


def load_schema_document(path: str | os.PathLike[str]) -> list[dict[str, Any]]:
    """Read the raw ``structures`` tables from a schema file."""
    p = Path(path)
    try:
        with p.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError as exc:
        raise SchemaFileError(f"schema file not found: {p}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise SchemaFileError(f"invalid TOML in {p}: {exc}") from exc
    tables = data.get("structures")
    if not isinstance(tables, list) or not all(isinstance(t, dict) for t in tables):
        raise SchemaFileError(f"{p}: expected one or more [[structures]] tables")
    return tables


def _split_type_args(table: dict[str, Any]) -> tuple[dict[str, Any], dict[str, str]]:
    body = dict(table)
    type_args = body.pop("type_args", {}) or {}
    if not isinstance(type_args, dict):
        raise SchemaFileError(f"type_args of {body.get('name')!r} must be a table")
    return body, {str(k): str(v) for k, v in type_args.items()}


def load_structures(path: str | os.PathLike[str]) -> list[RawStructure]:
    """
    Parse every structure in a schema file.

    Raises:
        SchemaFileError: If the file is missing, invalid TOML, or a structure does
            not match the schema model.
    """
    return [s for s, _ in _load_with_type_args(path)]


def _load_with_type_args(path: str | os.PathLike[str]) -> list[tuple[RawStructure, dict[str, str]]]:
    out: list[tuple[RawStructure, dict[str, str]]] = []
    for table in load_schema_document(path):
        body, type_args = _split_type_args(table)
        try:
            out.append((RawStructure.model_validate(body), type_args))
        except ValidationError as exc:
            raise SchemaFileError(f"{path}: structure {body.get('name')!r}: {exc}") from exc
    return out


def compile_file(
    path: str | os.PathLike[str],
    settings: MapperSettings | None = None,
    registry: TypeRegistry | None = None,
) -> dict[str, GeneratedMapper]:
    """
    Compile every structure of a schema file.

    Args:
        path: Schema file.
        settings (MapperSettings | None): Pre-pass and capability-check flags;
            defaults to MapperSettings().
        registry (TypeRegistry | None): Shared capability table for all structures.

    Returns:
        dict[str, GeneratedMapper]: Mappers keyed by structure name, in file order.

    Raises:
        SchemaFileError: Shape errors in the file, or duplicate structure names.
        SchemaError: First compile failure.
    """
    s = settings or MapperSettings()
    mappers: dict[str, GeneratedMapper] = {}
    for raw, type_args in _load_with_type_args(path):
        if raw.name in mappers:
            raise SchemaFileError(f"{path}: duplicate structure name {raw.name!r}")
        structure = optionalize(raw, s.optionalize)
        mappers[raw.name] = compile_structure(
            structure,
            registry=registry,
            type_args=type_args,
            check_capabilities=s.check_capabilities,
        )
        logger.info("compiled %s from %s", raw.name, path)
    return mappers
