"""
rowmap — compile declarative structure schemas into tabular row mappers.

## Packages
- rowmap.core — zero-IO compiler (schema models, field specs, constraints,
  capability registry, decoding expressions, optional-wrapping pre-pass).
- rowmap.io — TOML schema files, settings, Polars row adapters.
- rowmap.cli — ``rowmap check | render | map``.
"""

from __future__ import annotations

from rowmap.core import (
    GeneratedMapper,
    MapperError,
    RawField,
    RawStructure,
    SchemaError,
    TypeRegistry,
    compile_structure,
    default_registry,
    optionalize,
)

__all__ = [
    "GeneratedMapper",
    "MapperError",
    "RawField",
    "RawStructure",
    "SchemaError",
    "TypeRegistry",
    "compile_structure",
    "default_registry",
    "optionalize",
]

__version__ = "0.1.0"
