"""
Core package for rowmap: the schema-to-row-mapper compiler.

## Pipeline
- Schema — pydantic models for the structural schema (RawStructure/RawField).
- Spec — per-field extraction (types, column name, optional wrapper) and
  directive validation (from/try_from conflicts).
- Constraints — capability requirements each field imposes.
- Registry — explicit table of decodable types, defaults and conversions.
- Expressions — per-field total/fallible decoding callables.
- Compiler — assembles GeneratedMapper with from_row/try_from_row.
- Optionalize — structure-wide Option<...> pre-pass.

## Notes
- Zero-IO policy: stdlib + pydantic only; no file/network IO.
- Compilation is all-or-nothing; row decoding never raises for a field.

## Examples
```python
from rowmap.core import RawStructure, compile_structure

user = RawStructure.model_validate({
    "name": "User",
    "fields": [
        {"name": "id", "type": "i32"},
        {"name": "name", "type": "Option<String>"},
        {"name": "ext_id", "type": "Uuid", "try_from": "String"},
    ],
})
mapper = compile_structure(user)
mapper.from_row({"id": 7, "ext_id": "not-a-uuid"})
# {'id': 7, 'name': None, 'ext_id': UUID('00000000-0000-0000-0000-000000000000')}
```
"""

from __future__ import annotations

from .compiler import GeneratedMapper, compile_spec, compile_structure
from .constraints import Constraint, ConstraintKind, ConstraintSet, DeclaredConstraint
from .errors import (
    ColumnDecodeError,
    ConflictingDirectivesError,
    DirectiveValidationError,
    MapperError,
    MissingCapabilityError,
    SchemaError,
    UnparsableTypeError,
)
from .expressions import MappingRow, Row
from .optionalize import optionalize
from .registry import TypeRegistry, default_registry
from .schema import RawField, RawStructure
from .spec import FieldSpec, SourceMode, StructureSpec, extract_field, extract_structure, validate_field
from .typeexpr import TypeExpr, parse_type

__all__ = [
    "GeneratedMapper",
    "compile_spec",
    "compile_structure",
    "Constraint",
    "ConstraintKind",
    "ConstraintSet",
    "DeclaredConstraint",
    "ColumnDecodeError",
    "ConflictingDirectivesError",
    "DirectiveValidationError",
    "MapperError",
    "MissingCapabilityError",
    "SchemaError",
    "UnparsableTypeError",
    "MappingRow",
    "Row",
    "optionalize",
    "TypeRegistry",
    "default_registry",
    "RawField",
    "RawStructure",
    "FieldSpec",
    "SourceMode",
    "StructureSpec",
    "extract_field",
    "extract_structure",
    "validate_field",
    "TypeExpr",
    "parse_type",
]
