"""
Resolved per-field mapping configuration.

Turns RawField entries into immutable FieldSpec values (extraction), checks
directive combinations (validation), and bundles the results into a
StructureSpec. Both steps run per field in declaration order and stop at the
first failing field; errors are not aggregated.

Responsibilities
- Parse declared types and from/try_from directives into TypeExpr values.
- Resolve the column name (rename directive, else the field name).
- Flag optional-wrapper fields syntactically (see rowmap.core.typeexpr).
- Reject fields carrying both `from` and `try_from`.

Notes
- Zero-IO, no side effects.
- A FieldSpec keeps both parsed directive types so validate_field() can inspect
  the raw combination; `source_mode` is derived from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .errors import ConflictingDirectivesError
from .schema import RawField, RawStructure
from .typeexpr import TypeExpr, parse_type

__all__ = [
    "SourceMode",
    "FieldSpec",
    "StructureSpec",
    "extract_field",
    "validate_field",
    "extract_structure",
]


class SourceMode(str, Enum):
    """How a field's column value becomes the declared type."""

    DIRECT = "direct"
    CONVERT_FROM = "convert_from"
    CONVERT_TRY_FROM = "convert_try_from"


@dataclass(frozen=True)
class FieldSpec:
    """
    One field's resolved mapping configuration.

    Attributes:
        name (str): Field identifier in the target structure.
        declared_type (TypeExpr): Static type as written in the schema.
        column_name (str): Column looked up in the row (case-sensitive).
        is_optional_wrapper (bool): Declared type is ``Option<...>`` (syntactic).
        from_type (TypeExpr | None): Parsed ``from`` directive.
        try_from_type (TypeExpr | None): Parsed ``try_from`` directive.
        doc (str | None): Passthrough documentation.
        visibility (str): Passthrough visibility marker.
        attrs (tuple[str, ...]): Passthrough attributes.
    """

    name: str
    declared_type: TypeExpr
    column_name: str
    is_optional_wrapper: bool
    from_type: TypeExpr | None = None
    try_from_type: TypeExpr | None = None
    doc: str | None = None
    visibility: str = ""
    attrs: tuple[str, ...] = ()

    @property
    def source_mode(self) -> SourceMode:
        if self.from_type is not None and self.try_from_type is not None:
            raise ConflictingDirectivesError(self.name)
        if self.from_type is not None:
            return SourceMode.CONVERT_FROM
        if self.try_from_type is not None:
            return SourceMode.CONVERT_TRY_FROM
        return SourceMode.DIRECT

    @property
    def source_type(self) -> TypeExpr:
        """Type decoded from the column: the directive's type, else the declared type."""
        mode = self.source_mode
        if mode is SourceMode.CONVERT_FROM and self.from_type is not None:
            return self.from_type
        if mode is SourceMode.CONVERT_TRY_FROM and self.try_from_type is not None:
            return self.try_from_type
        return self.declared_type


@dataclass(frozen=True)
class StructureSpec:
    """
    A whole target structure after extraction and validation.

    Attributes:
        name (str): Structure identifier (echoed only).
        fields (tuple[FieldSpec, ...]): Fields in declaration order.
        generics (tuple[str, ...]): Declared generic parameter names.
        constraints (tuple[str, ...]): Pre-existing constraint text.
        visibility (str): Passthrough visibility marker.
        doc (str | None): Passthrough documentation.
        attrs (tuple[str, ...]): Passthrough attributes.
    """

    name: str
    fields: tuple[FieldSpec, ...]
    generics: tuple[str, ...] = ()
    constraints: tuple[str, ...] = ()
    visibility: str = ""
    doc: str | None = None
    attrs: tuple[str, ...] = field(default_factory=tuple)


def extract_field(raw: RawField) -> FieldSpec:
    """
    Build a FieldSpec from a raw field.

    Args:
        raw (RawField): Field as written in the schema.

    Returns:
        FieldSpec: Resolved, immutable configuration. No validation of the
        directive combination is done here (see validate_field).

    Raises:
        UnparsableTypeError: If the declared type or a directive is not a valid
            type expression.
    """
    declared = parse_type(raw.type)
    from_type = parse_type(raw.from_) if raw.from_ is not None else None
    try_from_type = parse_type(raw.try_from) if raw.try_from is not None else None
    return FieldSpec(
        name=raw.name,
        declared_type=declared,
        column_name=raw.column_name,
        is_optional_wrapper=declared.is_optional_wrapper,
        from_type=from_type,
        try_from_type=try_from_type,
        doc=raw.doc,
        visibility=raw.visibility,
        attrs=tuple(raw.attrs),
    )


def validate_field(spec: FieldSpec) -> None:
    """
    Enforce directive rules for one field.

    Raises:
        ConflictingDirectivesError: If both `from` and `try_from` are present.
    """
    if spec.from_type is not None and spec.try_from_type is not None:
        raise ConflictingDirectivesError(spec.name)


def extract_structure(raw: RawStructure) -> StructureSpec:
    """
    Extract and validate every field in declaration order.

    Stops at the first field that fails to parse or validate.

    Raises:
        UnparsableTypeError: First unparsable type or directive.
        ConflictingDirectivesError: First field with both `from` and `try_from`.
    """
    specs: list[FieldSpec] = []
    for f in raw.fields:
        spec = extract_field(f)
        validate_field(spec)
        specs.append(spec)
    return StructureSpec(
        name=raw.name,
        fields=tuple(specs),
        generics=tuple(raw.generics),
        constraints=tuple(raw.constraints),
        visibility=raw.visibility,
        doc=raw.doc,
        attrs=tuple(raw.attrs),
    )
