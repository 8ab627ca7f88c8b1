"""
Pydantic v2 models for the structural schema consumed by the compiler.

A RawStructure is what a front end (a TOML schema file, hand-written Python, a
build-time generator) hands to rowmap: the structure's name, generic
parameters, pre-existing constraints, passthrough metadata, and an ordered list
of RawField entries with their directives.

Responsibilities
- Shape validation only: names are identifiers, field names are unique.
- Directive strings (`from`, `try_from`) are kept verbatim; parsing and
  conflict checks happen in rowmap.core.spec so compile errors surface as
  SchemaError subclasses rather than pydantic errors.
- Passthrough metadata (doc, visibility, attrs) is never interpreted.

Style
- Zero-IO (stdlib + pydantic only).
- Validators raise SchemaError; pydantic wraps it in ValidationError.

Examples
--------
>>> from rowmap.core.schema import RawStructure
>>> s = RawStructure.model_validate({
...     "name": "User",
...     "fields": [
...         {"name": "id", "type": "i32"},
...         {"name": "external_id", "type": "Uuid", "try_from": "String", "rename": "ext_id"},
...     ],
... })
>>> [f.column_name for f in s.fields]
['id', 'ext_id']
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import SchemaError

__all__ = [
    "RawField",
    "RawStructure",
]


def _check_identifier(value: str, what: str) -> str:
    if not isinstance(value, str) or not value.isidentifier():
        raise SchemaError(f"{what} must be an identifier, got {value!r}")
    return value


class RawField(BaseModel):
    """
    One field of a target structure, as written in the schema.

    Attributes:
        name (str): Field identifier in the target structure.
        type (str): Declared type expression, e.g. ``"Option<String>"``.
        from_ (str | None): ``from`` directive: decode this type, then convert
            with a non-failing conversion. Serialized as ``from``.
        try_from (str | None): ``try_from`` directive: decode this type, then
            convert with a fallible conversion.
        rename (str | None): Column name override; defaults to `name`.
        doc (str | None): Passthrough documentation.
        visibility (str): Passthrough visibility marker.
        attrs (list[str]): Passthrough attributes, echoed verbatim.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    name: str
    type: str
    from_: str | None = Field(default=None, alias="from")
    try_from: str | None = None
    rename: str | None = None
    doc: str | None = None
    visibility: str = ""
    attrs: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name_is_identifier(cls, v: str) -> str:
        return _check_identifier(v, "field name")

    @field_validator("rename")
    @classmethod
    def _rename_not_empty(cls, v: str | None) -> str | None:
        if v is not None and v == "":
            raise SchemaError("rename must not be empty")
        return v

    @property
    def column_name(self) -> str:
        return self.rename if self.rename is not None else self.name


class RawStructure(BaseModel):
    """
    A target structure definition.

    Attributes:
        name (str): Structure identifier.
        visibility (str): Passthrough visibility marker.
        doc (str | None): Passthrough documentation.
        attrs (list[str]): Passthrough attributes.
        generics (list[str]): Declared generic parameter names, e.g. ``["T"]``.
        constraints (list[str]): Pre-existing constraint text, e.g. ``["T: Clone"]``.
        fields (list[RawField]): Fields in declaration order.

    Raises:
        pydantic.ValidationError: If a name is not an identifier or two fields
            share a name (inner cause is SchemaError).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    visibility: str = ""
    doc: str | None = None
    attrs: list[str] = Field(default_factory=list)
    generics: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    fields: list[RawField] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name_is_identifier(cls, v: str) -> str:
        return _check_identifier(v, "structure name")

    @field_validator("generics")
    @classmethod
    def _generics_are_identifiers(cls, v: list[str]) -> list[str]:
        for g in v:
            _check_identifier(g, "generic parameter")
        if len(set(v)) != len(v):
            raise SchemaError(f"duplicate generic parameters: {v!r}")
        return v

    @model_validator(mode="after")
    def _unique_field_names(self) -> RawStructure:
        seen: set[str] = set()
        for f in self.fields:
            if f.name in seen:
                raise SchemaError(f"duplicate field name {f.name!r} in {self.name!r}")
            seen.add(f.name)
        return self
