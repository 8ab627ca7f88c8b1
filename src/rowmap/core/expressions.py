"""
Per-field decoding expressions.

For every field the generator builds two callables over a row:

- ``total(row)``: used by ``from_row``; never raises.
- ``fallible(row)``: used by ``try_from_row``; shares the same policy.

Policy (identical for both)
1. Look the column up by exact, case-sensitive name.
2. Absent column -> fallback (None for optional wrappers, else the declared
   type's default value).
3. Present column -> decode the source type. Decode failure -> fallback.
4. ``from`` -> apply the non-failing conversion.
   ``try_from`` -> apply the fallible conversion; its failure -> fallback.

A decode or conversion failure is therefore indistinguishable from column
absence. The fallible procedure's error channel is never exercised by field
decoding; this mirrors the always-succeeding procedure on purpose and is kept
pending a decision on whether to propagate conversion failures.

Notes
- Rows are anything matching the Row protocol (see rowmap.io.rows for adapters).
- All lookups (decoder, default, conversion) are resolved once, at build time.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from .errors import MapperError, MissingCapabilityError
from .registry import TypeRegistry
from .spec import FieldSpec, SourceMode
from .typeexpr import TypeExpr

__all__ = [
    "Row",
    "MappingRow",
    "DECODE_FAILURES",
    "FieldExpressions",
    "build_field_expressions",
]

# Registered decoders and conversions are opaque callables: any Exception they
# raise means "cannot decode this value" and is absorbed into the fallback.
DECODE_FAILURES: tuple[type[BaseException], ...] = (Exception,)


@runtime_checkable
class Row(Protocol):
    """One row of tabular data: a column-name listing plus raw value access."""

    @property
    def columns(self) -> Sequence[str]: ...

    def get(self, name: str) -> Any: ...


class MappingRow:
    """Row over a plain mapping of column name to raw value."""

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data = data

    @property
    def columns(self) -> list[str]:
        return list(self._data.keys())

    def get(self, name: str) -> Any:
        return self._data[name]

    def __repr__(self) -> str:
        return f"MappingRow({dict(self._data)!r})"


@dataclass(frozen=True)
class FieldExpressions:
    """
    The two decoding expressions generated for one field.

    Attributes:
        field (FieldSpec): Field the expressions decode.
        total (Callable[[Row], Any]): Always-succeeding expression.
        fallible (Callable[[Row], Any]): Expression used by try_from_row.
    """

    field: FieldSpec
    total: Callable[[Row], Any]
    fallible: Callable[[Row], Any]

    def _render(self, decode_call: str) -> str:
        f = self.field
        fallback = "None" if f.is_optional_wrapper else f"default({f.declared_type})"
        value = f"{decode_call}(row[{f.column_name!r}], {f.source_type})"
        mode = f.source_mode
        if mode is SourceMode.CONVERT_FROM:
            value = f"from({f.declared_type}, {value})"
        elif mode is SourceMode.CONVERT_TRY_FROM:
            value = f"try_from({f.declared_type}, {value})"
        return (
            f"{f.name}={value} if {f.column_name!r} in row.columns else {fallback}"
            f"  # on failure: {fallback}"
        )

    def render_total(self) -> str:
        return self._render("decode")

    def render_fallible(self) -> str:
        return self._render("try_decode")


def _resolve(
    spec: FieldSpec, registry: TypeRegistry, declared: TypeExpr, source: TypeExpr
) -> tuple[Callable[[Any], Any], Callable[[], Any]]:
    decoder = registry.decoder_for(source)
    if decoder is None:
        raise MissingCapabilityError(f"{source}: Decodable", spec.name)

    if spec.is_optional_wrapper:
        fallback: Callable[[], Any] = lambda: None  # noqa: E731
    else:
        default = registry.default_for(declared)
        if default is None:
            raise MissingCapabilityError(f"{declared}: Default", spec.name)
        fallback = default

    mode = spec.source_mode
    if mode is SourceMode.DIRECT:
        return decoder, fallback

    if mode is SourceMode.CONVERT_FROM:
        convert = registry.from_fn(declared, source)
        if convert is None:
            raise MissingCapabilityError(f"{declared}: From<{source}>", spec.name)

        def _decode_from(v: Any) -> Any:
            return convert(decoder(v))

        return _decode_from, fallback

    fallible = registry.try_from_fn(declared, source)
    if fallible is None:
        raise MissingCapabilityError(f"{declared}: TryFrom<{source}>", spec.name)
    conv_errors = fallible.errors

    def _decode_try_from(v: Any) -> Any:
        decoded = decoder(v)
        try:
            return fallible.fn(decoded)
        except conv_errors as exc:
            raise MapperError.from_conversion(exc) from exc

    return _decode_try_from, fallback


def build_field_expressions(
    spec: FieldSpec,
    registry: TypeRegistry,
    bindings: dict[str, TypeExpr] | None = None,
) -> FieldExpressions:
    """
    Build the total and fallible expressions for one field.

    Args:
        spec (FieldSpec): Validated field.
        registry (TypeRegistry): Capability table used for decode/default/convert.
        bindings (dict[str, TypeExpr] | None): Generic parameter bindings applied
            to the declared and source types before lookup.

    Returns:
        FieldExpressions: Callables over a Row.

    Raises:
        MissingCapabilityError: If the registry lacks a required capability.
    """
    bindings = bindings or {}
    declared = spec.declared_type.substitute(bindings)
    source = spec.source_type.substitute(bindings)
    decode, fallback = _resolve(spec, registry, declared, source)
    column = spec.column_name

    def _total(row: Row) -> Any:
        if column not in row.columns:
            return fallback()
        try:
            return decode(row.get(column))
        except DECODE_FAILURES:
            return fallback()

    # Same absorption policy as _total: absence, decode and conversion failures
    # all collapse to the fallback value.
    def _fallible(row: Row) -> Any:
        if column not in row.columns:
            return fallback()
        try:
            return decode(row.get(column))
        except DECODE_FAILURES:
            return fallback()

    return FieldExpressions(field=spec, total=_total, fallible=_fallible)
