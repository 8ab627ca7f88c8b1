"""
Capability requirements gathered while compiling a structure.

Each field contributes Constraint values describing what the generated
procedures need from the type registry (decode a column, convert, produce a
default). The structure's own pre-existing constraints are carried as opaque
DeclaredConstraint text and only echoed.

Synthesis rules (per field)
- Always: the source type (declared type, or the directive's type) is decodable.
- ``from = S``: the declared type is constructible from S.
- ``try_from = S``: the declared type is fallibly constructible from S; the
  mapper error is constructible from the conversion failure; the failure is
  formattable.
- Not an optional wrapper: the declared type has a default value.

Notes
- ConstraintSet is order- and duplicate-insensitive for meaning; insertion order
  is preserved for stable output and duplicates are kept, not removed.
- Zero-IO, stdlib only.

Examples
--------
>>> from rowmap.core.constraints import ConstraintSet, synthesize_constraints
>>> from rowmap.core.schema import RawField
>>> from rowmap.core.spec import extract_field
>>> cs = ConstraintSet()
>>> synthesize_constraints(extract_field(RawField(name="id", type="i32")), cs)
>>> [c.render() for c in cs]
['i32: Decodable', 'i32: Default']
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from .spec import FieldSpec, SourceMode
from .typeexpr import TypeExpr

__all__ = [
    "ConstraintKind",
    "Constraint",
    "DeclaredConstraint",
    "ConstraintSet",
    "synthesize_constraints",
]


class ConstraintKind(str, Enum):
    DECODABLE = "decodable"
    FROM = "from"
    TRY_FROM = "try_from"
    ERROR_FROM = "error_from"
    DISPLAY = "display"
    DEFAULT = "default"


@dataclass(frozen=True)
class Constraint:
    """
    One synthesized capability requirement.

    Attributes:
        kind (ConstraintKind): Capability required.
        subject (TypeExpr): Type the capability is required of.
        source (TypeExpr | None): Conversion source for from/try_from kinds.
        field (str | None): Field that introduced the requirement (diagnostics only;
            ignored for equality).
    """

    kind: ConstraintKind
    subject: TypeExpr
    source: TypeExpr | None = None
    field: str | None = None

    def _key(self) -> tuple[ConstraintKind, str, str | None]:
        return (self.kind, self.subject.render(), self.source.render() if self.source else None)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Constraint):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def render(self) -> str:
        s = self.subject.render()
        src = self.source.render() if self.source is not None else ""
        if self.kind is ConstraintKind.DECODABLE:
            return f"{s}: Decodable"
        if self.kind is ConstraintKind.FROM:
            return f"{s}: From<{src}>"
        if self.kind is ConstraintKind.TRY_FROM:
            return f"{s}: TryFrom<{src}>"
        if self.kind is ConstraintKind.ERROR_FROM:
            return f"MapperError: From<TryFrom<{src}, {s}>.Error>"
        if self.kind is ConstraintKind.DISPLAY:
            return f"TryFrom<{src}, {s}>.Error: Display"
        return f"{s}: Default"


@dataclass(frozen=True)
class DeclaredConstraint:
    """Pre-existing constraint text from the structure definition (opaque)."""

    text: str

    def render(self) -> str:
        return self.text


AnyConstraint = Constraint | DeclaredConstraint


class ConstraintSet:
    """Insertion-ordered collection of constraints; duplicates are harmless."""

    def __init__(self, items: Iterable[AnyConstraint] = ()) -> None:
        self._items: list[AnyConstraint] = list(items)

    def add(self, c: AnyConstraint) -> None:
        self._items.append(c)

    def extend(self, items: Iterable[AnyConstraint]) -> None:
        self._items.extend(items)

    def union(self, other: ConstraintSet) -> ConstraintSet:
        """New set holding this set's items first, then `other`'s."""
        return ConstraintSet([*self._items, *other._items])

    def synthesized(self) -> list[Constraint]:
        """Distinct synthesized constraints in first-seen order."""
        seen: set[Constraint] = set()
        out: list[Constraint] = []
        for c in self._items:
            if isinstance(c, Constraint) and c not in seen:
                seen.add(c)
                out.append(c)
        return out

    def render(self) -> list[str]:
        """Distinct rendered constraints in first-seen order."""
        out: list[str] = []
        for c in self._items:
            r = c.render()
            if r not in out:
                out.append(r)
        return out

    def __iter__(self) -> Iterator[AnyConstraint]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, c: object) -> bool:
        return c in self._items

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConstraintSet):
            return NotImplemented
        return set(self._items) == set(other._items)

    def __repr__(self) -> str:
        return f"ConstraintSet({self.render()!r})"


def synthesize_constraints(spec: FieldSpec, out: ConstraintSet) -> None:
    """
    Append the requirements `spec` imposes to `out`.

    Args:
        spec (FieldSpec): Validated field.
        out (ConstraintSet): Caller-owned accumulator.
    """
    declared = spec.declared_type
    source = spec.source_type
    mode = spec.source_mode

    out.add(Constraint(ConstraintKind.DECODABLE, source, field=spec.name))
    if mode is SourceMode.CONVERT_FROM:
        out.add(Constraint(ConstraintKind.FROM, declared, source, field=spec.name))
    elif mode is SourceMode.CONVERT_TRY_FROM:
        out.add(Constraint(ConstraintKind.TRY_FROM, declared, source, field=spec.name))
        out.add(Constraint(ConstraintKind.ERROR_FROM, declared, source, field=spec.name))
        out.add(Constraint(ConstraintKind.DISPLAY, declared, source, field=spec.name))
    if not spec.is_optional_wrapper:
        out.add(Constraint(ConstraintKind.DEFAULT, declared, field=spec.name))
