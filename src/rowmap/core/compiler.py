"""
Structure compiler: schema in, row mapper out.

compile_structure() orchestrates extraction, validation, constraint synthesis
and expression generation over every field of a RawStructure and assembles a
GeneratedMapper exposing the two procedures:

- ``from_row(row)``: always succeeds, built from the total expressions.
- ``try_from_row(row)``: may raise MapperError by signature, built from the
  fallible expressions; field-level failures are absorbed, so in practice only a
  failing `target` constructor surfaces here.

Compilation is all-or-nothing: the first unparsable type, conflicting directive
pair, or unsatisfied capability raises a SchemaError and no mapper is produced.

Responsibilities
- Run extraction + validation per field in declaration order (first failure wins).
- Merge the structure's declared constraints with synthesized ones (declared first).
- Check synthesized constraints against the TypeRegistry, after binding generics.
- Echo passthrough metadata (name, visibility, doc, attrs) into the output.

Examples
--------
>>> from rowmap.core.compiler import compile_structure
>>> from rowmap.core.schema import RawStructure
>>> s = RawStructure.model_validate({"name": "User", "fields": [
...     {"name": "id", "type": "i32"}, {"name": "name", "type": "Option<String>"}]})
>>> mapper = compile_structure(s)
>>> mapper.from_row({"id": 7})
{'id': 7, 'name': None}
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from .constraints import Constraint, ConstraintSet, DeclaredConstraint, synthesize_constraints
from .errors import MapperError, MissingCapabilityError, SchemaError
from .expressions import FieldExpressions, MappingRow, Row, build_field_expressions
from .registry import TypeRegistry, default_registry
from .schema import RawStructure
from .spec import StructureSpec, extract_structure
from .typeexpr import TypeExpr, parse_type

__all__ = [
    "GeneratedMapper",
    "compile_structure",
    "compile_spec",
]

logger = logging.getLogger(__name__)


def _as_row(row: Row | Mapping[str, Any]) -> Row:
    if isinstance(row, Mapping):
        return MappingRow(row)
    return row


@dataclass(frozen=True, eq=False)
class GeneratedMapper:
    """
    Compiled row mapper for one structure.

    Attributes:
        name (str): Structure name (echoed).
        visibility (str): Passthrough visibility marker.
        doc (str | None): Passthrough documentation.
        attrs (tuple[str, ...]): Passthrough attributes.
        generics (tuple[str, ...]): Declared generic parameters.
        type_args (dict[str, str]): Generic bindings used for decoding.
        spec (StructureSpec): Extracted field specifications.
        constraints (ConstraintSet): Declared + synthesized constraints.
        expressions (tuple[FieldExpressions, ...]): Per-field expressions.
        target (Callable[..., Any]): Constructor called with field keyword args.
    """

    name: str
    visibility: str
    doc: str | None
    attrs: tuple[str, ...]
    generics: tuple[str, ...]
    type_args: dict[str, str]
    spec: StructureSpec
    constraints: ConstraintSet
    expressions: tuple[FieldExpressions, ...]
    target: Callable[..., Any] = dict

    @property
    def field_names(self) -> list[str]:
        return [e.field.name for e in self.expressions]

    def from_row(self, row: Row | Mapping[str, Any]) -> Any:
        """Decode `row`; never raises for missing or undecodable columns."""
        r = _as_row(row)
        return self.target(**{e.field.name: e.total(r) for e in self.expressions})

    def try_from_row(self, row: Row | Mapping[str, Any]) -> Any:
        """
        Decode `row` through the fallible expressions.

        Raises:
            MapperError: If the target constructor rejects the decoded values.
                Field-level decode and conversion failures are absorbed into
                fallback values and never raised.
        """
        r = _as_row(row)
        values = {e.field.name: e.fallible(r) for e in self.expressions}
        try:
            return self.target(**values)
        except (TypeError, ValueError) as exc:
            raise MapperError(f"{self.name}: target rejected decoded row: {exc}") from exc

    def map_rows(
        self, rows: Iterable[Row | Mapping[str, Any]], *, fallible: bool = False
    ) -> Iterator[Any]:
        """Lazily decode many rows with from_row (or try_from_row when `fallible`)."""
        fn = self.try_from_row if fallible else self.from_row
        for row in rows:
            yield fn(row)

    def render(self) -> str:
        """Readable listing of both procedures with their applicability conditions."""
        generics = f"[{', '.join(self.generics)}]" if self.generics else ""
        where = self.constraints.render()
        lines: list[str] = []
        lines.extend(self.attrs)
        if self.doc:
            lines.append(f"# {self.doc}")
        header = f"{self.visibility + ' ' if self.visibility else ''}mapper {self.name}{generics}"
        lines.append(header)
        if where:
            lines.append("  where")
            lines.extend(f"    {c}," for c in where)
        lines.append(f"  def from_row(row) -> {self.name}:")
        lines.append(f"    return {self.name}(")
        lines.extend(f"      {e.render_total()}," for e in self.expressions)
        lines.append("    )")
        lines.append(f"  def try_from_row(row) -> Result[{self.name}, MapperError]:")
        lines.append(f"    return Ok({self.name}(")
        lines.extend(f"      {e.render_fallible()}," for e in self.expressions)
        lines.append("    ))")
        return "\n".join(lines)


def _bind_type_args(spec: StructureSpec, type_args: Mapping[str, str] | None) -> dict[str, TypeExpr]:
    bound: dict[str, TypeExpr] = {}
    for k, v in (type_args or {}).items():
        if k not in spec.generics:
            raise SchemaError(f"{k!r} is not a generic parameter of {spec.name!r}")
        bound[k] = parse_type(v)
    return bound


def _check_capabilities(
    synthesized: list[Constraint],
    registry: TypeRegistry,
    generics: tuple[str, ...],
    bindings: dict[str, TypeExpr],
) -> None:
    for c in synthesized:
        subject = c.subject.substitute(bindings)
        source = c.source.substitute(bindings) if c.source is not None else None
        unbound = (subject.names() | (source.names() if source else set())) & set(generics)
        unbound -= set(bindings)
        if unbound:
            raise MissingCapabilityError(
                f"{c.render()} (unbound generic parameter {sorted(unbound)[0]})", c.field
            )
        if not registry.supports(Constraint(c.kind, subject, source)):
            raise MissingCapabilityError(c.render(), c.field)


def compile_spec(
    spec: StructureSpec,
    *,
    registry: TypeRegistry | None = None,
    type_args: Mapping[str, str] | None = None,
    target: Callable[..., Any] | None = None,
    check_capabilities: bool = True,
) -> GeneratedMapper:
    """Compile an already extracted StructureSpec (see compile_structure)."""
    reg = registry if registry is not None else default_registry()
    bindings = _bind_type_args(spec, type_args)

    declared = ConstraintSet(DeclaredConstraint(t) for t in spec.constraints)
    synthesized = ConstraintSet()
    for f in spec.fields:
        synthesize_constraints(f, synthesized)
        logger.debug("%s.%s: mode=%s column=%r", spec.name, f.name, f.source_mode.value, f.column_name)
    merged = declared.union(synthesized)

    if check_capabilities:
        _check_capabilities(synthesized.synthesized(), reg, spec.generics, bindings)

    expressions = tuple(build_field_expressions(f, reg, bindings) for f in spec.fields)
    logger.debug(
        "compiled %s: %d fields, %d constraints", spec.name, len(expressions), len(merged)
    )
    return GeneratedMapper(
        name=spec.name,
        visibility=spec.visibility,
        doc=spec.doc,
        attrs=spec.attrs,
        generics=spec.generics,
        type_args={k: v.render() for k, v in bindings.items()},
        spec=spec,
        constraints=merged,
        expressions=expressions,
        target=target if target is not None else dict,
    )


def compile_structure(
    structure: RawStructure,
    *,
    registry: TypeRegistry | None = None,
    type_args: Mapping[str, str] | None = None,
    target: Callable[..., Any] | None = None,
    check_capabilities: bool = True,
) -> GeneratedMapper:
    """
    Compile a structure definition into a GeneratedMapper.

    Args:
        structure (RawStructure): Structure definition (optionally pre-passed
            through rowmap.core.optionalize).
        registry (TypeRegistry | None): Capability table; defaults to a fresh
            default_registry().
        type_args (Mapping[str, str] | None): Bindings for generic parameters,
            e.g. ``{"T": "i64"}``.
        target (Callable[..., Any] | None): Constructor receiving field keyword
            arguments; defaults to ``dict``.
        check_capabilities (bool): When False, skip the up-front registry check;
            missing capabilities then surface while building expressions.

    Returns:
        GeneratedMapper: Compiled mapper.

    Raises:
        UnparsableTypeError: A declared type or directive does not parse.
        ConflictingDirectivesError: A field has both `from` and `try_from`.
        MissingCapabilityError: A synthesized constraint is not satisfied.
    """
    logger.debug("compiling %s (%d fields)", structure.name, len(structure.fields))
    spec = extract_structure(structure)
    return compile_spec(
        spec,
        registry=registry,
        type_args=type_args,
        target=target,
        check_capabilities=check_capabilities,
    )
