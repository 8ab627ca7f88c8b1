"""
Optional-wrapping pre-pass over a structure definition.

When enabled, every field whose declared type is not already an optional
wrapper is rewritten to ``Option<declared>`` before the structure reaches the
compiler. The pass is structure-wide and knows nothing about per-field
directives; directives and passthrough metadata are carried over untouched.

Notes
- Idempotent: already-optional fields are left as written.
- Returns a new RawStructure; the input is never mutated.
- A declared type that does not parse is left for the compiler to report.

Examples
--------
>>> from rowmap.core.optionalize import optionalize
>>> from rowmap.core.schema import RawStructure
>>> s = RawStructure.model_validate({"name": "S", "fields": [
...     {"name": "a", "type": "i32"}, {"name": "b", "type": "Option<bool>"}]})
>>> [f.type for f in optionalize(s, True).fields]
['Option<i32>', 'Option<bool>']
"""

from __future__ import annotations

from .errors import UnparsableTypeError
from .schema import RawField, RawStructure
from .typeexpr import parse_type

__all__ = ["optionalize", "optionalize_field"]


def optionalize_field(raw: RawField) -> RawField:
    """Wrap a single field's declared type in ``Option<...>`` unless it already is."""
    try:
        declared = parse_type(raw.type)
    except UnparsableTypeError:
        return raw
    if declared.is_optional_wrapper:
        return raw
    return raw.model_copy(update={"type": declared.wrap_optional().render()})


def optionalize(structure: RawStructure, enabled: bool) -> RawStructure:
    """
    Apply the optional-wrapping pre-pass.

    Args:
        structure (RawStructure): Structure definition.
        enabled (bool): Activation flag; when False the input is returned as is.

    Returns:
        RawStructure: Structure with every non-optional field wrapped.
    """
    if not enabled:
        return structure
    return structure.model_copy(
        update={"fields": [optionalize_field(f) for f in structure.fields]}
    )
