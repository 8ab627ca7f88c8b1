"""
Core exception types raised by type parsing, directive validation, and mapping.

Provides typed exceptions for core-domain failures:
- SchemaError for anything that stops a structure from compiling.
- UnparsableTypeError when a declared type or a from/try_from directive is not a
  valid type expression.
- ConflictingDirectivesError when a field carries both `from` and `try_from`.
- MissingCapabilityError when the type registry cannot satisfy a synthesized
  constraint (decode, convert, default).
- MapperError for row-level failures inside generated mappers.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - Compile-time errors are fatal to the whole structure; row-level errors are
      absorbed by the generated procedures (see rowmap.core.expressions).

Examples:
    Catch a directive conflict.

    >>> from rowmap.core.errors import ConflictingDirectivesError, SchemaError
    >>> err = ConflictingDirectivesError("id")
    >>> isinstance(err, SchemaError)
    True
    >>> "try_from" in str(err)
    True
"""

from __future__ import annotations

__all__ = [
    "SchemaError",
    "UnparsableTypeError",
    "DirectiveValidationError",
    "ConflictingDirectivesError",
    "MissingCapabilityError",
    "MapperError",
    "ColumnDecodeError",
]


class SchemaError(ValueError):
    """Schema-level failure; the structure does not compile."""


class UnparsableTypeError(SchemaError):
    """A type expression string could not be parsed."""

    def __init__(self, text: str, reason: str = "") -> None:
        self.text = text
        self.reason = reason
        msg = f"unparsable type expression {text!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class DirectiveValidationError(SchemaError):
    """A field's directive combination is not well formed."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"field {field!r}: {message}")


class ConflictingDirectivesError(DirectiveValidationError):
    """Both `from` and `try_from` were given for one field."""

    def __init__(self, field: str) -> None:
        super().__init__(field, "cannot specify both `from` and `try_from`")


class MissingCapabilityError(SchemaError):
    """The type registry has no entry satisfying a required constraint."""

    def __init__(self, constraint: str, field: str | None = None) -> None:
        self.constraint = constraint
        self.field = field
        where = f" (field {field!r})" if field else ""
        super().__init__(f"unsatisfied constraint `{constraint}`{where}")


class MapperError(Exception):
    """Runtime failure while mapping a row."""

    @classmethod
    def from_conversion(cls, exc: BaseException) -> MapperError:
        """Wrap a failed fallible conversion, keeping its message for diagnostics."""
        err = cls(f"conversion failed: {exc}")
        err.__cause__ = exc
        return err


class ColumnDecodeError(MapperError):
    """A column value could not be decoded as the requested type."""

    def __init__(self, type_name: str, value: object) -> None:
        self.type_name = type_name
        self.value = value
        super().__init__(f"cannot decode {value!r} as {type_name}")
