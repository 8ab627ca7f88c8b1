"""
Explicit capability registry for column-decodable types.

The compiler never assumes a type can be decoded, defaulted or converted: it
looks the capability up here by type identity (the rendered TypeExpr) and
raises MissingCapabilityError at compile time when a lookup fails. Registries
are plain objects passed to the compiler; there is no process-wide registry.

Generic rules (no registration needed)
- ``Option<T>`` is decodable when T is; a null column value decodes to None.
- ``Option<T>`` defaults to None.
- Every type converts from itself; ``Option<T>`` converts from T.
- Every non-failing conversion is also usable where a fallible one is required.

Built-in scalars (default_registry)
- Integers ``i8 i16 i32 i64 u8 u16 u32 u64`` (range-checked, bools rejected).
- ``f32 f64 bool char String Uuid Decimal NaiveDate NaiveDateTime Vec<u8>``.
- Lossless numeric widenings and ``char -> String`` as non-failing conversions.
- Narrowing integer conversions and ``String -> Uuid | Decimal | NaiveDate |
  NaiveDateTime`` as fallible conversions.

Examples
--------
>>> from rowmap.core.registry import default_registry
>>> from rowmap.core.typeexpr import parse_type
>>> reg = default_registry()
>>> reg.decoder_for(parse_type("Option<i32>"))(None) is None
True
>>> reg.default_for(parse_type("i64"))()
0
"""

from __future__ import annotations

import datetime as dt
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from .constraints import Constraint, ConstraintKind
from .errors import ColumnDecodeError
from .typeexpr import TypeExpr, parse_type

__all__ = [
    "Decoder",
    "Conversion",
    "FallibleConversion",
    "TypeRegistry",
    "default_registry",
]

Decoder = Callable[[Any], Any]
Conversion = Callable[[Any], Any]


@dataclass(frozen=True)
class FallibleConversion:
    """A conversion that may fail by raising one of `errors`."""

    fn: Conversion
    errors: tuple[type[BaseException], ...]


def _key(t: TypeExpr | str) -> str:
    return t.render() if isinstance(t, TypeExpr) else parse_type(t).render()


def _identity(v: Any) -> Any:
    return v


class TypeRegistry:
    """
    Capability table keyed by rendered type identity.

    Notes:
        - Decoders take a raw column value and return the decoded value or raise;
          any Exception counts as a decode failure.
        - Default factories take no arguments.
    """

    def __init__(self) -> None:
        self._decoders: dict[str, Decoder] = {}
        self._defaults: dict[str, Callable[[], Any]] = {}
        self._from: dict[tuple[str, str], Conversion] = {}
        self._try_from: dict[tuple[str, str], FallibleConversion] = {}

    # -- registration ------------------------------------------------------

    def register_decodable(self, type_: TypeExpr | str, decoder: Decoder) -> None:
        self._decoders[_key(type_)] = decoder

    def register_default(self, type_: TypeExpr | str, factory: Callable[[], Any]) -> None:
        self._defaults[_key(type_)] = factory

    def register_from(
        self, target: TypeExpr | str, source: TypeExpr | str, fn: Conversion
    ) -> None:
        self._from[(_key(target), _key(source))] = fn

    def register_try_from(
        self,
        target: TypeExpr | str,
        source: TypeExpr | str,
        fn: Conversion,
        errors: tuple[type[BaseException], ...] = (ValueError,),
    ) -> None:
        """
        Register a fallible conversion.

        Args:
            target: Declared type produced by the conversion.
            source: Decoded column type consumed by the conversion.
            fn: Conversion callable.
            errors: Exception types that signal a failed conversion. They must be
                Exception subclasses so MapperError can wrap and format them.

        Raises:
            TypeError: If an entry of `errors` is not an Exception subclass.
        """
        for e in errors:
            if not (isinstance(e, type) and issubclass(e, Exception)):
                raise TypeError(f"conversion error types must be Exception subclasses, got {e!r}")
        self._try_from[(_key(target), _key(source))] = FallibleConversion(fn, tuple(errors))

    def copy(self) -> TypeRegistry:
        """Independent registry holding the same entries."""
        other = TypeRegistry()
        other._decoders.update(self._decoders)
        other._defaults.update(self._defaults)
        other._from.update(self._from)
        other._try_from.update(self._try_from)
        return other

    # -- lookup ------------------------------------------------------------

    def decoder_for(self, t: TypeExpr) -> Decoder | None:
        found = self._decoders.get(t.render())
        if found is not None:
            return found
        inner = t.inner
        if inner is not None:
            inner_decoder = self.decoder_for(inner)
            if inner_decoder is None:
                return None

            def _decode_optional(v: Any) -> Any:
                return None if v is None else inner_decoder(v)

            return _decode_optional
        return None

    def default_for(self, t: TypeExpr) -> Callable[[], Any] | None:
        found = self._defaults.get(t.render())
        if found is not None:
            return found
        if t.is_optional_wrapper:
            return lambda: None
        return None

    def from_fn(self, target: TypeExpr, source: TypeExpr) -> Conversion | None:
        found = self._from.get((target.render(), source.render()))
        if found is not None:
            return found
        if target == source or (target.inner is not None and target.inner == source):
            return _identity
        return None

    def try_from_fn(self, target: TypeExpr, source: TypeExpr) -> FallibleConversion | None:
        found = self._try_from.get((target.render(), source.render()))
        if found is not None:
            return found
        infallible = self.from_fn(target, source)
        if infallible is not None:
            return FallibleConversion(infallible, ())
        return None

    def supports(self, c: Constraint) -> bool:
        """True when this registry satisfies constraint `c`."""
        if c.kind is ConstraintKind.DECODABLE:
            return self.decoder_for(c.subject) is not None
        if c.kind is ConstraintKind.DEFAULT:
            return self.default_for(c.subject) is not None
        if c.source is None:
            return False
        if c.kind is ConstraintKind.FROM:
            return self.from_fn(c.subject, c.source) is not None
        # TRY_FROM, ERROR_FROM and DISPLAY all hinge on the registered conversion:
        # registration guarantees its error types are Exception subclasses.
        return self.try_from_fn(c.subject, c.source) is not None


# ---------------------------------------------------------------------------
# Built-in scalars
# ---------------------------------------------------------------------------

_INT_BITS: dict[str, tuple[int, bool]] = {
    "i8": (8, True),
    "i16": (16, True),
    "i32": (32, True),
    "i64": (64, True),
    "u8": (8, False),
    "u16": (16, False),
    "u32": (32, False),
    "u64": (64, False),
}


def _int_range(name: str) -> tuple[int, int]:
    bits, signed = _INT_BITS[name]
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


def _int_decoder(name: str) -> Decoder:
    lo, hi = _int_range(name)

    def _decode(v: Any) -> int:
        if isinstance(v, bool) or not isinstance(v, int) or not lo <= v <= hi:
            raise ColumnDecodeError(name, v)
        return v

    return _decode


def _int_narrowing(name: str) -> Conversion:
    lo, hi = _int_range(name)

    def _convert(v: int) -> int:
        if not lo <= v <= hi:
            raise OverflowError(f"out of range integral type conversion attempted ({v} -> {name})")
        return v

    return _convert


def _int_widens(src: str, dst: str) -> bool:
    s_lo, s_hi = _int_range(src)
    d_lo, d_hi = _int_range(dst)
    return src != dst and d_lo <= s_lo and s_hi <= d_hi


def _decode_float(name: str) -> Decoder:
    def _decode(v: Any) -> float:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ColumnDecodeError(name, v)
        return float(v)

    return _decode


def _decode_instance(name: str, *types: type, exclude: tuple[type, ...] = ()) -> Decoder:
    def _decode(v: Any) -> Any:
        if not isinstance(v, types) or isinstance(v, exclude):
            raise ColumnDecodeError(name, v)
        return v

    return _decode


def _decode_char(v: Any) -> str:
    if not isinstance(v, str) or len(v) != 1:
        raise ColumnDecodeError("char", v)
    return v


def _decode_uuid(v: Any) -> uuid.UUID:
    if isinstance(v, uuid.UUID):
        return v
    if isinstance(v, (bytes, bytearray)) and len(v) == 16:
        return uuid.UUID(bytes=bytes(v))
    raise ColumnDecodeError("Uuid", v)


def _decode_bytes(v: Any) -> bytes:
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v)
    raise ColumnDecodeError("Vec<u8>", v)


def _decode_naive_datetime(v: Any) -> dt.datetime:
    if not isinstance(v, dt.datetime) or v.tzinfo is not None:
        raise ColumnDecodeError("NaiveDateTime", v)
    return v


def _naive_datetime_from_iso(s: str) -> dt.datetime:
    parsed = dt.datetime.fromisoformat(s)
    if parsed.tzinfo is not None:
        raise ValueError(f"expected a naive datetime, got offset {parsed.tzinfo}: {s!r}")
    return parsed


def default_registry() -> TypeRegistry:
    """
    Build a fresh registry pre-populated with the built-in scalar types.

    Returns:
        TypeRegistry: New, independent registry; callers may extend it.
    """
    reg = TypeRegistry()

    for name in _INT_BITS:
        reg.register_decodable(name, _int_decoder(name))
        reg.register_default(name, int)
    for src in _INT_BITS:
        for dst in _INT_BITS:
            if src == dst:
                continue
            if _int_widens(src, dst):
                reg.register_from(dst, src, int)
            else:
                reg.register_try_from(dst, src, _int_narrowing(dst), errors=(OverflowError,))

    for name in ("f32", "f64"):
        reg.register_decodable(name, _decode_float(name))
        reg.register_default(name, float)
    reg.register_from("f64", "f32", float)
    for src in ("i8", "i16", "u8", "u16"):
        reg.register_from("f32", src, float)
    for src in ("i8", "i16", "i32", "u8", "u16", "u32"):
        reg.register_from("f64", src, float)

    reg.register_decodable("bool", _decode_instance("bool", bool))
    reg.register_default("bool", bool)

    reg.register_decodable("char", _decode_char)
    reg.register_default("char", lambda: "\x00")

    reg.register_decodable("String", _decode_instance("String", str))
    reg.register_default("String", str)
    reg.register_from("String", "char", str)

    reg.register_decodable("Uuid", _decode_uuid)
    reg.register_default("Uuid", lambda: uuid.UUID(int=0))
    reg.register_try_from("Uuid", "String", uuid.UUID, errors=(ValueError,))

    reg.register_decodable("Decimal", _decode_instance("Decimal", Decimal))
    reg.register_default("Decimal", Decimal)
    reg.register_try_from("Decimal", "String", Decimal, errors=(InvalidOperation,))

    reg.register_decodable(
        "NaiveDate", _decode_instance("NaiveDate", dt.date, exclude=(dt.datetime,))
    )
    reg.register_default("NaiveDate", lambda: dt.date(1970, 1, 1))
    reg.register_try_from("NaiveDate", "String", dt.date.fromisoformat, errors=(ValueError,))

    reg.register_decodable("NaiveDateTime", _decode_naive_datetime)
    reg.register_default("NaiveDateTime", lambda: dt.datetime(1970, 1, 1))
    reg.register_try_from(
        "NaiveDateTime", "String", _naive_datetime_from_iso, errors=(ValueError,)
    )

    reg.register_decodable("Vec<u8>", _decode_bytes)
    reg.register_default("Vec<u8>", bytes)

    return reg
