from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal
from typing import Any

import pytest

from rowmap.core.constraints import Constraint, ConstraintKind
from rowmap.core.errors import ColumnDecodeError
from rowmap.core.registry import TypeRegistry, default_registry
from rowmap.core.typeexpr import parse_type

T = parse_type


@pytest.mark.parametrize(
    "type_name,value",
    [
        ("i8", -128),
        ("i32", 7),
        ("u8", 255),
        ("u64", 2**64 - 1),
        ("f64", 1.5),
        ("f32", 2),
        ("bool", True),
        ("char", "x"),
        ("String", "hello"),
        ("Uuid", uuid.UUID(int=5)),
        ("Decimal", Decimal("1.25")),
        ("NaiveDate", dt.date(2024, 1, 2)),
        ("NaiveDateTime", dt.datetime(2024, 1, 2, 3, 4)),
        ("Vec<u8>", b"\x00\x01"),
    ],
)
def test_builtin_decoders_accept(type_name: str, value: Any) -> None:
    decoder = default_registry().decoder_for(T(type_name))
    assert decoder is not None
    assert decoder(value) == value


@pytest.mark.parametrize(
    "type_name,value",
    [
        ("i8", 128),
        ("u8", -1),
        ("i32", "7"),
        ("i32", True),
        ("i32", None),
        ("f64", "1.5"),
        ("bool", 1),
        ("char", "xy"),
        ("String", 3),
        ("Uuid", "not-a-uuid"),
        ("NaiveDate", dt.datetime(2024, 1, 2)),
        ("NaiveDateTime", dt.datetime(2024, 1, 2, tzinfo=dt.timezone.utc)),
        ("Vec<u8>", "bytes"),
    ],
)
def test_builtin_decoders_reject(type_name: str, value: Any) -> None:
    decoder = default_registry().decoder_for(T(type_name))
    assert decoder is not None
    with pytest.raises(ColumnDecodeError) as ei:
        decoder(value)
    assert ei.value.type_name == type_name
    assert ei.value.value == value


def test_optional_decoding_and_default_are_generic() -> None:
    reg = default_registry()
    dec = reg.decoder_for(T("Option<i32>"))
    assert dec is not None
    assert dec(None) is None
    assert dec(3) == 3
    with pytest.raises(ColumnDecodeError):
        dec("3")
    default = reg.default_for(T("Option<Uuid>"))
    assert default is not None and default() is None
    assert reg.decoder_for(T("Option<Unknown>")) is None


@pytest.mark.parametrize(
    "type_name,expected",
    [
        ("i32", 0),
        ("f64", 0.0),
        ("bool", False),
        ("String", ""),
        ("Uuid", uuid.UUID(int=0)),
        ("Decimal", Decimal(0)),
        ("Vec<u8>", b""),
        ("NaiveDate", dt.date(1970, 1, 1)),
    ],
)
def test_builtin_defaults(type_name: str, expected: Any) -> None:
    factory = default_registry().default_for(T(type_name))
    assert factory is not None
    assert factory() == expected


def test_conversions() -> None:
    reg = default_registry()
    assert reg.from_fn(T("i64"), T("i32")) is not None
    assert reg.from_fn(T("i32"), T("i64")) is None
    assert reg.from_fn(T("i32"), T("i32")) is not None
    assert reg.from_fn(T("Option<i32>"), T("i32")) is not None
    assert reg.from_fn(T("f64"), T("i64")) is None

    narrowing = reg.try_from_fn(T("i8"), T("i64"))
    assert narrowing is not None
    assert narrowing.fn(5) == 5
    with pytest.raises(narrowing.errors):
        narrowing.fn(1000)

    to_uuid = reg.try_from_fn(T("Uuid"), T("String"))
    assert to_uuid is not None
    assert to_uuid.fn("00000000-0000-0000-0000-000000000001") == uuid.UUID(int=1)
    with pytest.raises(to_uuid.errors):
        to_uuid.fn("garbage")

    to_datetime = reg.try_from_fn(T("NaiveDateTime"), T("String"))
    assert to_datetime is not None
    assert to_datetime.fn("2024-01-02T03:04:05") == dt.datetime(2024, 1, 2, 3, 4, 5)
    with pytest.raises(to_datetime.errors):
        to_datetime.fn("2024-01-02T03:04:05+02:00")

    # Infallible conversions satisfy fallible requirements.
    widened = reg.try_from_fn(T("i64"), T("i32"))
    assert widened is not None and widened.errors == ()


def test_supports_every_constraint_kind() -> None:
    reg = default_registry()
    uuid_t, string_t = T("Uuid"), T("String")
    for kind in (ConstraintKind.TRY_FROM, ConstraintKind.ERROR_FROM, ConstraintKind.DISPLAY):
        assert reg.supports(Constraint(kind, uuid_t, string_t))
    assert reg.supports(Constraint(ConstraintKind.DECODABLE, T("Option<String>")))
    assert reg.supports(Constraint(ConstraintKind.DEFAULT, T("i32")))
    assert not reg.supports(Constraint(ConstraintKind.DEFAULT, T("Money")))
    assert not reg.supports(Constraint(ConstraintKind.FROM, T("i32"), T("i64")))
    assert not reg.supports(Constraint(ConstraintKind.FROM, T("i32")))


def test_custom_registration_and_copy_isolation() -> None:
    base = default_registry()
    reg = base.copy()
    reg.register_decodable("Money", lambda v: round(float(v), 2))
    reg.register_default("Money", lambda: 0.0)
    assert reg.decoder_for(T("Money")) is not None
    assert base.decoder_for(T("Money")) is None
    with pytest.raises(TypeError):
        reg.register_try_from("Money", "String", float, errors=(int,))  # type: ignore[arg-type]


def test_registries_are_independent() -> None:
    a = default_registry()
    b = default_registry()
    a.register_decodable("Extra", lambda v: v)
    assert b.decoder_for(T("Extra")) is None
    assert isinstance(TypeRegistry().decoder_for(T("i32")), type(None))
