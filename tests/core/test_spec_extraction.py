from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from rowmap.core.errors import (
    ConflictingDirectivesError,
    DirectiveValidationError,
    SchemaError,
    UnparsableTypeError,
)
from rowmap.core.schema import RawField, RawStructure
from rowmap.core.spec import SourceMode, extract_field, extract_structure, validate_field
from rowmap.core.typeexpr import parse_type


def make_field(**kwargs: Any) -> RawField:
    base: dict[str, Any] = dict(name="value", type="i32")
    base.update(kwargs)
    return RawField.model_validate(base)


def test_direct_field_defaults() -> None:
    spec = extract_field(make_field())
    validate_field(spec)
    assert spec.source_mode is SourceMode.DIRECT
    assert spec.source_type == spec.declared_type == parse_type("i32")
    assert spec.column_name == "value"
    assert spec.is_optional_wrapper is False


def test_from_and_try_from_modes() -> None:
    f = extract_field(make_field(type="i64", **{"from": "i32"}))
    assert f.source_mode is SourceMode.CONVERT_FROM
    assert f.source_type == parse_type("i32")

    t = extract_field(make_field(type="Uuid", try_from="String"))
    assert t.source_mode is SourceMode.CONVERT_TRY_FROM
    assert t.source_type == parse_type("String")
    assert t.declared_type == parse_type("Uuid")


def test_rename_sets_column_name() -> None:
    spec = extract_field(make_field(rename="Value Column"))
    assert spec.name == "value"
    assert spec.column_name == "Value Column"


def test_optional_wrapper_detection() -> None:
    assert extract_field(make_field(type="Option<String>")).is_optional_wrapper
    assert not extract_field(make_field(type="std::option::Option<String>")).is_optional_wrapper


@pytest.mark.parametrize("directive", ["from", "try_from"])
def test_unparsable_directive(directive: str) -> None:
    with pytest.raises(UnparsableTypeError):
        extract_field(make_field(**{directive: "Vec<"}))


def test_unparsable_declared_type() -> None:
    with pytest.raises(UnparsableTypeError):
        extract_field(make_field(type="i32>"))


def test_conflicting_directives() -> None:
    spec = extract_field(make_field(type="i64", **{"from": "i32", "try_from": "String"}))
    with pytest.raises(ConflictingDirectivesError) as ei:
        validate_field(spec)
    assert isinstance(ei.value, DirectiveValidationError)
    assert isinstance(ei.value, SchemaError)
    assert ei.value.field == "value"
    # The derived mode refuses to pick one either.
    with pytest.raises(ConflictingDirectivesError):
        _ = spec.source_mode
    with pytest.raises(ConflictingDirectivesError):
        _ = spec.source_type


def test_structure_stops_at_first_failing_field() -> None:
    s = RawStructure.model_validate(
        {
            "name": "S",
            "fields": [
                {"name": "a", "type": "i32"},
                {"name": "b", "type": "i64", "from": "i32", "try_from": "String"},
                {"name": "c", "type": "i32", "from": "not a type"},
            ],
        }
    )
    # b fails validation before c is ever parsed.
    with pytest.raises(ConflictingDirectivesError) as ei:
        extract_structure(s)
    assert ei.value.field == "b"


def test_structure_preserves_order_and_metadata() -> None:
    s = RawStructure.model_validate(
        {
            "name": "Pair",
            "visibility": "pub",
            "doc": "Two values.",
            "attrs": ["#[allow(dead_code)]"],
            "generics": ["T"],
            "constraints": ["T: Clone"],
            "fields": [
                {"name": "z", "type": "T", "doc": "last letter"},
                {"name": "a", "type": "i32", "visibility": "pub"},
            ],
        }
    )
    spec = extract_structure(s)
    assert [f.name for f in spec.fields] == ["z", "a"]
    assert spec.generics == ("T",)
    assert spec.constraints == ("T: Clone",)
    assert spec.attrs == ("#[allow(dead_code)]",)
    assert spec.fields[0].doc == "last letter"
    assert spec.fields[1].visibility == "pub"


def test_duplicate_field_names_rejected() -> None:
    with pytest.raises(ValidationError) as ei:
        RawStructure.model_validate(
            {"name": "S", "fields": [{"name": "a", "type": "i32"}, {"name": "a", "type": "i64"}]}
        )
    assert "duplicate field name" in str(ei.value)


@pytest.mark.parametrize("bad", ["", "1a", "has space", "a-b"])
def test_field_name_must_be_identifier(bad: str) -> None:
    with pytest.raises(ValidationError):
        make_field(name=bad)


def test_unknown_directive_rejected() -> None:
    with pytest.raises(ValidationError):
        make_field(raname="typo")
