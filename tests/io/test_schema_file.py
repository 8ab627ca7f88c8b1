from __future__ import annotations

from pathlib import Path

import pytest

from rowmap.core.errors import (
    ConflictingDirectivesError,
    MissingCapabilityError,
    UnparsableTypeError,
)
from rowmap.io.config import MapperSettings
from rowmap.io.errors import SchemaFileError
from rowmap.io.schema_file import compile_file, load_structures

SCHEMA = """
[[structures]]
name = "User"
doc = "Application user."

[[structures.fields]]
name = "id"
type = "i32"

[[structures.fields]]
name = "external_id"
type = "Uuid"
try_from = "String"
rename = "ext_id"

[[structures]]
name = "Boxed"
generics = ["T"]
constraints = ["T: Clone"]

[structures.type_args]
T = "i64"

[[structures.fields]]
name = "value"
type = "T"
"""


def _write(tmp: Path, content: str) -> Path:
    p = tmp / "schema.toml"
    p.write_text(content)
    return p


def test_load_structures(tmp_path: Path) -> None:
    structures = load_structures(_write(tmp_path, SCHEMA))
    assert [s.name for s in structures] == ["User", "Boxed"]
    user = structures[0]
    assert user.doc == "Application user."
    assert user.fields[1].try_from == "String"
    assert user.fields[1].column_name == "ext_id"


def test_compile_file(tmp_path: Path) -> None:
    mappers = compile_file(_write(tmp_path, SCHEMA))
    assert list(mappers) == ["User", "Boxed"]
    assert mappers["User"].from_row({"id": 3})["id"] == 3
    assert mappers["Boxed"].from_row({"value": 10}) == {"value": 10}
    assert mappers["Boxed"].constraints.render()[0] == "T: Clone"


def test_compile_file_with_optionalize(tmp_path: Path) -> None:
    plain = SCHEMA.replace('try_from = "String"\n', "")
    mappers = compile_file(_write(tmp_path, plain), MapperSettings(optionalize=True))
    assert mappers["User"].from_row({}) == {"id": None, "external_id": None}
    assert mappers["Boxed"].from_row({}) == {"value": None}


def test_optionalize_ignores_directives(tmp_path: Path) -> None:
    # Option<Uuid> has no fallible conversion from String in the default registry.
    with pytest.raises(MissingCapabilityError) as ei:
        compile_file(_write(tmp_path, SCHEMA), MapperSettings(optionalize=True))
    assert ei.value.field == "external_id"


def test_compile_errors_propagate(tmp_path: Path) -> None:
    conflicting = """
[[structures]]
name = "Bad"

[[structures.fields]]
name = "x"
type = "i64"
from = "i32"
try_from = "String"
"""
    with pytest.raises(ConflictingDirectivesError):
        compile_file(_write(tmp_path, conflicting))

    unparsable = conflicting.replace('from = "i32"\ntry_from = "String"', 'from = "i32<"')
    with pytest.raises(UnparsableTypeError):
        compile_file(_write(tmp_path, unparsable))


@pytest.mark.parametrize(
    "content",
    [
        "not = [valid",
        "title = 'no structures'",
        "[[structures]]\nname = 'S'\nunknown_key = 1\n",
        "[[structures]]\nname = 'S'\n[[structures.fields]]\nname = 'a'\ntype = 'i32'\n"
        "[[structures.fields]]\nname = 'a'\ntype = 'i64'\n",
        "[[structures]]\nname = 'S'\n[[structures]]\nname = 'S'\n",
    ],
)
def test_shape_errors(tmp_path: Path, content: str) -> None:
    with pytest.raises(SchemaFileError):
        compile_file(_write(tmp_path, content))


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SchemaFileError):
        load_structures(tmp_path / "nope.toml")
