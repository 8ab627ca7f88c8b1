from __future__ import annotations

from pathlib import Path

import polars as pl
import pytest

from rowmap.core.compiler import compile_structure
from rowmap.core.schema import RawStructure
from rowmap.io.errors import DataLoadError
from rowmap.io.rows import frame_rows, map_frame, read_frame

USER = RawStructure.model_validate(
    {
        "name": "User",
        "fields": [
            {"name": "id", "type": "i32"},
            {"name": "name", "type": "Option<String>"},
            {"name": "score", "type": "f64"},
            {"name": "ext", "type": "Uuid", "try_from": "String"},
        ],
    }
)


def _frame() -> pl.DataFrame:
    return pl.DataFrame(
        {
            "id": [1, 2, None],
            "name": ["ada", None, "cy"],
            "ext": ["00000000-0000-0000-0000-000000000002", "bad", None],
        }
    )


def test_frame_rows_expose_columns() -> None:
    rows = list(frame_rows(_frame()))
    assert len(rows) == 3
    assert rows[0].columns == ["id", "name", "ext"]
    assert rows[1].get("name") is None


def test_map_frame_defaults_and_nulls() -> None:
    mapper = compile_structure(USER)
    out = map_frame(mapper, _frame())
    assert [r["id"] for r in out] == [1, 2, 0]
    assert [r["name"] for r in out] == ["ada", None, "cy"]
    # score column is absent everywhere
    assert [r["score"] for r in out] == [0.0, 0.0, 0.0]
    assert [str(r["ext"]) for r in out] == [
        "00000000-0000-0000-0000-000000000002",
        "00000000-0000-0000-0000-000000000000",
        "00000000-0000-0000-0000-000000000000",
    ]
    assert map_frame(mapper, _frame(), fallible=True) == out


def test_read_frame_csv_and_parquet(tmp_path: Path) -> None:
    df = _frame()
    csv_path = tmp_path / "users.csv"
    pq_path = tmp_path / "users.parquet"
    df.write_csv(csv_path)
    df.write_parquet(pq_path)

    assert read_frame(pq_path).equals(df)
    head = read_frame(csv_path, n_rows=1)
    assert head.height == 1
    assert head["id"].to_list() == [1]


def test_read_frame_errors(tmp_path: Path) -> None:
    with pytest.raises(DataLoadError):
        read_frame(tmp_path / "users.xlsx")
    with pytest.raises(DataLoadError):
        read_frame(tmp_path / "missing.csv")
