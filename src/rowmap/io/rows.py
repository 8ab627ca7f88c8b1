"""
Row adapters over Polars DataFrames and data files.

Overview
- frame_rows(): iterate a DataFrame as Row objects (column list + value access).
- read_frame(): load CSV / Parquet / NDJSON / JSON into a DataFrame.
- map_frame(): run a GeneratedMapper over every row of a DataFrame.

Notes
- Column presence is the DataFrame's column list, matched case-sensitively; a
  null cell is a present column whose value decodes as None (so only
  ``Option<...>`` fields keep it, other fields fall back to their default).
- Depends on stdlib, polars, and rowmap.core.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import polars as pl

from rowmap.core.compiler import GeneratedMapper
from rowmap.core.expressions import MappingRow

from .errors import DataLoadError

__all__ = [
    "MappingRow",
    "frame_rows",
    "read_frame",
    "map_frame",
]

_READERS = {
    ".csv": pl.read_csv,
    ".parquet": pl.read_parquet,
    ".ndjson": pl.read_ndjson,
    ".jsonl": pl.read_ndjson,
    ".json": pl.read_json,
}


def frame_rows(df: pl.DataFrame) -> Iterator[MappingRow]:
    """
    Yield each DataFrame row as a MappingRow.

    Args:
        df (pl.DataFrame): Source frame.

    Returns:
        Iterator[MappingRow]: One row per frame row, in order.
    """
    for named in df.iter_rows(named=True):
        yield MappingRow(named)


def read_frame(path: str | os.PathLike[str], n_rows: int | None = None) -> pl.DataFrame:
    """
    Read a data file into a DataFrame, dispatching on the file suffix.

    Args:
        path: Data file (.csv, .parquet, .ndjson/.jsonl, .json).
        n_rows: Optional cap applied after reading.

    Raises:
        DataLoadError: Unknown suffix, missing file, or reader failure.
    """
    p = Path(path)
    reader = _READERS.get(p.suffix.lower())
    if reader is None:
        raise DataLoadError(f"unsupported data file type {p.suffix!r} ({p})")
    if not p.exists():
        raise DataLoadError(f"data file not found: {p}")
    try:
        df = reader(p)
    except (pl.exceptions.PolarsError, OSError, ValueError) as exc:
        raise DataLoadError(f"failed to read {p}: {exc}") from exc
    if n_rows is not None:
        df = df.head(n_rows)
    return df


def map_frame(mapper: GeneratedMapper, df: pl.DataFrame, *, fallible: bool = False) -> list[Any]:
    """
    Decode every row of `df` with `mapper`.

    Args:
        mapper (GeneratedMapper): Compiled mapper.
        df (pl.DataFrame): Source frame.
        fallible (bool): Use try_from_row instead of from_row.

    Returns:
        list[Any]: One decoded record per row.
    """
    return list(mapper.map_rows(frame_rows(df), fallible=fallible))
