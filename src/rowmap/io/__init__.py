"""
rowmap.io — file and DataFrame boundary for rowmap.

## Responsibilities
- Load structure definitions from TOML schema files.
- Adapt Polars DataFrames (and CSV/Parquet/NDJSON files) to the core Row protocol.
- Carry runtime settings (env > TOML > defaults).

## Public API
- MapperSettings — configuration for the pre-pass, capability checks and CLI.
- load_structures / compile_file — schema files to RawStructure / GeneratedMapper.
- frame_rows / read_frame / map_frame — DataFrame row adapters.

## Import DAG discipline
- Depends on stdlib, polars, pydantic and rowmap.core.*.
- rowmap.core never imports rowmap.io.

## Examples
```python
import polars as pl
from rowmap.io import compile_file, map_frame

mappers = compile_file("schema.toml")  # doctest: +SKIP
df = pl.DataFrame({"id": [1, 2], "name": ["a", None]})
map_frame(mappers["User"], df)  # doctest: +SKIP
```
"""

from __future__ import annotations

from .config import MapperSettings
from .errors import DataLoadError, RowMapConfigError, RowMapIoError, SchemaFileError
from .rows import MappingRow, frame_rows, map_frame, read_frame
from .schema_file import compile_file, load_structures

__all__ = [
    "MapperSettings",
    "DataLoadError",
    "RowMapConfigError",
    "RowMapIoError",
    "SchemaFileError",
    "MappingRow",
    "frame_rows",
    "map_frame",
    "read_frame",
    "compile_file",
    "load_structures",
]
