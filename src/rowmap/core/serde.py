"""
Canonical JSON serialization for mapped records.

Provides a single canonical JSON policy for printing records produced
by generated mappers. Values the stdlib encoder does not know (UUID, Decimal,
dates, bytes) are rendered through `to_jsonable` first. This module is zero-IO.

Notes:
    - Canonical JSON:
        - sort_keys=True
        - separators=(",", ":")
        - ensure_ascii=False
"""

from __future__ import annotations

import datetime as dt
import json
import uuid
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from decimal import Decimal
from typing import Any

__all__ = [
    "to_jsonable",
    "json_dumps_canonical",
]


def to_jsonable(obj: Any) -> Any:
    """
    Convert a mapped record (or value) into JSON-compatible Python objects.

    Args:
        obj (Any): dict, dataclass instance, pydantic model, or scalar.

    Returns:
        Any: Structure made of dict/list/str/int/float/bool/None.

    Notes:
        - UUID, Decimal and dates become strings (ISO 8601 for dates).
        - bytes become lowercase hex.
    """
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, (uuid.UUID, Decimal)):
        return str(obj)
    if isinstance(obj, (dt.date, dt.datetime)):
        return obj.isoformat()
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return bytes(obj).hex()
    if isinstance(obj, Mapping):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if is_dataclass(obj) and not isinstance(obj, type):
        return to_jsonable(asdict(obj))
    if hasattr(obj, "model_dump"):
        return to_jsonable(obj.model_dump())
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in obj]
    return str(obj)


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize a record to a canonical JSON string.

    Args:
        obj (Any): Record or value; passed through `to_jsonable` first.

    Returns:
        str: Canonical JSON string with sorted keys and compact separators.
    """
    return json.dumps(to_jsonable(obj), sort_keys=True, separators=(",", ":"), ensure_ascii=False)
