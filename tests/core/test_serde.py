from __future__ import annotations

import datetime as dt
import uuid
from dataclasses import dataclass
from decimal import Decimal

from rowmap.core.serde import json_dumps_canonical, to_jsonable


def test_canonical_json_is_sorted_and_compact() -> None:
    assert json_dumps_canonical({"b": 1, "a": None}) == '{"a":null,"b":1}'


def test_non_json_values_are_stringified() -> None:
    rec = {
        "id": uuid.UUID(int=1),
        "amount": Decimal("1.50"),
        "day": dt.date(2024, 5, 6),
        "raw": b"\x01\xff",
        "tags": ("x", "y"),
    }
    assert to_jsonable(rec) == {
        "id": "00000000-0000-0000-0000-000000000001",
        "amount": "1.50",
        "day": "2024-05-06",
        "raw": "01ff",
        "tags": ["x", "y"],
    }


def test_dataclass_records() -> None:
    @dataclass
    class P:
        x: int
        y: str | None

    assert json_dumps_canonical(P(1, None)) == '{"x":1,"y":null}'
