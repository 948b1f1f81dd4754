"""Conversion of claim-core results into plain JSON data for the desks."""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel

__all__ = ["convert_to_json_safe"]

JsonValue = Union[None, str, int, float, bool, dict[str, "JsonValue"], list["JsonValue"]]


def convert_to_json_safe(data: Any) -> JsonValue:
    """Recursively turn *data* into values ``json.dumps`` accepts unchanged.

    - money (``Decimal``) becomes its exact string, e.g. ``"7500.00"``;
    - ``datetime`` / ``date`` become ISO-8601 strings;
    - enum members collapse to their value (``StatusId.APPROVED`` -> ``4``);
    - models are dumped field by field, display fields included;
    - tuples, lists and sets become lists (sets sorted for stable output);
    - non-finite floats become ``None``.

    Anything else is rendered with ``str()``.
    """
    if isinstance(data, Enum):
        return convert_to_json_safe(data.value)

    if data is None or isinstance(data, (bool, str)):
        return data

    if isinstance(data, int):
        return data

    if isinstance(data, float):
        return data if math.isfinite(data) else None

    if isinstance(data, Decimal):
        return str(data)

    # datetime before date: every datetime is also a date.
    if isinstance(data, datetime):
        return data.isoformat()
    if isinstance(data, date):
        return data.isoformat()

    if isinstance(data, BaseModel):
        return convert_to_json_safe(data.model_dump())

    if isinstance(data, dict):
        return {str(key): convert_to_json_safe(value) for key, value in data.items()}

    if isinstance(data, (set, frozenset)):
        return [convert_to_json_safe(item) for item in sorted(data, key=str)]

    if isinstance(data, (list, tuple)):
        return [convert_to_json_safe(item) for item in data]

    return str(data)
