"""Canonical text and JSON forms of decoded values.

The text form is what the table shows and what search patterns are matched
against; the JSON form is what the JSON renderers emit.
"""

import math
import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from avro_explorer.values import (
    ABSENT,
    Duration,
    EnumValue,
    FixedValue,
    RecordValue,
    UnionValue,
)

NULL = "null"
NA = "N/A"


def _join_bytes(data: bytes) -> str:
    return ", ".join(str(b) for b in data)


def _duration_text(d: Duration) -> str:
    seconds = Decimal(d.millis) / 1000
    return f"P{d.months}M{d.days}DT{seconds}S"


def to_text(value: Any, absent: str = NA) -> str:
    """Render ``value`` as the single-line text used in tables and searches."""
    if value is ABSENT:
        return absent
    if value is None:
        return NULL
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, str)):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, (bytes, bytearray)):
        return _join_bytes(value)
    if isinstance(value, FixedValue):
        return _join_bytes(value.data)
    if isinstance(value, EnumValue):
        return value.symbol
    if isinstance(value, UnionValue):
        return to_text(value.value)
    if isinstance(value, RecordValue):
        return ", ".join(f"{k}: {to_text(v)}" for k, v in value.fields.items())
    if isinstance(value, dict):
        return ", ".join(f"{k}: {to_text(v)}" for k, v in value.items())
    if isinstance(value, list):
        return ", ".join(to_text(v) for v in value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Duration):
        return _duration_text(value)
    raise TypeError(f"Cannot render value of type {type(value).__name__}")


def to_json(value: Any) -> Any:
    """Convert ``value`` into plain JSON-serializable Python objects.

    Bytes and fixed values become lists of integers; logical types become
    their canonical text. Non-finite floats become ``None``.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, (bytes, bytearray)):
        return list(value)
    if isinstance(value, FixedValue):
        return list(value.data)
    if isinstance(value, EnumValue):
        return value.symbol
    if isinstance(value, UnionValue):
        return to_json(value.value)
    if isinstance(value, RecordValue):
        return {k: to_json(v) for k, v in value.fields.items()}
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_json(v) for v in value]
    return to_text(value)
