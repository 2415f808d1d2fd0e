"""
Tagged JSON codec for document bodies.

Timestamps do not survive a plain JSON round trip, so every datetime leaf is
written as {"__datatype__": "timestamp", "value": "<ISO-8601>"}. The same
shape is used on disk (documents.data) and in backup files, which keeps
existing backups readable.

deserialize_value(serialize_value(x)) == x holds for trees whose datetimes
are timezone-aware with millisecond precision. Naive datetimes are written
as UTC and therefore come back aware.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from .time_utils import parse_iso_datetime, to_utc_z

DATATYPE_KEY = "__datatype__"
TIMESTAMP_TAG = "timestamp"


def is_timestamp_tag(value: Any) -> bool:
    return isinstance(value, dict) and value.get(DATATYPE_KEY) == TIMESTAMP_TAG


def serialize_value(value: Any) -> Any:
    """Walk a value tree, replacing datetimes with tagged timestamps."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return {DATATYPE_KEY: TIMESTAMP_TAG, "value": to_utc_z(value)}
    if isinstance(value, (list, tuple)):
        return [serialize_value(item) for item in value]
    if isinstance(value, dict):
        return {key: serialize_value(item) for key, item in value.items()}
    return value


def deserialize_value(value: Any, drop_fields: Iterable[str] = ()) -> Any:
    """
    Reverse serialize_value.

    drop_fields names keys removed from every object in the tree; restore
    uses it to strip fields that are no longer part of the schema.
    """
    drop = frozenset(drop_fields)
    return _deserialize(value, drop)


def _deserialize(value: Any, drop: frozenset[str]) -> Any:
    if value is None:
        return None
    if isinstance(value, list):
        return [_deserialize(item, drop) for item in value]
    if is_timestamp_tag(value):
        return parse_iso_datetime(value.get("value"))
    if isinstance(value, dict):
        return {
            key: _deserialize(item, drop)
            for key, item in value.items()
            if key not in drop
        }
    return value
