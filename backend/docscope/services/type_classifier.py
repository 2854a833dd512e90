"""Map decoded document values onto a closed set of base types."""

import json
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from bson import DBRef


class _Missing:
    """Marks a field absent from a document (as opposed to an explicit null)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


class TypeTag(str, Enum):
    NULL = "null"
    UNDEFINED = "undefined"
    ARRAY = "array"
    TIMESTAMP = "timestamp"
    GEOPOINT = "geopoint"
    REFERENCE = "reference"
    MAP = "map"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    UNKNOWN = "unknown"


PRIMITIVE_TAGS = frozenset({TypeTag.STRING, TypeTag.NUMBER, TypeTag.BOOLEAN})

# Method names that convert a driver-specific time value to a datetime.
_DATE_CONVERTERS = ("to_datetime", "as_datetime", "to_pydatetime", "to_date")


def _has(value: Any, *names: str) -> bool:
    if isinstance(value, Mapping):
        return all(n in value for n in names)
    return all(hasattr(value, n) for n in names)


def is_null(value: Any) -> bool:
    return value is None or value is MISSING


def classify(value: Any) -> TypeTag:
    if value is None:
        return TypeTag.NULL
    if value is MISSING:
        return TypeTag.UNDEFINED

    if isinstance(value, (list, tuple)):
        return TypeTag.ARRAY

    if isinstance(value, (datetime, date)):
        return TypeTag.TIMESTAMP

    if isinstance(value, str):
        return TypeTag.STRING
    if isinstance(value, bool):
        return TypeTag.BOOLEAN
    if isinstance(value, (int, float, Decimal)):
        return TypeTag.NUMBER

    if isinstance(value, DBRef):
        return TypeTag.REFERENCE

    if any(callable(getattr(value, name, None)) for name in _DATE_CONVERTERS):
        return TypeTag.TIMESTAMP
    if _has(value, "latitude", "longitude"):
        return TypeTag.GEOPOINT
    if _has(value, "path", "id"):
        return TypeTag.REFERENCE
    if isinstance(value, Mapping):
        return TypeTag.MAP
    return TypeTag.UNKNOWN


def _get(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(name)
    return getattr(value, name, None)


def reference_path(value: Any) -> str:
    """Slash-separated path of a reference value, target collection first."""
    if isinstance(value, DBRef):
        return f"{value.collection}/{value.id}"
    return str(_get(value, "path"))


def geopoint_coords(value: Any) -> tuple[Any, Any]:
    return _get(value, "latitude"), _get(value, "longitude")


def canonical_key(value: Any) -> Any:
    """Hashable identity for distinct counting: primitives by value, the rest by serialization."""
    tag = classify(value)
    if tag in PRIMITIVE_TAGS:
        return tag, value
    try:
        return tag, json.dumps(value, sort_keys=True, default=str)
    except (TypeError, ValueError):
        return tag, repr(value)
