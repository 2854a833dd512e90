"""Display helpers for document values shown on the dashboard."""

import json
import math
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from docscope.services.type_classifier import (
    MISSING,
    TypeTag,
    classify,
    geopoint_coords,
    reference_path,
)

_SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]


def _as_datetime(value: Any) -> datetime | date | None:
    if isinstance(value, (datetime, date)):
        return value
    for name in ("to_datetime", "as_datetime", "to_pydatetime", "to_date"):
        converter = getattr(value, name, None)
        if callable(converter):
            return converter()
    return None


def to_json_safe(value: Any) -> Any:
    """Reduce a decoded document value to something the JSON encoder accepts."""
    if value is MISSING:
        return None
    if isinstance(value, (str, bool, int, float)) or value is None:
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (list, tuple)):
        return [to_json_safe(v) for v in value]

    tag = classify(value)
    if tag == TypeTag.TIMESTAMP:
        return _as_datetime(value)
    if tag == TypeTag.REFERENCE:
        return {"path": reference_path(value)}
    if tag == TypeTag.GEOPOINT and not isinstance(value, Mapping):
        lat, lon = geopoint_coords(value)
        return {"latitude": lat, "longitude": lon}
    if isinstance(value, Mapping):
        return {str(k): to_json_safe(v) for k, v in value.items()}
    return str(value)


def format_field_value(value: Any, max_length: int = 50) -> str:
    tag = classify(value)
    if tag in (TypeTag.NULL, TypeTag.UNDEFINED):
        return "N/A"
    if tag == TypeTag.ARRAY:
        return f"[{len(value)} items]"
    if tag == TypeTag.TIMESTAMP:
        return _as_datetime(value).isoformat()
    if tag == TypeTag.GEOPOINT:
        lat, lon = geopoint_coords(value)
        return f"({lat}, {lon})"
    if tag == TypeTag.REFERENCE:
        return f"ref: {reference_path(value)}"
    if tag == TypeTag.MAP:
        return "{...}"

    if tag == TypeTag.BOOLEAN:
        text = "true" if value else "false"
    else:
        text = str(value)
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text


def estimate_document_size(data: dict[str, Any]) -> int:
    """Size in bytes of the compact UTF-8 JSON encoding."""
    encoded = json.dumps(to_json_safe(data), separators=(",", ":"), ensure_ascii=False, default=str)
    return len(encoded.encode("utf-8"))


def format_bytes(size: int) -> str:
    if size <= 0:
        return "0 B"
    i = min(int(math.floor(math.log(size) / math.log(1024))), len(_SIZE_UNITS) - 1)
    value = round(size / math.pow(1024, i), 1)
    return f"{value:g} {_SIZE_UNITS[i]}"


def is_system_collection(name: str) -> bool:
    """Application-level internal collections, named with a leading underscore.

    MongoDB's own `system.*` namespaces never reach this check: the store
    leaves them out of `list_collections`.
    """
    return name.startswith("_")


def sanitize_collection_name(name: str) -> str:
    # Leading underscores are reserved for system collections
    if name.startswith("_"):
        return name[1:]
    return name
