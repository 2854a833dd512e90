"""Validation of user-supplied collection names, field names and query parameters."""

import logging
import re

from docscope.middleware.error_handler import ValidationError

logger = logging.getLogger(__name__)

# --- Constants ---

MAX_COLLECTION_NAME_LENGTH = 120
MAX_FIELD_NAME_LENGTH = 200

COLLECTION_NAME_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.\-]*$")
DIRECTIONS = ("asc", "desc")

# Invisible/control characters stripped before validation.
_DANGEROUS_CHARS_RE = re.compile(
    r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f"
    r"\u200b-\u200f\u2028-\u202f\u2060\ufeff]"
)


# --- Public API ---


def validate_collection_name(name: str) -> str:
    """Validate a collection (or dotted subcollection) name."""
    name = _strip_dangerous_chars(name).strip()
    if not name or len(name) > MAX_COLLECTION_NAME_LENGTH:
        raise ValidationError(f"Collection name must be 1-{MAX_COLLECTION_NAME_LENGTH} characters")
    if name.startswith("system."):
        logger.warning("Rejected system collection name: %r", name)
        raise ValidationError("System collections cannot be queried")
    if not COLLECTION_NAME_RE.match(name) or ".." in name or name.endswith("."):
        raise ValidationError(
            "Collection name may only contain letters, digits, underscores, hyphens and dots"
        )
    return name


def validate_field_name(name: str) -> str:
    """Validate a field name used for ordering."""
    name = _strip_dangerous_chars(name).strip()
    if not name or len(name) > MAX_FIELD_NAME_LENGTH:
        raise ValidationError(f"Field name must be 1-{MAX_FIELD_NAME_LENGTH} characters")
    if name.startswith("$"):
        logger.warning("Rejected operator-like field name: %r", name)
        raise ValidationError("Field name cannot start with '$'")
    return name


def validate_sample_size(value: int, maximum: int) -> int:
    if value < 1 or value > maximum:
        raise ValidationError(f"Sample size must be between 1 and {maximum}")
    return value


def validate_direction(value: str) -> str:
    value = value.lower().strip()
    if value not in DIRECTIONS:
        raise ValidationError("Direction must be 'asc' or 'desc'")
    return value


# --- Private helpers ---


def _strip_dangerous_chars(text: str) -> str:
    return _DANGEROUS_CHARS_RE.sub("", text)
