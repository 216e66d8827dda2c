#!/usr/bin/env python3
"""
Input validation and sanitizing helpers shared by the resource services.
"""

import html
import re
import secrets
import string
import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple, Union
from urllib.parse import urlparse

from dateutil import parser as dtparse

from .exceptions import ValidationError

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
LICENSE_KEY_PATTERN = re.compile(r"^[A-Z0-9]{32}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

LICENSE_KEY_ALPHABET = string.ascii_uppercase + string.digits
LICENSE_KEY_LENGTH = 32

VALID_CURRENCIES = frozenset({"USD", "EUR", "GBP", "CAD", "AUD", "JPY", "CHF", "CNY"})

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

Number = Union[int, float]


def is_valid_uuid(value: str) -> bool:
    return isinstance(value, str) and bool(UUID_PATTERN.match(value))


def is_valid_license_key(value: str) -> bool:
    """Check for exactly 32 uppercase letters or digits."""
    return isinstance(value, str) and bool(LICENSE_KEY_PATTERN.fullmatch(value))


def is_valid_email(value: str) -> bool:
    return isinstance(value, str) and bool(EMAIL_PATTERN.match(value))


def is_valid_url(value: str) -> bool:
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_valid_currency(value: str) -> bool:
    return isinstance(value, str) and value.upper() in VALID_CURRENCIES


def require_not_empty(value: Optional[str], field_name: str) -> str:
    """Return ``value`` or raise if it is missing or blank.

    Raises:
        ValidationError: If value is None or whitespace only
    """
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} cannot be empty")
    return value


def require_positive(value: Any, field_name: str) -> Number:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return value


def require_range(value: Number, minimum: Number, maximum: Number, field_name: str) -> Number:
    if value < minimum or value > maximum:
        raise ValidationError(f"{field_name} must be between {minimum} and {maximum}")
    return value


def require_uuid(value: Optional[str], field_name: str) -> str:
    """Validate an identifier is present and UUID shaped.

    Raises:
        ValidationError: If the identifier is empty or malformed
    """
    require_not_empty(value, field_name)
    if not is_valid_uuid(value):  # type: ignore[arg-type]
        raise ValidationError(f"Invalid {field_name} format")
    return value  # type: ignore[return-value]


def validate_pagination(
    page: Optional[int] = None, limit: Optional[int] = None
) -> Tuple[int, int]:
    """Clamp pagination to page >= 1 and 1 <= limit <= 100."""
    page = max(page if page is not None else DEFAULT_PAGE, 1)
    limit = min(max(limit if limit is not None else DEFAULT_LIMIT, 1), MAX_LIMIT)
    return page, limit


def _to_datetime(value: Union[str, datetime], field_name: str) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = dtparse.isoparse(value)
        except (ValueError, TypeError) as e:
            raise ValidationError(f"Invalid {field_name}: {value}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def validate_date_range(
    start_date: Union[str, datetime], end_date: Union[str, datetime]
) -> None:
    """Raise unless ``start_date`` is on or before ``end_date``."""
    start = _to_datetime(start_date, "start_date")
    end = _to_datetime(end_date, "end_date")
    if start > end:
        raise ValidationError("Start date must be before or equal to end date")


def sanitize_input(value: str) -> str:
    """HTML-escape a string, quotes included."""
    return html.escape(value, quote=True)


def sanitize_metadata(metadata: Any) -> Any:
    """Escape every string leaf of a metadata structure.

    Mappings and lists are walked recursively; other values pass through.
    """
    if isinstance(metadata, str):
        return sanitize_input(metadata)
    if isinstance(metadata, dict):
        return {key: sanitize_metadata(value) for key, value in metadata.items()}
    if isinstance(metadata, (list, tuple)):
        return [sanitize_metadata(item) for item in metadata]
    return metadata


def generate_license_key() -> str:
    return "".join(secrets.choice(LICENSE_KEY_ALPHABET) for _ in range(LICENSE_KEY_LENGTH))


def generate_uuid() -> str:
    return str(uuid.uuid4())


def missing_items(required: List[str], present: List[str]) -> List[str]:
    """Items of ``required`` not found in ``present``, in order."""
    return [item for item in required if item not in present]
