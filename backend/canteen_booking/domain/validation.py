import re
from datetime import date
from typing import Any

from ..models import ALLOWED_DURATIONS
from .errors import ValidationError

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_INT_RE = re.compile(r"^\d+$")


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def parse_positive_int(value: Any, field: str) -> int:
    if _is_missing(value):
        raise ValidationError(f"{field} is required", field=field)
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a positive integer", field=field)
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and _INT_RE.match(value.strip()):
        parsed = int(value.strip())
    else:
        raise ValidationError(f"{field} must be a positive integer", field=field)
    if parsed < 1:
        raise ValidationError(f"{field} must be a positive integer", field=field)
    return parsed


def parse_date(value: Any, field: str = "date") -> str:
    """Validate a `YYYY-MM-DD` string naming a real calendar date and return it unchanged."""
    if _is_missing(value):
        raise ValidationError(f"{field} is required", field=field)
    if not isinstance(value, str) or not DATE_RE.match(value):
        raise ValidationError(f"Invalid {field} format. Must be YYYY-MM-DD", field=field)
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid {field}", field=field) from exc
    return value


def parse_time(value: Any, field: str = "time") -> str:
    if _is_missing(value):
        raise ValidationError(f"{field} is required", field=field)
    if not isinstance(value, str) or not TIME_RE.match(value):
        raise ValidationError(f"Invalid {field} format. Must be HH:mm", field=field)
    return value


def parse_duration(value: Any, field: str = "duration") -> int:
    if _is_missing(value):
        raise ValidationError(f"{field} is required", field=field)
    if isinstance(value, int) and not isinstance(value, bool):
        parsed = value
    elif isinstance(value, str) and _INT_RE.match(value.strip()):
        parsed = int(value.strip())
    else:
        raise ValidationError(f"{field} must be 30 or 60", field=field)
    if parsed not in ALLOWED_DURATIONS:
        raise ValidationError(f"{field} must be 30 or 60", field=field)
    return parsed
