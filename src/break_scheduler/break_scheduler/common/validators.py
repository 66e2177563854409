from __future__ import annotations

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_datetime


def require_positive_int(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if number <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return number


def optional_instant(value: Optional[str], zone: ZoneInfo, field_name: str = "at") -> Optional[datetime]:
    """Blank -> None (use the clock); otherwise an ISO-8601 instant in `zone`."""
    if value is None or not value.strip():
        return None
    try:
        return parse_iso_datetime(value.strip(), zone)
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO-8601 date/time, got {value!r}")
