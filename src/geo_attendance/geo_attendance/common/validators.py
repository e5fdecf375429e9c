from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.exceptions import ValidationError


def require_positive(value: float, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number") from None
    if number <= 0:
        raise ValidationError(f"{field_name} must be greater than zero")
    return number


def require_between(value: float, field_name: str, low: float, high: float) -> float:
    number = require_positive(value, field_name)
    if number < low or number > high:
        raise ValidationError(f"{field_name} must be between {low:g} and {high:g}")
    return number


def require_date_range(start: Optional[datetime], end: Optional[datetime]) -> None:
    if start is not None and end is not None and start >= end:
        raise ValidationError("start must be earlier than end")
