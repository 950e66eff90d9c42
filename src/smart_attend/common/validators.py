from __future__ import annotations

from ..core.exceptions import ValidationError


def require_year(value: int) -> int:
    year = int(value)
    if year < 2000 or year > 9999:
        raise ValidationError(f"Invalid year: {value}")
    return year


def require_month(value: int) -> int:
    month = int(value)
    if month < 1 or month > 12:
        raise ValidationError(f"Invalid month: {value}")
    return month


def require_page_size(value: int) -> int:
    size = int(value)
    if size <= 0:
        raise ValidationError(f"Page size must be positive, got {value}")
    return size


def optional_filter(value: str | None) -> str | None:
    """Blank filter values mean 'no filter'."""
    if value is None:
        return None
    value = value.strip()
    return value or None
