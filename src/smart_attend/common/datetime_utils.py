from __future__ import annotations

import calendar
import time
from datetime import date, datetime
from typing import Any

from ..core.constants import TIMESTAMP_FORMAT


def now_millis() -> int:
    """Monotonic clock in milliseconds.

    Note: Wrapped so the cache and timers can be given a fake clock in tests.
    """
    return int(time.monotonic() * 1000)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mock it easier.
    """
    return datetime.now()


def today() -> date:
    return date.today()


def current_year() -> int:
    return today().year


def current_month() -> int:
    return today().month


def month_name(month: int) -> str:
    return calendar.month_name[int(month)]


def date_range_label(year: int, month: int) -> str:
    """'March 2025' style label for a year/month selection."""
    return f"{month_name(month)} {year}"


def format_timestamp(value: Any) -> str:
    """Normalize Firestore timestamps (datetime) or strings to TIMESTAMP_FORMAT."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime(TIMESTAMP_FORMAT)
    if isinstance(value, str):
        return value
    return str(value)
