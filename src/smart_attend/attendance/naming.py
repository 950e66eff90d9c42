from __future__ import annotations

from ..core.constants import RAW_COLLECTION_PREFIX


def period_key(year: int, month: int) -> str:
    """'2025_03': document-ID prefix shared by the pre-aggregated collections."""
    return f"{int(year)}_{int(month):02d}"


def raw_collection_name(year: int, month: int) -> str:
    return f"{RAW_COLLECTION_PREFIX}_{period_key(year, month)}"


def student_doc_id(year: int, month: int, roll_number: str) -> str:
    return f"{period_key(year, month)}_{roll_number}"


def month_from_collection_name(name: str, year: int) -> int | None:
    """Month number of a raw collection for `year`, or None if `name` is not one."""
    prefix = f"{RAW_COLLECTION_PREFIX}_{int(year)}_"
    if not name.startswith(prefix):
        return None
    suffix = name[len(prefix):]
    if not suffix.isdigit():
        return None
    month = int(suffix)
    return month if 1 <= month <= 12 else None
