"""Single mapping from stored document payloads to attendance entities.

Rules applied to every field:

- missing (or null) field -> the type's zero value ("", 0, 0.0, False, [], {})
- field present with the wrong type -> `DecodeError`; callers drop that one
  document and keep going
- booleans are never accepted where a number is expected
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, Optional, TypeVar

from ..common.datetime_utils import format_timestamp
from ..core.exceptions import DecodeError
from ..database.document_store import StoredDocument
from .model import (
    AttendanceMetadata,
    AttendanceRecord,
    AttendanceStats,
    StudentAggregatedStats,
    SubjectStats,
    SubjectTotals,
    SubjectTypeStats,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"{key}: expected string, got {type(value).__name__}")
    return value


def _bool(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise DecodeError(f"{key}: expected boolean, got {type(value).__name__}")
    return value


def _int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"{key}: expected number, got {type(value).__name__}")
    return int(value)


def _float(data: Mapping[str, Any], key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"{key}: expected number, got {type(value).__name__}")
    return float(value)


def _str_list(data: Mapping[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise DecodeError(f"{key}: expected array, got {type(value).__name__}")
    return [v for v in value if isinstance(v, str)]


def _map(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise DecodeError(f"{key}: expected map, got {type(value).__name__}")
    return value


def _required_str(data: Mapping[str, Any], key: str) -> str:
    value = _str(data, key)
    if not value:
        raise DecodeError(f"{key}: required")
    return value


def decode_record(data: Mapping[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        date=_str(data, "date"),
        room=_str(data, "deviceRoom"),
        group=_str(data, "group"),
        subject=_str(data, "subject"),
        roll_number=_str(data, "rollNumber"),
        type=_str(data, "type"),
        present=_bool(data, "present"),
        timestamp=format_timestamp(data.get("timestamp")),
        is_extra=_bool(data, "isExtra"),
    )


def decode_type_stats(data: Mapping[str, Any]) -> SubjectTypeStats:
    return SubjectTypeStats(
        total=_int(data, "total"),
        attended=_int(data, "attended"),
        percentage=_float(data, "percentage"),
    )


def _type_breakdown(data: Mapping[str, Any]) -> dict[str, SubjectTypeStats]:
    return {
        "lecture_stats": decode_type_stats(_map(data, "lectureStats")),
        "tutorial_stats": decode_type_stats(_map(data, "tutorialStats")),
        "lab_stats": decode_type_stats(_map(data, "labStats")),
    }


def decode_attendance_stats(data: Mapping[str, Any]) -> AttendanceStats:
    """`overallStats` shape: totalClasses / attendedClasses / percentage."""
    return AttendanceStats(
        total_classes=_int(data, "totalClasses"),
        attended_classes=_int(data, "attendedClasses"),
        percentage=_float(data, "percentage"),
        **_type_breakdown(data),
    )


def decode_subject_attendance(data: Mapping[str, Any]) -> AttendanceStats:
    """Per-subject entry of a student document: totalClasses / attended / percentage."""
    return AttendanceStats(
        total_classes=_int(data, "totalClasses"),
        attended_classes=_int(data, "attended"),
        percentage=_float(data, "percentage"),
        **_type_breakdown(data),
    )


def decode_metadata(data: Mapping[str, Any]) -> AttendanceMetadata:
    return AttendanceMetadata(
        subjects=_str_list(data, "subjects"),
        groups=_str_list(data, "groups"),
        total_students=_int(data, "totalStudents"),
        total_classes=_int(data, "totalClasses"),
        overall_attendance_rate=_float(data, "overallAttendanceRate"),
        last_updated=format_timestamp(data.get("lastUpdated")),
    )


def decode_subject_stats(data: Mapping[str, Any]) -> SubjectStats:
    return SubjectStats(
        subject=_required_str(data, "subject"),
        group=_required_str(data, "group"),
        total_students=_int(data, "totalStudents"),
        total_classes=_int(data, "totalClasses"),
        present_count=_int(data, "presentCount"),
        attendance_rate=_float(data, "attendanceRate"),
        **_type_breakdown(data),
    )


def decode_subject_map(data: Mapping[str, Any]) -> dict[str, AttendanceStats]:
    out: dict[str, AttendanceStats] = {}
    for subject, value in data.items():
        if not isinstance(value, Mapping):
            raise DecodeError(f"subjects.{subject}: expected map, got {type(value).__name__}")
        out[str(subject)] = decode_subject_attendance(value)
    return out


def decode_student_stats(data: Mapping[str, Any], *, roll_number: str, year: int, month: int) -> StudentAggregatedStats:
    return StudentAggregatedStats(
        roll_number=_str(data, "rollNumber") or roll_number,
        year=int(year),
        month=int(month),
        group=_str(data, "group"),
        subjects=decode_subject_map(_map(data, "subjects")),
        overall_stats=decode_attendance_stats(_map(data, "overallStats")),
    )


def decode_subject_totals(data: Mapping[str, Any]) -> SubjectTotals:
    return SubjectTotals(
        lect_total=_int(data, "lectTotal"),
        lab_total=_int(data, "labTotal"),
        tut_total=_int(data, "tutTotal"),
    )


def decode_all(
    docs: Iterable[StoredDocument],
    decoder: Callable[[Mapping[str, Any]], T],
) -> list[T]:
    """Decode every document, dropping the ones that fail."""
    out: list[T] = []
    for doc in docs:
        item = decode_or_none(doc, decoder)
        if item is not None:
            out.append(item)
    return out


def decode_or_none(doc: StoredDocument, decoder: Callable[[Mapping[str, Any]], T]) -> Optional[T]:
    try:
        return decoder(doc.data)
    except DecodeError as e:
        logger.debug("Dropping malformed document %s: %s", doc.id, e)
        return None
