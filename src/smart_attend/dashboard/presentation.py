from __future__ import annotations

from ..core.enums import AttendanceGrade, AttendanceType

EXCELLENT_THRESHOLD = 90.0
GOOD_THRESHOLD = 75.0
SATISFACTORY_THRESHOLD = 65.0
NEEDS_IMPROVEMENT_THRESHOLD = 50.0


def attendance_grade(percentage: float) -> AttendanceGrade:
    if percentage >= EXCELLENT_THRESHOLD:
        return AttendanceGrade.EXCELLENT
    if percentage >= GOOD_THRESHOLD:
        return AttendanceGrade.GOOD
    if percentage >= SATISFACTORY_THRESHOLD:
        return AttendanceGrade.SATISFACTORY
    if percentage >= NEEDS_IMPROVEMENT_THRESHOLD:
        return AttendanceGrade.NEEDS_IMPROVEMENT
    return AttendanceGrade.POOR


def display_type(type_tag: str) -> str:
    """'lect' -> 'Lecture'; unknown tags are capitalized as-is."""
    try:
        return AttendanceType(type_tag).display_name
    except ValueError:
        return type_tag[:1].upper() + type_tag[1:]


def type_breakdown(stats) -> list[dict]:
    """Per-session-type rows of an `AttendanceStats`, labelled for display."""
    rows = []
    for type_tag, type_stats in (
        (AttendanceType.LECTURE.value, stats.lecture_stats),
        (AttendanceType.TUTORIAL.value, stats.tutorial_stats),
        (AttendanceType.LAB.value, stats.lab_stats),
    ):
        rows.append(
            {
                "type": type_tag,
                "label": display_type(type_tag),
                "total": type_stats.total,
                "attended": type_stats.attended,
                "percentage": type_stats.percentage,
            }
        )
    return rows
