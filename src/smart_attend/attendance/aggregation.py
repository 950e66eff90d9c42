"""Pure aggregation over raw attendance records.

Records whose `type` is not one of the known tags count toward the overall
totals but toward none of the lecture/tutorial/lab buckets.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Mapping, Optional, Sequence

from ..core.enums import AttendanceType
from .model import (
    AttendanceRecord,
    AttendanceStats,
    DashboardOverview,
    GroupOverview,
    StudentAttendanceSummary,
    SubjectOverview,
    SubjectStats,
    SubjectTotals,
    SubjectTypeStats,
)


def percentage(attended: int, total: int) -> float:
    return (attended / total) * 100 if total > 0 else 0.0


def student_name(roll_number: str) -> str:
    return f"Student {roll_number}"


def calculate_type_stats(records: Sequence[AttendanceRecord]) -> SubjectTypeStats:
    total = len(records)
    attended = sum(1 for r in records if r.present)
    return SubjectTypeStats(total=total, attended=attended, percentage=percentage(attended, total))


def calculate_attendance_stats(records: Iterable[AttendanceRecord]) -> AttendanceStats:
    records = list(records)
    buckets: dict[str, list[AttendanceRecord]] = {t.value: [] for t in AttendanceType}
    for r in records:
        if r.type in buckets:
            buckets[r.type].append(r)

    total = len(records)
    attended = sum(1 for r in records if r.present)
    return AttendanceStats(
        total_classes=total,
        attended_classes=attended,
        percentage=percentage(attended, total),
        lecture_stats=calculate_type_stats(buckets[AttendanceType.LECTURE.value]),
        tutorial_stats=calculate_type_stats(buckets[AttendanceType.TUTORIAL.value]),
        lab_stats=calculate_type_stats(buckets[AttendanceType.LAB.value]),
    )


def _group_by(records: Iterable[AttendanceRecord], key) -> dict[str, list[AttendanceRecord]]:
    grouped: dict[str, list[AttendanceRecord]] = defaultdict(list)
    for r in records:
        grouped[key(r)].append(r)
    return grouped


def summarize_subjects(
    records: Iterable[AttendanceRecord],
    subject_totals: Optional[Mapping[str, SubjectTotals]] = None,
) -> list[SubjectOverview]:
    totals = subject_totals or {}
    out = []
    for subject, rows in sorted(_group_by(records, lambda r: r.subject).items()):
        present = sum(1 for r in rows if r.present)
        scheduled = totals.get(subject)
        out.append(
            SubjectOverview(
                subject=subject,
                total_classes=len(rows),
                average_attendance=percentage(present, len(rows)),
                scheduled_classes=scheduled.total_classes if scheduled else 0,
            )
        )
    return out


def summarize_groups(records: Iterable[AttendanceRecord]) -> list[GroupOverview]:
    out = []
    for group, rows in sorted(_group_by(records, lambda r: r.group).items()):
        present = sum(1 for r in rows if r.present)
        out.append(GroupOverview(group=group, total_classes=len(rows), average_attendance=percentage(present, len(rows))))
    return out


def build_dashboard_overview(
    records: Iterable[AttendanceRecord],
    subject_totals: Optional[Mapping[str, SubjectTotals]] = None,
) -> DashboardOverview:
    records = list(records)
    present = sum(1 for r in records if r.present)
    return DashboardOverview(
        total_students=len({r.roll_number for r in records}),
        total_classes=len(records),
        overall_attendance=percentage(present, len(records)),
        subject_stats=summarize_subjects(records, subject_totals),
        group_stats=summarize_groups(records),
    )


def students_for_subject(records: Iterable[AttendanceRecord]) -> list[StudentAttendanceSummary]:
    """Per-student stats for records of a single subject, by ascending roll number."""
    return [
        StudentAttendanceSummary(roll_number=roll, name=student_name(roll), stats=calculate_attendance_stats(rows))
        for roll, rows in sorted(_group_by(records, lambda r: r.roll_number).items())
    ]


def stats_by_subject(records: Iterable[AttendanceRecord]) -> dict[str, AttendanceStats]:
    return {
        subject: calculate_attendance_stats(rows)
        for subject, rows in sorted(_group_by(records, lambda r: r.subject).items())
    }


def group_stats_from_subject_stats(stats: Iterable[SubjectStats]) -> list[GroupOverview]:
    """Group rows from store-side subject stats: summed totals, mean of rates."""
    grouped: dict[str, list[SubjectStats]] = defaultdict(list)
    for s in stats:
        grouped[s.group].append(s)
    return [
        GroupOverview(
            group=group,
            total_classes=sum(s.total_classes for s in rows),
            average_attendance=sum(s.attendance_rate for s in rows) / len(rows),
        )
        for group, rows in sorted(grouped.items())
    ]


def subject_overviews_from_subject_stats(stats: Iterable[SubjectStats]) -> list[SubjectOverview]:
    grouped: dict[str, list[SubjectStats]] = defaultdict(list)
    for s in stats:
        grouped[s.subject].append(s)
    return [
        SubjectOverview(
            subject=subject,
            total_classes=sum(s.total_classes for s in rows),
            average_attendance=sum(s.attendance_rate for s in rows) / len(rows),
        )
        for subject, rows in sorted(grouped.items())
    ]
