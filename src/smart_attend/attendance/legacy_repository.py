from __future__ import annotations

from dataclasses import replace
from typing import Optional

from .aggregation import build_dashboard_overview, stats_by_subject, students_for_subject
from .fanout import FanOutCoordinator
from .model import AttendanceStats, DashboardData, DashboardOverview, SubjectAttendance
from .raw_service import RawQueryService


class LegacyAttendanceRepository:
    """Client-side aggregation over raw records (the slow, always-available path).

    Record scans run strict: if the store cannot be read here,
    `DataUnavailableError` propagates to the caller.
    """

    def __init__(self, raw: RawQueryService, fanout: FanOutCoordinator):
        self._raw = raw
        self._fanout = fanout

    def fetch_dashboard_data(
        self,
        year: int,
        month: int,
        group: Optional[str] = None,
        *,
        subjects: Optional[list[str]] = None,
        groups: Optional[list[str]] = None,
    ) -> DashboardData:
        """Raw dashboard batch. Subject and group scans are skipped when the caller already has them."""
        branches = {
            "records": lambda: self._raw.fetch_records(year, month, group, strict=True),
            "subject_totals": lambda: self._raw.fetch_subject_totals(),
        }
        if subjects is None:
            branches["subjects"] = lambda: self._raw.fetch_subjects(year, month)
        if groups is None:
            branches["groups"] = lambda: self._raw.fetch_groups(year, month)

        results = self._fanout.run(branches)
        return DashboardData(
            records=results["records"],
            subjects=results.get("subjects", subjects),
            groups=results.get("groups", groups),
            subject_totals=results["subject_totals"],
        )

    def get_dashboard_overview(
        self,
        year: int,
        month: int,
        group: Optional[str] = None,
        *,
        subjects: Optional[list[str]] = None,
        groups: Optional[list[str]] = None,
    ) -> DashboardOverview:
        data = self.fetch_dashboard_data(year, month, group, subjects=subjects, groups=groups)
        overview = build_dashboard_overview(data.records, data.subject_totals)
        return replace(overview, subjects=data.subjects, groups=data.groups)

    def get_subject_attendance(
        self,
        subject: str,
        year: int,
        month: int,
        group: Optional[str] = None,
        *,
        page_size: Optional[int] = None,
        last_roll_number: Optional[str] = None,
    ) -> SubjectAttendance:
        """All students of `subject`, or one cursor page of them when `page_size` is set."""
        records = self._raw.fetch_records(year, month, group, subject, strict=True)
        students = students_for_subject(records)

        if page_size is None:
            return SubjectAttendance(subject=subject, students=students)

        if last_roll_number is not None:
            students = [s for s in students if s.roll_number > last_roll_number]
        page = students[:page_size]
        return SubjectAttendance(
            subject=subject,
            students=page,
            has_more=len(students) > page_size,
            last_roll_number=page[-1].roll_number if page else last_roll_number,
        )

    def get_student_detail(self, roll_number: str, year: int, month: int) -> dict[str, AttendanceStats]:
        records = self._raw.fetch_student_records(roll_number, year, month, strict=True)
        return stats_by_subject(records)
