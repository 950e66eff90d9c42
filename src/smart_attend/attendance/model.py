from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from ..core.enums import QueryStatus

T = TypeVar("T")


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one take-attendance event for one student."""

    date: str = ""
    room: str = ""
    group: str = ""
    subject: str = ""
    roll_number: str = ""
    type: str = ""
    present: bool = False
    timestamp: str = ""
    is_extra: bool = False


@dataclass(frozen=True)
class SubjectTypeStats:
    total: int = 0
    attended: int = 0
    percentage: float = 0.0


@dataclass(frozen=True)
class AttendanceStats:
    """Aggregate over a student x subject (or student x period) slice."""

    total_classes: int = 0
    attended_classes: int = 0
    percentage: float = 0.0
    lecture_stats: SubjectTypeStats = field(default_factory=SubjectTypeStats)
    tutorial_stats: SubjectTypeStats = field(default_factory=SubjectTypeStats)
    lab_stats: SubjectTypeStats = field(default_factory=SubjectTypeStats)


@dataclass(frozen=True)
class SubjectTotals:
    """Scheduled class counts per type, from the `subjects` collection."""

    lect_total: int = 0
    lab_total: int = 0
    tut_total: int = 0

    @property
    def total_classes(self) -> int:
        return self.lect_total + self.lab_total + self.tut_total


@dataclass(frozen=True)
class AttendanceMetadata:
    subjects: list[str] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)
    total_students: int = 0
    total_classes: int = 0
    overall_attendance_rate: float = 0.0
    last_updated: str = ""

    def is_empty(self) -> bool:
        return not self.subjects and not self.groups


@dataclass(frozen=True)
class SubjectStats:
    """Read-model: store-side aggregate for one subject x group x month."""

    subject: str
    group: str
    total_students: int = 0
    total_classes: int = 0
    present_count: int = 0
    attendance_rate: float = 0.0
    lecture_stats: SubjectTypeStats = field(default_factory=SubjectTypeStats)
    tutorial_stats: SubjectTypeStats = field(default_factory=SubjectTypeStats)
    lab_stats: SubjectTypeStats = field(default_factory=SubjectTypeStats)


@dataclass(frozen=True)
class StudentAggregatedStats:
    roll_number: str
    year: int
    month: int
    group: str = ""
    subjects: dict[str, AttendanceStats] = field(default_factory=dict)
    overall_stats: AttendanceStats = field(default_factory=AttendanceStats)


@dataclass(frozen=True)
class StudentAttendanceSummary:
    roll_number: str
    name: str
    stats: AttendanceStats


@dataclass(frozen=True)
class PaginatedStudents:
    students: list[StudentAttendanceSummary] = field(default_factory=list)
    has_more: bool = False
    last_roll_number: Optional[str] = None


@dataclass(frozen=True)
class SubjectAttendance:
    subject: str
    students: list[StudentAttendanceSummary] = field(default_factory=list)
    has_more: bool = False
    last_roll_number: Optional[str] = None


@dataclass(frozen=True)
class SubjectOverview:
    subject: str
    total_classes: int
    average_attendance: float
    scheduled_classes: int = 0


@dataclass(frozen=True)
class GroupOverview:
    group: str
    total_classes: int
    average_attendance: float


@dataclass(frozen=True)
class DashboardOverview:
    total_students: int = 0
    total_classes: int = 0
    overall_attendance: float = 0.0
    subject_stats: list[SubjectOverview] = field(default_factory=list)
    group_stats: list[GroupOverview] = field(default_factory=list)
    subjects: list[str] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class OptimizedDashboardOverview:
    """Unified dashboard result, whichever path produced it.

    `is_optimized` tells which path ran; `load_time_ms` is the wall-clock
    duration of the fetch.
    """

    metadata: AttendanceMetadata = field(default_factory=AttendanceMetadata)
    subject_stats: list[SubjectStats] = field(default_factory=list)
    subject_overviews: list[SubjectOverview] = field(default_factory=list)
    group_stats: list[GroupOverview] = field(default_factory=list)
    is_optimized: bool = False
    load_time_ms: int = 0

    @property
    def total_students(self) -> int:
        return self.metadata.total_students

    @property
    def total_classes(self) -> int:
        return self.metadata.total_classes

    @property
    def overall_attendance(self) -> float:
        return self.metadata.overall_attendance_rate


@dataclass(frozen=True)
class DashboardData:
    """Joined result of the raw dashboard fan-out batch."""

    records: list[AttendanceRecord] = field(default_factory=list)
    subjects: list[str] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)
    subject_totals: dict[str, SubjectTotals] = field(default_factory=dict)


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """Tagged outcome of an optimized-path read.

    HIT carries pre-aggregated data, MISS means none exists (the value is an
    empty default or a raw-derived stand-in), ERROR means the store call failed.
    """

    status: QueryStatus
    value: T
    error: Optional[str] = None

    @classmethod
    def hit(cls, value: T) -> "QueryResult[T]":
        return cls(QueryStatus.HIT, value)

    @classmethod
    def miss(cls, value: T) -> "QueryResult[T]":
        return cls(QueryStatus.MISS, value)

    @classmethod
    def failed(cls, value: T, error: str) -> "QueryResult[T]":
        return cls(QueryStatus.ERROR, value, error)

    @property
    def is_usable(self) -> bool:
        if self.status != QueryStatus.HIT:
            return False
        value = self.value
        if isinstance(value, AttendanceMetadata):
            return not value.is_empty()
        if isinstance(value, PaginatedStudents):
            return bool(value.students)
        if isinstance(value, (list, dict)):
            return bool(value)
        return value is not None
