from __future__ import annotations

from enum import Enum


class AttendanceType(str, Enum):
    """Class session kinds as stored in the raw `type` field."""

    LECTURE = "lect"
    TUTORIAL = "tut"
    LAB = "lab"

    @property
    def display_name(self) -> str:
        return {
            AttendanceType.LECTURE: "Lecture",
            AttendanceType.TUTORIAL: "Tutorial",
            AttendanceType.LAB: "Lab",
        }[self]


class QueryStatus(str, Enum):
    """Outcome of a read against the pre-aggregated collections."""

    HIT = "HIT"
    MISS = "MISS"
    ERROR = "ERROR"


class AttendanceGrade(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    SATISFACTORY = "Satisfactory"
    NEEDS_IMPROVEMENT = "Needs Improvement"
    POOR = "Poor"
