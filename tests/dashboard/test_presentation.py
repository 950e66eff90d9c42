from __future__ import annotations

import pytest

from smart_attend.config import get_settings_module
from smart_attend.core.enums import AttendanceGrade
from smart_attend.attendance.model import AttendanceStats, SubjectTypeStats
from smart_attend.dashboard.presentation import attendance_grade, display_type, type_breakdown


@pytest.mark.parametrize(
    "pct, grade",
    [
        (100.0, AttendanceGrade.EXCELLENT),
        (90.0, AttendanceGrade.EXCELLENT),
        (89.99, AttendanceGrade.GOOD),
        (75.0, AttendanceGrade.GOOD),
        (65.0, AttendanceGrade.SATISFACTORY),
        (50.0, AttendanceGrade.NEEDS_IMPROVEMENT),
        (49.9, AttendanceGrade.POOR),
        (0.0, AttendanceGrade.POOR),
    ],
)
def test_grade_thresholds(pct, grade):
    assert attendance_grade(pct) == grade


def test_display_type():
    assert display_type("lect") == "Lecture"
    assert display_type("tut") == "Tutorial"
    assert display_type("lab") == "Lab"
    assert display_type("seminar") == "Seminar"


def test_type_breakdown_labels_each_session_type():
    stats = AttendanceStats(
        total_classes=5,
        attended_classes=3,
        lecture_stats=SubjectTypeStats(total=3, attended=2, percentage=66.67),
        lab_stats=SubjectTypeStats(total=2, attended=1, percentage=50.0),
    )

    rows = type_breakdown(stats)

    assert [(r["type"], r["label"]) for r in rows] == [("lect", "Lecture"), ("tut", "Tutorial"), ("lab", "Lab")]
    assert rows[0]["attended"] == 2
    assert rows[1]["total"] == 0
    assert rows[2]["percentage"] == 50.0


@pytest.mark.parametrize(
    "env, module",
    [
        ("production", "smart_attend.config.production"),
        ("PROD", "smart_attend.config.production"),
        ("test", "smart_attend.config.testing"),
        ("anything", "smart_attend.config.development"),
    ],
)
def test_settings_module_from_app_env(monkeypatch, env, module):
    monkeypatch.setenv("APP_ENV", env)

    assert get_settings_module() == module
