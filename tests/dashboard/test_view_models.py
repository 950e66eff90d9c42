from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import pytest

from smart_attend.attendance.cache import CacheStats
from smart_attend.attendance.model import (
    AttendanceStats,
    OptimizedDashboardOverview,
    StudentAttendanceSummary,
    SubjectAttendance,
)
from smart_attend.container import build_container, build_container_from_settings
from smart_attend.dashboard.view_models import DashboardViewModel, StudentDetailViewModel


def march_2025():
    return date(2025, 3, 15)


@pytest.fixture
def container(store):
    c = build_container(store=store, fanout_max_workers=4)
    yield c
    c.fanout.shutdown()


@pytest.fixture
def vm(container) -> DashboardViewModel:
    return DashboardViewModel(container.attendance_repository, page_size=2, today_fn=march_2025)


def seed_raw(store, subjects=("CS101",), rolls=("101", "102", "103")):
    for subject in subjects:
        for roll in rolls:
            store.add_raw(2025, 3, subject=subject, group="G1", rollNumber=roll, type="lect", present=True)


def test_initial_state_is_current_month(vm):
    state = vm.state

    assert (state.year, state.month) == (2025, 3)
    assert state.available_months == [3]
    assert state.is_loading is False


def test_load_fills_state_from_legacy_path(store, vm):
    seed_raw(store, subjects=("CS101", "MA201"))

    vm.load()

    state = vm.state
    assert state.error is None
    assert state.is_loading is False
    assert state.overview.is_optimized is False
    assert state.overview.total_classes == 6
    assert state.available_subjects == ["CS101", "MA201"]
    assert state.available_groups == ["G1"]
    assert state.available_months == [3]
    assert set(state.subject_attendance) == {"CS101", "MA201"}
    assert len(state.subject_attendance["CS101"].students) == 2
    assert state.subject_attendance["CS101"].has_more is True
    assert vm.performance_metrics.is_optimized_path is False


def test_only_first_subjects_are_preloaded(store, container):
    seed_raw(store, subjects=("A1", "B2", "C3"), rolls=("101",))
    vm = DashboardViewModel(container.attendance_repository, initial_subjects=2, today_fn=march_2025)

    vm.load()

    assert set(vm.state.subject_attendance) == {"A1", "B2"}


def test_optimized_failure_is_not_an_error(store, vm):
    seed_raw(store)
    store.failing.update({"attendance_metadata", "attendance_stats", "student_attendance"})

    vm.load()

    assert vm.state.error is None
    assert vm.state.overview.total_classes == 3


def test_legacy_failure_sets_error_until_cleared(store, vm):
    store.failing.add("attendance_2025_03")

    vm.load()

    assert vm.state.error
    assert vm.state.is_loading is False

    vm.clear_error()
    assert vm.state.error is None


def test_load_more_students_appends_next_page(store, vm):
    seed_raw(store)
    vm.load()

    vm.load_more_students("CS101")

    page = vm.state.subject_attendance["CS101"]
    assert [s.roll_number for s in page.students] == ["101", "102", "103"]
    assert page.has_more is False
    assert page.current_page == 1

    vm.load_more_students("CS101")
    assert vm.state.subject_attendance["CS101"].current_page == 1


def test_filter_by_subject_loads_only_selected(store, vm):
    seed_raw(store, subjects=("CS101", "MA201"))
    vm.load()

    vm.filter_by_subject("MA201")

    assert vm.state.selected_subject == "MA201"
    assert set(vm.state.subject_attendance) == {"MA201"}


def test_change_month_resets_filters(store, vm):
    seed_raw(store)
    vm.filter_by_group("G1")

    vm.change_month(2025, 4)

    state = vm.state
    assert (state.year, state.month) == (2025, 4)
    assert state.selected_group is None
    assert state.overview.total_classes == 0


def test_refresh_drops_cached_data(store, vm):
    store.put("attendance_metadata", "2025_03", {"subjects": ["CS101"], "groups": ["G1"]})
    vm.load()
    store.put("attendance_metadata", "2025_03", {"subjects": ["CS101", "PH301"], "groups": ["G1"]})

    vm.load()
    assert vm.state.available_subjects == ["CS101"]

    vm.refresh()
    assert vm.state.available_subjects == ["CS101", "PH301"]


class ReentrantRepository:
    """Starts a newer load from inside the first dashboard fetch."""

    def __init__(self):
        self.vm = None
        self.calls = 0

    def get_dashboard_overview(self, year, month, group=None):
        self.calls += 1
        if self.calls == 1:
            self.vm.change_month(2025, 4)
        return OptimizedDashboardOverview(is_optimized=True, load_time_ms=self.calls)

    def get_subjects_and_groups(self, year, month):
        return [f"S{month}"], []

    def get_available_months(self, year):
        return [3, 4]

    def get_subject_attendance_bulk(self, subjects, year, month, group=None, *, page_size=50):
        return {s: SubjectAttendance(subject=s) for s in subjects}

    def cache_stats(self):
        return CacheStats(hits=0, misses=0, evictions=0, size=0)

    def invalidate_cache(self):
        pass


def test_stale_load_is_discarded():
    repo = ReentrantRepository()
    vm = DashboardViewModel(repo, today_fn=march_2025)
    repo.vm = vm

    vm.load()

    state = vm.state
    assert state.month == 4
    assert state.available_subjects == ["S4"]
    assert state.overview.load_time_ms == 2


def test_launch_runs_off_thread(store, vm):
    seed_raw(store)

    vm.launch(vm.load).result(timeout=5)

    assert vm.state.overview.total_classes == 3


def test_student_detail_load_and_change_month(store, container):
    seed_raw(store)
    store.add_raw(2025, 3, subject="MA201", group="G1", rollNumber="101", type="tut", present=False)
    vm = StudentDetailViewModel(container.attendance_repository, today_fn=march_2025)

    vm.change_month(2025, 3)
    assert vm.state.roll_number == ""

    vm.load("101")
    assert set(vm.state.subject_wise_attendance) == {"CS101", "MA201"}
    assert vm.state.subject_wise_attendance["MA201"].percentage == 0.0

    vm.change_month(2025, 4)
    assert vm.state.month == 4
    assert vm.state.subject_wise_attendance == {}
    assert vm.state.error is None


def test_student_detail_error(store, container):
    store.failing.add("attendance_2025_03")
    vm = StudentDetailViewModel(container.attendance_repository, today_fn=march_2025)

    vm.load("101")

    assert vm.state.error
    assert vm.state.is_loading is False


def test_container_view_models_share_the_repository(store):
    seed_raw(store)
    container = build_container_from_settings(SimpleNamespace(DEFAULT_PAGE_SIZE=1), store=store)
    try:
        dashboard = container.dashboard_view_model
        dashboard.change_month(2025, 3)
        detail = container.student_detail_view_model
        detail.load("101", 2025, 3)
    finally:
        container.fanout.shutdown()

    assert dashboard.state.error is None
    page = dashboard.state.subject_attendance["CS101"]
    assert [s.roll_number for s in page.students] == ["101"]
    assert page.has_more is True
    assert set(detail.state.subject_wise_attendance) == {"CS101"}


def student(roll):
    return StudentAttendanceSummary(roll_number=roll, name=f"Student {roll}", stats=AttendanceStats())


class InterleavingRepository:
    """Loads the next page of B while the next page of A is in flight."""

    def __init__(self):
        self.vm = None

    def get_dashboard_overview(self, year, month, group=None):
        return OptimizedDashboardOverview()

    def get_subjects_and_groups(self, year, month):
        return ["A", "B"], []

    def get_available_months(self, year):
        return [3]

    def get_subject_attendance_bulk(self, subjects, year, month, group=None, *, page_size=50):
        return {
            s: SubjectAttendance(subject=s, students=[student(f"{s}1")], has_more=True, last_roll_number=f"{s}1")
            for s in subjects
        }

    def get_subject_attendance(self, subject, year, month, group=None, *, page_size=50, last_roll_number=None):
        if subject == "A" and self.vm is not None:
            vm, self.vm = self.vm, None
            vm.load_more_students("B")
        return SubjectAttendance(subject=subject, students=[student(f"{subject}2")], last_roll_number=f"{subject}2")

    def cache_stats(self):
        return CacheStats(hits=0, misses=0, evictions=0, size=0)


def test_interleaved_load_more_keeps_both_pages():
    repo = InterleavingRepository()
    vm = DashboardViewModel(repo, today_fn=march_2025)
    vm.load()
    repo.vm = vm

    vm.load_more_students("A")

    pages = vm.state.subject_attendance
    assert [s.roll_number for s in pages["A"].students] == ["A1", "A2"]
    assert [s.roll_number for s in pages["B"].students] == ["B1", "B2"]
    assert pages["A"].current_page == pages["B"].current_page == 1


def test_duplicate_load_more_appends_page_once():
    repo = InterleavingRepository()
    vm = DashboardViewModel(repo, today_fn=march_2025)
    vm.load()

    def load_b_twice(subject, *args, **kwargs):
        repo.get_subject_attendance = original
        vm.load_more_students("B")
        return original(subject, *args, **kwargs)

    original = repo.get_subject_attendance
    repo.get_subject_attendance = load_b_twice

    vm.load_more_students("B")

    assert [s.roll_number for s in vm.state.subject_attendance["B"].students] == ["B1", "B2"]
