"""State holders behind the dashboard screens.

Each holder keeps one immutable UI state snapshot and replaces it as loads
complete. Loads are plain blocking calls; a UI runs them off its event loop
with `launch`. Overlapping loads resolve last-started-wins: every load takes a
generation number and a load that finishes after a newer one started is
discarded.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Callable, Optional

from ..attendance.model import AttendanceStats, OptimizedDashboardOverview, StudentAttendanceSummary
from ..attendance.repository import HybridAttendanceRepository
from ..common.datetime_utils import date_range_label, now_millis, today
from ..core.constants import DEFAULT_INITIAL_SUBJECTS, DEFAULT_PAGE_SIZE
from ..core.exceptions import DataUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaginatedSubjectAttendance:
    subject: str
    students: list[StudentAttendanceSummary] = field(default_factory=list)
    current_page: int = 0
    has_more: bool = False
    last_roll_number: Optional[str] = None


@dataclass(frozen=True)
class PerformanceMetrics:
    last_load_time_ms: int = 0
    is_optimized_path: bool = False
    cache_hit_rate: float = 0.0


@dataclass(frozen=True)
class DashboardUiState:
    year: int
    month: int
    selected_group: Optional[str] = None
    selected_subject: Optional[str] = None
    available_groups: list[str] = field(default_factory=list)
    available_subjects: list[str] = field(default_factory=list)
    available_months: list[int] = field(default_factory=list)
    overview: OptimizedDashboardOverview = field(default_factory=OptimizedDashboardOverview)
    subject_attendance: dict[str, PaginatedSubjectAttendance] = field(default_factory=dict)
    error: Optional[str] = None
    is_loading: bool = False


@dataclass(frozen=True)
class StudentDetailUiState:
    roll_number: str
    year: int
    month: int
    subject_wise_attendance: dict[str, AttendanceStats] = field(default_factory=dict)
    error: Optional[str] = None
    is_loading: bool = False


class _StateHolder:
    def __init__(self, initial: Any, executor: Optional[Executor]):
        self._state = initial
        self._generation = 0
        self._lock = threading.Lock()
        self._executor = executor

    @property
    def state(self):
        with self._lock:
            return self._state

    def launch(self, action: Callable[..., Any], *args, **kwargs) -> Future:
        """Run `action` off the caller's thread."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="smart-attend-ui")
        return self._executor.submit(action, *args, **kwargs)

    def clear_error(self) -> None:
        with self._lock:
            self._state = replace(self._state, error=None)

    def _begin(self, **changes) -> int:
        with self._lock:
            self._generation += 1
            self._state = replace(self._state, is_loading=True, **changes)
            return self._generation

    def _commit(self, generation: int, update: Optional[Callable[[Any], dict]] = None, **changes) -> bool:
        """Apply `changes` unless a newer load started.

        `update` is called with the state current at commit time and its
        result is applied as well, so merges see other commits.
        """
        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding stale load (generation %d, current %d)", generation, self._generation)
                return False
            if update is not None:
                changes.update(update(self._state))
            self._state = replace(self._state, **changes)
            return True


class DashboardViewModel(_StateHolder):
    def __init__(
        self,
        repository: HybridAttendanceRepository,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        initial_subjects: int = DEFAULT_INITIAL_SUBJECTS,
        clock: Callable[[], int] = now_millis,
        today_fn: Callable[[], date] = today,
        executor: Optional[Executor] = None,
    ):
        now = today_fn()
        super().__init__(DashboardUiState(year=now.year, month=now.month, available_months=[now.month]), executor)
        self._repository = repository
        self._page_size = int(page_size)
        self._initial_subjects = int(initial_subjects)
        self._clock = clock
        self._metrics = PerformanceMetrics()

    @property
    def performance_metrics(self) -> PerformanceMetrics:
        return self._metrics

    def load(self) -> None:
        generation = self._begin()
        state = self.state
        start = self._clock()

        try:
            overview = self._repository.get_dashboard_overview(state.year, state.month, state.selected_group)
            subjects, groups = self._repository.get_subjects_and_groups(state.year, state.month)
            months = self._repository.get_available_months(state.year)
            subject_data = self._load_subject_pages(state, subjects)
        except DataUnavailableError as e:
            logger.error("Error loading dashboard: %s", e)
            self._commit(generation, error=str(e), is_loading=False)
            return

        load_time = self._clock() - start
        committed = self._commit(
            generation,
            overview=overview,
            available_subjects=subjects,
            available_groups=groups,
            available_months=months,
            subject_attendance=subject_data,
            is_loading=False,
        )
        if committed:
            self._metrics = PerformanceMetrics(
                last_load_time_ms=load_time,
                is_optimized_path=overview.is_optimized,
                cache_hit_rate=self._repository.cache_stats().hit_rate,
            )
            logger.info(
                "Dashboard %s loaded in %dms (optimized: %s)",
                date_range_label(state.year, state.month), load_time, overview.is_optimized,
            )

    def change_month(self, year: int, month: int) -> None:
        with self._lock:
            self._state = replace(self._state, year=year, month=month, selected_group=None, selected_subject=None)
        self.load()

    def filter_by_group(self, group: Optional[str]) -> None:
        with self._lock:
            self._state = replace(self._state, selected_group=group)
        self.load()

    def filter_by_subject(self, subject: Optional[str]) -> None:
        generation = self._begin(selected_subject=subject)
        state = self.state
        try:
            subject_data = self._load_subject_pages(state, state.available_subjects)
        except DataUnavailableError as e:
            logger.error("Error loading subject data: %s", e)
            self._commit(generation, error=str(e), is_loading=False)
            return
        self._commit(generation, subject_attendance=subject_data, is_loading=False)

    def load_more_students(self, subject: str) -> None:
        with self._lock:
            state = self._state
            generation = self._generation
        current = state.subject_attendance.get(subject)
        if current is None or not current.has_more:
            return

        cursor = current.last_roll_number
        try:
            page = self._repository.get_subject_attendance(
                subject,
                state.year,
                state.month,
                state.selected_group,
                page_size=self._page_size,
                last_roll_number=cursor,
            )
        except DataUnavailableError as e:
            logger.error("Error loading more students for %s: %s", subject, e)
            self._commit(generation, error=str(e))
            return

        def merge(latest: DashboardUiState) -> dict:
            entry = latest.subject_attendance.get(subject)
            if entry is None or entry.last_roll_number != cursor:
                logger.debug("Dropping page of %s after %s: list moved on", subject, cursor)
                return {}
            merged = replace(
                entry,
                students=entry.students + page.students,
                current_page=entry.current_page + 1,
                has_more=page.has_more,
                last_roll_number=page.last_roll_number,
            )
            return {"subject_attendance": {**latest.subject_attendance, subject: merged}}

        self._commit(generation, merge)

    def refresh(self) -> None:
        self._repository.invalidate_cache()
        self._metrics = PerformanceMetrics()
        self.load()

    def _load_subject_pages(self, state: DashboardUiState, subjects: list[str]) -> dict[str, PaginatedSubjectAttendance]:
        to_load = [state.selected_subject] if state.selected_subject else subjects[: self._initial_subjects]
        pages = self._repository.get_subject_attendance_bulk(
            to_load, state.year, state.month, state.selected_group, page_size=self._page_size
        )
        return {
            subject: PaginatedSubjectAttendance(
                subject=subject,
                students=page.students,
                has_more=page.has_more,
                last_roll_number=page.last_roll_number,
            )
            for subject, page in pages.items()
        }


class StudentDetailViewModel(_StateHolder):
    def __init__(
        self,
        repository: HybridAttendanceRepository,
        *,
        today_fn: Callable[[], date] = today,
        executor: Optional[Executor] = None,
    ):
        now = today_fn()
        super().__init__(StudentDetailUiState(roll_number="", year=now.year, month=now.month), executor)
        self._repository = repository

    def load(self, roll_number: str, year: Optional[int] = None, month: Optional[int] = None) -> None:
        state = self.state
        year = year or state.year
        month = month or state.month
        generation = self._begin(roll_number=roll_number, year=year, month=month)

        try:
            data = self._repository.get_student_detail(roll_number, year, month)
        except DataUnavailableError as e:
            logger.error("Error loading student %s: %s", roll_number, e)
            self._commit(generation, error=str(e), is_loading=False)
            return

        if self._commit(generation, subject_wise_attendance=data, is_loading=False):
            logger.info("Student data loaded for %s - %d subjects", roll_number, len(data))

    def change_month(self, year: int, month: int) -> None:
        roll_number = self.state.roll_number
        if not roll_number:
            return
        self.load(roll_number, year, month)
