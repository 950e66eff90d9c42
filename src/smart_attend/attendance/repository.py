from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from ..common.datetime_utils import now_millis
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import QueryStatus
from .aggregation import group_stats_from_subject_stats, subject_overviews_from_subject_stats
from .cache import CacheStats
from .fanout import FanOutCoordinator
from .legacy_repository import LegacyAttendanceRepository
from .model import (
    AttendanceMetadata,
    AttendanceStats,
    OptimizedDashboardOverview,
    QueryResult,
    SubjectAttendance,
)
from .optimized_service import OptimizedQueryService
from .raw_service import RawQueryService

logger = logging.getLogger(__name__)


class HybridAttendanceRepository:
    """Optimized path first, raw path as fallback; one decision per call.

    Each lookup reads the pre-aggregated collections and branches on the
    `QueryResult` tag: usable data is returned as is, anything else (miss,
    error, empty) re-runs the lookup on the legacy path. Only a failure of the
    legacy path itself propagates (`DataUnavailableError`).
    """

    def __init__(
        self,
        optimized: OptimizedQueryService,
        legacy: LegacyAttendanceRepository,
        raw: RawQueryService,
        fanout: FanOutCoordinator,
        *,
        clock: Callable[[], int] = now_millis,
    ):
        self._optimized = optimized
        self._legacy = legacy
        self._raw = raw
        self._fanout = fanout
        self._clock = clock

    def get_dashboard_overview(self, year: int, month: int, group: Optional[str] = None) -> OptimizedDashboardOverview:
        start = self._clock()

        results = self._fanout.run(
            {
                "metadata": lambda: self._guarded(
                    "metadata", AttendanceMetadata(), lambda: self._optimized.fetch_metadata(year, month)
                ),
                "subject_stats": lambda: self._guarded(
                    "subject stats", [], lambda: self._optimized.fetch_subject_stats(year, month, group)
                ),
            }
        )
        metadata = results["metadata"]
        subject_stats = results["subject_stats"]

        if metadata.is_usable or subject_stats.is_usable:
            return OptimizedDashboardOverview(
                metadata=metadata.value,
                subject_stats=subject_stats.value,
                subject_overviews=subject_overviews_from_subject_stats(subject_stats.value),
                group_stats=group_stats_from_subject_stats(subject_stats.value),
                is_optimized=True,
                load_time_ms=self._clock() - start,
            )

        logger.info(
            "Using legacy dashboard loading for %s-%02d (metadata=%s, subject_stats=%s)",
            year, month, metadata.status.value, subject_stats.status.value,
        )
        # A miss already rebuilt subjects and groups from the raw records.
        known = metadata.value if metadata.status == QueryStatus.MISS else None
        legacy = self._legacy.get_dashboard_overview(
            year,
            month,
            group,
            subjects=known.subjects if known is not None else None,
            groups=known.groups if known is not None else None,
        )
        return OptimizedDashboardOverview(
            metadata=AttendanceMetadata(
                subjects=legacy.subjects,
                groups=legacy.groups,
                total_students=legacy.total_students,
                total_classes=legacy.total_classes,
                overall_attendance_rate=legacy.overall_attendance,
            ),
            subject_stats=[],
            subject_overviews=legacy.subject_stats,
            group_stats=legacy.group_stats,
            is_optimized=False,
            load_time_ms=self._clock() - start,
        )

    def get_subject_attendance(
        self,
        subject: str,
        year: int,
        month: int,
        group: Optional[str] = None,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        last_roll_number: Optional[str] = None,
    ) -> SubjectAttendance:
        result = self._guarded(
            "student page",
            None,
            lambda: self._optimized.fetch_student_page(
                subject, year, month, group, limit=page_size, last_roll_number=last_roll_number
            ),
        )
        if result.is_usable:
            page = result.value
            return SubjectAttendance(
                subject=subject,
                students=page.students,
                has_more=page.has_more,
                last_roll_number=page.last_roll_number,
            )

        logger.info("Using legacy subject loading for %s (%s)", subject, result.status.value)
        return self._legacy.get_subject_attendance(
            subject, year, month, group, page_size=page_size, last_roll_number=last_roll_number
        )

    def get_subject_attendance_bulk(
        self,
        subjects: Iterable[str],
        year: int,
        month: int,
        group: Optional[str] = None,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> dict[str, SubjectAttendance]:
        """First page of every subject, one concurrent branch per subject.

        Each branch decides optimized or legacy on its own.
        """
        subjects = list(dict.fromkeys(subjects))
        logger.debug("Loading %d subjects over %d workers", len(subjects), self._fanout.max_workers)
        return self._fanout.map(
            lambda s: self.get_subject_attendance(s, year, month, group, page_size=page_size),
            subjects,
        )

    def get_student_detail(self, roll_number: str, year: int, month: int) -> dict[str, AttendanceStats]:
        result = self._guarded(
            "student stats", None, lambda: self._optimized.fetch_student_stats(roll_number, year, month)
        )
        if result.is_usable:
            return dict(result.value.subjects)

        logger.info("Using legacy student loading for %s (%s)", roll_number, result.status.value)
        return self._legacy.get_student_detail(roll_number, year, month)

    def get_subjects_and_groups(self, year: int, month: int) -> tuple[list[str], list[str]]:
        # A MISS still carries subjects/groups rebuilt from raw scans.
        metadata = self._guarded("metadata", AttendanceMetadata(), lambda: self._optimized.fetch_metadata(year, month))
        if not metadata.value.is_empty():
            return list(metadata.value.subjects), list(metadata.value.groups)

        results = self._fanout.run(
            {
                "subjects": lambda: self._raw.fetch_subjects(year, month),
                "groups": lambda: self._raw.fetch_groups(year, month),
            }
        )
        return results["subjects"], results["groups"]

    def get_available_months(self, year: int) -> list[int]:
        return self._raw.fetch_available_months(year)

    def invalidate_cache(self) -> None:
        self._optimized.cache.invalidate()

    def cache_stats(self) -> CacheStats:
        return self._optimized.cache.stats()

    def _guarded(self, what: str, default, call: Callable[[], QueryResult]) -> QueryResult:
        """Turns an unexpected exception from the optimized path into an ERROR result."""
        try:
            return call()
        except Exception as e:
            logger.exception("Optimized %s query failed, falling back to legacy: %s", what, e)
            return QueryResult.failed(default, str(e))
