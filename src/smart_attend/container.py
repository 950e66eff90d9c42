from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.cache import TTLCache
from .attendance.fanout import FanOutCoordinator
from .attendance.legacy_repository import LegacyAttendanceRepository
from .attendance.optimized_service import OptimizedQueryService
from .attendance.raw_service import RawQueryService
from .attendance.repository import HybridAttendanceRepository
from .core import constants
from .dashboard.view_models import DashboardViewModel, StudentDetailViewModel
from .database.connection import FirestoreConfig, FirestoreConnection
from .database.document_store import DocumentStore
from .database.firestore_store import FirestoreDocumentStore


@dataclass(frozen=True)
class Container:
    store: DocumentStore
    cache: TTLCache
    fanout: FanOutCoordinator

    raw_service: RawQueryService
    optimized_service: OptimizedQueryService
    legacy_repository: LegacyAttendanceRepository
    attendance_repository: HybridAttendanceRepository

    dashboard_view_model: DashboardViewModel
    student_detail_view_model: StudentDetailViewModel


def build_container(
    *,
    firebase_config: Optional[dict] = None,
    store: Optional[DocumentStore] = None,
    cache_ttl_seconds: int = constants.DEFAULT_CACHE_TTL_MS // 1000,
    cache_max_entries: int = constants.DEFAULT_CACHE_MAX_ENTRIES,
    fanout_max_workers: int = constants.DEFAULT_FANOUT_MAX_WORKERS,
    raw_scan_limit: int = constants.DEFAULT_RAW_SCAN_LIMIT,
    stats_scan_limit: int = constants.DEFAULT_STATS_SCAN_LIMIT,
    page_size: int = constants.DEFAULT_PAGE_SIZE,
    initial_subjects: int = constants.DEFAULT_INITIAL_SUBJECTS,
) -> Container:
    if store is None:
        firebase_config = firebase_config or {}
        config = FirestoreConfig(
            credentials_path=str(firebase_config.get("credentials_path") or ""),
            project_id=firebase_config.get("project_id"),
        )
        store = FirestoreDocumentStore(FirestoreConnection.get_instance(config))

    cache = TTLCache(ttl_ms=int(cache_ttl_seconds) * 1000, max_entries=cache_max_entries)
    fanout = FanOutCoordinator(max_workers=fanout_max_workers)

    raw_service = RawQueryService(store, scan_limit=raw_scan_limit)
    optimized_service = OptimizedQueryService(store, raw_service, cache, stats_scan_limit=stats_scan_limit)
    legacy_repository = LegacyAttendanceRepository(raw_service, fanout)
    attendance_repository = HybridAttendanceRepository(optimized_service, legacy_repository, raw_service, fanout)
    dashboard_view_model = DashboardViewModel(
        attendance_repository, page_size=page_size, initial_subjects=initial_subjects
    )
    student_detail_view_model = StudentDetailViewModel(attendance_repository)

    return Container(
        store=store,
        cache=cache,
        fanout=fanout,
        raw_service=raw_service,
        optimized_service=optimized_service,
        legacy_repository=legacy_repository,
        attendance_repository=attendance_repository,
        dashboard_view_model=dashboard_view_model,
        student_detail_view_model=student_detail_view_model,
    )


def build_container_from_settings(settings, *, store: Optional[DocumentStore] = None) -> Container:
    return build_container(
        firebase_config=getattr(settings, "FIREBASE_CONFIG", None),
        store=store,
        cache_ttl_seconds=int(getattr(settings, "CACHE_TTL_SECONDS", 300)),
        cache_max_entries=int(getattr(settings, "CACHE_MAX_ENTRIES", constants.DEFAULT_CACHE_MAX_ENTRIES)),
        fanout_max_workers=int(getattr(settings, "FANOUT_MAX_WORKERS", constants.DEFAULT_FANOUT_MAX_WORKERS)),
        raw_scan_limit=int(getattr(settings, "RAW_SCAN_LIMIT", constants.DEFAULT_RAW_SCAN_LIMIT)),
        stats_scan_limit=int(getattr(settings, "STATS_SCAN_LIMIT", constants.DEFAULT_STATS_SCAN_LIMIT)),
        page_size=int(getattr(settings, "DEFAULT_PAGE_SIZE", constants.DEFAULT_PAGE_SIZE)),
    )
