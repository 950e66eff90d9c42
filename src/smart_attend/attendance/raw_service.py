from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import today
from ..core.constants import DEFAULT_RAW_SCAN_LIMIT, SUBJECTS_COLLECTION
from ..core.exceptions import DataUnavailableError, StoreError
from ..database.document_store import DocumentStore
from .decoding import decode_all, decode_or_none, decode_record, decode_subject_totals
from .model import AttendanceRecord, SubjectTotals
from .naming import month_from_collection_name, raw_collection_name

logger = logging.getLogger(__name__)


class RawQueryService:
    """Filtered scans over the per-month raw collections.

    No cache and no fallback. Store failures come back as empty results, except
    with `strict=True`, where they raise `DataUnavailableError` (used by the
    last-resort legacy path, whose failure must reach the caller).
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        scan_limit: int = DEFAULT_RAW_SCAN_LIMIT,
        today_fn: Callable[[], date] = today,
    ):
        self._store = store
        self._scan_limit = int(scan_limit)
        self._today = today_fn

    def fetch_records(
        self,
        year: int,
        month: int,
        group: Optional[str] = None,
        subject: Optional[str] = None,
        *,
        strict: bool = False,
    ) -> list[AttendanceRecord]:
        filters = {}
        if group is not None:
            filters["group"] = group
        if subject is not None:
            filters["subject"] = subject
        return self._scan(raw_collection_name(year, month), filters, strict=strict)

    def fetch_student_records(
        self,
        roll_number: str,
        year: int,
        month: int,
        *,
        strict: bool = False,
    ) -> list[AttendanceRecord]:
        return self._scan(raw_collection_name(year, month), {"rollNumber": roll_number}, strict=strict)

    def fetch_subjects(self, year: int, month: int) -> list[str]:
        return self._distinct_values(year, month, "subject")

    def fetch_groups(self, year: int, month: int) -> list[str]:
        return self._distinct_values(year, month, "group")

    def fetch_available_months(self, year: int) -> list[int]:
        """Months of `year` with a raw collection; never empty (current month as fallback)."""
        try:
            names = self._store.list_collections()
        except StoreError as e:
            logger.warning("Error fetching available months: %s", e)
            return [self._today().month]

        months = sorted({m for m in (month_from_collection_name(n, year) for n in names) if m is not None})
        if not months:
            return [self._today().month]
        return months

    def fetch_subject_totals(self, subjects: Optional[Iterable[str]] = None) -> dict[str, SubjectTotals]:
        """Scheduled class counts keyed by subject (document ID of `subjects`)."""
        try:
            docs = self._store.query(SUBJECTS_COLLECTION)
        except StoreError as e:
            logger.warning("Error fetching subject totals: %s", e)
            return {}

        wanted = set(subjects) if subjects is not None else None
        out: dict[str, SubjectTotals] = {}
        for doc in docs:
            if wanted is not None and doc.id not in wanted:
                continue
            totals = decode_or_none(doc, decode_subject_totals)
            if totals is not None:
                out[doc.id] = totals
        return out

    def _scan(self, collection: str, filters: dict, *, strict: bool) -> list[AttendanceRecord]:
        try:
            docs = self._store.query(collection, filters=filters or None)
        except StoreError as e:
            if strict:
                raise DataUnavailableError(f"Could not load attendance from {collection}") from e
            logger.warning("Error fetching attendance records from %s: %s", collection, e)
            return []
        return decode_all(docs, decode_record)

    def _distinct_values(self, year: int, month: int, field_name: str) -> list[str]:
        # Capped scan: values only present beyond the cap are omitted.
        collection = raw_collection_name(year, month)
        try:
            docs: Sequence = self._store.query(collection, select=[field_name], limit=self._scan_limit)
        except StoreError as e:
            logger.warning("Error fetching %s values from %s: %s", field_name, collection, e)
            return []
        return sorted({v for v in (d.data.get(field_name) for d in docs) if isinstance(v, str) and v})
