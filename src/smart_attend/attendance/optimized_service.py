from __future__ import annotations

import logging
from typing import Optional

from ..common.datetime_utils import format_timestamp, now_local
from ..core.constants import DEFAULT_STATS_SCAN_LIMIT, METADATA_COLLECTION, STATS_COLLECTION, STUDENT_COLLECTION
from ..core.exceptions import DecodeError, StoreError
from ..database.document_store import DocumentStore, StoredDocument
from .aggregation import student_name
from .cache import TTLCache
from .decoding import decode_all, decode_metadata, decode_or_none, decode_student_stats, decode_subject_stats
from .model import (
    AttendanceMetadata,
    PaginatedStudents,
    QueryResult,
    StudentAggregatedStats,
    StudentAttendanceSummary,
    SubjectStats,
)
from .naming import period_key, student_doc_id
from .raw_service import RawQueryService

logger = logging.getLogger(__name__)


class OptimizedQueryService:
    """Reads the pre-aggregated collections, cache-aside.

    Every method returns a `QueryResult`; store failures become ERROR results
    carrying the empty default, never exceptions.
    """

    def __init__(
        self,
        store: DocumentStore,
        raw: RawQueryService,
        cache: TTLCache,
        *,
        stats_scan_limit: int = DEFAULT_STATS_SCAN_LIMIT,
    ):
        self._store = store
        self._raw = raw
        self._cache = cache
        self._stats_scan_limit = int(stats_scan_limit)

    @property
    def cache(self) -> TTLCache:
        return self._cache

    def fetch_metadata(self, year: int, month: int) -> QueryResult[AttendanceMetadata]:
        cache_key = f"metadata_{year}_{month}"
        cached = self._cache.get(cache_key)
        if cached is not None:
            return QueryResult.hit(cached)

        doc_id = period_key(year, month)
        try:
            data = self._store.get(METADATA_COLLECTION, doc_id)
        except StoreError as e:
            logger.warning("Error fetching metadata %s: %s", doc_id, e)
            return QueryResult.failed(AttendanceMetadata(), str(e))

        if data is None:
            # Stand-in built from raw scans; incomplete, so never cached.
            logger.info("Metadata %s not found, rebuilding subjects/groups from raw records", doc_id)
            return QueryResult.miss(self._metadata_from_raw(year, month))

        try:
            metadata = decode_metadata(data)
        except DecodeError as e:
            logger.warning("Malformed metadata document %s: %s", doc_id, e)
            return QueryResult.failed(AttendanceMetadata(), str(e))

        self._cache.set(cache_key, metadata)
        return QueryResult.hit(metadata)

    def fetch_subject_stats(
        self,
        year: int,
        month: int,
        group: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> QueryResult[list[SubjectStats]]:
        cache_key = f"subject_stats_{year}_{month}_{group}_{subject}"
        cached = self._cache.get(cache_key)
        if cached is not None:
            return QueryResult.hit(cached) if cached else QueryResult.miss(cached)

        try:
            # ID-prefix scan is capped before the field filters run, so a
            # period with more stats documents than the cap can under-return.
            docs = self._store.query(
                STATS_COLLECTION,
                id_prefix=period_key(year, month),
                limit=self._stats_scan_limit,
            )
        except StoreError as e:
            logger.warning("Error fetching subject stats for %s: %s", period_key(year, month), e)
            return QueryResult.failed([], str(e))

        stats = [
            s
            for s in decode_all(docs, decode_subject_stats)
            if (group is None or s.group == group) and (subject is None or s.subject == subject)
        ]
        self._cache.set(cache_key, stats)
        return QueryResult.hit(stats) if stats else QueryResult.miss(stats)

    def fetch_student_stats(self, roll_number: str, year: int, month: int) -> QueryResult[Optional[StudentAggregatedStats]]:
        cache_key = f"student_{year}_{month}_{roll_number}"
        cached = self._cache.get(cache_key)
        if cached is not None:
            return QueryResult.hit(cached)

        doc_id = student_doc_id(year, month, roll_number)
        try:
            data = self._store.get(STUDENT_COLLECTION, doc_id)
        except StoreError as e:
            logger.warning("Error fetching student stats %s: %s", doc_id, e)
            return QueryResult.failed(None, str(e))

        if data is None:
            return QueryResult.miss(None)

        try:
            stats = decode_student_stats(data, roll_number=roll_number, year=year, month=month)
        except DecodeError as e:
            logger.warning("Malformed student document %s: %s", doc_id, e)
            return QueryResult.failed(None, str(e))

        self._cache.set(cache_key, stats)
        return QueryResult.hit(stats)

    def fetch_student_page(
        self,
        subject: str,
        year: int,
        month: int,
        group: Optional[str] = None,
        limit: int = 50,
        last_roll_number: Optional[str] = None,
    ) -> QueryResult[PaginatedStudents]:
        """One page of per-student stats for `subject`, ordered by document ID.

        Documents are read in batches of `limit + 1`. Students without an entry
        for `subject` are skipped and scanning continues past them, so a page
        holds exactly `limit` students whenever that many exist. `has_more` is
        set once a further matching student is seen, without a count query.
        The cursor is the document-ID suffix of the last student returned.
        """
        prefix = period_key(year, month)
        batch_size = limit + 1
        cursor = student_doc_id(year, month, last_roll_number) if last_roll_number else None

        students: list[StudentAttendanceSummary] = []
        last_id = last_roll_number
        has_more = False
        while not has_more:
            try:
                docs = list(
                    self._store.query(
                        STUDENT_COLLECTION,
                        filters={"group": group} if group is not None else None,
                        id_prefix=prefix,
                        limit=batch_size,
                        start_after_id=cursor,
                    )
                )
            except StoreError as e:
                logger.warning("Error fetching student page for %s/%s: %s", subject, prefix, e)
                return QueryResult.failed(PaginatedStudents(), str(e))

            for doc in docs:
                summary = self._student_summary(doc, subject, prefix, year, month)
                if summary is None:
                    continue
                if len(students) == limit:
                    has_more = True
                    break
                students.append(summary)
                last_id = doc.id[len(prefix) + 1:]

            if len(docs) < batch_size:
                break
            cursor = docs[-1].id

        page = PaginatedStudents(students=students, has_more=has_more, last_roll_number=last_id)
        return QueryResult.hit(page) if students else QueryResult.miss(page)

    def _student_summary(
        self, doc: StoredDocument, subject: str, prefix: str, year: int, month: int
    ) -> Optional[StudentAttendanceSummary]:
        roll_number = doc.id[len(prefix) + 1:]
        stats = decode_or_none(
            doc,
            lambda data: decode_student_stats(data, roll_number=roll_number, year=year, month=month),
        )
        if stats is None or subject not in stats.subjects:
            return None
        return StudentAttendanceSummary(
            roll_number=stats.roll_number,
            name=student_name(stats.roll_number),
            stats=stats.subjects[subject],
        )

    def _metadata_from_raw(self, year: int, month: int) -> AttendanceMetadata:
        return AttendanceMetadata(
            subjects=self._raw.fetch_subjects(year, month),
            groups=self._raw.fetch_groups(year, month),
            last_updated=format_timestamp(now_local()),
        )
