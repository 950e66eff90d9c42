from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

import pytest

from smart_attend.core.exceptions import StoreError
from smart_attend.database.document_store import StoredDocument


class FakeDocumentStore:
    """In-memory DocumentStore: collections of {doc_id: payload}, ordered by ID."""

    def __init__(self):
        self.collections: dict[str, dict[str, dict]] = {}
        self.failing: set[str] = set()
        self.fail_listing = False
        self.calls: list[tuple[str, str]] = []
        self._auto_id = 0

    def put(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        self.collections.setdefault(collection, {})[doc_id] = dict(data)

    def add_raw(self, year: int, month: int, **fields) -> None:
        self._auto_id += 1
        self.put(f"attendance_{year}_{month:02d}", f"rec{self._auto_id:05d}", fields)

    def _check(self, op: str, collection: str) -> None:
        self.calls.append((op, collection))
        if collection in self.failing:
            raise StoreError(f"{op} {collection} unavailable")

    def get(self, collection: str, doc_id: str) -> Optional[Mapping[str, Any]]:
        self._check("get", collection)
        data = self.collections.get(collection, {}).get(doc_id)
        return dict(data) if data is not None else None

    def query(
        self,
        collection: str,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        id_prefix: Optional[str] = None,
        limit: Optional[int] = None,
        start_after_id: Optional[str] = None,
        select: Optional[Sequence[str]] = None,
    ) -> Sequence[StoredDocument]:
        self._check("query", collection)
        out = []
        for doc_id in sorted(self.collections.get(collection, {})):
            data = self.collections[collection][doc_id]
            if id_prefix is not None and not doc_id.startswith(id_prefix):
                continue
            if start_after_id is not None and doc_id <= start_after_id:
                continue
            if any(data.get(k) != v for k, v in (filters or {}).items()):
                continue
            if select:
                data = {k: data[k] for k in select if k in data}
            out.append(StoredDocument(id=doc_id, data=dict(data)))
            if limit is not None and len(out) >= limit:
                break
        return out

    def list_collections(self) -> Sequence[str]:
        self.calls.append(("list", ""))
        if self.fail_listing:
            raise StoreError("listing unavailable")
        return list(self.collections)

    def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        self._check("set", collection)
        self.put(collection, doc_id, data)

    def count(self, op: str, collection: str) -> int:
        return sum(1 for c in self.calls if c == (op, collection))


class FakeClock:
    def __init__(self, start: int = 1_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
