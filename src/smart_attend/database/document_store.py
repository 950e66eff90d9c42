from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol, Sequence


@dataclass(frozen=True)
class StoredDocument:
    """A document as returned by the store: its ID and raw field payload."""

    id: str
    data: Mapping[str, Any] = field(default_factory=dict)


class DocumentStore(Protocol):
    """Query primitives the attendance layer needs from the remote store.

    Implementations raise `StoreError` when the remote call fails; the
    services above decide whether that failure is absorbed.
    """

    def get(self, collection: str, doc_id: str) -> Optional[Mapping[str, Any]]:
        raise NotImplementedError

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
        """Equality `filters`, document-ID prefix range, `limit`, and a cursor
        that resumes after the document whose ID is `start_after_id`.

        Results are ordered by document ID.
        """

        raise NotImplementedError

    def list_collections(self) -> Sequence[str]:
        raise NotImplementedError

    def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        """Development seeding only; the dashboard never writes."""

        raise NotImplementedError
