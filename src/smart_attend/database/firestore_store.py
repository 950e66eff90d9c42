from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional, Sequence

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud.firestore_v1.base_query import FieldFilter
from google.cloud.firestore_v1.field_path import FieldPath

from ..core.constants import ID_PREFIX_END
from ..core.exceptions import StoreError
from .connection import FirestoreConnection
from .document_store import DocumentStore, StoredDocument


@contextmanager
def store_call(description: str) -> Iterator[None]:
    """Map client, auth and credential-bootstrap failures to StoreError."""
    try:
        yield
    except (GoogleAPIError, GoogleAuthError, ValueError, OSError) as e:
        raise StoreError(f"{description} failed: {e}") from e


class FirestoreDocumentStore(DocumentStore):
    def __init__(self, conn_factory: FirestoreConnection):
        self._conn_factory = conn_factory

    def get(self, collection: str, doc_id: str) -> Optional[Mapping[str, Any]]:
        with store_call(f"get {collection}/{doc_id}"):
            snapshot = self._conn_factory.client().collection(collection).document(doc_id).get()
            if not snapshot.exists:
                return None
            return snapshot.to_dict() or {}

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
        with store_call(f"query {collection}"):
            ref = self._conn_factory.client().collection(collection)
            q = ref

            for field_name, value in (filters or {}).items():
                q = q.where(filter=FieldFilter(field_name, "==", value))

            if id_prefix is not None:
                q = q.where(filter=FieldFilter(FieldPath.document_id(), ">=", ref.document(id_prefix)))
                q = q.where(filter=FieldFilter(FieldPath.document_id(), "<", ref.document(id_prefix + ID_PREFIX_END)))

            if select:
                q = q.select(list(select))

            q = q.order_by(FieldPath.document_id())
            if start_after_id is not None:
                q = q.start_after({FieldPath.document_id(): ref.document(start_after_id)})

            if limit is not None:
                q = q.limit(int(limit))

            return [StoredDocument(id=snap.id, data=snap.to_dict() or {}) for snap in q.stream()]

    def list_collections(self) -> Sequence[str]:
        with store_call("list collections"):
            return [c.id for c in self._conn_factory.client().collections()]

    def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        with store_call(f"set {collection}/{doc_id}"):
            self._conn_factory.client().collection(collection).document(doc_id).set(dict(data))
