from datetime import datetime

import pytest

from docscope.db.store import DocumentStore, StoredDocument
from docscope.middleware.error_handler import StoreQueryError


class FakeDocumentStore(DocumentStore):
    """In-memory store. Subcollections are keyed by "collection/doc_id/name" paths."""

    def __init__(self, collections: dict[str, list[StoredDocument]] | None = None):
        self.collections: dict[str, list[StoredDocument]] = collections or {}
        self.subcollections: dict[tuple[str, str], list[str]] = {}
        self.fail_windowed_counts = False
        self.fail_counts_for: set[str] = set()
        self.fail_samples_for: set[str] = set()
        self.fail_listing_for: set[tuple[str, str]] = set()
        self.sample_calls: list[tuple[str, int]] = []

    def add(self, collection: str, *docs: dict, ids: list[str] | None = None) -> None:
        bucket = self.collections.setdefault(collection, [])
        for i, data in enumerate(docs):
            doc_id = ids[i] if ids else f"{collection}-{len(bucket) + 1}"
            bucket.append(StoredDocument(id=doc_id, data=data))

    async def list_collections(self) -> list[str]:
        return [name for name in self.collections if "/" not in name]

    async def count_documents(
        self,
        collection: str,
        field: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> int:
        if collection in self.fail_counts_for:
            raise StoreQueryError(detail=f"count failed for {collection}")
        docs = self.collections.get(collection, [])
        if field is None:
            return len(docs)
        if self.fail_windowed_counts:
            raise StoreQueryError(detail="The query requires an index")
        count = 0
        for doc in docs:
            value = doc.data.get(field)
            if value is None:
                continue
            if since is not None and value < since:
                continue
            if until is not None and value > until:
                continue
            count += 1
        return count

    async def sample_documents(
        self,
        collection: str,
        limit: int,
        order_by: str | None = None,
        direction: str = "desc",
        start_after: str | None = None,
    ) -> list[StoredDocument]:
        self.sample_calls.append((collection, limit))
        if collection in self.fail_samples_for:
            raise StoreQueryError(detail=f"read failed for {collection}")
        docs = list(self.collections.get(collection, []))
        if order_by:
            docs.sort(key=lambda d: d.data.get(order_by), reverse=direction == "desc")
        if start_after:
            ids = [d.id for d in docs]
            if start_after not in ids:
                return []
            docs = docs[ids.index(start_after) + 1:]
        return docs[:limit]

    async def list_subcollections(self, collection: str, document_id: str) -> list[str]:
        if (collection, document_id) in self.fail_listing_for:
            raise StoreQueryError(detail="listing failed")
        return list(self.subcollections.get((collection, document_id), []))

    def subcollection_path(self, collection: str, document_id: str, name: str) -> str:
        return f"{collection}/{document_id}/{name}"


@pytest.fixture
def store():
    return FakeDocumentStore()


@pytest.fixture
def shop_store():
    """Small e-commerce style database with references between collections."""
    s = FakeDocumentStore()
    s.add(
        "users",
        {"email": "ann@example.com", "name": "Ann", "age": 31},
        {"email": "bob@example.com", "name": "Bob", "age": 45},
        ids=["u1", "u2"],
    )
    s.add(
        "orders",
        {"userId": "u1", "total": 12.5, "status": "paid"},
        {"userId": "u2", "total": 40.0, "status": "paid"},
        ids=["o1", "o2"],
    )
    s.add("categories", {"label": "Books"}, ids=["c1"])
    return s
