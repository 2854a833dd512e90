"""Read-only document-store contract consumed by the analytics services."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class StoredDocument:
    id: str
    data: dict[str, Any] = field(default_factory=dict)


class DocumentStore(ABC):
    """Every method is a single read; failures raise StoreQueryError."""

    @abstractmethod
    async def list_collections(self) -> list[str]:
        """Names of the root collections."""

    @abstractmethod
    async def count_documents(
        self,
        collection: str,
        field: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> int:
        """Count documents, optionally restricted to `since <= field <= until`."""

    @abstractmethod
    async def sample_documents(
        self,
        collection: str,
        limit: int,
        order_by: str | None = None,
        direction: str = "desc",
        start_after: str | None = None,
    ) -> list[StoredDocument]:
        """Fetch up to `limit` documents, resuming after document id `start_after`."""

    @abstractmethod
    async def list_subcollections(self, collection: str, document_id: str) -> list[str]:
        """Names of the subcollections hanging off one document."""

    @abstractmethod
    def subcollection_path(self, collection: str, document_id: str, name: str) -> str:
        """Path usable as a collection name for a subcollection."""
