import logging
from datetime import datetime
from typing import Any

from bson import DBRef, Decimal128, ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import ConfigurationError as MongoConfigurationError
from pymongo.errors import PyMongoError

from docscope.config import Settings
from docscope.db.store import DocumentStore, StoredDocument
from docscope.middleware.error_handler import ConfigurationError, StoreQueryError

logger = logging.getLogger(__name__)

SYSTEM_PREFIX = "system."
NAMESPACE_SEP = "."


def _decode_value(value: Any) -> Any:
    """Turn BSON-specific scalars into plain Python values."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, Decimal128):
        return float(value.to_decimal())
    if isinstance(value, DBRef):
        return value
    if isinstance(value, dict):
        return {k: _decode_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode_value(v) for v in value]
    return value


def _to_stored(doc: dict[str, Any]) -> StoredDocument:
    doc = dict(doc)
    doc_id = doc.pop("_id", None)
    return StoredDocument(id=str(doc_id), data=_decode_value(doc))


def _coerce_id(document_id: str) -> Any:
    return ObjectId(document_id) if ObjectId.is_valid(document_id) else document_id


def _child_names(names: list[str], parent: str) -> list[str]:
    prefix = parent + NAMESPACE_SEP
    children = []
    for name in names:
        if not name.startswith(prefix):
            continue
        rest = name[len(prefix):]
        if rest and NAMESPACE_SEP not in rest:
            children.append(rest)
    return sorted(children)


class MongoDocumentStore(DocumentStore):
    """DocumentStore over MongoDB. Dotted namespaces act as subcollections."""

    def __init__(self, database: AsyncIOMotorDatabase, client: AsyncIOMotorClient | None = None):
        self.database = database
        self.client = client

    async def _collection_names(self) -> list[str]:
        try:
            return await self.database.list_collection_names()
        except PyMongoError as e:
            raise StoreQueryError("Failed to list collections", detail=str(e)) from e

    async def list_collections(self) -> list[str]:
        names = await self._collection_names()
        return sorted(
            n for n in names
            if NAMESPACE_SEP not in n and not n.startswith(SYSTEM_PREFIX)
        )

    async def count_documents(
        self,
        collection: str,
        field: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> int:
        query: dict[str, Any] = {}
        if field and (since is not None or until is not None):
            window = {}
            if since is not None:
                window["$gte"] = since
            if until is not None:
                window["$lte"] = until
            query[field] = window
        try:
            if not query:
                return await self.database[collection].estimated_document_count()
            return await self.database[collection].count_documents(query)
        except PyMongoError as e:
            raise StoreQueryError(f"Failed to count documents in '{collection}'", detail=str(e)) from e

    async def sample_documents(
        self,
        collection: str,
        limit: int,
        order_by: str | None = None,
        direction: str = "desc",
        start_after: str | None = None,
    ) -> list[StoredDocument]:
        coll = self.database[collection]
        sort_dir = DESCENDING if direction == "desc" else ASCENDING
        try:
            query: dict[str, Any] = {}
            if start_after:
                anchor = await coll.find_one({"_id": _coerce_id(start_after)})
                if anchor is None:
                    logger.info("Cursor document '%s' no longer exists in '%s'", start_after, collection)
                    return []
                query = self._after(anchor, order_by, sort_dir)

            cursor = coll.find(query)
            if order_by:
                cursor = cursor.sort([(order_by, sort_dir), ("_id", sort_dir)])
            elif start_after:
                cursor = cursor.sort("_id", ASCENDING)
            docs = await cursor.limit(limit).to_list(length=limit)
        except PyMongoError as e:
            raise StoreQueryError(f"Failed to read documents from '{collection}'", detail=str(e)) from e
        return [_to_stored(d) for d in docs]

    @staticmethod
    def _after(anchor: dict[str, Any], order_by: str | None, sort_dir: int) -> dict[str, Any]:
        op = "$lt" if sort_dir == DESCENDING else "$gt"
        if not order_by:
            return {"_id": {"$gt": anchor["_id"]}}
        value = anchor.get(order_by)
        return {
            "$or": [
                {order_by: {op: value}},
                {order_by: value, "_id": {op: anchor["_id"]}},
            ]
        }

    async def list_subcollections(self, collection: str, document_id: str) -> list[str]:
        # MongoDB namespaces are per collection, so every document shares them.
        return _child_names(await self._collection_names(), collection)

    def subcollection_path(self, collection: str, document_id: str, name: str) -> str:
        return f"{collection}{NAMESPACE_SEP}{name}"


def init_mongodb(config: Settings) -> MongoDocumentStore:
    if not config.mongodb_uri:
        raise ConfigurationError(detail="MONGODB_URI is not defined")
    if not config.mongodb_db:
        raise ConfigurationError(detail="MONGODB_DB is not defined")
    try:
        client = AsyncIOMotorClient(config.mongodb_uri)
    except MongoConfigurationError as e:
        raise ConfigurationError(detail=str(e)) from e
    return MongoDocumentStore(client[config.mongodb_db], client=client)


async def close_mongodb(store: MongoDocumentStore | None) -> None:
    if store and store.client:
        store.client.close()
