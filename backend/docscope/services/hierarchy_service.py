import asyncio
import logging

from docscope.db.store import DocumentStore
from docscope.middleware.error_handler import StoreError
from docscope.models.hierarchy import (
    CollectionHierarchy,
    CollectionTreeNode,
    RootCollectionInfo,
    SubcollectionInfo,
)

logger = logging.getLogger(__name__)


async def _safe_count(store: DocumentStore, path: str) -> int:
    try:
        return await store.count_documents(path)
    except StoreError as e:
        logger.warning("Count failed for subcollection '%s': %s", path, e.message)
        return 0


async def discover_subcollections(
    store: DocumentStore,
    collection_path: str,
    max_depth: int = 2,
    current_depth: int = 0,
    sample_size: int = 3,
    parent_collection: str | None = None,
) -> list[SubcollectionInfo]:
    """Walk subcollections reachable from a few sampled documents, depth-first."""
    if current_depth >= max_depth:
        return []

    documents = await store.sample_documents(collection_path, sample_size)
    parent_name = parent_collection or collection_path
    found: list[SubcollectionInfo] = []
    seen: set[str] = set()

    for doc in documents:
        try:
            names = await store.list_subcollections(collection_path, doc.id)
            for name in names:
                # The same subcollection name under several parents is listed once
                if name in seen:
                    continue
                seen.add(name)

                path = store.subcollection_path(collection_path, doc.id, name)
                found.append(
                    SubcollectionInfo(
                        name=name,
                        path=path,
                        parent_collection=parent_name,
                        parent_path=collection_path,
                        parent_doc_id=doc.id,
                        document_count=await _safe_count(store, path),
                        depth=current_depth + 1,
                    )
                )

                if current_depth + 1 < max_depth:
                    found.extend(
                        await discover_subcollections(
                            store, path, max_depth, current_depth + 1, sample_size, parent_collection=name
                        )
                    )
        except StoreError as e:
            logger.error("Error listing subcollections for %s/%s: %s", collection_path, doc.id, e.message)

    return found


async def get_collection_hierarchy(
    store: DocumentStore,
    max_depth: int = 2,
    sample_size: int = 3,
) -> CollectionHierarchy:
    names = await store.list_collections()

    async def _root(name: str) -> tuple[RootCollectionInfo, list[SubcollectionInfo]]:
        try:
            count = await store.count_documents(name)
            subs = await discover_subcollections(store, name, max_depth, 0, sample_size)
        except StoreError as e:
            logger.warning("Skipping hierarchy of '%s': %s", name, e.message)
            return RootCollectionInfo(name=name, document_count=0), []
        return RootCollectionInfo(name=name, document_count=count, has_subcollections=bool(subs)), subs

    results = await asyncio.gather(*(_root(n) for n in names))
    roots = [root for root, _ in results]
    subcollections = [sub for _, subs in results for sub in subs]

    return CollectionHierarchy(
        root_collections=roots,
        subcollections=subcollections,
        total_depth=max((s.depth for s in subcollections), default=0),
        total_subcollections=len(subcollections),
    )


async def has_subcollections(store: DocumentStore, collection_path: str, sample_size: int = 3) -> bool:
    documents = await store.sample_documents(collection_path, sample_size)
    for doc in documents:
        try:
            if await store.list_subcollections(collection_path, doc.id):
                return True
        except StoreError:
            continue
    return False


async def get_document_subcollections(store: DocumentStore, collection_path: str, document_id: str) -> list[str]:
    try:
        return await store.list_subcollections(collection_path, document_id)
    except StoreError as e:
        logger.warning("Could not list subcollections of %s/%s: %s", collection_path, document_id, e.message)
        return []


def build_collection_tree(
    root_collections: list[RootCollectionInfo],
    subcollections: list[SubcollectionInfo],
) -> list[CollectionTreeNode]:
    """Nest subcollections under their parent collection, roots first."""
    tree = [
        CollectionTreeNode(name=r.name, path=r.name, document_count=r.document_count, depth=0)
        for r in root_collections
    ]
    by_path = {node.path: node for node in tree}

    for sub in sorted(subcollections, key=lambda s: s.depth):
        parent = by_path.get(sub.parent_path)
        if parent is None:
            continue
        node = CollectionTreeNode(
            name=sub.name,
            path=sub.path,
            document_count=sub.document_count,
            depth=sub.depth,
        )
        parent.children.append(node)
        by_path.setdefault(node.path, node)

    return tree
