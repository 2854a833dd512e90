import logging
from typing import Any

from docscope.db.store import DocumentStore, StoredDocument
from docscope.middleware.error_handler import StoreError
from docscope.models.collection import CollectionInfo
from docscope.models.relationships import (
    CollectionRelationship,
    DatabaseRelationships,
    GraphEdge,
    GraphNode,
    RelationshipGraph,
    RelationshipType,
)
from docscope.services.formatting import sanitize_collection_name
from docscope.services.type_classifier import TypeTag, classify, reference_path

logger = logging.getLogger(__name__)

REFERENCE_CONFIDENCE = 1.0
SUFFIX_FK_CONFIDENCE = 0.85
NAME_FK_CONFIDENCE = 0.7
SAMPLE_VALUE_CHARS = 30

# Field-name suffixes that mark a foreign key, checked in order.
FOREIGN_KEY_SUFFIXES = ("Id", "_id", "Ref", "_ref", "ID")

RELATIONSHIP_TYPE_LABELS = {
    RelationshipType.REFERENCE: "Référence",
    RelationshipType.FOREIGN_KEY: "Clé étrangère",
    RelationshipType.EMBEDDED: "Intégré",
}


def _matches_plural(collection: str, base: str) -> bool:
    name = collection.lower()
    return (
        name == base
        or name == base + "s"
        or name == base + "es"
        or (base.endswith("y") and name == base[:-1] + "ies")
    )


def _reference_relationship(source: str, field: str, value: Any) -> CollectionRelationship:
    path = reference_path(value)
    return CollectionRelationship(
        source_collection=source,
        target_collection=path.split("/")[0],
        source_field=field,
        relationship_type=RelationshipType.REFERENCE,
        confidence=REFERENCE_CONFIDENCE,
        sample_value=path,
    )


def _suffix_foreign_key(
    source: str, field: str, value: Any, collections: list[str]
) -> CollectionRelationship | None:
    for suffix in FOREIGN_KEY_SUFFIXES:
        if not field.endswith(suffix):
            continue
        base = field[: -len(suffix)].lower()
        target = next((c for c in collections if _matches_plural(c, base)), None)
        if target and target != source:
            return CollectionRelationship(
                source_collection=source,
                target_collection=target,
                source_field=field,
                relationship_type=RelationshipType.FOREIGN_KEY,
                confidence=SUFFIX_FK_CONFIDENCE,
                sample_value=str(value)[:SAMPLE_VALUE_CHARS],
            )
    return None


def _name_foreign_key(
    source: str, field: str, value: Any, collections: list[str]
) -> CollectionRelationship | None:
    lowered = field.lower()
    for target in collections:
        if target == source:
            continue
        plural = target.lower()
        singular = plural[:-1] if plural.endswith("s") else plural
        candidates = {singular + "id", singular + "_id", plural + "id", plural + "_id"}
        if lowered in candidates:
            return CollectionRelationship(
                source_collection=source,
                target_collection=target,
                source_field=field,
                relationship_type=RelationshipType.FOREIGN_KEY,
                confidence=NAME_FK_CONFIDENCE,
                sample_value=str(value)[:SAMPLE_VALUE_CHARS],
            )
    return None


def infer_relationship(
    source: str, field: str, value: Any, collections: list[str]
) -> CollectionRelationship | None:
    """Apply the detection rules to one field value, strongest rule first."""
    tag = classify(value)
    if tag == TypeTag.REFERENCE:
        return _reference_relationship(source, field, value)

    if tag == TypeTag.STRING and value:
        found = _suffix_foreign_key(source, field, value, collections)
        if found:
            return found

    if tag in (TypeTag.STRING, TypeTag.NUMBER):
        return _name_foreign_key(source, field, value, collections)
    return None


def detect_relationships_in_sample(
    collection_name: str,
    all_collections: list[str],
    documents: list[StoredDocument],
) -> list[CollectionRelationship]:
    """Scan documents in order; the first relationship found for a field is kept."""
    relationships: list[CollectionRelationship] = []
    resolved: set[str] = set()

    for doc in documents:
        for field, value in doc.data.items():
            if field in resolved:
                continue
            found = infer_relationship(collection_name, field, value, all_collections)
            if found:
                resolved.add(field)
                relationships.append(found)

    return relationships


async def detect_collection_relationships(
    store: DocumentStore,
    collection_name: str,
    all_collections: list[str],
    sample_size: int = 20,
) -> list[CollectionRelationship]:
    documents = await store.sample_documents(collection_name, sample_size)
    if not documents:
        return []
    return detect_relationships_in_sample(collection_name, all_collections, documents)


async def detect_all_relationships(store: DocumentStore, sample_size: int = 20) -> DatabaseRelationships:
    collections = await store.list_collections()
    relationships: list[CollectionRelationship] = []

    for name in collections:
        try:
            found = await detect_collection_relationships(store, name, collections, sample_size)
        except StoreError as e:
            logger.warning("Skipping relationship scan of '%s': %s", name, e.message)
            continue
        relationships.extend(found)

    return DatabaseRelationships(
        relationships=relationships,
        collections=collections,
        relationship_count=len(relationships),
    )


def build_relationship_graph(
    relationships: list[CollectionRelationship],
    collections_info: list[CollectionInfo] | None = None,
) -> RelationshipGraph:
    counts = {c.name: c.document_count for c in collections_info or []}
    nodes: dict[str, GraphNode] = {}
    edges: list[GraphEdge] = []

    for rel in relationships:
        for name in (rel.source_collection, rel.target_collection):
            if name not in nodes:
                nodes[name] = GraphNode(
                    id=name,
                    label=sanitize_collection_name(name),
                    document_count=counts.get(name),
                )
        edges.append(
            GraphEdge(
                source=rel.source_collection,
                target=rel.target_collection,
                label=rel.source_field,
                type=rel.relationship_type,
            )
        )

    return RelationshipGraph(nodes=list(nodes.values()), edges=edges)


def get_relationship_type_label(relationship_type: RelationshipType) -> str:
    return RELATIONSHIP_TYPE_LABELS.get(relationship_type, relationship_type.value)
