from enum import Enum

from pydantic import BaseModel, Field


class RelationshipType(str, Enum):
    REFERENCE = "reference"
    FOREIGN_KEY = "foreign_key"
    EMBEDDED = "embedded"


class CollectionRelationship(BaseModel):
    source_collection: str
    target_collection: str
    source_field: str
    relationship_type: RelationshipType
    confidence: float
    sample_value: str | None = None


class DatabaseRelationships(BaseModel):
    relationships: list[CollectionRelationship] = Field(default_factory=list)
    collections: list[str] = Field(default_factory=list)
    relationship_count: int = 0


class GraphNode(BaseModel):
    id: str
    label: str
    document_count: int | None = None


class GraphEdge(BaseModel):
    source: str
    target: str
    label: str
    type: RelationshipType


class RelationshipGraph(BaseModel):
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
