from typing import Any

from pydantic import BaseModel, Field

from docscope.models.collection import (
    CollectionInfo,
    CollectionStats,
    CollectionTrend,
    DocumentView,
    GlobalStats,
)
from docscope.models.fields import CollectionPatterns, FieldStatistics
from docscope.models.hierarchy import CollectionHierarchy, CollectionTreeNode
from docscope.models.relationships import CollectionRelationship, DatabaseRelationships, RelationshipGraph


class CollectionsResponse(BaseModel):
    collections: list[str] | list[CollectionInfo]


class DistributionEntry(BaseModel):
    name: str
    value: int
    percentage: int


class GlobalStatsResponse(GlobalStats):
    top_collections: list[CollectionInfo] = Field(default_factory=list)
    distribution: list[DistributionEntry] = Field(default_factory=list)


class CollectionStatsResponse(CollectionStats):
    recent_documents: list[DocumentView] | None = None


class TrendSummary(BaseModel):
    daily_average: int
    peak_date: str | None = None
    peak_count: int = 0
    weekly: list[dict[str, Any]] = Field(default_factory=list)


class CollectionTrendResponse(CollectionTrend):
    summary: TrendSummary


class TrendsResponse(BaseModel):
    trends: list[CollectionTrendResponse]


class FieldAnalysisResponse(BaseModel):
    collection_name: str
    field_stats: list[FieldStatistics]
    patterns: CollectionPatterns
    type_labels: dict[str, str] = Field(default_factory=dict)


class PreviewDocument(BaseModel):
    id: str
    preview: dict[str, str]
    size_bytes: int


class PreviewPage(BaseModel):
    documents: list[PreviewDocument]
    has_more: bool
    last_doc_id: str | None = None
    total: int | None = None


class CollectionRelationshipsResponse(BaseModel):
    collection_name: str
    relationships: list[CollectionRelationship]


class DatabaseRelationshipsResponse(DatabaseRelationships):
    graph: RelationshipGraph


class HierarchyResponse(CollectionHierarchy):
    tree: list[CollectionTreeNode]
