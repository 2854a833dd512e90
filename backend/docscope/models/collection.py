from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_serializer

from docscope.services.formatting import to_json_safe


class CollectionInfo(BaseModel):
    name: str
    document_count: int


class GlobalStats(BaseModel):
    total_documents: int
    total_collections: int
    collections_info: list[CollectionInfo] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CollectionStats(BaseModel):
    name: str
    document_count: int
    today_count: int
    week_count: int
    month_count: int
    growth_percent: int
    sample_fields: list[str] = Field(default_factory=list)
    estimated: bool = False  # windowed counts derived from the total


class TrendPoint(BaseModel):
    date: str  # YYYY-MM-DD
    count: int


class CollectionTrend(BaseModel):
    collection_name: str
    data: list[TrendPoint] = Field(default_factory=list)
    estimated: bool = False


class DocumentView(BaseModel):
    id: str
    data: dict[str, Any] = Field(default_factory=dict)

    @field_serializer("data")
    def _serialize_data(self, data: dict[str, Any]) -> dict[str, Any]:
        return to_json_safe(data)


class DocumentPage(BaseModel):
    documents: list[DocumentView] = Field(default_factory=list)
    has_more: bool = False
    last_doc_id: str | None = None
    total: int | None = None
