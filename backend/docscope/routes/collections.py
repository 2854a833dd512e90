from fastapi import APIRouter, Depends, Query

from docscope.config import Settings
from docscope.db.store import DocumentStore
from docscope.dependencies import get_settings, get_store, valid_collection
from docscope.middleware.input_guard import validate_direction, validate_field_name, validate_sample_size
from docscope.models.collection import DocumentPage, DocumentView
from docscope.schemas.collection import (
    CollectionRelationshipsResponse,
    CollectionsResponse,
    CollectionStatsResponse,
    FieldAnalysisResponse,
    PreviewDocument,
    PreviewPage,
)
from docscope.services import (
    collection_service,
    field_stats_service,
    pattern_service,
    relationship_service,
)
from docscope.services.formatting import estimate_document_size, format_field_value, is_system_collection

router = APIRouter(prefix="/collections", tags=["collections"])


@router.get("", response_model=CollectionsResponse)
async def list_collections(
    detailed: bool = False,
    include_system: bool = True,
    store: DocumentStore = Depends(get_store),
):
    if detailed:
        info = await collection_service.get_collections_info(store)
        if not include_system:
            info = [c for c in info if not is_system_collection(c.name)]
        return {"collections": info}

    names = await collection_service.list_collections(store)
    if not include_system:
        names = [n for n in names if not is_system_collection(n)]
    return {"collections": names}


@router.get("/{name}", response_model=CollectionStatsResponse)
async def get_collection(
    name: str = Depends(valid_collection),
    recent: bool = False,
    limit: int | None = Query(None, ge=1),
    store: DocumentStore = Depends(get_store),
    config: Settings = Depends(get_settings),
):
    """Document counts, recency windows and growth for one collection."""
    stats = await collection_service.get_collection_stats(store, name, config.created_at_field)
    result = CollectionStatsResponse(**stats.model_dump())
    if recent:
        docs = await collection_service.get_recent_documents(
            store,
            name,
            min(limit or config.recent_documents_limit, config.max_page_size),
            config.created_at_field,
        )
        result.recent_documents = [DocumentView(id=d.id, data=d.data) for d in docs]
    return result


@router.get("/{name}/stats", response_model=FieldAnalysisResponse)
async def get_field_analysis(
    name: str = Depends(valid_collection),
    sample_size: int | None = None,
    store: DocumentStore = Depends(get_store),
    config: Settings = Depends(get_settings),
):
    """Per-field statistics and semantic pattern analysis over a sample."""
    field_size = config.field_sample_size if sample_size is None else sample_size
    pattern_size = config.pattern_sample_size if sample_size is None else sample_size
    field_size = validate_sample_size(field_size, config.max_sample_size)
    pattern_size = validate_sample_size(pattern_size, config.max_sample_size)
    field_stats = await field_stats_service.get_all_field_stats(store, name, field_size)
    patterns = await pattern_service.analyze_collection_patterns(store, name, pattern_size)
    return FieldAnalysisResponse(
        collection_name=name,
        field_stats=field_stats,
        patterns=patterns,
        type_labels={
            field: pattern_service.get_inferred_type_label(p.inferred_type)
            for field, p in patterns.fields.items()
        },
    )


@router.get("/{name}/documents", response_model=None)
async def get_documents(
    name: str = Depends(valid_collection),
    limit: int | None = Query(None, ge=1),
    order_by: str | None = None,
    direction: str = "desc",
    start_after: str | None = None,
    include_total: bool = False,
    preview: bool = False,
    store: DocumentStore = Depends(get_store),
    config: Settings = Depends(get_settings),
) -> DocumentPage | PreviewPage:
    """Cursor-paginated documents; `preview` returns display strings instead of raw values."""
    page = await collection_service.get_documents_page(
        store,
        name,
        limit=min(limit or config.default_page_size, config.max_page_size),
        order_by=validate_field_name(order_by) if order_by else None,
        direction=validate_direction(direction),
        start_after=start_after,
        include_total=include_total,
        created_at_field=config.created_at_field,
    )
    if not preview:
        return page

    return PreviewPage(
        documents=[
            PreviewDocument(
                id=d.id,
                preview={k: format_field_value(v) for k, v in d.data.items()},
                size_bytes=estimate_document_size(d.data),
            )
            for d in page.documents
        ],
        has_more=page.has_more,
        last_doc_id=page.last_doc_id,
        total=page.total,
    )


@router.get("/{name}/relationships", response_model=CollectionRelationshipsResponse)
async def get_collection_relationships(
    name: str = Depends(valid_collection),
    sample_size: int | None = None,
    store: DocumentStore = Depends(get_store),
    config: Settings = Depends(get_settings),
):
    size = config.relationship_sample_size if sample_size is None else sample_size
    size = validate_sample_size(size, config.max_sample_size)
    all_collections = await collection_service.list_collections(store)
    relationships = await relationship_service.detect_collection_relationships(
        store, name, all_collections, size
    )
    return {"collection_name": name, "relationships": relationships}
