from fastapi import APIRouter, Depends

from docscope.config import Settings
from docscope.db.store import DocumentStore
from docscope.dependencies import get_settings, get_store
from docscope.middleware.input_guard import validate_sample_size
from docscope.schemas.collection import DatabaseRelationshipsResponse
from docscope.services import collection_service, relationship_service

router = APIRouter(prefix="/relationships", tags=["relationships"])


@router.get("", response_model=DatabaseRelationshipsResponse)
async def get_relationships(
    sample_size: int | None = None,
    store: DocumentStore = Depends(get_store),
    config: Settings = Depends(get_settings),
):
    """Inferred links between every pair of collections, plus a graph for display."""
    size = config.relationship_sample_size if sample_size is None else sample_size
    size = validate_sample_size(size, config.max_sample_size)
    result = await relationship_service.detect_all_relationships(store, size)
    info = await collection_service.get_collections_info(store)
    return DatabaseRelationshipsResponse(
        **result.model_dump(),
        graph=relationship_service.build_relationship_graph(result.relationships, info),
    )
