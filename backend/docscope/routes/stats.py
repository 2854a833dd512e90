from fastapi import APIRouter, Depends

from docscope.db.store import DocumentStore
from docscope.dependencies import get_store
from docscope.schemas.collection import GlobalStatsResponse
from docscope.services import aggregations, collection_service

router = APIRouter(prefix="/stats", tags=["stats"])

TOP_COLLECTIONS = 5


@router.get("", response_model=GlobalStatsResponse)
async def get_global_stats(store: DocumentStore = Depends(get_store)):
    """Document totals across every collection, with top-N and distribution."""
    stats = await collection_service.get_global_stats(store)
    return GlobalStatsResponse(
        **stats.model_dump(),
        top_collections=aggregations.get_top_collections(stats.collections_info, TOP_COLLECTIONS),
        distribution=aggregations.get_collection_distribution(stats.collections_info),
    )
