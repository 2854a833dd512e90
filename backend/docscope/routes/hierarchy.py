from fastapi import APIRouter, Depends, Query

from docscope.config import Settings
from docscope.db.store import DocumentStore
from docscope.dependencies import get_settings, get_store
from docscope.schemas.collection import HierarchyResponse
from docscope.services import hierarchy_service

router = APIRouter(prefix="/hierarchy", tags=["hierarchy"])


@router.get("", response_model=HierarchyResponse)
async def get_hierarchy(
    max_depth: int | None = Query(None, ge=1, le=5),
    sample_size: int | None = Query(None, ge=1, le=20),
    store: DocumentStore = Depends(get_store),
    config: Settings = Depends(get_settings),
):
    hierarchy = await hierarchy_service.get_collection_hierarchy(
        store,
        config.hierarchy_max_depth if max_depth is None else max_depth,
        config.hierarchy_sample_size if sample_size is None else sample_size,
    )
    return HierarchyResponse(
        **hierarchy.model_dump(),
        tree=hierarchy_service.build_collection_tree(hierarchy.root_collections, hierarchy.subcollections),
    )
