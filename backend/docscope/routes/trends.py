from fastapi import APIRouter, Depends

from docscope.config import Settings
from docscope.db.store import DocumentStore
from docscope.dependencies import get_settings, get_store
from docscope.middleware.input_guard import validate_collection_name
from docscope.models.collection import CollectionTrend
from docscope.schemas.collection import CollectionTrendResponse, TrendsResponse, TrendSummary
from docscope.services import aggregations, collection_service

router = APIRouter(prefix="/trends", tags=["trends"])


def _with_summary(trend: CollectionTrend) -> CollectionTrendResponse:
    peak = aggregations.find_peak_day(trend.data)
    return CollectionTrendResponse(
        **trend.model_dump(),
        summary=TrendSummary(
            daily_average=aggregations.calculate_daily_average(trend.data),
            peak_date=peak.date if peak else None,
            peak_count=peak.count if peak else 0,
            weekly=aggregations.aggregate_to_weekly(trend.data),
        ),
    )


@router.get("", response_model=CollectionTrendResponse | TrendsResponse)
async def get_trends(
    collection: str | None = None,
    store: DocumentStore = Depends(get_store),
    config: Settings = Depends(get_settings),
):
    """Daily counts for one collection, or for the first few collections."""
    if collection:
        name = validate_collection_name(collection)
        trend = await collection_service.get_collection_trends(
            store, name, config.created_at_field, config.trend_days
        )
        return _with_summary(trend)

    trends = await collection_service.get_all_trends(
        store, config.created_at_field, config.trend_days, config.trend_collections_limit
    )
    return TrendsResponse(trends=[_with_summary(t) for t in trends])
