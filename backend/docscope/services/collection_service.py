import asyncio
import calendar
import logging
import math
from datetime import datetime, timedelta, timezone

from docscope.db.store import DocumentStore, StoredDocument
from docscope.middleware.error_handler import StoreQueryError
from docscope.models.collection import (
    CollectionInfo,
    CollectionStats,
    CollectionTrend,
    DocumentPage,
    DocumentView,
    GlobalStats,
    TrendPoint,
)
from docscope.services.aggregations import calculate_growth, get_total_documents

logger = logging.getLogger(__name__)

# Share of the total assumed to fall in each window when real counts are unavailable.
TODAY_RATIO = 0.03
WEEK_RATIO = 0.15
MONTH_RATIO = 0.4


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _one_month_before(moment: datetime) -> datetime:
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _estimate_windows(total: int) -> tuple[int, int, int]:
    return (
        math.floor(total * TODAY_RATIO),
        math.floor(total * WEEK_RATIO),
        math.floor(total * MONTH_RATIO),
    )


async def _has_field(store: DocumentStore, name: str, field: str) -> bool:
    first = await store.sample_documents(name, 1)
    return bool(first) and field in first[0].data


async def list_collections(store: DocumentStore) -> list[str]:
    return await store.list_collections()


async def get_collections_info(store: DocumentStore) -> list[CollectionInfo]:
    names = await store.list_collections()
    counts = await asyncio.gather(*(store.count_documents(n) for n in names))
    return [CollectionInfo(name=n, document_count=c) for n, c in zip(names, counts)]


async def get_global_stats(store: DocumentStore) -> GlobalStats:
    info = await get_collections_info(store)
    return GlobalStats(
        total_documents=get_total_documents(info),
        total_collections=len(info),
        collections_info=info,
    )


async def get_collection_stats(
    store: DocumentStore,
    name: str,
    created_at_field: str = "createdAt",
    now: datetime | None = None,
) -> CollectionStats:
    document_count = await store.count_documents(name)
    first = await store.sample_documents(name, 1)
    sample_fields = list(first[0].data) if first else []

    today_start = _start_of_day(now or datetime.now(timezone.utc))
    week_start = today_start - timedelta(days=7)
    month_start = _one_month_before(today_start)

    estimated = True
    if created_at_field in sample_fields:
        try:
            today_count = await store.count_documents(name, created_at_field, since=today_start)
            week_count = await store.count_documents(name, created_at_field, since=week_start)
            month_count = await store.count_documents(name, created_at_field, since=month_start)
            estimated = False
        except StoreQueryError as e:
            # Usually a missing index on the created-at field
            logger.warning("Windowed counts failed for '%s', using estimates: %s", name, e.detail or e.message)
    if estimated:
        today_count, week_count, month_count = _estimate_windows(document_count)

    return CollectionStats(
        name=name,
        document_count=document_count,
        today_count=today_count,
        week_count=week_count,
        month_count=month_count,
        growth_percent=calculate_growth(month_count, document_count - month_count),
        sample_fields=sample_fields,
        estimated=estimated,
    )


async def get_collection_trends(
    store: DocumentStore,
    name: str,
    created_at_field: str = "createdAt",
    days: int = 30,
    now: datetime | None = None,
) -> CollectionTrend:
    """Daily document counts for the last `days` days, oldest first."""
    today_start = _start_of_day(now or datetime.now(timezone.utc))
    day_starts = [today_start - timedelta(days=i) for i in range(days - 1, -1, -1)]
    has_created_at = await _has_field(store, name, created_at_field)

    total = await store.count_documents(name)
    per_day_estimate = math.floor(total * MONTH_RATIO / days) if days > 0 else 0

    if not has_created_at:
        return CollectionTrend(
            collection_name=name,
            data=[TrendPoint(date=d.date().isoformat(), count=per_day_estimate) for d in day_starts],
            estimated=True,
        )

    points: list[TrendPoint] = []
    estimated = False
    for start in day_starts:
        end = start + timedelta(days=1) - timedelta(microseconds=1)
        try:
            count = await store.count_documents(name, created_at_field, since=start, until=end)
        except StoreQueryError:
            count = per_day_estimate
            estimated = True
        points.append(TrendPoint(date=start.date().isoformat(), count=count))

    if estimated:
        logger.warning("Some daily counts for '%s' were estimated", name)
    return CollectionTrend(collection_name=name, data=points, estimated=estimated)


async def get_all_trends(
    store: DocumentStore,
    created_at_field: str = "createdAt",
    days: int = 30,
    limit: int = 5,
) -> list[CollectionTrend]:
    names = (await store.list_collections())[:limit]
    return list(
        await asyncio.gather(*(get_collection_trends(store, n, created_at_field, days) for n in names))
    )


async def get_recent_documents(
    store: DocumentStore,
    name: str,
    limit: int = 10,
    created_at_field: str = "createdAt",
) -> list[StoredDocument]:
    order_by = created_at_field if await _has_field(store, name, created_at_field) else None
    return await store.sample_documents(name, limit, order_by=order_by, direction="desc")


async def get_documents_page(
    store: DocumentStore,
    name: str,
    limit: int = 25,
    order_by: str | None = None,
    direction: str = "desc",
    start_after: str | None = None,
    include_total: bool = False,
    created_at_field: str = "createdAt",
) -> DocumentPage:
    """One page of documents using the id of the last document as cursor."""
    if not order_by and await _has_field(store, name, created_at_field):
        order_by = created_at_field

    # One extra document tells whether another page exists
    docs = await store.sample_documents(
        name, limit + 1, order_by=order_by, direction=direction, start_after=start_after
    )
    page = docs[:limit]

    return DocumentPage(
        documents=[DocumentView(id=d.id, data=d.data) for d in page],
        has_more=len(docs) > limit,
        last_doc_id=page[-1].id if page else None,
        total=await store.count_documents(name) if include_total else None,
    )
