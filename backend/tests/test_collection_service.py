from datetime import datetime, timezone

import pytest

from docscope.services.collection_service import (
    get_all_trends,
    get_collection_stats,
    get_collection_trends,
    get_collections_info,
    get_documents_page,
    get_global_stats,
    get_recent_documents,
)

NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


def _at(month, day, hour=8):
    return datetime(2024, month, day, hour, tzinfo=timezone.utc)


@pytest.fixture
def events_store(store):
    store.add(
        "events",
        {"createdAt": _at(5, 15), "kind": "today"},
        {"createdAt": _at(5, 10), "kind": "week"},
        {"createdAt": _at(4, 20), "kind": "month"},
        {"createdAt": _at(1, 1), "kind": "old"},
        ids=["e1", "e2", "e3", "e4"],
    )
    return store


@pytest.fixture
def bulk_store(store):
    store.add("logs", *({"createdAt": _at(5, 1), "n": i} for i in range(100)))
    store.add("plain", *({"n": i} for i in range(150)))
    return store


@pytest.mark.asyncio
async def test_collections_info_and_global_stats(shop_store):
    info = await get_collections_info(shop_store)
    assert [(c.name, c.document_count) for c in info] == [("users", 2), ("orders", 2), ("categories", 1)]

    stats = await get_global_stats(shop_store)
    assert stats.total_documents == 5
    assert stats.total_collections == 3


class TestCollectionStats:
    @pytest.mark.asyncio
    async def test_windowed_counts(self, events_store):
        stats = await get_collection_stats(events_store, "events", now=NOW)
        assert stats.document_count == 4
        assert (stats.today_count, stats.week_count, stats.month_count) == (1, 2, 3)
        assert stats.growth_percent == 200
        assert stats.estimated is False
        assert stats.sample_fields == ["createdAt", "kind"]

    @pytest.mark.asyncio
    async def test_estimates_when_windowed_query_fails(self, bulk_store):
        bulk_store.fail_windowed_counts = True
        stats = await get_collection_stats(bulk_store, "logs", now=NOW)
        assert (stats.today_count, stats.week_count, stats.month_count) == (3, 15, 40)
        assert stats.growth_percent == -33
        assert stats.estimated is True

    @pytest.mark.asyncio
    async def test_estimates_without_created_at_field(self, bulk_store):
        stats = await get_collection_stats(bulk_store, "plain", now=NOW)
        assert (stats.today_count, stats.week_count, stats.month_count) == (4, 22, 60)
        assert stats.estimated is True

    @pytest.mark.asyncio
    async def test_custom_created_at_field(self, store):
        store.add("posts", {"publishedAt": _at(5, 15)}, {"publishedAt": _at(2, 1)})
        stats = await get_collection_stats(store, "posts", created_at_field="publishedAt", now=NOW)
        assert stats.today_count == 1
        assert stats.estimated is False

    @pytest.mark.asyncio
    async def test_empty_collection(self, store):
        stats = await get_collection_stats(store, "nothing", now=NOW)
        assert stats.document_count == 0
        assert stats.sample_fields == []
        assert stats.growth_percent == 0

    @pytest.mark.asyncio
    async def test_window_ordering(self, events_store):
        stats = await get_collection_stats(events_store, "events", now=NOW)
        assert stats.today_count <= stats.week_count <= stats.month_count <= stats.document_count


class TestTrends:
    @pytest.mark.asyncio
    async def test_daily_counts_oldest_first(self, events_store):
        trend = await get_collection_trends(events_store, "events", days=3, now=NOW)
        assert [(p.date, p.count) for p in trend.data] == [
            ("2024-05-13", 0),
            ("2024-05-14", 0),
            ("2024-05-15", 1),
        ]
        assert trend.estimated is False

    @pytest.mark.asyncio
    async def test_flat_estimate_without_created_at(self, bulk_store):
        trend = await get_collection_trends(bulk_store, "plain", now=NOW)
        assert len(trend.data) == 30
        assert {p.count for p in trend.data} == {2}
        assert trend.data[-1].date == "2024-05-15"
        assert trend.estimated is True

    @pytest.mark.asyncio
    async def test_failed_daily_counts_are_estimated(self, bulk_store):
        bulk_store.fail_windowed_counts = True
        trend = await get_collection_trends(bulk_store, "logs", days=5, now=NOW)
        assert [p.count for p in trend.data] == [8] * 5
        assert trend.estimated is True

    @pytest.mark.asyncio
    async def test_all_trends_limited(self, shop_store):
        trends = await get_all_trends(shop_store, days=7, limit=2)
        assert [t.collection_name for t in trends] == ["users", "orders"]
        assert all(len(t.data) == 7 for t in trends)


class TestDocuments:
    @pytest.fixture
    def items_store(self, store):
        store.add("items", *({"n": i} for i in range(5)), ids=["i1", "i2", "i3", "i4", "i5"])
        return store

    @pytest.mark.asyncio
    async def test_pages_follow_cursor(self, items_store):
        page = await get_documents_page(items_store, "items", limit=2)
        assert [d.id for d in page.documents] == ["i1", "i2"]
        assert page.has_more is True
        assert page.last_doc_id == "i2"
        assert page.total is None

        page = await get_documents_page(items_store, "items", limit=2, start_after="i4")
        assert [d.id for d in page.documents] == ["i5"]
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_unknown_cursor_does_not_restart(self, items_store):
        page = await get_documents_page(items_store, "items", limit=2, start_after="deleted")
        assert page.documents == []
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_requests_one_extra_document(self, items_store):
        await get_documents_page(items_store, "items", limit=2)
        assert items_store.sample_calls[-1] == ("items", 3)

    @pytest.mark.asyncio
    async def test_ordering_and_total(self, items_store):
        page = await get_documents_page(
            items_store, "items", limit=10, order_by="n", direction="asc", include_total=True
        )
        assert [d.data["n"] for d in page.documents] == [0, 1, 2, 3, 4]
        assert page.total == 5
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_empty_page(self, store):
        page = await get_documents_page(store, "nothing")
        assert page.documents == []
        assert page.last_doc_id is None

    @pytest.mark.asyncio
    async def test_recent_documents_newest_first(self, events_store):
        docs = await get_recent_documents(events_store, "events", limit=2)
        assert [d.id for d in docs] == ["e1", "e2"]
