import pytest

from docscope.services.hierarchy_service import (
    build_collection_tree,
    discover_subcollections,
    get_collection_hierarchy,
    get_document_subcollections,
    has_subcollections,
)


@pytest.fixture
def nested_store(shop_store):
    """users/u1 has orders (with items below), users/u2 has orders and prefs."""
    s = shop_store
    s.subcollections[("users", "u1")] = ["orders"]
    s.subcollections[("users", "u2")] = ["orders", "prefs"]
    s.add("users/u1/orders", {"total": 3}, ids=["so1"])
    s.subcollections[("users/u1/orders", "so1")] = ["items"]
    s.add("users/u1/orders/so1/items", {"sku": "a"}, {"sku": "b"})
    return s


class TestDiscover:
    @pytest.mark.asyncio
    async def test_depth_first_with_dedup(self, nested_store):
        subs = await discover_subcollections(nested_store, "users")
        assert [(s.name, s.path, s.depth) for s in subs] == [
            ("orders", "users/u1/orders", 1),
            ("items", "users/u1/orders/so1/items", 2),
            ("prefs", "users/u2/prefs", 1),
        ]

    @pytest.mark.asyncio
    async def test_parent_links_and_counts(self, nested_store):
        orders, items, prefs = await discover_subcollections(nested_store, "users")
        assert orders.parent_collection == "users"
        assert orders.parent_doc_id == "u1"
        assert orders.document_count == 1
        assert items.parent_collection == "orders"
        assert items.parent_path == "users/u1/orders"
        assert items.document_count == 2
        assert prefs.document_count == 0

    @pytest.mark.asyncio
    async def test_respects_max_depth(self, nested_store):
        subs = await discover_subcollections(nested_store, "users", max_depth=1)
        assert [s.name for s in subs] == ["orders", "prefs"]
        assert await discover_subcollections(nested_store, "users", max_depth=0) == []

    @pytest.mark.asyncio
    async def test_sample_size_limits_parents(self, nested_store):
        subs = await discover_subcollections(nested_store, "users", max_depth=1, sample_size=1)
        assert [s.name for s in subs] == ["orders"]

    @pytest.mark.asyncio
    async def test_listing_failure_skips_document(self, nested_store):
        nested_store.fail_listing_for.add(("users", "u1"))
        subs = await discover_subcollections(nested_store, "users")
        assert [s.path for s in subs] == ["users/u2/orders", "users/u2/prefs"]

    @pytest.mark.asyncio
    async def test_count_failure_reports_zero(self, nested_store):
        nested_store.fail_counts_for.add("users/u1/orders")
        subs = await discover_subcollections(nested_store, "users", max_depth=1)
        assert subs[0].document_count == 0


@pytest.mark.asyncio
async def test_collection_hierarchy(nested_store):
    hierarchy = await get_collection_hierarchy(nested_store)
    assert [(r.name, r.document_count, r.has_subcollections) for r in hierarchy.root_collections] == [
        ("users", 2, True),
        ("orders", 2, False),
        ("categories", 1, False),
    ]
    assert hierarchy.total_subcollections == 3
    assert hierarchy.total_depth == 2


@pytest.mark.asyncio
async def test_flat_database_has_no_depth(shop_store):
    hierarchy = await get_collection_hierarchy(shop_store)
    assert hierarchy.subcollections == []
    assert hierarchy.total_depth == 0


@pytest.mark.asyncio
async def test_has_subcollections(nested_store):
    assert await has_subcollections(nested_store, "users") is True
    assert await has_subcollections(nested_store, "categories") is False


@pytest.mark.asyncio
async def test_document_subcollections(nested_store):
    assert await get_document_subcollections(nested_store, "users", "u2") == ["orders", "prefs"]
    nested_store.fail_listing_for.add(("users", "u2"))
    assert await get_document_subcollections(nested_store, "users", "u2") == []


@pytest.mark.asyncio
async def test_tree_nests_by_parent_path(nested_store):
    hierarchy = await get_collection_hierarchy(nested_store)
    tree = build_collection_tree(hierarchy.root_collections, hierarchy.subcollections)

    assert [n.name for n in tree] == ["users", "orders", "categories"]
    users = tree[0]
    assert [c.path for c in users.children] == ["users/u1/orders", "users/u2/prefs"]
    assert [c.name for c in users.children[0].children] == ["items"]
    assert tree[1].children == []


@pytest.mark.asyncio
async def test_unreadable_root_is_skipped(nested_store):
    nested_store.fail_samples_for.add("categories")
    nested_store.fail_counts_for.add("orders")
    hierarchy = await get_collection_hierarchy(nested_store)
    assert [(r.name, r.document_count, r.has_subcollections) for r in hierarchy.root_collections] == [
        ("users", 2, True),
        ("orders", 0, False),
        ("categories", 0, False),
    ]
    assert hierarchy.total_subcollections == 3
