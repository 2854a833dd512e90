import math
from datetime import date

import pytest

from docscope.models.collection import CollectionInfo, TrendPoint
from docscope.services.aggregations import (
    aggregate_to_weekly,
    calculate_daily_average,
    calculate_growth,
    find_peak_day,
    get_collection_distribution,
    get_top_collections,
    get_total_documents,
    round_half_up,
    week_start,
)


def _info(**counts):
    return [CollectionInfo(name=name, document_count=count) for name, count in counts.items()]


def _points(*pairs):
    return [TrendPoint(date=d, count=c) for d, c in pairs]


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value, expected",
        [(2.5, 3), (3.5, 4), (-2.5, -2), (1.49, 1), (0, 0)],
    )
    def test_integers(self, value, expected):
        assert round_half_up(value) == expected

    def test_digits(self):
        assert round_half_up(1.675, 1) == 1.7
        assert round_half_up(2 / 3, 2) == 0.67


class TestGrowth:
    @pytest.mark.parametrize(
        "current, previous, expected",
        [(100, 50, 100), (0, 0, 0), (50, 0, 100), (25, 100, -75), (1, 3, -67)],
    )
    def test_growth(self, current, previous, expected):
        assert calculate_growth(current, previous) == expected


class TestCollections:
    def test_top_collections_sorted_and_stable(self):
        info = _info(a=3, b=10, c=3, d=1)
        top = get_top_collections(info, limit=3)
        assert [c.name for c in top] == ["b", "a", "c"]

    def test_top_collections_default_limit(self):
        info = _info(a=1, b=2, c=3, d=4, e=5, f=6)
        assert len(get_top_collections(info)) == 5

    def test_total(self):
        assert get_total_documents(_info(a=3, b=7)) == 10
        assert get_total_documents([]) == 0

    def test_distribution(self):
        dist = get_collection_distribution(_info(a=1, b=2))
        assert dist == [
            {"name": "a", "value": 1, "percentage": 33},
            {"name": "b", "value": 2, "percentage": 67},
        ]

    def test_distribution_all_empty(self):
        dist = get_collection_distribution(_info(a=0, b=0))
        assert [d["percentage"] for d in dist] == [0, 0]


class TestTrends:
    def test_week_starts_on_sunday(self):
        assert week_start(date(2024, 5, 1)) == date(2024, 4, 28)  # Wednesday
        assert week_start(date(2024, 4, 28)) == date(2024, 4, 28)  # Sunday
        assert week_start(date(2024, 5, 4)) == date(2024, 4, 28)  # Saturday

    def test_aggregate_to_weekly(self):
        daily = _points(("2024-05-04", 2), ("2024-05-05", 3), ("2024-05-06", 4), ("2024-04-29", 1))
        assert aggregate_to_weekly(daily) == [
            {"week": "2024-04-28", "count": 3},
            {"week": "2024-05-05", "count": 7},
        ]

    def test_daily_average(self):
        assert calculate_daily_average(_points(("2024-05-01", 1), ("2024-05-02", 2))) == 2
        assert calculate_daily_average([]) == 0

    def test_peak_day_first_maximum(self):
        daily = _points(("2024-05-01", 4), ("2024-05-02", 9), ("2024-05-03", 9))
        assert find_peak_day(daily).date == "2024-05-02"
        assert find_peak_day([]) is None


def test_round_half_up_keeps_non_finite_values():
    assert round_half_up(float("inf")) == float("inf")
    assert round_half_up(float("-inf"), 2) == float("-inf")
    assert math.isnan(round_half_up(float("nan"), 2))
