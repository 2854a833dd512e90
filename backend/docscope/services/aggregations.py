"""Stateless numeric helpers shared by the stats services and the dashboard views."""

import math
from datetime import date, timedelta

from docscope.models.collection import CollectionInfo, TrendPoint


def round_half_up(value: float, digits: int = 0) -> float | int:
    """Round halves towards +infinity (2.5 -> 3, -2.5 -> -2). inf and NaN pass through."""
    if not math.isfinite(value):
        return value
    if digits == 0:
        return int(math.floor(value + 0.5))
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def calculate_growth(current: int | float, previous: int | float) -> int:
    if previous == 0:
        return 100 if current > 0 else 0
    return round_half_up((current - previous) / previous * 100)


def get_top_collections(collections: list[CollectionInfo], limit: int = 5) -> list[CollectionInfo]:
    # sorted() is stable: ties keep their original order
    return sorted(collections, key=lambda c: c.document_count, reverse=True)[:limit]


def get_total_documents(collections: list[CollectionInfo]) -> int:
    return sum(c.document_count for c in collections)


def get_collection_distribution(collections: list[CollectionInfo]) -> list[dict]:
    total = get_total_documents(collections)
    return [
        {
            "name": c.name,
            "value": c.document_count,
            "percentage": round_half_up(c.document_count / total * 100) if total > 0 else 0,
        }
        for c in collections
    ]


def week_start(day: date) -> date:
    """Sunday on or before `day`."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def aggregate_to_weekly(daily: list[TrendPoint]) -> list[dict]:
    weeks: dict[str, int] = {}
    for point in daily:
        key = week_start(date.fromisoformat(point.date)).isoformat()
        weeks[key] = weeks.get(key, 0) + point.count
    return [{"week": week, "count": count} for week, count in sorted(weeks.items())]


def calculate_daily_average(daily: list[TrendPoint]) -> int:
    if not daily:
        return 0
    return round_half_up(sum(p.count for p in daily) / len(daily))


def find_peak_day(daily: list[TrendPoint]) -> TrendPoint | None:
    peak = None
    for point in daily:
        if peak is None or point.count > peak.count:
            peak = point
    return peak
