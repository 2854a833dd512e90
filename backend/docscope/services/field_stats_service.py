import logging
import math
from collections import Counter
from typing import Any

from docscope.db.store import DocumentStore, StoredDocument
from docscope.models.fields import (
    ArrayFieldStats,
    BooleanFieldStats,
    FieldStatistics,
    NumericFieldStats,
    StringFieldStats,
    ValueCount,
)
from docscope.services.aggregations import round_half_up
from docscope.services.type_classifier import MISSING, TypeTag, canonical_key, classify, is_null

logger = logging.getLogger(__name__)

MOST_COMMON_LIMIT = 5
MOST_COMMON_MAX_CHARS = 50


def calculate_numeric_stats(values: list[int | float]) -> NumericFieldStats:
    if not values:
        return NumericFieldStats()

    ordered = sorted(float(v) for v in values)
    n = len(ordered)
    total = sum(ordered)
    avg = total / n
    std_dev = math.sqrt(sum((v - avg) ** 2 for v in ordered) / n)

    mid = n // 2
    median = ordered[mid] if n % 2 else (ordered[mid - 1] + ordered[mid]) / 2

    return NumericFieldStats(
        min=ordered[0],
        max=ordered[-1],
        avg=round_half_up(avg, 2),
        median=round_half_up(median, 2),
        std_dev=round_half_up(std_dev, 2),
        sum=round_half_up(total, 2),
    )


def _truncate(value: str) -> str:
    if len(value) > MOST_COMMON_MAX_CHARS:
        return value[:MOST_COMMON_MAX_CHARS] + "..."
    return value


def calculate_string_stats(values: list[str]) -> StringFieldStats:
    if not values:
        return StringFieldStats()

    lengths = [len(s) for s in values]
    # Counter keeps first-seen order, and most_common() sorts stably
    counts = Counter(values)
    return StringFieldStats(
        most_common=[
            ValueCount(value=_truncate(value), count=count)
            for value, count in counts.most_common(MOST_COMMON_LIMIT)
        ],
        avg_length=round_half_up(sum(lengths) / len(lengths)),
        min_length=min(lengths),
        max_length=max(lengths),
        empty_count=sum(1 for s in values if s == ""),
    )


def calculate_boolean_stats(values: list[bool]) -> BooleanFieldStats:
    true_count = sum(1 for v in values if v is True)
    return BooleanFieldStats(true_count=true_count, false_count=len(values) - true_count)


def calculate_array_stats(values: list[Any]) -> ArrayFieldStats:
    if not values:
        return ArrayFieldStats()
    lengths = [len(v) if classify(v) == TypeTag.ARRAY else 0 for v in values]
    return ArrayFieldStats(
        avg_length=round_half_up(sum(lengths) / len(lengths)),
        min_length=min(lengths),
        max_length=max(lengths),
    )


def compute_field_statistics(field_name: str, values: list[Any], total_count: int) -> FieldStatistics:
    """Statistics for one field from the values it took across a sampled batch.

    `values` holds one entry per document, with None/MISSING for documents
    lacking the field. The base type comes from the first non-null value
    only; type-specific stats ignore values of any other type.
    """
    present = [v for v in values if not is_null(v)]
    null_count = len(values) - len(present)
    field_type = classify(present[0]) if present else TypeTag.UNKNOWN

    stats = FieldStatistics(
        field_name=field_name,
        type=field_type,
        null_count=null_count,
        total_count=total_count,
        unique_count=len({canonical_key(v) for v in present}),
        fill_rate=round_half_up((total_count - null_count) / total_count * 100) if total_count > 0 else 0,
    )

    same_type = [v for v in present if classify(v) == field_type]
    if field_type == TypeTag.NUMBER:
        stats.numeric_stats = calculate_numeric_stats(same_type)
    elif field_type == TypeTag.STRING:
        stats.string_stats = calculate_string_stats(same_type)
    elif field_type == TypeTag.BOOLEAN:
        stats.boolean_stats = calculate_boolean_stats(same_type)
    elif field_type == TypeTag.ARRAY:
        stats.array_stats = calculate_array_stats(present)

    return stats


def collect_field_names(documents: list[StoredDocument]) -> list[str]:
    """Every field name seen in the batch, in first-seen order."""
    names: dict[str, None] = {}
    for doc in documents:
        for key in doc.data:
            names.setdefault(key, None)
    return list(names)


def field_values(documents: list[StoredDocument], field_name: str) -> list[Any]:
    return [doc.data.get(field_name, MISSING) for doc in documents]


def analyze_documents(documents: list[StoredDocument]) -> list[FieldStatistics]:
    total = len(documents)
    return [
        compute_field_statistics(name, field_values(documents, name), total)
        for name in collect_field_names(documents)
    ]


async def get_field_statistics(
    store: DocumentStore,
    collection_name: str,
    field_name: str,
    sample_size: int = 500,
) -> FieldStatistics:
    documents = await store.sample_documents(collection_name, sample_size)
    return compute_field_statistics(field_name, field_values(documents, field_name), len(documents))


async def get_all_field_stats(
    store: DocumentStore,
    collection_name: str,
    sample_size: int = 500,
) -> list[FieldStatistics]:
    documents = await store.sample_documents(collection_name, sample_size)
    if not documents:
        return []
    stats = analyze_documents(documents)
    logger.info("Computed stats for %d fields of '%s' from %d documents", len(stats), collection_name, len(documents))
    return stats
