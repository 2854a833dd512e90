from typing import Any

from pydantic import BaseModel, Field, field_serializer

from docscope.services.formatting import to_json_safe
from docscope.services.type_classifier import TypeTag


class NumericFieldStats(BaseModel):
    min: float = 0
    max: float = 0
    avg: float = 0
    median: float = 0
    std_dev: float = 0
    sum: float = 0


class ValueCount(BaseModel):
    value: str
    count: int


class StringFieldStats(BaseModel):
    most_common: list[ValueCount] = Field(default_factory=list)
    avg_length: int = 0
    min_length: int = 0
    max_length: int = 0
    empty_count: int = 0


class BooleanFieldStats(BaseModel):
    true_count: int = 0
    false_count: int = 0


class ArrayFieldStats(BaseModel):
    avg_length: int = 0
    min_length: int = 0
    max_length: int = 0


class FieldStatistics(BaseModel):
    """Per-field statistics over one document sample.

    At most one of the type-specific blocks is set, picked by `type`.
    """
    field_name: str
    type: TypeTag
    null_count: int
    total_count: int
    unique_count: int
    fill_rate: int  # percentage of non-null values, 0-100
    numeric_stats: NumericFieldStats | None = None
    string_stats: StringFieldStats | None = None
    boolean_stats: BooleanFieldStats | None = None
    array_stats: ArrayFieldStats | None = None


class FieldPattern(BaseModel):
    type: TypeTag
    inferred_type: str  # semantic type (email, currency, ...) or the base type
    confidence: float  # 0-1
    sample_values: list[Any] = Field(default_factory=list)
    null_count: int = 0
    unique_ratio: float = 0
    is_categorial: bool = False

    @field_serializer("sample_values")
    def _serialize_samples(self, values: list[Any]) -> list[Any]:
        return [to_json_safe(v) for v in values]


class CollectionPatterns(BaseModel):
    collection_name: str
    document_count: int
    fields: dict[str, FieldPattern] = Field(default_factory=dict)
    suggested_primary_key: str | None = None
    temporal_fields: list[str] = Field(default_factory=list)
    categorical_fields: list[str] = Field(default_factory=list)
    numeric_fields: list[str] = Field(default_factory=list)
