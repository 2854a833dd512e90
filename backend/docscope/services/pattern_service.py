import logging
import re
from dataclasses import dataclass
from typing import Any

from docscope.db.store import DocumentStore, StoredDocument
from docscope.models.fields import CollectionPatterns, FieldPattern
from docscope.services.aggregations import round_half_up
from docscope.services.type_classifier import TypeTag, canonical_key, classify, is_null

logger = logging.getLogger(__name__)

MATCH_THRESHOLD = 0.7
NAME_HINT_CONFIDENCE = 0.85
NAME_HINT_BOOST = 0.1
SAMPLE_VALUES = 5
CATEGORICAL_MAX_RATIO = 0.1
CATEGORICAL_MAX_UNIQUE = 20

# Evaluated in order; on equal match ratios the earlier pattern wins.
PATTERNS: dict[str, re.Pattern] = {
    "email": re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$"),
    "url": re.compile(r"^https?://[^\s]+$"),
    "phone": re.compile(r"^[+]?[(]?[0-9]{1,4}[)]?[-\s./0-9]{6,}$"),
    "uuid": re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE),
    "isoDate": re.compile(r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}:\d{2})?"),
    "currency": re.compile(r"^[€$£¥]\s*[\d,]+\.?\d*$|^[\d,]+\.?\d*\s*[€$£¥]$"),
    "ipv4": re.compile(r"^(\d{1,3}\.){3}\d{1,3}$"),
    "ipv6": re.compile(r"^([0-9a-fA-F]{1,4}:){7}[0-9a-fA-F]{1,4}$"),
    "slug": re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$"),
    "hexColor": re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$"),
    "creditCard": re.compile(r"^\d{4}[- ]?\d{4}[- ]?\d{4}[- ]?\d{4}$"),
    "postalCodeFR": re.compile(r"^\d{5}$"),
    "percentage": re.compile(r"^\d+(\.\d+)?%$"),
}

# Substring of the lowercased field name -> semantic type. First hit wins.
FIELD_NAME_HINTS: dict[str, str] = {
    "email": "email",
    "mail": "email",
    "courriel": "email",
    "url": "url",
    "link": "url",
    "lien": "url",
    "website": "url",
    "site": "url",
    "phone": "phone",
    "tel": "phone",
    "telephone": "phone",
    "mobile": "phone",
    "price": "currency",
    "prix": "currency",
    "amount": "currency",
    "montant": "currency",
    "cost": "currency",
    "cout": "currency",
    "total": "currency",
    "percent": "percentage",
    "ratio": "percentage",
    "ip": "ipv4",
    "address": "address",
    "adresse": "address",
    "color": "hexColor",
    "couleur": "hexColor",
    "slug": "slug",
    "uid": "uuid",
    "uuid": "uuid",
    "guid": "uuid",
}


@dataclass(frozen=True)
class NumericNameRule:
    inferred_type: str
    confidence: float
    keywords: tuple[str, ...]


# Priority order: currency > percentage > coordinate > age > count.
NUMERIC_NAME_RULES: tuple[NumericNameRule, ...] = (
    NumericNameRule("currency", 0.9, ("price", "prix", "amount", "montant", "cost", "total")),
    NumericNameRule("percentage", 0.9, ("percent", "ratio", "rate", "taux")),
    NumericNameRule("coordinate", 0.85, ("lat", "lon", "coord")),
    NumericNameRule("age", 0.8, ("age", "year", "annee")),
    NumericNameRule("count", 0.8, ("count", "nombre")),
)

INFERRED_TYPE_LABELS: dict[str, str] = {
    "email": "Email",
    "url": "URL",
    "phone": "Téléphone",
    "uuid": "UUID",
    "isoDate": "Date ISO",
    "currency": "Devise",
    "ipv4": "Adresse IPv4",
    "ipv6": "Adresse IPv6",
    "slug": "Slug",
    "hexColor": "Couleur Hex",
    "creditCard": "Carte bancaire",
    "postalCodeFR": "Code postal",
    "percentage": "Pourcentage",
    "coordinate": "Coordonnée",
    "age": "Âge",
    "count": "Compteur",
    "string": "Texte",
    "number": "Nombre",
    "boolean": "Booléen",
    "timestamp": "Date/Heure",
    "array": "Tableau",
    "map": "Objet",
    "reference": "Référence",
    "geopoint": "Point géo",
    "unknown": "Inconnu",
}


def best_pattern_match(strings: list[str]) -> tuple[str, float] | None:
    """Pattern with the highest match ratio, if that ratio exceeds the threshold."""
    if not strings:
        return None
    best = None
    for name, regex in PATTERNS.items():
        ratio = sum(1 for s in strings if regex.search(s)) / len(strings)
        if ratio > MATCH_THRESHOLD and (best is None or ratio > best[1]):
            best = (name, ratio)
    return best


def name_hint(field_name: str) -> str | None:
    lowered = field_name.lower()
    for hint, inferred in FIELD_NAME_HINTS.items():
        if hint in lowered:
            return inferred
    return None


def numeric_name_rule(field_name: str) -> NumericNameRule | None:
    lowered = field_name.lower()
    for rule in NUMERIC_NAME_RULES:
        if any(k in lowered for k in rule.keywords):
            return rule
    return None


def detect_pattern(field_name: str, values: list[Any]) -> FieldPattern:
    present = [v for v in values if not is_null(v)]
    tags = [classify(v) for v in present]
    strings = [v for v, t in zip(present, tags) if t == TypeTag.STRING]
    has_numbers = any(t == TypeTag.NUMBER for t in tags)
    unique_count = len({canonical_key(v) for v in present})

    base_type = tags[0] if tags else TypeTag.UNKNOWN
    inferred_type: str = base_type.value
    confidence = 1.0

    if strings:
        match = best_pattern_match(strings)
        if match:
            inferred_type, confidence = match

        hinted = name_hint(field_name)
        if hinted:
            if inferred_type == base_type.value:
                inferred_type = hinted
                confidence = NAME_HINT_CONFIDENCE
            elif inferred_type == hinted:
                confidence = min(1.0, confidence + NAME_HINT_BOOST)

    if has_numbers:
        rule = numeric_name_rule(field_name)
        if rule:
            inferred_type = rule.inferred_type
            confidence = rule.confidence

    unique_ratio = unique_count / len(present) if present else 0
    return FieldPattern(
        type=base_type,
        inferred_type=inferred_type,
        confidence=confidence,
        sample_values=present[:SAMPLE_VALUES],
        null_count=len(values) - len(present),
        unique_ratio=round_half_up(unique_ratio, 2),
        is_categorial=(
            base_type == TypeTag.STRING
            and unique_ratio < CATEGORICAL_MAX_RATIO
            and unique_count <= CATEGORICAL_MAX_UNIQUE
        ),
    )


def _looks_like_identity(field_name: str, pattern: FieldPattern) -> bool:
    lowered = field_name.lower()
    return pattern.inferred_type == "uuid" or "id" in lowered or "key" in lowered


def analyze_patterns(
    collection_name: str,
    document_count: int,
    documents: list[StoredDocument],
) -> CollectionPatterns:
    """Detect per-field patterns over a sampled batch.

    Values are gathered only from documents that carry the field, so
    `null_count` counts explicit nulls.
    """
    result = CollectionPatterns(collection_name=collection_name, document_count=document_count)
    if not documents:
        result.document_count = 0
        return result

    values_by_field: dict[str, list[Any]] = {}
    for doc in documents:
        for key, value in doc.data.items():
            values_by_field.setdefault(key, []).append(value)

    for field_name, values in values_by_field.items():
        pattern = detect_pattern(field_name, values)
        result.fields[field_name] = pattern

        if pattern.type == TypeTag.TIMESTAMP or pattern.inferred_type == "isoDate":
            result.temporal_fields.append(field_name)
        if pattern.is_categorial:
            result.categorical_fields.append(field_name)
        if pattern.type == TypeTag.NUMBER:
            result.numeric_fields.append(field_name)

    for field_name, pattern in result.fields.items():
        if pattern.unique_ratio == 1 and _looks_like_identity(field_name, pattern):
            result.suggested_primary_key = field_name
            break

    return result


async def analyze_collection_patterns(
    store: DocumentStore,
    collection_name: str,
    sample_size: int = 200,
) -> CollectionPatterns:
    document_count = await store.count_documents(collection_name)
    documents = await store.sample_documents(collection_name, sample_size)
    patterns = analyze_patterns(collection_name, document_count, documents)
    logger.info(
        "Pattern analysis for '%s': %d fields, %d temporal, %d categorical",
        collection_name,
        len(patterns.fields),
        len(patterns.temporal_fields),
        len(patterns.categorical_fields),
    )
    return patterns


def get_inferred_type_label(inferred_type: str) -> str:
    return INFERRED_TYPE_LABELS.get(inferred_type, inferred_type)
