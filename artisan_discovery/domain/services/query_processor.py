"""
Query processing: turns a raw search string into a ProcessedQuery.

Pure and deterministic, no I/O. Entity extraction is vocabulary and
pattern based; anything it cannot interpret is skipped, never raised.
"""

import re
from typing import List

from artisan_discovery.domain.models.query import Intent, ProcessedQuery, QueryEntity
from artisan_discovery.domain.services.constants import (
    COLOR_CONFIDENCE,
    COLOR_TERMS,
    INTENT_RULES,
    MATERIAL_CONFIDENCE,
    MATERIAL_TERMS,
    PRICE_CONFIDENCE,
    PRICE_PATTERN,
    SIZE_CONFIDENCE,
    SIZE_TERMS,
    STOP_WORDS,
    SYNONYMS,
)

_PRICE_RE = re.compile(PRICE_PATTERN)
_NON_WORD_RE = re.compile(r"[^\w]")


def normalize(query: str) -> str:
    return (query or "").lower().strip()


def extract_entities(normalized: str) -> List[QueryEntity]:
    entities: List[QueryEntity] = []

    for m in _PRICE_RE.finditer(normalized):
        value = m.group(0).strip()
        if not value:
            continue
        entities.append(QueryEntity(type="price", value=value, confidence=PRICE_CONFIDENCE))

    for kind, vocabulary, confidence in (
        ("color", COLOR_TERMS, COLOR_CONFIDENCE),
        ("material", MATERIAL_TERMS, MATERIAL_CONFIDENCE),
        ("size", SIZE_TERMS, SIZE_CONFIDENCE),
    ):
        for term in vocabulary:
            if term in normalized:
                entities.append(QueryEntity(type=kind, value=term, confidence=confidence))

    return entities


def classify_intent(normalized: str) -> Intent:
    for intent, triggers in INTENT_RULES:
        if any(t in normalized for t in triggers):
            return Intent(intent)
    return Intent.BROWSE


def extract_keywords(normalized: str) -> List[str]:
    keywords = []
    for word in normalized.split():
        if len(word) <= 2 or word in STOP_WORDS:
            continue
        word = _NON_WORD_RE.sub("", word)
        if word:
            keywords.append(word)
    return keywords


def expand_synonyms(keywords: List[str]) -> List[str]:
    expanded: List[str] = []
    for kw in keywords:
        expanded.extend(SYNONYMS.get(kw, ()))
    return list(dict.fromkeys(expanded))


def process(raw_query: str) -> ProcessedQuery:
    normalized = normalize(raw_query)
    keywords = extract_keywords(normalized)
    synonyms = expand_synonyms(keywords)
    return ProcessedQuery(
        original_query=raw_query,
        processed_query=" ".join(keywords + synonyms),
        entities=extract_entities(normalized),
        intent=classify_intent(normalized),
        keywords=keywords,
        synonyms=synonyms,
    )
