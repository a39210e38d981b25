"""
Heuristic ranking for search candidates.

Three independent scores, each capped to [0, 100]:
  relevance  - text match of the query against title / description / tags / category
  popularity - seller rating and listing recency
  quality    - listing completeness (images, description, tags) and seller rating

composite = 0.5 x relevance + 0.3 x popularity + 0.2 x quality

Popularity is a proxy: view/favorite/purchase counters live in the store and
are not read here.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from artisan_discovery.domain.models.catalog import CatalogItem, ScoredResult, SearchQuery, SortBy
from artisan_discovery.domain.services.constants import (
    MAX_SCORE,
    POPULARITY_WEIGHT,
    QUALITY_WEIGHT,
    RELEVANCE_WEIGHT,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankingWeights:
    relevance: float = RELEVANCE_WEIGHT
    popularity: float = POPULARITY_WEIGHT
    quality: float = QUALITY_WEIGHT

    def __post_init__(self):
        total = self.relevance + self.popularity + self.quality
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Ranking weights must sum to 1.0, got {total}")


def relevance_score(item: CatalogItem, query: str) -> float:
    # Lowercased as typed, no trimming: "" and stray spaces are substring matches too
    q = query.lower()
    title = item.title.lower()
    score = 0.0

    if q in title:
        score += 50
    if title == q:
        score += 30
    if q in item.description.lower():
        score += 20

    tags = [t.lower() for t in item.tags]
    for word in q.split(" "):
        if any(word in tag for tag in tags):
            score += 15

    if q in item.category.lower():
        score += 25

    return min(score, MAX_SCORE)


def popularity_score(item: CatalogItem, now: Optional[datetime] = None) -> float:
    now = now or datetime.now(timezone.utc)
    score = item.seller.rating * 10

    age_days = (now - item.created_at).total_seconds() / 86400
    if age_days < 7:
        score += 10
    elif age_days < 30:
        score += 5

    return min(score, MAX_SCORE)


def quality_score(item: CatalogItem) -> float:
    score = min(len(item.images) * 10, 30)

    if len(item.description) > 200:
        score += 20
    elif len(item.description) > 100:
        score += 10

    score += min(len(item.tags) * 5, 25)
    score += item.seller.rating * 5

    return min(score, MAX_SCORE)


def composite_score(relevance: float, popularity: float, quality: float, weights: RankingWeights = RankingWeights()) -> float:
    return relevance * weights.relevance + popularity * weights.popularity + quality * weights.quality


def score_item(item: CatalogItem, query: str, now: Optional[datetime] = None,
               weights: RankingWeights = RankingWeights()) -> ScoredResult:
    rel = relevance_score(item, query)
    pop = popularity_score(item, now)
    qual = quality_score(item)
    return ScoredResult.model_validate({
        **item.model_dump(),
        "relevance_score": rel,
        "popularity_score": pop,
        "quality_score": qual,
        "composite_score": composite_score(rel, pop, qual, weights),
    })


def rank(
    candidates: Sequence[CatalogItem],
    query: SearchQuery,
    now: Optional[datetime] = None,
    weights: RankingWeights = RankingWeights(),
) -> List[ScoredResult]:
    """
    Score and order candidates by composite score, highest first.
    Equal composites keep their input order.
    """
    if not candidates:
        return []
    now = now or datetime.now(timezone.utc)
    scored = [score_item(c, query.query, now, weights) for c in candidates]
    ranked = sorted(scored, key=lambda r: r.composite_score, reverse=True)
    logger.debug("rank candidates=%s top=%s", len(ranked), ranked[0].id)
    return ranked


def order_results(results: List[ScoredResult], sort_by: Optional[SortBy]) -> List[ScoredResult]:
    """Apply an explicit sort preference on top of the composite order (stable)."""
    if sort_by is None or sort_by == SortBy.RELEVANCE:
        return results
    if sort_by == SortBy.PRICE_ASC:
        return sorted(results, key=lambda r: r.price)
    if sort_by == SortBy.PRICE_DESC:
        return sorted(results, key=lambda r: r.price, reverse=True)
    if sort_by == SortBy.NEWEST:
        return sorted(results, key=lambda r: r.created_at, reverse=True)
    if sort_by == SortBy.POPULARITY:
        return sorted(results, key=lambda r: r.popularity_score, reverse=True)
    return results
