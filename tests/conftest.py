"""
Shared fixtures: in-memory stores standing in for MongoDB, and a catalog factory.
"""

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Set, Tuple

import pytest

from artisan_discovery.domain.models.analytics import RecommendationAnalytics, SearchAnalytics
from artisan_discovery.domain.models.catalog import CatalogItem, SearchQuery, SellerSummary
from artisan_discovery.domain.models.profile import Interaction, InteractionType
from artisan_discovery.domain.models.query import ProcessedQuery
from artisan_discovery.domain.repositories.interfaces import AnalyticsStore, InteractionStore, ListingStore

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def make_item(
    item_id: str,
    title: str = "Item",
    *,
    price: float = 25.0,
    category: str = "pottery",
    tags: Sequence[str] = (),
    description: str = "",
    images: Sequence[str] = (),
    rating: float = 4.0,
    created_at: Optional[datetime] = None,
) -> CatalogItem:
    return CatalogItem(
        id=item_id,
        title=title,
        description=description,
        price=price,
        images=list(images),
        seller=SellerSummary(id=f"seller-{item_id}", name="Maker", rating=rating),
        category=category,
        tags=list(tags),
        created_at=created_at or NOW - timedelta(days=60),
    )


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeListingStore(ListingStore):
    def __init__(self, items: Sequence[CatalogItem] = ()):
        self.items: Dict[str, CatalogItem] = {i.id: i for i in items}
        self.inactive: Set[str] = set()  # sold or deactivated ids
        self.search_calls = 0
        self.fail_search = False
        self.fail_category = False

    async def search_listings(self, query: SearchQuery, processed: ProcessedQuery) -> List[CatalogItem]:
        self.search_calls += 1
        if self.fail_search:
            raise ConnectionError("listing store unreachable")
        text = query.query.strip().lower()
        terms = {text, *processed.expanded_terms}
        hits = [
            i for i in self._active()
            if not text
            or text in i.title.lower()
            or text in i.description.lower()
            or terms.intersection(i.tags)
        ]
        return hits[query.offset:query.offset + query.limit]

    def _active(self) -> List[CatalogItem]:
        return [i for i in self.items.values() if i.id not in self.inactive]

    async def get_listing(self, listing_id: str) -> Optional[CatalogItem]:
        return None if listing_id in self.inactive else self.items.get(listing_id)

    async def get_listings(self, listing_ids: Sequence[str], *, active_only: bool = True) -> List[CatalogItem]:
        return [
            self.items[i] for i in listing_ids
            if i in self.items and not (active_only and i in self.inactive)
        ]

    async def listings_in_category(
        self, category: str, *, limit: int, exclude_id: Optional[str] = None
    ) -> List[CatalogItem]:
        if self.fail_category:
            raise ConnectionError("listing store unreachable")
        hits = [i for i in self._active() if i.category == category and i.id != exclude_id]
        hits.sort(key=lambda i: i.created_at, reverse=True)
        return hits[:limit]

    async def matching_categories(self, text: str, limit: int) -> List[Tuple[str, int]]:
        counts = Counter(i.category for i in self._active() if text.lower() in i.category.lower())
        return counts.most_common(limit)


class FakeInteractionStore(InteractionStore):
    def __init__(self, interactions: Sequence[Interaction] = (), trending: Sequence[str] = ()):
        self.interactions = list(interactions)
        self.trending = list(trending)
        self.trending_calls = 0
        self.fail_history = False
        self.fail_trending = False

    async def interactions_for_user(self, user_id, *, limit) -> List[Interaction]:
        if self.fail_history:
            raise ConnectionError("interaction store unreachable")
        rows = [i for i in self.interactions if i.user_id == user_id]
        rows.sort(key=lambda i: i.created_at, reverse=True)
        return rows[:limit]

    async def favorites_of(self, user_id, *, exclude_ids, limit) -> List[str]:
        excluded = set(exclude_ids)
        ids = [
            i.listing_id for i in self.interactions
            if i.user_id == user_id and i.interaction_type == InteractionType.FAVORITE and i.listing_id not in excluded
        ]
        return ids[:limit]

    async def other_users(self, user_id, *, limit) -> List[str]:
        return list(dict.fromkeys(i.user_id for i in self.interactions if i.user_id != user_id))[:limit]

    async def trending_listing_ids(self, since, *, limit) -> List[str]:
        self.trending_calls += 1
        if self.fail_trending:
            raise ConnectionError("interaction store unreachable")
        return self.trending[:limit]


class FakeAnalyticsStore(AnalyticsStore):
    def __init__(self):
        self.searches: List[SearchAnalytics] = []
        self.clicks: List[Tuple[str, str, int]] = []
        self.recommendations: List[RecommendationAnalytics] = []
        self.history: Dict[str, List[str]] = {}
        self.fail_writes = False

    async def record_search(self, analytics: SearchAnalytics) -> None:
        if self.fail_writes:
            raise ConnectionError("analytics store unreachable")
        self.searches.append(analytics)

    async def record_click(self, query_id: str, result_id: str, position: int) -> None:
        if self.fail_writes:
            raise ConnectionError("analytics store unreachable")
        self.clicks.append((query_id, result_id, position))

    async def record_recommendation(self, analytics: RecommendationAnalytics) -> None:
        if self.fail_writes:
            raise ConnectionError("analytics store unreachable")
        self.recommendations.append(analytics)

    async def search_history(self, user_id: str, *, limit: int) -> List[str]:
        return self.history.get(user_id, [])[:limit]

    async def matching_queries(self, text: str, limit: int) -> List[Tuple[str, int]]:
        counts = Counter(s.query for s in self.searches if text.lower() in s.query.lower())
        return counts.most_common(limit)

    async def search_events_since(self, since: datetime) -> List[SearchAnalytics]:
        return [s for s in self.searches if s.timestamp >= since]

    async def clicked_query_ids_since(self, since: datetime) -> Set[str]:
        return {q for q, _, _ in self.clicks}


def interaction(user_id: str, listing_id: str, kind: str = "view", minutes_ago: int = 0) -> Interaction:
    return Interaction(
        user_id=user_id,
        listing_id=listing_id,
        interaction_type=kind,
        created_at=NOW - timedelta(minutes=minutes_ago),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def catalog():
    return [
        make_item("mug", "Blue Ceramic Mug", price=28, category="pottery", tags=["ceramic", "blue", "mug"],
                  description="Wheel-thrown stoneware mug", images=["a.jpg"]),
        make_item("bowl", "Red Ceramic Bowl", price=35, category="pottery", tags=["ceramic", "red", "bowl"],
                  description="Serving bowl", images=["b.jpg"]),
        make_item("vase", "Tall Vase", price=60, category="pottery", tags=["ceramic", "vase"],
                  created_at=NOW - timedelta(days=2)),
        make_item("ring", "Silver Ring", price=80, category="jewelry", tags=["silver", "ring"]),
        make_item("board", "Oak Cutting Board", price=45, category="woodwork", tags=["wood", "kitchen"]),
    ]


@pytest.fixture
def listings(catalog):
    return FakeListingStore(catalog)


@pytest.fixture
def analytics():
    return FakeAnalyticsStore()
