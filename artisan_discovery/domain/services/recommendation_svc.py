import logging
import math
import time
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, List, Optional, Sequence

from artisan_discovery.domain.models.analytics import RecommendationAnalytics
from artisan_discovery.domain.models.catalog import CatalogItem
from artisan_discovery.domain.models.profile import UserProfile
from artisan_discovery.domain.models.recommendation import (
    Recommendation,
    RecommendationContext,
    RecommendationRequest,
    RecommendationResponse,
    StrategyType,
)
from artisan_discovery.domain.repositories.interfaces import AnalyticsStore, InteractionStore, ListingStore
from artisan_discovery.domain.services.constants import (
    CATEGORY_AFFINITY_CATEGORIES,
    CATEGORY_CONFIDENCE,
    CATEGORY_SCORE_BAND,
    COLLABORATIVE_CONFIDENCE,
    COLLABORATIVE_SCORE_BAND,
    DEFAULT_LIMITS,
    DEFAULT_RESULT_LIMIT,
    HOMEPAGE_ANONYMOUS_WEIGHTS,
    HOMEPAGE_KNOWN_WEIGHTS,
    PRODUCT_PAGE_WEIGHTS,
    SIMILAR_USERS_LIMIT,
    SIMILAR_USERS_USED,
    SIMILARITY_CATEGORY_WEIGHT,
    SIMILARITY_PRICE_WEIGHT,
    SIMILARITY_TAG_WEIGHT,
    TRENDING_CONFIDENCE,
    TRENDING_SCORE_BAND,
)
from artisan_discovery.domain.services.profile_svc import UserProfileBuilder
from artisan_discovery.utils.ids import new_id

logger = logging.getLogger(__name__)


def bucket_size(limit: int, share: float) -> int:
    # Rounded up, so the buckets together may exceed `limit` before truncation
    return math.ceil(limit * share)


def positional_score(band, index: int, count: int) -> float:
    """First item of a strategy gets base + spread, the rest step down linearly."""
    base, spread = band
    if count <= 0:
        return base
    return base + spread * (count - index) / count


def content_similarity(source: CatalogItem, other: CatalogItem) -> float:
    """
    0.4 x category match + 0.4 x tag overlap + 0.2 x price closeness, in [0, 1].
    Tag overlap is |common| / max(|tags1|, |tags2|, 1).
    """
    similarity = 0.0
    if source.category == other.category:
        similarity += SIMILARITY_CATEGORY_WEIGHT

    other_tags = set(other.tags)
    common = [t for t in source.tags if t in other_tags]
    similarity += len(common) / max(len(source.tags), len(other.tags), 1) * SIMILARITY_TAG_WEIGHT

    avg_price = (source.price + other.price) / 2
    if avg_price > 0:
        price_similarity = max(0.0, 1 - abs(source.price - other.price) / avg_price)
    else:
        price_similarity = 1.0  # both free
    similarity += price_similarity * SIMILARITY_PRICE_WEIGHT

    return similarity


def deduplicate(recommendations: Sequence[Recommendation]) -> List[Recommendation]:
    """First occurrence of an item id wins."""
    seen = set()
    unique = []
    for rec in recommendations:
        if rec.item.id in seen:
            continue
        seen.add(rec.item.id)
        unique.append(rec)
    return unique


class RecommendationEngine:
    """
    Context-weighted blending of recommendation strategies.

    Each context draws fixed shares of `limit` from a set of strategies; the
    buckets are concatenated, deduplicated, stripped of excluded ids, sorted
    by score and truncated. A strategy that raises contributes nothing; the
    other buckets still make it into the response.
    """

    def __init__(
        self,
        listings: ListingStore,
        interactions: InteractionStore,
        analytics: AnalyticsStore,
        profiles: UserProfileBuilder,
        trending_refresh_seconds: float = 3600,
        trending_window_hours: int = 24,
        trending_pool_size: int = 50,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.listings = listings
        self.interactions = interactions
        self.analytics = analytics
        self.profiles = profiles
        self.trending_refresh_seconds = trending_refresh_seconds
        self.trending_window_hours = trending_window_hours
        self.trending_pool_size = trending_pool_size
        self._clock = clock
        self._trending_ids: List[str] = []
        self._trending_loaded_at: Optional[float] = None

    async def initialize(self) -> None:
        await self.load_trending_items()
        logger.info("recommendation engine initialized trending=%s", len(self._trending_ids))

    async def recommend(self, request: RecommendationRequest) -> RecommendationResponse:
        t0 = time.perf_counter()
        recommendation_id = new_id("rec")
        session_id = request.session_id or new_id("session")
        # Buckets are sized from the context default, the response is capped separately
        limit = request.limit or DEFAULT_LIMITS[request.context.value]
        max_results = request.limit or DEFAULT_RESULT_LIMIT
        logger.info("recommend start id=%s context=%s user_id=%s limit=%s max_results=%s",
                    recommendation_id, request.context.value, request.user_id, limit, max_results)

        try:
            profile: Optional[UserProfile] = None
            if request.user_id:
                profile = await self.profiles.build(request.user_id)

            candidates = await self._for_context(request, profile, limit)

            excluded = set(request.exclude_items)
            recommendations = [r for r in deduplicate(candidates) if r.item.id not in excluded]
            recommendations = sorted(recommendations, key=lambda r: r.score, reverse=True)[:max_results]

            analytics = RecommendationAnalytics(
                recommendation_id=recommendation_id,
                user_id=request.user_id,
                session_id=session_id,
                context=request.context.value,
                recommended_items=[r.item.id for r in recommendations],
            )
            await self._log_analytics(analytics)

            logger.info("recommend done id=%s items=%s total_time=%.3fs",
                        recommendation_id, len(recommendations), time.perf_counter() - t0)
            return RecommendationResponse(recommendations=recommendations, analytics=analytics)
        except Exception as e:
            logger.error("recommend failed id=%s context=%s err=%s", recommendation_id, request.context.value, e)
            return RecommendationResponse(
                recommendations=[],
                analytics=RecommendationAnalytics(
                    recommendation_id=recommendation_id,
                    user_id=request.user_id,
                    session_id=session_id,
                    context=request.context.value,
                ),
            )

    # ---- context blending ---------------------------------------------------

    async def _for_context(
        self, request: RecommendationRequest, profile: Optional[UserProfile], limit: int
    ) -> List[Recommendation]:
        ctx = request.context
        recs: List[Recommendation] = []

        if ctx == RecommendationContext.HOMEPAGE:
            if profile:
                w = HOMEPAGE_KNOWN_WEIGHTS
                recs += await self._run("category_affinity", self.category_based(profile, bucket_size(limit, w["category_affinity"])))
                recs += await self._run("collaborative", self.collaborative(profile, bucket_size(limit, w["collaborative"])))
                recs += await self._run("trending", self.trending(bucket_size(limit, w["trending"])))
                recs += await self._run("recently_viewed_similar", self.recently_viewed_similar(profile, bucket_size(limit, w["recently_viewed_similar"])))
            else:
                w = HOMEPAGE_ANONYMOUS_WEIGHTS
                recs += await self._run("trending", self.trending(bucket_size(limit, w["trending"])))
                recs += await self._run("popular_by_category", self.popular_by_category(bucket_size(limit, w["popular_by_category"])))

        elif ctx == RecommendationContext.PRODUCT_PAGE:
            item_id = request.current_item
            if not item_id:
                logger.warning("recommend product_page without current_item")
                return []
            w = PRODUCT_PAGE_WEIGHTS
            recs += await self._run("similar_items", self.similar_items(item_id, bucket_size(limit, w["similar_items"])))
            recs += await self._run("frequently_bought_together", self.frequently_bought_together(item_id, bucket_size(limit, w["frequently_bought_together"])))
            recs += await self._run("same_seller", self.same_seller(item_id, bucket_size(limit, w["same_seller"])))

        elif ctx == RecommendationContext.SEARCH_RESULTS:
            recs += await self._run("trending", self.trending(limit))

        elif ctx == RecommendationContext.CART:
            cart = list(request.exclude_items)
            if cart:
                per_line = math.ceil(limit / len(cart))
                for item_id in cart:
                    recs += await self._run("complementary", self.complementary(item_id, per_line))

        elif ctx == RecommendationContext.CHECKOUT:
            recs += await self._run("add_on", self.add_on(list(request.exclude_items), limit))

        return deduplicate(recs)

    async def _run(self, name: str, strategy: Awaitable[List[Recommendation]]) -> List[Recommendation]:
        try:
            recs = await strategy
            logger.debug("recommend strategy=%s items=%s", name, len(recs))
            return recs
        except Exception as e:
            logger.warning("recommend strategy=%s failed err=%s", name, e)
            return []

    # ---- strategies ---------------------------------------------------------

    async def category_based(self, profile: UserProfile, limit: int) -> List[Recommendation]:
        """Newest listings in the user's top categories."""
        recs: List[Recommendation] = []
        per_category = math.ceil(limit / CATEGORY_AFFINITY_CATEGORIES)
        for category in profile.preferences.categories[:CATEGORY_AFFINITY_CATEGORIES]:
            items = await self.listings.listings_in_category(category, limit=per_category)
            for i, item in enumerate(items):
                recs.append(Recommendation(
                    item=item,
                    score=positional_score(CATEGORY_SCORE_BAND, i, len(items)),
                    reason=f"Popular in {category}",
                    type=StrategyType.CONTENT_BASED,
                    confidence=CATEGORY_CONFIDENCE,
                ))
        return recs

    async def collaborative(self, profile: UserProfile, limit: int) -> List[Recommendation]:
        """Listings favorited by "similar" users that this user has not viewed."""
        similar_users = await self.find_similar_users(profile.user_id)
        per_user = math.ceil(limit / SIMILAR_USERS_USED)

        listing_ids: List[str] = []
        for other in similar_users[:SIMILAR_USERS_USED]:
            ids = await self.interactions.favorites_of(
                other, exclude_ids=profile.behavior.viewed_items, limit=per_user
            )
            listing_ids.extend(ids[:per_user])

        items = await self.listings.get_listings(list(dict.fromkeys(listing_ids)))
        return [
            Recommendation(
                item=item,
                score=positional_score(COLLABORATIVE_SCORE_BAND, i, len(items)),
                reason="Liked by similar users",
                type=StrategyType.COLLABORATIVE,
                confidence=COLLABORATIVE_CONFIDENCE,
            )
            for i, item in enumerate(items)
        ]

    async def find_similar_users(self, user_id: str) -> List[str]:
        """
        Placeholder similarity: any other user with interaction rows, capped at 20.
        No behavioral similarity is computed.
        """
        return await self.interactions.other_users(user_id, limit=SIMILAR_USERS_LIMIT)

    async def trending(self, limit: int) -> List[Recommendation]:
        if self._trending_stale():
            await self.load_trending_items()
        items = await self.listings.get_listings(self._trending_ids[:limit])
        return [
            Recommendation(
                item=item,
                score=positional_score(TRENDING_SCORE_BAND, i, len(items)),
                reason="Trending now",
                type=StrategyType.TRENDING,
                confidence=TRENDING_CONFIDENCE,
            )
            for i, item in enumerate(items)
        ]

    async def similar_items(self, item_id: str, limit: int) -> List[Recommendation]:
        """Same-category listings ordered by content similarity to `item_id`."""
        source = await self.listings.get_listing(item_id)
        if not source:
            return []
        pool = await self.listings.listings_in_category(source.category, limit=limit * 2, exclude_id=item_id)
        scored = [(item, content_similarity(source, item)) for item in pool]
        scored.sort(key=lambda pair: pair[1], reverse=True)
        return [
            Recommendation(
                item=item,
                score=similarity * 100,
                reason="Similar to current item",
                type=StrategyType.CONTENT_BASED,
                confidence=min(similarity, 1.0),
            )
            for item, similarity in scored[:limit]
        ]

    # Not yet implemented: the strategies below contribute empty buckets so the
    # blending shares stay in place until real data sources exist for them.

    async def recently_viewed_similar(self, profile: UserProfile, limit: int) -> List[Recommendation]:
        return []

    async def popular_by_category(self, limit: int) -> List[Recommendation]:
        return []

    async def frequently_bought_together(self, item_id: str, limit: int) -> List[Recommendation]:
        return []

    async def same_seller(self, item_id: str, limit: int) -> List[Recommendation]:
        return []

    async def complementary(self, item_id: str, limit: int) -> List[Recommendation]:
        return []

    async def add_on(self, cart_items: List[str], limit: int) -> List[Recommendation]:
        return []

    # ---- trending pool ------------------------------------------------------

    def _trending_stale(self) -> bool:
        if self._trending_loaded_at is None:
            return True
        return self._clock() - self._trending_loaded_at > self.trending_refresh_seconds

    async def load_trending_items(self) -> None:
        """
        Refresh the trending pool. On failure the previous pool is kept and the
        refresh timestamp is left alone, so the next call retries.
        """
        since = datetime.now(timezone.utc) - timedelta(hours=self.trending_window_hours)
        try:
            self._trending_ids = await self.interactions.trending_listing_ids(since, limit=self.trending_pool_size)
            self._trending_loaded_at = self._clock()
            logger.info("trending refreshed items=%s", len(self._trending_ids))
        except Exception as e:
            logger.warning("trending refresh failed err=%s", e)

    # ---- misc ---------------------------------------------------------------

    async def _log_analytics(self, analytics: RecommendationAnalytics) -> None:
        try:
            await self.analytics.record_recommendation(analytics)
        except Exception as e:
            logger.warning("recommend analytics write error id=%s err=%s", analytics.recommendation_id, e)

    def cleanup(self) -> None:
        self.profiles.clear()
        self._trending_ids = []
        self._trending_loaded_at = None
