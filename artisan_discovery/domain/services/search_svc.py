import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from artisan_discovery.domain.models.analytics import (
    QueryCount,
    SearchAnalytics,
    SearchAnalyticsSummary,
    SearchSuggestion,
    SuggestionType,
)
from artisan_discovery.domain.models.catalog import SearchQuery
from artisan_discovery.domain.models.search import SearchResponse
from artisan_discovery.domain.repositories.interfaces import AnalyticsStore, ListingStore
from artisan_discovery.domain.services import query_processor
from artisan_discovery.domain.services.constants import (
    MAX_SUGGESTIONS,
    SUGGESTION_CATEGORY_LIMIT,
    SUGGESTION_QUERY_LIMIT,
)
from artisan_discovery.domain.services.ranking import order_results, rank
from artisan_discovery.domain.services.result_cache import MemoryResultCache, ResultCache
from artisan_discovery.utils.ids import new_id

logger = logging.getLogger(__name__)

TIME_RANGES = {
    "1h": timedelta(hours=1),
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
}


class SearchEngine:
    """
    End-to-end search call.

    High-level flow:
      1) Build the cache key; on a hit within TTL return the cached ranked list.
      2) On a miss: process the query, fetch candidates from the listing store,
         rank them and cache the ranked list.
      3) Regenerate suggestions (on hits too).
      4) Emit a SearchAnalytics record; a failed write is logged and ignored.

    A failing candidate fetch is logged, recorded as a zero-result search and
    then re-raised to the caller.
    """

    def __init__(
        self,
        listings: ListingStore,
        analytics: AnalyticsStore,
        cache: Optional[ResultCache] = None,
    ):
        self.listings = listings
        self.analytics = analytics
        self.cache = cache if cache is not None else MemoryResultCache()

    async def search(self, request: SearchQuery) -> SearchResponse:
        start = time.perf_counter()
        query_id = new_id("search")
        session_id = request.session_id or new_id("session")
        logger.info("search start query_id=%s query=%r limit=%s offset=%s",
                    query_id, request.query, request.limit, request.offset)

        try:
            cache_key = self.cache.key(request.query, request.filters, request.limit, request.offset)
            cached = await self._cache_get(cache_key)
            if cached is not None:
                logger.info("search cache_hit key=%s items=%s", cache_key, len(cached))
                suggestions = await self.generate_suggestions(request.query)
                analytics = self._build_analytics(query_id, session_id, request, len(cached), start)
                await self._log_analytics(analytics)
                return SearchResponse(
                    results=cached,
                    total_count=len(cached),
                    suggestions=suggestions,
                    analytics=analytics,
                    cache_hit=True,
                )
            logger.info("search cache_miss key=%s", cache_key)

            processed = query_processor.process(request.query)
            logger.debug("search processed intent=%s keywords=%s entities=%s",
                         processed.intent.value, processed.keywords,
                         [(e.type, e.value) for e in processed.entities])

            db_t0 = time.perf_counter()
            candidates = await self.listings.search_listings(request, processed)
            logger.info("search db_ok candidates=%s db_time=%.3fs", len(candidates), time.perf_counter() - db_t0)

            ranked = rank(candidates, request)
            sort_by = request.filters.sort_by if request.filters else None
            ranked = order_results(ranked, sort_by)

            suggestions = await self.generate_suggestions(request.query)
            await self._cache_put(cache_key, ranked)

            analytics = self._build_analytics(query_id, session_id, request, len(ranked), start)
            await self._log_analytics(analytics)

            logger.info("search done query_id=%s results=%s total_time=%.3fs",
                        query_id, len(ranked), time.perf_counter() - start)
            return SearchResponse(
                results=ranked,
                total_count=len(ranked),
                suggestions=suggestions,
                analytics=analytics,
            )
        except Exception as e:
            logger.error("search failed query_id=%s err=%s", query_id, e)
            analytics = self._build_analytics(query_id, session_id, request, 0, start)
            await self._log_analytics(analytics)
            raise

    async def generate_suggestions(self, query: str) -> List[SearchSuggestion]:
        """Past queries, then categories, containing the input; at most 8."""
        try:
            suggestions: List[SearchSuggestion] = []
            for text, count in await self.analytics.matching_queries(query, SUGGESTION_QUERY_LIMIT):
                suggestions.append(SearchSuggestion(text=text, type=SuggestionType.QUERY, popularity=count))
            for category, count in await self.listings.matching_categories(query, SUGGESTION_CATEGORY_LIMIT):
                suggestions.append(SearchSuggestion(text=category, type=SuggestionType.CATEGORY, popularity=count))
            return suggestions[:MAX_SUGGESTIONS]
        except Exception as e:
            logger.warning("search suggestions error query=%r err=%s", query, e)
            return []

    async def track_result_click(self, query_id: str, result_id: str, position: int) -> None:
        try:
            await self.analytics.record_click(query_id, result_id, position)
            logger.debug("search click query_id=%s result_id=%s position=%s", query_id, result_id, position)
        except Exception as e:
            logger.warning("search click write error query_id=%s err=%s", query_id, e)

    async def get_search_analytics(self, time_range: str = "24h") -> SearchAnalyticsSummary:
        since = datetime.now(timezone.utc) - TIME_RANGES.get(time_range, TIME_RANGES["24h"])
        try:
            events = await self.analytics.search_events_since(since)
            clicked = await self.analytics.clicked_query_ids_since(since)
        except Exception as e:
            logger.error("search analytics read error range=%s err=%s", time_range, e)
            return SearchAnalyticsSummary()

        if not events:
            return SearchAnalyticsSummary()

        total = len(events)
        counts: Dict[str, int] = {}
        for ev in events:
            counts[ev.query] = counts.get(ev.query, 0) + 1
        top = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:10]

        return SearchAnalyticsSummary(
            total_searches=total,
            average_results_count=sum(ev.results_count for ev in events) / total,
            average_search_time_ms=sum(ev.search_time_ms for ev in events) / total,
            top_queries=[QueryCount(query=q, count=c) for q, c in top],
            click_through_rate=len(clicked) / total * 100,
        )

    async def cleanup(self) -> None:
        await self.cache.clear()

    # ---- helpers ----------------------------------------------------------

    @staticmethod
    def _build_analytics(query_id: str, session_id: str, request: SearchQuery,
                         results_count: int, start: float) -> SearchAnalytics:
        filters: Dict[str, Any] = request.filters.model_dump(mode="json", exclude_none=True) if request.filters else {}
        return SearchAnalytics(
            query_id=query_id,
            query=request.query,
            user_id=request.user_id,
            session_id=session_id,
            results_count=results_count,
            search_time_ms=(time.perf_counter() - start) * 1000,
            filters=filters,
        )

    async def _cache_get(self, key: str):
        # A broken shared cache degrades to a miss, it never fails the search
        try:
            return await self.cache.get(key)
        except Exception as e:
            logger.warning("search cache.get error key=%s err=%s", key, e)
            return None

    async def _cache_put(self, key: str, results) -> None:
        try:
            await self.cache.put(key, results)
        except Exception as e:
            logger.warning("search cache.put error key=%s err=%s", key, e)

    async def _log_analytics(self, analytics: SearchAnalytics) -> None:
        try:
            await self.analytics.record_search(analytics)
        except Exception as e:
            logger.warning("search analytics write error query_id=%s err=%s", analytics.query_id, e)
