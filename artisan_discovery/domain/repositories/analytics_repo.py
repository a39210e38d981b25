# artisan_discovery/domain/repositories/analytics_repo.py

from __future__ import annotations
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Set, Tuple
from motor.motor_asyncio import AsyncIOMotorDatabase

from artisan_discovery.domain.models.analytics import RecommendationAnalytics, SearchAnalytics
from artisan_discovery.domain.repositories.decoders import decode_search_event, encode_search_event
from artisan_discovery.domain.repositories.interfaces import AnalyticsStore


class AnalyticsRepo(AnalyticsStore):
    """
    Append-only analytics collections:
      - search_analytics          (one row per search call)
      - search_click_analytics    (one row per result click)
      - recommendation_analytics  (one row per recommendation call)
    Writes are plain inserts; callers decide whether a failure matters.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        search_collection: str = "search_analytics",
        click_collection: str = "search_click_analytics",
        recommendation_collection: str = "recommendation_analytics",
    ):
        self.searches = db[search_collection]
        self.clicks = db[click_collection]
        self.recommendations = db[recommendation_collection]

    # ----- writes ------------------------------------------------------------

    async def record_search(self, analytics: SearchAnalytics) -> None:
        await self.searches.insert_one(encode_search_event(analytics))

    async def record_click(self, query_id: str, result_id: str, position: int) -> None:
        await self.clicks.insert_one({
            "query_id": query_id,
            "result_id": result_id,
            "position": position,
            "timestamp": datetime.now(timezone.utc),
        })

    async def record_recommendation(self, analytics: RecommendationAnalytics) -> None:
        await self.recommendations.insert_one({
            "recommendation_id": analytics.recommendation_id,
            "user_id": analytics.user_id,
            "session_id": analytics.session_id,
            "context": analytics.context,
            "recommended_items": analytics.recommended_items,
            "timestamp": analytics.timestamp,
        })

    # ----- reads -------------------------------------------------------------

    async def search_history(self, user_id: str, *, limit: int) -> List[str]:
        cursor = (
            self.searches.find({"user_id": user_id}, {"_id": 0, "query": 1})
            .sort("timestamp", -1)
            .limit(limit)
        )
        return [doc["query"] async for doc in cursor if doc.get("query")]

    async def matching_queries(self, text: str, limit: int) -> List[Tuple[str, int]]:
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"query": {"$regex": re.escape(text), "$options": "i"}}},
            {"$group": {"_id": "$query", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": limit},
        ]
        cursor = self.searches.aggregate(pipeline)
        return [(d["_id"], int(d["count"])) async for d in cursor if d.get("_id")]

    async def search_events_since(self, since: datetime) -> List[SearchAnalytics]:
        cursor = self.searches.find({"timestamp": {"$gte": since}}, {"_id": 0})
        return [decode_search_event(doc) async for doc in cursor]

    async def clicked_query_ids_since(self, since: datetime) -> Set[str]:
        ids = await self.clicks.distinct("query_id", {"timestamp": {"$gte": since}})
        return {i for i in ids if i}
