# artisan_discovery/domain/repositories/interaction_repo.py

from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Sequence
from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorCollection

from artisan_discovery.domain.models.profile import Interaction, InteractionType
from artisan_discovery.domain.repositories.decoders import decode_interaction
from artisan_discovery.domain.repositories.interfaces import InteractionStore


class InteractionRepo(InteractionStore):
    """
    User interaction log backed by the 'user_interactions' collection:
      { user_id, listing_id, interaction_type: view|purchase|favorite, created_at }
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "user_interactions"):
        self.col: AsyncIOMotorCollection = db[collection_name]

    async def interactions_for_user(self, user_id: str, *, limit: int) -> List[Interaction]:
        query: Dict[str, Any] = {"user_id": user_id}
        cursor = self.col.find(query, {"_id": 0}).sort("created_at", -1).limit(limit)
        return [decode_interaction(doc) async for doc in cursor]

    async def favorites_of(self, user_id: str, *, exclude_ids: Sequence[str], limit: int) -> List[str]:
        query: Dict[str, Any] = {"user_id": user_id, "interaction_type": InteractionType.FAVORITE.value}
        if exclude_ids:
            query["listing_id"] = {"$nin": list(exclude_ids)}
        cursor = self.col.find(query, {"_id": 0, "listing_id": 1}).sort("created_at", -1).limit(limit)
        ids = [doc.get("listing_id") async for doc in cursor]
        return [i for i in dict.fromkeys(ids) if i]

    async def other_users(self, user_id: str, *, limit: int) -> List[str]:
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"user_id": {"$ne": user_id}}},
            {"$group": {"_id": "$user_id"}},
            {"$limit": limit},
        ]
        cursor = self.col.aggregate(pipeline)
        return [d["_id"] async for d in cursor if d.get("_id")]

    async def trending_listing_ids(self, since: datetime, *, limit: int) -> List[str]:
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"created_at": {"$gte": since}}},
            {"$group": {"_id": "$listing_id", "interaction_count": {"$sum": 1}}},
            {"$sort": {"interaction_count": -1, "_id": 1}},
            {"$limit": limit},
        ]
        cursor = self.col.aggregate(pipeline)
        return [d["_id"] async for d in cursor if d.get("_id")]
