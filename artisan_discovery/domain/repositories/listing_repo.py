# artisan_discovery/domain/repositories/listing_repo.py

from __future__ import annotations
import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple
from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorCollection

from artisan_discovery.domain.models.catalog import CatalogItem, SearchQuery
from artisan_discovery.domain.models.query import ProcessedQuery
from artisan_discovery.domain.repositories.decoders import decode_listing
from artisan_discovery.domain.repositories.interfaces import ListingStore

logger = logging.getLogger(__name__)

# Fields projected for every listing read (seller joined separately)
LISTING_PROJECTION: Dict[str, Any] = {
    "_id": 0,
    "id": 1,
    "title": 1,
    "description": 1,
    "price": 1,
    "images": 1,
    "category": 1,
    "tags": 1,
    "city": 1,
    "availability": 1,
    "created_at": 1,
    "seller.id": 1,
    "seller.full_name": 1,
    "seller.avatar_url": 1,
    "seller.seller_rating": 1,
}


def _json_preview(obj: Any, limit: int = 1000) -> str:
    """Minify and truncate a pipeline for debug logs."""
    try:
        s = json.dumps(obj, separators=(",", ":"), ensure_ascii=False, default=str)
        return s if len(s) <= limit else s[:limit] + "…[truncated]"
    except (TypeError, ValueError):
        return "<unserializable>"


def _ilike(text: str) -> Dict[str, Any]:
    """Case-insensitive substring match (the ILIKE %text% of the listings table)."""
    return {"$regex": re.escape(text), "$options": "i"}


class ListingRepo(ListingStore):
    """
    Listings repository backed by the 'listings' collection.
    Seller summary comes from the 'profiles' collection via $lookup on seller_id.
    Reads return only listings with status 'active', except `get_listings(active_only=False)`
    which profile derivation uses to see items that have since sold.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        collection_name: str = "listings",
        profiles_collection: str = "profiles",
    ):
        self.col: AsyncIOMotorCollection = db[collection_name]
        self.profiles_collection = profiles_collection

    # ---------- Utils ----------
    def _with_seller(self, match: Dict[str, Any], *, sort: Optional[Dict[str, int]] = None,
                     skip: int = 0, limit: Optional[int] = None, active_only: bool = True) -> List[Dict[str, Any]]:
        if active_only:
            match = {"status": "active", **match}
        pipeline: List[Dict[str, Any]] = [{"$match": match}]
        if sort:
            pipeline.append({"$sort": sort})
        if skip:
            pipeline.append({"$skip": skip})
        if limit:
            pipeline.append({"$limit": limit})
        pipeline += [
            {"$lookup": {
                "from": self.profiles_collection,
                "localField": "seller_id",
                "foreignField": "id",
                "as": "seller",
            }},
            {"$unwind": {"path": "$seller", "preserveNullAndEmptyArrays": True}},
            {"$project": LISTING_PROJECTION},
        ]
        return pipeline

    async def _fetch(self, pipeline: List[Dict[str, Any]]) -> List[CatalogItem]:
        cursor = self.col.aggregate(pipeline)
        return [decode_listing(doc) async for doc in cursor]

    @staticmethod
    def build_candidate_match(query: SearchQuery, processed: ProcessedQuery) -> Dict[str, Any]:
        """
        Structured filters AND (title ILIKE q OR description ILIKE q OR tags overlap terms).
        Tag terms are the raw query plus the processed query's expanded terms.
        """
        match: Dict[str, Any] = {}
        text = query.query.strip()
        if text:
            tag_terms = list(dict.fromkeys([text, *processed.expanded_terms]))
            match["$or"] = [
                {"title": _ilike(text)},
                {"description": _ilike(text)},
                {"tags": {"$in": tag_terms}},
            ]

        f = query.filters
        if f:
            if f.category:
                match["category"] = f.category
            if f.city:
                match["city"] = f.city
            if f.price_range:
                price: Dict[str, float] = {}
                if f.price_range.min:
                    price["$gte"] = f.price_range.min
                if f.price_range.max:
                    price["$lte"] = f.price_range.max
                if price:
                    match["price"] = price
            if f.availability:
                match["availability"] = f.availability.value
            if f.tags:
                match.setdefault("$and", []).append({"tags": {"$in": list(f.tags)}})
        return match

    # ---------- ListingStore ----------
    async def search_listings(self, query: SearchQuery, processed: ProcessedQuery) -> List[CatalogItem]:
        match = self.build_candidate_match(query, processed)
        pipeline = self._with_seller(match, skip=query.offset, limit=query.limit)
        logger.debug("listings search pipeline=%s", _json_preview(pipeline, limit=2000))
        return await self._fetch(pipeline)

    async def get_listing(self, listing_id: str) -> Optional[CatalogItem]:
        items = await self._fetch(self._with_seller({"id": listing_id}, limit=1))
        return items[0] if items else None

    async def get_listings(self, listing_ids: Sequence[str], *, active_only: bool = True) -> List[CatalogItem]:
        if not listing_ids:
            return []
        pipeline = self._with_seller({"id": {"$in": list(listing_ids)}}, active_only=active_only)
        items = await self._fetch(pipeline)
        by_id = {it.id: it for it in items}
        return [by_id[i] for i in listing_ids if i in by_id]

    async def listings_in_category(
        self, category: str, *, limit: int, exclude_id: Optional[str] = None
    ) -> List[CatalogItem]:
        match: Dict[str, Any] = {"category": category}
        if exclude_id:
            match["id"] = {"$ne": exclude_id}
        pipeline = self._with_seller(match, sort={"created_at": -1}, limit=limit)
        return await self._fetch(pipeline)

    async def matching_categories(self, text: str, limit: int) -> List[Tuple[str, int]]:
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"status": "active", "category": _ilike(text)}},
            {"$group": {"_id": "$category", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": limit},
        ]
        cursor = self.col.aggregate(pipeline)
        return [(d["_id"], int(d["count"])) async for d in cursor if d.get("_id")]
