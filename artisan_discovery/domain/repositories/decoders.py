# artisan_discovery/domain/repositories/decoders.py
"""
Decoders from raw store documents to domain value objects.

Store rows use the marketplace column names (`full_name`, `seller_rating`,
`avatar_url`, ...). Everything is validated here so the engines never see
an unchecked dict; a row that does not fit raises RowDecodeError.
"""
from __future__ import annotations
from typing import Any, Dict, Mapping
from pydantic import ValidationError

from artisan_discovery.domain.errors import RowDecodeError
from artisan_discovery.domain.models.analytics import SearchAnalytics
from artisan_discovery.domain.models.catalog import CatalogItem, SellerSummary
from artisan_discovery.domain.models.profile import Interaction


def _errors(e: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())


def decode_seller(doc: Mapping[str, Any] | None) -> SellerSummary:
    doc = doc or {}
    return SellerSummary(
        id=str(doc.get("id") or ""),
        name=doc.get("full_name") or "Unknown Seller",
        avatar=doc.get("avatar_url"),
        rating=doc.get("seller_rating") or 0,
    )


def decode_listing(doc: Mapping[str, Any]) -> CatalogItem:
    """Listing row (joined with its seller profile under `seller`) -> CatalogItem."""
    try:
        return CatalogItem(
            id=str(doc["id"]),
            title=doc.get("title") or "",
            description=doc.get("description") or "",
            price=doc.get("price"),
            images=doc.get("images") or [],
            seller=decode_seller(doc.get("seller")),
            category=doc.get("category"),
            tags=doc.get("tags") or [],
            city=doc.get("city"),
            availability=doc.get("availability") or "available",
            created_at=doc.get("created_at"),
        )
    except KeyError as e:
        raise RowDecodeError("listings", None, f"missing field {e}") from e
    except ValidationError as e:
        raise RowDecodeError("listings", doc.get("id"), _errors(e)) from e


def decode_interaction(doc: Mapping[str, Any]) -> Interaction:
    try:
        return Interaction.model_validate(
            {
                "user_id": doc.get("user_id"),
                "listing_id": doc.get("listing_id"),
                "interaction_type": doc.get("interaction_type"),
                "created_at": doc.get("created_at"),
            }
        )
    except ValidationError as e:
        raise RowDecodeError("user_interactions", doc.get("listing_id"), _errors(e)) from e


def decode_search_event(doc: Mapping[str, Any]) -> SearchAnalytics:
    try:
        return SearchAnalytics(
            query_id=doc.get("query_id"),
            query=doc.get("query") or "",
            user_id=doc.get("user_id"),
            session_id=doc.get("session_id") or "",
            results_count=doc.get("results_count") or 0,
            search_time_ms=doc.get("search_time") or 0,
            filters=doc.get("filters") or {},
            timestamp=doc.get("timestamp"),
        )
    except ValidationError as e:
        raise RowDecodeError("search_analytics", doc.get("query_id"), _errors(e)) from e


def encode_search_event(analytics: SearchAnalytics) -> Dict[str, Any]:
    return {
        "query_id": analytics.query_id,
        "query": analytics.query,
        "user_id": analytics.user_id,
        "session_id": analytics.session_id,
        "results_count": analytics.results_count,
        "search_time": analytics.search_time_ms,
        "filters": analytics.filters,
        "timestamp": analytics.timestamp,
    }
