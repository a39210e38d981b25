from __future__ import annotations
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator


class Availability(str, Enum):
    AVAILABLE = "available"
    READY_TODAY = "ready_today"
    CUSTOM_ORDER = "custom_order"


class SortBy(str, Enum):
    RELEVANCE = "relevance"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NEWEST = "newest"
    POPULARITY = "popularity"


class SellerSummary(BaseModel):
    id: str = ""
    name: str = "Unknown Seller"
    avatar: Optional[str] = None
    rating: float = Field(default=0.0, ge=0, le=5)
    model_config = {"frozen": True}


class CatalogItem(BaseModel):
    """
    Read-only snapshot of a listing. The store owns and mutates listings;
    the engines only score and return copies.
    """
    id: str
    title: str
    description: str = ""
    price: float = Field(ge=0)
    images: List[str] = []
    seller: SellerSummary = SellerSummary()
    category: str
    tags: List[str] = []
    city: Optional[str] = None
    availability: Availability = Availability.AVAILABLE
    created_at: datetime

    model_config = {"frozen": True}  # immuable = safe

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        # Store timestamps without offset are UTC
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)


class ScoredResult(CatalogItem):
    relevance_score: float = Field(default=0, ge=0, le=100)
    popularity_score: float = Field(default=0, ge=0, le=100)
    quality_score: float = Field(default=0, ge=0, le=100)
    composite_score: float = Field(default=0, ge=0, le=100)


class PriceRange(BaseModel):
    min: Optional[float] = Field(default=None, ge=0)
    max: Optional[float] = Field(default=None, ge=0)
    model_config = {"frozen": True}


class SearchFilters(BaseModel):
    category: Optional[str] = None
    city: Optional[str] = None
    price_range: Optional[PriceRange] = None
    tags: List[str] = []
    availability: Optional[Availability] = None
    sort_by: Optional[SortBy] = None
    model_config = {"frozen": True}


class SearchQuery(BaseModel):
    query: str = ""
    filters: Optional[SearchFilters] = None
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    model_config = {"frozen": True}
