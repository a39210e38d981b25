from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from artisan_discovery.domain.models.analytics import RecommendationAnalytics
from artisan_discovery.domain.models.catalog import CatalogItem


class RecommendationContext(str, Enum):
    HOMEPAGE = "homepage"
    PRODUCT_PAGE = "product_page"
    SEARCH_RESULTS = "search_results"
    CART = "cart"
    CHECKOUT = "checkout"


class StrategyType(str, Enum):
    COLLABORATIVE = "collaborative"
    CONTENT_BASED = "content_based"
    TRENDING = "trending"
    PERSONALIZED = "personalized"
    SIMILAR_USERS = "similar_users"


class RecommendationRequest(BaseModel):
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    context: RecommendationContext
    current_item: Optional[str] = None  # product page anchor
    limit: Optional[int] = Field(default=None, ge=1, le=100)
    exclude_items: List[str] = []  # cart lines for cart/checkout
    model_config = {"frozen": True}


class Recommendation(BaseModel):
    item: CatalogItem
    score: float = Field(ge=0)
    reason: str
    type: StrategyType
    confidence: float = Field(ge=0, le=1)
    model_config = {"frozen": True}


class RecommendationResponse(BaseModel):
    recommendations: List[Recommendation]
    analytics: RecommendationAnalytics
