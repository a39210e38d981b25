from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SuggestionType(str, Enum):
    QUERY = "query"
    CATEGORY = "category"
    TAG = "tag"
    SELLER = "seller"


class SearchSuggestion(BaseModel):
    text: str
    type: SuggestionType
    popularity: float = 0
    model_config = {"frozen": True}


class SearchAnalytics(BaseModel):
    query_id: str
    query: str
    user_id: Optional[str] = None
    session_id: str
    results_count: int = Field(ge=0)
    clicked_results: List[str] = []
    search_time_ms: float = Field(default=0, ge=0)
    filters: Dict[str, Any] = {}
    timestamp: datetime = Field(default_factory=_utcnow)
    model_config = {"frozen": True}


class RecommendationAnalytics(BaseModel):
    recommendation_id: str
    user_id: Optional[str] = None
    session_id: str
    context: str
    recommended_items: List[str] = []
    clicked_items: List[str] = []
    purchased_items: List[str] = []
    timestamp: datetime = Field(default_factory=_utcnow)
    model_config = {"frozen": True}


class QueryCount(BaseModel):
    query: str
    count: int


class SearchAnalyticsSummary(BaseModel):
    total_searches: int = 0
    average_results_count: float = 0
    average_search_time_ms: float = 0
    top_queries: List[QueryCount] = []
    click_through_rate: float = 0
