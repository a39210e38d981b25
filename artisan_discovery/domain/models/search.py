from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from artisan_discovery.domain.models.analytics import SearchAnalytics, SearchSuggestion
from artisan_discovery.domain.models.catalog import ScoredResult


@dataclass
class SearchResponse:
    """
    Result of one search call.

    `results` is handed out as-is: on a cache hit it is the very list that was
    cached by the first call, so callers must treat it as read-only.
    """

    results: List[ScoredResult]
    total_count: int
    suggestions: List[SearchSuggestion] = field(default_factory=list)
    analytics: Optional[SearchAnalytics] = None
    cache_hit: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "results": [r.model_dump(mode="json") for r in self.results],
            "total_count": self.total_count,
            "suggestions": [s.model_dump(mode="json") for s in self.suggestions],
            "analytics": self.analytics.model_dump(mode="json") if self.analytics else None,
            "cache_hit": self.cache_hit,
        }
