"""Store collaborator interfaces consumed by the engines."""

from __future__ import annotations
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence, Set, Tuple

from artisan_discovery.domain.models.analytics import RecommendationAnalytics, SearchAnalytics
from artisan_discovery.domain.models.catalog import CatalogItem, SearchQuery
from artisan_discovery.domain.models.profile import Interaction
from artisan_discovery.domain.models.query import ProcessedQuery


class ListingStore(ABC):
    """Read access to active listings joined with their seller summary."""

    @abstractmethod
    async def search_listings(self, query: SearchQuery, processed: ProcessedQuery) -> List[CatalogItem]:
        """Candidate fetch: structured filters + text match, paginated by query.limit/offset."""
        pass

    @abstractmethod
    async def get_listing(self, listing_id: str) -> Optional[CatalogItem]:
        pass

    @abstractmethod
    async def get_listings(self, listing_ids: Sequence[str], *, active_only: bool = True) -> List[CatalogItem]:
        """
        Batch fetch; returned in the order of `listing_ids`, missing ids skipped.
        `active_only=False` also returns sold or deactivated listings.
        """
        pass

    @abstractmethod
    async def listings_in_category(
        self, category: str, *, limit: int, exclude_id: Optional[str] = None
    ) -> List[CatalogItem]:
        """Newest first."""
        pass

    @abstractmethod
    async def matching_categories(self, text: str, limit: int) -> List[Tuple[str, int]]:
        """Categories containing `text` (case-insensitive) with their listing count."""
        pass


class InteractionStore(ABC):
    """Read access to the user interaction log."""

    @abstractmethod
    async def interactions_for_user(self, user_id: str, *, limit: int) -> List[Interaction]:
        """Most recent first."""
        pass

    @abstractmethod
    async def favorites_of(self, user_id: str, *, exclude_ids: Sequence[str], limit: int) -> List[str]:
        """Listing ids favorited by `user_id`, minus `exclude_ids`."""
        pass

    @abstractmethod
    async def other_users(self, user_id: str, *, limit: int) -> List[str]:
        """Distinct ids of users other than `user_id` that have interaction rows."""
        pass

    @abstractmethod
    async def trending_listing_ids(self, since: datetime, *, limit: int) -> List[str]:
        """Listing ids ranked by interaction count since `since`."""
        pass


class AnalyticsStore(ABC):
    """Append-only analytics sink plus the few read paths built on it."""

    @abstractmethod
    async def record_search(self, analytics: SearchAnalytics) -> None:
        pass

    @abstractmethod
    async def record_click(self, query_id: str, result_id: str, position: int) -> None:
        pass

    @abstractmethod
    async def record_recommendation(self, analytics: RecommendationAnalytics) -> None:
        pass

    @abstractmethod
    async def search_history(self, user_id: str, *, limit: int) -> List[str]:
        """Past query strings of `user_id`, most recent first."""
        pass

    @abstractmethod
    async def matching_queries(self, text: str, limit: int) -> List[Tuple[str, int]]:
        """Past queries containing `text` (case-insensitive) with how often each was searched."""
        pass

    @abstractmethod
    async def search_events_since(self, since: datetime) -> List[SearchAnalytics]:
        pass

    @abstractmethod
    async def clicked_query_ids_since(self, since: datetime) -> Set[str]:
        pass
