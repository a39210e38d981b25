import logging
import math
import time
from collections import Counter
from typing import Callable, List, Optional, Sequence

from artisan_discovery.domain.models.catalog import CatalogItem
from artisan_discovery.domain.models.profile import (
    InteractionType,
    PreferredPriceRange,
    UserBehavior,
    UserPreferences,
    UserProfile,
)
from artisan_discovery.domain.repositories.interfaces import AnalyticsStore, InteractionStore, ListingStore
from artisan_discovery.domain.services.constants import (
    PROFILE_COLOR_TAGS,
    PROFILE_INTERACTION_LIMIT,
    PROFILE_MATERIAL_TAGS,
    PROFILE_SEARCH_LIMIT,
    PROFILE_TOP_CATEGORIES,
    PROFILE_TOP_TAGS,
    STYLE_TAGS,
)
from artisan_discovery.utils.ttl_cache import TTLCache

logger = logging.getLogger(__name__)


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Nearest-rank style pick used for price affinity: index = floor(p * n)."""
    idx = min(int(math.floor(p * len(sorted_values))), len(sorted_values) - 1)
    return sorted_values[idx]


def derive_preferences(viewed: Sequence[CatalogItem]) -> UserPreferences:
    """Preferences from the listings a user viewed. Always a fresh derivation."""
    if not viewed:
        return UserPreferences()

    category_counts = Counter(item.category for item in viewed)
    categories = [c for c, _ in category_counts.most_common(PROFILE_TOP_CATEGORIES)]

    prices = sorted(item.price for item in viewed)
    price_range = PreferredPriceRange(min=percentile(prices, 0.1), max=percentile(prices, 0.9))

    tag_counts = Counter(tag for item in viewed for tag in item.tags)
    top_tags = [t for t, _ in tag_counts.most_common(PROFILE_TOP_TAGS)]

    # A tag lands in at most one bucket
    styles: List[str] = []
    colors: List[str] = []
    materials: List[str] = []
    for tag in top_tags:
        t = tag.lower()
        if t in STYLE_TAGS:
            styles.append(tag)
        elif t in PROFILE_COLOR_TAGS:
            colors.append(tag)
        elif t in PROFILE_MATERIAL_TAGS:
            materials.append(tag)

    return UserPreferences(
        categories=categories,
        price_range=price_range,
        styles=styles,
        colors=colors,
        materials=materials,
    )


class UserProfileBuilder:
    """
    Builds a UserProfile from the interaction log and search history.

    Profiles are cached per user id (LRU + TTL). A failed build returns None;
    callers treat that as an anonymous user.
    """

    def __init__(
        self,
        listings: ListingStore,
        interactions: InteractionStore,
        analytics: AnalyticsStore,
        ttl_seconds: float = 900,
        max_entries: int = 5000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.listings = listings
        self.interactions = interactions
        self.analytics = analytics
        self._profiles: TTLCache[UserProfile] = TTLCache(ttl_seconds, max_entries, clock)

    async def build(self, user_id: str) -> Optional[UserProfile]:
        cached = self._profiles.get(user_id)
        if cached is not None:
            logger.debug("profile cache_hit user_id=%s", user_id)
            return cached

        t0 = time.perf_counter()
        try:
            history = await self.interactions.interactions_for_user(user_id, limit=PROFILE_INTERACTION_LIMIT)
            searches = await self.analytics.search_history(user_id, limit=PROFILE_SEARCH_LIMIT)

            viewed_ids = [i.listing_id for i in history if i.interaction_type == InteractionType.VIEW]
            purchased_ids = [i.listing_id for i in history if i.interaction_type == InteractionType.PURCHASE]
            favorite_ids = [i.listing_id for i in history if i.interaction_type == InteractionType.FAVORITE]

            # Sold or deactivated listings still count towards affinities
            viewed: List[CatalogItem] = []
            if viewed_ids:
                viewed = await self.listings.get_listings(list(dict.fromkeys(viewed_ids)), active_only=False)

            favorite_categories: List[str] = []
            if favorite_ids:
                favorites = await self.listings.get_listings(list(dict.fromkeys(favorite_ids)), active_only=False)
                favorite_categories = list(dict.fromkeys(item.category for item in favorites))

            profile = UserProfile(
                user_id=user_id,
                preferences=derive_preferences(viewed),
                behavior=UserBehavior(
                    viewed_items=viewed_ids,
                    purchased_items=purchased_ids,
                    search_history=searches,
                    favorite_categories=favorite_categories,
                ),
            )
        except Exception as e:
            logger.error("profile build failed user_id=%s err=%s", user_id, e)
            return None

        self._profiles.set(user_id, profile)
        logger.info("profile built user_id=%s viewed=%s purchased=%s categories=%s time=%.3fs",
                    user_id, len(profile.behavior.viewed_items), len(profile.behavior.purchased_items),
                    profile.preferences.categories, time.perf_counter() - t0)
        return profile

    def invalidate(self, user_id: str) -> None:
        self._profiles.pop(user_id)

    def clear(self) -> None:
        self._profiles.clear()

