# artisan_discovery/core/lifespan.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from artisan_discovery.core.config import Settings, get_settings
from artisan_discovery.db import mongo, redis as r
from artisan_discovery.domain.repositories.analytics_repo import AnalyticsRepo
from artisan_discovery.domain.repositories.interaction_repo import InteractionRepo
from artisan_discovery.domain.repositories.listing_repo import ListingRepo
from artisan_discovery.domain.repositories.result_cache_repo import RedisResultCache
from artisan_discovery.domain.services.profile_svc import UserProfileBuilder
from artisan_discovery.domain.services.recommendation_svc import RecommendationEngine
from artisan_discovery.domain.services.result_cache import MemoryResultCache, ResultCache
from artisan_discovery.domain.services.search_svc import SearchEngine

logger = logging.getLogger(__name__)


def build_result_cache(settings: Settings) -> ResultCache:
    """Redis when asked for and connected, otherwise the in-process cache."""
    if settings.RESULT_CACHE_BACKEND == "redis":
        client = r.get_redis()
        if client is not None:
            logger.info("result cache backend=redis ttl=%ss", settings.search_cache_ttl)
            return RedisResultCache(client, settings.search_cache_ttl, key_prefix=settings.search_cache_prefix)
        logger.warning("RESULT_CACHE_BACKEND=redis but redis is unavailable, using memory cache")
    logger.info("result cache backend=memory ttl=%ss max_entries=%s",
                settings.search_cache_ttl, settings.search_cache_max_entries)
    return MemoryResultCache(
        ttl_seconds=settings.search_cache_ttl,
        max_entries=settings.search_cache_max_entries,
        prefix=settings.search_cache_prefix,
    )


def build_engines(app: FastAPI, settings: Settings, db) -> None:
    """One engine instance per process, shared by every request through app.state."""
    listings = ListingRepo(db)
    interactions = InteractionRepo(db)
    analytics = AnalyticsRepo(db)

    app.state.search_engine = SearchEngine(listings, analytics, cache=build_result_cache(settings))
    app.state.recommendation_engine = RecommendationEngine(
        listings,
        interactions,
        analytics,
        UserProfileBuilder(
            listings,
            interactions,
            analytics,
            ttl_seconds=settings.profile_cache_ttl,
            max_entries=settings.profile_cache_max_entries,
        ),
        trending_refresh_seconds=settings.trending_refresh_seconds,
        trending_window_hours=settings.trending_window_hours,
        trending_pool_size=settings.trending_pool_size,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    app.state.search_engine = None
    app.state.recommendation_engine = None

    # --- Startup ---
    # Redis first: the result cache backend depends on it
    if settings.REDIS_URL:
        await r.connect()
    else:
        logger.warning("no REDIS_URL provided, skipping redis connection")

    if settings.MONGO_URI:
        await mongo.connect()
        build_engines(app, settings, mongo.get_db())
        await app.state.recommendation_engine.initialize()
    else:
        logger.warning("no MONGO_URI provided, engines not started")

    yield

    # --- Shutdown ---
    if app.state.recommendation_engine is not None:
        app.state.recommendation_engine.cleanup()

    if settings.REDIS_URL:
        await r.disconnect()
    if settings.MONGO_URI:
        await mongo.disconnect()
