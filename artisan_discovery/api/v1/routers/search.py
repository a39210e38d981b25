# artisan_discovery/api/v1/routers/search.py
import logging
import time
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from artisan_discovery.api.deps import get_search_engine
from artisan_discovery.api.v1.schemas.search import AcceptedOut, ClickIn
from artisan_discovery.domain.models.analytics import SearchAnalyticsSummary
from artisan_discovery.domain.models.catalog import SearchQuery
from artisan_discovery.domain.services.search_svc import SearchEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])

EngineDep = Annotated[SearchEngine, Depends(get_search_engine)]


@router.post("")
async def search(body: SearchQuery, engine: EngineDep):
    """
    Ranked listings for a free-text query plus structured filters.
    Any failure inside the engine surfaces as 503 "Search unavailable".
    """
    logger.info("Request: search query=%r limit=%s offset=%s", body.query, body.limit, body.offset)
    start_time = time.perf_counter()

    try:
        res = await engine.search(body)
    except Exception as e:
        logger.error("Response: search failed err=%s", e)
        raise HTTPException(status_code=503, detail="Search unavailable")

    logger.info("Response: search count=%s cache_hit=%s elapsed_time=%.4fs",
                res.total_count, res.cache_hit, time.perf_counter() - start_time)
    return res.to_dict()


@router.post("/{query_id}/clicks", response_model=AcceptedOut, status_code=202)
async def track_click(query_id: str, body: ClickIn, engine: EngineDep) -> AcceptedOut:
    await engine.track_result_click(query_id, body.result_id, body.position)
    return AcceptedOut()


@router.get("/analytics", response_model=SearchAnalyticsSummary)
async def search_analytics(
    engine: EngineDep,
    time_range: Literal["1h", "24h", "7d"] = Query("24h"),
) -> SearchAnalyticsSummary:
    return await engine.get_search_analytics(time_range)


@router.delete("/cache", response_model=AcceptedOut)
async def clear_cache(engine: EngineDep) -> AcceptedOut:
    await engine.cleanup()
    logger.info("search cache cleared")
    return AcceptedOut()
