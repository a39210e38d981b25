# artisan_discovery/api/v1/routers/recommendations.py
import logging
import time
from typing import Annotated

from fastapi import APIRouter, Depends

from artisan_discovery.api.deps import get_recommendation_engine
from artisan_discovery.domain.models.recommendation import RecommendationRequest, RecommendationResponse
from artisan_discovery.domain.services.recommendation_svc import RecommendationEngine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["recommendations"])

EngineDep = Annotated[RecommendationEngine, Depends(get_recommendation_engine)]


@router.post("/recommendations", response_model=RecommendationResponse)
async def recommendations(body: RecommendationRequest, engine: EngineDep) -> RecommendationResponse:
    """
    Context-blended recommendations. Never fails on retrieval errors:
    the response just carries fewer (or zero) items.
    """
    logger.info("Request: recommendations context=%s user_id=%s current_item=%s limit=%s",
                body.context.value, body.user_id, body.current_item, body.limit)
    start_time = time.perf_counter()

    res = await engine.recommend(body)

    logger.info("Response: recommendations context=%s count=%s elapsed_time=%.4fs",
                body.context.value, len(res.recommendations), time.perf_counter() - start_time)
    return res
