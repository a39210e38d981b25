# artisan_discovery/api/deps.py
from fastapi import HTTPException, Request

from artisan_discovery.domain.services.recommendation_svc import RecommendationEngine
from artisan_discovery.domain.services.search_svc import SearchEngine


# Engines are built once in the lifespan and live on app.state
def get_search_engine(request: Request) -> SearchEngine:
    engine = getattr(request.app.state, "search_engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Search unavailable")
    return engine


def get_recommendation_engine(request: Request) -> RecommendationEngine:
    engine = getattr(request.app.state, "recommendation_engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Recommendations unavailable")
    return engine
