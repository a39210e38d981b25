# artisan_discovery/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from artisan_discovery.api.v1.routers.health import router as health_router
from artisan_discovery.api.v1.routers.recommendations import router as recommendations_router
from artisan_discovery.api.v1.routers.search import router as search_router
from artisan_discovery.core.config import get_settings
from artisan_discovery.core.lifespan import lifespan
from artisan_discovery.core.logging import configure_logging

settings = get_settings()
configure_logging(level=logging.DEBUG if settings.DEBUG else logging.INFO)

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# ------- CORS -------
# ALLOWED_ORIGINS is a CSV, e.g. "https://shop.example,https://www.shop.example"
# allow_credentials=True with "*" is rejected by browsers, so origins are listed.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)

# ------- Routes -------
app.include_router(health_router)
app.include_router(search_router, prefix=settings.api_prefix)
app.include_router(recommendations_router, prefix=settings.api_prefix)
