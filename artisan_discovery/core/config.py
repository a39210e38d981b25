from functools import lru_cache
from typing import Literal
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["development", "production"]
CacheBackend = Literal["memory", "redis"]

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "ArtisanDiscovery"
    DEBUG: bool = False
    GIT_SHA: str = "unknown"

    # Mongo (empty URI => store not connected)
    MONGO_URI: str = ""
    MONGO_DB: str = "marketplace"

    # Redis (optional, only needed for the shared result cache)
    REDIS_URL: str = ""

    # Search result cache
    RESULT_CACHE_BACKEND: CacheBackend = "memory"
    search_cache_ttl: int = 5 * 60              # 5 minutes
    search_cache_max_entries: int = 1000
    search_cache_prefix: str = "search"         # redis key namespace

    # User profile cache
    profile_cache_ttl: int = 15 * 60            # 15 minutes
    profile_cache_max_entries: int = 5000

    # Trending
    trending_refresh_seconds: int = 3600        # 1 hour
    trending_window_hours: int = 24
    trending_pool_size: int = 50

    # API
    api_prefix: str = "/api"
    ALLOWED_ORIGINS: str = ""                   # CSV

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
