# artisan_discovery/api/v1/routers/health.py
import subprocess
import time

from fastapi import APIRouter, Request

from artisan_discovery.core.config import get_settings
from artisan_discovery.db import mongo
from artisan_discovery.db.redis import get_redis

router = APIRouter()
START_TIME = time.time()


def _git_sha(short: bool = True) -> str:
    try:
        cmd = ["git", "rev-parse", "--short" if short else "HEAD"]
        return subprocess.check_output(cmd, stderr=subprocess.DEVNULL).decode().strip()
    except Exception:
        return "unknown"


@router.get("/health")
async def health(request: Request):
    """
    Tolerant health check:
    - Mongo ping through Motor
    - Redis 'skipped' when not configured
    - whether the engines were built at startup
    """
    settings = get_settings()
    checks: dict[str, object] = {
        "app_name": settings.APP_NAME,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
        "version": settings.GIT_SHA if settings.GIT_SHA != "unknown" else _git_sha(),
        "uptime_seconds": int(time.time() - START_TIME),
        "result_cache": settings.RESULT_CACHE_BACKEND,
    }

    # --- Mongo ---
    try:
        db = mongo.get_db()
        await db.command("ping")
        checks["mongodb"] = "ok"
    except Exception as e:
        checks["mongodb"] = f"error: {e}"

    # --- Redis (tolerant) ---
    try:
        r = get_redis()
        if r:
            await r.ping()
            checks["redis"] = "ok"
        else:
            checks["redis"] = "skipped"
    except Exception as e:
        checks["redis"] = f"error: {e}"

    checks["engines_ready"] = getattr(request.app.state, "search_engine", None) is not None

    def _is_ok(v):
        return v in ("ok", "skipped") or v is True

    health_keys = ("mongodb", "redis", "engines_ready")
    status = "ok" if all(_is_ok(checks.get(k)) for k in health_keys) else "error"

    return {"status": status, "checks": checks, "timestamp": int(time.time())}
