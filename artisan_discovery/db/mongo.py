# artisan_discovery/db/mongo.py
import logging
from typing import Any, Dict

import certifi
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from artisan_discovery.core.config import get_settings

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None


def get_client() -> AsyncIOMotorClient:
    assert _client is not None, "Mongo client not initialized"
    return _client


def get_db() -> AsyncIOMotorDatabase:
    assert _db is not None, "Mongo DB not initialized"
    return _db


def _client_options(uri: str) -> Dict[str, Any]:
    opts: Dict[str, Any] = {
        "uuidRepresentation": "standard",
        "serverSelectionTimeoutMS": 6000,
        "connectTimeoutMS": 6000,
    }
    # Atlas style SRV URIs imply TLS; containers often lack a system CA bundle
    if uri.startswith("mongodb+srv://") or "tls=true" in uri.lower():
        opts["tls"] = True
        opts["tlsCAFile"] = certifi.where()
    return opts


async def connect():
    """
    Create the Motor client.
    A failed startup ping does not abort the app: the client stays lazy and
    the first real query retries the connection.
    """
    global _client, _db
    settings = get_settings()

    try:
        _client = AsyncIOMotorClient(settings.MONGO_URI, **_client_options(settings.MONGO_URI))
        _db = _client[settings.MONGO_DB]
    except Exception as e:
        _client = None
        _db = None
        logger.error("mongo client init failed err=%s", e)
        raise

    try:
        await _client.admin.command("ping")
        logger.info("mongo connected db=%s (ping ok)", settings.MONGO_DB)
    except Exception as e:
        logger.warning("mongo ping at startup failed, will connect lazily err=%s", e)


async def disconnect():
    global _client, _db
    if _client:
        _client.close()
        logger.info("mongo disconnected")
    _client = None
    _db = None
