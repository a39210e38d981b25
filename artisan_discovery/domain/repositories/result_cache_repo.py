from typing import List, Optional
from artisan_discovery.domain.models.catalog import ScoredResult, SearchFilters
from artisan_discovery.domain.services.result_cache import result_cache_key
import json

class RedisResultCache:
    """
    Adapter for caching ranked search results in Redis so several worker
    processes share them. Same interface as MemoryResultCache; expiry is
    delegated to Redis (SET ... EX ttl).
    """
    def __init__(self, redis, ttl_seconds: int, key_prefix: str = "search"):
        """
        Args:
            redis: redis.asyncio client instance
            ttl_seconds: expiration applied to every entry
            key_prefix: Prefix for cache keys
        """
        self.cache = redis
        self.ttl_seconds = ttl_seconds
        self.prefix = key_prefix

    def key(self, query: str, filters: Optional[SearchFilters], limit: int, offset: int) -> str:
        return result_cache_key(query, filters, limit, offset, prefix=self.prefix)

    async def get(self, key: str) -> Optional[List[ScoredResult]]:
        """
        Retrieve a list of ScoredResult from cache by key.
        Returns None if not found or expired.
        """
        raw = await self.cache.get(key)
        if raw:
            data = json.loads(raw)
            # Validate and convert each cached dict back to a ScoredResult
            return [ScoredResult.model_validate(x) for x in data]
        return None

    async def put(self, key: str, results: List[ScoredResult]) -> None:
        payload = [r.model_dump(mode="json") for r in results]
        await self.cache.set(key, json.dumps(payload), ex=self.ttl_seconds)

    async def clear(self) -> None:
        # Only our namespace; other keys in the same db are left alone
        async for k in self.cache.scan_iter(match=f"{self.prefix}:*"):
            await self.cache.delete(k)
