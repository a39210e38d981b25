import hashlib
import json
import time
from typing import Callable, List, Optional, Protocol

from artisan_discovery.domain.models.catalog import ScoredResult, SearchFilters
from artisan_discovery.utils.ttl_cache import TTLCache

DEFAULT_TTL_SECONDS = 300  # 5 minutes


def result_cache_key(query: str, filters: Optional[SearchFilters], limit: int, offset: int, prefix: str = "search") -> str:
    """
    Stable key for a (query, filters, limit, offset) tuple.
    Keys are serialized with sorted keys so field order never changes the hash.
    """
    payload = {
        "q": query,
        "f": filters.model_dump(mode="json", exclude_none=True) if filters else {},
        "k": limit,
        "o": offset,
    }
    s = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return f"{prefix}:{hashlib.sha1(s.encode()).hexdigest()[:16]}"


class ResultCache(Protocol):
    """What the search engine needs from a result cache."""

    def key(self, query: str, filters: Optional[SearchFilters], limit: int, offset: int) -> str: ...

    async def get(self, key: str) -> Optional[List[ScoredResult]]: ...

    async def put(self, key: str, results: List[ScoredResult]) -> None: ...

    async def clear(self) -> None: ...


class MemoryResultCache:
    """
    Process-local result cache. Hits return the exact list object that was stored.
    Bounded by `max_entries` (LRU) on top of the TTL.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
        prefix: str = "search",
    ):
        self.prefix = prefix
        self._entries: TTLCache[List[ScoredResult]] = TTLCache(ttl_seconds, max_entries, clock)

    def key(self, query: str, filters: Optional[SearchFilters], limit: int, offset: int) -> str:
        return result_cache_key(query, filters, limit, offset, prefix=self.prefix)

    async def get(self, key: str) -> Optional[List[ScoredResult]]:
        return self._entries.get(key)

    async def put(self, key: str, results: List[ScoredResult]) -> None:
        self._entries.set(key, results)

    async def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
