"""
In-process TTL caches.

One cache per sub-result so each can carry its own lifetime. Reads and
writes are not coordinated across threads: two concurrent requests for the
same uncached ticker both run the full pipeline, which is safe because the
pipeline is idempotent.
"""

import time
from typing import Any, Callable, Dict, Optional, Tuple

from ..config.settings import CACHE_TTL_CONFIG


class TTLCache:
    """Simple TTL cache keyed by lowercased string keys."""

    def __init__(self, ttl: float = 300, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}

    @staticmethod
    def _key(key: str) -> str:
        return key.lower()

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        entry = self._entries.get(self._key(key))
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            self._entries.pop(self._key(key), None)
            return None
        return value

    def _prune(self) -> None:
        now = self._clock()
        for key, (_, expires_at) in list(self._entries.items()):
            if now >= expires_at:
                self._entries.pop(key, None)

    def set(self, key: str, value: Any) -> None:
        self._prune()
        self._entries[self._key(key)] = (value, self._clock() + self.ttl)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        self._prune()
        return len(self._entries)


CACHES: Dict[str, TTLCache] = {
    name: TTLCache(ttl=ttl) for name, ttl in CACHE_TTL_CONFIG.items()
}


def get_cache(name: str) -> TTLCache:
    return CACHES[name]


def clear_all_caches() -> None:
    """Flush every named cache."""
    for cache in CACHES.values():
        cache.clear()
