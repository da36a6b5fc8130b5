import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: List[Any]
    expires_at: float


class LookupCache:
    """Keyword -> location records, each entry living for a fixed TTL.

    Keys are upper-cased on every call, so "par" and "PAR" share an entry.
    Expiry is checked on read; cleanup() only reclaims memory.
    """

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.time):
        self._cache: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.ttl = ttl_seconds
        self._clock = clock

    @staticmethod
    def _get_key(key: str) -> str:
        return key.upper()

    def get(self, key: str) -> Optional[List[Any]]:
        key = self._get_key(key)
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            # Check if expired
            if self._clock() >= entry.expires_at:
                del self._cache[key]
                logger.debug("Cache entry expired for keyword: %s", key)
                return None

            return entry.value

    def put(self, key: str, value: List[Any]) -> None:
        key = self._get_key(key)
        entry = CacheEntry(key=key, value=value, expires_at=self._clock() + self.ttl)
        with self._lock:
            self._cache[key] = entry

    def remove(self, key: str) -> None:
        key = self._get_key(key)
        with self._lock:
            self._cache.pop(key, None)

    def cleanup(self) -> int:
        """Remove all expired entries to free memory."""
        with self._lock:
            now = self._clock()
            expired_keys = [k for k, entry in self._cache.items() if now >= entry.expires_at]
            for k in expired_keys:
                del self._cache[k]
        if expired_keys:
            logger.info("Cache cleanup removed %d expired entries", len(expired_keys))
        return len(expired_keys)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._cache)
