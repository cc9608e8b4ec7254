"""
Memory Key-Value Store - In-memory store for local development and tests
"""

import asyncio
import copy
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import structlog

from typeahead.domain.interfaces import IKeyValueStore

logger = structlog.get_logger(__name__)


@dataclass
class StoreItem:
    """Stored value with optional expiration"""
    value: Any
    expires_at: Optional[float]
    created_at: float

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now > self.expires_at


class MemoryKeyValueStore(IKeyValueStore):
    """In-memory key-value store; contents are lost when the process exits"""

    def __init__(self, max_size: int = 10000):
        self.max_size = max_size
        self._data: Dict[str, StoreItem] = {}
        self._lock = asyncio.Lock()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "deletes": 0,
            "evictions": 0
        }

    async def check_health(self) -> Dict[str, Any]:
        """Check service health"""
        return {
            "status": "healthy",
            "service": "MemoryKeyValueStore",
            "size": len(self._data),
            "max_size": self.max_size,
            "stats": self._stats.copy()
        }

    async def get(self, key: str) -> Optional[Any]:
        """Get value from store"""
        async with self._lock:
            item = self._data.get(key)

            if item is None:
                self._stats["misses"] += 1
                logger.debug("Store miss", key=key)
                return None

            if item.is_expired(time.time()):
                del self._data[key]
                self._stats["misses"] += 1
                logger.debug("Store entry expired", key=key)
                return None

            self._stats["hits"] += 1
            # Callers get a copy so mutations never leak into the store
            return copy.deepcopy(item.value)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value, optionally expiring after ``ttl`` seconds"""
        async with self._lock:
            if len(self._data) >= self.max_size and key not in self._data:
                self._evict_oldest()

            now = time.time()
            self._data[key] = StoreItem(
                value=copy.deepcopy(value),
                expires_at=now + ttl if ttl is not None else None,
                created_at=now
            )

            self._stats["sets"] += 1
            logger.debug("Store set", key=key, ttl=ttl)
            return True

    async def delete(self, key: str) -> bool:
        """Delete key from store"""
        async with self._lock:
            if key in self._data:
                del self._data[key]
                self._stats["deletes"] += 1
                logger.debug("Store delete", key=key)
                return True
            return False

    async def exists(self, key: str) -> bool:
        """Check if key exists"""
        async with self._lock:
            item = self._data.get(key)
            if item is None:
                return False

            if item.is_expired(time.time()):
                del self._data[key]
                return False

            return True

    async def clear(self, pattern: str = "*") -> int:
        """Clear keys matching pattern (exact key or prefix ending in *)"""
        async with self._lock:
            if pattern == "*":
                count = len(self._data)
                self._data.clear()
                logger.info("Store cleared completely", count=count)
                return count

            if pattern.endswith("*"):
                prefix = pattern[:-1]
                keys_to_delete = [key for key in self._data if key.startswith(prefix)]
            else:
                keys_to_delete = [key for key in self._data if key == pattern]

            for key in keys_to_delete:
                del self._data[key]

            logger.info("Store pattern clear", pattern=pattern, count=len(keys_to_delete))
            return len(keys_to_delete)

    def _evict_oldest(self) -> None:
        if not self._data:
            return

        oldest_key = min(self._data.keys(), key=lambda k: self._data[k].created_at)
        del self._data[oldest_key]
        self._stats["evictions"] += 1

        logger.debug("Store eviction", key=oldest_key)

    def get_stats(self) -> Dict[str, Any]:
        """Get store statistics"""
        return {
            **self._stats,
            "size": len(self._data),
            "max_size": self.max_size,
            "hit_rate": self._stats["hits"] / max(1, self._stats["hits"] + self._stats["misses"])
        }
