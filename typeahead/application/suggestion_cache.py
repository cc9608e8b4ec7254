"""
Suggestion Cache

Short-lived in-process cache of merged suggestion lists, so retyping a recent
query does not hit the network again.
"""

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import structlog

from typeahead.domain.value_objects import Suggestion

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CachedSuggestions:
    """Cached list with its storage time."""

    suggestions: Tuple[Suggestion, ...]
    stored_at: float


class SuggestionCache:
    """
    Query -> suggestions cache with a TTL and a bounded size.

    Keys are normalized (lowercased, trimmed). When full, the entry stored
    first is evicted.
    """

    def __init__(
        self,
        ttl_seconds: float = 180,
        max_entries: int = 50,
        clock: Callable[[], float] = time.monotonic
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CachedSuggestions]" = OrderedDict()
        self._stats = {"hits": 0, "misses": 0, "evictions": 0}

    @staticmethod
    def make_key(query: str) -> str:
        return query.strip().lower()

    def get(self, query: str) -> Optional[List[Suggestion]]:
        """Cached suggestions for ``query``, or None when missing or expired."""
        key = self.make_key(query)
        entry = self._entries.get(key)

        if entry is None:
            self._stats["misses"] += 1
            return None

        if self._clock() - entry.stored_at >= self.ttl_seconds:
            del self._entries[key]
            self._stats["misses"] += 1
            logger.debug("Suggestions cache expired", query=key)
            return None

        self._stats["hits"] += 1
        logger.debug("Suggestions cache hit", query=key, count=len(entry.suggestions))
        return list(entry.suggestions)

    def set(self, query: str, suggestions: List[Suggestion]) -> None:
        key = self.make_key(query)
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self._stats["evictions"] += 1
            logger.debug("Suggestions cache eviction", query=evicted)

        self._entries[key] = CachedSuggestions(
            suggestions=tuple(suggestions),
            stored_at=self._clock()
        )

    def invalidate(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        return {
            **self._stats,
            "size": len(self._entries),
            "max_entries": self.max_entries,
            "hit_rate": self._stats["hits"] / max(1, self._stats["hits"] + self._stats["misses"])
        }
