"""Domain-layer service interfaces.

These abstractions define the stable contracts that the application layer relies on,
while infrastructure adapters provide concrete implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from typeahead.domain.value_objects import NavigationEvent, SuggestionSource


class IHealthCheck:
    """Health check interface mixin."""

    @abstractmethod
    async def check_health(self) -> Dict[str, Any]:
        """Return health check details."""
        pass


class IKeyValueStore(IHealthCheck, ABC):
    """Durable key-value store interface used for history and analytics."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Get a JSON-compatible value, or None when missing."""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Store a JSON-compatible value; ``ttl=None`` keeps it forever."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete key."""
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if key exists."""
        pass

    @abstractmethod
    async def clear(self, pattern: str = "*") -> int:
        """Clear keys matching pattern."""
        pass


class ISuggestionSource(IHealthCheck, ABC):
    """Remote suggestion collaborator."""

    @abstractmethod
    async def fetch(self, query: str, limit: int) -> List[SuggestionSource]:
        """Fetch raw suggestions for ``query``, at most ``limit`` per category.

        Raises:
            SuggestionFetchError: on network, status or payload failures
        """
        pass

    async def aclose(self) -> None:
        """Release transport resources."""
        return None


class INavigationSink(ABC):
    """Consumer of chosen suggestions and free-form submits."""

    @abstractmethod
    async def dispatch(self, event: NavigationEvent) -> None:
        """Route a navigation event."""
        pass
