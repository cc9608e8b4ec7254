"""Search analytics provider; yields None while analytics is disabled."""

from __future__ import annotations

import asyncio
from typing import Optional

from typeahead.application.search_analytics import SearchAnalyticsService
from typeahead.core.config import get_settings
from typeahead.infrastructure.providers.store_provider import get_key_value_store

_analytics_service: Optional[SearchAnalyticsService] = None
_lock = asyncio.Lock()


async def get_search_analytics() -> Optional[SearchAnalyticsService]:
    global _analytics_service

    settings = get_settings()
    if not settings.ANALYTICS_ENABLED:
        return None

    if _analytics_service is not None:
        return _analytics_service

    async with _lock:
        if _analytics_service is not None:
            return _analytics_service

        store = await get_key_value_store()
        _analytics_service = SearchAnalyticsService(
            store,
            endpoint_url=settings.get_analytics_url(),
            batch_size=settings.ANALYTICS_BATCH_SIZE,
            max_local_events=settings.ANALYTICS_MAX_LOCAL_EVENTS
        )
        _analytics_service.start()
        return _analytics_service


async def reset_search_analytics() -> None:
    """Stop, flush and drop the cached tracker (useful for tests)."""
    global _analytics_service
    async with _lock:
        if _analytics_service is not None:
            await _analytics_service.aclose()
        _analytics_service = None
