"""Engine factory wiring shared services into a new search box controller."""

from __future__ import annotations

from typing import Optional

from typeahead.application.history_service import DEFAULT_CLIENT_ID
from typeahead.application.rate_limiter import SlidingWindowRateLimiter
from typeahead.application.suggestion_cache import SuggestionCache
from typeahead.application.typeahead_engine import TypeaheadEngine
from typeahead.core.config import Settings, get_settings
from typeahead.domain.interfaces import INavigationSink
from typeahead.infrastructure.providers.analytics_provider import get_search_analytics
from typeahead.infrastructure.providers.history_provider import get_history_service
from typeahead.infrastructure.providers.source_provider import get_suggestion_source


async def create_engine(
    sink: INavigationSink,
    *,
    client_id: str = DEFAULT_CLIENT_ID,
    settings: Optional[Settings] = None
) -> TypeaheadEngine:
    """
    Build an engine for one search box.

    The suggestion source, history and analytics are process-wide singletons;
    the suggestion cache and rate limiter belong to the returned engine.
    """
    settings = settings or get_settings()

    cache = None
    if settings.SUGGESTION_CACHE_MAX_ENTRIES > 0 and settings.SUGGESTION_CACHE_TTL_SECONDS > 0:
        cache = SuggestionCache(
            ttl_seconds=settings.SUGGESTION_CACHE_TTL_SECONDS,
            max_entries=settings.SUGGESTION_CACHE_MAX_ENTRIES
        )

    rate_limiter = None
    if settings.RATE_LIMIT_PER_MINUTE > 0:
        rate_limiter = SlidingWindowRateLimiter(
            max_requests=settings.RATE_LIMIT_PER_MINUTE,
            window_seconds=60.0
        )

    return TypeaheadEngine(
        await get_suggestion_source(),
        await get_history_service(),
        sink,
        client_id=client_id,
        timeout_seconds=settings.REQUEST_TIMEOUT_SECONDS,
        cache=cache,
        rate_limiter=rate_limiter,
        analytics=await get_search_analytics(),
        **settings.get_engine_config()
    )
