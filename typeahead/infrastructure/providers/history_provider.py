"""Search history service provider."""

from __future__ import annotations

import asyncio
from typing import Optional

from typeahead.application.history_service import SearchHistoryService
from typeahead.core.config import get_settings
from typeahead.infrastructure.providers.store_provider import get_key_value_store

_history_service: Optional[SearchHistoryService] = None
_lock = asyncio.Lock()


async def get_history_service() -> SearchHistoryService:
    """Return the singleton history service shared by every search box."""
    global _history_service

    if _history_service is not None:
        return _history_service

    async with _lock:
        if _history_service is not None:
            return _history_service

        settings = get_settings()
        store = await get_key_value_store()
        _history_service = SearchHistoryService(
            store,
            cap=settings.HISTORY_CAP,
            key_prefix=settings.HISTORY_KEY_PREFIX
        )
        return _history_service


async def reset_history_service() -> None:
    """Reset cached instance (useful for tests)."""
    global _history_service
    async with _lock:
        _history_service = None
