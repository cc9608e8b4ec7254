"""Suggestion source provider."""

from __future__ import annotations

import asyncio
from typing import Optional

from typeahead.core.config import get_settings
from typeahead.domain.interfaces import ISuggestionSource
from typeahead.infrastructure.adapters.http_suggestion_source import HttpSuggestionSource

_source: Optional[ISuggestionSource] = None
_lock = asyncio.Lock()


async def get_suggestion_source() -> ISuggestionSource:
    """Return the singleton HTTP suggestion source."""
    global _source

    if _source is not None:
        return _source

    async with _lock:
        if _source is not None:
            return _source

        settings = get_settings()
        _source = HttpSuggestionSource(
            settings.get_suggestions_url(),
            timeout_seconds=settings.REQUEST_TIMEOUT_SECONDS
        )
        return _source


async def reset_suggestion_source() -> None:
    """Close and drop the cached source (useful for tests)."""
    global _source
    async with _lock:
        if _source is not None:
            await _source.aclose()
        _source = None
