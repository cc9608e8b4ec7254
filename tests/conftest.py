"""Shared fixtures: provider reset, stub collaborators and sample suggestion data."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any, Dict, List, Optional

import pytest

from typeahead.application.history_service import SearchHistoryService
from typeahead.core.config import get_settings
from typeahead.domain.interfaces import INavigationSink, ISuggestionSource
from typeahead.domain.value_objects import (
    AttributeSource,
    NavigationEvent,
    SuggestionSource,
    TaxonomySource,
)
from typeahead.infrastructure.adapters.memory_store_adapter import MemoryKeyValueStore
from typeahead.infrastructure.providers import reset_all_providers


@pytest.fixture(autouse=True)
async def reset_provider_state() -> AsyncIterator[None]:
    """Ensure each test starts with clean provider singletons and settings."""
    get_settings.cache_clear()
    await reset_all_providers()
    yield
    await reset_all_providers()
    get_settings.cache_clear()


class StubSuggestionSource(ISuggestionSource):
    """
    Scripted suggestion source.

    ``responses`` maps a query to its items (or to an exception to raise).
    ``delays`` holds per-query sleeps so tests can make responses resolve
    out of order.
    """

    def __init__(
        self,
        responses: Optional[Dict[str, Any]] = None,
        delays: Optional[Dict[str, float]] = None
    ):
        self.responses = responses or {}
        self.delays = delays or {}
        self.calls: List[str] = []
        self.cancelled: List[str] = []

    async def check_health(self) -> Dict[str, Any]:
        return {"status": "healthy", "service": "StubSuggestionSource"}

    async def fetch(self, query: str, limit: int) -> List[SuggestionSource]:
        self.calls.append(query)
        try:
            await asyncio.sleep(self.delays.get(query, 0))
        except asyncio.CancelledError:
            self.cancelled.append(query)
            raise

        response = self.responses.get(query, [])
        if isinstance(response, Exception):
            raise response
        return list(response)


class RecordingSink(INavigationSink):
    """Navigation sink that keeps every dispatched event."""

    def __init__(self) -> None:
        self.events: List[NavigationEvent] = []

    async def dispatch(self, event: NavigationEvent) -> None:
        self.events.append(event)


def tractor_items() -> List[SuggestionSource]:
    """Items the source returns for ``"tra"``."""
    return [
        TaxonomySource(
            id="sub-tractores",
            label="Tractores",
            parent_label="Maquinaria Agrícola",
            icon="tractor",
            navigation_target="/#/search?cat=maquinaria&sub=tractores",
        ),
        AttributeSource(
            field_name="marca",
            field_label="Marca",
            value="Traktor King",
            context_label="Tractores",
            navigation_target="/#/search?cat=maquinaria&sub=tractores&marca=Traktor%20King",
        ),
    ]


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def history_service(memory_store: MemoryKeyValueStore) -> SearchHistoryService:
    return SearchHistoryService(memory_store, cap=5)


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def stub_source() -> StubSuggestionSource:
    return StubSuggestionSource({"tra": tractor_items()})
