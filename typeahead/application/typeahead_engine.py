"""
Typeahead Engine

Wires debouncing, request lifecycle, aggregation, selection, history and
navigation into one search box controller.
"""

from __future__ import annotations

from typing import List, Optional

import structlog

from typeahead.application.aggregator import merge
from typeahead.application.debounce import DebounceScheduler
from typeahead.application.history_service import DEFAULT_CLIENT_ID, SearchHistoryService
from typeahead.application.rate_limiter import SlidingWindowRateLimiter
from typeahead.application.request_manager import RequestLifecycleManager
from typeahead.application.search_analytics import SearchAnalyticsService
from typeahead.application.suggestion_cache import SuggestionCache
from typeahead.domain.exceptions import RateLimitExceededError, SuggestionFetchError
from typeahead.domain.highlight import highlight
from typeahead.domain.interfaces import INavigationSink, ISuggestionSource
from typeahead.domain.selection import SelectionOutcome, SelectionStateMachine
from typeahead.domain.value_objects import (
    RenderedSuggestion,
    SelectEvent,
    SubmitEvent,
    Suggestion,
    SuggestionCategory,
)

logger = structlog.get_logger(__name__)


class TypeaheadEngine:
    """
    Controller behind one search box.

    Input flows through the debounce scheduler into the request manager; the
    merged result replaces the dropdown items only while its query is still
    the latest one. A blank box shows the search history instead. Keyboard and
    pointer events go through the selection machine, and the resulting
    select/submit events are sent to the navigation sink. Only submits are
    recorded in the history.

    Fetch and rate limit failures never escape: the list is emptied, ``error``
    is set and the box stays usable.
    """

    def __init__(
        self,
        source: ISuggestionSource,
        history: SearchHistoryService,
        sink: INavigationSink,
        *,
        client_id: str = DEFAULT_CLIENT_ID,
        debounce_ms: int = 300,
        min_chars: int = 2,
        limit: int = 5,
        timeout_seconds: float = 5.0,
        wrap_selection: bool = True,
        cache: Optional[SuggestionCache] = None,
        rate_limiter: Optional[SlidingWindowRateLimiter] = None,
        analytics: Optional[SearchAnalyticsService] = None
    ):
        self.history = history
        self.sink = sink
        self.client_id = client_id
        self.limit = limit
        self.cache = cache
        self.rate_limiter = rate_limiter
        self.analytics = analytics

        self.requests = RequestLifecycleManager(
            source,
            limit=limit,
            timeout_seconds=timeout_seconds
        )
        self.scheduler = DebounceScheduler(
            self._fetch,
            self._reset,
            delay_ms=debounce_ms,
            min_chars=min_chars
        )
        self.selection = SelectionStateMachine(wrap=wrap_selection)

        self.loading = False
        self.error: Optional[str] = None

    @property
    def query(self) -> str:
        return self.selection.query

    @property
    def suggestions(self) -> List[Suggestion]:
        return self.selection.items

    @property
    def is_open(self) -> bool:
        return self.selection.is_open

    @property
    def selected_index(self) -> int:
        return self.selection.index

    async def on_input(self, query: str) -> None:
        """React to the box content changing."""
        self.selection.input(query)

        if not query.strip():
            self.scheduler.cancel()
            self.requests.cancel_in_flight()
            await self._show_history()
            return

        self.scheduler.schedule(query)

    async def on_focus(self) -> None:
        self.selection.focus()
        if not self.query.strip():
            await self._show_history()

    async def on_key(self, key: str) -> SelectionOutcome:
        outcome = self.selection.key(key)
        await self._dispatch(outcome)
        return outcome

    async def on_click(self, index: int) -> SelectionOutcome:
        outcome = self.selection.click(index)
        await self._dispatch(outcome)
        return outcome

    def on_hover(self, index: int) -> None:
        self.selection.hover(index)

    def on_click_outside(self) -> None:
        self.selection.click_outside()

    def render(self) -> List[RenderedSuggestion]:
        """Visible rows with highlight segments; empty while the dropdown is closed."""
        if not self.selection.is_open:
            return []

        needle = self.selection.query
        return [
            RenderedSuggestion(
                suggestion=suggestion,
                segments=tuple(highlight(suggestion.title, needle)),
                selected=index == self.selection.index
            )
            for index, suggestion in enumerate(self.selection.items)
        ]

    async def clear_history(self) -> None:
        await self.history.clear(self.client_id)
        if not self.query.strip():
            self.selection.update_items([])

    def close(self) -> None:
        """Tear down: disarm the timer and cancel the in-flight request."""
        self.scheduler.close()
        self.requests.cancel_in_flight()
        self.loading = False

    async def drain(self) -> None:
        """Wait until the armed timer and the fetch it started are done."""
        await self.scheduler.drain()

    async def _show_history(self) -> None:
        self.loading = False
        self.error = None
        entries = await self.history.list(self.client_id)
        # Input may have changed while history was loading
        if self.query.strip():
            return
        self.selection.update_items(merge([], entries, "", self.limit))

    def _reset(self) -> None:
        self.requests.cancel_in_flight()
        self.loading = False
        self.error = None
        self.selection.update_items([])

    async def _fetch(self, query: str) -> None:
        # Every fire supersedes the older request, even when answered locally
        self.requests.cancel_in_flight()

        if self.cache is not None:
            cached = self.cache.get(query)
            if cached is not None:
                self.loading = False
                self.error = None
                self.selection.update_items(cached)
                return

        if self.rate_limiter is not None:
            try:
                self.rate_limiter.acquire()
            except RateLimitExceededError as e:
                logger.warning("Suggestion requests throttled", query=query, retry_after=e.retry_after)
                self._fail(str(e))
                return

        self.loading = True
        self.error = None

        try:
            remote = await self.requests.fetch_suggestions(query)
        except SuggestionFetchError as e:
            logger.warning("Suggestions unavailable", query=query, error=str(e), retryable=e.retryable)
            self._fail(str(e))
            return

        if remote is None:
            # Superseded; the newer request owns the loading state
            return

        suggestions = merge(remote, [], query, self.limit)
        self.loading = False
        self.selection.update_items(suggestions)

        if self.cache is not None:
            self.cache.set(query, suggestions)

        logger.debug("Suggestions updated", query=query, count=len(suggestions))

    def _fail(self, message: str) -> None:
        self.loading = False
        self.error = message
        self.selection.update_items([])

    async def _dispatch(self, outcome: SelectionOutcome) -> None:
        event = outcome.event
        if event is None:
            return

        if isinstance(event, SubmitEvent):
            await self.history.record(event.query, self.client_id)
            await self._track(event.query, source="submit")
        elif isinstance(event, SelectEvent):
            await self._track(event.target.title, source="suggestion")
            # A history row refills the box; a navigation row empties it
            if event.target.category == SuggestionCategory.HISTORY:
                self.selection.query = event.target.title
            else:
                self.selection.query = ""

        self.scheduler.cancel()
        self.requests.cancel_in_flight()
        self.loading = False

        await self.sink.dispatch(event)

    async def _track(self, query: str, source: str) -> None:
        if self.analytics is None:
            return
        await self.analytics.track_search(
            query,
            source=source,
            result_count=len(self.selection.items)
        )
