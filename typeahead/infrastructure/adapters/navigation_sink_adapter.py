"""Navigation sink adapters."""

import inspect
from typing import Any, Callable, List
from urllib.parse import quote

import structlog

from typeahead.domain.interfaces import INavigationSink
from typeahead.domain.value_objects import NavigationEvent, SelectEvent

logger = structlog.get_logger(__name__)


def search_route(query: str) -> str:
    """Generic search route for a free-form query."""
    return f"/#/search?q={quote(query, safe='')}"


def resolve_route(event: NavigationEvent) -> str:
    """
    Route for an event: the suggestion's pre-built target when it has one,
    otherwise a free-text search for its title or the submitted query.
    """
    if isinstance(event, SelectEvent):
        if event.target.navigation_target:
            return event.target.navigation_target
        return search_route(event.target.title)
    return search_route(event.query)


class CallbackNavigationSink(INavigationSink):
    """Forwards events to a plain or async callable."""

    def __init__(self, callback: Callable[[NavigationEvent], Any]):
        self.callback = callback

    async def dispatch(self, event: NavigationEvent) -> None:
        result = self.callback(event)
        if inspect.isawaitable(result):
            await result


class RouteRecordingSink(INavigationSink):
    """Resolves each event to a route and keeps the routes in order."""

    def __init__(self) -> None:
        self.routes: List[str] = []

    async def dispatch(self, event: NavigationEvent) -> None:
        route = resolve_route(event)
        self.routes.append(route)
        logger.info("Navigation", event_type=event.type, route=route)
