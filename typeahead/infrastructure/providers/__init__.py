"""Provider helpers for infrastructure services."""

from .store_provider import get_key_value_store, reset_key_value_store
from .history_provider import get_history_service, reset_history_service
from .source_provider import get_suggestion_source, reset_suggestion_source
from .analytics_provider import get_search_analytics, reset_search_analytics
from .engine_provider import create_engine


async def reset_all_providers() -> None:
    """Reset every cached singleton, dependents first."""
    await reset_search_analytics()
    await reset_history_service()
    await reset_suggestion_source()
    await reset_key_value_store()


__all__ = [
    "get_key_value_store",
    "reset_key_value_store",
    "get_history_service",
    "reset_history_service",
    "get_suggestion_source",
    "reset_suggestion_source",
    "get_search_analytics",
    "reset_search_analytics",
    "create_engine",
    "reset_all_providers",
]
