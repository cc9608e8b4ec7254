"""Infrastructure adapters for external services."""

from .memory_store_adapter import MemoryKeyValueStore
from .redis_store_adapter import RedisKeyValueStore
from .file_store_adapter import FileKeyValueStore
from .http_suggestion_source import HttpSuggestionSource
from .navigation_sink_adapter import CallbackNavigationSink, RouteRecordingSink

__all__ = [
    # Key-value stores
    "MemoryKeyValueStore",
    "RedisKeyValueStore",
    "FileKeyValueStore",

    # Suggestion source
    "HttpSuggestionSource",

    # Navigation
    "CallbackNavigationSink",
    "RouteRecordingSink",
]
