"""Key-value store provider: Redis, JSON file or memory, chosen from settings."""

from __future__ import annotations

import asyncio
from typing import Optional

import structlog

from typeahead.core.config import get_settings
from typeahead.domain.exceptions import StorageError
from typeahead.domain.interfaces import IKeyValueStore
from typeahead.infrastructure.adapters.file_store_adapter import FileKeyValueStore
from typeahead.infrastructure.adapters.memory_store_adapter import MemoryKeyValueStore
from typeahead.infrastructure.adapters.redis_store_adapter import RedisKeyValueStore

logger = structlog.get_logger(__name__)

_store: Optional[IKeyValueStore] = None
_lock = asyncio.Lock()


async def get_key_value_store() -> IKeyValueStore:
    """Return the singleton store backing history and analytics."""
    global _store

    if _store is not None:
        return _store

    async with _lock:
        if _store is not None:
            return _store

        _store = await _create_store()
        return _store


async def reset_key_value_store() -> None:
    """Close and drop the cached store (useful for tests)."""
    global _store
    async with _lock:
        if isinstance(_store, RedisKeyValueStore):
            await _store.close()
        _store = None


async def _create_store() -> IKeyValueStore:
    settings = get_settings()

    if settings.is_redis_configured():
        try:
            return await RedisKeyValueStore.create(settings.REDIS_URL)
        except StorageError as e:
            logger.warning("Redis not available, falling back to local store", error=str(e))

    if settings.HISTORY_STORAGE_PATH:
        logger.info("Using file key-value store", path=settings.HISTORY_STORAGE_PATH)
        return FileKeyValueStore(settings.HISTORY_STORAGE_PATH)

    logger.info("Using in-memory key-value store")
    return MemoryKeyValueStore()
