"""Search history: bounded, deduplicated, most-recent-first list of submitted queries."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

import structlog

from typeahead.domain.exceptions import StorageError
from typeahead.domain.interfaces import IKeyValueStore

logger = structlog.get_logger(__name__)

DEFAULT_CLIENT_ID = "default"


class SearchHistoryService:
    """
    Keeps the last ``cap`` free-form searches per client.

    Each client's history is one key holding a JSON array of strings. Entries
    are loaded lazily on first read and kept in memory afterwards. Every
    read-modify-write of a key runs under that key's lock, so rapid
    successive ``record`` calls never lose updates. Persistence is
    best-effort: store failures are logged and the in-memory list stays
    authoritative for the process.
    """

    def __init__(
        self,
        store: IKeyValueStore,
        *,
        cap: int = 5,
        key_prefix: str = "typeahead:search_history"
    ) -> None:
        self.store = store
        self.cap = cap
        self.key_prefix = key_prefix

        self._entries: Dict[str, List[str]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def key_for(self, client_id: str) -> str:
        return f"{self.key_prefix}:{client_id}"

    async def record(self, query: str, client_id: str = DEFAULT_CLIENT_ID) -> None:
        """Remember a submitted query.

        Trims whitespace and ignores blank input. An existing equal entry
        (case-sensitive) moves to the front instead of being duplicated.

        Args:
            query: Literal text the user submitted
            client_id: Client/device namespace
        """
        trimmed = query.strip()
        if not trimmed:
            return

        key = self.key_for(client_id)
        async with self._lock_for(key):
            current = await self._read(key, refresh=True)
            updated = [trimmed] + [entry for entry in current if entry != trimmed]
            updated = updated[:self.cap]

            self._entries[key] = updated
            await self._write(key, updated)

        logger.debug("Search recorded", client_id=client_id, size=len(updated))

    async def list(self, client_id: str = DEFAULT_CLIENT_ID) -> List[str]:
        """Remembered queries, most recent first."""
        key = self.key_for(client_id)
        async with self._lock_for(key):
            return list(await self._read(key))

    async def clear(self, client_id: str = DEFAULT_CLIENT_ID) -> None:
        """Forget every remembered query and remove the persisted key."""
        key = self.key_for(client_id)
        async with self._lock_for(key):
            self._entries[key] = []
            try:
                await self.store.delete(key)
            except StorageError as e:
                logger.warning("Failed to clear persisted history", key=key, error=str(e))

        logger.info("Search history cleared", client_id=client_id)

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def _read(self, key: str, refresh: bool = False) -> List[str]:
        cached: Optional[List[str]] = self._entries.get(key)
        if cached is not None and not refresh:
            return cached

        try:
            stored = await self.store.get(key)
        except StorageError as e:
            logger.warning("Failed to load history", key=key, error=str(e))
            return cached if cached is not None else []

        entries = self._sanitize(key, stored)
        self._entries[key] = entries
        return entries

    async def _write(self, key: str, entries: List[str]) -> None:
        try:
            await self.store.set(key, entries)
        except StorageError as e:
            logger.warning("Failed to persist history", key=key, error=str(e))

    def _sanitize(self, key: str, stored: object) -> List[str]:
        if stored is None:
            return []

        if not isinstance(stored, list):
            logger.warning("Ignoring malformed history value", key=key, value_type=type(stored).__name__)
            return []

        entries: List[str] = []
        for item in stored:
            if isinstance(item, str) and item.strip() and item not in entries:
                entries.append(item)
        return entries[:self.cap]
