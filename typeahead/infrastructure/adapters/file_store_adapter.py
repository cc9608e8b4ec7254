"""
File Key-Value Store - JSON document on local disk

Gives a single client/device durable history without a Redis server. The whole
store is one JSON object persisted atomically (write to temp file, then rename).
"""

import asyncio
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles
import structlog

from typeahead.domain.exceptions import StorageError
from typeahead.domain.interfaces import IKeyValueStore

logger = structlog.get_logger(__name__)


class FileKeyValueStore(IKeyValueStore):
    """
    Key-value store persisted to a JSON file.

    The file is read lazily on first access. Expiration is not supported:
    every value lives until deleted, which is what search history needs.

    Args:
        path: Location of the JSON file (parent directories are created)
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self._data: Optional[Dict[str, Any]] = None
        self._lock = asyncio.Lock()

    async def check_health(self) -> Dict[str, Any]:
        """Check that the backing file is usable"""
        try:
            async with self._lock:
                data = await self._load()
            return {
                "status": "healthy",
                "service": "FileKeyValueStore",
                "path": str(self.path),
                "keys": len(data)
            }
        except StorageError as e:
            return {
                "status": "unhealthy",
                "service": "FileKeyValueStore",
                "path": str(self.path),
                "error": str(e)
            }

    async def get(self, key: str) -> Optional[Any]:
        async with self._lock:
            data = await self._load()
            value = data.get(key)
            # Round-trip through JSON so callers never share state with the store
            return json.loads(json.dumps(value)) if value is not None else None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        if ttl is not None:
            logger.debug("TTL ignored by file store", key=key, ttl=ttl)

        async with self._lock:
            data = await self._load()
            data[key] = json.loads(json.dumps(value))
            await self._save(data)
            return True

    async def delete(self, key: str) -> bool:
        async with self._lock:
            data = await self._load()
            if key not in data:
                return False
            del data[key]
            await self._save(data)
            return True

    async def exists(self, key: str) -> bool:
        async with self._lock:
            data = await self._load()
            return key in data

    async def clear(self, pattern: str = "*") -> int:
        async with self._lock:
            data = await self._load()
            if pattern == "*":
                keys_to_delete = list(data)
            elif pattern.endswith("*"):
                keys_to_delete = [key for key in data if key.startswith(pattern[:-1])]
            else:
                keys_to_delete = [key for key in data if key == pattern]

            for key in keys_to_delete:
                del data[key]

            if keys_to_delete:
                await self._save(data)

            logger.info("Store pattern clear", pattern=pattern, count=len(keys_to_delete))
            return len(keys_to_delete)

    async def _load(self) -> Dict[str, Any]:
        if self._data is not None:
            return self._data

        if not self.path.exists():
            self._data = {}
            return self._data

        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                content = await f.read()
        except OSError as e:
            logger.error("Failed to read store file", path=str(self.path), error=str(e))
            raise StorageError(f"Cannot read {self.path}: {e}") from e

        try:
            loaded = json.loads(content) if content.strip() else {}
        except json.JSONDecodeError as e:
            logger.warning("Store file is corrupt, starting empty", path=str(self.path), error=str(e))
            loaded = {}

        if not isinstance(loaded, dict):
            logger.warning("Store file is not a JSON object, starting empty", path=str(self.path))
            loaded = {}

        self._data = loaded
        return self._data

    async def _save(self, data: Dict[str, Any]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(data, ensure_ascii=False))
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to write store file", path=str(self.path), error=str(e))
            raise StorageError(f"Cannot write {self.path}: {e}") from e
