"""Tests for the memory, file and Redis key-value stores."""

import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from typeahead.domain.exceptions import StorageError
from typeahead.infrastructure.adapters.file_store_adapter import FileKeyValueStore
from typeahead.infrastructure.adapters.memory_store_adapter import MemoryKeyValueStore
from typeahead.infrastructure.adapters.redis_store_adapter import RedisKeyValueStore


class TestMemoryKeyValueStore:

    @pytest.mark.asyncio
    async def test_set_get_delete(self):
        store = MemoryKeyValueStore()

        await store.set("k", ["a", "b"])
        assert await store.get("k") == ["a", "b"]
        assert await store.exists("k")

        assert await store.delete("k") is True
        assert await store.get("k") is None
        assert await store.delete("k") is False

    @pytest.mark.asyncio
    async def test_values_are_copied(self):
        store = MemoryKeyValueStore()
        value = ["a"]
        await store.set("k", value)

        value.append("b")
        (await store.get("k")).append("c")

        assert await store.get("k") == ["a"]

    @pytest.mark.asyncio
    async def test_ttl_expiry(self, monkeypatch):
        store = MemoryKeyValueStore()
        now = [1000.0]
        monkeypatch.setattr(
            "typeahead.infrastructure.adapters.memory_store_adapter.time.time",
            lambda: now[0]
        )

        await store.set("k", "v", ttl=10)
        now[0] += 11

        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_clear_by_prefix(self):
        store = MemoryKeyValueStore()
        await store.set("hist:a", [])
        await store.set("hist:b", [])
        await store.set("other", [])

        assert await store.clear("hist:*") == 2
        assert await store.exists("other")

    @pytest.mark.asyncio
    async def test_evicts_oldest_when_full(self):
        store = MemoryKeyValueStore(max_size=2)
        await store.set("a", 1)
        await store.set("b", 2)
        await store.set("c", 3)

        assert await store.get("a") is None
        assert store.get_stats()["evictions"] == 1


class TestFileKeyValueStore:

    @pytest.mark.asyncio
    async def test_persists_between_instances(self, tmp_path):
        path = tmp_path / "nested" / "store.json"

        await FileKeyValueStore(str(path)).set("k", ["tractor"])

        assert json.loads(path.read_text(encoding="utf-8")) == {"k": ["tractor"]}
        assert await FileKeyValueStore(str(path)).get("k") == ["tractor"]

    @pytest.mark.asyncio
    async def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")
        store = FileKeyValueStore(str(path))

        assert await store.get("k") is None
        await store.set("k", ["x"])
        assert await FileKeyValueStore(str(path)).get("k") == ["x"]

    @pytest.mark.asyncio
    async def test_delete_and_clear(self, tmp_path):
        store = FileKeyValueStore(str(tmp_path / "store.json"))
        await store.set("hist:a", [])
        await store.set("hist:b", [])

        assert await store.delete("hist:a") is True
        assert await store.delete("hist:a") is False
        assert await store.clear("hist:*") == 1
        assert not await store.exists("hist:b")

    @pytest.mark.asyncio
    async def test_write_failure_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = FileKeyValueStore(str(blocker / "store.json"))

        with pytest.raises(StorageError):
            await store.set("k", [])

    @pytest.mark.asyncio
    async def test_health(self, tmp_path):
        store = FileKeyValueStore(str(tmp_path / "store.json"))
        health = await store.check_health()
        assert health["status"] == "healthy"


class TestRedisKeyValueStore:

    def setup_method(self):
        self.redis = AsyncMock()
        self.store = RedisKeyValueStore(self.redis)

    @pytest.mark.asyncio
    async def test_get_decodes_json(self):
        self.redis.get.return_value = '["tractor"]'
        assert await self.store.get("k") == ["tractor"]

    @pytest.mark.asyncio
    async def test_get_missing(self):
        self.redis.get.return_value = None
        assert await self.store.get("k") is None

    @pytest.mark.asyncio
    async def test_set_without_ttl_never_expires(self):
        self.redis.set.return_value = True

        assert await self.store.set("k", ["tractor"]) is True

        self.redis.set.assert_awaited_once_with("k", '["tractor"]')
        self.redis.setex.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_set_with_ttl(self):
        self.redis.setex.return_value = True

        await self.store.set("k", ["a"], ttl=30)

        self.redis.setex.assert_awaited_once_with("k", 30, '["a"]')

    @pytest.mark.asyncio
    async def test_redis_errors_become_storage_errors(self):
        self.redis.get.side_effect = RedisConnectionError("down")

        with pytest.raises(StorageError):
            await self.store.get("k")

    @pytest.mark.asyncio
    async def test_delete(self):
        self.redis.delete.return_value = 1
        assert await self.store.delete("k") is True
