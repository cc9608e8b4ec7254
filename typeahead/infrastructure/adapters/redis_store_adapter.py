"""
Redis Key-Value Store - Redis-backed durable store for production environments
"""

import json
from typing import Any, Dict, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError
import structlog

from typeahead.domain.exceptions import StorageError
from typeahead.domain.interfaces import IKeyValueStore

logger = structlog.get_logger(__name__)


class RedisKeyValueStore(IKeyValueStore):
    """Redis-backed store; values are JSON documents"""

    def __init__(self, redis_client: Any):
        self.redis = redis_client
        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "deletes": 0,
            "errors": 0
        }

    @classmethod
    async def create(cls, redis_url: str = "redis://localhost:6379/0") -> "RedisKeyValueStore":
        """Create store with a pooled client and verify connectivity"""
        try:
            redis_client = aioredis.from_url(
                redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30
            )

            await redis_client.ping()

            logger.info("Redis key-value store initialized", redis_url=redis_url)
            return cls(redis_client)

        except RedisError as e:
            logger.error("Failed to initialize Redis store", error=str(e))
            raise StorageError(f"Redis unavailable: {e}") from e

    async def check_health(self) -> Dict[str, Any]:
        """Check Redis service health"""
        try:
            await self.redis.ping()
            info = await self.redis.info()

            return {
                "status": "healthy",
                "service": "RedisKeyValueStore",
                "redis_version": info.get("redis_version"),
                "connected_clients": info.get("connected_clients"),
                "stats": self._stats.copy()
            }

        except RedisError as e:
            logger.error("Redis health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "service": "RedisKeyValueStore",
                "error": str(e),
                "stats": self._stats.copy()
            }

    async def get(self, key: str) -> Optional[Any]:
        """Get and decode a JSON value"""
        try:
            raw_value = await self.redis.get(key)
        except RedisError as e:
            self._stats["errors"] += 1
            logger.error("Redis get failed", key=key, error=str(e))
            raise StorageError(f"Redis get failed for {key}: {e}") from e

        if raw_value is None:
            self._stats["misses"] += 1
            return None

        try:
            value = json.loads(raw_value)
        except (json.JSONDecodeError, TypeError) as e:
            self._stats["errors"] += 1
            logger.warning("Discarding undecodable value", key=key, error=str(e))
            return None

        self._stats["hits"] += 1
        return value

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Encode and store a JSON value; ``ttl=None`` never expires"""
        serialized_value = json.dumps(value, ensure_ascii=False)

        try:
            if ttl is None:
                result = await self.redis.set(key, serialized_value)
            else:
                result = await self.redis.setex(key, ttl, serialized_value)
        except RedisError as e:
            self._stats["errors"] += 1
            logger.error("Redis set failed", key=key, error=str(e))
            raise StorageError(f"Redis set failed for {key}: {e}") from e

        if result:
            self._stats["sets"] += 1
            logger.debug("Store set", key=key, ttl=ttl)
            return True

        return False

    async def delete(self, key: str) -> bool:
        """Delete key"""
        try:
            result = await self.redis.delete(key)
        except RedisError as e:
            self._stats["errors"] += 1
            logger.error("Redis delete failed", key=key, error=str(e))
            raise StorageError(f"Redis delete failed for {key}: {e}") from e

        if result > 0:
            self._stats["deletes"] += 1
            logger.debug("Store delete", key=key)
            return True

        return False

    async def exists(self, key: str) -> bool:
        """Check if key exists"""
        try:
            return await self.redis.exists(key) > 0
        except RedisError as e:
            self._stats["errors"] += 1
            logger.error("Redis exists check failed", key=key, error=str(e))
            raise StorageError(f"Redis exists failed for {key}: {e}") from e

    async def clear(self, pattern: str = "*") -> int:
        """Delete keys matching pattern, in batches"""
        try:
            keys = [key async for key in self.redis.scan_iter(match=pattern)]
            if not keys:
                return 0

            batch_size = 100
            deleted_count = 0

            for i in range(0, len(keys), batch_size):
                batch = keys[i:i + batch_size]
                deleted_count += await self.redis.delete(*batch)

            logger.info("Store pattern clear", pattern=pattern, count=deleted_count)
            return deleted_count

        except RedisError as e:
            self._stats["errors"] += 1
            logger.error("Redis clear failed", pattern=pattern, error=str(e))
            raise StorageError(f"Redis clear failed for {pattern}: {e}") from e

    async def close(self) -> None:
        """Close the client and its pool"""
        await self.redis.aclose()
        logger.info("Redis key-value store closed")
