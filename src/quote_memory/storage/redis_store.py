# Copyright 2024 Heinrich Krupp
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Redis implementation of the key-value substrate.

Provides:
- A pooled ``redis.asyncio`` connection with decoded string responses
- A key prefix so several deployments can share one Redis database
- Prefix listing via SCAN (never KEYS)
"""

import logging
import re

from redis.asyncio import ConnectionPool, Redis

from .base import KeyValueStore

logger = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def escape_glob(text: str) -> str:
    """Escape Redis MATCH glob metacharacters."""
    return _GLOB_SPECIAL.sub(r"\\\1", text)


class RedisKeyValueStore(KeyValueStore):
    """
    Redis-backed substrate.

    All logical keys are stored under ``key_prefix``. Errors from Redis
    propagate; callers decide which failures are tolerable.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379",
        key_prefix: str = "quote:",
        max_connections: int = 10,
    ):
        """
        Initialize Redis store.

        Args:
            url: Redis connection URL
            key_prefix: Prefix for all keys written by this store
            max_connections: Maximum Redis connections in pool
        """
        self.url = url
        self.key_prefix = key_prefix
        self.max_connections = max_connections

        self._pool: ConnectionPool | None = None
        self._redis: Redis | None = None
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize Redis connection pool."""
        if self._initialized:
            return

        self._pool = ConnectionPool.from_url(
            self.url,
            max_connections=self.max_connections,
            decode_responses=True,
        )

        self._redis = Redis(connection_pool=self._pool)

        try:
            await self._redis.ping()
            self._initialized = True
            logger.info(f"RedisKeyValueStore initialized: {self.url} (prefix={self.key_prefix!r})")
        except Exception as e:
            logger.error(f"RedisKeyValueStore initialization failed: {e}")
            await self.close()
            raise

    async def close(self) -> None:
        """Close Redis connection pool."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

        if self._pool:
            await self._pool.aclose()
            self._pool = None

        self._initialized = False

    @property
    def redis(self) -> Redis:
        if self._redis is None:
            raise RuntimeError("RedisKeyValueStore not initialized. Call initialize() first.")
        return self._redis

    def _make_key(self, key: str) -> str:
        """Add prefix to key."""
        return f"{self.key_prefix}{key}"

    async def ping(self) -> bool:
        if self._redis is None:
            return False
        try:
            return bool(await self._redis.ping())
        except Exception as e:
            logger.debug(f"Redis ping failed: {e}")
            return False

    # ── hash ────────────────────────────────────────────────────────────

    async def hset(self, key: str, field: str, value: str) -> None:
        await self.redis.hset(self._make_key(key), field, value)

    async def hget(self, key: str, field: str) -> str | None:
        return await self.redis.hget(self._make_key(key), field)

    async def hgetall(self, key: str) -> dict[str, str]:
        return await self.redis.hgetall(self._make_key(key))

    async def hdel(self, key: str, field: str) -> int:
        return await self.redis.hdel(self._make_key(key), field)

    async def hlen(self, key: str) -> int:
        return await self.redis.hlen(self._make_key(key))

    async def hkeys(self, key: str) -> list[str]:
        return list(await self.redis.hkeys(self._make_key(key)))

    # ── list ────────────────────────────────────────────────────────────

    async def lpush(self, key: str, value: str) -> int:
        return await self.redis.lpush(self._make_key(key), value)

    async def lpop(self, key: str) -> str | None:
        return await self.redis.lpop(self._make_key(key))

    async def rpop(self, key: str) -> str | None:
        return await self.redis.rpop(self._make_key(key))

    async def lrem(self, key: str, value: str) -> int:
        # count=0 removes every occurrence
        return await self.redis.lrem(self._make_key(key), 0, value)

    async def llen(self, key: str) -> int:
        return await self.redis.llen(self._make_key(key))

    async def lrange_all(self, key: str) -> list[str]:
        return list(await self.redis.lrange(self._make_key(key), 0, -1))

    # ── set ─────────────────────────────────────────────────────────────

    async def sadd(self, key: str, value: str) -> int:
        return await self.redis.sadd(self._make_key(key), value)

    async def srem(self, key: str, value: str) -> int:
        return await self.redis.srem(self._make_key(key), value)

    async def smembers(self, key: str) -> set[str]:
        return set(await self.redis.smembers(self._make_key(key)))

    # ── keyspace ────────────────────────────────────────────────────────

    async def exists(self, key: str) -> bool:
        return bool(await self.redis.exists(self._make_key(key)))

    async def keys_with_prefix(self, prefix: str) -> list[str]:
        full_pattern = escape_glob(self._make_key(prefix)) + "*"
        strip = len(self.key_prefix)

        keys = []
        async for key in self.redis.scan_iter(match=full_pattern):
            keys.append(key[strip:])

        return sorted(keys)
