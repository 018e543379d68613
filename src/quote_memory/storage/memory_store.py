"""
In-process key-value substrate.

Same semantics as the Redis store (empty hashes, lists and sets vanish from
the keyspace) without a server. Used when no Redis URL is configured and by
the test suite.
"""

import asyncio
import logging

from .base import KeyValueStore

logger = logging.getLogger(__name__)


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed substrate. Every call yields to the event loop once."""

    def __init__(self) -> None:
        self._hashes: dict[str, dict[str, str]] = {}
        self._lists: dict[str, list[str]] = {}
        self._sets: dict[str, set[str]] = {}

    async def ping(self) -> bool:
        return True

    def _check_type(self, key: str, kind: dict) -> None:
        for other in (self._hashes, self._lists, self._sets):
            if other is not kind and key in other:
                raise TypeError(f"WRONGTYPE key '{key}' holds a different kind of value")

    # ── hash ────────────────────────────────────────────────────────────

    async def hset(self, key: str, field: str, value: str) -> None:
        await asyncio.sleep(0)
        self._check_type(key, self._hashes)
        self._hashes.setdefault(key, {})[field] = value

    async def hget(self, key: str, field: str) -> str | None:
        await asyncio.sleep(0)
        return self._hashes.get(key, {}).get(field)

    async def hgetall(self, key: str) -> dict[str, str]:
        await asyncio.sleep(0)
        return dict(self._hashes.get(key, {}))

    async def hdel(self, key: str, field: str) -> int:
        await asyncio.sleep(0)
        h = self._hashes.get(key)
        if h is None or field not in h:
            return 0
        del h[field]
        if not h:
            del self._hashes[key]
        return 1

    async def hlen(self, key: str) -> int:
        await asyncio.sleep(0)
        return len(self._hashes.get(key, {}))

    async def hkeys(self, key: str) -> list[str]:
        await asyncio.sleep(0)
        return list(self._hashes.get(key, {}))

    # ── list ────────────────────────────────────────────────────────────

    async def lpush(self, key: str, value: str) -> int:
        await asyncio.sleep(0)
        self._check_type(key, self._lists)
        lst = self._lists.setdefault(key, [])
        lst.insert(0, value)
        return len(lst)

    def _pop(self, key: str, index: int) -> str | None:
        lst = self._lists.get(key)
        if not lst:
            return None
        value = lst.pop(index)
        if not lst:
            del self._lists[key]
        return value

    async def lpop(self, key: str) -> str | None:
        await asyncio.sleep(0)
        return self._pop(key, 0)

    async def rpop(self, key: str) -> str | None:
        await asyncio.sleep(0)
        return self._pop(key, -1)

    async def lrem(self, key: str, value: str) -> int:
        await asyncio.sleep(0)
        lst = self._lists.get(key)
        if not lst:
            return 0
        kept = [v for v in lst if v != value]
        removed = len(lst) - len(kept)
        if kept:
            self._lists[key] = kept
        else:
            del self._lists[key]
        return removed

    async def llen(self, key: str) -> int:
        await asyncio.sleep(0)
        return len(self._lists.get(key, []))

    async def lrange_all(self, key: str) -> list[str]:
        await asyncio.sleep(0)
        return list(self._lists.get(key, []))

    # ── set ─────────────────────────────────────────────────────────────

    async def sadd(self, key: str, value: str) -> int:
        await asyncio.sleep(0)
        self._check_type(key, self._sets)
        s = self._sets.setdefault(key, set())
        if value in s:
            return 0
        s.add(value)
        return 1

    async def srem(self, key: str, value: str) -> int:
        await asyncio.sleep(0)
        s = self._sets.get(key)
        if s is None or value not in s:
            return 0
        s.discard(value)
        if not s:
            del self._sets[key]
        return 1

    async def smembers(self, key: str) -> set[str]:
        await asyncio.sleep(0)
        return set(self._sets.get(key, set()))

    # ── keyspace ────────────────────────────────────────────────────────

    async def exists(self, key: str) -> bool:
        await asyncio.sleep(0)
        return key in self._hashes or key in self._lists or key in self._sets

    async def keys_with_prefix(self, prefix: str) -> list[str]:
        await asyncio.sleep(0)
        keys = [*self._hashes, *self._lists, *self._sets]
        return sorted(k for k in keys if k.startswith(prefix))
