"""
Key-value substrate interface.

The tiers only talk to this contract: per logical key, a hash map, a list
or a set, plus prefix listing of keys. Keys passed in are logical keys;
implementations are free to namespace them.
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract async key-value substrate with hash, list and set primitives."""

    async def initialize(self) -> None:
        """Open connections. Idempotent."""

    async def close(self) -> None:
        """Release connections."""

    @abstractmethod
    async def ping(self) -> bool:
        """Return True once the substrate is ready to serve data."""

    # ── hash ────────────────────────────────────────────────────────────

    @abstractmethod
    async def hset(self, key: str, field: str, value: str) -> None: ...

    @abstractmethod
    async def hget(self, key: str, field: str) -> str | None: ...

    @abstractmethod
    async def hgetall(self, key: str) -> dict[str, str]: ...

    @abstractmethod
    async def hdel(self, key: str, field: str) -> int:
        """Delete a field. Returns the number of fields removed (0 or 1)."""

    @abstractmethod
    async def hlen(self, key: str) -> int: ...

    @abstractmethod
    async def hkeys(self, key: str) -> list[str]: ...

    # ── list ────────────────────────────────────────────────────────────

    @abstractmethod
    async def lpush(self, key: str, value: str) -> int:
        """Prepend ``value``. Returns the new length."""

    @abstractmethod
    async def lpop(self, key: str) -> str | None: ...

    @abstractmethod
    async def rpop(self, key: str) -> str | None: ...

    @abstractmethod
    async def lrem(self, key: str, value: str) -> int:
        """Remove every occurrence of ``value``. Returns how many were removed."""

    @abstractmethod
    async def llen(self, key: str) -> int: ...

    @abstractmethod
    async def lrange_all(self, key: str) -> list[str]:
        """Whole list, head first."""

    # ── set ─────────────────────────────────────────────────────────────

    @abstractmethod
    async def sadd(self, key: str, value: str) -> int: ...

    @abstractmethod
    async def srem(self, key: str, value: str) -> int: ...

    @abstractmethod
    async def smembers(self, key: str) -> set[str]: ...

    # ── keyspace ────────────────────────────────────────────────────────

    @abstractmethod
    async def exists(self, key: str) -> bool: ...

    @abstractmethod
    async def keys_with_prefix(self, prefix: str) -> list[str]:
        """Logical keys starting with ``prefix``."""
