"""Key-value substrates backing the memory tiers."""

from .base import KeyValueStore
from .factory import create_store_instance
from .memory_store import InMemoryKeyValueStore
from .redis_store import RedisKeyValueStore

__all__ = ["InMemoryKeyValueStore", "KeyValueStore", "RedisKeyValueStore", "create_store_instance"]
