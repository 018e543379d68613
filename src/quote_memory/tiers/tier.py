"""
The two memory tiers.

- CacheTier: every recently observed message per user. Oldest-first
  eviction; its index records insertion order.
- StoreTier: messages promoted by ``remember``. Random eviction; its index
  records which messages were recently quoted back.

Both tiers keep a UserRegistry so tier-wide queries only visit users that
have data.
"""

import logging
import random

from ..config import QuoteSettings
from ..models.message import Message
from ..storage.base import KeyValueStore
from .collections import BoundedCollection, OrderedIndex, UserRegistry

logger = logging.getLogger(__name__)

STORE_PREFIX = "user:"
STORE_INDEX_PREFIX = "quoted-keys:"
STORE_USERS_KEY = "store-users"
CACHE_PREFIX = "cache-user:"
CACHE_INDEX_PREFIX = "cache-keys:"
CACHE_USERS_KEY = "cache-users"


class MemoryTier:
    """A bounded collection, its ordered index and its user registry."""

    name = "tier"

    def __init__(
        self,
        collection: BoundedCollection,
        index: OrderedIndex,
        registry: UserRegistry,
    ):
        self.collection = collection
        self.index = index
        self.registry = registry

    async def insert(self, msg: Message) -> list[str]:
        """Store ``msg`` under its author. Returns ids evicted to make room."""
        evicted = await self.collection.insert(msg.author_id, msg)
        await self.registry.add(msg.author_id)
        return evicted

    async def remove(self, msg: Message) -> bool:
        """Remove ``msg`` from the collection and the index."""
        return await self.collection.remove(msg.author_id, msg.id)

    async def messages(self, user_id: str) -> list[Message]:
        return await self.collection.all(user_id)

    async def ordered_ids(self, user_id: str) -> list[str]:
        return await self.index.all(user_id)

    async def user_ids(self) -> set[str]:
        return await self.registry.members()

    async def size(self, user_id: str) -> int:
        return await self.collection.size(user_id)


class CacheTier(MemoryTier):
    """Recently observed messages, per user."""

    name = "cache"

    def __init__(self, store: KeyValueStore, settings: QuoteSettings, rng: random.Random | None = None):
        index = OrderedIndex(store, CACHE_INDEX_PREFIX, settings.cache_size)
        super().__init__(
            collection=BoundedCollection(
                store,
                CACHE_PREFIX,
                settings.cache_size,
                policy="oldest",
                rng=rng,
                index=index,
            ),
            index=index,
            registry=UserRegistry(store, CACHE_USERS_KEY),
        )

    async def insert(self, msg: Message) -> list[str]:
        evicted = await super().insert(msg)
        # Every cached id stays indexed: ids trimmed off the index leave the hash too
        for msg_id in await self.index.push(msg.author_id, msg.id):
            if await self.collection.remove(msg.author_id, msg_id):
                evicted.append(msg_id)
        return evicted


class StoreTier(MemoryTier):
    """Remembered messages, per user."""

    name = "store"

    def __init__(self, store: KeyValueStore, settings: QuoteSettings, rng: random.Random | None = None):
        self._store = store
        index = OrderedIndex(store, STORE_INDEX_PREFIX, settings.effective_quoted_index_size)
        super().__init__(
            collection=BoundedCollection(
                store,
                STORE_PREFIX,
                settings.store_size,
                policy="random",
                rng=rng,
                index=index,
            ),
            index=index,
            registry=UserRegistry(store, STORE_USERS_KEY),
        )

    async def record_quoted(self, msg: Message) -> list[str]:
        """Note that ``msg`` was just spoken back. Returns ids dropped from the index."""
        await self.index.remove(msg.author_id, msg.id)
        return await self.index.push(msg.author_id, msg.id)

    async def migrate_registry(self) -> int:
        """Build the store user set from existing store keys if it is missing.

        Upgrades data written before the registry existed. Returns the
        number of users registered.
        """
        if await self.registry.exists():
            return 0

        keys = await self._store.keys_with_prefix(STORE_PREFIX)
        user_ids = [key[len(STORE_PREFIX) :] for key in keys]
        for user_id in user_ids:
            await self.registry.add(user_id)

        if user_ids:
            logger.info(f"Migrated {len(user_ids)} store user(s) into {STORE_USERS_KEY}")
        return len(user_ids)
