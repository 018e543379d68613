"""
Per-user bounded structures on top of the key-value substrate.

- BoundedCollection: message id -> Message hash, capped per user
- OrderedIndex: newest-first list of message ids, capped per user
- UserRegistry: set of user ids that have data in a tier

Capacity is enforced before an insert completes: make room for one entry,
then write. Two concurrent inserts for the same user can both see room and
both write, so a user may transiently hold ``capacity + writers - 1``
entries. The next insert for that user trims back down.
"""

import logging
import random

from pydantic import ValidationError

from ..models.message import Message
from ..models.validators import EvictionPolicy
from ..storage.base import KeyValueStore

logger = logging.getLogger(__name__)


class OrderedIndex:
    """Newest-first list of message ids per user. Trims from the tail."""

    def __init__(self, store: KeyValueStore, key_prefix: str, capacity: int):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._store = store
        self._key_prefix = key_prefix
        self.capacity = capacity

    def key(self, user_id: str) -> str:
        return f"{self._key_prefix}{user_id}"

    async def push(self, user_id: str, msg_id: str) -> list[str]:
        """Prepend ``msg_id``; returns ids dropped off the tail to stay in capacity."""
        key = self.key(user_id)
        length = await self._store.lpush(key, msg_id)

        dropped = []
        while length > self.capacity:
            oldest = await self._store.rpop(key)
            if oldest is None:
                break
            dropped.append(oldest)
            length -= 1

        if dropped:
            logger.debug(f"Index {key} dropped {len(dropped)} oldest id(s)")
        return dropped

    async def pop_oldest(self, user_id: str) -> str | None:
        return await self._store.rpop(self.key(user_id))

    async def remove(self, user_id: str, msg_id: str) -> int:
        return await self._store.lrem(self.key(user_id), msg_id)

    async def all(self, user_id: str) -> list[str]:
        return await self._store.lrange_all(self.key(user_id))

    async def size(self, user_id: str) -> int:
        return await self._store.llen(self.key(user_id))


class UserRegistry:
    """Ids of users who have (or recently had) data in a tier.

    Entries are added on insert and never pruned on removal, so the set may
    be a stale superset of the users with data but is never missing one.
    """

    def __init__(self, store: KeyValueStore, key: str):
        self._store = store
        self.key = key

    async def add(self, user_id: str) -> None:
        await self._store.sadd(self.key, user_id)

    async def members(self) -> set[str]:
        return await self._store.smembers(self.key)

    async def exists(self) -> bool:
        return await self._store.exists(self.key)


class BoundedCollection:
    """
    Per-user message hash with a capacity and an eviction policy.

    ``random`` drops a uniformly chosen entry. ``oldest`` drops the tail of
    the paired index and degrades to random when there is no index or the
    index has nothing usable. When an index is paired, entries removed or
    evicted from the collection are also removed from it.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key_prefix: str,
        capacity: int,
        policy: EvictionPolicy = "random",
        rng: random.Random | None = None,
        index: OrderedIndex | None = None,
    ):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._store = store
        self._key_prefix = key_prefix
        self.capacity = capacity
        self.policy = policy
        self.index = index
        self._rng = rng or random.Random()

    def key(self, user_id: str) -> str:
        return f"{self._key_prefix}{user_id}"

    async def size(self, user_id: str) -> int:
        return await self._store.hlen(self.key(user_id))

    async def get(self, user_id: str, msg_id: str) -> Message | None:
        raw = await self._store.hget(self.key(user_id), msg_id)
        if raw is None:
            return None
        return self._decode(user_id, msg_id, raw)

    async def all(self, user_id: str) -> list[Message]:
        """Every decodable message for the user, in no particular order."""
        raw = await self._store.hgetall(self.key(user_id))
        messages = []
        for msg_id, value in raw.items():
            msg = self._decode(user_id, msg_id, value)
            if msg is not None:
                messages.append(msg)
        return messages

    async def insert(self, user_id: str, msg: Message) -> list[str]:
        """Make room for one entry, then store ``msg``. Returns evicted ids."""
        evicted = await self.ensure_room(user_id)
        await self._store.hset(self.key(user_id), msg.id, msg.model_dump_json())
        return evicted

    async def remove(self, user_id: str, msg_id: str) -> bool:
        removed = await self._store.hdel(self.key(user_id), msg_id)
        if self.index is not None:
            await self.index.remove(user_id, msg_id)
        return removed > 0

    async def ensure_room(self, user_id: str) -> list[str]:
        """Evict until one more entry fits."""
        excess = await self.size(user_id) - (self.capacity - 1)
        evicted = []
        for _ in range(max(excess, 0)):
            msg_id = await self._evict_one(user_id)
            if msg_id is None:
                break
            evicted.append(msg_id)

        if evicted:
            logger.debug(f"Evicted {evicted} from {self.key(user_id)}")
        return evicted

    async def _evict_one(self, user_id: str) -> str | None:
        if self.policy == "oldest" and self.index is not None:
            msg_id = await self._evict_oldest(user_id)
            if msg_id is not None:
                return msg_id
        return await self._evict_random(user_id)

    async def _evict_oldest(self, user_id: str) -> str | None:
        key = self.key(user_id)
        while True:
            msg_id = await self.index.pop_oldest(user_id)
            if msg_id is None:
                return None
            # Index entries can outlive their hash field (e.g. a concurrent remove)
            if await self._store.hdel(key, msg_id):
                return msg_id

    async def _evict_random(self, user_id: str) -> str | None:
        keys = await self._store.hkeys(self.key(user_id))
        if not keys:
            return None
        msg_id = self._rng.choice(sorted(keys))
        await self.remove(user_id, msg_id)
        return msg_id

    def _decode(self, user_id: str, msg_id: str, raw: str) -> Message | None:
        try:
            return Message.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Skipping undecodable entry {msg_id} in {self.key(user_id)}: {e}")
            return None
