"""
Memory Engine - the quote memory facade.

Composes the cache tier, the store tier and the finder into the operations
the chat layer calls:

- observe:   cache every message heard (not commands addressed to us)
- remember:  promote the most recent matching cached message to the store
- forget:    drop a stored message, preferring recently quoted ones
- quote:     speak back one random stored match
- quotemash: speak back several distinct random stored matches

Lookup failures never escape; every command returns a ``QuoteResult``
with a canned reply.
"""

import asyncio
import logging
import random

from ..authors import AuthorResolver
from ..config import QuoteSettings
from ..models.message import Author, Message
from ..models.results import QuoteResult
from ..storage.base import KeyValueStore
from ..tiers.tier import CacheTier, StoreTier
from ..utils.errors import NoMatchesError, UserNotFoundError
from ..utils.rendering import empty_store_reply, not_found_reply, render_message, user_not_found_reply
from ..utils.sampling import random_item, random_items
from .finder import Finder

logger = logging.getLogger(__name__)

_READY_POLL_SECONDS = 0.1


class MemoryEngine:
    """
    Dual-tier quote memory.

    The substrate and author resolver are injected; so is the RNG, which
    drives store eviction and every random pick.
    """

    def __init__(
        self,
        store: KeyValueStore,
        resolver: AuthorResolver,
        settings: QuoteSettings | None = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings or QuoteSettings()
        self.store = store
        self._rng = rng or random.Random()
        self.cache = CacheTier(store, self.settings, rng=self._rng)
        self.memory = StoreTier(store, self.settings, rng=self._rng)
        self.finder = Finder(resolver, substring_match=self.settings.substring_match)

    async def initialize(self) -> None:
        """Wait (bounded by ``init_timeout_ms``) for the substrate, then migrate.

        Raises:
            TimeoutError: the substrate did not become ready in time
        """
        timeout_ms = self.settings.init_timeout_ms
        if timeout_ms == 0:
            await self._connect_once()
        else:
            try:
                await asyncio.wait_for(self._wait_ready(), timeout=timeout_ms / 1000)
            except TimeoutError:
                logger.error(f"Substrate not ready after {timeout_ms}ms")
                raise

        await self.memory.migrate_registry()
        logger.info(
            f"MemoryEngine ready (cache_size={self.settings.cache_size}, store_size={self.settings.store_size})"
        )

    async def _connect_once(self) -> None:
        await self.store.initialize()
        if not await self.store.ping():
            raise ConnectionError("Substrate did not answer ping")

    async def _wait_ready(self) -> None:
        while True:
            try:
                await self._connect_once()
                return
            except Exception as e:
                logger.debug(f"Substrate not ready yet: {e}")
                await asyncio.sleep(_READY_POLL_SECONDS)

    async def close(self) -> None:
        await self.store.close()

    # ── passive ─────────────────────────────────────────────────────────

    async def observe(self, message: Message, addressed_to_engine: bool = False) -> list[str]:
        """Cache a message heard in chat. Returns ids evicted from the author's cache."""
        if addressed_to_engine:
            return []
        return await self.cache.insert(message)

    async def observe_text(self, text: str, author: Author, addressed_to_engine: bool = False) -> Message:
        """Build a message for ``author`` and observe it."""
        message = Message.create(text, author)
        await self.observe(message, addressed_to_engine=addressed_to_engine)
        return message

    # ── commands ────────────────────────────────────────────────────────

    async def remember(self, author_filter: str, text_filter: str) -> QuoteResult:
        try:
            match = await self.finder.find_first(self.cache, author_filter, text_filter, require_author=True)
        except UserNotFoundError as e:
            return self._user_not_found("remember", e)
        except NoMatchesError as e:
            return self._no_matches("remember", e)

        await self.memory.insert(match)
        await self.cache.remove(match)
        logger.info(f"Remembered {match.id} for author {match.author_id}")

        return QuoteResult(
            operation="remember",
            replies=[f"remembering {render_message(match)}"],
            messages=[match],
        )

    async def forget(self, author_filter: str, text_filter: str) -> QuoteResult:
        try:
            match = await self.finder.find_first(self.memory, author_filter, text_filter, require_author=True)
        except UserNotFoundError as e:
            return self._user_not_found("forget", e)
        except NoMatchesError as e:
            return self._no_matches("forget", e)

        await self.memory.remove(match)
        logger.info(f"Forgot {match.id} for author {match.author_id}")

        return QuoteResult(
            operation="forget",
            replies=[f"forgot {render_message(match)}"],
            messages=[match],
        )

    async def quote(self, author_filter: str = "", text_filter: str = "") -> QuoteResult:
        author_filter, text_filter, authors = await self._optional_author(author_filter, text_filter)
        try:
            matches = await self.finder.find_all(self.memory, author_filter, text_filter, authors=authors)
        except NoMatchesError as e:
            return self._no_stored_matches("quote", e)

        message = random_item(matches, self._rng)
        await self.memory.record_quoted(message)

        return QuoteResult(operation="quote", replies=[render_message(message)], messages=[message])

    async def quotemash(self, author_filter: str = "", text_filter: str = "", limit: int | None = None) -> QuoteResult:
        limit = limit if limit is not None else self.settings.mash_limit
        author_filter, text_filter, authors = await self._optional_author(author_filter, text_filter)
        try:
            matches = await self.finder.find_all(self.memory, author_filter, text_filter, authors=authors)
        except NoMatchesError as e:
            return self._no_stored_matches("quotemash", e)

        selected, _ = random_items(matches, limit, self._rng)
        for message in selected:
            await self.memory.record_quoted(message)

        return QuoteResult(
            operation="quotemash",
            replies=[render_message(m) for m in selected],
            messages=selected,
        )

    # ── helpers ─────────────────────────────────────────────────────────

    async def _optional_author(self, author_filter: str, text_filter: str) -> tuple[str, str, list[Author]]:
        """Resolve an optional author; an unknown one is folded back into the text."""
        author_filter = author_filter.strip()
        text_filter = text_filter.strip()
        if not author_filter:
            return "", text_filter, []

        authors = await self.finder.resolve(author_filter)
        if authors:
            return author_filter, text_filter, authors

        folded = f"{author_filter} {text_filter}" if text_filter else author_filter
        return "", folded, []

    def _user_not_found(self, operation: str, error: UserNotFoundError) -> QuoteResult:
        return QuoteResult(
            operation=operation,
            status="user_not_found",
            replies=[user_not_found_reply(error.username, self._rng)],
        )

    def _no_matches(self, operation: str, error: NoMatchesError) -> QuoteResult:
        return QuoteResult(
            operation=operation,
            status="no_matches",
            replies=[not_found_reply(error.text, self._rng)],
        )

    def _no_stored_matches(self, operation: str, error: NoMatchesError) -> QuoteResult:
        if not error.text:
            return QuoteResult(operation=operation, status="empty_store", replies=[empty_store_reply()])
        return self._no_matches(operation, error)
