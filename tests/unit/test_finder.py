"""Tests for Finder fan-out queries."""

from unittest.mock import AsyncMock

import pytest

from quote_memory.authors import StaticAuthorResolver
from quote_memory.config import QuoteSettings
from quote_memory.models.message import Author, Message
from quote_memory.services.finder import Finder
from quote_memory.storage.memory_store import InMemoryKeyValueStore
from quote_memory.tiers.tier import CacheTier, StoreTier
from quote_memory.utils.errors import NoMatchesError, UserNotFoundError

ALICE = Author(id="u1", name="alice")
BOB = Author(id="u2", name="bob")
CAROL = Author(id="u4", name="carol")


def _msg(text: str, author: Author, ns: int) -> Message:
    return Message.create(text, author, observed_at_ns=ns)


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def finder():
    return Finder(StaticAuthorResolver([ALICE, BOB, CAROL]))


class TestFindFirst:
    @pytest.mark.asyncio
    async def test_unknown_author_raises_user_not_found(self, store, finder):
        tier = CacheTier(store, QuoteSettings())
        with pytest.raises(UserNotFoundError) as exc:
            await finder.find_first(tier, "zed", "hi", require_author=True)
        assert exc.value.username == "zed"

    @pytest.mark.asyncio
    async def test_no_match_raises(self, store, finder):
        tier = CacheTier(store, QuoteSettings())
        await tier.insert(_msg("cats are fine", ALICE, 1))
        with pytest.raises(NoMatchesError):
            await finder.find_first(tier, "alice", "dog", require_author=True)

    @pytest.mark.asyncio
    async def test_prefers_most_recent_in_cache(self, store, finder):
        tier = CacheTier(store, QuoteSettings())
        old = _msg("my dog is old", ALICE, 1)
        new = _msg("my dog is new", ALICE, 2)
        await tier.insert(old)
        await tier.insert(new)

        assert await finder.find_first(tier, "alice", "dog") == new

    @pytest.mark.asyncio
    async def test_only_scans_required_author(self, store, finder):
        tier = CacheTier(store, QuoteSettings())
        await tier.insert(_msg("dog days", BOB, 1))
        with pytest.raises(NoMatchesError):
            await finder.find_first(tier, "alice", "dog", require_author=True)

    @pytest.mark.asyncio
    async def test_falls_back_to_unordered_scan(self, store, finder):
        tier = StoreTier(store, QuoteSettings())
        msg = _msg("never quoted dog", ALICE, 1)
        await tier.insert(msg)
        assert await tier.ordered_ids("u1") == []

        assert await finder.find_first(tier, "alice", "dog") == msg

    @pytest.mark.asyncio
    async def test_store_prefers_recently_quoted(self, store, finder):
        tier = StoreTier(store, QuoteSettings())
        a = _msg("dog one", ALICE, 1)
        b = _msg("dog two", ALICE, 2)
        await tier.insert(a)
        await tier.insert(b)
        await tier.record_quoted(b)
        await tier.record_quoted(a)

        assert await finder.find_first(tier, "alice", "dog") == a

    @pytest.mark.asyncio
    async def test_index_read_failure_scans_unordered(self, store, finder):
        tier = CacheTier(store, QuoteSettings())
        msg = _msg("hello dog", ALICE, 1)
        await tier.insert(msg)
        tier.ordered_ids = AsyncMock(side_effect=ConnectionError("index down"))

        assert await finder.find_first(tier, "alice", "dog") == msg

    @pytest.mark.asyncio
    async def test_message_read_failure_drops_user(self, store, finder):
        tier = CacheTier(store, QuoteSettings())
        await tier.insert(_msg("hello dog", ALICE, 1))
        tier.messages = AsyncMock(side_effect=ConnectionError("hash down"))

        with pytest.raises(NoMatchesError):
            await finder.find_first(tier, "alice", "dog")


class TestFindAll:
    @pytest.mark.asyncio
    async def test_searches_everyone_without_author(self, store, finder):
        tier = StoreTier(store, QuoteSettings())
        a = _msg("dog for alice", ALICE, 1)
        b = _msg("dog for bob", BOB, 2)
        await tier.insert(a)
        await tier.insert(b)
        await tier.insert(_msg("cat for carol", CAROL, 3))

        found = await finder.find_all(tier, "", "dog")
        assert found == [a, b]

    @pytest.mark.asyncio
    async def test_author_filter_narrows_results(self, store, finder):
        tier = StoreTier(store, QuoteSettings())
        await tier.insert(_msg("dog for alice", ALICE, 1))
        b = _msg("dog for bob", BOB, 2)
        await tier.insert(b)

        assert await finder.find_all(tier, "bob", "dog") == [b]

    @pytest.mark.asyncio
    async def test_resolved_author_skips_other_registry_users(self, store, finder):
        tier = StoreTier(store, QuoteSettings())
        await tier.insert(_msg("dog for alice", ALICE, 1))
        b = _msg("dog for bob", BOB, 2)
        await tier.insert(b)
        await tier.insert(_msg("dog for carol", CAROL, 3))

        real_messages = tier.messages
        tier.messages = AsyncMock(side_effect=real_messages)

        assert await finder.find_all(tier, "bob", "dog") == [b]
        assert [c.args[0] for c in tier.messages.await_args_list] == ["u2"]

    @pytest.mark.asyncio
    async def test_empty_query_returns_everything(self, store, finder):
        tier = StoreTier(store, QuoteSettings())
        for i, author in enumerate((ALICE, BOB, CAROL)):
            await tier.insert(_msg(f"quote {i}", author, i))
        assert len(await finder.find_all(tier, "", "")) == 3

    @pytest.mark.asyncio
    async def test_empty_tier_raises_no_matches(self, store, finder):
        tier = StoreTier(store, QuoteSettings())
        with pytest.raises(NoMatchesError) as exc:
            await finder.find_all(tier, "", "")
        assert exc.value.text == ""

    @pytest.mark.asyncio
    async def test_failed_user_fetch_is_treated_as_empty(self, store, finder):
        tier = StoreTier(store, QuoteSettings())
        a = _msg("dog for alice", ALICE, 1)
        await tier.insert(a)
        await tier.insert(_msg("dog for bob", BOB, 2))

        real_messages = tier.messages

        async def flaky(user_id):
            if user_id == "u2":
                raise ConnectionError("substrate hiccup")
            return await real_messages(user_id)

        tier.messages = AsyncMock(side_effect=flaky)

        assert await finder.find_all(tier, "", "dog") == [a]

    @pytest.mark.asyncio
    async def test_stale_registry_entry_contributes_nothing(self, store, finder):
        tier = StoreTier(store, QuoteSettings())
        msg = _msg("dog", ALICE, 1)
        await tier.insert(msg)
        await tier.registry.add("ghost")

        assert await finder.find_all(tier, "", "dog") == [msg]
