"""
Query execution across a tier.

A query resolves its author filter, picks the users to scan, fetches every
candidate user's messages concurrently and applies the match predicate.

Fan-out is "gather all, then proceed": one user's fetch failing only means
that user contributes nothing. Results are merged in candidate order
(resolved authors, or registry users sorted by id when no author resolved)
so the outcome does not depend on which fetch finished first.
"""

import asyncio
import logging

from ..authors import AuthorResolver
from ..models.message import Author, Message
from ..tiers.tier import MemoryTier
from ..utils.errors import NoMatchesError, UserNotFoundError
from ..utils.matching import MatchQuery

logger = logging.getLogger(__name__)


class Finder:
    """Runs match queries against a tier."""

    def __init__(self, resolver: AuthorResolver, substring_match: bool = True):
        self.resolver = resolver
        self.substring_match = substring_match

    async def resolve(self, author_filter: str) -> list[Author]:
        if not author_filter.strip():
            return []
        return await self.resolver.resolve_authors(author_filter.strip())

    async def find_first(
        self,
        tier: MemoryTier,
        author_filter: str,
        text_filter: str,
        require_author: bool = True,
        authors: list[Author] | None = None,
    ) -> Message:
        """
        Return one matching message, biased by the tier's ordered index.

        For each candidate user the index is walked newest-first and the
        first match wins; users without index entries are scanned unordered.

        Raises:
            UserNotFoundError: author required but nothing resolved
            NoMatchesError: no candidate user has a matching message
        """
        matches = await self._search(tier, author_filter, text_filter, require_author, authors, first=True)
        return matches[0]

    async def find_all(
        self,
        tier: MemoryTier,
        author_filter: str,
        text_filter: str,
        require_author: bool = False,
        authors: list[Author] | None = None,
    ) -> list[Message]:
        """Return every matching message across candidate users.

        Raises the same errors as ``find_first``.
        """
        return await self._search(tier, author_filter, text_filter, require_author, authors, first=False)

    async def _search(
        self,
        tier: MemoryTier,
        author_filter: str,
        text_filter: str,
        require_author: bool,
        authors: list[Author] | None,
        first: bool,
    ) -> list[Message]:
        if authors is None:
            authors = await self.resolve(author_filter)

        if require_author and not authors:
            raise UserNotFoundError(author_filter)

        query = MatchQuery.build(
            author_filter,
            text_filter,
            author_ids=[a.id for a in authors],
            substring_match=self.substring_match,
        )
        user_ids = await self._candidate_users(tier, authors, require_author)

        results = await asyncio.gather(
            *(self._search_user(tier, user_id, query, first) for user_id in user_ids),
            return_exceptions=True,
        )

        matches: list[Message] = []
        for user_id, result in zip(user_ids, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning(f"Treating {tier.name} data for user {user_id} as empty: {result}")
                continue
            matches.extend(result)

        logger.debug(
            f"{tier.name} query author={author_filter!r} text={text_filter!r}: "
            f"{len(matches)} match(es) across {len(user_ids)} user(s)"
        )

        if not matches:
            raise NoMatchesError(text_filter, tier=tier.name)
        return matches

    async def _candidate_users(self, tier: MemoryTier, authors: list[Author], require_author: bool) -> list[str]:
        user_ids = list(dict.fromkeys(a.id for a in authors))
        # A resolved author filter rejects every other user's messages anyway
        if require_author or user_ids:
            return user_ids

        return sorted(await tier.user_ids())

    async def _search_user(self, tier: MemoryTier, user_id: str, query: MatchQuery, first: bool) -> list[Message]:
        if not first:
            return [m for m in await tier.messages(user_id) if query.matches(m)]

        messages, ordered_ids = await asyncio.gather(
            tier.messages(user_id), tier.ordered_ids(user_id), return_exceptions=True
        )
        if isinstance(messages, BaseException):
            raise messages
        if isinstance(ordered_ids, BaseException):
            logger.warning(f"Scanning {tier.name} data for user {user_id} unordered, index read failed: {ordered_ids}")
            ordered_ids = []

        by_id = {m.id: m for m in messages}

        for msg_id in ordered_ids:
            msg = by_id.get(msg_id)
            if msg is not None and query.matches(msg):
                return [msg]

        for msg in messages:
            if query.matches(msg):
                return [msg]
        return []
