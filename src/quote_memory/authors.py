"""
Author resolution.

The chat runtime knows who its users are; the engine only needs to turn a
partial name into candidate authors. ``AuthorResolver`` is that port.
``StaticAuthorResolver`` implements it over a fixed roster.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from .models.message import Author


@runtime_checkable
class AuthorResolver(Protocol):
    """Fuzzy mapping from a display-name query to known authors."""

    async def resolve_authors(self, name_query: str) -> list[Author]:
        """Return matching authors, possibly none."""


class StaticAuthorResolver:
    """Resolver over a known list of authors.

    An exact (case-insensitive) name or id match wins outright. Otherwise
    every author whose name starts with the query is returned, falling back
    to names that merely contain it.
    """

    def __init__(self, authors: Iterable[Author] = ()):
        self._authors: dict[str, Author] = {}
        for author in authors:
            self.add(author)

    def add(self, author: Author) -> None:
        self._authors[author.id] = author

    @property
    def authors(self) -> list[Author]:
        return list(self._authors.values())

    async def resolve_authors(self, name_query: str) -> list[Author]:
        query = name_query.strip().lower().lstrip("@")
        if not query:
            return []

        exact = [a for a in self._authors.values() if a.name.lower() == query or a.id.lower() == query]
        if exact:
            return exact

        prefixed = [a for a in self._authors.values() if a.name.lower().startswith(query)]
        if prefixed:
            return prefixed

        return [a for a in self._authors.values() if query in a.name.lower()]
