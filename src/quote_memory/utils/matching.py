"""
Match predicate shared by every lookup.

A query is an author filter plus a text filter. The text filter is one of:

- a regex literal ``/pattern/`` searched case-insensitively
- plain text, compared on stems (all query stems must be present)
- for short or symbolic fragments, a case-insensitive substring

Malformed regex literals fail the match instead of raising.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Collection
from dataclasses import dataclass, field

from ..models.message import Message
from .errors import MalformedRegexError
from .stemming import unique_stems

logger = logging.getLogger(__name__)

_REGEX_LITERAL = re.compile(r"^/(.*)/$", re.DOTALL)
_WORD_TOKEN = re.compile(r"^\w{2,}$")


def regex_literal(text: str) -> str | None:
    """Return the pattern inside ``/.../`` or None if ``text`` is not a literal."""
    if len(text) < 2:
        return None
    m = _REGEX_LITERAL.match(text)
    return m.group(1) if m else None


def compile_regex(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise MalformedRegexError(pattern, str(e)) from e


def is_word_token(text: str) -> bool:
    return bool(_WORD_TOKEN.match(text))


@dataclass(frozen=True)
class MatchQuery:
    """A parsed query, built once and applied to many candidates.

    ``author_ids`` is the set the author filter resolved to; it is ignored
    when ``author_filter`` is empty.
    """

    author_filter: str = ""
    text_filter: str = ""
    author_ids: frozenset[str] = field(default_factory=frozenset)
    substring_match: bool = True
    stems: frozenset[str] = field(init=False)
    regex: re.Pattern[str] | None = field(init=False)
    malformed: bool = field(init=False)

    def __post_init__(self) -> None:
        regex = None
        malformed = False
        pattern = regex_literal(self.text_filter)
        if pattern is not None:
            try:
                regex = compile_regex(pattern)
            except MalformedRegexError as e:
                logger.debug(f"Query fails closed: {e}")
                malformed = True
        object.__setattr__(self, "regex", regex)
        object.__setattr__(self, "malformed", malformed)
        object.__setattr__(self, "stems", unique_stems(self.text_filter) if pattern is None else frozenset())

    @classmethod
    def build(
        cls,
        author_filter: str,
        text_filter: str,
        author_ids: Collection[str] = (),
        substring_match: bool = True,
    ) -> "MatchQuery":
        return cls(
            author_filter=author_filter.strip(),
            text_filter=text_filter.strip(),
            author_ids=frozenset(author_ids),
            substring_match=substring_match,
        )

    @property
    def is_empty(self) -> bool:
        return not self.author_filter and not self.text_filter

    def user_matches(self, msg: Message) -> bool:
        if not self.author_filter:
            return True
        return msg.author_id in self.author_ids

    def text_matches(self, msg: Message) -> bool:
        if self.malformed:
            return False
        if self.regex is not None:
            return self.regex.search(msg.text) is not None
        if self.stems and self.stems <= msg.stems:
            return True
        if self.substring_match and not is_word_token(self.text_filter):
            return self.text_filter.lower() in msg.text.lower()
        return False

    def matches(self, msg: Message) -> bool:
        if self.is_empty:
            return True
        if not self.text_filter:
            return self.user_matches(msg)
        return self.user_matches(msg) and self.text_matches(msg)


def matches(
    msg: Message,
    author_filter: str = "",
    text_filter: str = "",
    author_ids: Collection[str] = (),
    substring_match: bool = True,
) -> bool:
    """One-shot form of ``MatchQuery.matches``."""
    return MatchQuery.build(author_filter, text_filter, author_ids, substring_match).matches(msg)
