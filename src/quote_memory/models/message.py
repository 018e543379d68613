"""Chat message and author models.

A ``Message`` is immutable once created. Its stem set is computed on first
use and memoized on the instance; the memo is never serialized and does not
take part in equality.
"""

import hashlib
import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from ..utils.stemming import unique_stems
from .validators import AuthorId, MessageId


def make_message_id(text: str, author_id: str, observed_at_ns: int) -> str:
    """Content hash salted with the observation time.

    The salt keeps repeated identical utterances in separate slots.
    """
    payload = f"{author_id}\x00{observed_at_ns}\x00{text}"
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


class Author(BaseModel):
    """A known chat author, as returned by author resolution."""

    model_config = ConfigDict(frozen=True)

    id: AuthorId
    name: str


class Message(BaseModel):
    """Something an author said."""

    model_config = ConfigDict(frozen=True)

    id: MessageId
    text: str
    author_id: AuthorId
    author_name: str
    created_at: float = Field(default_factory=time.time)

    _stems: frozenset[str] | None = PrivateAttr(default=None)

    @classmethod
    def create(cls, text: str, author: Author, observed_at_ns: int | None = None) -> "Message":
        """Build a message with a fresh salted id."""
        ns = observed_at_ns if observed_at_ns is not None else time.time_ns()
        return cls(
            id=make_message_id(text, author.id, ns),
            text=text,
            author_id=author.id,
            author_name=author.name,
            created_at=ns / 1_000_000_000,
        )

    @property
    def stems(self) -> frozenset[str]:
        if self._stems is None:
            self._stems = unique_stems(self.text)
        return self._stems

    def _identity(self) -> tuple[Any, ...]:
        return (self.id, self.text, self.author_id, self.author_name, self.created_at)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Message):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self.id)
