"""Service-layer result model.

Every engine operation returns a ``QuoteResult`` instead of raising; the
chat layer sends ``replies`` and may inspect ``status`` and ``messages``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .message import Message

QuoteStatus = Literal["ok", "user_not_found", "no_matches", "empty_store"]


class QuoteResult(BaseModel):
    """Outcome of a remember / forget / quote / quotemash call."""

    operation: str
    status: QuoteStatus = "ok"
    replies: list[str] = Field(default_factory=list)
    messages: list[Message] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status == "ok"
