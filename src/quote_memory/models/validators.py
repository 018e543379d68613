"""Shared Pydantic types for reuse across models."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BeforeValidator, Field


def _coerce_id(v: object) -> object:
    """Chat runtimes hand out numeric ids; the substrate only stores strings."""
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    return v


AuthorId = Annotated[str, BeforeValidator(_coerce_id), Field(min_length=1)]
"""Non-empty author identifier; ints are accepted and stringified."""

MessageId = Annotated[str, Field(min_length=1)]
"""Non-empty message hash identifier."""

EvictionPolicy = Literal["random", "oldest"]
"""How a bounded collection makes room for a new entry."""
