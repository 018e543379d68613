"""Random picking helpers. Callers pass their own ``random.Random``."""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def random_item(items: Sequence[T], rng: random.Random) -> T:
    """Pick one item uniformly. ``items`` must be non-empty."""
    return items[rng.randrange(len(items))]


def random_items(items: Sequence[T], limit: int, rng: random.Random) -> tuple[list[T], list[T]]:
    """Pick up to ``limit`` distinct positions without replacement.

    Returns ``(selected, remaining)``; ``items`` itself is left untouched.
    """
    pool = list(items)
    selected: list[T] = []
    for _ in range(min(limit, len(pool))):
        selected.append(pool.pop(rng.randrange(len(pool))))
    return selected, pool
