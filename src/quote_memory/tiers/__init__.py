"""Bounded per-user memory tiers."""

from .collections import BoundedCollection, OrderedIndex, UserRegistry
from .tier import CacheTier, MemoryTier, StoreTier

__all__ = ["BoundedCollection", "CacheTier", "MemoryTier", "OrderedIndex", "StoreTier", "UserRegistry"]
