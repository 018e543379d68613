"""Query and command services."""

from .finder import Finder
from .memory_engine import MemoryEngine

__all__ = ["Finder", "MemoryEngine"]
