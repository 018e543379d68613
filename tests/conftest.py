import os
import random
import sys

import pytest

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))

from quote_memory.authors import StaticAuthorResolver  # noqa: E402
from quote_memory.config import QuoteSettings  # noqa: E402
from quote_memory.models.message import Author  # noqa: E402
from quote_memory.services.memory_engine import MemoryEngine  # noqa: E402
from quote_memory.storage.memory_store import InMemoryKeyValueStore  # noqa: E402

ALICE = Author(id="u1", name="alice")
BOB = Author(id="u2", name="bob")
ALAN = Author(id="u3", name="alan")


@pytest.fixture
def kv_store():
    """Fresh in-process substrate."""
    return InMemoryKeyValueStore()


@pytest.fixture
def resolver():
    return StaticAuthorResolver([ALICE, BOB, ALAN])


@pytest.fixture
def quote_settings():
    return QuoteSettings(cache_size=25, store_size=100, init_timeout_ms=1000)


@pytest.fixture
def engine(kv_store, resolver, quote_settings):
    """Engine with a seeded RNG so random picks are reproducible."""
    return MemoryEngine(kv_store, resolver, settings=quote_settings, rng=random.Random(1234))
