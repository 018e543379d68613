"""Quote memory: cache what people say, remember some of it, quote it back."""

from .authors import AuthorResolver, StaticAuthorResolver
from .commands import CommandRouter
from .config import QuoteSettings, RedisSettings, Settings
from .models import Author, Message, QuoteResult
from .services.finder import Finder
from .services.memory_engine import MemoryEngine

__version__ = "0.1.0"

__all__ = [
    "Author",
    "AuthorResolver",
    "CommandRouter",
    "Finder",
    "MemoryEngine",
    "Message",
    "QuoteResult",
    "QuoteSettings",
    "RedisSettings",
    "Settings",
    "StaticAuthorResolver",
]
