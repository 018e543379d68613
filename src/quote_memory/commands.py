"""
Chat command surface.

Parses lines addressed to the bot and dispatches them to the engine:

    remember <user> <text>
    forget <user> <text>
    quote [<user>] [<text>]
    quotemash [<user>] [<text>]
    <text>|<user>mash
    /<regex>/mash

Lines not addressed to the bot are observed into the cache.
"""

import logging
import re

from .models.message import Author, Message
from .models.results import QuoteResult
from .services.memory_engine import MemoryEngine

logger = logging.getLogger(__name__)

HELP = (
    ("remember <user> <text>", "remember most recent message from <user> containing <text>"),
    ("forget <user> <text>", "forget most recent remembered message from <user> containing <text>"),
    ("quote [<user>] [<text>]", "quote a random remembered message that is from <user> and/or contains <text>"),
    (
        "quotemash [<user>] [<text>]",
        "quote some random remembered messages that are from <user> and/or contain <text>",
    ),
    ("<text>|<user>mash", "quote some random remembered messages that are from <user> or contain <text>"),
)

_REMEMBER = re.compile(r"remember (\S+) (.*)", re.IGNORECASE | re.DOTALL)
_FORGET = re.compile(r"forget (\S+) (.*)", re.IGNORECASE | re.DOTALL)
_QUOTEMASH = re.compile(r"quotemash(?: (\S*))?(?: (.*))?", re.IGNORECASE | re.DOTALL)
_QUOTE = re.compile(r"quote(?: (\S*))?(?: (.*))?", re.IGNORECASE | re.DOTALL)
_MASH = re.compile(r"(/.+/|\S+)mash", re.IGNORECASE | re.DOTALL)


class CommandRouter:
    """Routes chat lines to a ``MemoryEngine``."""

    def __init__(self, engine: MemoryEngine, bot_name: str = "brobbot"):
        self.engine = engine
        self.bot_name = bot_name

    def help(self) -> list[str]:
        return [f"{self.bot_name} {usage} - {description}" for usage, description in HELP]

    async def dispatch(self, text: str) -> QuoteResult | None:
        """Run the command in ``text``. Returns None if it is not one of ours."""
        line = text.strip()

        if m := _REMEMBER.fullmatch(line):
            return await self.engine.remember(m.group(1), m.group(2))
        if m := _FORGET.fullmatch(line):
            return await self.engine.forget(m.group(1), m.group(2))
        if m := _QUOTEMASH.fullmatch(line):
            return await self.engine.quotemash(m.group(1) or "", m.group(2) or "")
        if m := _QUOTE.fullmatch(line):
            return await self.engine.quote(m.group(1) or "", m.group(2) or "")
        if m := _MASH.fullmatch(line):
            return await self.engine.quotemash(m.group(1), "")

        logger.debug(f"Not a quote command: {line[:40]!r}")
        return None

    async def handle(self, text: str, author: Author, addressed_to_engine: bool) -> QuoteResult | None:
        """Entry point for every chat line: dispatch commands, observe the rest."""
        if addressed_to_engine:
            return await self.dispatch(text)

        await self.engine.observe(Message.create(text, author))
        return None
