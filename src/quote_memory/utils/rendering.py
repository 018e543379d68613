"""Human-readable replies. Variants are picked at random so the bot repeats itself less."""

import random

from ..models.message import Message
from .sampling import random_item

USER_NOT_FOUND_TEMPLATES = (
    "I don't know any {username}",
    "{username} is lame.",
)

NOT_FOUND_TEMPLATES = (
    "I don't know anything about {text}.",
    "Wat.",
)

EMPTY_STORE_REPLY = "I don't remember any quotes..."


def render_message(msg: Message) -> str:
    return f"{msg.author_name}: {msg.text}"


def user_not_found_reply(username: str, rng: random.Random) -> str:
    return random_item(USER_NOT_FOUND_TEMPLATES, rng).format(username=username)


def not_found_reply(text: str, rng: random.Random) -> str:
    return random_item(NOT_FOUND_TEMPLATES, rng).format(text=text)


def empty_store_reply() -> str:
    return EMPTY_STORE_REPLY
