"""Data models for the quote memory service."""

from .message import Author, Message, make_message_id
from .results import QuoteResult

__all__ = ["Author", "Message", "QuoteResult", "make_message_id"]
