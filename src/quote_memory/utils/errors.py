"""Lookup failures raised by the finder and translated by the engine."""


class QuoteMemoryError(Exception):
    """Base class for recoverable quote memory failures."""


class UserNotFoundError(QuoteMemoryError):
    """Raised when an author filter is required but resolves to nobody."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"No author matches '{username}'")


class NoMatchesError(QuoteMemoryError):
    """Raised when a resolved query finds no message in the tier."""

    def __init__(self, text: str, tier: str | None = None):
        self.text = text
        self.tier = tier

        message = f"No messages match '{text}'"
        if tier:
            message += f" in {tier}"

        super().__init__(message)


class MalformedRegexError(QuoteMemoryError):
    """Raised when a /regex/ query does not compile.

    The match predicate catches this and fails the match; it never reaches
    the caller of a lookup.
    """

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid pattern /{pattern}/: {reason}")
