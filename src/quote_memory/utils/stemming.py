"""
Tokenizing and stemming for fuzzy text comparison.

Text is split on non-alphanumeric runs, lowercased, stripped of stop words
and reduced with the Porter stemmer. The resulting set of unique stems is
what queries and messages are compared on.
"""

from __future__ import annotations

import re

from nltk.stem.porter import PorterStemmer

# Stateless after construction; shared for the process lifetime.
_STEMMER = PorterStemmer()

_STOP_WORDS = frozenset(
    {
        "a",
        "about",
        "after",
        "all",
        "also",
        "am",
        "an",
        "and",
        "any",
        "are",
        "as",
        "at",
        "be",
        "been",
        "being",
        "but",
        "by",
        "can",
        "could",
        "did",
        "do",
        "does",
        "each",
        "for",
        "from",
        "had",
        "has",
        "have",
        "he",
        "her",
        "his",
        "i",
        "if",
        "in",
        "into",
        "is",
        "it",
        "its",
        "me",
        "my",
        "no",
        "not",
        "of",
        "on",
        "or",
        "our",
        "she",
        "so",
        "than",
        "that",
        "the",
        "their",
        "them",
        "then",
        "there",
        "these",
        "they",
        "this",
        "those",
        "to",
        "too",
        "up",
        "very",
        "was",
        "we",
        "were",
        "what",
        "when",
        "where",
        "which",
        "who",
        "why",
        "will",
        "with",
        "would",
        "you",
        "your",
    }
)
_TOKEN_PATTERN = re.compile(r"[^a-zA-Z0-9]+")


def tokenize(text: str) -> list[str]:
    """Split text into lowercase word tokens, dropping stop words."""
    return [t for t in _TOKEN_PATTERN.split(text.lower()) if t and t not in _STOP_WORDS]


def unique_stems(text: str) -> frozenset[str]:
    """Return the set of distinct stems in ``text``.

    >>> sorted(unique_stems("running dogs"))
    ['dog', 'run']
    """
    return frozenset(_STEMMER.stem(token) for token in tokenize(text))
