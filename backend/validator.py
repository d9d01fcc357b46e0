"""Cheap local filter that decides whether a token looks like a dictionary word."""

from __future__ import annotations

from typing import FrozenSet, Iterable, Optional

MIN_WORD_LENGTH = 2
MAX_WORD_LENGTH = 45

_ASCII_LETTERS = frozenset("abcdefghijklmnopqrstuvwxyz")

# High-frequency function words that are never worth tracking.
STOPLIST: FrozenSet[str] = frozenset(
    [
        # articles
        "a", "an", "the",
        # pronouns
        "i", "you", "he", "she", "it", "we", "they",
        "me", "him", "her", "us", "them",
        "my", "your", "his", "its", "our", "their",
        "this", "that", "these", "those",
        # prepositions
        "in", "on", "at", "to", "for", "of", "with",
        "by", "from", "up", "about", "into", "over",
        # conjunctions
        "and", "but", "or", "if", "so",
        # auxiliaries
        "am", "is", "are", "was", "were", "be", "been", "being",
        "have", "has", "had",
        "do", "does", "did",
        # other
        "not", "yes", "no", "ok", "okay",
    ]
)


class WordValidator:
    """Rejects tokens that cannot be a plain English vocabulary word."""

    def __init__(
        self,
        min_length: int = MIN_WORD_LENGTH,
        max_length: int = MAX_WORD_LENGTH,
        stoplist: Optional[Iterable[str]] = None,
    ):
        self.min_length = min_length
        self.max_length = max_length
        self.stoplist = frozenset(
            word.lower() for word in (STOPLIST if stoplist is None else stoplist)
        )

    def normalize(self, word: str) -> Optional[str]:
        """Return the case-folded word if it is valid, else None."""
        normalized = (word or "").strip().lower()
        if not normalized:
            return None
        if not self.min_length <= len(normalized) <= self.max_length:
            return None
        if any(ch not in _ASCII_LETTERS for ch in normalized):
            return None
        if normalized in self.stoplist:
            return None
        return normalized

    def is_valid(self, word: str) -> bool:
        return self.normalize(word) is not None
