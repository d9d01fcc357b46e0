"""Error types shared across the Wordhoard backend.

Expected filtering outcomes (a rejected token, non-English text) are not
errors and never raise; only real faults live here.
"""

from __future__ import annotations


class WordhoardError(Exception):
    """Base class for backend faults."""


class StorageError(WordhoardError):
    """The word store could not complete a read or a transaction."""


class LookupFailed(WordhoardError):
    """A definition lookup errored or timed out (distinct from "not found")."""

    def __init__(self, word: str, reason: str):
        super().__init__(f"Lookup failed for '{word}': {reason}")
        self.word = word
        self.reason = reason


class RunCancelled(WordhoardError):
    """A pipeline run was cancelled before reaching its store transaction."""


class WordNotFound(WordhoardError):
    def __init__(self, word: str):
        super().__init__(f"Word not found: {word}")
        self.word = word
