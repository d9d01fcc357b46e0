"""
Word extraction for Wordhoard.

Turns raw text into a set of lowercase candidate lemmas: analyzer tokens,
compound splitting, language gating and local validation. Long text is cut
into fixed-size chunks that are processed concurrently.
"""

from __future__ import annotations

import logging
import re
import threading
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator, List, Optional, Set

from analyzer import LinguisticAnalyzer, Token
from validator import WordValidator

logger = logging.getLogger(__name__)

ENGLISH = "en"
DEFAULT_MAX_TEXT_LENGTH = 10_000

_SEPARATOR_RE = re.compile(r"[-_]+")


def split_compound(token: str) -> List[str]:
    """Explode `snake_case`, `kebab-case` and `camelCase` tokens into parts."""
    if "-" in token or "_" in token:
        return [part for part in _SEPARATOR_RE.split(token) if part]

    if any(ch.isupper() for ch in token[1:]) and not token.isupper():
        parts: List[str] = []
        current = token[0]
        for ch in token[1:]:
            if ch.isupper():
                parts.append(current)
                current = ch
            else:
                current += ch
        parts.append(current)
        return parts

    return [token]


class TextTokenizer:
    """Extracts candidate words from text using a pluggable analyzer."""

    def __init__(
        self,
        analyzer: LinguisticAnalyzer,
        validator: Optional[WordValidator] = None,
        max_text_length: int = DEFAULT_MAX_TEXT_LENGTH,
        max_workers: int = 4,
        cache_size: int = 1000,
    ):
        """
        Initialize the tokenizer.

        Args:
            analyzer: Provides tokens, lemmas and language detection
            validator: Local validity filter applied to surface forms and lemmas
            max_text_length: Chunk size in characters for long input
            max_workers: Upper bound on concurrently processed chunks
            cache_size: Number of recent texts whose candidates are memoized
        """
        if max_text_length < 1:
            raise ValueError("max_text_length must be positive")
        self.analyzer = analyzer
        self.validator = validator or WordValidator()
        self.max_text_length = max_text_length
        self.max_workers = max(1, max_workers)
        self.cache_size = cache_size
        self._cache: "OrderedDict[str, frozenset]" = OrderedDict()
        self._cache_lock = threading.Lock()

    def tokenize(self, text: str) -> Iterator[Token]:
        """Lazily yield (surface, lemma) pairs for one chunk of text.

        Compound tokens are exploded and each part is lemmatized on its own.
        """
        for surface, lemma in self.analyzer.tokens(text):
            parts = split_compound(surface)
            if len(parts) == 1 and parts[0] == surface:
                yield surface, lemma
                continue
            for part in parts:
                yield part, self.analyzer.lemmatize(part)

    def chunks(self, text: str) -> List[str]:
        size = self.max_text_length
        if len(text) <= size:
            return [text]
        # A word straddling a boundary is split in two; accepted loss.
        return [text[start : start + size] for start in range(0, len(text), size)]

    def candidates(self, text: str) -> Set[str]:
        """Return the set of validated candidate lemmas found in text."""
        if not text or not text.strip():
            return set()

        cached = self._cache_get(text)
        if cached is not None:
            return set(cached)

        if any(ch.isspace() for ch in text.strip()):
            language = self.analyzer.detect_language(text)
            if language is not None and language != ENGLISH:
                logger.debug("Skipping text with dominant language %s", language)
                self._cache_put(text, frozenset())
                return set()

        words = self._extract(text)
        self._cache_put(text, frozenset(words))
        return words

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _extract(self, text: str) -> Set[str]:
        chunks = self.chunks(text)
        if len(chunks) == 1:
            return self._chunk_candidates(chunks[0])

        logger.debug("Processing %d chunks of up to %d chars", len(chunks), self.max_text_length)
        words: Set[str] = set()
        workers = min(self.max_workers, len(chunks))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="tokenize") as pool:
            for batch in pool.map(self._chunk_candidates, chunks):
                words |= batch
        return words

    def _chunk_candidates(self, chunk: str) -> Set[str]:
        words: Set[str] = set()
        for surface, lemma in self.tokenize(chunk):
            word = self._candidate(surface, lemma)
            if word is not None:
                words.add(word)
        return words

    def _candidate(self, surface: str, lemma: Optional[str]) -> Optional[str]:
        if not self.validator.is_valid(surface):
            return None
        return self.validator.normalize(lemma or surface)

    def _cache_get(self, text: str) -> Optional[frozenset]:
        if self.cache_size <= 0:
            return None
        with self._cache_lock:
            hit = self._cache.get(text)
            if hit is not None:
                self._cache.move_to_end(text)
            return hit

    def _cache_put(self, text: str, words: frozenset) -> None:
        if self.cache_size <= 0:
            return
        with self._cache_lock:
            self._cache[text] = words
            self._cache.move_to_end(text)
            while len(self._cache) > self.cache_size:
                self._cache.popitem(last=False)
