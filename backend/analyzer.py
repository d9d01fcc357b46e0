"""Linguistic analysis capability: tokens, lemmas and dominant language.

The pipeline only depends on the `LinguisticAnalyzer` protocol. `SpacyAnalyzer`
is the production implementation; tests inject a deterministic double.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Iterator, Optional, Protocol, Tuple

from langid.langid import LanguageIdentifier
from langid.langid import model as langid_model

logger = logging.getLogger(__name__)

Token = Tuple[str, Optional[str]]


class LinguisticAnalyzer(Protocol):
    def detect_language(self, text: str) -> Optional[str]:
        """Dominant language code, or None when the signal is too weak."""
        ...

    def tokens(self, text: str) -> Iterable[Token]:
        """(surface, lemma) pairs with punctuation and whitespace omitted."""
        ...

    def lemmatize(self, word: str) -> Optional[str]:
        ...


class LangidLanguageDetector:
    """Dominant language via langid, with normalized probabilities.

    A guess below `min_confidence` is reported as None (unknown).
    """

    def __init__(
        self,
        min_confidence: float = 0.5,
        sample_chars: int = 1000,
        identifier: Optional[LanguageIdentifier] = None,
    ):
        self.min_confidence = min_confidence
        self.sample_chars = sample_chars
        self._identifier = identifier
        self._lock = threading.Lock()

    def load(self) -> LanguageIdentifier:
        with self._lock:
            if self._identifier is None:
                self._identifier = LanguageIdentifier.from_modelstring(langid_model, norm_probs=True)
            return self._identifier

    def detect(self, text: str) -> Optional[str]:
        if not text or not any(ch.isalpha() for ch in text):
            return None
        lang, confidence = self.load().classify(text[: self.sample_chars])
        if confidence < self.min_confidence:
            logger.debug("Language guess %s below confidence (%.2f)", lang, confidence)
            return None
        return lang


class SpacyAnalyzer:
    """spaCy-backed tokenizer/lemmatizer with langid language detection.

    The pipeline is loaded lazily on first use and shared by all threads of
    this instance; spaCy `Language` objects are safe for concurrent calls.
    """

    def __init__(
        self,
        model_name: str = "en_core_web_sm",
        detector: Optional[LangidLanguageDetector] = None,
    ):
        self.model_name = model_name
        self.detector = detector or LangidLanguageDetector()
        self._nlp = None
        self._lock = threading.Lock()

    def load(self):
        with self._lock:
            if self._nlp is not None:
                return self._nlp
            try:
                import spacy  # type: ignore
            except ImportError as exc:
                raise RuntimeError(
                    "spaCy is required for word extraction. Install it and the model to proceed."
                ) from exc

            try:
                self._nlp = spacy.load(self.model_name, exclude=["ner", "parser"])
            except OSError as exc:
                raise RuntimeError(
                    f"spaCy model '{self.model_name}' is unavailable. "
                    f"Install it with: python -m spacy download {self.model_name}"
                ) from exc
            logger.info("Loaded spaCy model %s", self.model_name)
            return self._nlp

    def detect_language(self, text: str) -> Optional[str]:
        return self.detector.detect(text)

    def tokens(self, text: str) -> Iterator[Token]:
        nlp = self.load()
        for token in nlp(text):
            if token.is_punct or token.is_space:
                continue
            yield token.text, (token.lemma_ or None)

    def lemmatize(self, word: str) -> Optional[str]:
        if not word:
            return None
        doc = self.load()(word)
        if len(doc) != 1:
            return None
        return doc[0].lemma_ or None
