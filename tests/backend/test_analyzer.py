"""
Unit tests for language detection and the spaCy analyzer.
"""

import os
import sys
from unittest.mock import Mock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../backend"))

from analyzer import LangidLanguageDetector, SpacyAnalyzer
from fakes import FakeAnalyzer
from tokenizer import TextTokenizer


@pytest.mark.unit
class TestLangidLanguageDetector:
    def setup_method(self):
        self.identifier = Mock()
        self.detector = LangidLanguageDetector(identifier=self.identifier)

    def test_confident_guess_is_returned(self):
        self.identifier.classify.return_value = ("de", 0.97)
        assert self.detector.detect("Guten Morgen zusammen") == "de"

    def test_low_confidence_is_unknown(self):
        self.identifier.classify.return_value = ("fr", 0.3)
        assert self.detector.detect("ok la") is None

    def test_text_without_letters_skips_classification(self):
        assert self.detector.detect("123 456 !!!") is None
        assert self.detector.detect("") is None
        self.identifier.classify.assert_not_called()

    def test_long_text_is_sampled(self):
        self.identifier.classify.return_value = ("en", 0.99)
        detector = LangidLanguageDetector(sample_chars=20, identifier=self.identifier)

        detector.detect("word " * 100)
        (sampled,), _ = self.identifier.classify.call_args
        assert len(sampled) == 20


@pytest.mark.unit
class TestLangidModel:
    """Checks against the bundled langid model."""

    detector = LangidLanguageDetector()

    def test_english(self):
        text = "I copied this paragraph from an article about gardening and the weather this spring"
        assert self.detector.detect(text) == "en"

    def test_polish_is_not_english(self):
        assert self.detector.detect("Dzisiaj jest bardzo ładna pogoda w mieście") not in (None, "en")

    def test_polish_text_yields_no_candidates(self):
        analyzer = FakeAnalyzer()
        analyzer.detect_language = self.detector.detect
        tokenizer = TextTokenizer(analyzer, cache_size=0)

        assert tokenizer.candidates("Dzisiaj jest bardzo ładna pogoda w mieście") == set()
        assert analyzer.token_calls == []

    def test_vietnamese_is_not_english(self):
        assert self.detector.detect("Tôi thích ăn phở mỗi sáng") not in (None, "en")

    def test_non_latin_scripts(self):
        assert self.detector.detect("今天天气很好，我们去公园散步吧") == "zh"
        assert self.detector.detect("Привет, как дела? Сегодня хорошая погода.") == "ru"


@pytest.mark.unit
class TestSpacyAnalyzer:
    @pytest.fixture(autouse=True)
    def _analyzer(self):
        pytest.importorskip("spacy")
        self.analyzer = SpacyAnalyzer()
        try:
            self.analyzer.load()
        except RuntimeError as exc:
            pytest.skip(str(exc))

    def test_tokens_skip_punctuation(self):
        surfaces = [surface for surface, _ in self.analyzer.tokens("Hello, world!")]
        assert surfaces == ["Hello", "world"]

    def test_lemmas(self):
        pairs = dict(self.analyzer.tokens("The mice were running"))
        assert pairs["mice"] == "mouse"
        assert pairs["running"] == "run"

    def test_lemmatize_single_word(self):
        assert self.analyzer.lemmatize("gardens") == "garden"
        assert self.analyzer.lemmatize("two words") is None
        assert self.analyzer.lemmatize("") is None

    def test_missing_model_raises_runtime_error(self):
        analyzer = SpacyAnalyzer("no_such_model_xx")
        with pytest.raises(RuntimeError):
            analyzer.load()
