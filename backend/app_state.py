"""Backend application state: explicit construction and lifecycle of services."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from analyzer import LinguisticAnalyzer, SpacyAnalyzer
from definitions import CachedDefinitionLookup, DefinitionLookup, HttpDefinitionLookup
from events import EventBus
from pipeline import WordPipeline
from services import WordService
from settings import Settings
from sources import ClipboardPoller, ClipboardSource, TextSource
from storage import WordStore
from tokenizer import TextTokenizer
from validator import WordValidator
from verifier import CandidateVerifier
from word_stats import StatisticsAggregator

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    settings: Settings
    store: WordStore
    tokenizer: TextTokenizer
    verifier: CandidateVerifier
    events: EventBus
    pipeline: WordPipeline
    stats: StatisticsAggregator
    words: WordService
    poller: Optional[ClipboardPoller] = None


class WordhoardAppState:
    """Builds every service once at startup and tears them down at shutdown.

    Capabilities (analyzer, lookup, text source) can be injected; by default
    the spaCy analyzer, the HTTP dictionary and the clipboard are used.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        analyzer: Optional[LinguisticAnalyzer] = None,
        lookup: Optional[DefinitionLookup] = None,
        source: Optional[TextSource] = None,
    ):
        self._lock = threading.RLock()
        self.settings = settings or Settings.from_env()
        self._services = self._build(analyzer, lookup, source)
        self._started = False

    def current(self) -> AppServices:
        with self._lock:
            return self._services

    def start(self) -> None:
        with self._lock:
            if self._started:
                return
            self._started = True
            poller = self._services.poller
        if poller is not None:
            poller.start()

    def stop(self) -> None:
        with self._lock:
            services = self._services
            self._started = False
        if services.poller is not None:
            services.poller.stop()
        services.pipeline.shutdown()
        services.verifier.close()
        services.store.close()

    def _build(
        self,
        analyzer: Optional[LinguisticAnalyzer],
        lookup: Optional[DefinitionLookup],
        source: Optional[TextSource],
    ) -> AppServices:
        settings = self.settings
        store = WordStore(settings.db_path)
        validator = WordValidator()
        tokenizer = TextTokenizer(
            analyzer or SpacyAnalyzer(settings.spacy_model),
            validator,
            max_text_length=settings.max_text_length,
            max_workers=settings.tokenizer_workers,
            cache_size=settings.extract_cache_size,
        )
        if lookup is None:
            lookup = CachedDefinitionLookup(
                HttpDefinitionLookup(settings.lookup_url, timeout=settings.lookup_timeout),
                max_size=settings.lookup_cache_size,
            )
        verifier = CandidateVerifier(
            lookup, max_workers=settings.lookup_workers, timeout=settings.lookup_timeout
        )
        events = EventBus()
        pipeline = WordPipeline(tokenizer, verifier, store, events)
        stats = StatisticsAggregator(store)
        words = WordService(
            store,
            stats,
            pipeline,
            lookup,
            validator,
            default_window_hours=settings.stats_window_hours,
        )

        poller = None
        if settings.watch_clipboard or source is not None:
            poller = ClipboardPoller(
                source or ClipboardSource(), pipeline.submit, interval=settings.poll_interval
            )

        logger.info("Word store at %s", settings.db_path)
        return AppServices(
            settings=settings,
            store=store,
            tokenizer=tokenizer,
            verifier=verifier,
            events=events,
            pipeline=pipeline,
            stats=stats,
            words=words,
            poller=poller,
        )
