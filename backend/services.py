"""Service layer coordinating the store, statistics and pipeline for the API."""

from __future__ import annotations

from typing import List, Optional, Tuple

from definitions import DefinitionLookup
from errors import WordNotFound
from models import HourlyBucket, StoreSummary, WordRecord, WordTrend
from pipeline import PipelineResult, WordPipeline
from storage import WordStore
from validator import WordValidator
from word_stats import StatisticsAggregator


class WordService:
    """Read/curate operations the UI layer needs, plus manual ingestion."""

    def __init__(
        self,
        store: WordStore,
        stats: StatisticsAggregator,
        pipeline: WordPipeline,
        lookup: DefinitionLookup,
        validator: Optional[WordValidator] = None,
        default_window_hours: int = 12,
    ):
        self.store = store
        self.stats = stats
        self.pipeline = pipeline
        self.lookup = lookup
        self.validator = validator or WordValidator()
        self.default_window_hours = default_window_hours

    def list_words(self, starred_only: bool = False) -> List[WordRecord]:
        return self.store.get_starred() if starred_only else self.store.get_all()

    def search(self, query: str) -> List[WordRecord]:
        return self.store.search(query)

    def get(self, word: str) -> WordRecord:
        record = self.store.get(word)
        if record is None:
            raise WordNotFound(word)
        return record

    def set_stars(self, word: str, stars: int) -> WordRecord:
        if not self.store.set_stars(word, stars):
            raise WordNotFound(word)
        return self.get(word)

    def remove(self, word: str) -> None:
        if not self.store.remove(word):
            raise WordNotFound(word)

    def remove_all(self) -> int:
        return self.store.remove_all()

    def export(self, starred_only: bool = False) -> str:
        return self.store.export_list(starred_only)

    def hourly(self, hours: Optional[int] = None) -> List[HourlyBucket]:
        window = self.default_window_hours if hours is None else hours
        return self.stats.hourly_buckets(window)

    def summary(self, top: int = 10) -> Tuple[StoreSummary, List[WordRecord]]:
        return self.stats.summary(), self.store.top_words(top)

    def trend(self, word: str) -> WordTrend:
        trend = self.stats.trend(word)
        if trend is None:
            raise WordNotFound(word)
        return trend

    def define(self, word: str) -> str:
        """Definition for a word; LookupFailed propagates when the source errors."""
        normalized = (word or "").strip().lower()
        definition = self.lookup.lookup(normalized) if normalized else None
        if not definition:
            raise WordNotFound(word)
        return definition

    def ingest(self, text: str) -> PipelineResult:
        """Run the pipeline on text in the caller's thread."""
        return self.pipeline.process(text)

    def submit(self, text: str) -> bool:
        """Queue text for the background pipeline worker."""
        return self.pipeline.submit(text)
