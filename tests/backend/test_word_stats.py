"""
Unit tests for the StatisticsAggregator module.
"""

import os
import sys
import time

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../backend"))

from fakes import FakeClock
from storage import WordStore
from word_stats import HOUR, StatisticsAggregator, start_of_hour

DAY = 24 * HOUR


@pytest.mark.unit
class TestStartOfHour:
    def test_floors_to_hour(self):
        ts = start_of_hour(1_700_000_000)
        assert ts <= 1_700_000_000 < ts + HOUR
        assert start_of_hour(ts) == ts
        assert start_of_hour(ts + HOUR - 1) == ts

    @pytest.fixture
    def new_york(self, monkeypatch):
        if not hasattr(time, "tzset"):
            pytest.skip("time.tzset is not available")
        monkeypatch.setenv("TZ", "America/New_York")
        time.tzset()
        yield
        monkeypatch.undo()
        time.tzset()

    def test_repeated_hour_at_dst_fall_back(self, new_york):
        # 2023-11-05 01:30 happens twice in New York: EDT, then EST.
        assert start_of_hour(1_699_162_200) == 1_699_160_400
        assert start_of_hour(1_699_165_800) == 1_699_164_000
        assert start_of_hour(1_699_165_800 + HOUR) == 1_699_164_000 + HOUR


@pytest.mark.unit
class TestStatisticsAggregator:
    """Test suite for the StatisticsAggregator class."""

    @pytest.fixture(autouse=True)
    def _setup(self, tmp_path):
        self.hour = start_of_hour(1_700_000_000)
        self.now = self.hour + 1800
        self.clock = FakeClock(self.now)
        self.store = WordStore(tmp_path / "words.db", clock=self.clock)
        self.stats = StatisticsAggregator(self.store, max_workers=3, clock=self.clock)
        yield
        self.store.close()

    def _add_at(self, timestamp, *words):
        saved = self.clock.now
        self.clock.now = timestamp
        self.store.batch_upsert_increment(words)
        self.clock.now = saved

    def test_zero_window_is_empty(self):
        assert self.stats.hourly_buckets(0) == []

    def test_negative_window_raises(self):
        with pytest.raises(ValueError):
            self.stats.hourly_buckets(-1)

    def test_buckets_are_contiguous_and_end_with_current_hour(self):
        buckets = self.stats.hourly_buckets(12)

        assert len(buckets) == 12
        assert buckets[-1].hour_start == self.hour
        starts = [bucket.hour_start for bucket in buckets]
        assert starts == sorted(starts)
        assert all(b - a == HOUR for a, b in zip(starts, starts[1:]))

    def test_counts_per_hour(self):
        self._add_at(self.now, "alpha", "beta")
        self._add_at(self.hour - 1, "gamma")
        self._add_at(self.hour - 2 * HOUR + 10, "delta")

        buckets = self.stats.hourly_buckets(3, now=self.now)
        assert [bucket.count for bucket in buckets] == [1, 1, 2]

    def test_words_are_counted_by_last_update(self):
        self._add_at(self.hour - HOUR, "alpha")
        self._add_at(self.now, "alpha")

        assert [bucket.count for bucket in self.stats.hourly_buckets(2)] == [0, 1]

    def test_full_day_partitions_records_in_window(self):
        inside = [f"word{chr(ord('a') + i)}" for i in range(20)]
        for offset, word in enumerate(inside):
            self._add_at(self.now - offset * 3000, word)
        self._add_at(self.now - 30 * HOUR, "ancient")

        buckets = self.stats.hourly_buckets(24)
        assert sum(bucket.count for bucket in buckets) == 20
        assert self.store.summary().total == 21

    def test_summary_passthrough(self):
        self._add_at(self.now, "alpha")
        assert self.stats.summary().total == 1

    def test_trend_for_missing_word(self):
        assert self.stats.trend("missing") is None

    def test_trend_labels(self):
        self._add_at(self.now, "alpha", "beta")

        trend = self.stats.trend("alpha")
        assert trend.label == "new today"
        assert trend.days_since_first_seen == 0
        assert trend.per_day == 1.0

        later = self.now + 3 * DAY
        assert self.stats.trend("alpha", now=later).label == "seen once"

        self._add_at(later, "beta")
        trend = self.stats.trend("beta", now=later)
        assert trend.count == 2
        assert trend.days_since_first_seen == 3
        assert trend.per_day == pytest.approx(0.5)
        assert trend.label == "0.5 per day"
