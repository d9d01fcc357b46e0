"""Read-only aggregates over the word store: hourly buckets, summary, trends."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, List, Optional

from models import HourlyBucket, StoreSummary, WordTrend
from storage import WordStore

HOUR = 3600.0


def start_of_hour(timestamp: float) -> float:
    """Start of the local-time hour containing timestamp."""
    local = datetime.fromtimestamp(timestamp, tz=timezone.utc).astimezone()
    return local.replace(minute=0, second=0, microsecond=0).timestamp()


class StatisticsAggregator:
    def __init__(
        self,
        store: WordStore,
        max_workers: int = 4,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.max_workers = max(1, max_workers)
        self.clock = clock

    def hourly_buckets(self, window_hours: int, now: Optional[float] = None) -> List[HourlyBucket]:
        """Counts for the `window_hours` hourly slots ending with the current hour, oldest first."""
        if window_hours < 0:
            raise ValueError("window_hours must not be negative")
        if window_hours == 0:
            return []

        current = start_of_hour(self.clock() if now is None else now)
        starts = [current - offset * HOUR for offset in range(window_hours)]

        workers = min(self.max_workers, len(starts))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="stats") as pool:
            buckets = list(pool.map(self._bucket, starts))
        buckets.sort(key=lambda bucket: bucket.hour_start)
        return buckets

    def summary(self) -> StoreSummary:
        return self.store.summary()

    def trend(self, word: str, now: Optional[float] = None) -> Optional[WordTrend]:
        record = self.store.get(word)
        if record is None:
            return None

        today = datetime.fromtimestamp(self.clock() if now is None else now).date()
        first_seen = datetime.fromtimestamp(record.created_at).date()
        days = max(0, (today - first_seen).days)
        per_day = record.count / float(days + 1)

        if days == 0:
            label = "new today"
        elif record.count == 1:
            label = "seen once"
        else:
            label = f"{per_day:.1f} per day"

        return WordTrend(
            text=record.text,
            count=record.count,
            days_since_first_seen=days,
            per_day=per_day,
            label=label,
        )

    def _bucket(self, hour_start: float) -> HourlyBucket:
        return HourlyBucket(
            hour_start=hour_start,
            count=self.store.count_in_range(hour_start, hour_start + HOUR),
        )
