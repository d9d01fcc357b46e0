"""Publish/subscribe channel for pipeline completion events."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineEvent:
    status: str  # "completed", "failed" or "cancelled"
    texts: int
    candidates: FrozenSet[str] = field(default_factory=frozenset)
    confirmed: FrozenSet[str] = field(default_factory=frozenset)
    failed_lookups: FrozenSet[str] = field(default_factory=frozenset)
    error: Optional[str] = None
    finished_at: float = 0.0


Subscriber = Callable[[PipelineEvent], None]


class EventBus:
    def __init__(self):
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register callback; returns a function that removes it again."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: PipelineEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception("Pipeline event subscriber %r failed", callback)
