"""
Extraction → verification → storage pipeline.

Runs are single-flight: at most one run is active at a time. Text submitted
while a run is active is queued and handled by one follow-up run once the
current run finishes.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Set

from cancellation import CancelToken
from errors import RunCancelled, StorageError
from events import EventBus, PipelineEvent
from storage import WordStore
from tokenizer import TextTokenizer
from verifier import CandidateVerifier

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    texts: int = 0
    candidates: Set[str] = field(default_factory=set)
    confirmed: Set[str] = field(default_factory=set)
    failed_lookups: Set[str] = field(default_factory=set)


class WordPipeline:
    def __init__(
        self,
        tokenizer: TextTokenizer,
        verifier: CandidateVerifier,
        store: WordStore,
        events: Optional[EventBus] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.tokenizer = tokenizer
        self.verifier = verifier
        self.store = store
        self.events = events or EventBus()
        self.clock = clock

        self._lock = threading.RLock()
        self._run_lock = threading.Lock()
        self._pending: List[str] = []
        self._worker: Optional[threading.Thread] = None
        self._active: Optional[CancelToken] = None
        self._idle = threading.Event()
        self._idle.set()
        self._closed = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def process(self, text: str, cancel: Optional[CancelToken] = None) -> PipelineResult:
        """Run the pipeline synchronously; StorageError propagates to the caller."""
        return self.process_many([text], cancel)

    def process_many(self, texts: Iterable[str], cancel: Optional[CancelToken] = None) -> PipelineResult:
        with self._run_lock:
            return self._run(list(texts), cancel)

    def submit(self, text: str) -> bool:
        """Queue text for the background worker. Returns False when ignored."""
        if not text or not text.strip():
            return False
        with self._lock:
            if self._closed:
                return False
            self._pending.append(text)
            if self._worker is not None:
                return True
            self._idle.clear()
            self._worker = threading.Thread(
                target=self._run_pending, name="word-pipeline", daemon=True
            )
            self._worker.start()
        return True

    def cancel(self, reason: str = "cancelled") -> None:
        """Cancel the active run and drop any queued text."""
        with self._lock:
            self._pending.clear()
            if self._active is not None:
                self._active.cancel(reason)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        return self._idle.wait(timeout)

    @property
    def busy(self) -> bool:
        return not self._idle.is_set()

    def shutdown(self, timeout: Optional[float] = 5.0) -> None:
        with self._lock:
            self._closed = True
            worker = self._worker
        self.cancel("shutdown")
        if worker is not None:
            worker.join(timeout)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _run(self, texts: List[str], cancel: Optional[CancelToken]) -> PipelineResult:
        result = PipelineResult(texts=len(texts))
        for text in texts:
            if cancel is not None:
                cancel.raise_if_cancelled()
            result.candidates |= self.tokenizer.candidates(text)

        verification = self.verifier.verify_detailed(result.candidates, cancel)
        result.confirmed = verification.confirmed
        result.failed_lookups = verification.failed

        if cancel is not None:
            cancel.raise_if_cancelled()
        self.store.batch_upsert_increment(result.confirmed)
        logger.info(
            "Pipeline run: %d texts, %d candidates, %d confirmed",
            result.texts,
            len(result.candidates),
            len(result.confirmed),
        )
        return result

    def _run_pending(self) -> None:
        # Drain the queue; everything queued during a run becomes one follow-up run.
        while True:
            with self._lock:
                batch = self._pending
                self._pending = []
                if not batch:
                    self._worker = None
                    self._active = None
                    self._idle.set()
                    return
                token = CancelToken()
                self._active = token

            try:
                result = self.process_many(batch, token)
            except RunCancelled as exc:
                logger.info("Pipeline run cancelled: %s", exc)
                self._publish("cancelled", len(batch), error=str(exc))
            except StorageError as exc:
                logger.error("Pipeline run failed: %s", exc)
                self._publish("failed", len(batch), error=str(exc))
            except Exception as exc:
                logger.exception("Pipeline run crashed")
                self._publish("failed", len(batch), error=repr(exc))
            else:
                self._publish(
                    "completed",
                    result.texts,
                    candidates=result.candidates,
                    confirmed=result.confirmed,
                    failed_lookups=result.failed_lookups,
                )

    def _publish(
        self,
        status: str,
        texts: int,
        *,
        candidates: Iterable[str] = (),
        confirmed: Iterable[str] = (),
        failed_lookups: Iterable[str] = (),
        error: Optional[str] = None,
    ) -> None:
        self.events.publish(
            PipelineEvent(
                status=status,
                texts=texts,
                candidates=frozenset(candidates),
                confirmed=frozenset(confirmed),
                failed_lookups=frozenset(failed_lookups),
                error=error,
                finished_at=self.clock(),
            )
        )
