"""Concurrent confirmation of candidate words against a definition lookup."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, wait
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Set

from cancellation import CancelToken
from definitions import DefinitionLookup
from errors import LookupFailed

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    confirmed: Set[str] = field(default_factory=set)
    rejected: Set[str] = field(default_factory=set)
    failed: Set[str] = field(default_factory=set)


@dataclass
class _Lookup:
    future: Future
    started: float


class CandidateVerifier:
    """Runs one lookup per unique candidate, at most `max_workers` at a time.

    Each lookup gets `timeout` seconds measured from the moment it starts.
    A lookup that runs past its deadline is reported as failed and its slot
    goes to the next queued word; the abandoned call finishes on its own
    daemon thread.

    Lookups are single-flight per word: concurrent `verify` calls that ask for
    the same word share the same in-flight lookup.
    """

    def __init__(self, lookup: DefinitionLookup, max_workers: int = 4, timeout: float = 5.0):
        self.lookup = lookup
        self.max_workers = max(1, max_workers)
        self.timeout = timeout
        self._inflight: Dict[str, _Lookup] = {}
        self._lock = threading.RLock()
        self._closed = False

    def verify(self, candidates: Iterable[str], cancel: Optional[CancelToken] = None) -> Set[str]:
        return self.verify_detailed(candidates, cancel).confirmed

    def verify_detailed(
        self, candidates: Iterable[str], cancel: Optional[CancelToken] = None
    ) -> VerificationResult:
        result = VerificationResult()
        unique = {word for word in candidates if word}
        if not unique:
            return result

        queued = sorted(unique, reverse=True)
        running: Dict[str, _Lookup] = {}
        while queued or running:
            while queued and len(running) < self.max_workers:
                if cancel is not None:
                    cancel.raise_if_cancelled()
                word = queued.pop()
                running[word] = self._dispatch(word)

            deadline = min(item.started for item in running.values()) + self.timeout
            wait(
                [item.future for item in running.values()],
                timeout=max(0.0, deadline - time.monotonic()),
                return_when=FIRST_COMPLETED,
            )

            now = time.monotonic()
            for word, item in list(running.items()):
                if item.future.done():
                    del running[word]
                    self._collect(word, item.future, result)
                elif now - item.started >= self.timeout:
                    del running[word]
                    logger.warning("%s", LookupFailed(word, f"no answer within {self.timeout}s"))
                    result.failed.add(word)

        logger.debug(
            "Verified %d candidates: %d confirmed, %d rejected, %d failed",
            len(unique),
            len(result.confirmed),
            len(result.rejected),
            len(result.failed),
        )
        return result

    def in_flight(self) -> Set[str]:
        with self._lock:
            return set(self._inflight)

    def close(self) -> None:
        """Refuse new lookups; calls already running finish in the background."""
        with self._lock:
            self._closed = True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _dispatch(self, word: str) -> _Lookup:
        with self._lock:
            if self._closed:
                raise RuntimeError("CandidateVerifier is closed")
            inflight = self._inflight.get(word)
            if inflight is not None:
                return inflight
            inflight = _Lookup(future=Future(), started=time.monotonic())
            self._inflight[word] = inflight

        worker = threading.Thread(
            target=self._run, args=(word, inflight.future), name=f"lookup-{word}", daemon=True
        )
        worker.start()
        return inflight

    def _run(self, word: str, future: Future) -> None:
        future.set_running_or_notify_cancel()
        try:
            definition = self.lookup.lookup(word)
        except Exception as exc:
            self._release(word, future)
            future.set_exception(exc)
        else:
            self._release(word, future)
            future.set_result(definition)

    def _release(self, word: str, future: Future) -> None:
        with self._lock:
            inflight = self._inflight.get(word)
            if inflight is not None and inflight.future is future:
                del self._inflight[word]

    def _collect(self, word: str, future: Future, result: VerificationResult) -> None:
        try:
            definition = future.result()
        except LookupFailed as exc:
            logger.warning("%s", exc)
            result.failed.add(word)
            return
        except Exception as exc:
            logger.warning("%s", LookupFailed(word, repr(exc)))
            result.failed.add(word)
            return

        if definition:
            result.confirmed.add(word)
        else:
            result.rejected.add(word)
