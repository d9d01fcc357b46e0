"""Cooperative cancellation token passed down the pipeline call chain."""

from __future__ import annotations

import threading
from typing import Optional

from errors import RunCancelled


class CancelToken:
    def __init__(self):
        self._event = threading.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RunCancelled(self.reason or "cancelled")
