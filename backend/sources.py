"""Text sources that feed the pipeline, and the polling loop that watches them."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol

import pyperclip

logger = logging.getLogger(__name__)


class TextSource(Protocol):
    def read(self) -> Optional[str]:
        """Current text, or None when the source holds no text."""
        ...


class ClipboardSource:
    """Reads the system clipboard through pyperclip."""

    def read(self) -> Optional[str]:
        text = pyperclip.paste()
        return text if isinstance(text, str) and text else None


class ClipboardPoller:
    """Polls a text source on a daemon thread and forwards changed text.

    Change detection compares against the last text seen; the text present
    when polling starts counts as seen, so old clipboard content is not
    re-ingested on every launch.
    """

    def __init__(
        self,
        source: TextSource,
        on_text: Callable[[str], object],
        interval: float = 1.0,
        skip_initial: bool = True,
    ):
        self.source = source
        self.on_text = on_text
        self.interval = interval
        self.skip_initial = skip_initial
        self._last_text: Optional[str] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        if self.skip_initial:
            self._last_text = self._safe_read()
        self._thread = threading.Thread(target=self._loop, name="clipboard-poller", daemon=True)
        self._thread.start()
        logger.info("Watching clipboard every %.2fs", self.interval)

    def stop(self, timeout: Optional[float] = 2.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self) -> bool:
        """Check the source once; returns True when new text was forwarded."""
        text = self._safe_read()
        if text is None or text == self._last_text:
            return False
        self._last_text = text
        if not text.strip():
            return False
        try:
            self.on_text(text)
        except Exception:
            logger.exception("Clipboard text handler failed")
        return True

    def _loop(self) -> None:
        while not self._stop.is_set():
            self.poll_once()
            self._stop.wait(self.interval)

    def _safe_read(self) -> Optional[str]:
        try:
            return self.source.read()
        except pyperclip.PyperclipException as exc:
            logger.warning("Clipboard unavailable: %s", exc)
        except Exception:
            logger.exception("Reading text source failed")
        return None
