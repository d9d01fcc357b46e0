"""
Unit tests for text sources and the clipboard poller.
"""

import os
import sys
import threading
from unittest.mock import patch

import pyperclip
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../backend"))

from sources import ClipboardPoller, ClipboardSource


class ScriptedSource:
    def __init__(self, *texts):
        self.texts = list(texts)
        self.current = self.texts.pop(0) if self.texts else None

    def set(self, text):
        self.current = text

    def read(self):
        if isinstance(self.current, Exception):
            raise self.current
        return self.current


@pytest.mark.unit
class TestClipboardSource:
    def test_reads_clipboard_text(self):
        with patch("sources.pyperclip.paste", return_value="hello world"):
            assert ClipboardSource().read() == "hello world"

    def test_empty_clipboard_is_none(self):
        with patch("sources.pyperclip.paste", return_value=""):
            assert ClipboardSource().read() is None


@pytest.mark.unit
class TestClipboardPoller:
    """Test suite for the ClipboardPoller class."""

    def setup_method(self):
        self.received = []

    def test_forwards_only_changed_text(self):
        source = ScriptedSource("first")
        poller = ClipboardPoller(source, self.received.append, skip_initial=False)

        assert poller.poll_once() is True
        assert poller.poll_once() is False
        source.set("second")
        assert poller.poll_once() is True

        assert self.received == ["first", "second"]

    def test_blank_and_missing_text_are_skipped(self):
        source = ScriptedSource(None)
        poller = ClipboardPoller(source, self.received.append, skip_initial=False)

        assert poller.poll_once() is False
        source.set("   ")
        assert poller.poll_once() is False
        assert self.received == []

    def test_source_errors_are_contained(self):
        source = ScriptedSource(pyperclip.PyperclipException("no clipboard"))
        poller = ClipboardPoller(source, self.received.append, skip_initial=False)

        assert poller.poll_once() is False
        source.set(RuntimeError("boom"))
        assert poller.poll_once() is False
        source.set("recovered")
        assert poller.poll_once() is True
        assert self.received == ["recovered"]

    def test_handler_errors_are_contained(self):
        def broken(_text):
            raise RuntimeError("handler bug")

        poller = ClipboardPoller(ScriptedSource("hello"), broken, skip_initial=False)
        assert poller.poll_once() is True

    def test_background_thread_skips_initial_content(self):
        seen = threading.Event()

        def on_text(text):
            self.received.append(text)
            seen.set()

        source = ScriptedSource("old content")
        poller = ClipboardPoller(source, on_text, interval=0.01)
        poller.start()
        try:
            assert poller.running
            source.set("new content")
            assert seen.wait(2)
        finally:
            poller.stop()

        assert not poller.running
        assert self.received == ["new content"]
