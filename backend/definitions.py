"""
Definition lookup adapters.

A lookup returns the definition text for a word, None when the word is not
known, and raises `LookupFailed` when the source itself fails.
"""

from __future__ import annotations

import json
import logging
import threading
import urllib.parse
from collections import OrderedDict
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol, Union

import requests

from errors import LookupFailed
from settings import DEFAULT_LOOKUP_URL

logger = logging.getLogger(__name__)

_MISSING = object()


class DefinitionLookup(Protocol):
    def lookup(self, word: str) -> Optional[str]:
        ...


class HttpDefinitionLookup:
    """Queries a suggest-style dictionary endpoint over HTTP.

    The endpoint must answer with JSON of the form
    `{"status": 1, "message": [{"key": ..., "paraphrase": ...}]}`; an empty
    `message` list means the word is unknown.
    """

    def __init__(
        self,
        url_template: str = DEFAULT_LOOKUP_URL,
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ):
        self.url_template = url_template
        self.timeout = timeout
        self.session = session or requests.Session()

    def url_for(self, word: str) -> str:
        return self.url_template.format(word=urllib.parse.quote(word))

    def lookup(self, word: str) -> Optional[str]:
        try:
            response = self.session.get(self.url_for(word), timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.Timeout as exc:
            raise LookupFailed(word, "timed out") from exc
        except requests.RequestException as exc:
            raise LookupFailed(word, str(exc)) from exc
        except ValueError as exc:
            raise LookupFailed(word, f"invalid JSON: {exc}") from exc

        entries = payload.get("message") if isinstance(payload, dict) else None
        if not entries or not isinstance(entries, list):
            return None
        first = entries[0]
        if not isinstance(first, dict):
            return None
        paraphrase = str(first.get("paraphrase") or "").strip()
        key = str(first.get("key") or "").strip().lower()
        # Suggest endpoints return the nearest match; only an exact key counts.
        if not paraphrase or (key and key != word.lower()):
            return None
        return paraphrase

    def close(self) -> None:
        self.session.close()


class StaticDefinitionLookup:
    """In-memory dictionary, optionally loaded from a JSON file of {word: definition}."""

    def __init__(self, definitions: Optional[Mapping[str, str]] = None):
        self.definitions: Dict[str, str] = {
            str(word).lower(): str(text) for word, text in (definitions or {}).items()
        }

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "StaticDefinitionLookup":
        with open(path, "r", encoding="utf-8") as handle:
            raw = json.load(handle)
        if not isinstance(raw, dict):
            raise ValueError(f"Definition file must contain a JSON object: {path}")
        logger.info("Loaded %d definitions from %s", len(raw), path)
        return cls(raw)

    def lookup(self, word: str) -> Optional[str]:
        return self.definitions.get(word.lower())


class CachedDefinitionLookup:
    """Thread-safe LRU cache in front of another lookup.

    Found and not-found answers are cached; failures are not, so a transient
    error is retried on the next request.
    """

    def __init__(self, inner: DefinitionLookup, max_size: int = 1000):
        self.inner = inner
        self.max_size = max_size
        self._cache: "OrderedDict[str, Optional[str]]" = OrderedDict()
        self._lock = threading.Lock()

    def lookup(self, word: str) -> Optional[str]:
        key = word.lower()
        with self._lock:
            cached = self._cache.get(key, _MISSING)
            if cached is not _MISSING:
                self._cache.move_to_end(key)
                return cached  # type: ignore[return-value]

        result = self.inner.lookup(word)

        if self.max_size > 0:
            with self._lock:
                self._cache[key] = result
                self._cache.move_to_end(key)
                while len(self._cache) > self.max_size:
                    self._cache.popitem(last=False)
        return result

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
