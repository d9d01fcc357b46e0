"""Runtime configuration for Wordhoard.

All knobs come from `WORDHOARD_*` environment variables and are read once at
startup into a frozen `Settings` instance that is passed to the services.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_LOOKUP_URL = (
    "https://dict-mobile.iciba.com/interface/index.php"
    "?c=word&m=getsuggest&nums=1&is_need_mean=0&word={word}"
)


def _default_data_dir() -> Path:
    return Path.home() / ".wordhoard"


def _env_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    data_dir: Path = field(default_factory=_default_data_dir)
    db_filename: str = "words.db"
    spacy_model: str = "en_core_web_sm"
    lookup_url: str = DEFAULT_LOOKUP_URL
    lookup_timeout: float = 5.0
    lookup_workers: int = 4
    lookup_cache_size: int = 1000
    tokenizer_workers: int = 4
    max_text_length: int = 10_000
    extract_cache_size: int = 1000
    poll_interval: float = 1.0
    watch_clipboard: bool = True
    stats_window_hours: int = 12
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_filename

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        def get(name: str, default: str) -> str:
            value = env.get(f"WORDHOARD_{name}", "").strip()
            return value or default

        data_dir = env.get("WORDHOARD_DATA_DIR", "").strip()
        return cls(
            data_dir=Path(data_dir).expanduser() if data_dir else _default_data_dir(),
            db_filename=get("DB_FILENAME", "words.db"),
            spacy_model=get("SPACY_MODEL", "en_core_web_sm"),
            lookup_url=get("LOOKUP_URL", DEFAULT_LOOKUP_URL),
            lookup_timeout=float(get("LOOKUP_TIMEOUT", "5.0")),
            lookup_workers=max(1, int(get("LOOKUP_WORKERS", "4"))),
            lookup_cache_size=max(0, int(get("LOOKUP_CACHE_SIZE", "1000"))),
            tokenizer_workers=max(1, int(get("TOKENIZER_WORKERS", "4"))),
            max_text_length=max(1, int(get("MAX_TEXT_LENGTH", "10000"))),
            extract_cache_size=max(0, int(get("EXTRACT_CACHE_SIZE", "1000"))),
            poll_interval=float(get("POLL_INTERVAL", "1.0")),
            watch_clipboard=_env_bool(env.get("WORDHOARD_WATCH_CLIPBOARD"), True),
            stats_window_hours=max(0, int(get("STATS_WINDOW_HOURS", "12"))),
            host=get("HOST", "127.0.0.1"),
            port=int(get("PORT", "8000")),
        )
