from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path


DEFAULT_USER_AGENT = "AptvPlayer/1.4.10"
DEFAULT_EPG_CHUNK_SIZE = 64 * 1024


def _default_data_dir() -> Path:
    p = os.environ.get("LIVETV_HOME")
    if p:
        return Path(p)
    return Path.home() / ".livetv"


def _env_float(name: str) -> float | None:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


def _env_int(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw.isdigit():
        return default
    return int(raw) or default


def _env_level(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip().upper()
    level = logging.getLevelName(raw) if raw else default
    return level if isinstance(level, int) else default


@dataclass
class Settings:
    data_dir: Path = field(default_factory=_default_data_dir)
    user_agent: str = DEFAULT_USER_AGENT
    http_timeout: float | None = None
    epg_chunk_size: int = DEFAULT_EPG_CHUNK_SIZE
    log_level: int = logging.INFO
    log_to_file: bool = True

    @property
    def sources_file(self) -> Path:
        return self.data_dir / "sources.json"

    @property
    def log_file(self) -> Path | None:
        if not self.log_to_file:
            return None
        return self.data_dir / "livetv.log"

    @property
    def crash_dir(self) -> Path:
        return self.data_dir / "crash_logs"

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            data_dir=_default_data_dir(),
            user_agent=(os.environ.get("LIVETV_USER_AGENT") or "").strip() or DEFAULT_USER_AGENT,
            http_timeout=_env_float("LIVETV_HTTP_TIMEOUT"),
            epg_chunk_size=_env_int("LIVETV_EPG_CHUNK_SIZE", DEFAULT_EPG_CHUNK_SIZE),
            log_level=_env_level("LIVETV_LOG_LEVEL", logging.INFO),
        )
