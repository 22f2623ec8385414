from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from livetv.models import SourceDescriptor


logger = logging.getLogger(__name__)


class SourceStore:
    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.RLock()

    def _load_state(self) -> dict:
        p = self.path
        if not p.exists():
            return {}
        try:
            state = json.loads(p.read_text(encoding="utf-8"))
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Unreadable sources file {p}: {e}")
            return {}
        return state if isinstance(state, dict) else {}

    def _save_state(self, state: dict) -> None:
        p = self.path
        p.parent.mkdir(parents=True, exist_ok=True)
        tmp = p.with_suffix(p.suffix + ".tmp")
        tmp.write_text(json.dumps(state, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(p)

    def load_sources(self) -> list[SourceDescriptor]:
        with self._lock:
            raw = self._load_state().get("sources", [])

        sources: list[SourceDescriptor] = []
        for item in raw if isinstance(raw, list) else []:
            try:
                sources.append(SourceDescriptor.from_dict(item))
            except (TypeError, AttributeError):
                logger.warning(f"Skipping malformed source entry: {item!r}")
        return sources

    def get_source(self, key: str) -> SourceDescriptor | None:
        for s in self.load_sources():
            if s.key == key:
                return s
        return None

    def save_sources(self, sources: list[SourceDescriptor]) -> None:
        with self._lock:
            state = self._load_state()
            state["sources"] = [s.to_dict() for s in sources]
            self._save_state(state)

    def save_source(self, source: SourceDescriptor) -> None:
        with self._lock:
            sources = self.load_sources()
            for i, s in enumerate(sources):
                if s.key == source.key:
                    sources[i] = source
                    break
            else:
                sources.append(source)
            self.save_sources(sources)

    def remove_source(self, key: str) -> bool:
        with self._lock:
            sources = self.load_sources()
            kept = [s for s in sources if s.key != key]
            if len(kept) == len(sources):
                return False
            self.save_sources(kept)
            return True
