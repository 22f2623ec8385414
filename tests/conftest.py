from __future__ import annotations

import threading

import pytest
import requests

from livetv.models import SourceDescriptor
from livetv.services.storage import SourceStore


class FakeIPTV:
    """Stands in for IPTVService; serves canned bodies and records requests."""

    def __init__(self, pages: dict[str, str] | None = None, guides: dict[str, bytes] | None = None, chunk: int = 7):
        self.pages = dict(pages or {})
        self.guides = dict(guides or {})
        self.chunk = chunk
        self.text_calls: list[tuple[str, str | None]] = []
        self.stream_calls: list[tuple[str, str | None]] = []
        self.gate: threading.Event | None = None
        self.entered = threading.Event()

    def fetch_text(self, url: str, user_agent: str | None = None) -> str:
        self.text_calls.append((url, user_agent))
        self.entered.set()
        if self.gate is not None:
            self.gate.wait(5)
        if url not in self.pages:
            raise requests.HTTPError(f"404 Client Error for url: {url}")
        return self.pages[url]

    def iter_bytes(self, url: str, user_agent: str | None = None, chunk_size: int = 0):
        self.stream_calls.append((url, user_agent))
        body = self.guides.get(url)
        if body is None:
            raise requests.ConnectionError(f"cannot reach {url}")
        for i in range(0, len(body), self.chunk):
            yield body[i : i + self.chunk]

    def close(self) -> None:
        pass


@pytest.fixture
def fake_iptv() -> FakeIPTV:
    return FakeIPTV()


@pytest.fixture
def store(tmp_path) -> SourceStore:
    return SourceStore(tmp_path / "sources.json")


@pytest.fixture
def source() -> SourceDescriptor:
    return SourceDescriptor(key="s1", name="Source 1", url="http://lists.example/s1.m3u")
