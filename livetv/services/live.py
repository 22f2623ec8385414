from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Callable

from livetv.models import LiveChannels, SourceDescriptor
from livetv.services.epg import fetch_epg
from livetv.services.iptv import IPTVService
from livetv.services.playlist import parse_playlist
from livetv.services.storage import SourceStore
from livetv.settings import DEFAULT_EPG_CHUNK_SIZE, DEFAULT_USER_AGENT
from livetv.utils.threading import run_in_thread


logger = logging.getLogger(__name__)


class LiveChannelCache:
    def __init__(
        self,
        store: SourceStore,
        iptv: IPTVService | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        epg_chunk_size: int = DEFAULT_EPG_CHUNK_SIZE,
    ):
        self.store = store
        self.iptv = iptv or IPTVService(user_agent=user_agent)
        self.user_agent = user_agent
        self.epg_chunk_size = epg_chunk_size
        self._entries: dict[str, LiveChannels] = {}
        self._inflight: dict[str, Future] = {}
        self._lock = threading.Lock()

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def peek(self, key: str) -> LiveChannels | None:
        with self._lock:
            return self._entries.get(key)

    def get(self, key: str) -> LiveChannels | None:
        cached = self.peek(key)
        if cached is not None:
            return cached if cached.channel_count else None

        source = self.store.get_source(key)
        if source is None:
            return None

        count = self.refresh(source)
        if count == 0:
            return None

        source.channel_count = count
        self.store.save_source(source)
        live = self.peek(key)
        return live if live is not None and live.channel_count else None

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def refresh(self, source: SourceDescriptor) -> int:
        with self._lock:
            pending = self._inflight.get(source.key)
            owner = pending is None
            if owner:
                pending = Future()
                self._inflight[source.key] = pending

        if not owner:
            logger.debug(f"[{source.key}] joining in-flight refresh")
            return pending.result()

        # the slot is cleared before waiters wake, so a later call never joins a finished refresh
        try:
            count = self._refresh(source)
        except BaseException as e:
            self._release(source.key)
            pending.set_exception(e)
            raise
        self._release(source.key)
        pending.set_result(count)
        return count

    def _release(self, key: str) -> None:
        with self._lock:
            self._inflight.pop(key, None)

    def refresh_in_background(
        self,
        source: SourceDescriptor,
        on_error: Callable[[Exception], None] | None = None,
    ) -> threading.Thread:
        return run_in_thread(lambda: self.refresh(source), on_error=on_error, name=f"refresh-{source.key}")

    def _refresh(self, source: SourceDescriptor) -> int:
        self.delete(source.key)

        ua = source.user_agent or self.user_agent
        logger.info(f"[{source.key}] refreshing playlist {source.url}")
        text = self.iptv.fetch_text(source.url, user_agent=ua)

        result = parse_playlist(source.key, source.url, text)
        epg_url = source.epg_url or result.epg_url
        tvg_ids = list(dict.fromkeys(ch.tvg_id for ch in result.channels if ch.tvg_id))
        epgs = fetch_epg(self.iptv, epg_url, ua, tvg_ids, chunk_size=self.epg_chunk_size)

        live = LiveChannels(
            channel_count=len(result.channels),
            channels=result.channels,
            epg_url=epg_url,
            epgs=epgs,
        )
        with self._lock:
            self._entries[source.key] = live

        logger.info(f"[{source.key}] {live.channel_count} channels, EPG for {len(epgs)} of {len(tvg_ids)} ids")
        return live.channel_count
