from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from urllib.parse import urlparse

from livetv.models import PlaylistResult
from livetv.services.json_playlist import parse_json_playlist
from livetv.services.m3u import parse_m3u
from livetv.services.plain_text import parse_plain_text
from livetv.services.urls import is_absolute_url, resolve_url


logger = logging.getLogger(__name__)

_HEAD_SIZE = 100


class PlaylistFormat(str, Enum):
    M3U = "m3u"
    JSON = "json"
    TEXT = "text"


def _url_endings(source_url: str) -> tuple[str, ...]:
    lower = (source_url or "").strip().lower()
    try:
        path = urlparse(lower).path
    except ValueError:
        path = ""
    return (lower, path) if path and path != lower else (lower,)


def _url_ends_with(source_url: str, *suffixes: str) -> bool:
    return any(u.endswith(suffixes) for u in _url_endings(source_url))


def detect_format(source_url: str, raw: str) -> PlaylistFormat:
    text = (raw or "").lstrip("\ufeff").strip()
    head = text[:_HEAD_SIZE]

    if head.startswith("#EXTM3U") or _url_ends_with(source_url, ".m3u", ".m3u8"):
        return PlaylistFormat.M3U

    looks_json = (head.startswith("{") and text.endswith("}")) or (
        head.startswith("[") and text.endswith("]")
    )
    if looks_json or _url_ends_with(source_url, ".json"):
        return PlaylistFormat.JSON

    return PlaylistFormat.TEXT


def _absolutize(result: PlaylistResult, source_url: str) -> PlaylistResult:
    if not source_url:
        return result
    channels = []
    for ch in result.channels:
        url = ch.url if is_absolute_url(ch.url) else resolve_url(source_url, ch.url)
        logo = ch.logo
        if logo and not is_absolute_url(logo):
            logo = resolve_url(source_url, logo)
        channels.append(ch if (url, logo) == (ch.url, ch.logo) else replace(ch, url=url, logo=logo))
    result.channels = channels
    return result


def parse_playlist(source_key: str, source_url: str, raw: str) -> PlaylistResult:
    fmt = detect_format(source_url, raw)
    logger.debug(f"[{source_key}] detected playlist format: {fmt.value}")

    if fmt is PlaylistFormat.M3U:
        result = _absolutize(parse_m3u(source_key, raw), source_url)
    else:
        result = PlaylistResult()
        if fmt is PlaylistFormat.JSON:
            result = parse_json_playlist(source_key, raw)
            if not result.channels:
                logger.debug(f"[{source_key}] JSON yielded no channels, falling back to plain text")
        if not result.channels:
            result = parse_plain_text(source_key, raw)

    if result.dropped:
        logger.debug(f"[{source_key}] dropped {result.dropped} malformed playlist records")
    return result
