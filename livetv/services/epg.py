"""Streaming reader for XMLTV-style programme guides.

Guides can be far larger than memory, so the body is never parsed as an XML
tree. Byte chunks are decoded incrementally, split into lines, and every line
is passed through ``step``, a pure transition over a small ``EpgState``.
Only programmes whose channel is in the interest set are ever stored.
"""

from __future__ import annotations

import codecs
import logging
import re
import zlib
from contextlib import closing
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Iterator

from dateutil import parser as dtparser
from dateutil import tz

from livetv.models import ProgrammeEntry
from livetv.services.iptv import IPTVService
from livetv.settings import DEFAULT_EPG_CHUNK_SIZE


logger = logging.getLogger(__name__)

_GZIP_MAGIC = b"\x1f\x8b"

_CHANNEL_RE = re.compile(r"channel=\"([^\"]*)\"")
_START_RE = re.compile(r"start=\"([^\"]*)\"")
_STOP_RE = re.compile(r"stop=\"([^\"]*)\"")
_TITLE_RE = re.compile(r"<title(?:\s+[^>]*)?>(.*?)</title>")

EpgMap = dict[str, list[ProgrammeEntry]]


class EpgPhase(str, Enum):
    IDLE = "idle"
    OPEN = "open"
    SKIPPING = "skipping"


@dataclass(frozen=True)
class EpgState:
    phase: EpgPhase = EpgPhase.IDLE
    channel: str = ""
    start: str = ""
    end: str = ""


IDLE = EpgState()

Emitted = tuple[str, ProgrammeEntry]


def _attr(pattern: re.Pattern[str], line: str) -> str:
    m = pattern.search(line)
    return m.group(1) if m else ""


def _take_title(state: EpgState, line: str) -> tuple[EpgState, Emitted | None]:
    m = _TITLE_RE.search(line)
    if m is None:
        return state, None
    entry = ProgrammeEntry(start=state.start, end=state.end, title=m.group(1))
    return IDLE, (state.channel, entry)


def step(state: EpgState, line: str, interest: frozenset[str] | set[str]) -> tuple[EpgState, Emitted | None]:
    line = line.strip()
    if not line:
        return state, None

    if line.startswith("<programme"):
        channel = _attr(_CHANNEL_RE, line)
        start = _attr(_START_RE, line)
        end = _attr(_STOP_RE, line)
        if not (channel and start and end):
            return IDLE, None

        phase = EpgPhase.OPEN if channel in interest else EpgPhase.SKIPPING
        opened = EpgState(phase=phase, channel=channel, start=start, end=end)
        # single-line programme blocks carry their title inline
        if phase is EpgPhase.OPEN and "<title" in line:
            return _take_title(opened, line)
        return opened, None

    if line.startswith("<title"):
        if state.phase is not EpgPhase.OPEN:
            return state, None
        return _take_title(state, line)

    if line == "</programme>":
        return IDLE, None

    return state, None


def _inflate(inflater: zlib._Decompress, chunk: bytes) -> tuple[zlib._Decompress, bytes]:
    out = inflater.decompress(chunk)
    # concatenated gzip members each need a fresh decompressor
    while inflater.eof and inflater.unused_data[:2] == _GZIP_MAGIC:
        rest = inflater.unused_data
        inflater = zlib.decompressobj(wbits=zlib.MAX_WBITS | 16)
        out += inflater.decompress(rest)
    return inflater, out


def iter_text_lines(chunks: Iterable[bytes]) -> Iterator[str]:
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    inflater = None
    head: bytes | None = b""
    buffer = ""

    for chunk in chunks:
        if not chunk:
            continue
        if head is not None:
            # hold bytes back until the gzip magic can be checked
            head += chunk
            if len(head) < len(_GZIP_MAGIC):
                continue
            chunk, head = head, None
            if chunk.startswith(_GZIP_MAGIC):
                inflater = zlib.decompressobj(wbits=zlib.MAX_WBITS | 16)
        if inflater is not None:
            inflater, chunk = _inflate(inflater, chunk)

        buffer += decoder.decode(chunk)
        lines = buffer.split("\n")
        # last piece may be an incomplete line
        buffer = lines.pop()
        yield from lines

    if head:
        buffer += decoder.decode(head)
    tail = inflater.flush() if inflater is not None else b""
    buffer += decoder.decode(tail, final=True)
    if buffer:
        yield buffer


def parse_programmes(lines: Iterable[str], tvg_ids: Iterable[str]) -> EpgMap:
    interest = frozenset(t for t in tvg_ids if t)
    result: EpgMap = {}
    if not interest:
        return result

    state = IDLE
    for line in lines:
        state, emitted = step(state, line, interest)
        if emitted is not None:
            tvg_id, entry = emitted
            result.setdefault(tvg_id, []).append(entry)
    return result


def fetch_epg(
    iptv: IPTVService,
    epg_url: str,
    user_agent: str | None,
    tvg_ids: Iterable[str],
    chunk_size: int = DEFAULT_EPG_CHUNK_SIZE,
) -> EpgMap:
    interest = frozenset(t for t in tvg_ids if t)
    if not epg_url or not interest:
        return {}

    try:
        with closing(iptv.iter_bytes(epg_url, user_agent, chunk_size=chunk_size)) as chunks:
            epgs = parse_programmes(iter_text_lines(chunks), interest)
    except Exception as e:  # noqa: BLE001
        logger.warning(f"EPG unavailable from {epg_url}: {e}")
        return {}

    logger.info(f"EPG {epg_url}: {sum(len(v) for v in epgs.values())} programmes for {len(epgs)} channels")
    return epgs


def parse_epg_time(text: str) -> datetime | None:
    text = (text or "").strip()
    if not text:
        return None
    try:
        dt = dtparser.parse(text)
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz.UTC)
    return dt


def now_next(
    programmes: Iterable[ProgrammeEntry],
    at: datetime | None = None,
) -> tuple[ProgrammeEntry | None, ProgrammeEntry | None]:
    at = at or datetime.now(tz.UTC)
    if at.tzinfo is None:
        at = at.replace(tzinfo=tz.UTC)

    timed: list[tuple[datetime, datetime, ProgrammeEntry]] = []
    for p in programmes:
        start = parse_epg_time(p.start)
        end = parse_epg_time(p.end)
        if start is None or end is None:
            continue
        timed.append((start, end, p))
    timed.sort(key=lambda t: t[0])

    current: ProgrammeEntry | None = None
    upcoming: ProgrammeEntry | None = None
    for start, end, p in timed:
        if current is None and start <= at < end:
            current = p
        elif upcoming is None and start > at:
            upcoming = p
        if upcoming is not None:
            break
    return current, upcoming
