from __future__ import annotations

import re

from livetv.models import UNGROUPED, Channel, PlaylistResult


_ATTR_RE = re.compile(r"(\w[\w-]*)=\"([^\"]*)\"")
_EPG_URL_RE = re.compile(r"(?:x-tvg-url|url-tvg)=\"([^\"]*)\"")


def _attrs(line: str) -> dict[str, str]:
    out: dict[str, str] = {}
    for k, v in _ATTR_RE.findall(line):
        out.setdefault(k, v)
    return out


def _title(line: str) -> str:
    if "," not in line:
        return ""
    return line.rsplit(",", 1)[1].strip()


def parse_m3u(source_key: str, text: str) -> PlaylistResult:
    lines = [ln.strip("\ufeff").strip() for ln in text.split("\n")]
    result = PlaylistResult()

    pending: dict[str, str] | None = None
    pending_name = ""
    index = 0

    for ln in lines:
        if not ln:
            continue

        if ln.startswith("#EXTM3U"):
            m = _EPG_URL_RE.search(ln)
            result.epg_url = m.group(1).split(",")[0].strip() if m else ""
            continue

        if ln.startswith("#EXTINF:"):
            if pending is not None:
                result.dropped += 1
            pending = _attrs(ln)
            pending_name = _title(ln) or pending.get("tvg-name", "")
            continue

        if ln.startswith("#"):
            continue

        if pending is None:
            continue

        url = ln
        if pending_name and url:
            result.channels.append(
                Channel(
                    id=f"{source_key}-{index}",
                    tvg_id=pending.get("tvg-id", ""),
                    name=pending_name,
                    logo=pending.get("tvg-logo", ""),
                    group=pending.get("group-title", UNGROUPED),
                    url=url,
                )
            )
            index += 1
        else:
            result.dropped += 1
        pending = None
        pending_name = ""

    if pending is not None:
        result.dropped += 1

    return result
