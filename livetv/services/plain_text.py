from __future__ import annotations

import re

from livetv.models import UNGROUPED, Channel, PlaylistResult
from livetv.services.urls import is_http_url


_WS_RE = re.compile(r"\s+")


def derive_tvg_id(name: str) -> str:
    return _WS_RE.sub("", name).lower()


def _split_line(line: str) -> tuple[str, str, str]:
    parts = [p.strip() for p in line.split("#")]
    if len(parts) == 3:
        return parts[0], parts[1], parts[2]
    if len(parts) == 2:
        return UNGROUPED, parts[0], parts[1]

    parts = [p.strip() for p in line.split(",")]
    if len(parts) >= 2:
        # the url may itself contain commas
        return UNGROUPED, parts[0], ",".join(parts[1:])
    return UNGROUPED, "", ""


def parse_plain_text(source_key: str, text: str) -> PlaylistResult:
    result = PlaylistResult()

    for raw in re.split(r"\r?\n", text):
        line = raw.strip("\ufeff").strip()
        if not line or line.startswith("#"):
            continue

        group, name, url = _split_line(line)
        if not name or not url or not is_http_url(url):
            result.dropped += 1
            continue

        result.channels.append(
            Channel(
                id=f"{source_key}-{len(result.channels)}",
                tvg_id=derive_tvg_id(name),
                name=name,
                logo="",
                group=group,
                url=url,
            )
        )

    return result
