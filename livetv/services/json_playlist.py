from __future__ import annotations

import json
from typing import Any

from livetv.models import UNGROUPED, Channel, PlaylistResult
from livetv.services.urls import is_http_url


# accepted aliases per field, tried in order
TVG_ID_KEYS = ("tvgId", "tvg_id", "id", "name")
NAME_KEYS = ("name", "title")
LOGO_KEYS = ("logo",)
GROUP_KEYS = ("group", "category")
URL_KEYS = ("url", "link")
EPG_URL_KEYS = ("tvgUrl", "epg", "url-tvg", "x-tvg-url")


def _first(obj: dict[str, Any], keys: tuple[str, ...], default: str = "") -> str:
    for k in keys:
        v = obj.get(k)
        if not v or isinstance(v, (dict, list)):
            continue
        if isinstance(v, bool):
            return "true"
        if isinstance(v, float) and v.is_integer():
            return str(int(v))
        return str(v)
    return default


def _channel(source_key: str, index: int, item: Any) -> Channel | None:
    if not isinstance(item, dict):
        return None

    name = _first(item, NAME_KEYS)
    url = _first(item, URL_KEYS)
    if not name or not is_http_url(url):
        return None

    return Channel(
        id=f"{source_key}-{index}",
        tvg_id=_first(item, TVG_ID_KEYS),
        name=name,
        logo=_first(item, LOGO_KEYS),
        group=_first(item, GROUP_KEYS, UNGROUPED),
        url=url,
    )


def parse_json_playlist(source_key: str, text: str) -> PlaylistResult:
    try:
        obj = json.loads(text.lstrip("\ufeff"))
    except (ValueError, RecursionError):
        return PlaylistResult()

    if isinstance(obj, list):
        items = obj
    elif isinstance(obj, dict) and isinstance(obj.get("channels"), list):
        items = obj["channels"]
    else:
        return PlaylistResult()

    result = PlaylistResult()
    if isinstance(obj, dict):
        for k in EPG_URL_KEYS:
            v = obj.get(k)
            if isinstance(v, str) and v:
                result.epg_url = v
                break

    for item in items:
        ch = _channel(source_key, len(result.channels), item)
        if ch is None:
            result.dropped += 1
            continue
        result.channels.append(ch)

    return result
