from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse


_HTTP_RE = re.compile(r"^https?://", re.IGNORECASE)
_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


def is_http_url(text: str) -> bool:
    return bool(_HTTP_RE.match(text or ""))


def is_absolute_url(text: str) -> bool:
    return bool(_SCHEME_RE.match(text or ""))


def resolve_url(base: str, relative: str) -> str:
    if is_http_url(relative):
        return relative
    if not base:
        return relative

    if relative.startswith("//"):
        scheme = urlparse(base).scheme or "http"
        return f"{scheme}:{relative}"

    try:
        return urljoin(base, relative)
    except ValueError:
        return _fallback_resolve(base, relative)


def _fallback_resolve(base: str, relative: str) -> str:
    if not base.endswith("/"):
        base = base[: base.rfind("/") + 1]
    if relative.startswith("./"):
        relative = relative[2:]
    return base + relative

