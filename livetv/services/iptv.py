from __future__ import annotations

from typing import Iterator

import requests

from livetv.settings import DEFAULT_EPG_CHUNK_SIZE, DEFAULT_USER_AGENT


class IPTVService:
    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_s: float | None = None,
        session: requests.Session | None = None,
    ):
        self.user_agent = user_agent
        self.timeout_s = timeout_s
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def _headers(self, user_agent: str | None) -> dict[str, str]:
        return {"User-Agent": user_agent or self.user_agent}

    def fetch_text(self, url: str, user_agent: str | None = None) -> str:
        r = self.session.get(
            url,
            headers=self._headers(user_agent),
            timeout=self.timeout_s,
            allow_redirects=True,
        )
        r.raise_for_status()
        r.encoding = r.encoding or "utf-8"
        return r.text

    def iter_bytes(
        self,
        url: str,
        user_agent: str | None = None,
        chunk_size: int = DEFAULT_EPG_CHUNK_SIZE,
    ) -> Iterator[bytes]:
        with self.session.get(
            url,
            headers=self._headers(user_agent),
            timeout=self.timeout_s,
            stream=True,
            allow_redirects=True,
        ) as r:
            r.raise_for_status()
            for chunk in r.iter_content(chunk_size=chunk_size):
                if chunk:
                    yield chunk

    def close(self) -> None:
        self.session.close()
