from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import Any


UNGROUPED = "无分组"

_CAMEL_KEYS = {
    "userAgent": "user_agent",
    "ua": "user_agent",
    "epgUrl": "epg_url",
    "epg": "epg_url",
    "from": "origin",
    "channelCount": "channel_count",
    "channelNumber": "channel_count",
}


@dataclass
class SourceDescriptor:
    key: str
    name: str
    url: str
    user_agent: str | None = None
    epg_url: str | None = None
    origin: str = "config"
    channel_count: int | None = None
    disabled: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SourceDescriptor:
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for k, v in data.items():
            k = _CAMEL_KEYS.get(k, k)
            if k in known and k not in values:
                values[k] = v
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Channel:
    id: str
    tvg_id: str
    name: str
    logo: str
    group: str
    url: str


@dataclass(frozen=True)
class ProgrammeEntry:
    start: str
    end: str
    title: str


@dataclass
class PlaylistResult:
    epg_url: str = ""
    channels: list[Channel] = field(default_factory=list)
    dropped: int = 0


@dataclass(frozen=True)
class LiveChannels:
    channel_count: int
    channels: list[Channel]
    epg_url: str
    epgs: dict[str, list[ProgrammeEntry]]

    def groups(self) -> list[str]:
        seen: dict[str, None] = {}
        for ch in self.channels:
            seen.setdefault(ch.group, None)
        return list(seen)

    def programmes(self, tvg_id: str) -> list[ProgrammeEntry]:
        if not tvg_id:
            return []
        return self.epgs.get(tvg_id, [])

    def now_next(
        self,
        tvg_id: str,
        at: datetime | None = None,
    ) -> tuple[ProgrammeEntry | None, ProgrammeEntry | None]:
        from livetv.services.epg import now_next

        return now_next(self.programmes(tvg_id), at=at)
