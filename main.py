from __future__ import annotations

import argparse
import sys
import traceback
from datetime import datetime

from livetv.log import setup_logging
from livetv.services.iptv import IPTVService
from livetv.services.live import LiveChannelCache
from livetv.services.storage import SourceStore
from livetv.settings import Settings


SETTINGS = Settings.from_env()


def _write_crash_log(text: str) -> str | None:
    try:
        base = SETTINGS.crash_dir
        base.mkdir(parents=True, exist_ok=True)
        p = base / f"livetv_crash_{datetime.now().strftime('%Y%m%d_%H%M%S')}.txt"
        p.write_text(text, encoding="utf-8")
        return str(p)
    except Exception:  # noqa: BLE001
        return None


def _excepthook(exc_type, exc, tb):
    text = "".join(traceback.format_exception(exc_type, exc, tb))
    _write_crash_log(text)
    sys.__excepthook__(exc_type, exc, tb)


def build_cache(settings: Settings) -> LiveChannelCache:
    iptv = IPTVService(user_agent=settings.user_agent, timeout_s=settings.http_timeout)
    return LiveChannelCache(
        SourceStore(settings.sources_file),
        iptv=iptv,
        user_agent=settings.user_agent,
        epg_chunk_size=settings.epg_chunk_size,
    )


def cmd_sources(cache: LiveChannelCache, _args: argparse.Namespace) -> int:
    for s in cache.store.load_sources():
        flag = " (disabled)" if s.disabled else ""
        count = "?" if s.channel_count is None else s.channel_count
        print(f"{s.key}\t{s.name}\t{count} channels{flag}\t{s.url}")
    return 0


def cmd_show(cache: LiveChannelCache, args: argparse.Namespace) -> int:
    live = cache.get(args.key)
    if live is None:
        print(f"No channels available for '{args.key}'", file=sys.stderr)
        return 1

    for group in live.groups():
        print(f"[{group}]")
        for ch in live.channels:
            if ch.group != group:
                continue
            now, upcoming = live.now_next(ch.tvg_id)
            line = f"  {ch.id}  {ch.name}"
            if now:
                line += f"  | now: {now.title}"
            if upcoming:
                line += f"  | next: {upcoming.title}"
            print(line)
    return 0


def cmd_refresh(cache: LiveChannelCache, args: argparse.Namespace) -> int:
    source = cache.store.get_source(args.key)
    if source is None:
        print(f"Unknown source '{args.key}'", file=sys.stderr)
        return 1
    count = cache.refresh(source)
    if count:
        source.channel_count = count
        cache.store.save_source(source)
    print(count)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="livetv")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("sources").set_defaults(func=cmd_sources)
    p_show = sub.add_parser("show")
    p_show.add_argument("key")
    p_show.set_defaults(func=cmd_show)
    p_refresh = sub.add_parser("refresh")
    p_refresh.add_argument("key")
    p_refresh.set_defaults(func=cmd_refresh)
    args = parser.parse_args(argv)

    setup_logging(SETTINGS.log_level, SETTINGS.log_file)
    cache = build_cache(SETTINGS)
    try:
        return args.func(cache, args)
    finally:
        cache.iptv.close()


if __name__ == "__main__":
    sys.excepthook = _excepthook
    sys.exit(main())
