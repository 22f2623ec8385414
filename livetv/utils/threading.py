from __future__ import annotations

import logging
import threading
from typing import Callable


logger = logging.getLogger(__name__)


def run_in_thread(
    fn: Callable[[], None],
    on_error: Callable[[Exception], None] | None = None,
    name: str | None = None,
) -> threading.Thread:
    def _runner():
        try:
            fn()
        except Exception as e:  # noqa: BLE001
            if on_error:
                on_error(e)
            else:
                logger.error(f"Background task {name or fn!r} failed: {e}", exc_info=True)

    t = threading.Thread(target=_runner, name=name, daemon=True)
    t.start()
    return t
