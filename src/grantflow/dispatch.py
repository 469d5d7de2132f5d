# Callback dispatch - runs authorization callbacks in the host's chosen context.
# Created: 2026-02-12

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Protocol


class Dispatcher(Protocol):
    """Runs completion callbacks.

    A flow hands every ``on_authorize`` / ``on_failure`` /
    ``after_authorize_or_failure`` call to one dispatcher, so callback code
    always runs in the same execution context.
    """

    def dispatch(self, callback: Callable[[], None]) -> None: ...


class InlineDispatcher:
    """Calls the callback right away in whatever context completed the attempt."""

    def dispatch(self, callback: Callable[[], None]) -> None:
        callback()


class LoopDispatcher:
    """Delivers callbacks on one event loop (usually the UI/main loop).

    Inside that loop the callback runs immediately; from anywhere else it is
    queued on the loop with ``call_soon_threadsafe``.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self.loop = loop or asyncio.get_running_loop()

    def dispatch(self, callback: Callable[[], None]) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self.loop:
            callback()
        else:
            self.loop.call_soon_threadsafe(callback)
