"""
Tick schedulers driving the layout simulation.

A scheduler repeatedly invokes one callback ("advance one tick") until it is
cancelled. Two implementations are provided:

- TimerScheduler: real-time ticking through a NiceGUI ui.timer (must be
  created inside a page context)
- ManualScheduler: explicit stepping for tests and headless layout runs

Both guarantee that once cancel() returns, the callback is never invoked
again.
"""

import logging
from typing import Callable, Optional, Protocol

from nicegui import ui

from evidence_map.constants import TICK_INTERVAL

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class TickScheduler(Protocol):
    @property
    def active(self) -> bool: ...

    def start(self, callback: TickCallback) -> None: ...

    def cancel(self) -> None: ...


class ManualScheduler:
    """Scheduler that only ticks when advance() is called."""

    def __init__(self):
        self._callback: Optional[TickCallback] = None
        self.ticks_run = 0

    @property
    def active(self) -> bool:
        return self._callback is not None

    def start(self, callback: TickCallback) -> None:
        self._callback = callback

    def cancel(self) -> None:
        self._callback = None

    def advance(self, ticks: int = 1) -> int:
        """Run up to `ticks` callbacks; stops early if a callback cancels the scheduler."""
        ran = 0
        for _ in range(ticks):
            callback = self._callback
            if callback is None:
                break
            callback()
            ran += 1
        self.ticks_run += ran
        return ran


class TimerScheduler:
    """Scheduler backed by a repeating NiceGUI timer."""

    def __init__(self, interval: float = TICK_INTERVAL):
        self.interval = interval
        self._timer = None

    @property
    def active(self) -> bool:
        return self._timer is not None

    def start(self, callback: TickCallback) -> None:
        if self._timer is not None:
            self.cancel()
        self._timer = ui.timer(self.interval, callback)

    def cancel(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            try:
                timer.cancel()
            except RuntimeError as e:
                # The page (and its timer) may already be gone
                logger.debug(f"Timer cancel failed: {e}")
