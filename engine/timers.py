"""
timers.py — Repeating Timers for Playback
==========================================
A PlaybackController never sleeps.  It asks a scheduler for a repeating
timer and gets back a TimerHandle; every tick calls back with that same
handle so the controller can tell a live tick from a stale one.

Two schedulers share the same small surface:

    handle = scheduler.call_every(interval_ms, callback)   # callback(handle)
    handle.cancel()
    handle.active

  • PollingScheduler – nothing runs on its own.  The owner calls
                       poll() (the web app does it on every state
                       request) and every tick that came due since the
                       last poll fires, oldest first.  The clock is
                       injectable so tests can move time by hand.
  • AsyncioScheduler – ticks are driven by loop.call_later on a
                       running asyncio event loop.
"""

import asyncio
import logging
import threading
import time
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

TickCallback = Callable[["TimerHandle"], None]


# ---------------------------------------------------------------------------
# TimerHandle
# ---------------------------------------------------------------------------
class TimerHandle:
    """
    Attributes:
        interval_ms : Milliseconds between ticks.
        callback    : Called as callback(handle) on every tick.
        next_due    : Clock reading of the next tick (PollingScheduler only).
    """

    def __init__(self, interval_ms: int, callback: TickCallback):
        self.interval_ms: int                      = interval_ms
        self.callback:    TickCallback             = callback
        self.next_due:    float                    = 0.0
        self._active:     bool                     = True
        self._on_cancel:  Optional[Callable[[], None]] = None

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Stop the timer.  Safe to call more than once."""
        if not self._active:
            return
        self._active = False
        if self._on_cancel is not None:
            self._on_cancel()
            self._on_cancel = None

    def __repr__(self) -> str:
        state = "active" if self._active else "cancelled"
        return f"TimerHandle(every {self.interval_ms}ms, {state})"


# ---------------------------------------------------------------------------
# PollingScheduler
# ---------------------------------------------------------------------------
class PollingScheduler:
    """
    Usage:
        sched = PollingScheduler()
        handle = sched.call_every(30, on_tick)
        ...
        sched.poll()          # fires whatever came due

    Safe to share between threads: call_every, poll and pending hold
    one re-entrant lock, so a tick fires exactly once and a callback
    may schedule or cancel timers from inside poll().
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock:   Callable[[], float] = clock
        self._handles: List[TimerHandle]   = []
        self._lock:    threading.RLock     = threading.RLock()

    def now(self) -> float:
        return self._clock()

    def call_every(self, interval_ms: int, callback: TickCallback) -> TimerHandle:
        handle = TimerHandle(interval_ms, callback)
        with self._lock:
            handle.next_due = self._clock() + interval_ms / 1000.0
            self._handles.append(handle)
        logger.debug("scheduled %r", handle)
        return handle

    def poll(self, now: Optional[float] = None) -> int:
        """
        Fire every tick due at or before `now` (default: the clock) in
        due-time order.  Returns the number of ticks fired.
        """
        with self._lock:
            if now is None:
                now = self._clock()
            fired = 0
            while True:
                self._handles[:] = [h for h in self._handles if h.active]
                due = [h for h in self._handles if h.next_due <= now]
                if not due:
                    return fired
                handle = min(due, key=lambda h: h.next_due)
                handle.next_due += handle.interval_ms / 1000.0
                handle.callback(handle)
                fired += 1

    @property
    def pending(self) -> int:
        """Number of timers still active."""
        with self._lock:
            return sum(1 for h in self._handles if h.active)


# ---------------------------------------------------------------------------
# AsyncioScheduler
# ---------------------------------------------------------------------------
class AsyncioScheduler:
    """
    Must be used from inside a running event loop (or given one).

        async def main():
            ctl = PlaybackController(scheduler=AsyncioScheduler())
            ...
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_every(self, interval_ms: int, callback: TickCallback) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        handle = TimerHandle(interval_ms, callback)
        self._arm(loop, handle)
        logger.debug("scheduled %r on %r", handle, loop)
        return handle

    def _arm(self, loop: asyncio.AbstractEventLoop, handle: TimerHandle) -> None:
        timer = loop.call_later(handle.interval_ms / 1000.0, self._fire, loop, handle)
        handle._on_cancel = timer.cancel

    def _fire(self, loop: asyncio.AbstractEventLoop, handle: TimerHandle) -> None:
        if not handle.active:
            return
        handle.callback(handle)
        # the callback may have cancelled its own timer
        if handle.active:
            self._arm(loop, handle)
