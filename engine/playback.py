"""
playback.py — Trace Playback Controller
========================================
The PlaybackController is the ONLY object the UI talks to while a run is
on screen.  It holds one Trace, a cursor into it, and at most one live
timer, and exposes play / pause / step / seek / speed.

State machine:
    IDLE      →  play()          →  PLAYING   (index 0 shown immediately)
    PLAYING   →  tick            →  PLAYING   (index + 1)
    PLAYING   →  last index      →  FINISHED  (timer cancelled)
    PLAYING   →  pause()         →  PAUSED
    PAUSED    →  play()          →  PLAYING   (continues from index)
    FINISHED  →  play()          →  PLAYING   (restarts at 0)
    any       →  reset()/load()  →  IDLE      (index -1)

Stepping and seeking only work when NOT playing.  The state after a step
is decided by where the cursor lands: -1 → IDLE, last → FINISHED,
anything else → PAUSED.

Stale ticks:
  Every timer is identified by its TimerHandle.  A tick whose handle is
  not the controller's live handle is dropped, so nothing can move the
  cursor after pause / reset / load / dispose even if a tick was already
  queued.

Calls that make no sense in the current state are silent no-ops.  Bad
speeds are programming errors and raise.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, Optional, Tuple

from grid import Coordinate
from algorithms.step import StepEvent, Trace
from engine.projection import EMPTY_PROJECTION, Projection, project
from engine.timers import PollingScheduler, TimerHandle

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------
class PlaybackStatus(Enum):
    IDLE     = "idle"
    PLAYING  = "playing"
    PAUSED   = "paused"
    FINISHED = "finished"


# ---------------------------------------------------------------------------
# Speed presets (milliseconds per event)
# ---------------------------------------------------------------------------
SPEED_PRESETS: Dict[str, int] = {
    "slow":   120,    # teaching mode
    "medium": 60,
    "fast":   30,
    "turbo":  10,
}

DEFAULT_SPEED_MS = 30


@dataclass(frozen=True)
class PlaybackState:
    current_index: int            = -1
    status:        PlaybackStatus = PlaybackStatus.IDLE
    speed_ms:      int            = DEFAULT_SPEED_MS

    def to_dict(self) -> dict:
        return {
            "current_index": self.current_index,
            "status":        self.status.value,
            "speed_ms":      self.speed_ms,
        }


def check_speed(speed_ms) -> int:
    """Return `speed_ms` unchanged, or raise ValueError if it is not a positive int."""
    if isinstance(speed_ms, bool) or not isinstance(speed_ms, int) or speed_ms <= 0:
        raise ValueError(f"speed_ms must be a positive integer, got {speed_ms!r}")
    return speed_ms


# ---------------------------------------------------------------------------
# PlaybackController
# ---------------------------------------------------------------------------
class PlaybackController:
    """
    Attributes:
        scheduler : Anything with call_every(ms, callback) -> TimerHandle.
                    Defaults to a PollingScheduler.
        on_change : Optional callback(controller) fired after every
                    index or status change.  The UI hooks its re-render here.
    """

    def __init__(
        self,
        scheduler=None,
        speed_ms: int = DEFAULT_SPEED_MS,
        on_change: Optional[Callable[["PlaybackController"], None]] = None,
    ):
        self.scheduler = scheduler if scheduler is not None else PollingScheduler()
        self.on_change: Optional[Callable[["PlaybackController"], None]] = on_change

        self._trace:    Optional[Trace]        = None
        self._index:    int                    = -1
        self._status:   PlaybackStatus         = PlaybackStatus.IDLE
        self._speed_ms: int                    = check_speed(speed_ms)
        self._handle:   Optional[TimerHandle]  = None
        self._disposed: bool                   = False

        # (index, projection) of the last projection asked for
        self._proj_cache: Tuple[int, Projection] = (-1, EMPTY_PROJECTION)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def load(self, trace: Trace) -> None:
        """Attach a trace and go back to IDLE."""
        if self._disposed:
            return
        self._cancel()
        self._trace      = trace
        self._proj_cache = (-1, EMPTY_PROJECTION)
        logger.debug("loaded %r", trace)
        self._set(-1, PlaybackStatus.IDLE, force=True)

    def reset(self) -> None:
        if self._disposed:
            return
        self._cancel()
        self._set(-1, PlaybackStatus.IDLE)

    def dispose(self) -> None:
        """Cancel any timer now; every later call is a no-op."""
        if self._disposed:
            return
        self._cancel()
        self._disposed = True
        self.on_change = None
        logger.debug("disposed controller")

    def __enter__(self) -> "PlaybackController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    # ------------------------------------------------------------------
    # Play / Pause
    # ------------------------------------------------------------------
    def play(self, speed_ms: Optional[int] = None) -> None:
        if self._disposed or self._trace is None:
            return
        if speed_ms is not None:
            self._speed_ms = check_speed(speed_ms)
        self._cancel()

        index = self._index
        if self._status in (PlaybackStatus.IDLE, PlaybackStatus.FINISHED):
            index = 0

        if index >= self._last:
            self._set(self._last, PlaybackStatus.FINISHED)
            return

        self._handle = self.scheduler.call_every(self._speed_ms, self._tick)
        self._set(index, PlaybackStatus.PLAYING, force=True)

    def pause(self) -> None:
        if self._disposed or self._status is not PlaybackStatus.PLAYING:
            return
        self._cancel()
        self._set(self._index, PlaybackStatus.PAUSED)

    def toggle_play(self) -> None:
        if self._status is PlaybackStatus.PLAYING:
            self.pause()
        else:
            self.play()

    # ------------------------------------------------------------------
    # Navigation  (ignored while playing)
    # ------------------------------------------------------------------
    def step_forward(self) -> None:
        if self._can_navigate():
            self._goto(self._index + 1)

    def step_back(self) -> None:
        if self._can_navigate():
            self._goto(self._index - 1)

    def seek(self, index: int) -> None:
        if self._can_navigate():
            self._goto(int(index))

    def rewind(self) -> None:
        """Stop playback and show the first event."""
        if self._disposed or self._trace is None:
            return
        self._cancel()
        self._goto(0)

    def jump_to_end(self) -> None:
        """Stop playback and show the whole run."""
        if self._disposed or self._trace is None:
            return
        self._cancel()
        self._goto(self._last)

    # ------------------------------------------------------------------
    # Speed
    # ------------------------------------------------------------------
    def set_speed(self, speed_ms: int) -> None:
        """Change the tick interval; a running timer is re-armed at the new rate."""
        if self._disposed:
            return
        self._speed_ms = check_speed(speed_ms)
        if self._status is PlaybackStatus.PLAYING:
            self._cancel()
            self._handle = self.scheduler.call_every(self._speed_ms, self._tick)
            self._notify()

    def set_speed_preset(self, preset: str) -> None:
        self.set_speed(SPEED_PRESETS[preset])

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> PlaybackState:
        return PlaybackState(self._index, self._status, self._speed_ms)

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def status(self) -> PlaybackStatus:
        return self._status

    @property
    def speed_ms(self) -> int:
        return self._speed_ms

    @property
    def trace(self) -> Optional[Trace]:
        return self._trace

    @property
    def total_events(self) -> int:
        return len(self._trace) if self._trace is not None else 0

    @property
    def is_playing(self) -> bool:
        return self._status is PlaybackStatus.PLAYING

    @property
    def is_finished(self) -> bool:
        return self._status is PlaybackStatus.FINISHED

    @property
    def disposed(self) -> bool:
        return self._disposed

    def current_event(self) -> Optional[StepEvent]:
        if self._trace is None or self._index < 0:
            return None
        return self._trace[self._index]

    def current_cell(self) -> Optional[Coordinate]:
        """The cell to highlight (and to pitch a tone on), None for terminals."""
        ev = self.current_event()
        return ev.cell if ev is not None else None

    def projection(self) -> Projection:
        cached_index, cached = self._proj_cache
        if cached_index == self._index and cached.index == self._index:
            return cached
        proj = project(self._trace, self._index)
        self._proj_cache = (self._index, proj)
        return proj

    def cumulative_visited(self) -> FrozenSet[Coordinate]:
        return self.projection().all_visited

    def cumulative_explored(self) -> FrozenSet[Coordinate]:
        return self.projection().explored

    def cumulative_path(self) -> Tuple[Coordinate, ...]:
        return self.projection().path

    def outcome(self) -> Optional[str]:
        return self.projection().outcome

    def to_dict(self) -> dict:
        data = self.state.to_dict()
        data["total_events"] = self.total_events
        data["algorithm"]    = self._trace.algorithm if self._trace is not None else None
        ev = self.current_event()
        data["current_event"] = ev.to_dict() if ev is not None else None
        return data

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    @property
    def _last(self) -> int:
        return len(self._trace) - 1 if self._trace is not None else -1

    def _can_navigate(self) -> bool:
        return (
            not self._disposed
            and self._trace is not None
            and self._status is not PlaybackStatus.PLAYING
        )

    def _tick(self, handle: TimerHandle) -> None:
        if self._disposed or handle is not self._handle:
            logger.debug("dropped stale tick from %r", handle)
            return
        index = self._index + 1
        if index >= self._last:
            self._cancel()
            self._set(self._last, PlaybackStatus.FINISHED)
        else:
            self._set(index, PlaybackStatus.PLAYING)

    def _goto(self, target: int) -> None:
        index = max(-1, min(target, self._last))
        if index == -1:
            status = PlaybackStatus.IDLE
        elif index == self._last:
            status = PlaybackStatus.FINISHED
        else:
            status = PlaybackStatus.PAUSED
        self._set(index, status)

    def _set(self, index: int, status: PlaybackStatus, force: bool = False) -> None:
        if not force and index == self._index and status is self._status:
            return
        if status is not self._status:
            logger.debug("playback %s -> %s at %d", self._status.value, status.value, index)
        self._index  = index
        self._status = status
        self._notify()

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    def __repr__(self) -> str:
        return (
            f"PlaybackController({self._status.value}, "
            f"{self._index}/{self._last}, {self._speed_ms}ms)"
        )
