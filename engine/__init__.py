"""
engine/
-------
Playback & recording layer.

    from engine import PlaybackController, Recorder, compare
"""

from engine.timers     import TimerHandle, PollingScheduler, AsyncioScheduler
from engine.projection import Projection, project
from engine.playback   import (
    PlaybackController,
    PlaybackState,
    PlaybackStatus,
    SPEED_PRESETS,
    DEFAULT_SPEED_MS,
    check_speed,
)
from engine.recorder   import Recorder, RunMetrics, ComparisonResult, compare

__all__ = [
    "TimerHandle",
    "PollingScheduler",
    "AsyncioScheduler",
    "Projection",
    "project",
    "PlaybackController",
    "PlaybackState",
    "PlaybackStatus",
    "SPEED_PRESETS",
    "DEFAULT_SPEED_MS",
    "check_speed",
    "Recorder",
    "RunMetrics",
    "ComparisonResult",
    "compare",
]
