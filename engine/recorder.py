"""
recorder.py — Run Recorder & Analytics
========================================
Runs one search to completion on a grid, keeps the Trace, and computes
the analytics the UI needs for the Analytics panel and Comparison Mode.

Usage:
    rec = Recorder()
    rec.start(algo_key="astar", grid=g)          # endpoints default to grid.start / grid.end
    metrics = rec.run_to_completion()            # the analytics card
    ctl = rec.playback()                         # PlaybackController loaded with the trace
    rec.export()                                 # serialisable snapshot

Comparison Mode:
    The UI holds two Recorders (one per algo), runs both on the SAME
    grid, then calls compare(rec1, rec2) → ComparisonResult.
"""

import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple

from grid import CoordLike, GridModel
from algorithms import AlgoInfo, UnknownAlgorithm, get_algorithm, search
from algorithms.step import Trace
from engine.playback import PlaybackController

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metrics dataclass: what the Analytics panel renders
# ---------------------------------------------------------------------------
@dataclass
class RunMetrics:
    algo_key:       str                          = ""
    algo_label:     str                          = ""
    start:          Optional[Tuple[int, int]]    = None
    end:            Optional[Tuple[int, int]]    = None
    cells_visited:  int                          = 0     # settled, both frontiers counted
    cells_explored: int                          = 0     # ever put on a frontier
    path_length:    int                          = 0     # number of moves on the final path
    path_cost:      float                        = 0.0   # sum of entry costs along the path
    total_events:   int                          = 0
    wall_time_ms:   float                        = 0.0   # wall-clock time to run to completion
    found:          bool                         = False
    heuristic:      str                          = ""    # for A* / Greedy

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["start"] = list(self.start) if self.start is not None else None
        data["end"]   = list(self.end)   if self.end   is not None else None
        return data


# ---------------------------------------------------------------------------
# ComparisonResult: side-by-side analytics
# ---------------------------------------------------------------------------
@dataclass
class ComparisonResult:
    left:  RunMetrics = field(default_factory=RunMetrics)
    right: RunMetrics = field(default_factory=RunMetrics)
    # derived: a label, or "tie"
    winner_visited:  str = ""   # which algo settled fewer cells
    winner_explored: str = ""   # which algo touched fewer cells
    winner_path:     str = ""   # which algo found the shorter route

    def to_dict(self) -> Dict[str, Any]:
        return {
            "left":            self.left.to_dict(),
            "right":           self.right.to_dict(),
            "winner_visited":  self.winner_visited,
            "winner_explored": self.winner_explored,
            "winner_path":     self.winner_path,
        }


# ---------------------------------------------------------------------------
# Recorder
# ---------------------------------------------------------------------------
class Recorder:
    """
    Attributes:
        trace   : The Trace of the run (available after run_to_completion).
        metrics : Computed RunMetrics (available after run_to_completion).
    """

    def __init__(self):
        self.trace:   Optional[Trace]      = None
        self.metrics: Optional[RunMetrics] = None

        self._algo_info: Optional[AlgoInfo]  = None
        self._grid:      Optional[GridModel] = None
        self._start:     Optional[CoordLike] = None
        self._end:       Optional[CoordLike] = None
        self._heuristic: str                 = ""

    # ------------------------------------------------------------------
    # Setup & run
    # ------------------------------------------------------------------
    def start(
        self,
        algo_key: str,
        grid: GridModel,
        start: Optional[CoordLike] = None,
        end: Optional[CoordLike] = None,
        heuristic: str = "manhattan",
    ) -> None:
        """Pick the algorithm and grid for this run."""
        info = get_algorithm(algo_key)
        if info is None:
            raise UnknownAlgorithm(algo_key)

        self._algo_info = info
        self._grid      = grid
        self._start     = start if start is not None else grid.start
        self._end       = end   if end   is not None else grid.end
        self._heuristic = heuristic if info.has_heuristic else ""
        self.trace      = None
        self.metrics    = None

    def run_to_completion(self) -> RunMetrics:
        """Run the search, keep its Trace, compute metrics."""
        if self._algo_info is None or self._grid is None:
            raise RuntimeError("Call start() first.")

        t0 = time.perf_counter()
        self.trace = search(
            self._grid,
            self._start,
            self._end,
            algorithm=self._algo_info.key,
            heuristic=self._heuristic or None,
        )
        wall_ms = (time.perf_counter() - t0) * 1000

        self.metrics = self._compute_metrics(wall_ms)
        return self.metrics

    def get_metrics(self) -> Optional[RunMetrics]:
        return self.metrics

    def playback(self, scheduler=None, speed_ms: Optional[int] = None) -> PlaybackController:
        """A fresh controller loaded with this run, at the algorithm's default speed."""
        if self.trace is None:
            raise RuntimeError("Call run_to_completion() first.")
        ctl = PlaybackController(
            scheduler=scheduler,
            speed_ms=speed_ms if speed_ms is not None else self._algo_info.default_speed_ms,
        )
        ctl.load(self.trace)
        return ctl

    # ------------------------------------------------------------------
    # Export (serialisable snapshot)
    # ------------------------------------------------------------------
    def export(self) -> Dict[str, Any]:
        return {
            "algo_key":  self._algo_info.key if self._algo_info else "",
            "heuristic": self._heuristic,
            "grid":      self._grid.to_dict() if self._grid else {},
            "metrics":   self.metrics.to_dict() if self.metrics else {},
            "trace":     self.trace.to_dict() if self.trace else {},
        }

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _compute_metrics(self, wall_ms: float) -> RunMetrics:
        info  = self._algo_info
        trace = self.trace
        path  = trace.path()

        # path cost: entry cost of every cell after the first
        path_cost = float(sum(self._grid.cost(c) for c in path[1:]))

        metrics = RunMetrics(
            algo_key=info.key,
            algo_label=info.label,
            start=tuple(self._start) if self._start is not None else None,
            end=tuple(self._end) if self._end is not None else None,
            cells_visited=len(trace.visited()),
            cells_explored=len(trace.explored()),
            path_length=trace.path_length,
            path_cost=path_cost,
            total_events=len(trace),
            wall_time_ms=round(wall_ms, 2),
            found=trace.found,
            heuristic=self._heuristic,
        )
        logger.debug("metrics for %s: %s", info.key, metrics)
        return metrics


# ---------------------------------------------------------------------------
# Comparison helper
# ---------------------------------------------------------------------------
def compare(left: Recorder, right: Recorder) -> ComparisonResult:
    """Given two completed Recorders, produce a ComparisonResult."""
    l = left.metrics  or RunMetrics()
    r = right.metrics or RunMetrics()

    def winner(l_val, r_val, l_key, r_key):
        if l_val == r_val:
            return "tie"
        return l_key if l_val < r_val else r_key

    # a run that found nothing never wins on path length
    if l.found and r.found:
        winner_path = winner(l.path_length, r.path_length, l.algo_label, r.algo_label)
    elif l.found != r.found:
        winner_path = l.algo_label if l.found else r.algo_label
    else:
        winner_path = "tie"

    return ComparisonResult(
        left=l,
        right=r,
        winner_visited =winner(l.cells_visited, r.cells_visited, l.algo_label, r.algo_label),
        winner_explored=winner(l.cells_explored, r.cells_explored, l.algo_label, r.algo_label),
        winner_path    =winner_path,
    )
