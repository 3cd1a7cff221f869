"""
algorithms/__init__.py — Algorithm Registry
=============================================
Single source of truth for every search the visualizer knows about.

    from algorithms import REGISTRY, get_algorithm, search

REGISTRY is a dict:
    {
        "bfs": AlgoInfo(key, label, fn, pseudocode, tags, optimal, …),
        …
    }

Every `fn` has the same contract:  fn(grid, start, end) -> Trace.
Adding an algorithm is: write the function, add one entry here.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from grid import CoordLike, GridModel
from algorithms.step import (
    EventKind,
    Side,
    StepEvent,
    StepRecorder,
    Trace,
    TraceError,
)

# ---------------------------------------------------------------------------
# Import all algorithm modules
# ---------------------------------------------------------------------------
from algorithms.bfs               import bfs               as _bfs,      PSEUDOCODE as _bfs_pc, EVENT_LINES as _bfs_ev
from algorithms.dfs               import dfs               as _dfs,      PSEUDOCODE as _dfs_pc, EVENT_LINES as _dfs_ev
from algorithms.dijkstra          import dijkstra          as _dijkstra, PSEUDOCODE as _dij_pc, EVENT_LINES as _dij_ev
from algorithms.astar             import astar             as _astar,    PSEUDOCODE as _ast_pc, EVENT_LINES as _ast_ev
from algorithms.greedy_bfs        import greedy_bfs        as _gbfs,     PSEUDOCODE as _gbfs_pc, EVENT_LINES as _gbfs_ev
from algorithms.bidirectional_bfs import bidirectional_bfs as _bibfs,    PSEUDOCODE as _bibfs_pc, EVENT_LINES as _bibfs_ev
from algorithms.jps               import jps               as _jps,      PSEUDOCODE as _jps_pc, EVENT_LINES as _jps_ev

logger = logging.getLogger(__name__)


class UnknownAlgorithm(KeyError):
    kind = "unknown_algorithm"

    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Unknown algorithm: {self.key!r}"


# ---------------------------------------------------------------------------
# AlgoInfo: metadata card for each algorithm
# ---------------------------------------------------------------------------
@dataclass
class AlgoInfo:
    key:              str                     # registry key, e.g. "bfs"
    label:            str                     # human label, e.g. "Breadth-First Search"
    fn:               Callable[..., Trace]    # fn(grid, start, end) -> Trace
    pseudocode:       List[str]               # lines for the side-panel
    tags:             List[str] = field(default_factory=list)
    optimal:          bool      = False       # shortest path guaranteed on uniform cost?
    has_heuristic:    bool      = False       # A* / Greedy: accepts heuristic=
    complexity_time:  str       = ""
    complexity_space: str       = ""
    description:      str       = ""
    default_speed_ms: int       = 30          # playback speed the UI starts with
    event_lines:      Dict[EventKind, int] = field(default_factory=dict)

    def line_for(self, event: Optional[StepEvent]) -> int:
        """Pseudocode line to highlight for `event`, -1 for none."""
        if event is None:
            return -1
        return self.event_lines.get(event.kind, -1)

    def to_dict(self) -> dict:
        return {
            "key":              self.key,
            "label":            self.label,
            "tags":             list(self.tags),
            "optimal":          self.optimal,
            "has_heuristic":    self.has_heuristic,
            "complexity_time":  self.complexity_time,
            "complexity_space": self.complexity_space,
            "description":      self.description,
            "default_speed_ms": self.default_speed_ms,
            "pseudocode":       list(self.pseudocode),
            "event_lines":      {kind.value: line for kind, line in self.event_lines.items()},
        }


# ---------------------------------------------------------------------------
# THE REGISTRY
# ---------------------------------------------------------------------------
REGISTRY: Dict[str, AlgoInfo] = {

    "bfs": AlgoInfo(
        key="bfs", label="Breadth-First Search", fn=_bfs, pseudocode=_bfs_pc, event_lines=_bfs_ev,
        tags=["unweighted", "shortest-path", "traversal"],
        optimal=True,
        complexity_time="O(V + E)", complexity_space="O(V)",
        description="Explores ring by ring. Guarantees the shortest path on an unweighted grid.",
    ),

    "dfs": AlgoInfo(
        key="dfs", label="Depth-First Search", fn=_dfs, pseudocode=_dfs_pc, event_lines=_dfs_ev,
        tags=["unweighted", "traversal"],
        complexity_time="O(V + E)", complexity_space="O(V)",
        description="Dives deep before backtracking. Does NOT guarantee the shortest path.",
    ),

    "dijkstra": AlgoInfo(
        key="dijkstra", label="Dijkstra's Algorithm", fn=_dijkstra, pseudocode=_dij_pc, event_lines=_dij_ev,
        tags=["weighted", "shortest-path"],
        optimal=True,
        complexity_time="O((V + E) log V)", complexity_space="O(V)",
        description="Settles the closest cell first. Optimal for weighted grids.",
    ),

    "astar": AlgoInfo(
        key="astar", label="A* Search", fn=_astar, pseudocode=_ast_pc, event_lines=_ast_ev,
        tags=["weighted", "shortest-path", "heuristic"],
        optimal=True, has_heuristic=True,
        complexity_time="O((V + E) log V)", complexity_space="O(V)",
        description="Dijkstra + Manhattan guidance. Optimal because the heuristic never overestimates.",
        default_speed_ms=40,
    ),

    "greedy": AlgoInfo(
        key="greedy", label="Greedy Best-First", fn=_gbfs, pseudocode=_gbfs_pc, event_lines=_gbfs_ev,
        tags=["heuristic", "suboptimal"],
        has_heuristic=True,
        complexity_time="O((V + E) log V)", complexity_space="O(V)",
        description="Pure heuristic: fast but NOT optimal. Compare with A* to see the difference!",
        default_speed_ms=50,
    ),

    "bidirectional": AlgoInfo(
        key="bidirectional", label="Bidirectional BFS", fn=_bibfs, pseudocode=_bibfs_pc, event_lines=_bibfs_ev,
        tags=["unweighted", "shortest-path", "bidirectional"],
        optimal=True,
        complexity_time="O(b^(d/2))", complexity_space="O(b^(d/2))",
        description="Two frontiers from start & end meet in the middle: far fewer cells explored.",
    ),

    "jps": AlgoInfo(
        key="jps", label="Jump Point Search", fn=_jps, pseudocode=_jps_pc, event_lines=_jps_ev,
        tags=["unweighted", "heuristic", "pruning"],
        has_heuristic=False,
        complexity_time="O((V + E) log V)", complexity_space="O(V)",
        description="A* that jumps along straight runs and only stops at forced neighbours.",
        default_speed_ms=80,
    ),
}


# ---------------------------------------------------------------------------
# Lookup helpers
# ---------------------------------------------------------------------------
def get_algorithm(key: str) -> Optional[AlgoInfo]:
    """Return AlgoInfo by key, or None."""
    return REGISTRY.get(key)


def list_algorithms() -> List[AlgoInfo]:
    """Return all registered algorithms in insertion order."""
    return list(REGISTRY.values())


def algorithms_by_tag(tag: str) -> List[AlgoInfo]:
    """Filter registry by tag."""
    return [a for a in REGISTRY.values() if tag in a.tags]


def search(
    grid: GridModel,
    start: CoordLike,
    end: CoordLike,
    algorithm: str = "bfs",
    heuristic: Optional[str] = None,
) -> Trace:
    """
    Run one registered algorithm to completion and return its Trace.

    Raises:
        UnknownAlgorithm           – `algorithm` is not in REGISTRY.
        EmptyGrid / InvalidEndpoint – before any event is recorded.
    """
    info = REGISTRY.get(algorithm)
    if info is None:
        raise UnknownAlgorithm(algorithm)

    kwargs = {}
    if heuristic is not None and info.has_heuristic:
        kwargs["heuristic"] = heuristic

    trace = info.fn(grid, start, end, **kwargs)
    logger.debug(
        "%s on %dx%d grid %s -> %s: %d events, %s",
        algorithm, grid.rows, grid.cols, tuple(start), tuple(end),
        len(trace), trace.terminal.kind.value,
    )
    return trace


__all__ = [
    "AlgoInfo",
    "REGISTRY",
    "UnknownAlgorithm",
    "get_algorithm",
    "list_algorithms",
    "algorithms_by_tag",
    "search",
    "EventKind",
    "Side",
    "StepEvent",
    "StepRecorder",
    "Trace",
    "TraceError",
]
