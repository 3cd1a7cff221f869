"""
astar.py — A* Search
=====================
Heap-ordered by f = g + h with a pluggable heuristic.

Ships three built-in heuristics:
  • manhattan – |Δrow| + |Δcol|     (admissible & consistent on 4-connected grids)
  • euclidean – √(Δrow² + Δcol²)    (admissible, weaker)
  • zero      – h = 0               (A* degrades to Dijkstra — useful for teaching)

Ties on f are broken by the lower h, which prefers cells closer to the
goal and keeps the frontier small; remaining ties pop in insertion order.

Events are the same as Dijkstra: explore on first discovery, visit on
settle.
"""

import heapq
import itertools
import math
from typing import Callable, Dict, List, Optional, Tuple

from grid import Coordinate, CoordLike, GridModel
from algorithms.step import EventKind, StepRecorder, Trace, reconstruct


# ---------------------------------------------------------------------------
# Built-in heuristics  (all take two Coordinates, return float)
# ---------------------------------------------------------------------------
def manhattan(a: Coordinate, b: Coordinate) -> float:
    return float(abs(a[0] - b[0]) + abs(a[1] - b[1]))

def euclidean(a: Coordinate, b: Coordinate) -> float:
    return math.sqrt((a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2)

def zero(a: Coordinate, b: Coordinate) -> float:
    return 0.0

HEURISTICS: Dict[str, Callable[[Coordinate, Coordinate], float]] = {
    "manhattan": manhattan,
    "euclidean": euclidean,
    "zero":      zero,
}


PSEUDOCODE: List[str] = [
    "def AStar(grid, start, end, h):",            # 0
    "    g[start] ← 0",                           # 1
    "    open ← [(h(start), h(start), start)]",   # 2
    "    while open:",                            # 3
    "        (f, _, cell) ← open.pop_min()",      # 4
    "        if cell closed: continue",           # 5
    "        closed.add(cell)            # visit", # 6
    "        if cell == end: return path",        # 7
    "        for nbr in neighbours4(cell):",      # 8
    "            tentative ← g[cell] + cost(nbr)", # 9
    "            if tentative < g[nbr]:",         # 10
    "                parent[nbr] ← cell; g[nbr] ← tentative", # 11
    "                open.push((g[nbr] + h(nbr), h(nbr), nbr)) # explore", # 12
    "    return NOT FOUND",                       # 13
]

# event kind → pseudocode line to highlight during playback
EVENT_LINES: Dict[EventKind, int] = {
    EventKind.VISIT:     6,
    EventKind.EXPLORE:   12,
    EventKind.PATH:      7,
    EventKind.FOUND:     7,
    EventKind.NOT_FOUND: 13,
}


def astar(
    grid: GridModel,
    start: CoordLike,
    end: CoordLike,
    heuristic: str = "manhattan",
) -> Trace:
    """
    Args:
        grid      : The grid (read only).
        start     : Start cell.
        end       : Goal cell.
        heuristic : Key into HEURISTICS.  Unknown keys raise KeyError.
    """
    start, end = grid.validate_endpoints(start, end)
    h_fn = HEURISTICS[heuristic]

    rec     = StepRecorder()
    counter = itertools.count()
    g_score: Dict[Coordinate, float]                = {start: 0.0}
    h_cache: Dict[Coordinate, float]                = {start: h_fn(start, end)}
    parent:  Dict[Coordinate, Optional[Coordinate]] = {start: None}
    closed:  set                                    = set()
    open_set: List[Tuple[float, float, int, Coordinate]] = [
        (h_cache[start], h_cache[start], next(counter), start)
    ]

    while open_set:
        _, _, _, cell = heapq.heappop(open_set)
        if cell in closed:
            continue
        closed.add(cell)
        rec.visit(cell)

        if cell == end:
            rec.path(reconstruct(parent, end))
            rec.found()
            return rec.build("astar")

        for nbr in grid.walkable_neighbors(cell):
            if nbr in closed:
                continue
            tentative = g_score[cell] + grid.cost(nbr)
            known = g_score.get(nbr)
            if known is not None and tentative >= known:
                continue
            if nbr not in h_cache:
                h_cache[nbr] = h_fn(nbr, end)
            g_score[nbr] = tentative
            parent[nbr]  = cell
            heapq.heappush(open_set, (tentative + h_cache[nbr], h_cache[nbr], next(counter), nbr))
            if known is None:
                rec.explore(nbr)

    rec.not_found()
    return rec.build("astar")
