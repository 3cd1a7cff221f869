"""
greedy_bfs.py — Greedy Best-First Search
=========================================
Ordered by h alone: always expand the frontier cell that LOOKS closest
to the goal, ignoring how far it is from the start.  Fast, usually
explores very little, but NOT optimal — run it next to A* on a grid with
a U-shaped wall to see the detour it takes.

Each cell is queued once; its parent is fixed the moment it is
discovered.
"""

import heapq
import itertools
from typing import Dict, List, Optional, Tuple

from grid import Coordinate, CoordLike, GridModel
from algorithms.step import EventKind, StepRecorder, Trace, reconstruct
from algorithms.astar import HEURISTICS


PSEUDOCODE: List[str] = [
    "def GreedyBFS(grid, start, end, h):",        # 0
    "    open ← [(h(start), start)]",             # 1
    "    seen ← {start}",                         # 2
    "    while open:",                            # 3
    "        (_, cell) ← open.pop_min()   # visit", # 4
    "        if cell == end: return path",        # 5
    "        for nbr in neighbours4(cell):",      # 6
    "            if nbr walkable and unseen:",    # 7
    "                seen.add(nbr); parent[nbr] ← cell", # 8
    "                open.push((h(nbr), nbr)) # explore", # 9
    "    return NOT FOUND",                       # 10
]

# event kind → pseudocode line to highlight during playback
EVENT_LINES: Dict[EventKind, int] = {
    EventKind.VISIT:     4,
    EventKind.EXPLORE:   9,
    EventKind.PATH:      5,
    EventKind.FOUND:     5,
    EventKind.NOT_FOUND: 10,
}


def greedy_bfs(
    grid: GridModel,
    start: CoordLike,
    end: CoordLike,
    heuristic: str = "manhattan",
) -> Trace:
    start, end = grid.validate_endpoints(start, end)
    h_fn = HEURISTICS[heuristic]

    rec     = StepRecorder()
    counter = itertools.count()
    seen    = {start}
    parent: Dict[Coordinate, Optional[Coordinate]] = {start: None}
    open_set: List[Tuple[float, int, Coordinate]] = [(h_fn(start, end), next(counter), start)]

    while open_set:
        _, _, cell = heapq.heappop(open_set)
        rec.visit(cell)

        if cell == end:
            rec.path(reconstruct(parent, end))
            rec.found()
            return rec.build("greedy")

        for nbr in grid.walkable_neighbors(cell):
            if nbr in seen:
                continue
            seen.add(nbr)
            parent[nbr] = cell
            heapq.heappush(open_set, (h_fn(nbr, end), next(counter), nbr))
            rec.explore(nbr)

    rec.not_found()
    return rec.build("greedy")
