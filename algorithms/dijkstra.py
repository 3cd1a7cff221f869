"""
dijkstra.py — Dijkstra's Algorithm
====================================
Binary-heap Dijkstra with lazy deletion.  The cost of a move is the
entry cost of the destination cell (1 everywhere on an unweighted grid),
so cells settle in non-decreasing distance order and the first time
`end` is settled its distance is optimal.

Heap entries are (g, counter, cell).  The counter is a strictly
increasing insertion number, so equal distances pop in FIFO order and
the trace never depends on how Coordinates compare.

Events:
  • explore – a cell gets its first tentative distance
  • visit   – a cell is popped with its final distance
"""

import heapq
import itertools
from typing import Dict, List, Optional, Tuple

from grid import Coordinate, CoordLike, GridModel
from algorithms.step import EventKind, StepRecorder, Trace, reconstruct


PSEUDOCODE: List[str] = [
    "def Dijkstra(grid, start, end):",            # 0
    "    dist ← {start: 0}",                      # 1
    "    pq ← [(0, start)]",                      # 2
    "    while pq is not empty:",                 # 3
    "        (d, cell) ← pq.pop_min()",           # 4
    "        if cell settled: continue",          # 5
    "        settle(cell)                # visit", # 6
    "        if cell == end: return path",        # 7
    "        for nbr in neighbours4(cell):",      # 8
    "            nd ← d + cost(nbr)",             # 9
    "            if nd < dist[nbr]:",             # 10
    "                dist[nbr] ← nd; parent[nbr] ← cell", # 11
    "                pq.push((nd, nbr)) # explore", # 12
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


def dijkstra(grid: GridModel, start: CoordLike, end: CoordLike) -> Trace:
    start, end = grid.validate_endpoints(start, end)

    rec     = StepRecorder()
    counter = itertools.count()
    dist:    Dict[Coordinate, int]                  = {start: 0}
    parent:  Dict[Coordinate, Optional[Coordinate]] = {start: None}
    settled: set                                    = set()
    pq: List[Tuple[int, int, Coordinate]] = [(0, next(counter), start)]

    while pq:
        d, _, cell = heapq.heappop(pq)
        if cell in settled:
            continue
        settled.add(cell)
        rec.visit(cell)

        if cell == end:
            rec.path(reconstruct(parent, end))
            rec.found()
            return rec.build("dijkstra")

        for nbr in grid.walkable_neighbors(cell):
            if nbr in settled:
                continue
            nd = d + grid.cost(nbr)
            known = dist.get(nbr)
            if known is not None and nd >= known:
                continue
            dist[nbr]   = nd
            parent[nbr] = cell
            heapq.heappush(pq, (nd, next(counter), nbr))
            if known is None:
                rec.explore(nbr)

    rec.not_found()
    return rec.build("dijkstra")
