"""
bfs.py — Breadth-First Search
==============================
FIFO frontier over the 4-connected grid.  Records:
  1. Discover an unseen neighbour  →  explore
  2. Dequeue a cell                →  visit
  3. Goal dequeued                 →  path (start → end) + found
  4. Queue empty                   →  not_found

The first time `end` is dequeued the path is shortest by move count.
"""

from collections import deque
from typing import Dict, List, Optional

from grid import Coordinate, CoordLike, GridModel
from algorithms.step import EventKind, StepRecorder, Trace, reconstruct


# ---------------------------------------------------------------------------
# Pseudocode: each string is one displayed line
# ---------------------------------------------------------------------------
PSEUDOCODE: List[str] = [
    "def BFS(grid, start, end):",                 # 0
    "    queue ← [start]",                        # 1
    "    seen ← {start}",                         # 2
    "    parent ← {}",                            # 3
    "    while queue is not empty:",              # 4
    "        cell ← queue.dequeue()      # visit", # 5
    "        if cell == end: return path",        # 6
    "        for nbr in neighbours4(cell):",      # 7
    "            if nbr walkable and unseen:",    # 8
    "                seen.add(nbr)",              # 9
    "                parent[nbr] = cell",         # 10
    "                queue.enqueue(nbr) # explore", # 11
    "    return NOT FOUND",                       # 12
]

# event kind → pseudocode line to highlight during playback
EVENT_LINES: Dict[EventKind, int] = {
    EventKind.VISIT:     5,
    EventKind.EXPLORE:   11,
    EventKind.PATH:      6,
    EventKind.FOUND:     6,
    EventKind.NOT_FOUND: 12,
}


def bfs(grid: GridModel, start: CoordLike, end: CoordLike) -> Trace:
    """
    Args:
        grid  : The grid to search (read only).
        start : Start cell (row, col).
        end   : Goal cell (row, col).

    Returns:
        The finished Trace.

    Raises:
        EmptyGrid / InvalidEndpoint before anything is recorded.
    """
    start, end = grid.validate_endpoints(start, end)

    rec    = StepRecorder()
    queue  = deque([start])
    seen   = {start}
    parent: Dict[Coordinate, Optional[Coordinate]] = {start: None}

    while queue:
        cell = queue.popleft()
        rec.visit(cell)

        if cell == end:
            rec.path(reconstruct(parent, end))
            rec.found()
            return rec.build("bfs")

        for nbr in grid.walkable_neighbors(cell):
            if nbr in seen:
                continue
            seen.add(nbr)
            parent[nbr] = cell
            queue.append(nbr)
            rec.explore(nbr)

    rec.not_found()
    return rec.build("bfs")
