"""
dfs.py — Depth-First Search
=============================
Explicit stack (no Python recursion limit issues), mark-on-pop.

Each stack entry is (cell, the cell that pushed it), so when a cell is
finally popped its parent is the branch that actually reached it.  A
cell can sit on the stack several times; stale copies popped after the
cell is settled are skipped silently.  Dead ends are not erased: the
search simply records the next visit on whatever branch it backs up to.

No shortest-path guarantee.  Used to contrast with BFS.
"""

from typing import Dict, List, Optional, Set, Tuple

from grid import Coordinate, CoordLike, GridModel
from algorithms.step import EventKind, StepRecorder, Trace, reconstruct


PSEUDOCODE: List[str] = [
    "def DFS(grid, start, end):",                 # 0
    "    stack ← [(start, none)]",                # 1
    "    visited ← {}",                           # 2
    "    while stack is not empty:",              # 3
    "        cell, from ← stack.pop()",           # 4
    "        if cell in visited: continue",       # 5
    "        visited.add(cell); parent[cell] = from  # visit", # 6
    "        if cell == end: return path",        # 7
    "        for nbr in reversed(neighbours4(cell)):", # 8
    "            if nbr walkable and not visited:", # 9
    "                stack.push((nbr, cell)) # explore", # 10
    "    return NOT FOUND",                       # 11
]

# event kind → pseudocode line to highlight during playback
EVENT_LINES: Dict[EventKind, int] = {
    EventKind.VISIT:     6,
    EventKind.EXPLORE:   10,
    EventKind.PATH:      7,
    EventKind.FOUND:     7,
    EventKind.NOT_FOUND: 11,
}


def dfs(grid: GridModel, start: CoordLike, end: CoordLike) -> Trace:
    """
    Neighbours are pushed in reverse so the first one in grid order
    (up, right, down, left) is the first one popped.
    """
    start, end = grid.validate_endpoints(start, end)

    rec     = StepRecorder()
    stack:  List[Tuple[Coordinate, Optional[Coordinate]]] = [(start, None)]
    visited: Set[Coordinate] = set()
    seen:    Set[Coordinate] = {start}
    parent:  Dict[Coordinate, Optional[Coordinate]] = {}

    while stack:
        cell, came_from = stack.pop()
        if cell in visited:
            continue

        visited.add(cell)
        parent[cell] = came_from
        rec.visit(cell)

        if cell == end:
            rec.path(reconstruct(parent, end))
            rec.found()
            return rec.build("dfs")

        for nbr in reversed(grid.walkable_neighbors(cell)):
            if nbr in visited:
                continue
            stack.append((nbr, cell))
            if nbr not in seen:
                seen.add(nbr)
                rec.explore(nbr)

    rec.not_found()
    return rec.build("dfs")
