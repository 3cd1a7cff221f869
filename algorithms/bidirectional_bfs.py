"""
bidirectional_bfs.py — Bidirectional BFS
==========================================
Two BFS frontiers in lockstep — one from `start`, one from `end`.  Each
round expands one whole layer forward, then one whole layer backward.

The search stops the moment one side discovers a cell the other side
has already discovered: that cell is the MEETING POINT.  The route is the
forward parent chain start → meeting followed by the backward parent
chain meeting → end.  Because both sides grow a full layer at a time,
the first meeting found is on a shortest route.

Visual encoding (event kinds):
  • forward  →  visit_start / explore_start
  • backward →  visit_end   / explore_end

On open terrain each side only reaches about half the distance, which
is WHY bidirectional search touches far fewer cells than plain BFS.
"""

from collections import deque
from typing import Deque, Dict, List, Optional, Set

from grid import Coordinate, CoordLike, GridModel
from algorithms.step import EventKind, Side, StepRecorder, Trace, reconstruct


PSEUDOCODE: List[str] = [
    "def BidiBFS(grid, start, end):",             # 0
    "    qF ← [start];  seenF ← {start}",         # 1
    "    qB ← [end];    seenB ← {end}",           # 2
    "    while qF and qB:",                       # 3
    "        expand one layer of qF",             # 4
    "            if new cell in seenB:",          # 5
    "                meet there; return path",    # 6
    "        expand one layer of qB",             # 7
    "            if new cell in seenF:",          # 8
    "                meet there; return path",    # 9
    "    return NOT FOUND",                       # 10
]

# event kind → pseudocode line to highlight during playback
EVENT_LINES: Dict[EventKind, int] = {
    EventKind.VISIT_START:   4,
    EventKind.EXPLORE_START: 4,
    EventKind.VISIT_END:     7,
    EventKind.EXPLORE_END:   7,
    EventKind.PATH:          6,
    EventKind.FOUND:         6,
    EventKind.NOT_FOUND:     10,
}


def bidirectional_bfs(grid: GridModel, start: CoordLike, end: CoordLike) -> Trace:
    start, end = grid.validate_endpoints(start, end)
    rec = StepRecorder()

    if start == end:
        rec.visit(start, Side.FORWARD)
        rec.path([start])
        rec.found()
        return rec.build("bidirectional")

    # forward state
    qF:      Deque[Coordinate] = deque([start])
    seenF:   Set[Coordinate]   = {start}
    parentF: Dict[Coordinate, Optional[Coordinate]] = {start: None}

    # backward state
    qB:      Deque[Coordinate] = deque([end])
    seenB:   Set[Coordinate]   = {end}
    parentB: Dict[Coordinate, Optional[Coordinate]] = {end: None}

    # either side running dry means its whole component was searched
    while qF and qB:
        meeting = _expand_layer(grid, rec, Side.FORWARD, qF, seenF, parentF, seenB)
        if meeting is None:
            meeting = _expand_layer(grid, rec, Side.BACKWARD, qB, seenB, parentB, seenF)
        if meeting is not None:
            rec.path(_build_path(parentF, parentB, meeting))
            rec.found()
            return rec.build("bidirectional")

    rec.not_found()
    return rec.build("bidirectional")


def meeting_point(trace: Trace) -> Optional[Coordinate]:
    """The cell where the two frontiers met, or None if they never did."""
    path = trace.path()
    if not trace.found or not path:
        return None
    # the roots belong to their side even before that side records anything
    forward  = trace.visited_by(Side.FORWARD) | trace.explored_by(Side.FORWARD) | {path[0]}
    backward = trace.visited_by(Side.BACKWARD) | trace.explored_by(Side.BACKWARD) | {path[-1]}
    for cell in path:
        if cell in forward and cell in backward:
            return cell
    return None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _expand_layer(
    grid: GridModel,
    rec: StepRecorder,
    side: Side,
    queue: Deque[Coordinate],
    seen: Set[Coordinate],
    parent: Dict[Coordinate, Optional[Coordinate]],
    other_seen: Set[Coordinate],
) -> Optional[Coordinate]:
    """Expand every cell currently queued on one side; return a meeting cell if hit."""
    for _ in range(len(queue)):
        cell = queue.popleft()
        rec.visit(cell, side)
        for nbr in grid.walkable_neighbors(cell):
            if nbr in seen:
                continue
            seen.add(nbr)
            parent[nbr] = cell
            queue.append(nbr)
            rec.explore(nbr, side)
            if nbr in other_seen:
                return nbr
    return None


def _build_path(
    parentF: Dict[Coordinate, Optional[Coordinate]],
    parentB: Dict[Coordinate, Optional[Coordinate]],
    meeting: Coordinate,
) -> List[Coordinate]:
    # forward half: start → meeting
    fwd = reconstruct(parentF, meeting)

    # backward half: meeting → end (meeting itself already in fwd)
    bwd, cur = [], parentB.get(meeting)
    while cur is not None:
        bwd.append(cur)
        cur = parentB.get(cur)

    return fwd + bwd
