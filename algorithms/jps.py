"""
jps.py — Jump Point Search (4-connected)
=========================================
A* over JUMP POINTS instead of single cells.  From a node the search
does not step to its neighbours one by one; it "jumps" along a straight
line until something interesting happens:

  • the goal is reached                          → jump point
  • a FORCED NEIGHBOUR appears (a side cell that → jump point
    is open while the cell diagonally behind it
    is a wall, so no shorter route to it exists
    except through here)
  • travelling vertically, a horizontal scan     → jump point
    from this cell finds a jump point
  • a wall or the grid edge                      → nothing (dead ray)

Successor pruning by travel direction (parent → node):
  • no parent (start)  → all four directions
  • horizontal travel  → up, down, keep going horizontally
  • vertical travel    → left, right, keep going vertically

Only jump points enter the open list, so the trace shows a sparse
scatter of explore / visit events along the rays rather than a flood
fill.  Segment costs are straight-line move counts; weights are ignored
(JPS assumes a uniform-cost grid).  The final path is filled in cell by
cell between consecutive jump points.
"""

import heapq
import itertools
from typing import Dict, List, Optional, Tuple

from grid import DIRECTIONS, Coordinate, CoordLike, GridModel
from algorithms.step import EventKind, StepRecorder, Trace, reconstruct
from algorithms.astar import manhattan


PSEUDOCODE: List[str] = [
    "def JPS(grid, start, end):",                 # 0
    "    open ← [(h(start), start)]",             # 1
    "    while open:",                            # 2
    "        cell ← open.pop_min()        # visit", # 3
    "        if cell == end: return path",        # 4
    "        for dir in pruned_dirs(cell):",      # 5
    "            jp ← jump(cell + dir, dir)",     # 6
    "            if jp and g[cell] + |cell-jp| < g[jp]:", # 7
    "                parent[jp] ← cell",          # 8
    "                open.push((g[jp] + h(jp), jp)) # explore", # 9
    "    return NOT FOUND",                       # 10
    "",                                           # 11
    "def jump(cell, dir):",                       # 12
    "    while cell walkable:",                   # 13
    "        if cell == end or has_forced(cell, dir): return cell", # 14
    "        if dir vertical and (jump(right) or jump(left)): return cell", # 15
    "        cell ← cell + dir",                  # 16
    "    return none",                            # 17
]

# event kind → pseudocode line to highlight during playback
EVENT_LINES: Dict[EventKind, int] = {
    EventKind.VISIT:     3,
    EventKind.EXPLORE:   9,
    EventKind.PATH:      4,
    EventKind.FOUND:     4,
    EventKind.NOT_FOUND: 10,
}


def jps(grid: GridModel, start: CoordLike, end: CoordLike) -> Trace:
    start, end = grid.validate_endpoints(start, end)

    rec     = StepRecorder()
    counter = itertools.count()
    h0      = manhattan(start, end)
    g_score: Dict[Coordinate, float]                = {start: 0.0}
    parent:  Dict[Coordinate, Optional[Coordinate]] = {start: None}
    closed:  set                                    = set()
    open_set: List[Tuple[float, float, int, Coordinate]] = [(h0, h0, next(counter), start)]

    while open_set:
        _, _, _, cell = heapq.heappop(open_set)
        if cell in closed:
            continue
        closed.add(cell)
        rec.visit(cell)

        if cell == end:
            rec.path(_fill_segments(reconstruct(parent, end)))
            rec.found()
            return rec.build("jps")

        for dr, dc in _pruned_directions(grid, cell, parent[cell]):
            jp = _jump(grid, cell.row + dr, cell.col + dc, dr, dc, end)
            if jp is None or jp in closed:
                continue
            tentative = g_score[cell] + manhattan(cell, jp)
            known = g_score.get(jp)
            if known is not None and tentative >= known:
                continue
            h = manhattan(jp, end)
            g_score[jp] = tentative
            parent[jp]  = cell
            heapq.heappush(open_set, (tentative + h, h, next(counter), jp))
            if known is None:
                rec.explore(jp)

    rec.not_found()
    return rec.build("jps")


# ---------------------------------------------------------------------------
# Jump rules
# ---------------------------------------------------------------------------
def _open(grid: GridModel, r: int, c: int) -> bool:
    return grid.is_walkable((r, c))


def _jump(
    grid: GridModel,
    r: int,
    c: int,
    dr: int,
    dc: int,
    end: Coordinate,
) -> Optional[Coordinate]:
    """Walk from (r, c) in direction (dr, dc); return the first jump point or None."""
    while _open(grid, r, c):
        if (r, c) == end:
            return Coordinate(r, c)

        if dc != 0:
            # horizontal: a side cell is forced if the cell behind it is blocked
            if (_open(grid, r - 1, c) and not _open(grid, r - 1, c - dc)) or \
               (_open(grid, r + 1, c) and not _open(grid, r + 1, c - dc)):
                return Coordinate(r, c)
        else:
            if (_open(grid, r, c - 1) and not _open(grid, r - dr, c - 1)) or \
               (_open(grid, r, c + 1) and not _open(grid, r - dr, c + 1)):
                return Coordinate(r, c)
            # vertical travel has to look sideways at every cell
            if _jump(grid, r, c + 1, 0, 1, end) is not None or \
               _jump(grid, r, c - 1, 0, -1, end) is not None:
                return Coordinate(r, c)

        r += dr
        c += dc
    return None


def _pruned_directions(
    grid: GridModel,
    cell: Coordinate,
    came_from: Optional[Coordinate],
) -> List[Tuple[int, int]]:
    if came_from is None:
        allowed = set(DIRECTIONS)
    else:
        dr = _sign(cell.row - came_from.row)
        dc = _sign(cell.col - came_from.col)
        if dc != 0:
            allowed = {(-1, 0), (1, 0), (0, dc)}
        else:
            allowed = {(0, -1), (0, 1), (dr, 0)}
    return [
        (dr, dc) for dr, dc in DIRECTIONS
        if (dr, dc) in allowed and _open(grid, cell.row + dr, cell.col + dc)
    ]


def _sign(v: int) -> int:
    return (v > 0) - (v < 0)


# ---------------------------------------------------------------------------
# Path filling
# ---------------------------------------------------------------------------
def _fill_segments(jump_points: List[Coordinate]) -> List[Coordinate]:
    """Expand straight segments between jump points into every cell on them."""
    if not jump_points:
        return []
    cells = [jump_points[0]]
    for a, b in zip(jump_points, jump_points[1:]):
        dr, dc = _sign(b.row - a.row), _sign(b.col - a.col)
        r, c = a
        while (r, c) != (b.row, b.col):
            r, c = r + dr, c + dc
            cells.append(Coordinate(r, c))
    return _drop_loops(cells)


def _drop_loops(cells: List[Coordinate]) -> List[Coordinate]:
    """If a route ever re-enters a cell, cut out the loop in between."""
    out: List[Coordinate] = []
    index: Dict[Coordinate, int] = {}
    for cell in cells:
        if cell in index:
            cut = index[cell]
            for dropped in out[cut + 1:]:
                del index[dropped]
            del out[cut + 1:]
            continue
        index[cell] = len(out)
        out.append(cell)
    return out
