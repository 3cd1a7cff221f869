"""
projection.py — What the Renderer Sees
=======================================
A renderer never walks the raw Trace.  It asks for the PROJECTION at an
index: the cumulative effect of events 0..index folded into plain sets.

    proj = project(trace, 41)
    proj.visited     → cells settled so far (plain searches)
    proj.path        → route cells revealed so far, in order
    proj.current     → the cell of event 41 (for highlighting / audio)
    proj.outcome     → None until the terminal event is reached
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

from grid import Coordinate
from algorithms.step import EventKind, Trace


@dataclass(frozen=True)
class Projection:
    index:         int                        = -1
    visited:       FrozenSet[Coordinate]      = field(default_factory=frozenset)
    visited_start: FrozenSet[Coordinate]      = field(default_factory=frozenset)
    visited_end:   FrozenSet[Coordinate]      = field(default_factory=frozenset)
    explored:      FrozenSet[Coordinate]      = field(default_factory=frozenset)
    path:          Tuple[Coordinate, ...]     = ()
    current:       Optional[Coordinate]       = None
    outcome:       Optional[str]              = None   # "found" / "not_found"

    @property
    def all_visited(self) -> FrozenSet[Coordinate]:
        """Settled cells from either frontier, plus plain visits."""
        return self.visited | self.visited_start | self.visited_end

    def to_dict(self) -> dict:
        def cells(s):
            return [list(c) for c in sorted(s)]
        return {
            "index":         self.index,
            "visited":       cells(self.visited),
            "visited_start": cells(self.visited_start),
            "visited_end":   cells(self.visited_end),
            "explored":      cells(self.explored),
            "path":          [list(c) for c in self.path],
            "current":       list(self.current) if self.current is not None else None,
            "outcome":       self.outcome,
        }


EMPTY_PROJECTION = Projection()


def project(trace: Optional[Trace], index: int) -> Projection:
    """Fold events 0..index (inclusive).  Index -1 or no trace → empty projection."""
    if trace is None or index < 0:
        return EMPTY_PROJECTION
    index = min(index, len(trace) - 1)

    visited, visited_start, visited_end, explored = set(), set(), set(), set()
    path = []
    outcome = None
    for ev in trace.events[: index + 1]:
        kind = ev.kind
        if kind is EventKind.VISIT:
            visited.add(ev.cell)
        elif kind is EventKind.VISIT_START:
            visited_start.add(ev.cell)
        elif kind is EventKind.VISIT_END:
            visited_end.add(ev.cell)
        elif kind.is_explore:
            explored.add(ev.cell)
        elif kind is EventKind.PATH:
            path.append(ev.cell)
        else:
            outcome = kind.value

    return Projection(
        index=index,
        visited=frozenset(visited),
        visited_start=frozenset(visited_start),
        visited_end=frozenset(visited_end),
        explored=frozenset(explored),
        path=tuple(path),
        current=trace[index].cell,
        outcome=outcome,
    )
