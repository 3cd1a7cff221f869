"""
step.py — Step Events, Traces & the Recorder
=============================================
Every search turns its decisions into an ordered list of StepEvents.
Nothing is streamed: the whole Trace is built before playback starts,
which is what makes playback seekable and reversible.

    • visit / visit_start / visit_end       – a cell is settled (dequeued)
    • explore / explore_start / explore_end – a cell joins the frontier
    • path                                  – a cell of the final route
    • found / not_found                     – terminal, no cell, always last

The _start / _end variants are only used by bidirectional search to say
which frontier produced the event.

Design decisions:
  - StepEvent is a frozen dataclass tagged by EventKind.  Terminal kinds
    must not carry a cell and every other kind must.
  - StepRecorder owns its own `seq` counter.  Two recorders never share
    numbering, so repeated or interleaved runs are independent.
  - The recorder is append-only.  A search that backtracks records new
    events; it never edits old ones.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from grid import Coordinate, as_coord


class TraceError(RuntimeError):
    """A recorder was misused or a trace breaks its own invariants."""


# ---------------------------------------------------------------------------
# Event kinds
# ---------------------------------------------------------------------------
class EventKind(Enum):
    VISIT         = "visit"
    VISIT_START   = "visit_start"
    VISIT_END     = "visit_end"
    EXPLORE       = "explore"
    EXPLORE_START = "explore_start"
    EXPLORE_END   = "explore_end"
    PATH          = "path"
    FOUND         = "found"
    NOT_FOUND     = "not_found"

    @property
    def is_terminal(self) -> bool:
        return self in (EventKind.FOUND, EventKind.NOT_FOUND)

    @property
    def is_visit(self) -> bool:
        return self in (EventKind.VISIT, EventKind.VISIT_START, EventKind.VISIT_END)

    @property
    def is_explore(self) -> bool:
        return self in (EventKind.EXPLORE, EventKind.EXPLORE_START, EventKind.EXPLORE_END)


class Side(Enum):
    """Which frontier of a bidirectional search produced an event."""
    FORWARD  = "start"
    BACKWARD = "end"


_VISIT_KIND = {
    None:          EventKind.VISIT,
    Side.FORWARD:  EventKind.VISIT_START,
    Side.BACKWARD: EventKind.VISIT_END,
}
_EXPLORE_KIND = {
    None:          EventKind.EXPLORE,
    Side.FORWARD:  EventKind.EXPLORE_START,
    Side.BACKWARD: EventKind.EXPLORE_END,
}


# ---------------------------------------------------------------------------
# StepEvent
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class StepEvent:
    """
    Attributes:
        kind : EventKind tag.
        cell : Coordinate for non-terminal kinds, None for found / not_found.
        seq  : 0-based position assigned by the recorder that made it.
    """

    kind: EventKind
    cell: Optional[Coordinate] = None
    seq:  int                  = 0

    def __post_init__(self):
        if self.kind.is_terminal and self.cell is not None:
            raise TraceError(f"{self.kind.value} events carry no cell")
        if not self.kind.is_terminal and self.cell is None:
            raise TraceError(f"{self.kind.value} events need a cell")

    def to_dict(self) -> dict:
        return {
            "seq":  self.seq,
            "type": self.kind.value,
            "cell": list(self.cell) if self.cell is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StepEvent":
        cell = data.get("cell")
        return cls(
            kind=EventKind(data["type"]),
            cell=as_coord(cell) if cell is not None else None,
            seq=data.get("seq", 0),
        )


# ---------------------------------------------------------------------------
# Trace
# ---------------------------------------------------------------------------
class Trace:
    """
    Immutable, ordered log of one search run.  Safe to share between any
    number of playback controllers.

    Attributes:
        algorithm : Registry key of the algorithm that produced it.
        events    : Tuple of StepEvents, terminal event last.
    """

    __slots__ = ("algorithm", "events")

    def __init__(self, events: Iterable[StepEvent], algorithm: str = ""):
        evs = tuple(events)
        terminals = [i for i, e in enumerate(evs) if e.kind.is_terminal]
        if terminals != [len(evs) - 1] or not evs:
            raise TraceError("A trace needs exactly one terminal event, and it must be last.")
        object.__setattr__(self, "events", evs)
        object.__setattr__(self, "algorithm", algorithm)

    def __setattr__(self, name, value):
        raise AttributeError("Trace is immutable")

    # -- sequence protocol --
    def __len__(self) -> int:
        return len(self.events)

    def __getitem__(self, idx):
        return self.events[idx]

    def __iter__(self) -> Iterator[StepEvent]:
        return iter(self.events)

    def __eq__(self, other) -> bool:
        return isinstance(other, Trace) and self.algorithm == other.algorithm and self.events == other.events

    def __hash__(self) -> int:
        return hash((self.algorithm, self.events))

    def __repr__(self) -> str:
        return f"Trace({self.algorithm or '?'}, {len(self.events)} events, {self.terminal.kind.value})"

    # -- derived views --
    @property
    def terminal(self) -> StepEvent:
        return self.events[-1]

    @property
    def found(self) -> bool:
        return self.terminal.kind is EventKind.FOUND

    def path(self) -> List[Coordinate]:
        return [e.cell for e in self.events if e.kind is EventKind.PATH]

    @property
    def path_length(self) -> int:
        """Number of moves on the path (cells - 1), 0 when not found."""
        return max(len(self.path()) - 1, 0)

    def visited(self) -> Set[Coordinate]:
        return {e.cell for e in self.events if e.kind.is_visit}

    def explored(self) -> Set[Coordinate]:
        return {e.cell for e in self.events if e.kind.is_explore}

    def visited_by(self, side: Optional[Side]) -> Set[Coordinate]:
        kind = _VISIT_KIND[side]
        return {e.cell for e in self.events if e.kind is kind}

    def explored_by(self, side: Optional[Side]) -> Set[Coordinate]:
        kind = _EXPLORE_KIND[side]
        return {e.cell for e in self.events if e.kind is kind}

    def count(self, *kinds: EventKind) -> int:
        return sum(1 for e in self.events if e.kind in kinds)

    # -- serialisation --
    def to_dict(self) -> dict:
        return {
            "algorithm": self.algorithm,
            "found":     self.found,
            "events":    [e.to_dict() for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Trace":
        return cls((StepEvent.from_dict(e) for e in data["events"]), data.get("algorithm", ""))


# ---------------------------------------------------------------------------
# StepRecorder: the append-only scratch-pad every search writes into
# ---------------------------------------------------------------------------
class StepRecorder:
    """
    Usage inside a search:
        rec = StepRecorder()
        rec.explore(cell)
        rec.visit(cell)
        rec.path(route)
        rec.found()
        return rec.build("bfs")
    """

    def __init__(self):
        self._events:  List[StepEvent]                  = []
        self._visited: Set[Tuple[EventKind, Coordinate]] = set()
        self._seq:     int                              = 0
        self._closed:  bool                             = False

    # -- helpers --
    def visit(self, cell: Coordinate, side: Optional[Side] = None) -> None:
        kind = _VISIT_KIND[side]
        key = (kind, cell)
        if key in self._visited:
            raise TraceError(f"{cell} was already settled ({kind.value})")
        self._visited.add(key)
        self._append(kind, cell)

    def explore(self, cell: Coordinate, side: Optional[Side] = None) -> None:
        self._append(_EXPLORE_KIND[side], cell)

    def path(self, cells: Iterable[Coordinate]) -> None:
        for cell in cells:
            self._append(EventKind.PATH, cell)

    def found(self) -> None:
        self._append(EventKind.FOUND, None)
        self._closed = True

    def not_found(self) -> None:
        self._append(EventKind.NOT_FOUND, None)
        self._closed = True

    def build(self, algorithm: str = "") -> Trace:
        if not self._closed:
            raise TraceError("Trace has no terminal event yet")
        return Trace(self._events, algorithm)

    def __len__(self) -> int:
        return len(self._events)

    def _append(self, kind: EventKind, cell: Optional[Coordinate]) -> None:
        if self._closed:
            raise TraceError("Cannot record after a terminal event")
        self._events.append(StepEvent(kind=kind, cell=cell, seq=self._seq))
        self._seq += 1


# ---------------------------------------------------------------------------
# Shared by every search
# ---------------------------------------------------------------------------
def reconstruct(parent: Dict[Coordinate, Optional[Coordinate]], target: Coordinate) -> List[Coordinate]:
    """Walk parent pointers back from `target`; returned start → target."""
    path, cur = [], target
    while cur is not None:
        path.append(cur)
        cur = parent.get(cur)
    path.reverse()
    return path


