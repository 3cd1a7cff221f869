"""
cell.py — Cells & Coordinates
==============================
The smallest pieces of a grid: what a cell holds (CellKind), where it
is (Coordinate), and the four moves between neighbours (DIRECTIONS).
"""

from enum import Enum
from typing import NamedTuple, Tuple, Union


# ---------------------------------------------------------------------------
# Cell kinds: integer values match the editor's wire encoding
# ---------------------------------------------------------------------------
class CellKind(Enum):
    EMPTY = 0
    WALL  = 1
    START = 2
    END   = 3

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @classmethod
    def from_symbol(cls, ch: str) -> "CellKind":
        for kind, sym in _SYMBOLS.items():
            if sym == ch:
                return kind
        raise ValueError(f"Unknown cell symbol: {ch!r}")


_SYMBOLS = {
    CellKind.EMPTY: ".",
    CellKind.WALL:  "#",
    CellKind.START: "S",
    CellKind.END:   "E",
}


# ---------------------------------------------------------------------------
# Coordinate
# ---------------------------------------------------------------------------
class Coordinate(NamedTuple):
    row: int
    col: int

    def manhattan(self, other: "Coordinate") -> int:
        return abs(self.row - other[0]) + abs(self.col - other[1])

    def __repr__(self) -> str:
        return f"({self.row}, {self.col})"


CoordLike = Union[Coordinate, Tuple[int, int]]


def as_coord(value: CoordLike) -> Coordinate:
    """Normalise a (row, col) pair or list into a Coordinate."""
    if isinstance(value, Coordinate):
        return value
    row, col = value
    return Coordinate(int(row), int(col))
