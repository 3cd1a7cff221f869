"""
grid.py — Grid Model & Maze Generator
======================================
The obstacle grid every search runs on.  Searches only read it; edits
(walls, moving start / end) produce a NEW GridModel so a grid handed to
a search is never changed underneath it.

Responsibilities:
  1. Bounds / kind / cost queries           (cell_at, is_walkable, cost)
  2. 4-neighbour adjacency                  (neighbors4)
  3. Endpoint validation                    (validate_endpoints)
  4. Factories                              (from_rows, from_strings, empty, generate_maze)
  5. Copy-on-edit helpers                   (with_cell, without_walls)
  6. Serialisation round-trip               (to_dict / from_dict)

Design decisions:
  - Cells are stored as a tuple of tuples so the object is hashable-ish
    and cannot be mutated by accident.
  - Neighbour order is fixed (up, right, down, left).  Every algorithm
    expands in this order, which is what makes traces deterministic.
  - Entry costs default to 1.  Costs below 1 are rejected so the
    Manhattan heuristic stays admissible for A*.
"""

import random
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from grid.cell import CellKind, Coordinate, CoordLike, as_coord
from grid.errors import EmptyGrid, InvalidEndpoint


# ---------------------------------------------------------------------------
# Defaults (match the original 20 x 40 board)
# ---------------------------------------------------------------------------
DEFAULT_ROWS:  int             = 20
DEFAULT_COLS:  int             = 40
DEFAULT_START: Tuple[int, int] = (5, 5)
DEFAULT_END:   Tuple[int, int] = (14, 34)
MAZE_DENSITY:  float           = 0.3

# up, right, down, left
DIRECTIONS: Tuple[Tuple[int, int], ...] = ((-1, 0), (0, 1), (1, 0), (0, -1))


class GridModel:
    """
    Attributes:
        rows, cols : Dimensions (fixed for the lifetime of the instance).
        start, end : Coordinate of the START / END cell, or None.
        weighted   : True when any cell costs more than 1 to enter.
    """

    __slots__ = ("rows", "cols", "_cells", "_costs", "start", "end")

    def __init__(
        self,
        cells: Sequence[Sequence[CellKind]],
        costs: Optional[Sequence[Sequence[int]]] = None,
    ):
        grid_rows = tuple(tuple(CellKind(c) for c in row) for row in cells)
        self.rows: int = len(grid_rows)
        self.cols: int = len(grid_rows[0]) if grid_rows else 0
        if any(len(r) != self.cols for r in grid_rows):
            raise ValueError("Grid rows must all have the same length.")

        self._cells: Tuple[Tuple[CellKind, ...], ...] = grid_rows
        self._costs: Optional[Tuple[Tuple[int, ...], ...]] = None
        if costs is not None:
            self._costs = _check_costs(costs, self.rows, self.cols)

        self.start: Optional[Coordinate] = self._find_unique(CellKind.START)
        self.end:   Optional[Coordinate] = self._find_unique(CellKind.END)

    # ==================================================================
    # QUERIES
    # ==================================================================
    def in_bounds(self, coord: CoordLike) -> bool:
        r, c = coord
        return 0 <= r < self.rows and 0 <= c < self.cols

    def cell_at(self, coord: CoordLike) -> CellKind:
        if not self.in_bounds(coord):
            raise IndexError(f"{tuple(coord)} is outside a {self.rows}x{self.cols} grid")
        r, c = coord
        return self._cells[r][c]

    def is_walkable(self, coord: CoordLike) -> bool:
        return self.in_bounds(coord) and self._cells[coord[0]][coord[1]] is not CellKind.WALL

    def neighbors4(self, coord: CoordLike) -> List[Coordinate]:
        """Orthogonal in-bounds neighbours, walls included, in DIRECTIONS order."""
        r, c = coord
        result = []
        for dr, dc in DIRECTIONS:
            nr, nc = r + dr, c + dc
            if 0 <= nr < self.rows and 0 <= nc < self.cols:
                result.append(Coordinate(nr, nc))
        return result

    def walkable_neighbors(self, coord: CoordLike) -> List[Coordinate]:
        return [n for n in self.neighbors4(coord) if self._cells[n.row][n.col] is not CellKind.WALL]

    def cost(self, coord: CoordLike) -> int:
        """Cost of stepping INTO `coord`."""
        if self._costs is None:
            return 1
        return self._costs[coord[0]][coord[1]]

    @property
    def weighted(self) -> bool:
        return self._costs is not None and any(w != 1 for row in self._costs for w in row)

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    def cells(self) -> Iterator[Tuple[Coordinate, CellKind]]:
        for r, row in enumerate(self._cells):
            for c, kind in enumerate(row):
                yield Coordinate(r, c), kind

    def walls(self) -> List[Coordinate]:
        return [coord for coord, kind in self.cells() if kind is CellKind.WALL]

    # ==================================================================
    # VALIDATION
    # ==================================================================
    def validate_endpoints(self, start: CoordLike, end: CoordLike) -> Tuple[Coordinate, Coordinate]:
        """Raise EmptyGrid / InvalidEndpoint, or return both as Coordinates."""
        if self.rows == 0 or self.cols == 0:
            raise EmptyGrid(self.rows, self.cols)
        checked = []
        for which, raw in (("start", start), ("end", end)):
            if raw is None:
                raise InvalidEndpoint(which, None, "not set")
            coord = as_coord(raw)
            if not self.in_bounds(coord):
                raise InvalidEndpoint(which, tuple(coord), f"outside a {self.rows}x{self.cols} grid")
            if self._cells[coord.row][coord.col] is CellKind.WALL:
                raise InvalidEndpoint(which, tuple(coord), "cell is a wall")
            checked.append(coord)
        return checked[0], checked[1]

    # ==================================================================
    # COPY-ON-EDIT
    # ==================================================================
    def with_cell(self, coord: CoordLike, kind: CellKind) -> "GridModel":
        """
        Return a copy with one cell changed.  Placing START or END clears
        the previous one so there is never more than one of each.
        """
        coord = as_coord(coord)
        if not self.in_bounds(coord):
            raise IndexError(f"{tuple(coord)} is outside a {self.rows}x{self.cols} grid")
        rows = [list(r) for r in self._cells]
        if kind in (CellKind.START, CellKind.END):
            old = self.start if kind is CellKind.START else self.end
            if old is not None:
                rows[old.row][old.col] = CellKind.EMPTY
        rows[coord.row][coord.col] = kind
        return GridModel(rows, self._costs)

    def without_walls(self) -> "GridModel":
        rows = [[CellKind.EMPTY if k is CellKind.WALL else k for k in r] for r in self._cells]
        return GridModel(rows, self._costs)

    # ==================================================================
    # SERIALISATION
    # ==================================================================
    def to_rows(self) -> List[List[int]]:
        return [[k.value for k in row] for row in self._cells]

    def to_strings(self) -> List[str]:
        return ["".join(k.symbol for k in row) for row in self._cells]

    def to_dict(self) -> dict:
        data: Dict[str, object] = {
            "rows":  self.rows,
            "cols":  self.cols,
            "cells": self.to_rows(),
        }
        if self._costs is not None:
            data["costs"] = [list(r) for r in self._costs]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "GridModel":
        return cls.from_rows(data["cells"], costs=data.get("costs"))

    # ==================================================================
    # FACTORIES
    # ==================================================================
    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Iterable[Union[int, CellKind]]],
        costs: Optional[Sequence[Sequence[int]]] = None,
    ) -> "GridModel":
        """Build from integer codes (0 empty, 1 wall, 2 start, 3 end) or CellKinds."""
        try:
            cells = [[CellKind(v) for v in row] for row in rows]
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid cell code: {exc}") from exc
        return cls(cells, costs)

    @classmethod
    def from_strings(cls, lines: Iterable[str]) -> "GridModel":
        """
        ASCII form, one string per row:
            S..#
            .#.E
        """
        return cls([[CellKind.from_symbol(ch) for ch in line] for line in lines])

    @classmethod
    def empty(
        cls,
        rows: int = DEFAULT_ROWS,
        cols: int = DEFAULT_COLS,
        start: Optional[CoordLike] = DEFAULT_START,
        end: Optional[CoordLike] = DEFAULT_END,
    ) -> "GridModel":
        cells = [[CellKind.EMPTY] * cols for _ in range(rows)]
        for coord, kind in ((start, CellKind.START), (end, CellKind.END)):
            if coord is not None:
                r, c = coord
                cells[r][c] = kind
        return cls(cells)

    @classmethod
    def generate_maze(
        cls,
        rows: int = DEFAULT_ROWS,
        cols: int = DEFAULT_COLS,
        start: CoordLike = DEFAULT_START,
        end: CoordLike = DEFAULT_END,
        density: float = MAZE_DENSITY,
        seed: Optional[int] = None,
    ) -> "GridModel":
        """
        Random walls with probability `density` per cell.  The 3x3 block
        around start and end is always cleared so neither is boxed in
        from the first move.
        """
        if not 0.0 <= density <= 1.0:
            raise ValueError("density must be within [0, 1]")
        rng = random.Random(seed)
        cells = [
            [CellKind.WALL if rng.random() < density else CellKind.EMPTY for _ in range(cols)]
            for _ in range(rows)
        ]
        for anchor in (start, end):
            ar, ac = anchor
            for dr in (-1, 0, 1):
                for dc in (-1, 0, 1):
                    r, c = ar + dr, ac + dc
                    if 0 <= r < rows and 0 <= c < cols:
                        cells[r][c] = CellKind.EMPTY
        cells[start[0]][start[1]] = CellKind.START
        cells[end[0]][end[1]] = CellKind.END
        return cls(cells)

    # ==================================================================
    # Internal
    # ==================================================================
    def _find_unique(self, kind: CellKind) -> Optional[Coordinate]:
        found = [coord for coord, k in self.cells() if k is kind]
        if len(found) > 1:
            raise ValueError(f"Grid has {len(found)} {kind.name} cells; at most one is allowed.")
        return found[0] if found else None

    # ------------------------------------------------------------------
    # Dunder
    # ------------------------------------------------------------------
    def __repr__(self) -> str:
        return f"GridModel({self.rows}x{self.cols}, start={self.start}, end={self.end})"

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, GridModel)
            and self._cells == other._cells
            and self._costs == other._costs
        )

    def __hash__(self) -> int:
        return hash((self._cells, self._costs))


def _check_costs(costs: Sequence[Sequence[int]], rows: int, cols: int) -> Tuple[Tuple[int, ...], ...]:
    table = tuple(tuple(row) for row in costs)
    if len(table) != rows or any(len(r) != cols for r in table):
        raise ValueError("Cost table must match the grid's shape.")
    if any(isinstance(w, bool) or not isinstance(w, int) for row in table for w in row):
        raise ValueError("Cell costs must be integers.")
    if any(w < 1 for row in table for w in row):
        raise ValueError("Cell costs must be >= 1.")
    return table
