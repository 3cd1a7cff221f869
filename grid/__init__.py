"""
grid/
-----
Core data layer.  Public API:

    from grid import GridModel, CellKind, Coordinate
    from grid import GridError, InvalidEndpoint, EmptyGrid
"""

from grid.cell   import CellKind, Coordinate, CoordLike, as_coord
from grid.errors import GridError, InvalidEndpoint, EmptyGrid
from grid.grid   import (
    GridModel,
    DIRECTIONS,
    DEFAULT_ROWS,
    DEFAULT_COLS,
    DEFAULT_START,
    DEFAULT_END,
    MAZE_DENSITY,
)

__all__ = [
    "CellKind",   "Coordinate", "CoordLike", "as_coord",
    "GridError",  "InvalidEndpoint", "EmptyGrid",
    "GridModel",  "DIRECTIONS",
    "DEFAULT_ROWS", "DEFAULT_COLS", "DEFAULT_START", "DEFAULT_END", "MAZE_DENSITY",
]
