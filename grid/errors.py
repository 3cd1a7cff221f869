"""
errors.py — Grid configuration errors
======================================
Raised before any search begins, never mid-search.  "No path" is not an
error: it is the `not_found` event at the end of a Trace.
"""

from typing import Optional, Tuple


class GridError(ValueError):
    """Base class for grids a search refuses to run on."""

    kind = "grid_error"


class EmptyGrid(GridError):
    kind = "empty_grid"

    def __init__(self, rows: int, cols: int):
        super().__init__(f"Grid has no cells ({rows}x{cols}).")
        self.rows = rows
        self.cols = cols


class InvalidEndpoint(GridError):
    kind = "invalid_endpoint"

    def __init__(self, which: str, cell: Optional[Tuple[int, int]], reason: str):
        super().__init__(f"Invalid {which} {cell}: {reason}.")
        self.which  = which
        self.cell   = cell
        self.reason = reason
