"""
canvas.py — SVG Grid Renderer
==============================
Pure rendering function: GridModel + Projection → SVG string.

The renderer consumes:
  • grid        – the GridModel (walls, start, end, costs)
  • projection  – what playback has revealed so far (visited, frontier,
                  path, current cell, outcome)
  • config      – visual config (cell size, colors, fonts, …)

And produces an SVG string ready to inject into the DOM.

Design decisions:
  - NO mutation.  This function is stateless — the caller passes in
    everything it needs and gets back a string.
  - Each cell gets exactly one fill, picked by a fixed priority:
        start/end > path > current > visited > explored > wall > empty
  - Bidirectional runs colour each frontier separately so the meeting
    in the middle is visible.
  - Weighted cells print their entry cost in the corner.
"""

from typing import Dict, Optional

from grid import CellKind, Coordinate, GridModel
from engine.projection import EMPTY_PROJECTION, Projection


# ---------------------------------------------------------------------------
# Visual Config: color palette, dimensions, fonts
# ---------------------------------------------------------------------------
class CanvasConfig:
    # canvas
    cell_size: int = 22
    gap:       int = 1
    bg:        str = "#0d1117"

    # cell colors (role → fill)
    cell_colors: Dict[str, str] = {
        "empty":         "#1c2128",   # dark grey
        "wall":          "#484f58",   # slate
        "start":         "#0ea5e9",   # cyan
        "end":           "#ec4899",   # pink
        "explored":      "#155e75",   # dim teal, on the frontier
        "visited":       "#10b981",   # emerald green, settled
        "visited_start": "#3b82f6",   # blue, forward frontier
        "visited_end":   "#f97316",   # orange, backward frontier
        "current":       "#06b6d4",   # bright teal, current highlight
        "path":          "#a855f7",   # purple, final path
    }

    cell_radius:       int = 3
    current_stroke:    str = "#e6edf3"
    cost_label_color:  str = "#7d8590"
    cost_label_size:   int = 9


CONFIG = CanvasConfig()


# ---------------------------------------------------------------------------
# Main Render Function
# ---------------------------------------------------------------------------
def render_grid(
    grid: GridModel,
    projection: Optional[Projection] = None,
    config: CanvasConfig = CONFIG,
) -> str:
    """
    Returns an SVG string.

    Args:
        grid       : The grid to render.
        projection : Playback projection (or None for the bare grid).
        config     : Visual config.
    """
    proj = projection if projection is not None else EMPTY_PROJECTION
    step = config.cell_size + config.gap
    width, height = grid.cols * step + config.gap, grid.rows * step + config.gap
    path_cells = set(proj.path)

    svg_parts = [
        f'<svg width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}" '
        f'xmlns="http://www.w3.org/2000/svg" style="background: {config.bg};">',
        f'<rect width="{width}" height="{height}" fill="{config.bg}"/>',
    ]

    for coord, kind in grid.cells():
        role = _cell_role(coord, kind, proj, path_cells)
        svg_parts.append(_render_cell(grid, coord, role, proj.current == coord, config))

    svg_parts.append("</svg>")
    return "\n".join(svg_parts)


def _cell_role(coord: Coordinate, kind: CellKind, proj: Projection, path_cells: set) -> str:
    if kind is CellKind.START:
        return "start"
    if kind is CellKind.END:
        return "end"
    if coord in path_cells:
        return "path"
    if coord == proj.current:
        return "current"
    if coord in proj.visited_start:
        return "visited_start"
    if coord in proj.visited_end:
        return "visited_end"
    if coord in proj.visited:
        return "visited"
    if coord in proj.explored:
        return "explored"
    if kind is CellKind.WALL:
        return "wall"
    return "empty"


# ---------------------------------------------------------------------------
# Cell Rendering
# ---------------------------------------------------------------------------
def _render_cell(
    grid: GridModel,
    coord: Coordinate,
    role: str,
    is_current: bool,
    config: CanvasConfig,
) -> str:
    step = config.cell_size + config.gap
    x = config.gap + coord.col * step
    y = config.gap + coord.row * step
    fill = config.cell_colors.get(role, config.cell_colors["empty"])
    stroke = f' stroke="{config.current_stroke}" stroke-width="2"' if is_current else ""

    parts = [
        f'<rect class="cell {role}" data-row="{coord.row}" data-col="{coord.col}" '
        f'x="{x}" y="{y}" width="{config.cell_size}" height="{config.cell_size}" '
        f'rx="{config.cell_radius}" fill="{fill}"{stroke}/>'
    ]

    cost = grid.cost(coord)
    if cost != 1 and role != "wall":
        parts.append(
            f'<text x="{x + config.cell_size - 3}" y="{y + config.cost_label_size + 1}" '
            f'text-anchor="end" font-size="{config.cost_label_size}" '
            f'font-family="\'JetBrains Mono\', monospace" '
            f'fill="{config.cost_label_color}">{cost}</text>'
        )
    return "".join(parts)
