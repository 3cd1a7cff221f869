"""
ui/
---
Presentation layer.

    from ui import render_grid
    from ui import playback_controls, algorithm_selector, …
"""

from ui.canvas import render_grid, CanvasConfig

from ui.controls import (
    playback_controls,
    algorithm_selector,
    maze_generator,
    analytics_panel,
    comparison_panel,
    pseudocode_viewer,
    explanation_panel,
    legend,
)

__all__ = [
    "render_grid",
    "CanvasConfig",
    "playback_controls",
    "algorithm_selector",
    "maze_generator",
    "analytics_panel",
    "comparison_panel",
    "pseudocode_viewer",
    "explanation_panel",
    "legend",
]
