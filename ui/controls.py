"""
controls.py — Sidebar & Bottom Panels
======================================
Each panel is a pure function: state in, HTML string out.  main.py drops
the strings into the page and swaps them in place after every API call,
so element ids here are the ones the page script listens on.

Panels:
  • playback_controls   – transport buttons, event scrubber, speed
  • algorithm_selector  – search dropdown, heuristic picker for A* and Greedy
  • maze_generator      – rows, cols, wall density, seed
  • analytics_panel     – RunMetrics of the last run
  • comparison_panel    – two RunMetrics side by side with the winner per row
  • pseudocode_viewer   – the search's pseudocode, one line highlighted
  • explanation_panel   – one sentence about the event under the cursor
  • legend              – what each cell colour means
"""

from html import escape
from typing import Callable, List, Optional, Tuple

from algorithms import AlgoInfo
from algorithms.astar import HEURISTICS
from algorithms.step import EventKind, StepEvent
from engine import ComparisonResult, PlaybackState, PlaybackStatus, RunMetrics, SPEED_PRESETS
from ui.canvas import CONFIG, CanvasConfig


# (button id, tooltip, glyph); the play button is added separately
_TRANSPORT: List[Tuple[str, str, str]] = [
    ("btn-rewind", "Rewind to first event", "⏮"),
    ("btn-prev",   "Step back",             "◀"),
    ("btn-next",   "Step forward",          "▶"),
    ("btn-end",    "Jump to end",           "⏭"),
    ("btn-reset",  "Reset",                 "⟲"),
]

_HEURISTIC_LABELS = {
    "manhattan": "Manhattan",
    "euclidean": "Euclidean",
    "zero":      "Zero (A* becomes Dijkstra)",
}


def _panel(css: str, title: str, body: str) -> str:
    return f'<div class="panel {css}"><h3>{title}</h3>{body}</div>'


def _option(value: str, label: str, selected: bool) -> str:
    sel = " selected" if selected else ""
    return f'<option value="{escape(value)}"{sel}>{escape(label)}</option>'


# ---------------------------------------------------------------------------
# Playback Controls
# ---------------------------------------------------------------------------
def playback_controls(state: Optional[PlaybackState] = None, total_events: int = 0) -> str:
    state   = state or PlaybackState()
    playing = state.status is PlaybackStatus.PLAYING

    buttons = [f'<button id="{bid}" title="{tip}">{glyph}</button>' for bid, tip, glyph in _TRANSPORT]
    play = (
        f'<button id="btn-play" title="{"Pause" if playing else "Play"}">'
        f'{"⏸" if playing else "▶"}</button>'
    )
    buttons.insert(2, play)

    presets = "".join(
        _option(name, f"{name.capitalize()} ({ms} ms)", ms == state.speed_ms)
        for name, ms in SPEED_PRESETS.items()
    )
    badge = ""
    if state.status is PlaybackStatus.FINISHED:
        badge = ' <span class="finished-badge">FINISHED</span>'

    body = (
        f'<div class="button-row">{"".join(buttons)}</div>'
        f'<input type="range" id="scrubber" min="-1" max="{max(total_events - 1, -1)}" '
        f'value="{state.current_index}">'
        f'<div class="step-info">Event <span id="current-step">{state.current_index + 1}</span>'
        f' / <span id="total-steps">{total_events}</span>'
        f' <span class="status-badge">{state.status.value}</span>{badge}</div>'
        f'<div class="speed-control"><label>Speed:</label>'
        f'<select id="speed-selector">{presets}</select>'
        f'<input type="range" id="speed-slider" min="5" max="100" value="{state.speed_ms}"></div>'
    )
    return _panel("playback-controls", "⏯ Playback", body)


# ---------------------------------------------------------------------------
# Algorithm Selector
# ---------------------------------------------------------------------------
def algorithm_selector(
    algorithms: List[AlgoInfo],
    selected_key: str = "bfs",
    selected_heuristic: str = "manhattan",
) -> str:
    choices = "".join(
        _option(a.key, f"{a.label} ({a.complexity_time})", a.key == selected_key)
        for a in algorithms
    )
    body = f'<select id="algo-selector">{choices}</select>'

    chosen = next((a for a in algorithms if a.key == selected_key), None)
    if chosen is not None and chosen.has_heuristic:
        h_choices = "".join(
            _option(key, _HEURISTIC_LABELS.get(key, key), key == selected_heuristic)
            for key in HEURISTICS
        )
        body += (
            '<div class="heuristic-picker"><label>Heuristic:</label>'
            f'<select id="heuristic-selector">{h_choices}</select></div>'
        )
    if chosen is not None:
        tags = ", ".join(chosen.tags)
        body += f'<p class="hint">{escape(chosen.description)}</p><p class="hint">{escape(tags)}</p>'

    body += '<button id="btn-run" class="btn-primary">▶ Run Algorithm</button>'
    return _panel("algorithm-selector", "🧠 Algorithm", body)


# ---------------------------------------------------------------------------
# Maze Generator
# ---------------------------------------------------------------------------
def maze_generator(
    rows: int = 20,
    cols: int = 40,
    density: float = 0.3,
    seed: Optional[int] = None,
) -> str:
    seed_value = "" if seed is None else seed
    body = (
        f'<label>Rows: <input type="number" id="maze-rows" value="{rows}" min="2" max="60"></label>'
        f'<label>Cols: <input type="number" id="maze-cols" value="{cols}" min="2" max="80"></label>'
        f'<label>Wall %: <input type="range" id="maze-density" min="0" max="0.5" step="0.05" '
        f'value="{density}"> <span id="maze-density-val">{density}</span></label>'
        f'<label>Seed: <input type="number" id="maze-seed" value="{seed_value}" placeholder="random"></label>'
        '<button id="btn-gen-maze" class="btn-secondary">Generate Maze</button>'
        '<button id="btn-clear-walls" class="btn-secondary">Clear Walls</button>'
    )
    return _panel("maze-generator", "🌐 Grid", body)


# ---------------------------------------------------------------------------
# Analytics & Comparison
# ---------------------------------------------------------------------------
# (label, formatter) per metric row, shared by both panels
_METRIC_ROWS: List[Tuple[str, Callable[[RunMetrics], str]]] = [
    ("Cells Visited",  lambda m: str(m.cells_visited)),
    ("Cells Explored", lambda m: str(m.cells_explored)),
    ("Path Length",    lambda m: f"{m.path_length} moves" if m.found else "—"),
    ("Path Cost",      lambda m: f"{m.path_cost:.2f}" if m.found else "—"),
    ("Total Events",   lambda m: str(m.total_events)),
    ("Wall Time",      lambda m: f"{m.wall_time_ms:.2f} ms"),
]


def analytics_panel(metrics: Optional[RunMetrics] = None) -> str:
    if metrics is None:
        return _panel("analytics-panel", "📊 Analytics",
                      '<p class="placeholder">Run an algorithm to see metrics.</p>')

    rows = "".join(
        f"<tr><td>{label}:</td><td><strong>{fmt(metrics)}</strong></td></tr>"
        for label, fmt in _METRIC_ROWS
    )
    outcome = "✅ Found" if metrics.found else "❌ Not Found"
    rows += f"<tr><td>Outcome:</td><td><strong>{outcome}</strong></td></tr>"
    if metrics.heuristic:
        rows += f"<tr><td>Heuristic:</td><td>{escape(metrics.heuristic)}</td></tr>"
    return _panel("analytics-panel", f"📊 Analytics: {escape(metrics.algo_label)}",
                  f"<table>{rows}</table>")


def comparison_panel(comp: Optional[ComparisonResult] = None) -> str:
    if comp is None:
        return _panel("comparison-panel", "⚖️ Comparison Mode",
                      '<p class="placeholder">Run two algorithms on the same grid to compare.</p>')

    left, right = comp.left, comp.right
    winners = {
        "Cells Visited":  comp.winner_visited,
        "Cells Explored": comp.winner_explored,
        "Path Length":    comp.winner_path,
    }

    def badge(label: Optional[str]) -> str:
        if label is None:
            return ""
        return "🟰 Tie" if label == "tie" else f"👑 {escape(label)}"

    body_rows = "".join(
        f"<tr><td>{label}</td><td>{fmt(left)}</td><td>{fmt(right)}</td>"
        f"<td>{badge(winners.get(label))}</td></tr>"
        for label, fmt in _METRIC_ROWS
    )
    head = (
        f"<tr><th>Metric</th><th>{escape(left.algo_label)}</th>"
        f"<th>{escape(right.algo_label)}</th><th>Winner</th></tr>"
    )
    title = f"⚖️ Comparison: {escape(left.algo_label)} vs {escape(right.algo_label)}"
    return _panel("comparison-panel", title,
                  f'<table class="comparison-table"><thead>{head}</thead><tbody>{body_rows}</tbody></table>')


# ---------------------------------------------------------------------------
# Pseudocode Viewer
# ---------------------------------------------------------------------------
def pseudocode_viewer(
    pseudocode_lines: List[str],
    current_line: int = -1,
    algo_label: str = "",
) -> str:
    if not pseudocode_lines:
        return '<div class="code-block"><p class="placeholder">Select an algorithm to view pseudocode</p></div>'

    lines = "".join(
        f'<div class="code-line{" highlight" if i == current_line else ""}" data-line="{i}">'
        f"{escape(line)}</div>"
        for i, line in enumerate(pseudocode_lines)
    )
    title = f'<div class="code-title">{escape(algo_label)}</div>' if algo_label else ""
    return f'<div class="code-block">{title}{lines}</div>'


# ---------------------------------------------------------------------------
# Explanation Panel
# ---------------------------------------------------------------------------
_EXPLAIN = {
    EventKind.VISIT:         "Settling {cell}: its shortest known route is final.",
    EventKind.VISIT_START:   "Forward frontier settles {cell}.",
    EventKind.VISIT_END:     "Backward frontier settles {cell}.",
    EventKind.EXPLORE:       "Discovered {cell} and added it to the frontier.",
    EventKind.EXPLORE_START: "Forward frontier discovers {cell}.",
    EventKind.EXPLORE_END:   "Backward frontier discovers {cell}.",
    EventKind.PATH:          "Route passes through {cell}.",
    EventKind.FOUND:         "Path found!",
    EventKind.NOT_FOUND:     "No path exists: every reachable cell was searched.",
}


def explanation_panel(event: Optional[StepEvent] = None) -> str:
    if event is None:
        text = "▶ Click <strong>Run Algorithm</strong>, then play to watch the search unfold."
    else:
        text = escape(_EXPLAIN[event.kind].format(cell=event.cell))
    return f'<div class="explanation-text">{text}</div>'


# ---------------------------------------------------------------------------
# Legend
# ---------------------------------------------------------------------------
_LEGEND_LABELS = {
    "start":         "Start",
    "end":           "End",
    "wall":          "Wall",
    "explored":      "Frontier",
    "visited":       "Visited",
    "visited_start": "Visited (from start)",
    "visited_end":   "Visited (from end)",
    "path":          "Path",
}


def legend(config: CanvasConfig = CONFIG) -> str:
    items = "".join(
        f'<span class="legend-item"><span class="swatch" style="background:{config.cell_colors[role]}">'
        f"</span>{label}</span>"
        for role, label in _LEGEND_LABELS.items()
    )
    return f'<div class="legend">{items}</div>'
