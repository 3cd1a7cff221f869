"""
main.py — Grid Pathfinding Visualizer Flask App
================================================
The web server that powers the visualizer.

Routes:
  GET  /                          – main UI
  GET  /api/algorithms            – registry cards (label, tags, pseudocode, …)
  POST /api/grid/generate         – new maze (or empty grid)
  POST /api/grid/clear            – remove every wall from the current grid
  POST /api/run                   – run an algorithm, load its trace for playback
  POST /api/playback/<action>     – play / pause / next / prev / reset / rewind / end
  POST /api/playback/seek         – jump to event N
  POST /api/playback/speed        – ms per event, or a named preset
  GET  /api/state                 – current playback state (polling drives the timer)
  POST /api/compare               – run two algorithms on the current grid

State management:
  Flask's signed cookie only carries a workspace id.  Grids, traces and
  playback controllers live in an in-memory store keyed by that id, so a
  Trace is never round-tripped through the cookie.  Each workspace holds:
    • grid            – the current GridModel
    • recorder        – the last Recorder (trace + metrics)
    • controller      – PlaybackController driven by a PollingScheduler
    • comparison      – last ComparisonResult

Playback timing:
  Nothing runs in the background.  Every request that touches a
  workspace takes the workspace lock, then polls its scheduler, which
  fires all the ticks that came due since the previous request.  The
  lock is held until the response is built, so two requests from the
  same session never interleave.  The browser polls /api/state while
  playing.
"""

import logging
import secrets
import threading
from collections import OrderedDict
from contextlib import contextmanager
from typing import Iterator, Optional

from flask import Flask, jsonify, render_template_string, request, session

from grid import (
    DEFAULT_COLS,
    DEFAULT_END,
    DEFAULT_ROWS,
    DEFAULT_START,
    MAZE_DENSITY,
    GridError,
    GridModel,
)
from algorithms import REGISTRY, UnknownAlgorithm, get_algorithm, list_algorithms
from algorithms.astar import HEURISTICS
from engine import (
    PlaybackController,
    PollingScheduler,
    Recorder,
    ComparisonResult,
    check_speed,
    compare,
)
from ui import (
    render_grid,
    playback_controls,
    algorithm_selector,
    maze_generator,
    analytics_panel,
    comparison_panel,
    pseudocode_viewer,
    explanation_panel,
    legend,
)

logger = logging.getLogger(__name__)


app = Flask(__name__)
app.secret_key = secrets.token_hex(32)
app.config["MAX_WORKSPACES"] = 256
# PATHVIZ_SECRET_KEY, PATHVIZ_MAX_WORKSPACES, … override the defaults above
app.config.from_prefixed_env("PATHVIZ")


class PayloadError(ValueError):
    """A request body that cannot be turned into grid / playback input."""
    kind = "bad_payload"


# ---------------------------------------------------------------------------
# Workspaces
# ---------------------------------------------------------------------------
class Workspace:
    def __init__(self):
        self.scheduler:  PollingScheduler           = PollingScheduler()
        self.grid:       GridModel                  = GridModel.empty()
        self.algorithm:  str                        = "bfs"
        self.heuristic:  str                        = "manhattan"
        self.recorder:   Optional[Recorder]         = None
        self.comparison: Optional[ComparisonResult] = None
        self.controller: PlaybackController         = PlaybackController(scheduler=self.scheduler)
        self.lock:       threading.RLock            = threading.RLock()

    def set_grid(self, grid: GridModel) -> None:
        """Swap the grid; the old run no longer matches it, so drop it."""
        self.grid = grid
        self.recorder = None
        self.comparison = None
        self.controller.dispose()
        self.controller = PlaybackController(scheduler=self.scheduler)

    def dispose(self) -> None:
        self.controller.dispose()


WORKSPACES: "OrderedDict[str, Workspace]" = OrderedDict()
_workspaces_lock = threading.Lock()

MAX_GRID_SIDE = 200


def get_workspace() -> Workspace:
    """The caller's workspace, created on first use.  Does not lock it."""
    ws_id = session.get("workspace_id")
    if ws_id is None:
        ws_id = secrets.token_hex(16)
        session["workspace_id"] = ws_id

    with _workspaces_lock:
        ws = WORKSPACES.get(ws_id)
        if ws is None:
            ws = Workspace()
            WORKSPACES[ws_id] = ws
            while len(WORKSPACES) > app.config["MAX_WORKSPACES"]:
                _, evicted = WORKSPACES.popitem(last=False)
                evicted.dispose()
        else:
            WORKSPACES.move_to_end(ws_id)
    return ws


@contextmanager
def workspace() -> Iterator[Workspace]:
    """
    The caller's workspace, locked for the rest of the request.  Its
    timer is polled first, so every tick that came due is applied once.
    """
    ws = get_workspace()
    with ws.lock:
        ws.scheduler.poll()
        yield ws


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------
def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PayloadError("Request body must be a JSON object.")
    return data


def _parse_grid(data) -> GridModel:
    try:
        grid = GridModel.from_dict(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise PayloadError(f"Invalid grid payload: {exc}") from exc
    if grid.rows > MAX_GRID_SIDE or grid.cols > MAX_GRID_SIDE:
        raise PayloadError(
            f"Grid is {grid.rows}x{grid.cols}; at most {MAX_GRID_SIDE}x{MAX_GRID_SIDE} is allowed"
        )
    return grid


def _int_field(data: dict, name: str, default: int, low: int, high: int) -> int:
    value = data.get(name, default)
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise PayloadError(f"{name} must be an integer in [{low}, {high}]")
    return value


def _coord_field(data: dict, name: str, default, rows: int, cols: int):
    value = data.get(name, default)
    try:
        r, c = (int(v) for v in value)
    except (TypeError, ValueError) as exc:
        raise PayloadError(f"{name} must be a [row, col] pair") from exc
    if not (0 <= r < rows and 0 <= c < cols):
        raise PayloadError(f"{name} {[r, c]} is outside a {rows}x{cols} grid")
    return (r, c)


def _check_heuristic(name) -> None:
    if name not in HEURISTICS:
        raise PayloadError(f"Unknown heuristic: {name!r}")


def _speed_field(data: dict, default: int) -> int:
    try:
        return check_speed(data.get("speed_ms", default))
    except ValueError as exc:
        raise PayloadError(str(exc)) from exc


def _pseudocode(ws: Workspace) -> str:
    info = get_algorithm(ws.algorithm)
    if info is None:
        return pseudocode_viewer([])
    return pseudocode_viewer(
        pseudocode_lines=info.pseudocode,
        current_line=info.line_for(ws.controller.current_event()),
        algo_label=info.label,
    )


def _state_payload(ws: Workspace) -> dict:
    ctl  = ws.controller
    proj = ctl.projection()
    return {
        "playback":    ctl.to_dict(),
        "projection":  proj.to_dict(),
        "svg":         render_grid(ws.grid, proj),
        "explanation": explanation_panel(ctl.current_event()),
        "controls":    playback_controls(ctl.state, ctl.total_events),
        "pseudocode":  _pseudocode(ws),
    }


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------
@app.errorhandler(GridError)
@app.errorhandler(PayloadError)
def handle_bad_input(exc):
    return jsonify({"error": exc.kind, "message": str(exc)}), 400


@app.errorhandler(UnknownAlgorithm)
def handle_unknown_algorithm(exc):
    return jsonify({"error": exc.kind, "message": str(exc)}), 400


# ---------------------------------------------------------------------------
# Main UI Route
# ---------------------------------------------------------------------------
@app.route("/")
def index():
    with workspace() as ws:
        ctl = ws.controller
        html = render_template_string(INDEX_TEMPLATE,
            svg=render_grid(ws.grid, ctl.projection()),
            legend=legend(),
            playback=playback_controls(ctl.state, ctl.total_events),
            algo_selector=algorithm_selector(
                algorithms=list_algorithms(),
                selected_key=ws.algorithm,
                selected_heuristic=ws.heuristic,
            ),
            maze_gen=maze_generator(ws.grid.rows, ws.grid.cols, MAZE_DENSITY),
            analytics=analytics_panel(ws.recorder.metrics if ws.recorder else None),
            comparison=comparison_panel(ws.comparison),
            pseudocode=_pseudocode(ws),
            explanation=explanation_panel(ctl.current_event()),
            algorithms=list_algorithms(),
        )
    return html


# ---------------------------------------------------------------------------
# API: Registry
# ---------------------------------------------------------------------------
@app.route("/api/algorithms")
def api_algorithms():
    return jsonify([info.to_dict() for info in list_algorithms()])


# ---------------------------------------------------------------------------
# API: Grid
# ---------------------------------------------------------------------------
@app.route("/api/grid/generate", methods=["POST"])
def api_grid_generate():
    data = _json_body()

    rows = _int_field(data, "rows", DEFAULT_ROWS, 1, MAX_GRID_SIDE)
    cols = _int_field(data, "cols", DEFAULT_COLS, 1, MAX_GRID_SIDE)
    default_start = DEFAULT_START if rows > DEFAULT_START[0] and cols > DEFAULT_START[1] else (0, 0)
    default_end   = DEFAULT_END   if rows > DEFAULT_END[0]   and cols > DEFAULT_END[1]   else (rows - 1, cols - 1)
    start = _coord_field(data, "start", default_start, rows, cols)
    end   = _coord_field(data, "end",   default_end,   rows, cols)
    if start == end:
        raise PayloadError("start and end must be different cells")

    if data.get("empty"):
        grid = GridModel.empty(rows, cols, start, end)
    else:
        density = data.get("density", MAZE_DENSITY)
        seed    = data.get("seed")
        if isinstance(density, bool) or not isinstance(density, (int, float)) or not 0 <= density <= 1:
            raise PayloadError("density must be a number in [0, 1]")
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            raise PayloadError("seed must be an integer")
        grid = GridModel.generate_maze(rows, cols, start, end, density=density, seed=seed)

    with workspace() as ws:
        ws.set_grid(grid)
    logger.info("new %dx%d grid, %d walls", rows, cols, len(grid.walls()))
    return jsonify({"grid": grid.to_dict(), "svg": render_grid(grid)})


@app.route("/api/grid/clear", methods=["POST"])
def api_grid_clear():
    with workspace() as ws:
        ws.set_grid(ws.grid.without_walls())
        grid = ws.grid
    return jsonify({"grid": grid.to_dict(), "svg": render_grid(grid)})


# ---------------------------------------------------------------------------
# API: Run Algorithm
# ---------------------------------------------------------------------------
@app.route("/api/run", methods=["POST"])
def api_run():
    data = _json_body()
    grid = _parse_grid(data["grid"]) if "grid" in data else None

    with workspace() as ws:
        algo_key  = data.get("algorithm", ws.algorithm)
        heuristic = data.get("heuristic", ws.heuristic)
        info = get_algorithm(algo_key)
        if info is None:
            raise UnknownAlgorithm(algo_key)
        if info.has_heuristic:
            _check_heuristic(heuristic)
        speed_ms = _speed_field(data, info.default_speed_ms)

        # nothing below changes the workspace until the run has succeeded
        target = grid if grid is not None else ws.grid
        logger.info("run %s on %r", algo_key, target)
        rec = Recorder()
        rec.start(algo_key, target, heuristic=heuristic)
        metrics = rec.run_to_completion()

        if grid is not None:
            ws.set_grid(grid)
        ws.algorithm = algo_key
        ws.heuristic = heuristic
        ws.recorder  = rec
        ws.controller.load(rec.trace)
        ws.controller.set_speed(speed_ms)

        payload = _state_payload(ws)
    payload.update({
        "metrics":   metrics.to_dict(),
        "analytics": analytics_panel(metrics),
    })
    return jsonify(payload)


# ---------------------------------------------------------------------------
# API: Playback
# ---------------------------------------------------------------------------
_ACTIONS = {
    "play":   PlaybackController.play,
    "pause":  PlaybackController.pause,
    "next":   PlaybackController.step_forward,
    "prev":   PlaybackController.step_back,
    "reset":  PlaybackController.reset,
    "rewind": PlaybackController.rewind,
    "end":    PlaybackController.jump_to_end,
}


@app.route("/api/playback/<action>", methods=["POST"])
def api_playback(action: str):
    fn = _ACTIONS.get(action)
    if fn is None:
        raise PayloadError(f"Unknown playback action: {action!r}")
    with workspace() as ws:
        fn(ws.controller)
        return jsonify(_state_payload(ws))


@app.route("/api/playback/seek", methods=["POST"])
def api_playback_seek():
    data = _json_body()
    index = data.get("index")
    if isinstance(index, bool) or not isinstance(index, int):
        raise PayloadError("index must be an integer")
    with workspace() as ws:
        ws.controller.seek(index)
        return jsonify(_state_payload(ws))


@app.route("/api/playback/speed", methods=["POST"])
def api_playback_speed():
    data = _json_body()
    with workspace() as ws:
        try:
            if "preset" in data:
                ws.controller.set_speed_preset(data["preset"])
            else:
                ws.controller.set_speed(data.get("speed_ms"))
        except KeyError as exc:
            raise PayloadError(f"Unknown speed preset: {exc}") from exc
        except ValueError as exc:
            raise PayloadError(str(exc)) from exc
        return jsonify(_state_payload(ws))


@app.route("/api/state")
def api_state():
    with workspace() as ws:
        return jsonify(_state_payload(ws))


# ---------------------------------------------------------------------------
# API: Comparison Mode
# ---------------------------------------------------------------------------
@app.route("/api/compare", methods=["POST"])
def api_compare():
    data = _json_body()
    left_key  = data.get("left", "astar")
    right_key = data.get("right", "greedy")
    for key in (left_key, right_key):
        if key not in REGISTRY:
            raise UnknownAlgorithm(key)

    with workspace() as ws:
        heuristic = data.get("heuristic", ws.heuristic)
        _check_heuristic(heuristic)

        recorders = []
        for key in (left_key, right_key):
            rec = Recorder()
            rec.start(key, ws.grid, heuristic=heuristic)
            rec.run_to_completion()
            recorders.append(rec)

        ws.comparison = compare(*recorders)
        comparison = ws.comparison
    logger.info("compared %s vs %s", left_key, right_key)
    return jsonify({
        "comparison": comparison.to_dict(),
        "panel":      comparison_panel(comparison),
    })


# ---------------------------------------------------------------------------
# HTML Template
# ---------------------------------------------------------------------------
INDEX_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Grid Pathfinding Visualizer</title>
  <link rel="preconnect" href="https://fonts.googleapis.com">
  <link rel="preconnect" href="https://fonts.gstatic.com" crossorigin>
  <link href="https://fonts.googleapis.com/css2?family=JetBrains+Mono:wght@400;500;700&family=DM+Sans:wght@400;500;700&display=swap" rel="stylesheet">
  <style>
    :root { --ink: #e6edf3; --muted: #7d8590; --board: #0d1117; --shell: #010409; --card: #161b22; --line: #30363d; --run: #0ea5e9; }
    * { box-sizing: border-box; margin: 0; padding: 0; }
    body { display: flex; height: 100vh; overflow: hidden; background: var(--shell); color: var(--ink); font: 14px 'DM Sans', system-ui, sans-serif; }
    #sidebar { width: 340px; padding: 20px 14px; overflow-y: auto; border-right: 1px solid var(--line); background: var(--board); }
    #main { flex: 1; display: flex; flex-direction: column; }
    #canvas-container { flex: 1; display: flex; flex-direction: column; align-items: center; justify-content: center; gap: 12px; }
    #bottom-panel { display: grid; grid-template-columns: 1fr 1fr; gap: 16px; padding: 16px; max-height: 340px; border-top: 1px solid var(--line); background: var(--board); }
    .panel, .code-block { margin-bottom: 14px; padding: 14px; border: 1px solid var(--line); border-radius: 10px; background: var(--card); }
    .panel h3 { margin-bottom: 10px; font-size: 12px; letter-spacing: .06em; text-transform: uppercase; }
    .code-block { overflow-y: auto; font: 13px/1.6 'JetBrains Mono', monospace; }
    .code-line { padding: 1px 10px; white-space: pre; }
    .code-line.highlight { border-left: 3px solid var(--run); background: rgba(14, 165, 233, .15); }
    .explanation-text { color: var(--muted); line-height: 1.8; }
    .button-row { display: flex; gap: 6px; margin-bottom: 10px; }
    button { padding: 7px 12px; border: 0; border-radius: 6px; background: var(--run); color: #fff; font-weight: 600; cursor: pointer; }
    .btn-secondary { border: 1px solid var(--line); background: var(--board); }
    select, input { padding: 4px; border: 1px solid var(--line); border-radius: 6px; background: var(--board); color: var(--ink); }
    label { display: block; margin: 6px 0; font-size: 13px; color: var(--muted); }
    table { width: 100%; font-size: 13px; }
    td, th { padding: 3px 6px; text-align: left; }
    .hint, .placeholder { margin: 8px 0; font-size: 12px; color: var(--muted); }
    .finished-badge, .status-badge { padding: 2px 6px; border-radius: 4px; font-size: 11px; background: var(--board); }
    .legend { display: flex; gap: 14px; font-size: 12px; color: var(--muted); }
    .swatch { display: inline-block; width: 12px; height: 12px; margin-right: 4px; border-radius: 3px; vertical-align: middle; }
  </style>
</head>
<body>
  <div id="sidebar">
    <div id="algo-panel">{{ algo_selector|safe }}</div>
    <div id="playback-panel">{{ playback|safe }}</div>
    {{ maze_gen|safe }}
    <div id="analytics">{{ analytics|safe }}</div>
    <div class="panel">
      <h3>⚖️ Compare</h3>
      <select id="cmp-left">
        {% for a in algorithms %}<option value="{{ a.key }}" {% if a.key == 'astar' %}selected{% endif %}>{{ a.label }}</option>{% endfor %}
      </select>
      <select id="cmp-right">
        {% for a in algorithms %}<option value="{{ a.key }}" {% if a.key == 'greedy' %}selected{% endif %}>{{ a.label }}</option>{% endfor %}
      </select>
      <button id="btn-compare" class="btn-secondary">Compare</button>
    </div>
    <div id="comparison">{{ comparison|safe }}</div>
  </div>

  <div id="main">
    <div id="canvas-container">
      <div id="canvas-svg">{{ svg|safe }}</div>
      {{ legend|safe }}
    </div>
    <div id="bottom-panel">
      <div id="pseudocode">{{ pseudocode|safe }}</div>
      <div id="explanation">{{ explanation|safe }}</div>
    </div>
  </div>

  <script>
    const $ = (id) => document.getElementById(id);
    let pollTimer = null;

    async function post(url, body) {
      const res = await fetch(url, {
        method: 'POST',
        headers: {'Content-Type': 'application/json'},
        body: JSON.stringify(body || {}),
      });
      const data = await res.json();
      if (!res.ok) alert(data.message || 'Request failed');
      return data;
    }

    function applyState(data) {
      if (!data || !data.playback) return;
      $('canvas-svg').innerHTML = data.svg;
      $('explanation').innerHTML = data.explanation;
      $('playback-panel').innerHTML = data.controls;
      if (data.analytics) $('analytics').innerHTML = data.analytics;
      if (data.pseudocode) $('pseudocode').innerHTML = data.pseudocode;
      const playing = data.playback.status === 'playing';
      if (playing && !pollTimer) {
        pollTimer = setInterval(async () => {
          const res = await fetch('/api/state');
          applyState(await res.json());
        }, 50);
      } else if (!playing && pollTimer) {
        clearInterval(pollTimer);
        pollTimer = null;
      }
    }

    document.addEventListener('click', async (e) => {
      const id = e.target.id;
      const actions = {
        'btn-play': null, 'btn-prev': 'prev', 'btn-next': 'next',
        'btn-rewind': 'rewind', 'btn-end': 'end', 'btn-reset': 'reset',
      };
      if (id === 'btn-play') {
        const playing = e.target.title === 'Pause';
        applyState(await post('/api/playback/' + (playing ? 'pause' : 'play')));
      } else if (id in actions) {
        applyState(await post('/api/playback/' + actions[id]));
      } else if (id === 'btn-run') {
        const h = $('heuristic-selector');
        applyState(await post('/api/run', {
          algorithm: $('algo-selector').value,
          heuristic: h ? h.value : undefined,
        }));
      } else if (id === 'btn-gen-maze') {
        const seed = $('maze-seed').value;
        const data = await post('/api/grid/generate', {
          rows: +$('maze-rows').value,
          cols: +$('maze-cols').value,
          density: +$('maze-density').value,
          seed: seed === '' ? null : +seed,
        });
        if (data.svg) $('canvas-svg').innerHTML = data.svg;
      } else if (id === 'btn-clear-walls') {
        const data = await post('/api/grid/clear');
        if (data.svg) $('canvas-svg').innerHTML = data.svg;
      } else if (id === 'btn-compare') {
        const data = await post('/api/compare', {left: $('cmp-left').value, right: $('cmp-right').value});
        if (data.panel) $('comparison').innerHTML = data.panel;
      }
    });

    document.addEventListener('change', async (e) => {
      if (e.target.id === 'speed-selector') {
        applyState(await post('/api/playback/speed', {preset: e.target.value}));
      } else if (e.target.id === 'speed-slider') {
        applyState(await post('/api/playback/speed', {speed_ms: +e.target.value}));
      } else if (e.target.id === 'scrubber') {
        applyState(await post('/api/playback/seek', {index: +e.target.value}));
      }
    });

    document.addEventListener('input', (e) => {
      if (e.target.id === 'maze-density') $('maze-density-val').textContent = e.target.value;
    });
  </script>
</body>
</html>
"""


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
    logger.info("Grid Pathfinding Visualizer on http://localhost:5000")
    app.run(debug=True, host="0.0.0.0", port=5000)
