import re

from grid import Coordinate, GridModel
from algorithms import get_algorithm, list_algorithms, search
from algorithms.step import EventKind, StepEvent
from engine import PlaybackState, PlaybackStatus, RunMetrics, project
from engine.recorder import ComparisonResult
from ui import (
    CanvasConfig,
    algorithm_selector,
    analytics_panel,
    comparison_panel,
    explanation_panel,
    legend,
    maze_generator,
    playback_controls,
    pseudocode_viewer,
    render_grid,
)


def _roles(svg: str) -> dict:
    return {
        (int(r), int(c)): role
        for role, r, c in re.findall(r'class="cell (\w+)" data-row="(\d+)" data-col="(\d+)"', svg)
    }


# ---------------------------------------------------------------------------
#  Canvas
# ---------------------------------------------------------------------------
def test_one_rect_per_cell(wall_gap_grid: GridModel) -> None:
    svg = render_grid(wall_gap_grid)
    assert svg.startswith("<svg")
    assert svg.count('class="cell ') == 25
    roles = _roles(svg)
    assert roles[(0, 0)] == "start"
    assert roles[(4, 4)] == "end"
    assert roles[(0, 2)] == "wall"
    assert roles[(2, 2)] == "empty"


def test_finished_run_paints_path(wall_gap_grid: GridModel) -> None:
    trace = search(wall_gap_grid, (0, 0), (4, 4), algorithm="bfs")
    roles = _roles(render_grid(wall_gap_grid, project(trace, len(trace) - 1)))
    for cell in trace.path()[1:-1]:
        assert roles[tuple(cell)] == "path"
    # endpoints keep their own colour
    assert roles[(0, 0)] == "start"


def test_current_cell_is_outlined(open3_grid: GridModel) -> None:
    trace = search(open3_grid, (0, 0), (2, 2), algorithm="bfs")
    proj = project(trace, 1)
    svg = render_grid(open3_grid, proj)
    assert _roles(svg)[tuple(proj.current)] == "current"
    assert 'stroke-width="2"' in svg


def test_bidirectional_frontiers_have_own_roles(open3_grid: GridModel) -> None:
    trace = search(open3_grid, (0, 0), (2, 2), algorithm="bidirectional")
    # stop before the path is revealed
    index = next(i for i, e in enumerate(trace) if e.kind is EventKind.PATH) - 1
    roles = set(_roles(render_grid(open3_grid, project(trace, index))).values())
    assert "visited_start" in roles or "visited_end" in roles


def test_cost_labels_on_weighted_cells() -> None:
    grid = GridModel.from_rows([[2, 0, 3]], costs=[[1, 7, 1]])
    svg = render_grid(grid)
    assert ">7</text>" in svg
    assert svg.count("<text") == 1


def test_config_changes_geometry(open3_grid: GridModel) -> None:
    class Big(CanvasConfig):
        cell_size = 40
        gap = 0

    svg = render_grid(open3_grid, config=Big())
    assert 'width="120"' in svg


# ---------------------------------------------------------------------------
#  Panels
# ---------------------------------------------------------------------------
def test_playback_controls_reflect_state() -> None:
    html = playback_controls(PlaybackState(4, PlaybackStatus.PLAYING, 60), total_events=20)
    assert "⏸" in html
    assert 'max="19"' in html
    assert '<option value="medium" selected>' in html
    assert ">5</span>" in html

    idle = playback_controls()
    assert "▶" in idle and "FINISHED" not in idle

    done = playback_controls(PlaybackState(19, PlaybackStatus.FINISHED, 30), total_events=20)
    assert "FINISHED" in done


def test_heuristic_picker_only_for_heuristic_searches() -> None:
    algos = list_algorithms()
    assert "heuristic-selector" in algorithm_selector(algos, "astar", "euclidean")
    assert '<option value="euclidean" selected>' in algorithm_selector(algos, "astar", "euclidean")
    assert "heuristic-selector" not in algorithm_selector(algos, "bfs")
    assert '<option value="jps" selected>' in algorithm_selector(algos, "jps")


def test_maze_generator_fields() -> None:
    html = maze_generator(12, 30, 0.25, seed=9)
    assert 'id="maze-rows" value="12"' in html
    assert 'id="maze-seed" value="9"' in html


def test_analytics_placeholder_and_values() -> None:
    assert "Run an algorithm" in analytics_panel(None)
    html = analytics_panel(RunMetrics(algo_label="A* Search", cells_visited=42,
                                      path_length=8, found=True))
    assert "A* Search" in html
    assert "<strong>42</strong>" in html
    assert "8 moves" in html


def test_comparison_panel() -> None:
    assert "placeholder" in comparison_panel(None)
    comp = ComparisonResult(
        left=RunMetrics(algo_label="BFS", found=True, path_length=8),
        right=RunMetrics(algo_label="DFS", found=False),
        winner_visited="tie", winner_explored="BFS", winner_path="BFS",
    )
    html = comparison_panel(comp)
    assert "BFS vs DFS" in html
    assert "—" in html


def test_pseudocode_is_escaped_and_highlighted() -> None:
    html = pseudocode_viewer(["if a < b:", "    return"], current_line=0, algo_label="X & Y")
    assert "a &lt; b" in html
    assert "X &amp; Y" in html
    assert 'class="code-line highlight" data-line="0"' in html
    assert "Select an algorithm" in pseudocode_viewer([])


def test_pseudocode_for_every_algorithm_renders() -> None:
    for info in list_algorithms():
        html = pseudocode_viewer(info.pseudocode, algo_label=info.label)
        assert html.count('class="code-line') == len(info.pseudocode)
    assert get_algorithm("dfs").pseudocode


def test_explanation_mentions_cell() -> None:
    html = explanation_panel(StepEvent(EventKind.EXPLORE, Coordinate(1, 2)))
    assert "(1, 2)" in html
    assert "Path found" in explanation_panel(StepEvent(EventKind.FOUND))
    assert "Run Algorithm" in explanation_panel(None)


def test_legend_lists_roles() -> None:
    html = legend()
    assert "Visited (from start)" in html
    assert html.count("legend-item") == 8


def test_line_for_maps_events_into_pseudocode() -> None:
    for info in list_algorithms():
        assert info.line_for(None) == -1
        assert info.event_lines
        for line in info.event_lines.values():
            assert 0 <= line < len(info.pseudocode)
    bfs = get_algorithm("bfs")
    assert bfs.line_for(StepEvent(EventKind.EXPLORE, Coordinate(0, 1))) == 11
    assert bfs.line_for(StepEvent(EventKind.VISIT_START, Coordinate(0, 1))) == -1
    html = pseudocode_viewer(bfs.pseudocode, bfs.line_for(StepEvent(EventKind.NOT_FOUND)))
    assert "NOT FOUND" in html.split("highlight")[1]
