import threading

import pytest

import main
from grid import GridModel
from algorithms.step import EventKind
from tests.conftest import WALL_GAP


@pytest.fixture
def client():
    main.app.config["TESTING"] = True
    main.WORKSPACES.clear()
    with main.app.test_client() as c:
        yield c
    for ws in main.WORKSPACES.values():
        ws.dispose()
    main.WORKSPACES.clear()


def _workspace(client) -> "main.Workspace":
    with client.session_transaction() as sess:
        return main.WORKSPACES[sess["workspace_id"]]


def _run_wall_gap(client, algorithm: str = "bfs", **extra):
    body = {"grid": GridModel.from_strings(WALL_GAP).to_dict(), "algorithm": algorithm}
    body.update(extra)
    return client.post("/api/run", json=body)


# ---------------------------------------------------------------------------
#  Pages and registry
# ---------------------------------------------------------------------------
def test_index_renders(client) -> None:
    resp = client.get("/")
    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert "Grid Pathfinding Visualizer" in html
    assert "<svg" in html
    assert len(main.WORKSPACES) == 1


def test_algorithms_endpoint(client) -> None:
    data = client.get("/api/algorithms").get_json()
    assert [a["key"] for a in data] == list(main.REGISTRY)


# ---------------------------------------------------------------------------
#  Grid
# ---------------------------------------------------------------------------
def test_generate_is_seeded(client) -> None:
    body = {"rows": 10, "cols": 12, "start": [1, 1], "end": [8, 10], "seed": 4}
    a = client.post("/api/grid/generate", json=body).get_json()
    b = client.post("/api/grid/generate", json=body).get_json()
    assert a["grid"] == b["grid"]
    assert a["grid"]["rows"] == 10 and a["grid"]["cols"] == 12


def test_generate_empty_grid(client) -> None:
    data = client.post("/api/grid/generate", json={"rows": 4, "cols": 4, "empty": True}).get_json()
    grid = GridModel.from_dict(data["grid"])
    assert grid.walls() == []
    assert grid.start == (0, 0) and grid.end == (3, 3)


@pytest.mark.parametrize("body", [
    {"rows": 0},
    {"rows": "ten"},
    {"cols": 500},
    {"start": [99, 0]},
    {"start": "a"},
    {"start": [5, 5], "end": [5, 5]},
    {"density": 2},
    {"seed": "x"},
])
def test_generate_rejects_bad_payload(client, body) -> None:
    resp = client.post("/api/grid/generate", json=body)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "bad_payload"


def test_clear_walls(client) -> None:
    _run_wall_gap(client)
    data = client.post("/api/grid/clear").get_json()
    assert GridModel.from_dict(data["grid"]).walls() == []
    assert _workspace(client).recorder is None


# ---------------------------------------------------------------------------
#  Run
# ---------------------------------------------------------------------------
def test_run_loads_trace(client) -> None:
    resp = _run_wall_gap(client, "astar", heuristic="euclidean")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["metrics"]["found"] is True
    assert data["metrics"]["path_length"] == 8
    assert data["metrics"]["heuristic"] == "euclidean"
    assert data["playback"]["status"] == "idle"
    assert data["playback"]["speed_ms"] == 40
    assert data["playback"]["total_events"] > 0


def test_run_on_default_grid(client) -> None:
    data = client.post("/api/run", json={"algorithm": "jps"}).get_json()
    assert data["metrics"]["path_length"] == 38


def test_run_with_explicit_speed(client) -> None:
    data = _run_wall_gap(client, speed_ms=15).get_json()
    assert data["playback"]["speed_ms"] == 15


@pytest.mark.parametrize("extra, kind", [
    ({"algorithm": "teleport"}, "unknown_algorithm"),
    ({"algorithm": "astar", "heuristic": "octile"}, "bad_payload"),
    ({"speed_ms": 0}, "bad_payload"),
    ({"grid": {"cells": [[0, 9]]}}, "bad_payload"),
    ({"grid": {"cells": [[2, 0, 0]]}}, "invalid_endpoint"),
    ({"grid": {"cells": [[2, 1], [1, 3]]}}, None),
])
def test_run_errors(client, extra, kind) -> None:
    body = {"grid": GridModel.from_strings(WALL_GAP).to_dict(), "algorithm": "bfs"}
    body.update(extra)
    resp = client.post("/api/run", json=body)
    if kind is None:
        # boxed in is a finished run, not an error
        assert resp.status_code == 200
        assert resp.get_json()["metrics"]["found"] is False
    else:
        assert resp.status_code == 400
        assert resp.get_json()["error"] == kind


def test_non_object_body_rejected(client) -> None:
    resp = client.post("/api/run", json=[1, 2])
    assert resp.status_code == 400


def test_rejected_run_keeps_previous_run(client) -> None:
    _run_wall_gap(client)
    before = client.get("/api/state").get_json()
    ws = _workspace(client)
    rec, grid = ws.recorder, ws.grid

    other = GridModel.empty(3, 3, (0, 0), (2, 2)).to_dict()
    resp = client.post("/api/run", json={"grid": other, "algorithm": "dfs", "speed_ms": 0})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "bad_payload"

    assert ws.recorder is rec
    assert ws.grid == grid
    assert ws.algorithm == "bfs"
    after = client.get("/api/state").get_json()
    assert after["playback"] == before["playback"]
    assert after["svg"] == before["svg"]


def test_oversized_grid_rejected(client) -> None:
    cells = [[2, 3]] + [[0, 0]] * main.MAX_GRID_SIDE
    resp = client.post("/api/run", json={"grid": {"cells": cells}, "algorithm": "bfs"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "bad_payload"


def test_fractional_costs_rejected(client) -> None:
    grid = {"cells": [[2, 0, 3]], "costs": [[1, 2.5, 1]]}
    resp = client.post("/api/run", json={"grid": grid, "algorithm": "dijkstra"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "bad_payload"


# ---------------------------------------------------------------------------
#  Playback
# ---------------------------------------------------------------------------
def test_step_and_seek(client) -> None:
    _run_wall_gap(client)
    data = client.post("/api/playback/next").get_json()
    assert data["playback"]["current_index"] == 0
    assert data["playback"]["status"] == "paused"
    assert data["projection"]["current"] == [0, 0]

    data = client.post("/api/playback/seek", json={"index": 5}).get_json()
    assert data["playback"]["current_index"] == 5

    data = client.post("/api/playback/prev").get_json()
    assert data["playback"]["current_index"] == 4

    data = client.post("/api/playback/end").get_json()
    assert data["playback"]["status"] == "finished"
    assert data["projection"]["outcome"] == "found"
    assert len(data["projection"]["path"]) == 9


def test_play_advances_on_poll(client) -> None:
    _run_wall_gap(client)
    data = client.post("/api/playback/play").get_json()
    assert data["playback"]["status"] == "playing"

    ws = _workspace(client)
    ws.scheduler.poll(now=ws.scheduler.now() + 100)
    data = client.get("/api/state").get_json()
    assert data["playback"]["status"] == "finished"
    assert data["playback"]["current_index"] == data["playback"]["total_events"] - 1


def test_pause_and_reset(client) -> None:
    _run_wall_gap(client)
    client.post("/api/playback/play")
    assert client.post("/api/playback/pause").get_json()["playback"]["status"] == "paused"
    data = client.post("/api/playback/reset").get_json()
    assert data["playback"]["status"] == "idle"
    assert data["projection"]["visited"] == []


def test_pseudocode_follows_current_event(client) -> None:
    data = _run_wall_gap(client).get_json()
    assert "highlight" not in data["pseudocode"]

    # first event visits the start cell
    data = client.post("/api/playback/next").get_json()
    line = main.REGISTRY["bfs"].event_lines[EventKind.VISIT]
    assert f'class="code-line highlight" data-line="{line}"' in data["pseudocode"]
    assert data["pseudocode"].count("highlight") == 1

    data = client.post("/api/playback/end").get_json()
    line = main.REGISTRY["bfs"].event_lines[EventKind.FOUND]
    assert f'class="code-line highlight" data-line="{line}"' in data["pseudocode"]


def test_index_highlights_current_line(client) -> None:
    _run_wall_gap(client)
    client.post("/api/playback/next")
    html = client.get("/").get_data(as_text=True)
    assert 'class="code-line highlight" data-line="5"' in html


def test_concurrent_steps_from_one_session() -> None:
    main.app.config["TESTING"] = True
    main.WORKSPACES.clear()
    try:
        with main.app.test_client() as first:
            first.post("/api/run", json={"algorithm": "bfs"})
            with first.session_transaction() as sess:
                ws_id = sess["workspace_id"]

        barrier = threading.Barrier(8)
        errors = []

        def worker():
            c = main.app.test_client()
            with c.session_transaction() as sess:
                sess["workspace_id"] = ws_id
            barrier.wait()
            for _ in range(5):
                resp = c.post("/api/playback/next")
                if resp.status_code != 200:
                    errors.append(resp.status_code)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert main.WORKSPACES[ws_id].controller.current_index == 39
    finally:
        for ws in main.WORKSPACES.values():
            ws.dispose()
        main.WORKSPACES.clear()


def test_unknown_action(client) -> None:
    resp = client.post("/api/playback/dance")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "bad_payload"


def test_seek_needs_integer(client) -> None:
    _run_wall_gap(client)
    assert client.post("/api/playback/seek", json={"index": "3"}).status_code == 400
    assert client.post("/api/playback/seek", json={}).status_code == 400


def test_speed_endpoint(client) -> None:
    _run_wall_gap(client)
    assert client.post("/api/playback/speed", json={"preset": "slow"}).get_json()["playback"]["speed_ms"] == 120
    assert client.post("/api/playback/speed", json={"speed_ms": 25}).get_json()["playback"]["speed_ms"] == 25
    assert client.post("/api/playback/speed", json={"preset": "warp"}).status_code == 400
    assert client.post("/api/playback/speed", json={"speed_ms": -3}).status_code == 400
    assert client.post("/api/playback/speed", json={}).status_code == 400


def test_new_grid_drops_playback(client) -> None:
    _run_wall_gap(client)
    client.post("/api/playback/end")
    client.post("/api/grid/generate", json={"rows": 6, "cols": 6, "empty": True})
    data = client.get("/api/state").get_json()
    assert data["playback"]["total_events"] == 0
    assert data["playback"]["status"] == "idle"


# ---------------------------------------------------------------------------
#  Compare
# ---------------------------------------------------------------------------
def test_compare_defaults(client) -> None:
    _run_wall_gap(client)
    data = client.post("/api/compare", json={}).get_json()
    comp = data["comparison"]
    assert comp["left"]["algo_key"] == "astar"
    assert comp["right"]["algo_key"] == "greedy"
    assert "Comparison" in data["panel"]


def test_compare_unknown_key(client) -> None:
    resp = client.post("/api/compare", json={"left": "bfs", "right": "nope"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "unknown_algorithm"


# ---------------------------------------------------------------------------
#  Workspace store
# ---------------------------------------------------------------------------
def test_workspaces_are_evicted_oldest_first() -> None:
    main.WORKSPACES.clear()
    main.app.config["MAX_WORKSPACES"] = 2
    try:
        for _ in range(3):
            with main.app.test_client() as c:
                c.get("/api/state")
        assert len(main.WORKSPACES) == 2
    finally:
        main.app.config["MAX_WORKSPACES"] = 256
        main.WORKSPACES.clear()
