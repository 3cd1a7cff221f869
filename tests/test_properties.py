"""Property tests over random small grids, checked against independent oracles."""

import pytest
from hypothesis import given

from algorithms import REGISTRY, search
from algorithms.step import EventKind
from tests.grid_utils import (
    assert_valid_path,
    cheapest_cost,
    flood_distance,
    grids_with_endpoints,
    path_cost,
)

ALL_KEYS = list(REGISTRY)


@pytest.mark.parametrize("key", ALL_KEYS)
@given(sample=grids_with_endpoints())
def test_complete(key: str, sample) -> None:
    grid, start, end = sample
    trace = search(grid, start, end, algorithm=key)
    reachable = flood_distance(grid, start, end) is not None
    assert trace.found == reachable
    if reachable:
        assert_valid_path(grid, trace.path(), start, end)
    else:
        assert trace.count(EventKind.PATH) == 0


@pytest.mark.parametrize("key", ["bfs", "dijkstra", "astar", "bidirectional"])
@given(sample=grids_with_endpoints())
def test_shortest_on_uniform_cost(key: str, sample) -> None:
    grid, start, end = sample
    expected = flood_distance(grid, start, end)
    trace = search(grid, start, end, algorithm=key)
    if expected is None:
        assert not trace.found
    else:
        assert trace.path_length == expected


@pytest.mark.parametrize("key", ["dijkstra", "astar"])
@given(sample=grids_with_endpoints(weighted=True))
def test_cheapest_on_weighted(key: str, sample) -> None:
    grid, start, end = sample
    expected = cheapest_cost(grid, start, end)
    trace = search(grid, start, end, algorithm=key)
    if expected is None:
        assert not trace.found
    else:
        assert path_cost(grid, trace.path()) == expected


@pytest.mark.parametrize("key", ALL_KEYS)
@given(sample=grids_with_endpoints())
def test_no_duplicate_settles_and_single_terminal(key: str, sample) -> None:
    grid, start, end = sample
    trace = search(grid, start, end, algorithm=key)
    settled = [(e.kind, e.cell) for e in trace if e.kind.is_visit]
    assert len(settled) == len(set(settled))
    assert [e.kind.is_terminal for e in trace].count(True) == 1
    assert trace[-1].kind.is_terminal


@pytest.mark.parametrize("key", ["greedy", "dfs", "jps"])
@given(sample=grids_with_endpoints())
def test_never_shorter_than_optimal(key: str, sample) -> None:
    grid, start, end = sample
    expected = flood_distance(grid, start, end)
    trace = search(grid, start, end, algorithm=key)
    if expected is not None:
        assert trace.path_length >= expected
