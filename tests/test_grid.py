import pytest

from grid import (
    DEFAULT_END,
    DEFAULT_START,
    CellKind,
    Coordinate,
    EmptyGrid,
    GridError,
    GridModel,
    InvalidEndpoint,
    as_coord,
)


# ---------------------------------------------------------------------------
#  Construction
# ---------------------------------------------------------------------------
def test_from_strings_finds_endpoints(wall_gap_grid: GridModel) -> None:
    assert wall_gap_grid.shape == (5, 5)
    assert wall_gap_grid.start == Coordinate(0, 0)
    assert wall_gap_grid.end == Coordinate(4, 4)
    assert wall_gap_grid.cell_at((0, 2)) is CellKind.WALL
    assert wall_gap_grid.cell_at((2, 2)) is CellKind.EMPTY


def test_from_rows_uses_integer_codes() -> None:
    grid = GridModel.from_rows([[2, 0], [1, 3]])
    assert grid.cell_at((0, 0)) is CellKind.START
    assert grid.cell_at((1, 0)) is CellKind.WALL
    assert grid.end == (1, 1)


def test_from_rows_rejects_unknown_code() -> None:
    with pytest.raises(ValueError):
        GridModel.from_rows([[0, 7]])


def test_ragged_rows_rejected() -> None:
    with pytest.raises(ValueError):
        GridModel.from_strings(["...", ".."])


def test_two_starts_rejected() -> None:
    with pytest.raises(ValueError):
        GridModel.from_strings(["S.S"])


@pytest.mark.parametrize("costs", [[[1, 0]], [[1, 1, 1]], [[1], [1]], [[1, 2.5]], [[True, 1]], [["2", 1]]])
def test_bad_cost_tables_rejected(costs) -> None:
    with pytest.raises(ValueError):
        GridModel.from_rows([[0, 0]], costs=costs)


def test_empty_factory_places_default_endpoints() -> None:
    grid = GridModel.empty()
    assert grid.shape == (20, 40)
    assert grid.start == DEFAULT_START
    assert grid.end == DEFAULT_END
    assert grid.walls() == []


def test_zero_size_grid_is_constructible() -> None:
    grid = GridModel([])
    assert grid.shape == (0, 0)
    assert grid.start is None


# ---------------------------------------------------------------------------
#  Queries
# ---------------------------------------------------------------------------
def test_neighbors4_order_is_up_right_down_left() -> None:
    grid = GridModel.empty(3, 3, None, None)
    assert grid.neighbors4((1, 1)) == [(0, 1), (1, 2), (2, 1), (1, 0)]
    assert grid.neighbors4((0, 0)) == [(0, 1), (1, 0)]


def test_walkable_neighbors_skip_walls(wall_gap_grid: GridModel) -> None:
    assert wall_gap_grid.walkable_neighbors((0, 1)) == [(1, 1), (0, 0)]
    assert (2, 2) in wall_gap_grid.walkable_neighbors((2, 1))


def test_cell_at_out_of_bounds() -> None:
    with pytest.raises(IndexError):
        GridModel.empty(2, 2, None, None).cell_at((2, 0))


def test_cost_defaults_to_one_and_weighted_flag() -> None:
    plain = GridModel.from_strings(["S.E"])
    assert plain.cost((0, 1)) == 1
    assert not plain.weighted

    heavy = GridModel.from_rows([[2, 0, 3]], costs=[[1, 5, 1]])
    assert heavy.cost((0, 1)) == 5
    assert heavy.weighted


def test_as_coord_normalises_pairs() -> None:
    c = as_coord([3, 4])
    assert isinstance(c, Coordinate)
    assert c == (3, 4)
    assert repr(c) == "(3, 4)"


# ---------------------------------------------------------------------------
#  Validation
# ---------------------------------------------------------------------------
def test_validate_endpoints_empty_grid() -> None:
    with pytest.raises(EmptyGrid):
        GridModel([]).validate_endpoints((0, 0), (0, 0))


def test_validate_endpoints_out_of_bounds(wall_gap_grid: GridModel) -> None:
    with pytest.raises(InvalidEndpoint) as info:
        wall_gap_grid.validate_endpoints((0, 0), (5, 0))
    assert info.value.which == "end"
    assert info.value.cell == (5, 0)


def test_validate_endpoints_on_wall(wall_gap_grid: GridModel) -> None:
    with pytest.raises(InvalidEndpoint) as info:
        wall_gap_grid.validate_endpoints((0, 2), (4, 4))
    assert info.value.which == "start"
    assert isinstance(info.value, GridError)
    assert isinstance(info.value, ValueError)


def test_validate_endpoints_unset() -> None:
    grid = GridModel.from_strings(["S.."])
    with pytest.raises(InvalidEndpoint):
        grid.validate_endpoints(grid.start, grid.end)


# ---------------------------------------------------------------------------
#  Copy-on-edit and serialisation
# ---------------------------------------------------------------------------
def test_with_cell_returns_new_grid(wall_gap_grid: GridModel) -> None:
    moved = wall_gap_grid.with_cell((4, 0), CellKind.START)
    assert moved.start == (4, 0)
    assert moved.cell_at((0, 0)) is CellKind.EMPTY
    assert wall_gap_grid.start == (0, 0)


def test_without_walls(wall_gap_grid: GridModel) -> None:
    clear = wall_gap_grid.without_walls()
    assert clear.walls() == []
    assert clear.start == wall_gap_grid.start


def test_dict_round_trip_keeps_costs() -> None:
    grid = GridModel.from_rows([[2, 1], [0, 3]], costs=[[1, 1], [4, 1]])
    again = GridModel.from_dict(grid.to_dict())
    assert again == grid
    assert hash(again) == hash(grid)
    assert grid.to_strings() == ["S#", ".E"]


# ---------------------------------------------------------------------------
#  Maze generation
# ---------------------------------------------------------------------------
def test_maze_is_deterministic_for_a_seed() -> None:
    a = GridModel.generate_maze(seed=7)
    b = GridModel.generate_maze(seed=7)
    assert a == b
    assert a.start == DEFAULT_START and a.end == DEFAULT_END


def test_maze_clears_around_endpoints() -> None:
    grid = GridModel.generate_maze(density=1.0, seed=3)
    for anchor in (DEFAULT_START, DEFAULT_END):
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                assert grid.is_walkable((anchor[0] + dr, anchor[1] + dc))
    assert grid.cell_at((0, 0)) is CellKind.WALL


def test_maze_density_zero_has_no_walls() -> None:
    assert GridModel.generate_maze(10, 10, (1, 1), (8, 8), density=0.0, seed=1).walls() == []


def test_maze_rejects_bad_density() -> None:
    with pytest.raises(ValueError):
        GridModel.generate_maze(density=1.5)
