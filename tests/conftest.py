import pytest
from hypothesis import HealthCheck, settings

from grid import CellKind, GridModel

TEST_SEED = 1337

settings.register_profile(
    "ci",
    max_examples=60,
    deadline=None,
    print_blob=True,
    suppress_health_check=(
        HealthCheck.filter_too_much,
        HealthCheck.too_slow,
    ),
)
settings.load_profile("ci")


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "slow: mark test as slow")


# ---------------------------------------------------------------------------
#  Scenario grids
# ---------------------------------------------------------------------------
WALL_GAP = [
    "S.#..",
    "..#..",
    ".....",
    "..#..",
    "..#.E",
]


@pytest.fixture
def wall_gap_grid() -> GridModel:
    """5x5, wall down column 2 except a gap at (2, 2)."""
    return GridModel.from_strings(WALL_GAP)


@pytest.fixture
def closed_wall_grid() -> GridModel:
    return GridModel.from_strings(WALL_GAP).with_cell((2, 2), CellKind.WALL)


@pytest.fixture
def open3_grid() -> GridModel:
    return GridModel.from_strings(["S..", "...", "..E"])


@pytest.fixture
def open_grid() -> GridModel:
    """The default 20x40 board with no walls."""
    return GridModel.empty()


class FakeClock:
    def __init__(self, t: float = 0.0):
        self.t = t

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> float:
        self.t += seconds
        return self.t


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
