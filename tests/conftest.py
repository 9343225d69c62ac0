"""
Pytest configuration and shared fixtures.
"""
import random
import pytest
import sys
from pathlib import Path
from typing import Callable, Iterable, Tuple

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minefield import (
    Cell,
    Grid,
    MOBILE,
    RoundController,
    RoundSnapshot,
)


# ============================================================================
# Grid Fixtures
# ============================================================================

def make_grid(size: int, mines: Iterable[Tuple[int, int]]) -> Grid:
    """Grid with mines at known positions and adjacency computed."""
    grid = Grid(size)
    grid.place_mines_at(mines)
    grid.compute_adjacency()
    return grid


@pytest.fixture
def build_grid() -> Callable[..., Grid]:
    """Factory for grids with a fixed mine layout."""
    return make_grid


@pytest.fixture
def single_mine_grid() -> Grid:
    """5x5 grid with one mine in the center."""
    return make_grid(5, [(2, 2)])


@pytest.fixture
def wall_grid() -> Grid:
    """5x5 grid with a full column of mines splitting it in two."""
    return make_grid(5, [(row, 2) for row in range(5)])


# ============================================================================
# Controller Fixtures
# ============================================================================

@pytest.fixture
def controller() -> RoundController:
    """Desktop controller with a seeded random source."""
    return RoundController(rng=random.Random(1234))


@pytest.fixture
def mobile_controller() -> RoundController:
    """Mobile controller with a seeded random source."""
    return RoundController(MOBILE, rng=random.Random(99))


@pytest.fixture
def rig() -> Callable[[RoundController, Grid], RoundController]:
    """Install a known grid into a controller as a fresh round."""
    def _rig(controller: RoundController, grid: Grid) -> RoundController:
        mines = grid.count_mines()
        controller.restore(RoundSnapshot(
            grid=grid,
            remaining_cells=grid.size * grid.size - mines,
            remaining_mines=mines,
        ))
        return controller
    return _rig


# ============================================================================
# Cell Fixtures
# ============================================================================

@pytest.fixture
def hidden_cell() -> Cell:
    """Create a hidden cell."""
    return Cell()


@pytest.fixture
def mine_cell() -> Cell:
    """Create a cell containing a mine."""
    return Cell(has_mine=True)
