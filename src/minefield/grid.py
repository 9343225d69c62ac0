"""
Grid module for the Minesweeper engine.

Owns the square array of cells, mine placement with corner safety,
and adjacency counting.
"""
import logging
import math
import random
from typing import Iterable, Iterator, List, Optional, Tuple

import numpy as np

from .cell import Cell, CellState


logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

MIN_GRID_SIZE = 3
MAX_GRID_SIZE = 30
MINE_DENSITY = 0.15


def mine_count_for_size(size: int) -> int:
    """Number of mines a round of the given side length carries."""
    return max(1, math.floor(size * size * MINE_DENSITY))


# ============================================================================
# Grid Class
# ============================================================================

class Grid:
    """
    Square Minesweeper grid indexed ``[row][col]``.

    Rows grow downward and columns grow rightward. The four corner
    cells never hold a mine.
    """

    def __init__(self, size: int) -> None:
        """
        Allocate a size x size grid of hidden, mine-free cells.

        Args:
            size: Side length, 3 to 30 inclusive.

        Raises:
            ValueError: If size is outside the supported range.
        """
        if not MIN_GRID_SIZE <= size <= MAX_GRID_SIZE:
            raise ValueError(
                f"Grid size must be between {MIN_GRID_SIZE} and "
                f"{MAX_GRID_SIZE}, got {size}"
            )
        self.size = size
        self._cells: List[List[Cell]] = [
            [Cell() for _ in range(size)] for _ in range(size)
        ]

    # ========================================================================
    # Mine Placement (Low-level)
    # ========================================================================

    def place_mines(self, count: int, rng: Optional[random.Random] = None) -> None:
        """
        Scatter mines uniformly at random, skipping corners.

        Samples (row, col) pairs from the whole grid until ``count``
        distinct non-corner cells are mined. Clustering is allowed.

        Args:
            count: Number of mines to place.
            rng: Random source; the module-level generator if omitted.

        Raises:
            ValueError: If count cannot fit outside the corner cells.
        """
        max_mines = self.size * self.size - len(self.corners())
        if count < 0 or count > max_mines:
            raise ValueError(f"Mine count must be between 0 and {max_mines}")

        rng = rng or random
        corners = set(self.corners())
        placed = 0
        while placed < count:
            row = rng.randrange(self.size)
            col = rng.randrange(self.size)
            cell = self._cells[row][col]
            if cell.has_mine or (row, col) in corners:
                continue
            cell.has_mine = True
            placed += 1
        logger.debug("Placed %d mines on %dx%d grid", count, self.size, self.size)

    def place_mines_at(self, positions: Iterable[Tuple[int, int]]) -> None:
        """
        Mine exactly the given positions.

        Used to build known layouts without going through the random
        source. Corner and out-of-bounds positions are rejected.

        Raises:
            ValueError: If a position is a corner or off the grid.
        """
        corners = set(self.corners())
        for row, col in positions:
            if not self.in_bounds(row, col):
                raise ValueError(f"Position ({row}, {col}) is off the grid")
            if (row, col) in corners:
                raise ValueError(f"Corner ({row}, {col}) cannot hold a mine")
            self._cells[row][col].has_mine = True

    def compute_adjacency(self) -> None:
        """Calculate adjacent mine counts for all non-mined cells."""
        for row, col in self.positions():
            cell = self._cells[row][col]
            if not cell.has_mine:
                cell.adjacent_mines = sum(
                    1 for r, c in self.neighbors(row, col)
                    if self._cells[r][c].has_mine
                )

    # ========================================================================
    # Neighbor Utilities (Low-level)
    # ========================================================================

    def in_bounds(self, row: int, col: int) -> bool:
        """Check if position is within grid bounds."""
        return 0 <= row < self.size and 0 <= col < self.size

    def neighbors(self, row: int, col: int) -> List[Tuple[int, int]]:
        """
        Get valid neighboring cell positions.

        Args:
            row: Row index of center cell.
            col: Column index of center cell.

        Returns:
            List of (row, col) tuples at Chebyshev distance 1,
            clipped at the grid edge.
        """
        neighbors = []
        for delta_row in (-1, 0, 1):
            for delta_col in (-1, 0, 1):
                if delta_row == 0 and delta_col == 0:
                    continue
                new_row = row + delta_row
                new_col = col + delta_col
                if self.in_bounds(new_row, new_col):
                    neighbors.append((new_row, new_col))
        return neighbors

    def corners(self) -> List[Tuple[int, int]]:
        """Positions of the four corner cells."""
        last = self.size - 1
        return [(0, 0), (0, last), (last, 0), (last, last)]

    def positions(self) -> Iterator[Tuple[int, int]]:
        """Iterate over every (row, col) in row-major order."""
        for row in range(self.size):
            for col in range(self.size):
                yield row, col

    # ========================================================================
    # State Accessors (High-level)
    # ========================================================================

    def cell(self, row: int, col: int) -> Optional[Cell]:
        """Get cell at position, or None if out of bounds."""
        if not self.in_bounds(row, col):
            return None
        return self._cells[row][col]

    def cells(self) -> Iterator[Cell]:
        """Iterate over every cell in row-major order."""
        for row in self._cells:
            yield from row

    def count_mines(self) -> int:
        """Total mined cells."""
        return sum(1 for cell in self.cells() if cell.has_mine)

    def count_state(self, state: CellState) -> int:
        """Number of cells currently in ``state``."""
        return sum(1 for cell in self.cells() if cell.state == state)

    def get_observation(self) -> np.ndarray:
        """
        Get grid state as a numpy array, hiding unrevealed mines.

        Returns:
            2D int8 array where:
                -1 = hidden
                -2 = flagged
                0-8 = revealed with adjacent count
                9 = revealed mine
        """
        obs = np.zeros((self.size, self.size), dtype=np.int8)
        for row, col in self.positions():
            obs[row, col] = self._cells[row][col].to_observation()
        return obs

    def __repr__(self) -> str:
        return f"Grid(size={self.size}, mines={self.count_mines()})"
