"""
Reveal engine for the Minesweeper grid.

Implements single-cell reveal with flood fill, chord reveal with
mistake detection, and flag toggling. Every operation tolerates
off-grid coordinates and inapplicable states as no-ops.
"""
import logging
from enum import Enum, auto
from typing import Iterable, List, Optional, Tuple

from .cell import CellState
from .grid import Grid


logger = logging.getLogger(__name__)


class RevealOutcome(Enum):
    """Result of a player action, as seen by the round."""

    CONTINUE = auto()
    WIN = auto()
    LOSS = auto()


class RevealEngine:
    """
    Mutates a grid in response to reveal, chord and flag actions.

    Tracks how many safe cells are still unrevealed; the round is won
    when that count reaches zero.
    """

    def __init__(self, grid: Grid, remaining_cells: Optional[int] = None) -> None:
        """
        Args:
            grid: Grid with mines placed and adjacency computed.
            remaining_cells: Unrevealed safe cells. Counted from the grid
                when omitted.
        """
        self.grid = grid
        if remaining_cells is None:
            remaining_cells = sum(
                1 for cell in grid.cells()
                if not cell.has_mine and not cell.is_revealed
            )
        self.remaining_cells = remaining_cells

    # ========================================================================
    # Player Actions
    # ========================================================================

    def reveal_cell(self, row: int, col: int) -> RevealOutcome:
        """
        Reveal a hidden cell.

        A mine ends the round and exposes every mine on the grid.
        A zero-count cell cascades to its hidden neighbors.
        """
        cell = self.grid.cell(row, col)
        if cell is None or not cell.is_hidden:
            return RevealOutcome.CONTINUE

        if cell.has_mine:
            cell.reveal()
            logger.debug("Mine hit at (%d, %d)", row, col)
            self.reveal_all_mines()
            return RevealOutcome.LOSS

        self._flood_from(row, col)
        return self._check_win()

    def chord_reveal(self, row: int, col: int) -> RevealOutcome:
        """
        Reveal every unflagged neighbor of a revealed numbered cell.

        Acts only when the flagged-neighbor count equals the cell's
        adjacency count exactly. A misplaced flag loses the round and
        exposes the mines around the chorded cell only.
        """
        cell = self.grid.cell(row, col)
        if cell is None or not cell.is_revealed or cell.has_mine:
            return RevealOutcome.CONTINUE
        if cell.adjacent_mines == 0:
            return RevealOutcome.CONTINUE

        neighbors = self.grid.neighbors(row, col)
        flagged = [
            (r, c) for r, c in neighbors if self.grid.cell(r, c).is_flagged
        ]
        if len(flagged) != cell.adjacent_mines:
            return RevealOutcome.CONTINUE

        if any(not self.grid.cell(r, c).has_mine for r, c in flagged):
            logger.debug("Chord at (%d, %d) with a misplaced flag", row, col)
            self._reveal_mines_among(neighbors)
            return RevealOutcome.LOSS

        for r, c in neighbors:
            neighbor = self.grid.cell(r, c)
            if not neighbor.is_hidden:
                continue
            if neighbor.has_mine:
                self._reveal_mines_among(neighbors)
                return RevealOutcome.LOSS
            self._flood_from(r, c)

        return self._check_win()

    def toggle_flag(self, row: int, col: int) -> bool:
        """
        Toggle a flag between hidden and flagged.

        Returns:
            True if the flag changed, False for revealed or off-grid cells.
        """
        cell = self.grid.cell(row, col)
        if cell is None:
            return False
        return cell.toggle_flag()

    def reveal_all_mines(self) -> None:
        """Expose every mine, flagged ones included, for end-of-round display."""
        for cell in self.grid.cells():
            if cell.has_mine:
                cell.state = CellState.REVEALED

    # ========================================================================
    # Internals
    # ========================================================================

    def _flood_from(self, row: int, col: int) -> None:
        """
        Reveal a safe cell and cascade through zero-count cells.

        Uses an explicit stack; each cell leaves the hidden state at most
        once, so the walk is linear in the number of cells.
        """
        stack: List[Tuple[int, int]] = [(row, col)]
        while stack:
            r, c = stack.pop()
            cell = self.grid.cell(r, c)
            if cell.has_mine or not cell.reveal():
                continue
            self.remaining_cells -= 1
            if cell.adjacent_mines > 0:
                continue
            for neighbor in self.grid.neighbors(r, c):
                if self.grid.cell(*neighbor).is_hidden:
                    stack.append(neighbor)

    def _reveal_mines_among(self, positions: Iterable[Tuple[int, int]]) -> None:
        for r, c in positions:
            cell = self.grid.cell(r, c)
            if cell.has_mine:
                cell.state = CellState.REVEALED

    def _check_win(self) -> RevealOutcome:
        if self.remaining_cells == 0:
            return RevealOutcome.WIN
        return RevealOutcome.CONTINUE
