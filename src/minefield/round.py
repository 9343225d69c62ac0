"""
Round controller for the Minesweeper engine.

Orchestrates a round: grid sizing, mine count, win/loss tracking, the
round clock, and difficulty progression between rounds. This is the
narrow interface a presentation layer drives.
"""
import logging
import random
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

import numpy as np

from .cell import CellState
from .grid import Grid, mine_count_for_size
from .mode import DESKTOP, Mode
from .reveal import RevealEngine, RevealOutcome


logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

class RoundStatus(Enum):
    """Possible states of a round."""

    IN_PROGRESS = auto()
    WON = auto()
    LOST = auto()


@dataclass(frozen=True)
class CellView:
    """
    What a renderer may know about one cell.

    ``has_mine`` and ``adjacent_mines`` are None unless the cell is
    revealed, so hidden solution state never leaks. A revealed mine
    has no count.
    """

    state: CellState
    adjacent_mines: Optional[int] = None
    has_mine: Optional[bool] = None


@dataclass
class RoundSnapshot:
    """Full round state, as moved in and out of save files."""

    grid: Grid
    game_over: bool = False
    game_won: bool = False
    game_time: float = 0.0
    remaining_cells: int = 0
    remaining_mines: int = 0


# ============================================================================
# Round Controller
# ============================================================================

class RoundController:
    """
    Drives rounds of play on a growing grid.

    Winning a round grows the next grid by one (up to the mode's cap),
    losing keeps the size, and an explicit new game resets it to the
    mode's initial size.
    """

    def __init__(
        self,
        mode: Mode = DESKTOP,
        rng: Optional[random.Random] = None,
        size: Optional[int] = None,
    ) -> None:
        """
        Initialize the controller and start the first round.

        Args:
            mode: Sizing policy (initial and maximum grid size).
            rng: Random source for mine placement.
            size: Starting side length, clamped into the mode's range.
        """
        self.mode = mode
        self.rng = rng or random.Random()
        self.current_size = mode.initial_size if size is None else mode.clamp(size)

        self.grid: Grid
        self.engine: RevealEngine
        self.total_mines = 0
        self.remaining_mines = 0
        self.game_over = False
        self.game_won = False
        self.game_time = 0.0
        self._started = False

        self.new_round()

    # ========================================================================
    # Round Lifecycle
    # ========================================================================

    def new_round(self, is_win: bool = False) -> None:
        """
        Build a fresh round, growing the grid by one after a win.

        Args:
            is_win: Whether the previous round was won.
        """
        if is_win and self.current_size < self.mode.max_size:
            self.current_size += 1

        size = self.current_size
        mines = mine_count_for_size(size)
        grid = Grid(size)
        grid.place_mines(mines, self.rng)
        grid.compute_adjacency()

        self.grid = grid
        self.engine = RevealEngine(grid, size * size - mines)
        self.total_mines = mines
        self.remaining_mines = mines
        self.game_over = False
        self.game_won = False
        self.game_time = 0.0
        self._started = False
        logger.info("New %dx%d round with %d mines", size, size, mines)

    def next_round(self) -> None:
        """Start the following round according to how this one ended."""
        self.new_round(is_win=self.status is RoundStatus.WON)

    def reset_to_initial_size(self) -> None:
        """Start a new game at the mode's initial size."""
        self.current_size = self.mode.initial_size
        self.new_round()

    def start_new_round(self, explicit_size: Optional[int] = None) -> None:
        """
        Start a new game, optionally at a chosen size.

        Args:
            explicit_size: Side length to play at, clamped into the
                mode's range. Resets to the initial size when omitted.
        """
        if explicit_size is None:
            self.reset_to_initial_size()
            return
        self.current_size = self.mode.clamp(explicit_size)
        self.new_round()

    def tick(self, dt: float) -> None:
        """Advance the round clock while the round is being played."""
        if self._started and not self.game_over:
            self.game_time += dt
        self.recalculate_remaining_mines()

    def recalculate_remaining_mines(self) -> int:
        """Mines left to find: total mines minus flags placed."""
        self.remaining_mines = (
            self.total_mines - self.grid.count_state(CellState.FLAGGED)
        )
        return self.remaining_mines

    # ========================================================================
    # Player Actions
    # ========================================================================

    def reveal_at(self, row: int, col: int) -> RevealOutcome:
        """Reveal the cell at (row, col)."""
        if not self._accepts_action(row, col):
            return RevealOutcome.CONTINUE
        return self._apply(self.engine.reveal_cell(row, col))

    def chord_reveal_at(self, row: int, col: int) -> RevealOutcome:
        """Chord-reveal around the numbered cell at (row, col)."""
        if not self._accepts_action(row, col):
            return RevealOutcome.CONTINUE
        return self._apply(self.engine.chord_reveal(row, col))

    def toggle_flag_at(self, row: int, col: int) -> bool:
        """Flag or unflag the cell at (row, col)."""
        if not self._accepts_action(row, col):
            return False
        toggled = self.engine.toggle_flag(row, col)
        self.recalculate_remaining_mines()
        return toggled

    def _accepts_action(self, row: int, col: int) -> bool:
        if self.game_over or not self.grid.in_bounds(row, col):
            return False
        self._started = True
        return True

    def _apply(self, outcome: RevealOutcome) -> RevealOutcome:
        """Fold an engine outcome into the round state."""
        if outcome is RevealOutcome.LOSS:
            self.game_over = True
            self.game_won = False
            logger.info("Round lost after %.1fs", self.game_time)
        elif outcome is RevealOutcome.WIN:
            self.game_over = True
            self.game_won = True
            logger.info("Round won after %.1fs", self.game_time)
        self.recalculate_remaining_mines()
        return outcome

    # ========================================================================
    # State Accessors
    # ========================================================================

    @property
    def status(self) -> RoundStatus:
        """Current round status."""
        if not self.game_over:
            return RoundStatus.IN_PROGRESS
        return RoundStatus.WON if self.game_won else RoundStatus.LOST

    @property
    def remaining_cells(self) -> int:
        """Safe cells still to reveal."""
        return self.engine.remaining_cells

    @property
    def elapsed_time(self) -> float:
        """Seconds played this round."""
        return self.game_time

    @property
    def is_waiting(self) -> bool:
        """True until the first action of the round."""
        return not self._started

    def cell_view(self, row: int, col: int) -> Optional[CellView]:
        """Renderer view of a cell, or None if off the grid."""
        cell = self.grid.cell(row, col)
        if cell is None:
            return None
        if not cell.is_revealed:
            return CellView(cell.state)
        if cell.has_mine:
            return CellView(cell.state, has_mine=True)
        return CellView(cell.state, cell.adjacent_mines, has_mine=False)

    def observation(self) -> np.ndarray:
        """Grid as an int8 array with hidden mines masked."""
        return self.grid.get_observation()

    # ========================================================================
    # Snapshots
    # ========================================================================

    def snapshot(self) -> RoundSnapshot:
        """Capture the current round. The grid is shared, not copied."""
        return RoundSnapshot(
            grid=self.grid,
            game_over=self.game_over,
            game_won=self.game_won,
            game_time=self.game_time,
            remaining_cells=self.remaining_cells,
            remaining_mines=self.remaining_mines,
        )

    def restore(self, snapshot: RoundSnapshot) -> None:
        """
        Replace the current round with a captured one.

        Raises:
            ValueError: If the grid size is outside this controller's mode.
        """
        grid = snapshot.grid
        if not self.mode.allows(grid.size):
            raise ValueError(
                f"Grid size {grid.size} is outside the {self.mode.name} "
                f"range {self.mode.initial_size}-{self.mode.max_size}"
            )
        self.grid = grid
        self.current_size = grid.size
        self.engine = RevealEngine(grid, snapshot.remaining_cells)
        self.total_mines = grid.count_mines()
        self.remaining_mines = snapshot.remaining_mines
        self.game_over = snapshot.game_over
        self.game_won = snapshot.game_won
        self.game_time = snapshot.game_time
        self._started = snapshot.game_time > 0 or any(
            not cell.is_hidden for cell in grid.cells()
        )
        logger.info("Restored %dx%d round", grid.size, grid.size)
