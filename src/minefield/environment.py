"""
Gymnasium environment wrapper for the Minesweeper engine.

Lets automated players drive a RoundController through the standard
RL interface, including round-to-round difficulty progression.
"""
import random
from typing import Any, Dict, Optional, Tuple, SupportsFloat

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from .mode import DESKTOP, Mode
from .reveal import RevealOutcome
from .round import RoundController, RoundStatus


# ============================================================================
# Constants
# ============================================================================

OBS_OFF_GRID = -3

ACTION_REVEAL = 0
ACTION_FLAG = 1
ACTION_CHORD = 2
ACTION_KINDS = 3


# ============================================================================
# Minesweeper Environment
# ============================================================================

class MinesweeperEnv(gym.Env):
    """
    Gymnasium environment for progressive Minesweeper.

    Observation:
        int8 array of shape (max_size, max_size) where:
        - -3 = outside the current grid
        - -1 = hidden cell
        - -2 = flagged cell
        - 0-8 = revealed cell with adjacent mine count
        - 9 = revealed mine

    Actions:
        Discrete space of size 3 * max_size**2. Action ``a`` decodes to
        kind ``a // max_size**2`` (0 reveal, 1 flag, 2 chord) at cell
        ``divmod(a % max_size**2, max_size)``. Off-grid actions do nothing.

    Rewards:
        - +1 for an action that reveals safe cells
        - +10 for winning the round
        - -10 for hitting a mine
        - -0.1 for an action that changes nothing
        - 0 for toggling a flag
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 4}

    def __init__(
        self,
        mode: Mode = DESKTOP,
        render_mode: Optional[str] = None,
    ) -> None:
        """
        Initialize the Minesweeper environment.

        Args:
            mode: Sizing policy for the rounds played.
            render_mode: How to render the environment.
        """
        super().__init__()

        self.mode = mode
        self.render_mode = render_mode
        self.controller: Optional[RoundController] = None

        side = mode.max_size
        self.observation_space = spaces.Box(
            low=OBS_OFF_GRID,
            high=9,
            shape=(side, side),
            dtype=np.int8,
        )
        self.action_space = spaces.Discrete(ACTION_KINDS * side * side)

        self._steps = 0

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """
        Start the next round.

        The first reset, a seeded reset, or ``options={"new_game": True}``
        starts a fresh game at the initial size; otherwise the previous
        round's result decides the size.

        Returns:
            Tuple of (observation, info dict).
        """
        super().reset(seed=seed)
        options = options or {}

        if self.controller is None or seed is not None:
            rng = random.Random(int(self.np_random.integers(2**32)))
            self.controller = RoundController(self.mode, rng=rng)
        elif options.get("new_game"):
            self.controller.reset_to_initial_size()
        else:
            self.controller.next_round()
        self._steps = 0

        return self._get_observation(), self._get_info()

    def step(
        self, action: int
    ) -> Tuple[np.ndarray, SupportsFloat, bool, bool, Dict[str, Any]]:
        """
        Execute one action in the environment.

        Args:
            action: Encoded (kind, row, col) action index.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        kind, row, col = self.decode_action(action)
        self._steps += 1

        reward = self._perform(kind, row, col)

        terminated = self.controller.game_over
        return self._get_observation(), reward, terminated, False, self._get_info()

    def decode_action(self, action: int) -> Tuple[int, int, int]:
        """Split a flat action index into (kind, row, col)."""
        side = self.mode.max_size
        kind, cell_index = divmod(int(action), side * side)
        row, col = divmod(cell_index, side)
        return kind, row, col

    def encode_action(self, kind: int, row: int, col: int) -> int:
        """Inverse of decode_action."""
        side = self.mode.max_size
        return kind * side * side + row * side + col

    def _perform(self, kind: int, row: int, col: int) -> float:
        """Apply an action to the round and score it."""
        controller = self.controller
        if kind == ACTION_FLAG:
            return 0.0 if controller.toggle_flag_at(row, col) else -0.1

        before = controller.remaining_cells
        if kind == ACTION_REVEAL:
            outcome = controller.reveal_at(row, col)
        else:
            outcome = controller.chord_reveal_at(row, col)

        if outcome is RevealOutcome.WIN:
            return 10.0
        if outcome is RevealOutcome.LOSS:
            return -10.0
        if controller.remaining_cells < before:
            return 1.0
        return -0.1

    def _get_observation(self) -> np.ndarray:
        side = self.mode.max_size
        obs = np.full((side, side), OBS_OFF_GRID, dtype=np.int8)
        grid_obs = self.controller.observation()
        size = grid_obs.shape[0]
        obs[:size, :size] = grid_obs
        return obs

    def _get_info(self) -> Dict[str, Any]:
        """Get info dictionary for current state."""
        controller = self.controller
        return {
            "steps": self._steps,
            "size": controller.current_size,
            "remaining_cells": controller.remaining_cells,
            "remaining_mines": controller.remaining_mines,
            "game_state": controller.status.name,
        }

    def render(self) -> Optional[str]:
        """Render the current board state."""
        if self.render_mode == "ansi":
            return self._render_ansi()
        if self.render_mode == "human":
            print(self._render_ansi())
        return None

    def _render_ansi(self) -> str:
        """Render board as ASCII string."""
        lines = []
        obs = self.controller.observation()

        for row in obs:
            row_str = ""
            for val in row:
                if val == -1:
                    row_str += "."
                elif val == -2:
                    row_str += "F"
                elif val == 9:
                    row_str += "*"
                elif val == 0:
                    row_str += " "
                else:
                    row_str += str(val)
                row_str += " "
            lines.append(row_str)

        return "\n".join(lines)

    def get_action_mask(self) -> np.ndarray:
        """
        Get mask of actions that can change the board.

        Reveal and flag are valid on hidden cells, unflag on flagged
        cells, and chord on revealed numbered cells.

        Returns:
            int8 array where 1 = valid action, usable with
            ``action_space.sample(mask=...)``.
        """
        mask = np.zeros(self.action_space.n, dtype=np.int8)
        if self.controller.game_over:
            return mask

        grid = self.controller.grid
        for row, col in grid.positions():
            cell = grid.cell(row, col)
            if cell.is_hidden:
                mask[self.encode_action(ACTION_REVEAL, row, col)] = 1
                mask[self.encode_action(ACTION_FLAG, row, col)] = 1
            elif cell.is_flagged:
                mask[self.encode_action(ACTION_FLAG, row, col)] = 1
            elif cell.adjacent_mines > 0 and not cell.has_mine:
                mask[self.encode_action(ACTION_CHORD, row, col)] = 1
        return mask

    @property
    def status(self) -> RoundStatus:
        """Status of the round in play."""
        return self.controller.status
