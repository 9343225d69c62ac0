"""
Unit tests for the Gymnasium environment wrapper.
"""
import numpy as np
import pytest
from minefield import (
    DESKTOP,
    MOBILE,
    MinesweeperEnv,
    PersistenceCodec,
    RoundController,
    RoundStatus,
)
from minefield.environment import ACTION_CHORD, ACTION_FLAG, ACTION_REVEAL


@pytest.fixture
def env() -> MinesweeperEnv:
    """Mobile environment reset with a fixed seed."""
    environment = MinesweeperEnv(mode=MOBILE, render_mode="ansi")
    environment.reset(seed=0)
    return environment


def win_current_round(env: MinesweeperEnv) -> None:
    grid = env.controller.grid
    for row, col in grid.positions():
        if not grid.cell(row, col).has_mine and not env.controller.game_over:
            env.step(env.encode_action(ACTION_REVEAL, row, col))


# ============================================================================
# Space Tests
# ============================================================================

class TestSpaces:
    """Test observation and action spaces."""

    def test_observation_padded_to_max_size(self, env: MinesweeperEnv) -> None:
        """Cells beyond the current grid read -3."""
        obs = env._get_observation()
        assert obs.shape == (8, 8)
        assert obs.dtype == np.int8
        assert np.all(obs[:3, :3] == -1)
        assert np.all(obs[3:, :] == -3)
        assert env.observation_space.contains(obs)

    def test_action_space_size(self, env: MinesweeperEnv) -> None:
        """Three action kinds per padded cell."""
        assert env.action_space.n == 3 * 8 * 8

    @pytest.mark.parametrize("kind, row, col", [
        (ACTION_REVEAL, 0, 0), (ACTION_FLAG, 2, 1), (ACTION_CHORD, 7, 7),
    ])
    def test_action_codec(self, env: MinesweeperEnv, kind: int, row: int, col: int) -> None:
        """Encoding and decoding agree."""
        assert env.decode_action(env.encode_action(kind, row, col)) == (kind, row, col)


# ============================================================================
# Step Tests
# ============================================================================

class TestStep:
    """Test stepping through a round."""

    def test_off_grid_action_is_penalized_noop(self, env: MinesweeperEnv) -> None:
        """Actions outside the current grid change nothing."""
        obs, reward, terminated, truncated, info = env.step(
            env.encode_action(ACTION_REVEAL, 6, 6)
        )
        assert reward == pytest.approx(-0.1)
        assert terminated is False
        assert np.all(obs[:3, :3] == -1)

    def test_flag_step(self, env: MinesweeperEnv) -> None:
        """Flagging reports the new mine counter."""
        _, reward, _, _, info = env.step(env.encode_action(ACTION_FLAG, 0, 0))
        assert reward == 0.0
        assert info["remaining_mines"] == 0

    def test_mine_step_terminates(self, env: MinesweeperEnv) -> None:
        """Stepping on a mine ends the episode with a penalty."""
        grid = env.controller.grid
        row, col = next(p for p in grid.positions() if grid.cell(*p).has_mine)
        _, reward, terminated, _, info = env.step(env.encode_action(ACTION_REVEAL, row, col))
        assert reward == -10.0
        assert terminated is True
        assert info["game_state"] == "LOST"

    def test_action_mask_covers_hidden_cells(self, env: MinesweeperEnv) -> None:
        """A fresh round allows reveal and flag on every cell."""
        mask = env.get_action_mask()
        assert mask.dtype == np.int8
        assert mask.sum() == 2 * 9
        assert mask[env.encode_action(ACTION_REVEAL, 3, 3)] == 0

    def test_masked_sampling_plays_to_the_end(self, env: MinesweeperEnv) -> None:
        """Random valid actions always finish a round."""
        env.action_space.seed(0)
        terminated = False
        for _ in range(500):
            action = env.action_space.sample(mask=env.get_action_mask())
            _, _, terminated, _, _ = env.step(action)
            if terminated:
                break
        assert terminated is True
        assert env.get_action_mask().sum() == 0

    def test_render_ansi(self, env: MinesweeperEnv) -> None:
        """ANSI rendering draws the current grid only."""
        text = env.render()
        assert text.splitlines() == [". . . "] * 3


# ============================================================================
# Reset Tests
# ============================================================================

class TestReset:
    """Test progression across episodes."""

    def test_reset_after_win_grows(self, env: MinesweeperEnv) -> None:
        """Winning one episode grows the next grid."""
        win_current_round(env)
        assert env.status is RoundStatus.WON
        _, info = env.reset()
        assert info["size"] == 4

    def test_reset_after_loss_keeps_size(self, env: MinesweeperEnv) -> None:
        """Losing keeps the grid size."""
        win_current_round(env)
        env.reset()
        grid = env.controller.grid
        row, col = next(p for p in grid.positions() if grid.cell(*p).has_mine)
        env.step(env.encode_action(ACTION_REVEAL, row, col))
        _, info = env.reset()
        assert info["size"] == 4

    def test_new_game_option_resets_size(self, env: MinesweeperEnv) -> None:
        """The new_game option returns to the initial size."""
        win_current_round(env)
        env.reset()
        _, info = env.reset(options={"new_game": True})
        assert info["size"] == 3

    def test_seeded_resets_repeat_layouts(self) -> None:
        """The same seed produces the same mines."""
        first, second = MinesweeperEnv(mode=MOBILE), MinesweeperEnv(mode=MOBILE)
        first.reset(seed=11)
        second.reset(seed=11)
        mines = [
            [c.has_mine for c in e.controller.grid.cells()] for e in (first, second)
        ]
        assert mines[0] == mines[1]


# ============================================================================
# Save Loading Tests
# ============================================================================

class TestLoadedRounds:
    """Test environments whose round comes from a save file."""

    def test_oversized_save_keeps_env_playable(
        self, env: MinesweeperEnv, tmp_path
    ) -> None:
        """A save larger than the mode is refused and stepping still works."""
        path = tmp_path / "big.sav"
        PersistenceCodec.save(RoundController(DESKTOP, size=20), path)

        assert PersistenceCodec.load(env.controller, path) is False
        obs, _, _, _, info = env.step(env.encode_action(ACTION_FLAG, 0, 0))
        assert obs.shape == (8, 8)
        assert info["size"] == 3
