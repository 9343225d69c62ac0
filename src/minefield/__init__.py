"""
Minesweeper round engine.

Provides grid construction, reveal logic, round progression and
binary save files, with no knowledge of rendering or input devices.
"""
from .cell import Cell, CellState
from .grid import Grid, mine_count_for_size, MIN_GRID_SIZE, MAX_GRID_SIZE
from .reveal import RevealEngine, RevealOutcome
from .mode import Mode, DESKTOP, MOBILE
from .round import RoundController, RoundStatus, RoundSnapshot, CellView
from .persistence import PersistenceCodec, CorruptSaveError
from .environment import MinesweeperEnv

__all__ = [
    "Cell",
    "CellState",
    "Grid",
    "mine_count_for_size",
    "MIN_GRID_SIZE",
    "MAX_GRID_SIZE",
    "RevealEngine",
    "RevealOutcome",
    "Mode",
    "DESKTOP",
    "MOBILE",
    "RoundController",
    "RoundStatus",
    "RoundSnapshot",
    "CellView",
    "PersistenceCodec",
    "CorruptSaveError",
    "MinesweeperEnv",
]
