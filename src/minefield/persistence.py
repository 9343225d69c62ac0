"""
Binary save format for a round.

Layout (little-endian, packed, no header or checksum):

    int32   size
    size*size cell records in row-major order:
        bool    has_mine
        int32   state (CellState ordinal)
        int32   adjacent_mines
    bool    game_over
    bool    game_won
    float32 game_time
    int32   remaining_cells
    int32   remaining_mines
"""
import logging
from pathlib import Path
from typing import Union

import numpy as np

from .cell import CellState
from .grid import Grid, MAX_GRID_SIZE, MIN_GRID_SIZE
from .round import RoundController, RoundSnapshot


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# ============================================================================
# Record Layout
# ============================================================================

HEADER_DTYPE = np.dtype([("size", "<i4")])

CELL_DTYPE = np.dtype([
    ("has_mine", "?"),
    ("state", "<i4"),
    ("adjacent_mines", "<i4"),
])

FOOTER_DTYPE = np.dtype([
    ("game_over", "?"),
    ("game_won", "?"),
    ("game_time", "<f4"),
    ("remaining_cells", "<i4"),
    ("remaining_mines", "<i4"),
])

_STATE_ORDINALS = [state.value for state in CellState]


class CorruptSaveError(ValueError):
    """Raised when a byte stream is not a valid save for its declared size."""


def expected_length(size: int) -> int:
    """Exact byte length of a save holding a size x size grid."""
    return (
        HEADER_DTYPE.itemsize
        + size * size * CELL_DTYPE.itemsize
        + FOOTER_DTYPE.itemsize
    )


# ============================================================================
# Codec
# ============================================================================

class PersistenceCodec:
    """Encode rounds to bytes and files, and decode them back."""

    @staticmethod
    def encode(snapshot: RoundSnapshot) -> bytes:
        """Serialize a round snapshot to the fixed binary layout."""
        grid = snapshot.grid
        header = np.array([(grid.size,)], dtype=HEADER_DTYPE)
        cells = np.array(
            [
                (cell.has_mine, cell.state.value, cell.adjacent_mines)
                for cell in grid.cells()
            ],
            dtype=CELL_DTYPE,
        )
        footer = np.array(
            [(
                snapshot.game_over,
                snapshot.game_won,
                snapshot.game_time,
                snapshot.remaining_cells,
                snapshot.remaining_mines,
            )],
            dtype=FOOTER_DTYPE,
        )
        return header.tobytes() + cells.tobytes() + footer.tobytes()

    @staticmethod
    def decode(data: bytes) -> RoundSnapshot:
        """
        Rebuild a round snapshot from bytes.

        Raises:
            CorruptSaveError: If the stream length does not match the
                declared size, the size is unsupported, or a cell state
                is unknown.
        """
        if len(data) < HEADER_DTYPE.itemsize:
            raise CorruptSaveError("Save data is too short for a header")

        size = int(np.frombuffer(data, dtype=HEADER_DTYPE, count=1)[0]["size"])
        if not MIN_GRID_SIZE <= size <= MAX_GRID_SIZE:
            raise CorruptSaveError(f"Unsupported grid size {size}")
        if len(data) != expected_length(size):
            raise CorruptSaveError(
                f"Expected {expected_length(size)} bytes for size {size}, "
                f"got {len(data)}"
            )

        offset = HEADER_DTYPE.itemsize
        records = np.frombuffer(
            data, dtype=CELL_DTYPE, count=size * size, offset=offset
        )
        offset += records.nbytes
        footer = np.frombuffer(data, dtype=FOOTER_DTYPE, count=1, offset=offset)[0]

        if not np.isin(records["state"], _STATE_ORDINALS).all():
            raise CorruptSaveError("Unknown cell state in save data")

        grid = Grid(size)
        for (row, col), record in zip(grid.positions(), records):
            cell = grid.cell(row, col)
            cell.has_mine = bool(record["has_mine"])
            cell.state = CellState(int(record["state"]))
            cell.adjacent_mines = int(record["adjacent_mines"])

        return RoundSnapshot(
            grid=grid,
            game_over=bool(footer["game_over"]),
            game_won=bool(footer["game_won"]),
            game_time=float(footer["game_time"]),
            remaining_cells=int(footer["remaining_cells"]),
            remaining_mines=int(footer["remaining_mines"]),
        )

    @classmethod
    def save(cls, controller: RoundController, path: PathLike) -> bool:
        """
        Write the controller's round to ``path``, overwriting it.

        Returns:
            True on success, False if the file could not be written.
        """
        data = cls.encode(controller.snapshot())
        try:
            Path(path).write_bytes(data)
        except OSError as error:
            logger.warning("Could not save round to %s: %s", path, error)
            return False
        logger.info("Saved %d bytes to %s", len(data), path)
        return True

    @classmethod
    def load(cls, controller: RoundController, path: PathLike) -> bool:
        """
        Replace the controller's round with the one stored at ``path``.

        The controller is left untouched on failure.

        Returns:
            True on success, False if the file is unreadable, corrupt,
            or holds a grid size the controller's mode does not allow.
        """
        try:
            data = Path(path).read_bytes()
        except OSError as error:
            logger.warning("Could not read save file %s: %s", path, error)
            return False

        try:
            snapshot = cls.decode(data)
        except CorruptSaveError as error:
            logger.warning("Rejected save file %s: %s", path, error)
            return False

        mode = controller.mode
        if not mode.allows(snapshot.grid.size):
            logger.warning(
                "Rejected save file %s: size %d outside %s range %d-%d",
                path, snapshot.grid.size, mode.name,
                mode.initial_size, mode.max_size,
            )
            return False

        controller.restore(snapshot)
        return True
