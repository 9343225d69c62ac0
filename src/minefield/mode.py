"""
Product mode configuration.

A mode carries the grid sizes a round controller starts at and grows
to, replacing any global desktop/mobile switch.
"""
from dataclasses import dataclass

from .grid import MAX_GRID_SIZE, MIN_GRID_SIZE


@dataclass(frozen=True)
class Mode:
    """
    Sizing policy for one product flavour.

    Attributes:
        name: Human-readable label.
        initial_size: Grid side length for a fresh game.
        max_size: Largest side length progression can reach.
    """

    name: str = "desktop"
    initial_size: int = 5
    max_size: int = 20

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Ensure configuration values are valid."""
        for value in (self.initial_size, self.max_size):
            if not MIN_GRID_SIZE <= value <= MAX_GRID_SIZE:
                raise ValueError(
                    f"Mode sizes must be between {MIN_GRID_SIZE} and "
                    f"{MAX_GRID_SIZE}"
                )
        if self.initial_size > self.max_size:
            raise ValueError("Initial size cannot exceed max size")

    def clamp(self, size: int) -> int:
        """Bring a requested size into this mode's range."""
        return max(self.initial_size, min(size, self.max_size))

    def allows(self, size: int) -> bool:
        """Whether a grid of this size can be played in this mode."""
        return self.initial_size <= size <= self.max_size


# Preset modes
DESKTOP = Mode("desktop", 5, 20)
MOBILE = Mode("mobile", 3, 8)
