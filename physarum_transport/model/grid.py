"""Grid geometry and obstacle layout generation for the Physarum transport simulation."""

import logging
import math
from typing import Optional, Tuple

import numpy as np

from ..config import ObstacleConfig

logger = logging.getLogger(__name__)


class GridMap:
    """
    Geometry shared by every layer of the simulation.

    Coordinate convention: (x, y) for API, [y, x] for array indexing.
    Arrays are C-ordered, so the flat index of (x, y) is y * width + x.
    """

    def __init__(self, width: int, height: int):
        if width < 3 or height < 3:
            raise ValueError(f"Grid must be at least 3x3, got {width}x{height}")
        self.width = width
        self.height = height

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.height, self.width)

    @property
    def size(self) -> int:
        return self.width * self.height

    def zeros(self) -> np.ndarray:
        return np.zeros(self.shape, dtype=np.float32)

    def index(self, x: int, y: int) -> int:
        """Row-major flat index of a cell."""
        return y * self.width + x

    def cell_of(self, x: float, y: float) -> Optional[Tuple[int, int]]:
        """Floor a continuous position to its cell, or None when off-grid."""
        cx = math.floor(x)
        cy = math.floor(y)
        if 0 <= cx < self.width and 0 <= cy < self.height:
            return cx, cy
        return None

    def is_interior(self, x: int, y: int) -> bool:
        """True for cells touched by the diffusion stencil."""
        return 1 <= x <= self.width - 2 and 1 <= y <= self.height - 2

    def interior_mask(self) -> np.ndarray:
        mask = np.zeros(self.shape, dtype=bool)
        mask[1:-1, 1:-1] = True
        return mask

    def add_rectangle(self, obstacles: np.ndarray, x: int, y: int, w: int, h: int) -> None:
        """Mark rectangular region as obstacle."""
        # Clamp to grid boundaries
        x_end = min(x + w, self.width)
        y_end = min(y + h, self.height)
        x = max(0, x)
        y = max(0, y)
        obstacles[y:y_end, x:x_end] = 1.0

    def draw_border(self, obstacles: np.ndarray) -> None:
        """One-cell impermeable frame around the full rectangle."""
        obstacles[0, :] = 1.0
        obstacles[-1, :] = 1.0
        obstacles[:, 0] = 1.0
        obstacles[:, -1] = 1.0


class ObstacleLayout:
    """
    Pluggable block placement policy.

    The base layout places nothing, leaving only the border drawn by the field.
    """

    def place(self, grid: GridMap, obstacles: np.ndarray,
              rng: np.random.Generator) -> int:
        """Place blocks into ``obstacles``; return how many were placed."""
        return 0


class RandomBlockLayout(ObstacleLayout):
    """Random axis-aligned rectangles; no connectivity guarantee."""

    def __init__(self, config: Optional[ObstacleConfig] = None):
        self.config = config or ObstacleConfig()

    def place(self, grid: GridMap, obstacles: np.ndarray,
              rng: np.random.Generator) -> int:
        cfg = self.config
        x_lo, x_hi = cfg.margin_low, grid.width - cfg.margin_high
        y_lo, y_hi = cfg.margin_low, grid.height - cfg.margin_high
        if x_hi <= x_lo or y_hi <= y_lo:
            logger.warning(
                "Grid %dx%d too small for block margins (%d, %d); no blocks placed",
                grid.width, grid.height, cfg.margin_low, cfg.margin_high
            )
            return 0

        count = _randint(rng, *cfg.block_count)
        for _ in range(count):
            bx = _randint(rng, x_lo, x_hi)
            by = _randint(rng, y_lo, y_hi)
            bw = _randint(rng, *cfg.block_size)
            bh = _randint(rng, *cfg.block_size)
            grid.add_rectangle(obstacles, bx, by, bw, bh)

        logger.debug("Placed %d obstacle blocks", count)
        return count


def _randint(rng: np.random.Generator, low: int, high: int) -> int:
    """Integer in [low, high); degenerate ranges collapse to ``low``."""
    if high <= low:
        return int(low)
    return int(rng.integers(low, high))
