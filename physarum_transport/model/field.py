"""Diffusion-decay field engine for the Physarum transport simulation."""

import logging
from typing import List, Optional, Tuple

import numpy as np
from scipy.ndimage import convolve

from ..config import FieldConfig, MAX_DECAY_RATE, MAX_DIFFUSION_RATE, check_rate
from .grid import GridMap, ObstacleLayout, RandomBlockLayout

logger = logging.getLogger(__name__)

LAYERS = ('pickup', 'delivery', 'repulsion', 'vein', 'obstacles')

# 5-point stencil: north + south + east + west - 4 * center
LAPLACIAN_KERNEL = np.array([
    [0.0, 1.0, 0.0],
    [1.0, -4.0, 1.0],
    [0.0, 1.0, 0.0]
], dtype=np.float32)


def laplacian(grid: np.ndarray) -> np.ndarray:
    """Discrete 4-neighbor Laplacian with a zero boundary outside the grid."""
    return convolve(grid, LAPLACIAN_KERNEL, mode='constant', cval=0.0)


class PhysarumField:
    """
    Five same-shaped layers coupled by one diffusion-decay step per tick.

    pickup, delivery and repulsion diffuse and decay through double buffers;
    vein only decays, in place; obstacles are static between map re-rolls.
    Border cells are never touched by the stencil.
    """

    def __init__(self, width: int, height: int,
                 config: Optional[FieldConfig] = None,
                 layout: Optional[ObstacleLayout] = None,
                 rng: Optional[np.random.Generator] = None):
        self.grid = GridMap(width, height)
        self.width = width
        self.height = height
        self.config = config or FieldConfig()
        self.layout = layout if layout is not None else RandomBlockLayout()
        self.rng = rng if rng is not None else np.random.default_rng()

        check_rate("diffusion_rate", self.config.diffusion_rate, MAX_DIFFUSION_RATE)
        for name in ('decay_rate', 'repulsion_decay_rate', 'vein_decay_rate'):
            check_rate(name, getattr(self.config, name), MAX_DECAY_RATE)

        self.diffusion_rate = self.config.diffusion_rate
        self.decay_rate = self.config.decay_rate
        self.repulsion_decay_rate = self.config.repulsion_decay_rate
        self.vein_decay_rate = self.config.vein_decay_rate
        self.emitter_value = self.config.emitter_value

        self.pickup = self.grid.zeros()
        self.delivery = self.grid.zeros()
        self.repulsion = self.grid.zeros()
        self.vein = self.grid.zeros()
        self.obstacles = self.grid.zeros()

        # Double buffers for the diffusing layers
        self._next_pickup = self.grid.zeros()
        self._next_delivery = self.grid.zeros()
        self._next_repulsion = self.grid.zeros()

        inset = self.config.emitter_inset
        self.pickup_emitters: List[Tuple[int, int]] = [
            (inset, inset), (inset, inset + 1)
        ]
        self.delivery_emitters: List[Tuple[int, int]] = [
            (width - inset, height - inset), (width - inset, height - inset - 1)
        ]

        self._check_invariants()
        self._interior = self.grid.interior_mask()
        self._open = self._interior.copy()
        self._blocked = np.zeros(self.grid.shape, dtype=bool)
        self.reset_obstacles()

    def _check_invariants(self) -> None:
        shapes = {getattr(self, name).shape for name in LAYERS}
        shapes |= {self._next_pickup.shape, self._next_delivery.shape,
                   self._next_repulsion.shape}
        if shapes != {self.grid.shape}:
            raise ValueError(f"Field layers disagree on shape: {sorted(shapes)}")
        for x, y in self.pickup_emitters + self.delivery_emitters:
            if not self.grid.is_interior(x, y):
                raise ValueError(
                    f"Emitter cell ({x}, {y}) lies outside the interior of a "
                    f"{self.width}x{self.height} grid"
                )

    def reset_obstacles(self) -> None:
        """Re-roll the map. Repulsion is left as is."""
        self.obstacles.fill(0.0)
        self.pickup.fill(0.0)
        self.delivery.fill(0.0)
        self.vein.fill(0.0)

        self.grid.draw_border(self.obstacles)
        blocks = self.layout.place(self.grid, self.obstacles, self.rng)

        wall = self.obstacles > 0.5
        self._open = self._interior & ~wall
        self._blocked = self._interior & wall
        logger.debug("Map reset: %d blocks, %d obstacle cells", blocks, int(wall.sum()))

    def is_obstacle(self, x: int, y: int) -> bool:
        return self.obstacles[y, x] > 0.5

    def deposit(self, layer: np.ndarray, x: float, y: float, amount: float) -> None:
        """Add ``amount`` at the cell containing (x, y); off-grid is a no-op."""
        cell = self.grid.cell_of(x, y)
        if cell is not None:
            cx, cy = cell
            layer[cy, cx] += amount

    def emit(self) -> None:
        """Force the emitter cells to the emission value."""
        for x, y in self.pickup_emitters:
            self.pickup[y, x] = self.emitter_value
        for x, y in self.delivery_emitters:
            self.delivery[y, x] = self.emitter_value

    def _diffuse(self, src: np.ndarray, out: np.ndarray, decay: float) -> None:
        # Cells outside the open interior keep their value
        np.copyto(out, src)
        updated = (src + self.diffusion_rate * laplacian(src)) * (1.0 - decay)
        out[self._open] = updated[self._open]

    def step(self) -> None:
        """Advance all layers by one tick."""
        self.emit()

        self._diffuse(self.pickup, self._next_pickup, self.decay_rate)
        self._diffuse(self.delivery, self._next_delivery, self.decay_rate)
        self._diffuse(self.repulsion, self._next_repulsion, self.repulsion_decay_rate)
        # Obstacles read as a constant repulsion source
        self._next_repulsion[self._blocked] = 1.0

        self.vein[self._open] *= (1.0 - self.vein_decay_rate)

        self.pickup, self._next_pickup = self._next_pickup, self.pickup
        self.delivery, self._next_delivery = self._next_delivery, self.delivery
        self.repulsion, self._next_repulsion = self._next_repulsion, self.repulsion

    def set_diffusion(self, rate: float) -> None:
        check_rate("diffusion_rate", rate, MAX_DIFFUSION_RATE)
        self.diffusion_rate = float(rate)

    def set_decay(self, rate: float) -> None:
        """Set the pickup/delivery decay rate."""
        check_rate("decay_rate", rate, MAX_DECAY_RATE)
        self.decay_rate = float(rate)

    def view(self, layer: str) -> np.ndarray:
        """Read-only flat (row-major) view of a layer, for renderers.

        Diffusing layers swap buffers each step, so take a fresh view per tick.
        """
        if layer not in LAYERS:
            raise KeyError(f"Unknown layer: {layer}")
        flat = getattr(self, layer).reshape(-1)
        flat.flags.writeable = False
        return flat

