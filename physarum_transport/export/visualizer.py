"""Visualization and export for the Physarum transport simulation."""

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
from matplotlib.colors import to_rgb
from pathlib import Path
from typing import List, TYPE_CHECKING
from PIL import Image
import io

if TYPE_CHECKING:
    from ..model.state import SimulationState


class Visualizer:
    """
    Renders the field layers and agents with matplotlib.

    Supports:
    - Single PNG snapshots
    - Animated GIF compilation
    """

    # Color scheme
    COLORS = {
        'wall': '#2C3E50',           # Dark blue-gray
        'floor': '#101418',          # Near black
        'pickup': '#27AE60',         # Green
        'delivery': '#E67E22',       # Orange
        'vein': '#F1C40F',           # Yellow
        'seek_pickup': '#3498DB',    # Blue
        'loading': '#1ABC9C',        # Teal
        'seek_delivery': '#E74C3C',  # Red
        'unloading': '#9B59B6',      # Purple
    }

    # Potentials above this read as saturated
    POTENTIAL_SCALE = 2.5

    def __init__(self, grid_width: int, grid_height: int):
        self.width = grid_width
        self.height = grid_height
        self.frames: List[Image.Image] = []

    def _tint(self, base: np.ndarray, layer: np.ndarray, color: str,
              strength: float) -> None:
        rgb = to_rgb(self.COLORS[color])
        for c in range(3):
            base[:, :, c] = np.clip(
                base[:, :, c] * (1 - strength * layer) + rgb[c] * strength * layer,
                0, 1
            )

    def compose(self, state: "SimulationState") -> np.ndarray:
        """RGB image of the layers, shape (height, width, 3)."""
        layers = state.layers
        base = np.ones((self.height, self.width, 3))
        base[:, :] = to_rgb(self.COLORS['floor'])

        for name in ('pickup', 'delivery'):
            level = np.clip(layers[name] / self.POTENTIAL_SCALE, 0, 1)
            self._tint(base, level, name, 0.8)

        vein = layers['vein']
        if np.max(vein) > 0:
            self._tint(base, vein / np.max(vein), 'vein', 0.9)

        base[layers['obstacles'] > 0.5] = to_rgb(self.COLORS['wall'])
        return base

    def _create_figure(self, state: "SimulationState") -> plt.Figure:
        """Create matplotlib figure for state visualization."""
        aspect = self.width / self.height
        fig_height = 6
        fig_width = max(6, fig_height * aspect)
        fig, ax = plt.subplots(figsize=(fig_width, fig_height))

        ax.imshow(self.compose(state), origin='lower', aspect='equal',
                  extent=[0, self.width, 0, self.height])

        # Agents sit at continuous positions
        for agent in state.agents:
            color = self.COLORS.get(agent.state, '#95A5A6')
            ax.plot(agent.x, agent.y, 'o', color=color,
                    markersize=3, markeredgecolor='white', markeredgewidth=0.2)

        ax.set_title(f'Step {state.step} | Agents: {len(state.agents)} | '
                     f'Delivered: {int(state.metrics.get("delivered", 0))}')
        ax.set_xlabel('X')
        ax.set_ylabel('Y')
        ax.set_xlim(0, self.width)
        ax.set_ylim(0, self.height)

        legend_elements = [
            plt.Line2D([0], [0], marker='o', color='w', label=label,
                       markerfacecolor=self.COLORS[key], markersize=6)
            for key, label in (('seek_pickup', 'Seek pickup'),
                               ('loading', 'Loading'),
                               ('seek_delivery', 'Seek delivery'),
                               ('unloading', 'Unloading'))
        ]
        ax.legend(handles=legend_elements, loc='upper right', fontsize=7)

        plt.tight_layout()
        return fig

    def buffer_frame(self, state: "SimulationState") -> None:
        """Store frame for GIF generation."""
        fig = self._create_figure(state)

        # Convert to PIL Image
        buf = io.BytesIO()
        fig.savefig(buf, format='png', dpi=80)
        buf.seek(0)
        img = Image.open(buf).copy()
        self.frames.append(img)
        buf.close()
        plt.close(fig)

    def save_snapshot(self, state: "SimulationState", output_path: Path) -> None:
        """Save single PNG image of current state."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig = self._create_figure(state)
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)

    def generate_gif(self, output_path: Path, fps: int = 10) -> None:
        """Compile buffered frames into animated GIF."""
        if not self.frames:
            return

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        duration = int(1000 / fps)  # milliseconds per frame

        self.frames[0].save(
            output_path,
            save_all=True,
            append_images=self.frames[1:],
            duration=duration,
            loop=0
        )
