"""Summary report generation for the Physarum transport simulation."""

from typing import Optional, TYPE_CHECKING
from pathlib import Path

if TYPE_CHECKING:
    from ..model.state import SimulationState


class Reporter:
    """Generates summary statistics and formatted text report."""

    def __init__(self, config_path: Optional[str], seed: Optional[int],
                 stall_window: int = 500):
        self.config_path = config_path
        self.seed = seed
        self.stall_window = stall_window
        self.peak_vein = 0.0
        self.first_delivery_step: Optional[int] = None
        self.longest_gap: Optional[int] = None
        self.stall_events = 0
        self._prev_delivered = 0
        self._last_delivery_step: Optional[int] = None
        self._stagnation_steps = 0

    def update(self, state: "SimulationState") -> None:
        """Accumulate metrics per step."""
        vein_peak = state.metrics.get('vein_peak', 0.0)
        if vein_peak > self.peak_vein:
            self.peak_vein = vein_peak

        # A stall is a long stretch without deliveries once the network exists
        delivered = state.metrics.get('delivered', 0)
        if delivered > self._prev_delivered:
            if self.first_delivery_step is None:
                self.first_delivery_step = state.step
            if self._last_delivery_step is not None:
                gap = state.step - self._last_delivery_step
                if self.longest_gap is None or gap > self.longest_gap:
                    self.longest_gap = gap
            self._last_delivery_step = state.step
            self._stagnation_steps = 0
        elif delivered < self._prev_delivered:
            # Map was re-rolled
            self._stagnation_steps = 0
            self._last_delivery_step = None
        elif self.first_delivery_step is not None:
            self._stagnation_steps += 1
            if self._stagnation_steps >= self.stall_window:
                self.stall_events += 1
                self._stagnation_steps = 0

        self._prev_delivered = delivered

    def generate_summary(self, final_state: "SimulationState",
                         output_dir: Path,
                         csv_enabled: bool,
                         snapshot_enabled: bool,
                         gif_enabled: bool) -> str:
        """Returns formatted text report."""
        metrics = final_state.metrics
        total_agents = int(metrics.get('total_agents', 0))
        delivered = int(metrics.get('delivered', 0))
        throughput = metrics.get('throughput', 0)
        first = (f"step {self.first_delivery_step}"
                 if self.first_delivery_step is not None else "never")
        gap = (f"{self.longest_gap} steps"
               if self.longest_gap is not None else "n/a")

        lines = [
            "",
            "=" * 80,
            "                 PHYSARUM TRANSPORT SIMULATION REPORT",
            "=" * 80,
            f"Configuration: {self.config_path or '(defaults)'}",
            f"Random Seed: {self.seed if self.seed is not None else 'None (random)'}",
            "",
            "SIMULATION METRICS",
            "-" * 40,
            f"Total Steps:           {final_state.step}",
            f"Agents:                {total_agents}",
            f"Deliveries:            {delivered}",
            f"First Delivery:        {first}",
            f"Longest Delivery Gap:  {gap}",
            f"Throughput:            {throughput:.4f} deliveries/step",
            f"Peak Vein Strength:    {self.peak_vein:.3f}",
            "",
            "AGENT STATES (final)",
            "-" * 40,
            f"Seeking pickup:        {int(metrics.get('seek_pickup', 0))}",
            f"Loading:               {int(metrics.get('loading', 0))}",
            f"Seeking delivery:      {int(metrics.get('seek_delivery', 0))}",
            f"Unloading:             {int(metrics.get('unloading', 0))}",
            "",
            "EMERGENT BEHAVIORS DETECTED",
            "-" * 40,
            f"[{'X' if self.first_delivery_step is not None else ' '}] Transport Network Formed",
            f"[{'X' if self.stall_events > 0 else ' '}] Stall Events: {self.stall_events} detected",
            "",
            "OUTPUT FILES",
            "-" * 40,
        ]

        # Output file paths
        if csv_enabled:
            lines.append(f"CSV Log:    {output_dir / 'simulation_log.csv'}")
        else:
            lines.append("CSV Log:    (disabled)")

        if snapshot_enabled:
            lines.append(f"Snapshot:   {output_dir / 'final_state.png'}")
        else:
            lines.append("Snapshot:   (disabled)")

        if gif_enabled:
            lines.append(f"Animation:  {output_dir / 'simulation.gif'}")
        else:
            lines.append("Animation:  (disabled)")

        lines.append("=" * 80)

        return "\n".join(lines)
