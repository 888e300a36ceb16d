"""State snapshot dataclasses for the Physarum transport simulation."""

from dataclasses import dataclass
from typing import List, Dict
import numpy as np


@dataclass(frozen=True)
class AgentSnapshot:
    """Immutable snapshot of an agent's state at a given tick."""
    index: int
    x: float
    y: float
    state: str  # "seek_pickup", "loading", "seek_delivery", "unloading"
    heading: float


@dataclass
class SimulationState:
    """Complete snapshot of simulation state at a given tick."""
    step: int
    agents: List[AgentSnapshot]
    layers: Dict[str, np.ndarray]   # copies of pickup, delivery, vein, obstacles
    metrics: Dict[str, float]       # delivered, throughput, vein strength, ...

    def to_csv_rows(self) -> List[Dict]:
        """Convert to CSV-compatible format."""
        return [
            {
                "step": self.step,
                "agent_index": a.index,
                "x": round(a.x, 4),
                "y": round(a.y, 4),
                "state": a.state,
                "heading": round(a.heading, 4)
            }
            for a in self.agents
        ]
