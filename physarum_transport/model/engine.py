"""Simulation engine for the Physarum transport network."""

import logging
import math
from typing import Dict, List, MutableSequence, Optional

import numpy as np

from ..config import SimulationConfig, default_config
from .agent import Agent, AgentState, transition
from .field import PhysarumField
from .grid import ObstacleLayout, RandomBlockLayout
from .sensing import bounce, is_passable, sense, steer, wrap_angle
from .state import SimulationState, AgentSnapshot

logger = logging.getLogger(__name__)


class Simulation:
    """
    Orchestrates the discrete-time simulation loop.

    Each tick:
    1. Field step (emit, diffuse, decay, swap)
    2. Sequential agent pass (sense, steer, move, deposit, transition)

    Agents are updated in collection order and write straight into the
    shared repulsion and vein layers, so every deposit lands.
    """

    def __init__(self, config: Optional[SimulationConfig] = None,
                 rng: Optional[np.random.Generator] = None,
                 layout: Optional[ObstacleLayout] = None):
        self.config = config or default_config()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self.current_step = 0
        self.delivered_count = 0

        spawn_lo, spawn_hi = self.config.agents.spawn_range
        limit = min(self.config.grid.width, self.config.grid.height)
        if spawn_lo < 0 or spawn_hi > limit:
            raise ValueError(
                f"Spawn range {self.config.agents.spawn_range} does not fit a "
                f"{self.config.grid.width}x{self.config.grid.height} grid"
            )

        if layout is None:
            layout = RandomBlockLayout(self.config.obstacles)
        self.field = PhysarumField(
            self.config.grid.width, self.config.grid.height,
            self.config.field_engine, layout, self.rng
        )

        self.agents: List[Agent] = []
        self.resize_agents(self.config.agent_count)

    @classmethod
    def new(cls, agent_count: int, seed: Optional[int] = None) -> "Simulation":
        """Fresh 128x128 simulation with the tuned defaults."""
        config = default_config()
        config.agent_count = agent_count
        config.seed = seed
        return cls(config)

    # ------------------------------------------------------------------
    # Population and map control
    # ------------------------------------------------------------------

    def _spawn_agent(self, max_attempts: int = 100) -> Agent:
        cfg = self.config.agents
        lo, hi = cfg.spawn_range
        for _ in range(max_attempts):
            x = float(self.rng.uniform(lo, hi))
            y = float(self.rng.uniform(lo, hi))
            if is_passable(self.field, x, y):
                break
        else:
            logger.debug("No open cell in spawn box after %d attempts, spawning at (%.2f, %.2f)",
                         max_attempts, x, y)
        return Agent(
            x=x,
            y=y,
            heading=float(self.rng.random() * 2.0 * math.pi),
            speed=cfg.speed_min + float(self.rng.random()) * cfg.speed_spread,
            history_cap=cfg.history_cap
        )

    def resize_agents(self, count: int) -> None:
        """Grow by spawning near the corner, or truncate from the end."""
        if count < 0:
            raise ValueError(f"Agent count must be >= 0, got {count}")
        before = len(self.agents)
        if count > before:
            self.agents.extend(self._spawn_agent() for _ in range(count - before))
        else:
            del self.agents[count:]
        logger.debug("Resized agents %d -> %d", before, count)

    def randomize_map(self) -> None:
        """Re-roll obstacles and zones; agents and repulsion are kept."""
        self.field.reset_obstacles()
        self.delivered_count = 0
        logger.debug("Map randomized at step %d", self.current_step)

    def set_diffusion(self, rate: float) -> None:
        self.field.set_diffusion(rate)

    def set_decay(self, rate: float) -> None:
        self.field.set_decay(rate)

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def update(self) -> None:
        """Advance exactly one tick."""
        self.current_step += 1
        self.field.step()
        for agent in self.agents:
            self._update_agent(agent)

    def step(self) -> SimulationState:
        """Advance one tick and return a snapshot of the result."""
        self.update()
        return self._create_state_snapshot()

    def _update_agent(self, agent: Agent) -> None:
        cfg = self.config.agents
        field = self.field

        # Dwelling agents hold position
        if agent.timer > 0:
            agent.timer -= 1
            field.deposit(field.repulsion, agent.x, agent.y, cfg.dwell_deposit)
            if agent.timer == 0:
                self._apply_transition(agent)
            return

        if agent.state in (AgentState.SEEK_PICKUP, AgentState.LOADING):
            target = field.pickup
        else:
            target = field.delivery

        forward, left, right = sense(field, target, agent.x, agent.y, agent.heading, cfg)
        agent.heading = wrap_angle(steer(agent.heading, forward, left, right, cfg, self.rng))

        next_x = agent.x + math.cos(agent.heading) * agent.speed
        next_y = agent.y + math.sin(agent.heading) * agent.speed
        if is_passable(field, next_x, next_y):
            agent.x = next_x
            agent.y = next_y
        else:
            agent.heading = wrap_angle(bounce(agent.heading, cfg, self.rng))

        field.deposit(field.repulsion, agent.x, agent.y, cfg.move_deposit)
        agent.record_position()
        self._apply_transition(agent)

    def _apply_transition(self, agent: Agent) -> None:
        cfg = self.config.agents
        cell = self.field.grid.cell_of(agent.x, agent.y)
        if cell is None:
            return
        cx, cy = cell
        new_state = transition(
            agent.state, agent.timer,
            float(self.field.pickup[cy, cx]), float(self.field.delivery[cy, cx]),
            cfg
        )
        if new_state is agent.state:
            return

        if new_state is AgentState.UNLOADING:
            self._reinforce(agent)
            self.delivered_count += 1
        agent.enter(new_state, cfg.dwell_ticks)

    def _reinforce(self, agent: Agent) -> None:
        """Lay vein along the agent's remembered delivery run."""
        amount = self.config.agents.vein_deposit
        for hx, hy in agent.history:
            self.field.deposit(self.field.vein, hx, hy, amount)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def get_pickup(self) -> np.ndarray:
        return self.field.view('pickup')

    def get_delivery(self) -> np.ndarray:
        return self.field.view('delivery')

    def get_repulsion(self) -> np.ndarray:
        return self.field.view('repulsion')

    def get_vein(self) -> np.ndarray:
        return self.field.view('vein')

    def get_obstacles(self) -> np.ndarray:
        return self.field.view('obstacles')

    def get_agents_flat(self, out: MutableSequence[float]) -> int:
        """
        Write (x, y, state code, heading) per agent into ``out``.

        Stops at the last agent that fits; returns the number written.
        """
        written = 0
        for i, agent in enumerate(self.agents):
            if i * 4 + 3 >= len(out):
                break
            out[i * 4 + 0] = agent.x
            out[i * 4 + 1] = agent.y
            out[i * 4 + 2] = float(agent.state.value)
            out[i * 4 + 3] = agent.heading
            written += 1
        return written

    def get_delivered_count(self) -> int:
        return self.delivered_count

    # ------------------------------------------------------------------
    # Run-loop helpers
    # ------------------------------------------------------------------

    def state_counts(self) -> Dict[str, int]:
        counts = {state.label: 0 for state in AgentState}
        for agent in self.agents:
            counts[agent.state.label] += 1
        return counts

    def _create_state_snapshot(self) -> SimulationState:
        """Create immutable snapshot of current simulation state."""
        agent_snapshots = [
            AgentSnapshot(
                index=i,
                x=a.x,
                y=a.y,
                state=a.state.label,
                heading=a.heading
            )
            for i, a in enumerate(self.agents)
        ]

        vein = self.field.vein
        metrics: Dict[str, float] = {
            'delivered': self.delivered_count,
            'total_agents': len(self.agents),
            'throughput': self.delivered_count / max(1, self.current_step),
            'vein_total': float(vein.sum()),
            'vein_peak': float(vein.max()),
            'mean_repulsion': float(self.field.repulsion.mean()),
        }
        metrics.update(self.state_counts())

        return SimulationState(
            step=self.current_step,
            agents=agent_snapshots,
            layers={
                'pickup': self.field.pickup.copy(),
                'delivery': self.field.delivery.copy(),
                'vein': vein.copy(),
                'obstacles': self.field.obstacles.copy(),
            },
            metrics=metrics
        )

    def is_finished(self) -> bool:
        """Check if the configured run length has been reached."""
        return self.current_step >= self.config.max_steps

    def get_summary(self) -> Dict:
        """Get summary statistics for the simulation."""
        return {
            'total_steps': self.current_step,
            'delivered': self.delivered_count,
            'agents_total': len(self.agents),
            'throughput': self.delivered_count / max(1, self.current_step),
            'vein_peak': float(self.field.vein.max()),
        }


def run_simulation_bench(steps: int, agent_count: int,
                         seed: Optional[int] = None) -> int:
    """Run ``steps`` ticks headlessly and return the delivered count."""
    sim = Simulation.new(agent_count, seed=seed)
    for _ in range(steps):
        sim.update()
    return sim.get_delivered_count()
