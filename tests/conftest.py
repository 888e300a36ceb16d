"""
Shared test fixtures.

Most tests run on a 48x48 grid with only the border as obstacle, so agent
and field behavior near the emitters is fully predictable.
"""

import numpy as np
import pytest

from physarum_transport.config import GridConfig, SimulationConfig
from physarum_transport.model.agent import Agent
from physarum_transport.model.engine import Simulation
from physarum_transport.model.field import PhysarumField
from physarum_transport.model.grid import ObstacleLayout


class SingleBlockLayout(ObstacleLayout):
    """Places one fixed rectangle; used where a known obstacle is needed."""

    def __init__(self, x, y, w, h):
        self.rect = (x, y, w, h)

    def place(self, grid, obstacles, rng):
        grid.add_rectangle(obstacles, *self.rect)
        return 1


@pytest.fixture
def small_config():
    return SimulationConfig(grid=GridConfig(width=48, height=48), agent_count=0)


@pytest.fixture
def empty_field(small_config):
    return PhysarumField(48, 48, small_config.field_engine, ObstacleLayout(),
                         np.random.default_rng(0))


@pytest.fixture
def empty_sim(small_config):
    return Simulation(small_config, rng=np.random.default_rng(0), layout=ObstacleLayout())


@pytest.fixture
def make_agent():
    def _make(x, y, heading=0.0, speed=0.4, history_cap=300):
        return Agent(x=x, y=y, heading=heading, speed=speed, history_cap=history_cap)
    return _make
