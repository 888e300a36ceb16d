"""Model package for the Physarum transport simulation."""

from .state import AgentSnapshot, SimulationState
from .grid import GridMap, ObstacleLayout, RandomBlockLayout
from .field import PhysarumField, laplacian
from .agent import Agent, AgentState, transition
from .engine import Simulation, run_simulation_bench

__all__ = [
    'AgentSnapshot',
    'SimulationState',
    'GridMap',
    'ObstacleLayout',
    'RandomBlockLayout',
    'PhysarumField',
    'laplacian',
    'Agent',
    'AgentState',
    'transition',
    'Simulation',
    'run_simulation_bench',
]
