"""Slime-mold inspired transport network simulation."""

from .config import SimulationConfig, default_config, load_config
from .model import Simulation, run_simulation_bench

__version__ = "0.1.0"

__all__ = [
    'SimulationConfig',
    'default_config',
    'load_config',
    'Simulation',
    'run_simulation_bench',
]
