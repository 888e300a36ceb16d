"""Sensor readings and steering rules for transport agents."""

import math
from typing import Tuple

import numpy as np

from ..config import AgentConfig
from .field import PhysarumField

TWO_PI = 2.0 * math.pi


def wrap_angle(angle: float) -> float:
    """Map a heading into [0, 2*pi)."""
    return angle % TWO_PI


def read_sensor(field: PhysarumField, target: np.ndarray,
                x: float, y: float, angle: float, config: AgentConfig) -> float:
    """
    Desirability of the cell ``sensor_distance`` ahead along ``angle``.

    Off-grid and obstacle sensors return fixed penalties; anything else is
    goal potential plus weighted trail memory minus weighted crowding.
    """
    cell = field.grid.cell_of(x + math.cos(angle) * config.sensor_distance,
                              y + math.sin(angle) * config.sensor_distance)
    if cell is None:
        return config.out_of_bounds_value
    cx, cy = cell
    if field.is_obstacle(cx, cy):
        return config.obstacle_value
    return (float(target[cy, cx])
            + float(field.vein[cy, cx]) * config.vein_weight
            - float(field.repulsion[cy, cx]) * config.repulsion_weight)


def sense(field: PhysarumField, target: np.ndarray,
          x: float, y: float, heading: float,
          config: AgentConfig) -> Tuple[float, float, float]:
    """Return (forward, left, right) sensor values."""
    forward = read_sensor(field, target, x, y, heading, config)
    left = read_sensor(field, target, x, y, heading - config.sensor_angle, config)
    right = read_sensor(field, target, x, y, heading + config.sensor_angle, config)
    return forward, left, right


def steer(heading: float, forward: float, left: float, right: float,
          config: AgentConfig, rng: np.random.Generator) -> float:
    """
    New heading from the three sensor values.

    Random turn only when forward is strictly worse than both sides;
    otherwise turn one step toward the better side, and hold on a tie.
    """
    if forward < left and forward < right:
        return heading + (rng.random() - 0.5) * config.explore_jitter
    if left > right:
        return heading - config.turn_step
    if right > left:
        return heading + config.turn_step
    return heading


def bounce(heading: float, config: AgentConfig, rng: np.random.Generator) -> float:
    """Roughly reverse the heading after a blocked move."""
    jitter = (rng.random() - 0.5) * 2.0 * config.bounce_jitter * math.pi
    return heading + math.pi + jitter


def is_passable(field: PhysarumField, x: float, y: float) -> bool:
    cell = field.grid.cell_of(x, y)
    if cell is None:
        return False
    return not field.is_obstacle(*cell)
