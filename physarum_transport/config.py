"""Configuration dataclasses and YAML loader for the Physarum transport simulation."""

from dataclasses import dataclass, field
from typing import Tuple, Dict, Any, Optional
from pathlib import Path
import yaml

# Above this the stencil centre weight 1 - 4 * rate goes negative
MAX_DIFFUSION_RATE = 0.25
MAX_DECAY_RATE = 1.0


@dataclass
class GridConfig:
    width: int = 128
    height: int = 128


@dataclass
class FieldConfig:
    diffusion_rate: float = 0.15
    decay_rate: float = 0.05            # pickup / delivery
    repulsion_decay_rate: float = 0.15
    vein_decay_rate: float = 0.003
    emitter_value: float = 10.0
    emitter_inset: int = 12             # distance of emitters from the corners


@dataclass
class ObstacleConfig:
    block_count: Tuple[int, int] = (12, 20)   # [low, high)
    block_size: Tuple[int, int] = (5, 20)     # [low, high), per axis
    margin_low: int = 20
    margin_high: int = 40


@dataclass
class AgentConfig:
    sensor_distance: float = 6.0
    sensor_angle: float = 0.6
    turn_step: float = 0.12
    explore_jitter: float = 1.5         # full width of the random turn
    bounce_jitter: float = 0.1          # fraction of pi around a U-turn
    vein_weight: float = 0.4
    repulsion_weight: float = 3.0
    out_of_bounds_value: float = -1.0
    obstacle_value: float = -5.0
    pickup_threshold: float = 2.5
    delivery_threshold: float = 2.5
    dwell_ticks: int = 50
    history_cap: int = 300
    dwell_deposit: float = 0.6
    move_deposit: float = 0.4
    vein_deposit: float = 0.35
    spawn_range: Tuple[float, float] = (10.0, 30.0)
    speed_min: float = 0.4
    speed_spread: float = 0.15


@dataclass
class SimulationConfig:
    grid: GridConfig = field(default_factory=GridConfig)
    field_engine: FieldConfig = field(default_factory=FieldConfig)
    obstacles: ObstacleConfig = field(default_factory=ObstacleConfig)
    agents: AgentConfig = field(default_factory=AgentConfig)
    agent_count: int = 50
    max_steps: int = 2000

    # Export flags (can be overridden by CLI)
    csv_enabled: bool = False
    csv_every: int = 1
    snapshot_enabled: bool = True
    gif_enabled: bool = False
    quiet: bool = False
    seed: Optional[int] = None
    out_dir: Path = field(default_factory=lambda: Path("./output"))


def default_config() -> SimulationConfig:
    """Return the tuned default configuration (128x128 grid, 50 agents)."""
    return SimulationConfig()


def _pair(raw: Any, name: str) -> Tuple:
    """Parse a two-element [low, high) range."""
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise ValueError(f"{name} must be a two-element list, got {raw!r}")
    low, high = raw
    if high < low:
        raise ValueError(f"{name} range is inverted: {raw!r}")
    return (low, high)


def _parse_section(cls, raw: Optional[Dict], name: str):
    """Build a dataclass section, rejecting unknown keys."""
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ValueError(f"Section '{name}' must be a mapping")
    known = cls.__dataclass_fields__.keys()
    unknown = set(raw) - set(known)
    if unknown:
        raise ValueError(f"Unknown keys in '{name}': {sorted(unknown)}")
    return cls(**raw)


def check_rate(name: str, rate: float, upper: float) -> None:
    """Rates outside [0, upper] would drive field values negative."""
    if not 0.0 <= rate <= upper:
        raise ValueError(f"{name} must be in [0, {upper}], got {rate}")


def validate_config(config: SimulationConfig) -> None:
    """Fail fast on settings that would break the grid invariants."""
    if config.grid.width < 3 or config.grid.height < 3:
        raise ValueError(
            f"Grid must be at least 3x3, got {config.grid.width}x{config.grid.height}"
        )
    if config.agent_count < 0:
        raise ValueError(f"agent_count must be >= 0, got {config.agent_count}")
    if config.max_steps < 0:
        raise ValueError(f"max_steps must be >= 0, got {config.max_steps}")
    if config.csv_every < 1:
        raise ValueError(f"export.csv_every must be >= 1, got {config.csv_every}")
    check_rate("field.diffusion_rate", config.field_engine.diffusion_rate, MAX_DIFFUSION_RATE)
    for name in ('decay_rate', 'repulsion_decay_rate', 'vein_decay_rate'):
        check_rate(f"field.{name}", getattr(config.field_engine, name), MAX_DECAY_RATE)
    if config.agents.history_cap < 1:
        raise ValueError("agents.history_cap must be >= 1")
    if config.agents.dwell_ticks < 0:
        raise ValueError("agents.dwell_ticks must be >= 0")


def load_config(config_path: Path) -> SimulationConfig:
    """Load and validate YAML configuration file.

    Every section is optional; missing keys keep their defaults.
    """
    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError("Configuration root must be a mapping")

    grid = _parse_section(GridConfig, raw.get('grid'), 'grid')
    field_cfg = _parse_section(FieldConfig, raw.get('field'), 'field')

    obstacles_raw = dict(raw.get('obstacles') or {})
    for key in ('block_count', 'block_size'):
        if key in obstacles_raw:
            obstacles_raw[key] = _pair(obstacles_raw[key], f"obstacles.{key}")
    obstacles = _parse_section(ObstacleConfig, obstacles_raw, 'obstacles')

    agents_raw = dict(raw.get('agents') or {})
    if 'spawn_range' in agents_raw:
        agents_raw['spawn_range'] = _pair(agents_raw['spawn_range'], "agents.spawn_range")
    agents = _parse_section(AgentConfig, agents_raw, 'agents')

    # Parse simulation config
    sim_raw = raw.get('simulation') or {}

    # Parse export config (optional)
    export_raw = raw.get('export') or {}

    config = SimulationConfig(
        grid=grid,
        field_engine=field_cfg,
        obstacles=obstacles,
        agents=agents,
        agent_count=sim_raw.get('agent_count', 50),
        max_steps=sim_raw.get('max_steps', 2000),
        csv_enabled=export_raw.get('csv', False),
        csv_every=export_raw.get('csv_every', 1),
        snapshot_enabled=export_raw.get('snapshot', True),
        gif_enabled=export_raw.get('gif', False),
        seed=sim_raw.get('seed'),
    )
    validate_config(config)
    return config
