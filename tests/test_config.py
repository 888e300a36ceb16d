"""
Tests for config.py

Dataclass defaults, YAML loading and validation.
"""

from pathlib import Path

import pytest

from physarum_transport.config import (
    SimulationConfig, GridConfig, default_config, load_config, validate_config
)


class TestDefaults:
    """The defaults carry the tuned constants."""

    def test_grid_is_128_square(self):
        config = default_config()
        assert config.grid.width == 128
        assert config.grid.height == 128

    def test_field_constants(self):
        field = default_config().field_engine
        assert field.diffusion_rate == 0.15
        assert field.decay_rate == 0.05
        assert field.repulsion_decay_rate == 0.15
        assert field.vein_decay_rate == 0.003
        assert field.emitter_value == 10.0

    def test_agent_constants(self):
        agents = default_config().agents
        assert agents.sensor_distance == 6.0
        assert agents.sensor_angle == 0.6
        assert agents.turn_step == 0.12
        assert agents.pickup_threshold == 2.5
        assert agents.delivery_threshold == 2.5
        assert agents.dwell_ticks == 50
        assert agents.history_cap == 300
        assert agents.dwell_deposit == 0.6
        assert agents.move_deposit == 0.4
        assert agents.vein_deposit == 0.35

    def test_obstacle_ranges(self):
        obstacles = default_config().obstacles
        assert obstacles.block_count == (12, 20)
        assert obstacles.block_size == (5, 20)

    def test_seed_unset(self):
        assert default_config().seed is None


class TestLoadConfig:
    """Tests for load_config()."""

    def test_full_file(self, tmp_path):
        path = tmp_path / "sim.yaml"
        path.write_text(
            "grid:\n"
            "  width: 64\n"
            "  height: 80\n"
            "field:\n"
            "  diffusion_rate: 0.2\n"
            "obstacles:\n"
            "  block_count: [2, 4]\n"
            "agents:\n"
            "  spawn_range: [5, 15]\n"
            "  dwell_ticks: 10\n"
            "simulation:\n"
            "  agent_count: 12\n"
            "  max_steps: 400\n"
            "  seed: 7\n"
            "export:\n"
            "  csv: true\n"
            "  csv_every: 5\n"
            "  gif: true\n"
        )
        config = load_config(path)

        assert config.grid.width == 64
        assert config.grid.height == 80
        assert config.field_engine.diffusion_rate == 0.2
        assert config.field_engine.decay_rate == 0.05
        assert config.obstacles.block_count == (2, 4)
        assert config.agents.spawn_range == (5, 15)
        assert config.agents.dwell_ticks == 10
        assert config.agent_count == 12
        assert config.max_steps == 400
        assert config.seed == 7
        assert config.csv_enabled is True
        assert config.csv_every == 5
        assert config.gif_enabled is True
        assert config.snapshot_enabled is True

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = load_config(path)
        assert config.grid.width == 128
        assert config.agent_count == 50

    def test_shipped_default_config(self):
        path = Path(__file__).resolve().parent.parent / "configs" / "default.yaml"
        config = load_config(path)
        assert config.grid.width == 128
        assert config.max_steps == 3000

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("field:\n  viscosity: 3\n")
        with pytest.raises(ValueError, match="viscosity"):
            load_config(path)

    def test_bad_range_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("obstacles:\n  block_size: [20, 5]\n")
        with pytest.raises(ValueError, match="inverted"):
            load_config(path)

    def test_non_mapping_section_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("grid: 12\n")
        with pytest.raises(ValueError):
            load_config(path)


class TestValidateConfig:
    """Tests for validate_config()."""

    def test_default_is_valid(self):
        validate_config(default_config())

    def test_tiny_grid(self):
        config = SimulationConfig(grid=GridConfig(width=2, height=10))
        with pytest.raises(ValueError, match="3x3"):
            validate_config(config)

    def test_negative_agents(self):
        config = SimulationConfig(agent_count=-1)
        with pytest.raises(ValueError):
            validate_config(config)

    def test_negative_rate(self):
        config = default_config()
        config.field_engine.vein_decay_rate = -0.1
        with pytest.raises(ValueError, match="vein_decay_rate"):
            validate_config(config)

    def test_diffusion_above_stencil_limit(self):
        config = default_config()
        config.field_engine.diffusion_rate = 0.3
        with pytest.raises(ValueError, match="diffusion_rate"):
            validate_config(config)

    def test_decay_above_one(self):
        config = default_config()
        config.field_engine.vein_decay_rate = 1.5
        with pytest.raises(ValueError, match="vein_decay_rate"):
            validate_config(config)

    def test_rate_limits_inclusive(self):
        config = default_config()
        config.field_engine.diffusion_rate = 0.25
        config.field_engine.decay_rate = 1.0
        config.field_engine.repulsion_decay_rate = 0.0
        validate_config(config)
