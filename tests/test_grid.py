"""
Tests for model/grid.py

Grid geometry helpers and obstacle layouts.
"""

import logging

import numpy as np
import pytest

from physarum_transport.config import ObstacleConfig
from physarum_transport.model.grid import GridMap, ObstacleLayout, RandomBlockLayout


class TestGridMap:
    """Tests for GridMap."""

    def test_rejects_tiny_grid(self):
        with pytest.raises(ValueError):
            GridMap(2, 5)

    def test_shape_is_rows_by_columns(self):
        grid = GridMap(10, 6)
        assert grid.shape == (6, 10)
        assert grid.size == 60
        assert grid.zeros().shape == (6, 10)
        assert grid.zeros().dtype == np.float32

    def test_row_major_index(self):
        grid = GridMap(10, 6)
        assert grid.index(3, 2) == 23
        arr = grid.zeros()
        arr[2, 3] = 1.0
        assert arr.reshape(-1)[grid.index(3, 2)] == 1.0

    def test_cell_of_floors(self):
        grid = GridMap(10, 10)
        assert grid.cell_of(3.99, 0.0) == (3, 0)
        assert grid.cell_of(9.5, 9.5) == (9, 9)

    def test_cell_of_off_grid(self):
        grid = GridMap(10, 10)
        assert grid.cell_of(-0.1, 5.0) is None
        assert grid.cell_of(5.0, 10.0) is None
        assert grid.cell_of(10.0, 0.0) is None

    def test_interior(self):
        grid = GridMap(10, 10)
        assert grid.is_interior(1, 1)
        assert grid.is_interior(8, 8)
        assert not grid.is_interior(0, 4)
        assert not grid.is_interior(4, 9)
        mask = grid.interior_mask()
        assert mask.sum() == 64
        assert not mask[0].any() and not mask[:, -1].any()

    def test_add_rectangle_clips(self):
        grid = GridMap(10, 10)
        obstacles = grid.zeros()
        grid.add_rectangle(obstacles, 7, 8, 5, 5)
        assert obstacles.sum() == 3 * 2
        assert obstacles[9, 9] == 1.0
        assert obstacles[7, 7] == 0.0

    def test_draw_border(self):
        grid = GridMap(8, 5)
        obstacles = grid.zeros()
        grid.draw_border(obstacles)
        assert (obstacles[0] == 1.0).all()
        assert (obstacles[-1] == 1.0).all()
        assert (obstacles[:, 0] == 1.0).all()
        assert (obstacles[:, -1] == 1.0).all()
        assert obstacles[1:-1, 1:-1].sum() == 0


class TestLayouts:
    """Tests for the obstacle layout generators."""

    def test_base_layout_places_nothing(self):
        grid = GridMap(32, 32)
        obstacles = grid.zeros()
        assert ObstacleLayout().place(grid, obstacles, np.random.default_rng(0)) == 0
        assert obstacles.sum() == 0

    def test_random_blocks_count_and_placement(self):
        grid = GridMap(128, 128)
        for seed in range(5):
            obstacles = grid.zeros()
            count = RandomBlockLayout().place(grid, obstacles, np.random.default_rng(seed))
            assert 12 <= count < 20
            ys, xs = np.nonzero(obstacles)
            # Origins in [20, 88), sizes below 20
            assert xs.min() >= 20 and ys.min() >= 20
            assert xs.max() < 88 + 19 and ys.max() < 88 + 19

    def test_random_blocks_reproducible(self):
        grid = GridMap(128, 128)
        a, b = grid.zeros(), grid.zeros()
        RandomBlockLayout().place(grid, a, np.random.default_rng(3))
        RandomBlockLayout().place(grid, b, np.random.default_rng(3))
        assert np.array_equal(a, b)

    def test_small_grid_skips_blocks(self, caplog):
        grid = GridMap(48, 48)
        obstacles = grid.zeros()
        with caplog.at_level(logging.WARNING):
            count = RandomBlockLayout().place(grid, obstacles, np.random.default_rng(0))
        assert count == 0
        assert obstacles.sum() == 0
        assert "too small" in caplog.text

    def test_zero_block_range(self):
        grid = GridMap(128, 128)
        obstacles = grid.zeros()
        layout = RandomBlockLayout(ObstacleConfig(block_count=(0, 0)))
        assert layout.place(grid, obstacles, np.random.default_rng(0)) == 0
        assert obstacles.sum() == 0
