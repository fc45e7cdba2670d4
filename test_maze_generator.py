#!/usr/bin/env python3
"""
Tests for maze generation
"""
import random

import numpy as np
import pytest

from grid_model import Grid
from maze_config import MazeConfig
from maze_generator import CARVE_STEPS, MazeGenerator, generate_maze


def recursive_reference(rows, cols, rng):
    """Recursive carving used to check the explicit-stack version"""
    maze = np.ones((rows, cols), dtype=bool)

    def carve(r, c):
        maze[r, c] = False
        steps = list(CARVE_STEPS)
        rng.shuffle(steps)
        for dr, dc in steps:
            nr, nc = r + dr, c + dc
            if 0 < nr < rows - 1 and 0 < nc < cols - 1 and maze[nr, nc]:
                maze[r + dr // 2, c + dc // 2] = False
                carve(nr, nc)

    carve(1, 1)
    return maze


@pytest.mark.parametrize("rows,cols", [(5, 5), (21, 31), (15, 9), (8, 10)])
def test_boundary_ring_is_wall(rows, cols):
    """Test maze boundary invariant"""
    for seed in range(10):
        maze = generate_maze(MazeConfig(rows=rows, cols=cols), seed=seed)

        assert maze.shape == (rows, cols)
        assert maze[0, :].all()
        assert maze[-1, :].all()
        assert maze[:, 0].all()
        assert maze[:, -1].all()


def test_endpoints_always_open():
    config = MazeConfig(rows=21, cols=31, braid_trials=100)
    for seed in range(20):
        maze = generate_maze(config, seed=seed)
        assert not maze[1, 1]
        assert not maze[config.rows - 2, config.cols - 2]


def test_same_seed_same_maze():
    config = MazeConfig()
    assert np.array_equal(generate_maze(config, seed=42), generate_maze(config, seed=42))


def test_explicit_stack_matches_recursive_carving():
    config = MazeConfig(rows=11, cols=15, braid_trials=0)
    for seed in range(5):
        maze = MazeGenerator(config, random.Random(seed)).generate()
        reference = recursive_reference(config.rows, config.cols, random.Random(seed))
        assert np.array_equal(maze, reference)


def test_perfect_maze_spans_odd_lattice():
    """Without braiding the carving is a spanning tree of the odd cells"""
    config = MazeConfig(rows=21, cols=31, braid_trials=0)
    maze = generate_maze(config, seed=1)

    odd_cells = (config.rows // 2) * (config.cols // 2)
    assert not maze[1::2, 1::2].any()
    assert np.count_nonzero(~maze) == 2 * odd_cells - 1


def test_braiding_only_opens_interior_cells():
    base = MazeConfig(rows=21, cols=31, braid_trials=0)
    braided = MazeConfig(rows=21, cols=31, braid_trials=200)

    perfect = generate_maze(base, seed=9)
    maze = generate_maze(braided, seed=9)

    # Braiding never closes a carved cell
    assert not (maze & ~perfect).any()
    assert np.count_nonzero(~maze) >= np.count_nonzero(~perfect)


def test_build_grid_wraps_walls():
    generator = MazeGenerator(MazeConfig(rows=9, cols=9), random.Random(0))
    grid = generator.build_grid()

    assert isinstance(grid, Grid)
    assert grid.shape == (9, 9)
    assert generator.designated_start == (1, 1)
    assert generator.designated_end == (7, 7)
    assert grid.is_open(1, 1)
    assert grid.is_open(7, 7)
    assert not any(cell.is_start or cell.is_end or cell.is_touched for cell in grid)
