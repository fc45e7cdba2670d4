#!/usr/bin/env python3
"""
Tests for the uniform-cost path solver
"""
import random
from collections import deque

from grid_model import Grid, manhattan
from maze_config import MazeConfig
from maze_generator import MazeGenerator
from path_solver import solve_shortest_path


def open_grid(rows, cols, walls=()):
    """Open interior with a wall ring, plus any extra wall cells"""
    return Grid.from_walls([
        [r in (0, rows - 1) or c in (0, cols - 1) or (r, c) in walls for c in range(cols)]
        for r in range(rows)
    ])


def reachable_from(grid, start):
    seen = {start}
    queue = deque([start])
    while queue:
        r, c = queue.popleft()
        for nxt in grid.neighbors(r, c):
            if nxt not in seen:
                seen.add(nxt)
                queue.append(nxt)
    return seen


def test_open_five_by_five():
    """Test the 5x5 open grid scenario"""
    grid = open_grid(5, 5)
    result = solve_shortest_path(grid, (1, 1), (3, 3))

    assert len(result.path) == 5
    assert result.path[0] == (1, 1)
    assert result.path[-1] == (3, 3)
    assert len(result.visited_order) <= 9
    for a, b in zip(result.path, result.path[1:]):
        assert manhattan(a, b) == 1


def test_ties_settle_in_insertion_order():
    """Equal distances settle first-pushed first, neighbours right/down/left/up"""
    grid = open_grid(5, 5)
    result = solve_shortest_path(grid, (1, 1), (3, 3))

    assert result.path == [(1, 1), (1, 2), (1, 3), (2, 3), (3, 3)]
    assert result.visited_order[:3] == [(1, 1), (1, 2), (2, 1)]


def test_corridor_length_matches_manhattan():
    """Test a hand-built L-shaped corridor"""
    walls = [[True] * 7 for _ in range(7)]
    corridor = [(1, 1), (1, 2), (1, 3), (1, 4), (1, 5), (2, 5), (3, 5), (4, 5), (5, 5)]
    for r, c in corridor:
        walls[r][c] = False
    # Dead-end branch that must not be part of the path
    walls[2][2] = False
    walls[3][2] = False
    grid = Grid.from_walls(walls)

    result = solve_shortest_path(grid, (1, 1), (5, 5))

    assert result.path == corridor
    assert len(result.path) - 1 == manhattan((1, 1), (5, 5))


def test_enclosed_start_returns_empty_path():
    """Test solver completeness when start is walled in"""
    grid = open_grid(7, 7, walls={(1, 2), (2, 1)})

    result = solve_shortest_path(grid, (1, 1), (5, 5))

    assert result.path == []
    assert not result.found
    assert result.visited_order == [(1, 1)]


def test_unreachable_end_visits_only_reachable_cells():
    # Wall off the right-hand column of the interior
    grid = open_grid(9, 9, walls={(r, 6) for r in range(1, 8)})

    result = solve_shortest_path(grid, (1, 1), (7, 7))

    assert result.path == []
    assert set(result.visited_order) == reachable_from(grid, (1, 1))
    assert len(result.visited_order) == len(set(result.visited_order))


def test_visitation_order_is_monotonic():
    """Every settled distance is <= any distance settled later"""
    for seed in range(5):
        config = MazeConfig(rows=21, cols=31)
        grid = MazeGenerator(config, random.Random(seed)).build_grid()
        result = solve_shortest_path(grid, config.designated_start, config.designated_end)

        distances = [result.distances[c] for c in result.visited_order]
        assert distances == sorted(distances)
        assert result.distances[result.visited_order[0]] == 0
        if result.path:
            assert result.distances[config.designated_end] == len(result.path) - 1


def test_path_never_crosses_walls():
    config = MazeConfig(rows=15, cols=15)
    grid = MazeGenerator(config, random.Random(3)).build_grid()
    result = solve_shortest_path(grid, config.designated_start, config.designated_end)

    for r, c in result.path:
        assert not grid.cell(r, c).is_wall
    for a, b in zip(result.path, result.path[1:]):
        assert manhattan(a, b) == 1


def test_start_equals_end():
    grid = open_grid(5, 5)
    result = solve_shortest_path(grid, (2, 2), (2, 2))

    assert result.path == [(2, 2)]
    assert result.visited_order == [(2, 2)]
