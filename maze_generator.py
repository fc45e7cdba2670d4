#!/usr/bin/env python3
"""
Maze Generator using Randomized Depth-First Carving plus Braiding
- Carves the odd-coordinate sub-lattice starting at (1,1)
- Braids by opening random interior walls to add cycles
- Force-opens the designated start (1,1) and end (R-2,C-2)
"""

import logging
import random
from typing import List, Optional, Tuple

import numpy as np

from grid_model import Grid
from maze_config import MazeConfig
from monitoring import monitor_maze_generation

logger = logging.getLogger(__name__)

# Steps to the neighbouring cell two positions away on the odd lattice
CARVE_STEPS = [(0, 2), (2, 0), (0, -2), (-2, 0)]


class MazeGenerator:
    """Wall/open lattice generator"""

    def __init__(self, config: Optional[MazeConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or MazeConfig()
        self.rng = rng or random.Random()
        self.rows = self.config.rows
        self.cols = self.config.cols

    @property
    def designated_start(self) -> Tuple[int, int]:
        return self.config.designated_start

    @property
    def designated_end(self) -> Tuple[int, int]:
        return self.config.designated_end

    def _is_carvable(self, maze: np.ndarray, r: int, c: int) -> bool:
        return 0 < r < self.rows - 1 and 0 < c < self.cols - 1 and maze[r, c]

    def _shuffled_steps(self) -> List[Tuple[int, int]]:
        steps = list(CARVE_STEPS)
        self.rng.shuffle(steps)
        return steps

    def _carve(self, maze: np.ndarray, start: Tuple[int, int]) -> int:
        """Depth-first carving with an explicit stack; returns cells opened"""
        r, c = start
        maze[r, c] = False
        opened = 1
        # Each frame holds a cell and its remaining shuffled steps, so the
        # exploration order matches the recursive formulation
        stack = [(start, iter(self._shuffled_steps()))]

        while stack:
            (r, c), steps = stack[-1]
            for dr, dc in steps:
                nr, nc = r + dr, c + dc
                if self._is_carvable(maze, nr, nc):
                    maze[r + dr // 2, c + dc // 2] = False
                    maze[nr, nc] = False
                    opened += 2
                    stack.append(((nr, nc), iter(self._shuffled_steps())))
                    break
            else:
                stack.pop()

        return opened

    def _braid(self, maze: np.ndarray) -> int:
        """Open random interior walls; returns how many trials hit a wall"""
        opened = 0
        for _ in range(self.config.braid_trials):
            r = self.rng.randint(1, self.rows - 2)
            c = self.rng.randint(1, self.cols - 2)
            if maze[r, c]:
                maze[r, c] = False
                opened += 1
        return opened

    @monitor_maze_generation
    def generate(self) -> np.ndarray:
        """Generate a boolean wall matrix (True = wall)"""
        maze = np.ones((self.rows, self.cols), dtype=bool)

        carved = self._carve(maze, self.designated_start)
        braided = self._braid(maze)

        maze[self.designated_start] = False
        maze[self.designated_end] = False

        logger.debug(
            f"Maze generated: {self.rows}x{self.cols}, carved {carved} cells, "
            f"braided {braided}/{self.config.braid_trials} trials"
        )
        return maze

    def build_grid(self) -> Grid:
        """Generate a maze and wrap it into a fresh Grid"""
        return Grid(self.rows, self.cols, self.generate())


def generate_maze(config: Optional[MazeConfig] = None, seed: Optional[int] = None) -> np.ndarray:
    return MazeGenerator(config, random.Random(seed)).generate()
