#!/usr/bin/env python3
"""
Interactive session state machine for the Maze Path Validator

Governs start/end selection, user-path recording, solver invocation and the
comparison annotations and statistics consumed by the renderer. Every
rejected interaction is a silent no-op: event handlers return False and
solve commands return None, leaving the grid in a valid, renderable state.
"""

import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from grid_model import Coord, Grid, MatchOptimal, manhattan
from maze_config import MazeConfig
from maze_generator import MazeGenerator
from path_solver import SolveResult, solve_shortest_path

logger = logging.getLogger(__name__)


class Phase(Enum):
    SELECTING_START = "selecting-start"
    SELECTING_END = "selecting-end"
    READY = "ready"


class SolveMode(Enum):
    CHECK_PATH = "check-path"
    SHOW_OPTIMAL = "show-optimal"


@dataclass
class PathStatistics:
    """Derived statistics for one solve"""
    user_steps: int
    optimal_steps: Optional[int]
    nodes_visited: int
    runtime_ms: float
    path_found: bool
    matching_steps: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_steps': self.user_steps,
            'optimal_steps': self.optimal_steps,
            'nodes_visited': self.nodes_visited,
            'runtime_ms': round(self.runtime_ms, 3),
            'path_found': self.path_found,
            'matching_steps': self.matching_steps,
        }


@dataclass
class SolveOutcome:
    mode: SolveMode
    result: SolveResult
    statistics: PathStatistics

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mode': self.mode.value,
            **self.result.to_dict(),
            'statistics': self.statistics.to_dict(),
        }


def annotate(grid: Grid, user_path: List[Coord], optimal_path: List[Coord],
             mode: SolveMode) -> int:
    """Recompute match_optimal for every cell; returns the BOTH count"""
    user_cells = set(user_path)
    optimal_cells = set(optimal_path)
    both = 0

    for cell in grid:
        coord = cell.coord
        in_optimal = coord in optimal_cells
        if mode is SolveMode.SHOW_OPTIMAL:
            cell.match_optimal = MatchOptimal.OPTIMAL_ONLY if in_optimal else MatchOptimal.NONE
            continue

        in_user = coord in user_cells
        if in_user and in_optimal:
            cell.match_optimal = MatchOptimal.BOTH
            both += 1
        elif in_user:
            cell.match_optimal = MatchOptimal.USER_ONLY
        elif in_optimal:
            cell.match_optimal = MatchOptimal.OPTIMAL_ONLY
        else:
            cell.match_optimal = MatchOptimal.NONE

    return both


def compute_statistics(user_path: List[Coord], result: SolveResult, runtime_ms: float,
                       matching_steps: int = 0) -> PathStatistics:
    # The optimal path includes both endpoints, the user path neither
    optimal_steps = len(result.path) - 2 if result.path else None
    return PathStatistics(
        user_steps=len(user_path),
        optimal_steps=optimal_steps,
        nodes_visited=len(result.visited_order),
        runtime_ms=runtime_ms,
        path_found=result.found,
        matching_steps=matching_steps,
    )


class MazeSession:
    """selecting-start -> selecting-end -> ready"""

    def __init__(self, config: Optional[MazeConfig] = None, rng: Optional[random.Random] = None,
                 grid: Optional[Grid] = None,
                 solver: Callable[[Grid, Coord, Coord], SolveResult] = solve_shortest_path):
        self.config = config or MazeConfig()
        self.generator = MazeGenerator(self.config, rng)
        self.solver = solver
        self.grid = grid if grid is not None else self.generator.build_grid()
        self.phase = Phase.SELECTING_START
        self.start: Optional[Coord] = None
        self.end: Optional[Coord] = None
        self.user_path: List[Coord] = []
        self.pointer_held = False
        self.busy = False
        self.last_outcome: Optional[SolveOutcome] = None

    # --- commands ---

    def new_maze(self) -> bool:
        """Replace the grid wholesale and return to selecting-start"""
        if self.busy:
            logger.debug("new_maze rejected: presentation in progress")
            return False
        self.grid = self.generator.build_grid()
        self._reset_state()
        logger.info(f"New maze generated ({self.grid.rows}x{self.grid.cols})")
        return True

    def clear_selections(self) -> bool:
        if self.busy:
            logger.debug("clear_selections rejected: presentation in progress")
            return False
        self.grid.clear_selections()
        self._reset_state()
        return True

    def _reset_state(self):
        self.phase = Phase.SELECTING_START
        self.start = None
        self.end = None
        self.user_path = []
        self.pointer_held = False
        self.last_outcome = None

    def select_default_endpoints(self) -> bool:
        """Select the generator's designated start and end cells"""
        if self.busy or self.phase is not Phase.SELECTING_START:
            return False
        start = self.generator.designated_start
        end = self.generator.designated_end
        if not (self.grid.is_open(*start) and self.grid.is_open(*end)) or start == end:
            return False
        return self.click(*start) and self.click(*end)

    def check_path(self) -> Optional[SolveOutcome]:
        return self._solve(SolveMode.CHECK_PATH)

    def show_optimal_path(self) -> Optional[SolveOutcome]:
        return self._solve(SolveMode.SHOW_OPTIMAL)

    def complete_presentation(self) -> bool:
        """Called by the playback consumer once the animation has finished"""
        was_busy = self.busy
        self.busy = False
        return was_busy

    def _solve(self, mode: SolveMode) -> Optional[SolveOutcome]:
        if self.busy:
            logger.debug(f"{mode.value} rejected: presentation in progress")
            return None
        if self.start is None or self.end is None:
            return None

        self.grid.clear_annotations()

        started = time.perf_counter()
        result = self.solver(self.grid, self.start, self.end)
        runtime_ms = (time.perf_counter() - started) * 1000

        for coord in result.visited_order:
            self.grid.update(*coord, is_visited=True)
        matching = annotate(self.grid, self.user_path, result.path, mode)
        statistics = compute_statistics(self.user_path, result, runtime_ms, matching)

        self.last_outcome = SolveOutcome(mode, result, statistics)
        self.busy = True
        logger.info(
            f"{mode.value}: user {statistics.user_steps} steps, optimal {statistics.optimal_steps} steps, "
            f"{statistics.nodes_visited} nodes visited in {statistics.runtime_ms:.2f}ms"
        )
        return self.last_outcome

    # --- input events ---

    def click(self, row: int, col: int) -> bool:
        if self.busy:
            return False
        cell = self.grid.cell(row, col)
        if cell is None or cell.is_wall:
            return False

        if self.phase is Phase.SELECTING_START:
            self.grid.update(row, col, is_start=True)
            self.start = (row, col)
            self.phase = Phase.SELECTING_END
            return True

        if self.phase is Phase.SELECTING_END:
            if (row, col) == self.start:
                return False
            self.grid.update(row, col, is_end=True)
            self.end = (row, col)
            self.phase = Phase.READY
            return True

        return self.extend_path(row, col)

    def pointer_down(self, row: int, col: int) -> bool:
        self.pointer_held = True
        if self.phase is not Phase.READY:
            return False
        return self.extend_path(row, col)

    def pointer_enter(self, row: int, col: int) -> bool:
        if not self.pointer_held or self.phase is not Phase.READY:
            return False
        return self.extend_path(row, col)

    def pointer_up(self) -> None:
        self.pointer_held = False

    def can_extend(self, row: int, col: int) -> bool:
        if self.busy or self.phase is not Phase.READY:
            return False
        cell = self.grid.cell(row, col)
        if cell is None or cell.is_wall or cell.is_start or cell.is_end:
            return False
        coord = (row, col)
        if coord in self.user_path:
            return False
        last = self.user_path[-1] if self.user_path else self.start
        return manhattan(last, coord) == 1

    def extend_path(self, row: int, col: int) -> bool:
        """Append a cell to the user path if it is adjacent to the last one"""
        if not self.can_extend(row, col):
            return False
        self.grid.update(row, col, is_touched=True)
        self.user_path.append((row, col))
        return True

    # --- output ---

    def statistics(self) -> Optional[PathStatistics]:
        return self.last_outcome.statistics if self.last_outcome else None

    def snapshot(self) -> Dict[str, Any]:
        stats = self.statistics()
        return {
            'phase': self.phase.value,
            'busy': self.busy,
            'start': list(self.start) if self.start else None,
            'end': list(self.end) if self.end else None,
            'user_path': [list(c) for c in self.user_path],
            'statistics': stats.to_dict() if stats else None,
            'grid': self.grid.to_dict(),
        }
