#!/usr/bin/env python3
"""
Grid model for the Maze Path Validator
A fixed-size rectangular lattice of cells with per-cell flags
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

Coord = Tuple[int, int]

# right, down, left, up
DIRECTIONS = [(0, 1), (1, 0), (0, -1), (-1, 0)]


class MatchOptimal(Enum):
    """Relation of a cell to the optimal path after a solve"""
    NONE = "none"
    BOTH = "both"
    USER_ONLY = "user-only"
    OPTIMAL_ONLY = "optimal-only"


@dataclass
class Cell:
    """One lattice position"""
    row: int
    col: int
    is_wall: bool = False
    is_start: bool = False
    is_end: bool = False
    is_touched: bool = False
    is_visited: bool = False
    match_optimal: MatchOptimal = MatchOptimal.NONE

    @property
    def coord(self) -> Coord:
        return (self.row, self.col)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'row': self.row,
            'col': self.col,
            'is_wall': self.is_wall,
            'is_start': self.is_start,
            'is_end': self.is_end,
            'is_touched': self.is_touched,
            'is_visited': self.is_visited,
            'match_optimal': self.match_optimal.value,
        }


# Flags that Grid.update may change; row/col and is_wall are fixed at creation
MUTABLE_FLAGS = frozenset(
    ['is_start', 'is_end', 'is_touched', 'is_visited', 'match_optimal']
)


def manhattan(a: Coord, b: Coord) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


class Grid:
    """R x C lattice of cells, row-major, addressed by (row, col)"""

    def __init__(self, rows: int, cols: int, walls: Optional[Sequence] = None):
        self.rows = rows
        self.cols = cols
        if walls is None:
            wall_matrix = np.zeros((rows, cols), dtype=bool)
        else:
            wall_matrix = np.asarray(walls, dtype=bool)
            if wall_matrix.shape != (rows, cols):
                raise ValueError(
                    f"Wall matrix shape {wall_matrix.shape} does not match grid {rows}x{cols}"
                )
        self.cells: List[List[Cell]] = [
            [Cell(r, c, is_wall=bool(wall_matrix[r, c])) for c in range(cols)]
            for r in range(rows)
        ]

    @classmethod
    def from_walls(cls, walls: Sequence) -> "Grid":
        matrix = np.asarray(walls, dtype=bool)
        rows, cols = matrix.shape
        return cls(rows, cols, matrix)

    @property
    def shape(self) -> Coord:
        return (self.rows, self.cols)

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def cell(self, row: int, col: int) -> Optional[Cell]:
        """Get cell at coordinates, return None if out of bounds"""
        if not self.in_bounds(row, col):
            return None
        return self.cells[row][col]

    def is_open(self, row: int, col: int) -> bool:
        cell = self.cell(row, col)
        return cell is not None and not cell.is_wall

    def update(self, row: int, col: int, /, **flags) -> Optional[Cell]:
        """Mutate exactly the targeted cell in place; no-op when out of bounds"""
        cell = self.cell(row, col)
        if cell is None:
            return None
        for name, value in flags.items():
            if name not in MUTABLE_FLAGS:
                raise AttributeError(f"Cell has no mutable flag {name!r}")
            setattr(cell, name, value)
        return cell

    def __iter__(self) -> Iterator[Cell]:
        for row in self.cells:
            yield from row

    def neighbors(self, row: int, col: int) -> List[Coord]:
        """In-bounds open four-neighbours"""
        result = []
        for dr, dc in DIRECTIONS:
            nr, nc = row + dr, col + dc
            if self.is_open(nr, nc):
                result.append((nr, nc))
        return result

    def find_start(self) -> Optional[Cell]:
        return next((cell for cell in self if cell.is_start), None)

    def find_end(self) -> Optional[Cell]:
        return next((cell for cell in self if cell.is_end), None)

    def clear_annotations(self) -> None:
        for cell in self:
            cell.is_visited = False
            cell.match_optimal = MatchOptimal.NONE

    def clear_selections(self) -> None:
        for cell in self:
            cell.is_start = False
            cell.is_end = False
            cell.is_touched = False
            cell.is_visited = False
            cell.match_optimal = MatchOptimal.NONE

    def wall_matrix(self) -> np.ndarray:
        return np.array([[cell.is_wall for cell in row] for row in self.cells], dtype=bool)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rows': self.rows,
            'cols': self.cols,
            'cells': [[cell.to_dict() for cell in row] for row in self.cells],
        }
