#!/usr/bin/env python3
"""
Uniform-cost shortest path solver (Dijkstra) over the maze grid
Returns the visitation trace in settle order and the reconstructed path
"""

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from grid_model import Coord, DIRECTIONS, Grid
from monitoring import monitor_solve

logger = logging.getLogger(__name__)


@dataclass
class SolveResult:
    """Solver output handed to the session and the playback consumer"""
    visited_order: List[Coord] = field(default_factory=list)
    path: List[Coord] = field(default_factory=list)
    distances: Dict[Coord, int] = field(default_factory=dict)

    @property
    def found(self) -> bool:
        return bool(self.path)

    def to_dict(self):
        return {
            'visited_order': [list(c) for c in self.visited_order],
            'path': [list(c) for c in self.path],
        }


def _reconstruct(previous: Dict[Coord, Optional[Coord]], end: Coord) -> List[Coord]:
    path = []
    curr: Optional[Coord] = end
    while curr is not None:
        path.append(curr)
        curr = previous[curr]
    return path[::-1]


@monitor_solve
def solve_shortest_path(grid: Grid, start: Coord, end: Coord) -> SolveResult:
    """Dijkstra from start to end; wall cells are not nodes.

    Start and end must be open cells. Equal tentative distances settle in
    insertion order via a push counter, and neighbours are relaxed right,
    down, left, up. When end is unreachable the path is empty and
    visited_order holds every cell reachable from start.
    """
    start = tuple(start)
    end = tuple(end)
    distances: Dict[Coord, float] = {start: 0}
    previous: Dict[Coord, Optional[Coord]] = {start: None}
    settled: Dict[Coord, int] = {}
    visited_order: List[Coord] = []

    counter = itertools.count()
    # Priority queue: (distance, counter, position)
    frontier = [(0, next(counter), start)]

    while frontier:
        dist, _, current = heapq.heappop(frontier)
        if current in settled:
            continue
        settled[current] = dist
        visited_order.append(current)

        if current == end:
            path = _reconstruct(previous, end)
            logger.debug(f"Path found: {len(path)} cells, {len(visited_order)} settled")
            return SolveResult(visited_order, path, settled)

        r, c = current
        for dr, dc in DIRECTIONS:
            neighbor = (r + dr, c + dc)
            if neighbor in settled or not grid.is_open(*neighbor):
                continue
            new_dist = dist + 1
            if new_dist < distances.get(neighbor, float('inf')):
                distances[neighbor] = new_dist
                previous[neighbor] = current
                heapq.heappush(frontier, (new_dist, next(counter), neighbor))

    logger.debug(f"No path from {start} to {end}; {len(visited_order)} cells settled")
    return SolveResult(visited_order, [], settled)
