#!/usr/bin/env python3
"""
Presentation helpers: playback schedule for solver output and OpenCV rendering
of a grid snapshot. Pacing is owned here; the session only hands over the two
ordered sequences.
"""

import base64
from typing import Dict, List, Optional

import cv2
import numpy as np

from grid_model import Cell, Grid, MatchOptimal
from maze_config import MazeConfig
from path_solver import SolveResult

# BGR
COLORS = {
    'wall': (0, 0, 0),
    'open': (255, 255, 255),
    'start': (0, 255, 0),
    'end': (0, 0, 255),
    'touched': (219, 152, 52),
    'visited': (230, 216, 173),
    'both': (113, 204, 46),
    'user_only': (60, 76, 231),
    'optimal_only': (15, 196, 241),
}


def playback_schedule(result: SolveResult, config: Optional[MazeConfig] = None) -> List[Dict]:
    """Time-offset frames: every settled cell, then every path cell"""
    config = config or MazeConfig()
    frames = []
    offset = 0
    for row, col in result.visited_order:
        frames.append({'at_ms': offset, 'kind': 'visit', 'cell': [row, col]})
        offset += config.visit_delay_ms
    for row, col in result.path:
        frames.append({'at_ms': offset, 'kind': 'path', 'cell': [row, col]})
        offset += config.path_delay_ms
    return frames


def playback_duration_ms(result: SolveResult, config: Optional[MazeConfig] = None) -> int:
    config = config or MazeConfig()
    return (len(result.visited_order) * config.visit_delay_ms
            + len(result.path) * config.path_delay_ms)


def cell_color(cell: Cell, show_visited: bool = False):
    if cell.is_wall:
        return COLORS['wall']
    if cell.is_start:
        return COLORS['start']
    if cell.is_end:
        return COLORS['end']
    if cell.match_optimal is MatchOptimal.BOTH:
        return COLORS['both']
    if cell.match_optimal is MatchOptimal.USER_ONLY:
        return COLORS['user_only']
    if cell.match_optimal is MatchOptimal.OPTIMAL_ONLY:
        return COLORS['optimal_only']
    if cell.is_touched:
        return COLORS['touched']
    if show_visited and cell.is_visited:
        return COLORS['visited']
    return COLORS['open']


def render_grid(grid: Grid, cell_size: int = 20, show_visited: bool = False) -> np.ndarray:
    img = np.zeros((grid.rows * cell_size, grid.cols * cell_size, 3), dtype=np.uint8)

    for cell in grid:
        r, c = cell.row, cell.col
        cv2.rectangle(img, (c*cell_size, r*cell_size),
                      ((c+1)*cell_size - 1, (r+1)*cell_size - 1),
                      cell_color(cell, show_visited), -1)

    return img


def encode_png_data_uri(img: np.ndarray) -> str:
    ok, buffer = cv2.imencode('.png', img)
    if not ok:
        raise ValueError("PNG encoding failed")
    return f"data:image/png;base64,{base64.b64encode(buffer).decode()}"
