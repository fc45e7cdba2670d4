#!/usr/bin/env python3
"""
Configuration for the Maze Path Validator
Grid dimensions, braiding trials, animation delays and server settings
"""

import os
import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

MIN_DIMENSION = 5


@dataclass
class MazeConfig:
    """Tunables passed explicitly into the generator, session and server"""
    rows: int = 21
    cols: int = 31
    braid_trials: int = 30
    seed: Optional[int] = None
    # Playback pacing, read only by the presentation layer
    visit_delay_ms: int = 10
    path_delay_ms: int = 40
    cell_size: int = 20
    log_dir: Optional[str] = None
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8080
    secret_key: str = "maze_path_validator"
    debug: bool = False

    def __post_init__(self):
        if self.rows < MIN_DIMENSION or self.cols < MIN_DIMENSION:
            raise ValueError(
                f"Grid must be at least {MIN_DIMENSION}x{MIN_DIMENSION}, got {self.rows}x{self.cols}"
            )
        if self.braid_trials < 0:
            raise ValueError(f"braid_trials must be >= 0, got {self.braid_trials}")
        if self.visit_delay_ms < 0 or self.path_delay_ms < 0:
            raise ValueError("Animation delays must be >= 0")
        if self.cell_size < 1:
            raise ValueError(f"cell_size must be >= 1, got {self.cell_size}")
        if self.rows % 2 == 0 or self.cols % 2 == 0:
            logger.warning(
                f"Even grid dimensions {self.rows}x{self.cols}: carving will not reach every interior cell"
            )

    @property
    def designated_start(self):
        return (1, 1)

    @property
    def designated_end(self):
        return (self.rows - 2, self.cols - 2)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop('secret_key')
        return data

    @classmethod
    def from_env(cls, environ=None) -> "MazeConfig":
        """Build a config from MAZE_* environment variables"""
        env = os.environ if environ is None else environ
        defaults = cls()

        def _int(name, default):
            value = env.get(name)
            if value is None or value == '':
                return default
            try:
                return int(value)
            except ValueError:
                raise ValueError(f"{name} must be an integer, got {value!r}")

        return cls(
            rows=_int('MAZE_ROWS', defaults.rows),
            cols=_int('MAZE_COLS', defaults.cols),
            braid_trials=_int('MAZE_BRAID_TRIALS', defaults.braid_trials),
            seed=_int('MAZE_SEED', defaults.seed),
            visit_delay_ms=_int('MAZE_VISIT_DELAY_MS', defaults.visit_delay_ms),
            path_delay_ms=_int('MAZE_PATH_DELAY_MS', defaults.path_delay_ms),
            cell_size=_int('MAZE_CELL_SIZE', defaults.cell_size),
            log_dir=env.get('MAZE_LOG_DIR') or None,
            log_level=env.get('MAZE_LOG_LEVEL', defaults.log_level),
            host=env.get('MAZE_HOST', defaults.host),
            port=_int('MAZE_PORT', defaults.port),
            secret_key=env.get('MAZE_SECRET_KEY', defaults.secret_key),
            debug=env.get('FLASK_ENV', 'production') == 'development',
        )
