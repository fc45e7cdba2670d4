#!/usr/bin/env python3
"""
Maze Path Validator HTTP API
Exposes the interactive session (cell events, commands, snapshots) as JSON
endpoints for a browser front end.
"""

import hashlib
import logging
import random
import threading
import time
from datetime import timedelta
from typing import Dict, Optional, Tuple

from flask import Flask, jsonify, request, session

from error_handling import (
    InvalidRequestError,
    SessionBusyError,
    SessionNotFoundError,
    UnknownCommandError,
    setup_error_handling,
)
from maze_config import MazeConfig
from maze_renderer import encode_png_data_uri, playback_duration_ms, playback_schedule, render_grid
from maze_session import MazeSession
from monitoring import maze_logger, setup_monitoring

logger = logging.getLogger(__name__)

SESSION_KEY = 'maze_session_id'
CELL_EVENTS = ('click', 'pointer_down', 'pointer_enter')


class SessionStore:
    """In-memory registry of live sessions, one per browser session cookie"""

    def __init__(self, config: MazeConfig, max_idle: timedelta = timedelta(minutes=30)):
        self.config = config
        self.max_idle = max_idle
        self.sessions: Dict[str, Tuple[MazeSession, threading.Lock]] = {}
        self.last_seen: Dict[str, float] = {}
        self.lock = threading.Lock()

    def create(self) -> str:
        session_id = hashlib.sha256(f"{time.time()}{random.random()}".encode()).hexdigest()[:16]
        maze_session = MazeSession(self.config, random.Random(self.config.seed))
        with self.lock:
            self.prune()
            self.sessions[session_id] = (maze_session, threading.Lock())
            self.last_seen[session_id] = time.time()
        maze_logger.log_session_event('session_created', {
            'rows': self.config.rows, 'cols': self.config.cols
        }, session_id)
        return session_id

    def get(self, session_id: Optional[str]) -> Tuple[MazeSession, threading.Lock]:
        with self.lock:
            if not session_id or session_id not in self.sessions:
                raise SessionNotFoundError("No active maze session; GET /api/maze first")
            self.last_seen[session_id] = time.time()
            return self.sessions[session_id]

    def prune(self):
        """Drop idle sessions; caller holds the lock"""
        cutoff = time.time() - self.max_idle.total_seconds()
        for session_id in [sid for sid, seen in self.last_seen.items() if seen < cutoff]:
            self.sessions.pop(session_id, None)
            self.last_seen.pop(session_id, None)

    def stats(self):
        with self.lock:
            return {
                'active_sessions': len(self.sessions),
                'busy_sessions': sum(1 for s, _ in self.sessions.values() if s.busy),
            }


def _cell_from_payload(data) -> Tuple[int, int]:
    try:
        return int(data['row']), int(data['col'])
    except (KeyError, TypeError, ValueError):
        raise InvalidRequestError("Cell events require integer 'row' and 'col'")


def _solve_response(maze_session: MazeSession, outcome, config: MazeConfig):
    if outcome is None:
        return jsonify({
            'accepted': False,
            'message': 'Select a start and an end cell first',
            'state': maze_session.snapshot(),
        })
    return jsonify({
        'accepted': True,
        'outcome': outcome.to_dict(),
        'playback': playback_schedule(outcome.result, config),
        'playback_duration_ms': playback_duration_ms(outcome.result, config),
        'state': maze_session.snapshot(),
    })


def create_app(config: Optional[MazeConfig] = None) -> Flask:
    config = config or MazeConfig.from_env()

    if not maze_logger.configured:
        maze_logger.setup_logging(config.log_dir, config.log_level)

    app = Flask(__name__, static_folder=None)
    app.secret_key = config.secret_key
    app.config.update(
        MAZE_CONFIG=config,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE='Lax',
        PERMANENT_SESSION_LIFETIME=timedelta(minutes=30),
    )

    store = SessionStore(config)
    app.extensions['maze_sessions'] = store

    setup_error_handling(app, maze_logger)
    setup_monitoring(app, store)

    def current_session():
        return store.get(session.get(SESSION_KEY))

    @app.route('/')
    def index():
        return jsonify({
            'service': 'maze-path-validator',
            'config': config.to_dict(),
            'endpoints': {
                'state': 'GET /api/maze',
                'event': 'POST /api/maze/event',
                'commands': 'POST /api/maze/<new|clear|default-endpoints|check|optimal|presentation-complete>',
                'image': 'GET /api/maze/image',
            }
        })

    @app.route('/api/maze', methods=['GET'])
    def get_state():
        session_id = session.get(SESSION_KEY)
        try:
            maze_session, lock = store.get(session_id)
        except SessionNotFoundError:
            session_id = store.create()
            session[SESSION_KEY] = session_id
            session.permanent = True
            maze_session, lock = store.get(session_id)

        with lock:
            return jsonify({'session_id': session_id, 'state': maze_session.snapshot()})

    @app.route('/api/maze/event', methods=['POST'])
    def post_event():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise InvalidRequestError("Expected a JSON object body")
        event_type = data.get('type')

        maze_session, lock = current_session()
        with lock:
            if event_type == 'pointer_up':
                maze_session.pointer_up()
                accepted = True
            elif event_type in CELL_EVENTS:
                row, col = _cell_from_payload(data)
                accepted = getattr(maze_session, event_type)(row, col)
            else:
                raise InvalidRequestError(f"Unknown event type {event_type!r}",
                                          details={'allowed': list(CELL_EVENTS) + ['pointer_up']})

            return jsonify({
                'accepted': accepted,
                'phase': maze_session.phase.value,
                'user_path': [list(c) for c in maze_session.user_path],
                'start': list(maze_session.start) if maze_session.start else None,
                'end': list(maze_session.end) if maze_session.end else None,
            })

    @app.route('/api/maze/<command>', methods=['POST'])
    def post_command(command):
        maze_session, lock = current_session()
        session_id = session.get(SESSION_KEY)

        with lock:
            if command == 'presentation-complete':
                was_busy = maze_session.complete_presentation()
                return jsonify({'accepted': was_busy, 'state': maze_session.snapshot()})

            if command not in ('new', 'clear', 'default-endpoints', 'check', 'optimal'):
                raise UnknownCommandError(f"Unknown command {command!r}")

            if maze_session.busy:
                raise SessionBusyError("A solve presentation is still in progress",
                                       details={'command': command})

            if command == 'new':
                accepted = maze_session.new_maze()
            elif command == 'clear':
                accepted = maze_session.clear_selections()
            elif command == 'default-endpoints':
                accepted = maze_session.select_default_endpoints()
            else:
                outcome = (maze_session.check_path() if command == 'check'
                           else maze_session.show_optimal_path())
                if outcome is not None:
                    maze_logger.log_session_event(command, outcome.statistics.to_dict(), session_id)
                return _solve_response(maze_session, outcome, config)

            return jsonify({'accepted': accepted, 'state': maze_session.snapshot()})

    @app.route('/api/maze/image', methods=['GET'])
    def get_image():
        maze_session, lock = current_session()
        show_visited = request.args.get('show_visited', 'false').lower() in ('1', 'true', 'yes')
        with lock:
            img = render_grid(maze_session.grid, config.cell_size, show_visited)
        return jsonify({'image': encode_png_data_uri(img)})

    return app


if __name__ == '__main__':
    config = MazeConfig.from_env()
    app = create_app(config)
    logger.info(f"Starting Maze Path Validator on http://{config.host}:{config.port}")
    app.run(host=config.host, port=config.port, debug=config.debug)
