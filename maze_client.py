#!/usr/bin/env python3
"""
Client for the Maze Path Validator API
Drives a session over HTTP; run directly for a demo that traces the optimal
route by hand and then checks it against the solver.
"""

import argparse
import logging
import sys
from typing import Any, Dict, Iterable, List, Optional, Tuple

import requests

from grid_model import Grid
from path_solver import solve_shortest_path

logger = logging.getLogger(__name__)


class MazeClient:
    def __init__(self, base_url: str = "http://127.0.0.1:8080", session: Optional[requests.Session] = None,
                 timeout: float = 10.0):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, path: str, **params) -> Dict[str, Any]:
        response = self.session.get(f"{self.base_url}{path}", params=params or None, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def _post(self, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = self.session.post(f"{self.base_url}{path}", json=payload or {}, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def state(self) -> Dict[str, Any]:
        return self._get('/api/maze')['state']

    def image(self, show_visited: bool = False) -> str:
        return self._get('/api/maze/image', show_visited='true' if show_visited else 'false')['image']

    def event(self, event_type: str, row: Optional[int] = None, col: Optional[int] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {'type': event_type}
        if row is not None:
            payload.update(row=row, col=col)
        return self._post('/api/maze/event', payload)

    def click(self, row: int, col: int) -> bool:
        return self.event('click', row, col)['accepted']

    def draw(self, cells: Iterable[Tuple[int, int]]) -> int:
        """Drag through cells; returns how many were accepted"""
        cells = list(cells)
        if not cells:
            return 0
        accepted = int(self.event('pointer_down', *cells[0])['accepted'])
        for row, col in cells[1:]:
            accepted += int(self.event('pointer_enter', row, col)['accepted'])
        self.event('pointer_up')
        return accepted

    def command(self, name: str) -> Dict[str, Any]:
        return self._post(f'/api/maze/{name}')

    def new_maze(self) -> Dict[str, Any]:
        return self.command('new')

    def clear(self) -> Dict[str, Any]:
        return self.command('clear')

    def select_default_endpoints(self) -> bool:
        return self.command('default-endpoints')['accepted']

    def check_path(self) -> Dict[str, Any]:
        return self.command('check')

    def show_optimal_path(self) -> Dict[str, Any]:
        return self.command('optimal')

    def complete_presentation(self) -> Dict[str, Any]:
        return self.command('presentation-complete')


def grid_from_state(state: Dict[str, Any]) -> Grid:
    cells = state['grid']['cells']
    return Grid.from_walls([[cell['is_wall'] for cell in row] for row in cells])


def trace_route(state: Dict[str, Any]) -> List[Tuple[int, int]]:
    """Shortest route between the selected endpoints, endpoints excluded"""
    if not state['start'] or not state['end']:
        return []
    result = solve_shortest_path(grid_from_state(state), tuple(state['start']), tuple(state['end']))
    return result.path[1:-1]


def run_demo(client: MazeClient) -> Dict[str, Any]:
    client.state()
    client.new_maze()
    if not client.select_default_endpoints():
        raise RuntimeError("Could not select default endpoints")

    route = trace_route(client.state())
    drawn = client.draw(route)
    logger.info(f"Drew {drawn}/{len(route)} cells")

    response = client.check_path()
    client.complete_presentation()
    return response['outcome']['statistics'] if response.get('accepted') else {}


def main(argv=None):
    parser = argparse.ArgumentParser(description="Maze Path Validator demo client")
    parser.add_argument('--url', default="http://127.0.0.1:8080")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    try:
        stats = run_demo(MazeClient(args.url))
    except requests.exceptions.ConnectionError:
        logger.error(f"Server not running at {args.url}")
        return 1

    logger.info(f"Statistics: {stats}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
