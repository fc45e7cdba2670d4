#!/usr/bin/env python3
"""
Tests for the Maze Path Validator HTTP API
"""
import pytest

from maze_config import MazeConfig
from maze_server import create_app


@pytest.fixture
def app():
    app = create_app(MazeConfig(rows=11, cols=11, seed=7, visit_delay_ms=5, path_delay_ms=20))
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def start_session(client):
    response = client.get('/api/maze')
    assert response.status_code == 200
    return response.get_json()


def test_index_describes_service(client):
    data = client.get('/').get_json()
    assert data['service'] == 'maze-path-validator'
    assert data['config']['rows'] == 11
    assert 'secret_key' not in data['config']


def test_state_creates_session(client):
    data = start_session(client)

    assert data['session_id']
    state = data['state']
    assert state['phase'] == 'selecting-start'
    assert state['busy'] is False
    assert state['grid']['rows'] == 11
    assert state['grid']['cols'] == 11

    again = client.get('/api/maze').get_json()
    assert again['session_id'] == data['session_id']


def test_event_without_session_is_404(client):
    response = client.post('/api/maze/event', json={'type': 'click', 'row': 1, 'col': 1})
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Session not found'


def test_click_selects_endpoints(client):
    start_session(client)

    data = client.post('/api/maze/event', json={'type': 'click', 'row': 1, 'col': 1}).get_json()
    assert data['accepted'] is True
    assert data['phase'] == 'selecting-end'
    assert data['start'] == [1, 1]

    wall = client.post('/api/maze/event', json={'type': 'click', 'row': 0, 'col': 0}).get_json()
    assert wall['accepted'] is False
    assert wall['phase'] == 'selecting-end'


def test_invalid_events(client):
    start_session(client)

    assert client.post('/api/maze/event', json={'type': 'teleport'}).status_code == 400
    assert client.post('/api/maze/event', json={'type': 'click', 'row': 'x'}).status_code == 400
    assert client.post('/api/maze/event', data='not json').status_code == 400


def test_check_without_endpoints_is_not_accepted(client):
    start_session(client)
    data = client.post('/api/maze/check').get_json()

    assert data['accepted'] is False
    assert data['state']['busy'] is False


def test_check_path_flow(client):
    start_session(client)
    assert client.post('/api/maze/default-endpoints').get_json()['accepted'] is True

    state = client.get('/api/maze').get_json()['state']
    assert state['phase'] == 'ready'
    assert state['end'] == [9, 9]

    data = client.post('/api/maze/check').get_json()
    assert data['accepted'] is True
    outcome = data['outcome']
    assert outcome['mode'] == 'check-path'
    assert outcome['path'][0] == [1, 1]
    assert outcome['path'][-1] == [9, 9]
    assert outcome['statistics']['optimal_steps'] == len(outcome['path']) - 2
    assert outcome['statistics']['user_steps'] == 0

    playback = data['playback']
    assert len(playback) == len(outcome['visited_order']) + len(outcome['path'])
    assert playback[0] == {'at_ms': 0, 'kind': 'visit', 'cell': [1, 1]}
    assert [f['at_ms'] for f in playback] == sorted(f['at_ms'] for f in playback)
    assert data['playback_duration_ms'] == 5 * len(outcome['visited_order']) + 20 * len(outcome['path'])
    assert data['state']['busy'] is True


def test_busy_session_rejects_commands(client):
    start_session(client)
    client.post('/api/maze/default-endpoints')
    client.post('/api/maze/optimal')

    response = client.post('/api/maze/new')
    assert response.status_code == 409
    assert response.get_json()['details']['command'] == 'new'
    assert client.post('/api/maze/clear').status_code == 409

    done = client.post('/api/maze/presentation-complete').get_json()
    assert done['accepted'] is True
    assert done['state']['busy'] is False

    cleared = client.post('/api/maze/clear').get_json()
    assert cleared['accepted'] is True
    assert cleared['state']['phase'] == 'selecting-start'


def test_drag_records_user_path(client):
    start_session(client)
    client.post('/api/maze/default-endpoints')
    state = client.get('/api/maze').get_json()['state']
    cells = state['grid']['cells']
    first = next([r, c] for r, c in ([1, 2], [2, 1]) if not cells[r][c]['is_wall'])

    data = client.post('/api/maze/event', json={'type': 'pointer_down', 'row': first[0], 'col': first[1]}).get_json()
    assert data['accepted'] is True
    assert data['user_path'] == [first]

    client.post('/api/maze/event', json={'type': 'pointer_up'})
    far = client.post('/api/maze/event', json={'type': 'pointer_enter', 'row': 5, 'col': 5}).get_json()
    assert far['accepted'] is False


def test_unknown_command(client):
    start_session(client)
    response = client.post('/api/maze/explode')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Unknown command'


def test_image_is_png_data_uri(client):
    start_session(client)
    data = client.get('/api/maze/image?show_visited=true').get_json()
    assert data['image'].startswith('data:image/png;base64,')


def test_admin_endpoints(client):
    start_session(client)
    client.post('/api/maze/default-endpoints')
    client.post('/api/maze/check')

    metrics = client.get('/admin/metrics').get_json()
    assert metrics['maze_generation']['count'] >= 1
    assert metrics['path_solve']['count'] >= 1

    health = client.get('/admin/health').get_json()
    assert health['overall_status'] == 'healthy'
    assert health['issues'] == []
    assert health['sessions']['active_sessions'] == 1
    assert health['sessions']['busy_sessions'] == 1


def test_unknown_route_is_json_404(client):
    response = client.get('/nowhere')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Not Found'
