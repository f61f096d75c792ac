import pytest

from app import create_app
from beerouting import routing_api
from beerouting.exceptions import NoCandidateError


class ExplodingService:
    def __init__(self, error):
        self.error = error
        self.provider = type('Provider', (), {'name': 'stub'})()

    def find_routes(self, origin, destination, preference=None):
        raise self.error


@pytest.fixture
def client(service, monkeypatch):
    monkeypatch.setattr(routing_api, 'route_service', service)
    return create_app().test_client()


def test_health(client):
    response = client.get('/api/health')
    assert response.status_code == 200
    body = response.get_json()
    assert body['status'] == 'healthy'
    assert body['provider'] == 'static'


def test_routes(client):
    response = client.get('/api/routes', query_string={'from': 'Flushing', 'to': 'Times Square',
                                                       'priority': 'speed', 'bags': '1'})
    assert response.status_code == 200
    body = response.get_json()
    assert body['routes'][0]['name'].endswith('(Fastest Route)')
    assert body['fromArea'] == 'Flushing'


def test_wheelchair_flag(client):
    response = client.get('/api/routes', query_string={'from': 'Staten Island', 'to': 'Manhattan',
                                                       'wheelchair': 'true'})
    assert response.status_code == 200
    assert [r['id'] for r in response.get_json()['routes']] == ['accessible']


@pytest.mark.parametrize('params', [
    {'to': 'Times Square'},
    {'from': 'Flushing'},
    {'from': ' ', 'to': 'Times Square'},
])
def test_missing_places(client, params):
    response = client.get('/api/routes', query_string=params)
    assert response.status_code == 400
    assert response.get_json() == {'error': 'Origin and destination are required'}


@pytest.mark.parametrize('params', [
    {'priority': 'fastest'},
    {'noise': 'loud'},
    {'bags': '-2'},
    {'bags': 'two'},
    {'wheelchair': 'maybe'},
])
def test_invalid_preferences(client, params):
    query = {'from': 'Flushing', 'to': 'Times Square'}
    query.update(params)
    response = client.get('/api/routes', query_string=query)
    assert response.status_code == 400
    assert 'Invalid' in response.get_json()['error']


def test_no_candidates_maps_to_404(monkeypatch):
    monkeypatch.setattr(routing_api, 'route_service', ExplodingService(NoCandidateError('nothing left')))
    response = create_app().test_client().get('/api/routes', query_string={'from': 'A', 'to': 'B'})
    assert response.status_code == 404
    assert response.get_json() == {'error': 'No routes match the requested constraints'}


def test_unexpected_errors_map_to_500(monkeypatch):
    monkeypatch.setattr(routing_api, 'route_service', ExplodingService(RuntimeError('boom')))
    response = create_app().test_client().get('/api/routes', query_string={'from': 'A', 'to': 'B'})
    assert response.status_code == 500
    assert response.get_json() == {'error': 'Error calculating routes'}
    assert 'boom' not in response.get_data(as_text=True)


def test_clean_nan_values():
    assert routing_api.clean_nan_values({'a': [float('nan'), 1.5], 'b': float('inf')}) == {'a': [None, 1.5],
                                                                                        'b': None}
