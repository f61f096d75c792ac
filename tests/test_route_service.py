import pytest

from beerouting.exceptions import InputError
from beerouting.models.route_segments import PreferenceProfile, Priority
from beerouting.core_route_service import RouteService
from beerouting.transit_context import TransitContextProvider


class BrokenProvider(TransitContextProvider):
    name = 'broken'

    def get_line_status(self):
        raise RuntimeError('service unavailable')

    def get_bus_routes(self, area):
        return []


def test_flushing_to_times_square_speed(service):
    result = service.find_routes('Flushing', 'Times Square', PreferenceProfile(priority=Priority.SPEED))
    routes = result['routes']
    assert 3 <= len(routes) <= 6
    top = routes[0]
    assert top['name'].endswith('(Fastest Route)')
    assert 'subway' in [seg['mode'] for seg in top['segments']]
    assert result['distance'] == pytest.approx(8.06, abs=0.01)
    assert result['fromCoords'] == [40.7654, -73.8318]
    assert result['fromArea'] == 'Flushing'
    assert result['subwayAvailable'] is True
    assert result['transferRequired'] is False
    assert result['degraded'] is False
    assert result['traffic']['average'] == pytest.approx(1.4)
    assert result['traffic']['destination'] == 1.6
    assert result['traffic']['destinationLevel'] == 'high'


def test_staten_island_to_manhattan(service):
    result = service.find_routes('Staten Island', 'Manhattan')
    ids = [route['id'] for route in result['routes']]
    assert 'bus' not in ids
    assert result['transferRequired'] is True
    labels = [seg['lineInfo'] for route in result['routes'] for seg in route['segments']]
    assert 'Staten Island Ferry' in labels or 'SIM1 Express Bus' in labels


def test_wheelchair_from_staten_island(service):
    preference = PreferenceProfile(wheelchair=True)
    result = service.find_routes('Staten Island', 'Manhattan', preference)
    assert len(result['routes']) == 1
    route = result['routes'][0]
    assert route['id'] == 'accessible'
    assert route['isWheelchairAccessible'] is True
    assert all(seg['wheelchairAccessible'] for seg in route['segments'])


def test_route_totals_are_consistent(service):
    result = service.find_routes('Harlem', 'Prospect Park')
    for route in result['routes']:
        assert route['duration'] == sum(seg['adjustedDuration'] for seg in route['segments'])
        assert route['cost'] == route['costBreakdown']['totalCost']
        assert route['numTransfers'] == len(route['segments']) - 1
        for seg in route['segments']:
            assert len(seg['path']['points']) >= 2


def test_eta_uses_injected_clock(service):
    result = service.find_routes('Grand Central', 'Times Square')
    route = result['routes'][0]
    assert route['eta'].endswith('AM')


def test_same_seed_gives_same_result(service):
    first = service.find_routes('123 Somewhere Rd', 'Nowhere Plaza')
    second = service.find_routes('123 Somewhere Rd', 'Nowhere Plaza')
    assert first == second


@pytest.mark.parametrize('origin, destination', [('', 'Times Square'), ('Flushing', '   '), (None, 'Harlem')])
def test_blank_input_is_rejected(service, origin, destination):
    with pytest.raises(InputError):
        service.find_routes(origin, destination)


def test_provider_failure_still_returns_routes():
    service = RouteService(provider=BrokenProvider(), seed=1)
    result = service.find_routes('Flushing', 'Times Square')
    assert result['degraded'] is True
    assert result['routes']
