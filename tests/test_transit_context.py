import time

import pytest
import requests

from beerouting.exceptions import UpstreamError
from beerouting.models.route_segments import Borough, LineStatus
from beerouting.transit_context import (HttpTransitProvider, StaticTransitProvider, TransitContextProvider,
                                        build_transit_context, create_provider)


class SlowProvider(TransitContextProvider):
    name = 'slow'

    def get_line_status(self):
        time.sleep(0.5)
        return []

    def get_bus_routes(self, area):
        return []


class BrokenProvider(TransitContextProvider):
    name = 'broken'

    def get_line_status(self):
        raise RuntimeError('connection reset')

    def get_bus_routes(self, area):
        return []


class SuspendedSevenProvider(StaticTransitProvider):
    def get_line_status(self):
        return [LineStatus('7', 'suspended', 0, 'high', True)]


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f'{self.status} error')

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        return self.responses[url.rsplit('/', 1)[-1]]


def test_static_context(trip):
    _, _, _, context = trip('Flushing', 'Times Square')
    assert not context.degraded
    assert context.origin_subway_lines == ('7',)
    assert '7' in context.destination_subway_lines
    assert context.common_operating_lines() == ['7']
    assert context.is_cross_borough
    assert context.average_traffic == pytest.approx(1.4)
    assert context.average_topology == pytest.approx(0.1)


def test_area_without_listing_falls_back_to_borough(trip, reference):
    _, _, _, context = trip('Harlem', 'SoHo')
    assert context.origin_subway_lines == reference.subway_lines('Manhattan')
    assert not context.is_cross_borough


def test_explicit_no_service_is_kept(trip):
    _, _, _, context = trip('Bayside', 'Flushing')
    assert context.origin_subway_lines == ()
    assert not context.has_subway_at_both_ends


@pytest.mark.parametrize('provider', [SlowProvider(), BrokenProvider()])
def test_provider_failure_degrades(reference, resolver, provider):
    origin, destination = resolver.resolve('Flushing'), resolver.resolve('Times Square')
    context = build_transit_context(provider, reference, origin, destination, timeout=0.05)
    assert context.degraded
    assert context.line_statuses == {}
    assert context.origin_bus_routes == reference.bus_routes('Flushing')
    assert context.average_traffic == pytest.approx(1.4)


def test_suspended_line_is_not_common(reference, resolver):
    origin, destination = resolver.resolve('Flushing'), resolver.resolve('Times Square')
    context = build_transit_context(SuspendedSevenProvider(reference), reference, origin, destination)
    assert not context.is_operating('7')
    assert context.common_operating_lines() == []
    assert context.is_operating('Z')


def test_context_validates_ranges(trip):
    from dataclasses import replace
    _, _, _, context = trip('Flushing', 'Times Square')
    with pytest.raises(ValueError):
        replace(context, origin_traffic=0.9)
    with pytest.raises(ValueError):
        replace(context, destination_topology=1.5)


def test_context_to_dict(trip):
    _, _, _, context = trip('Staten Island', 'Manhattan')
    data = context.to_dict()
    assert data['traffic']['origin'] == 1.1
    assert data['traffic']['destination'] == 1.5
    assert data['traffic']['destinationLevel'] == 'high'
    assert data['topology']['average'] == pytest.approx(0.35)
    assert context.origin_borough == Borough.STATEN_ISLAND


def test_http_provider_parses_payloads():
    session = FakeSession({
        'line-status': FakeResponse([{'line': 'A', 'status': 'delayed', 'delay': 4,
                                      'crowdLevel': 'high', 'accessible': True}]),
        'bus-routes': FakeResponse(['M15', 'M101']),
    })
    provider = HttpTransitProvider('http://transit.local/', timeout=1.5, session=session)
    statuses = provider.get_line_status()
    assert statuses == [LineStatus('A', 'delayed', 4, 'high', True)]
    assert provider.get_bus_routes('Manhattan') == ['M15', 'M101']
    assert session.calls[0] == ('http://transit.local/line-status', None, 1.5)
    assert session.calls[1][1] == {'area': 'Manhattan'}


def test_http_provider_wraps_errors():
    session = FakeSession({'line-status': FakeResponse({}, status=503),
                           'bus-routes': FakeResponse({'routes': []})})
    provider = HttpTransitProvider('http://transit.local', session=session)
    with pytest.raises(UpstreamError):
        provider.get_line_status()
    with pytest.raises(UpstreamError):
        provider.get_bus_routes('Queens')


def test_create_provider(reference):
    assert isinstance(create_provider(reference), StaticTransitProvider)
    assert isinstance(create_provider(reference, 'http://transit.local'), HttpTransitProvider)


def test_area_conditions_take_precedence(trip):
    _, _, _, context = trip('Flushing', 'Times Square')
    assert context.origin_traffic == 1.2
    assert context.destination_traffic == 1.6
    assert context.origin_traffic_level == 'medium'
    assert context.destination_traffic_level == 'high'
    assert context.destination_topology == 0.1
    data = context.to_dict()
    assert data['traffic']['originLevel'] == 'medium'
    assert data['traffic']['destinationLevel'] == 'high'


def test_hung_providers_do_not_starve_later_calls(reference, resolver):
    origin, destination = resolver.resolve('Flushing'), resolver.resolve('Times Square')
    hung = SlowProvider()
    for _ in range(6):
        assert build_transit_context(hung, reference, origin, destination, timeout=0.05).degraded
    context = build_transit_context(StaticTransitProvider(reference), reference, origin, destination, timeout=0.5)
    assert not context.degraded
    assert context.line_statuses
