from datetime import datetime

import numpy as np
import pytest

from beerouting.config import DEFAULT_DATA_DIR
from beerouting.core_route_service import RouteService
from beerouting.location_resolver import LocationResolver
from beerouting.reference_data import load_reference_data
from beerouting.transit_context import StaticTransitProvider, build_transit_context
from beerouting.utils.geo_utils import haversine_miles

FIXED_NOW = datetime(2024, 5, 1, 8, 30)


@pytest.fixture(scope='session')
def reference():
    return load_reference_data(DEFAULT_DATA_DIR)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def resolver(reference, rng):
    return LocationResolver(reference, rng)


@pytest.fixture
def trip(reference, resolver):
    """Resolve two names and build their static transit context"""
    def _trip(origin_name, destination_name):
        origin = resolver.resolve(origin_name)
        destination = resolver.resolve(destination_name)
        context = build_transit_context(StaticTransitProvider(reference), reference, origin, destination)
        distance = haversine_miles(origin.coordinate.lat, origin.coordinate.lon,
                                   destination.coordinate.lat, destination.coordinate.lon)
        return origin, destination, distance, context
    return _trip


@pytest.fixture(scope='session')
def service():
    return RouteService(data_dir=DEFAULT_DATA_DIR, seed=42, clock=lambda: FIXED_NOW)
