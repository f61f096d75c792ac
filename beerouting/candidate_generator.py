"""
Route Candidate Generator.

Builds unscored itinerary skeletons for a trip from the resolved endpoints and
the per-request TransitContext. Every per-mode duration and fare estimate is a
non-decreasing function of the trip distance (miles).
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .models.route_segments import (Candidate, ComfortTier, Coordinate, CycleSegment, Location, Mode,
                                    PreferenceProfile, RideSegment, TransitSegment, WalkSegment)
from .modes import mode_spec
from .reference_data import ExpressService, ReferenceData
from .transit_context import TransitContext
from .utils.fare_utils import (LOCAL_BUS_FARE, MIXED_LAST_MILE_FARE, SUBWAY_FARE,
                               calculate_fare)
from .utils.geo_utils import closest_point_index, haversine_distance

logger = logging.getLogger(__name__)

# Minutes per mile
WALK_PACE = 20
SUBWAY_DIRECT_PACE = 8
SUBWAY_TRANSFER_LEG_PACE = 4
SUBWAY_MIXED_PACE = 7
BUS_LOCAL_PACE = 12
BUS_EXPRESS_PACE = 10
BUS_ECONOMY_PACE = 14
FERRY_PACE = 9
EBIKE_PACE = 12
BIKE_PACE = 15
UBER_PACE = 10
TAXI_PACE = 9
SHARED_PACE = 12
PREMIUM_PACE = 7

# Fixed access legs, minutes
SUBWAY_ACCESS_WALK = (5, 7)
BUS_ACCESS_WALK = (7, 8)
RIDE_ACCESS_WALK = (3, 4)
TAXI_ACCESS_WALK = 4
BIKE_ACCESS_WALK = (5, 5)
SHARED_ACCESS_WALK = (5, 5)
FERRY_ACCESS_WALK = (15, 15)
ECONOMY_ACCESS_WALK = (10, 10)
PREMIUM_ACCESS_WALK = 3
ACCESSIBLE_ACCESS_WALK = 5
BUS_TO_SUBWAY_MINUTES = 10
LAST_MILE_RIDE_MINUTES = 8

BIKE_MAX_MILES = 10.0
LONG_TRIP_MILES = 8.0
SHORT_WALK_MILES = 1.0
BIKE_FIRST_LEG_SHARE = 0.2
MIN_CANDIDATES = 3

# A curated line point further than this from the endpoint is not a usable station
STATION_SNAP_KM = 0.8

ACCESSIBLE_WALK_MAX_MINUTES = 15
ACCESSIBLE_TOPOLOGY_MAX = 0.3

LINE_NICKNAMES = {
    '7': 'Flushing Line',
    '1': 'Broadway-Seventh Avenue Local',
    'A': 'Eighth Avenue Express',
    'L': 'Canarsie Line',
}


def _minutes(distance: float, pace: float, extra: int = 0) -> int:
    return max(1, int(round(distance * pace)) + extra)


def _lerp(a: Coordinate, b: Coordinate, t: float) -> Coordinate:
    return Coordinate(a.lat + (b.lat - a.lat) * t, a.lon + (b.lon - a.lon) * t)


class RouteCandidateGenerator:
    """Enumerate distinct travel strategies for one trip"""

    def __init__(self, reference: ReferenceData, rng: np.random.Generator):
        self.reference = reference
        self.rng = rng

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def generate(self, origin: Location, destination: Location, distance: float,
                 context: TransitContext, preference: PreferenceProfile) -> List[Candidate]:
        trip = _Trip(self.reference, origin, destination, distance, context)
        candidates: List[Candidate] = [self._walk(trip)]

        if distance < BIKE_MAX_MILES:
            candidates.append(self._cycle(trip, Mode.EBIKE))
            candidates.append(self._cycle(trip, Mode.BIKE))

        subway = self._subway(trip)
        if subway is not None:
            candidates.append(subway)

        candidates.extend(self._bus_options(trip))

        candidates.append(self._rideshare(trip))
        candidates.append(self._taxi(trip))
        candidates.append(self._shared(trip))

        if distance > LONG_TRIP_MILES:
            candidates.append(self._mixed_last_mile(trip))
            if distance < BIKE_MAX_MILES and context.has_subway_at_both_ends:
                bike_subway = self._bike_subway(trip)
                if bike_subway is not None:
                    candidates.append(bike_subway)

        if len(candidates) < MIN_CANDIDATES:
            candidates.extend(self.backstop_candidates(origin, destination, distance, context))

        if preference.wheelchair and not any(c.is_wheelchair_accessible for c in candidates):
            logger.info("No fully accessible candidate generated; adding dedicated accessible route")
            candidates.append(self.accessible_candidate(origin, destination, distance, context))

        logger.debug(f"Generated {len(candidates)} candidates for {origin.name!r} -> "
                     f"{destination.name!r} ({distance:.2f} mi)")
        return candidates

    def backstop_candidates(self, origin: Location, destination: Location, distance: float,
                            context: TransitContext) -> List[Candidate]:
        """Generic economy (slow, cheap) and premium (fast, expensive) options"""
        trip = _Trip(self.reference, origin, destination, distance, context)
        return [self._economy(trip), self._premium(trip)]

    def accessible_candidate(self, origin: Location, destination: Location, distance: float,
                             context: TransitContext) -> Candidate:
        """Walk to an accessible taxi pickup, then ride to the destination"""
        trip = _Trip(self.reference, origin, destination, distance, context)
        pickup = trip.waypoint('Accessible Pickup near', origin)
        segments = [
            WalkSegment(origin, pickup, ACCESSIBLE_ACCESS_WALK, 0.0,
                        label='Walk to accessible pickup', accessible=True, crowd_level='low'),
            RideSegment(pickup, destination, _minutes(distance, TAXI_PACE),
                        calculate_fare('taxi', distance), mode=Mode.TAXI,
                        label='Wheelchair Accessible Taxi', accessible=True, crowd_level='low'),
        ]
        return Candidate('accessible', 'Wheelchair Accessible Route', segments, ComfortTier.HIGH,
                         kind='accessible')

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def _walk(self, trip: '_Trip') -> Candidate:
        duration = _minutes(trip.distance, WALK_PACE)
        segment = WalkSegment(
            trip.origin, trip.destination, duration, 0.0,
            label='Walk to destination',
            accessible=trip.walk_accessible(duration, max(trip.context.origin_topology,
                                                          trip.context.destination_topology)),
            crowd_level='low',
        )
        if trip.distance < SHORT_WALK_MILES:
            comfort = ComfortTier.HIGH
        elif trip.distance < 2 * SHORT_WALK_MILES:
            comfort = ComfortTier.MEDIUM
        else:
            comfort = ComfortTier.LOW
        return Candidate('walk', 'Walking Route', [segment], comfort, kind='walk')

    def _cycle(self, trip: '_Trip', mode: Mode) -> Candidate:
        ebike = mode == Mode.EBIKE
        dock_a = trip.waypoint('Bike Dock near', trip.origin)
        dock_b = trip.waypoint('Bike Dock near', trip.destination)
        segments = [
            trip.walk_leg(trip.origin, dock_a, BIKE_ACCESS_WALK[0], 'Walk to bike dock', at_origin=True),
            CycleSegment(dock_a, dock_b, _minutes(trip.distance, EBIKE_PACE if ebike else BIKE_PACE),
                         calculate_fare(mode.value, trip.distance), mode=mode,
                         label='Citi Bike E-Bike' if ebike else 'Citi Bike Classic',
                         accessible=mode_spec(mode).accessible, crowd_level='low'),
            trip.walk_leg(dock_b, trip.destination, BIKE_ACCESS_WALK[1], 'Walk to destination', at_origin=False),
        ]
        if ebike:
            return Candidate('ebike', 'E-Bike Route', segments, ComfortTier.MEDIUM, kind='ebike')
        return Candidate('citibike', 'Citi Bike Route', segments, ComfortTier.MEDIUM, kind='bike')

    def _subway(self, trip: '_Trip') -> Optional[Candidate]:
        context = trip.context
        common = context.common_operating_lines()
        if common:
            line = common[0]
            station_a = trip.station(line, trip.origin)
            station_b = trip.station(line, trip.destination)
            segments = [
                trip.walk_leg(trip.origin, station_a, SUBWAY_ACCESS_WALK[0], 'Walk to station', at_origin=True),
                trip.subway_leg(line, station_a, station_b, _minutes(trip.distance, SUBWAY_DIRECT_PACE), SUBWAY_FARE),
                trip.walk_leg(station_b, trip.destination, SUBWAY_ACCESS_WALK[1], 'Walk to destination',
                              at_origin=False),
            ]
            comfort = ComfortTier.MEDIUM if trip.distance < LONG_TRIP_MILES else ComfortTier.LOW
            return Candidate('subway-direct', f'{line} Train Direct', segments, comfort, kind='subway')

        if not context.has_subway_at_both_ends:
            return None

        lines = trip.transfer_lines()
        if lines is None:
            logger.debug("No operating subway line at one end; skipping subway options")
            return None
        line_a, line_b = lines
        station_a = trip.station(line_a, trip.origin)
        station_b = trip.station(line_b, trip.destination)
        transfer = trip.transfer_station(line_a, line_b)
        leg_minutes = _minutes(trip.distance, SUBWAY_TRANSFER_LEG_PACE)
        segments = [
            trip.walk_leg(trip.origin, station_a, SUBWAY_ACCESS_WALK[0], 'Walk to station', at_origin=True),
            trip.subway_leg(line_a, station_a, transfer, leg_minutes, SUBWAY_FARE),
            # Transfers within the system are free
            trip.subway_leg(line_b, transfer, station_b, leg_minutes, 0.0),
            trip.walk_leg(station_b, trip.destination, SUBWAY_ACCESS_WALK[1], 'Walk to destination',
                          at_origin=False),
        ]
        return Candidate('subway-transfer', f'{line_a} to {line_b} Subway Transfer', segments,
                         ComfortTier.LOW if trip.distance >= LONG_TRIP_MILES else ComfortTier.MEDIUM,
                         kind='subway')

    def _bus_options(self, trip: '_Trip') -> List[Candidate]:
        context = trip.context
        if not context.is_cross_borough:
            return [self._local_bus(trip)]

        express = self.reference.express_between(context.origin_borough, context.destination_borough, 'bus')
        ferries = self.reference.express_between(context.origin_borough, context.destination_borough, 'ferry')
        options = []
        if express:
            options.append(self._express_bus(trip, express[0]))
        if ferries:
            options.append(self._ferry(trip, ferries[0]))
        if options:
            return options

        if context.has_subway_at_both_ends:
            return [self._bus_to_subway(trip)]
        logger.debug("Cross-borough trip without express, ferry or subway; keeping local bus")
        return [self._local_bus(trip)]

    def _local_bus(self, trip: '_Trip') -> Candidate:
        route = trip.bus_route(self.rng)
        stop_a = trip.waypoint(f'{route} Stop near', trip.origin)
        stop_b = trip.waypoint(f'{route} Stop near', trip.destination)
        segments = [
            trip.walk_leg(trip.origin, stop_a, BUS_ACCESS_WALK[0], 'Walk to bus stop', at_origin=True),
            trip.bus_leg(route, f'{route} Bus', stop_a, stop_b, _minutes(trip.distance, BUS_LOCAL_PACE),
                         calculate_fare('bus', trip.distance)),
            trip.walk_leg(stop_b, trip.destination, BUS_ACCESS_WALK[1], 'Walk to destination', at_origin=False),
        ]
        return Candidate('bus', f'{route} Bus Route', segments, ComfortTier.LOW, kind='bus')

    def _express_bus(self, trip: '_Trip', service: ExpressService) -> Candidate:
        stop_a = trip.waypoint(f'{service.route_id} Stop near', trip.origin)
        stop_b = trip.waypoint(f'{service.route_id} Stop near', trip.destination)
        segments = [
            trip.walk_leg(trip.origin, stop_a, BUS_ACCESS_WALK[0], 'Walk to express bus stop', at_origin=True),
            trip.bus_leg(service.route_id, f'{service.route_id} Express Bus', stop_a, stop_b,
                         _minutes(trip.distance, BUS_EXPRESS_PACE),
                         calculate_fare('bus', trip.distance, service.service)),
            trip.walk_leg(stop_b, trip.destination, BUS_ACCESS_WALK[1], 'Walk to destination', at_origin=False),
        ]
        return Candidate('express-bus', 'Express Bus Route', segments, ComfortTier.MEDIUM, kind='express_bus')

    def _ferry(self, trip: '_Trip', service: ExpressService) -> Candidate:
        pier_a = trip.waypoint(f'{service.label} Terminal near', trip.origin)
        pier_b = trip.waypoint(f'{service.label} Terminal near', trip.destination)
        segments = [
            trip.walk_leg(trip.origin, pier_a, FERRY_ACCESS_WALK[0], 'Walk to ferry terminal', at_origin=True),
            TransitSegment(pier_a, pier_b, _minutes(trip.distance, FERRY_PACE),
                           calculate_fare('ferry', trip.distance, service.service), mode=Mode.FERRY,
                           label=service.label, accessible=mode_spec(Mode.FERRY).accessible,
                           crowd_level='medium', line_id=service.route_id),
            trip.walk_leg(pier_b, trip.destination, FERRY_ACCESS_WALK[1], 'Walk to destination', at_origin=False),
        ]
        return Candidate('ferry', 'Ferry Route', segments, ComfortTier.HIGH, kind='ferry')

    def _bus_to_subway(self, trip: '_Trip') -> Candidate:
        context = trip.context
        route = trip.bus_route(self.rng)
        line = trip.first_operating(context.origin_subway_lines)
        if line is None:
            return self._local_bus(trip)
        stop_a = trip.waypoint(f'{route} Stop near', trip.origin)
        station_a = trip.station(line, trip.origin, name=f'{context.origin_borough.value} Subway Station')
        station_b = trip.station(line, trip.destination, name=f'{context.destination_borough.value} Subway Station')
        segments = [
            trip.walk_leg(trip.origin, stop_a, BUS_ACCESS_WALK[0], 'Walk to bus stop', at_origin=True),
            trip.bus_leg(route, f'{route} Bus to subway', stop_a, station_a, BUS_TO_SUBWAY_MINUTES, LOCAL_BUS_FARE),
            trip.subway_leg(line, station_a, station_b, _minutes(trip.distance, SUBWAY_MIXED_PACE), 0.0),
            trip.walk_leg(station_b, trip.destination, BUS_ACCESS_WALK[1], 'Walk to destination', at_origin=False),
        ]
        return Candidate('bus-subway', 'Bus + Subway Route', segments, ComfortTier.LOW, kind='bus_subway')

    def _rideshare(self, trip: '_Trip') -> Candidate:
        pickup = trip.waypoint('Pickup Point near', trip.origin)
        dropoff = trip.waypoint('Dropoff Point near', trip.destination)
        segments = [
            trip.walk_leg(trip.origin, pickup, RIDE_ACCESS_WALK[0], 'Walk to pickup point', at_origin=True),
            trip.ride_leg(Mode.UBER, pickup, dropoff, _minutes(trip.distance, UBER_PACE), 'UberX'),
            trip.walk_leg(dropoff, trip.destination, RIDE_ACCESS_WALK[1], 'Walk to destination', at_origin=False),
        ]
        return Candidate('uber', 'Uber Route', segments, ComfortTier.HIGH, kind='rideshare')

    def _taxi(self, trip: '_Trip') -> Candidate:
        stand = trip.waypoint('Taxi Stand near', trip.origin)
        segments = [
            trip.walk_leg(trip.origin, stand, TAXI_ACCESS_WALK, 'Walk to taxi stand', at_origin=True),
            trip.ride_leg(Mode.TAXI, stand, trip.destination, _minutes(trip.distance, TAXI_PACE), 'Yellow Cab'),
        ]
        return Candidate('taxi', 'Taxi Route', segments, ComfortTier.HIGH, kind='taxi')

    def _shared(self, trip: '_Trip') -> Candidate:
        pickup = trip.waypoint('Shared Pickup near', trip.origin)
        dropoff = trip.waypoint('Shared Dropoff near', trip.destination)
        segments = [
            trip.walk_leg(trip.origin, pickup, SHARED_ACCESS_WALK[0], 'Walk to shared pickup', at_origin=True),
            trip.ride_leg(Mode.SHARED, pickup, dropoff, _minutes(trip.distance, SHARED_PACE), 'UberX Share'),
            trip.walk_leg(dropoff, trip.destination, SHARED_ACCESS_WALK[1], 'Walk to destination', at_origin=False),
        ]
        return Candidate('shared', 'Shared Ride', segments, ComfortTier.MEDIUM, kind='shared')

    def _mixed_last_mile(self, trip: '_Trip') -> Candidate:
        context = trip.context
        line = trip.subway_line() if context.has_subway_at_both_ends else None
        if line is not None:
            station_a = trip.station(line, trip.origin)
            station_b = trip.station(line, trip.destination)
            segments = [
                trip.walk_leg(trip.origin, station_a, SUBWAY_ACCESS_WALK[0], 'Walk to station', at_origin=True),
                trip.subway_leg(line, station_a, station_b, _minutes(trip.distance, SUBWAY_MIXED_PACE), SUBWAY_FARE),
                trip.ride_leg(Mode.UBER, station_b, trip.destination, LAST_MILE_RIDE_MINUTES, 'UberX (last mile)',
                              cost=MIXED_LAST_MILE_FARE),
            ]
            return Candidate('subway-uber', 'Subway + Uber', segments, ComfortTier.HIGH, kind='mixed')

        route = trip.bus_route(self.rng)
        stop_a = trip.waypoint(f'{route} Stop near', trip.origin)
        stop_b = trip.waypoint(f'{route} Stop near', trip.destination)
        segments = [
            trip.walk_leg(trip.origin, stop_a, BUS_ACCESS_WALK[0], 'Walk to bus stop', at_origin=True),
            trip.bus_leg(route, f'{route} Bus', stop_a, stop_b, _minutes(trip.distance, BUS_LOCAL_PACE),
                         LOCAL_BUS_FARE),
            trip.ride_leg(Mode.UBER, stop_b, trip.destination, LAST_MILE_RIDE_MINUTES, 'UberX (last mile)',
                          cost=MIXED_LAST_MILE_FARE),
        ]
        return Candidate('bus-uber', 'Bus + Uber', segments, ComfortTier.MEDIUM, kind='mixed')

    def _bike_subway(self, trip: '_Trip') -> Optional[Candidate]:
        line = trip.subway_line()
        if line is None:
            return None
        station_a = trip.station(line, trip.origin)
        station_b = trip.station(line, trip.destination)
        bike_miles = trip.distance * BIKE_FIRST_LEG_SHARE
        segments = [
            CycleSegment(trip.origin, station_a, _minutes(bike_miles, EBIKE_PACE),
                         calculate_fare('ebike', bike_miles), mode=Mode.EBIKE,
                         label='Citi Bike E-Bike to station', crowd_level='low'),
            trip.subway_leg(line, station_a, station_b,
                            _minutes(trip.distance - bike_miles, SUBWAY_MIXED_PACE), SUBWAY_FARE),
            trip.walk_leg(station_b, trip.destination, SUBWAY_ACCESS_WALK[1], 'Walk to destination', at_origin=False),
        ]
        return Candidate('bike-subway', 'E-Bike + Subway', segments, ComfortTier.MEDIUM, kind='mixed')

    def _economy(self, trip: '_Trip') -> Candidate:
        route = trip.fallback_bus_route(self.rng)
        stop_a = trip.waypoint(f'{route} Stop near', trip.origin)
        stop_b = trip.waypoint(f'{route} Stop near', trip.destination)
        segments = [
            trip.walk_leg(trip.origin, stop_a, ECONOMY_ACCESS_WALK[0], 'Walk to bus stop', at_origin=True),
            trip.bus_leg(route, f'{route} Local Bus', stop_a, stop_b, _minutes(trip.distance, BUS_ECONOMY_PACE),
                         LOCAL_BUS_FARE),
            trip.walk_leg(stop_b, trip.destination, ECONOMY_ACCESS_WALK[1], 'Walk to destination', at_origin=False),
        ]
        return Candidate('economy', 'Economy Option', segments, ComfortTier.LOW, kind='economy')

    def _premium(self, trip: '_Trip') -> Candidate:
        pickup = trip.waypoint('Premium Pickup near', trip.origin)
        segments = [
            trip.walk_leg(trip.origin, pickup, PREMIUM_ACCESS_WALK, 'Walk to pickup point', at_origin=True),
            trip.ride_leg(Mode.UBER, pickup, trip.destination, _minutes(trip.distance, PREMIUM_PACE), 'Uber Black'),
        ]
        return Candidate('premium', 'Premium Express', segments, ComfortTier.HIGH, kind='premium')


class _Trip:
    """Per-call helper that builds consistently named waypoints and legs"""

    def __init__(self, reference: ReferenceData, origin: Location, destination: Location,
                 distance: float, context: TransitContext):
        self.reference = reference
        self.origin = origin
        self.destination = destination
        self.distance = distance
        self.context = context

    def _toward(self, end: Location) -> Location:
        return self.destination if end is self.origin else self.origin

    def _near(self, end: Location) -> Coordinate:
        if self.distance <= 0:
            return end.coordinate
        t = min(0.1, 0.25 / self.distance)
        return _lerp(end.coordinate, self._toward(end).coordinate, t)

    def waypoint(self, prefix: str, end: Location, coordinate: Optional[Coordinate] = None) -> Location:
        return Location(name=f'{prefix} {end.name}', coordinate=coordinate or self._near(end),
                        area=end.area, borough=end.borough)

    def station(self, line: str, end: Location, name: Optional[str] = None) -> Location:
        shape = self.reference.shape_for(line)
        coordinate = None
        if shape is not None:
            idx = closest_point_index([(p.lat, p.lon) for p in shape.points],
                                      end.coordinate.lat, end.coordinate.lon)
            nearest = shape.points[idx]
            if haversine_distance(end.coordinate.lat, end.coordinate.lon, nearest.lat, nearest.lon) <= STATION_SNAP_KM:
                coordinate = nearest
        if name is not None:
            return Location(name=name, coordinate=coordinate or self._near(end), area=end.area, borough=end.borough)
        return self.waypoint(f'{line} Station near', end, coordinate)

    def transfer_station(self, line_a: str, line_b: str) -> Location:
        middle = _lerp(self.origin.coordinate, self.destination.coordinate, 0.5)
        return Location(name=f'Transfer Station ({line_a}/{line_b})', coordinate=middle,
                        area=self.origin.area, borough=self.origin.borough)

    def first_operating(self, lines: Sequence[str]) -> Optional[str]:
        for line in lines:
            if self.context.is_operating(line):
                return line
        return None

    def transfer_lines(self) -> Optional[Tuple[str, str]]:
        """Operating boarding and alighting lines, or None when either end has none"""
        line_a = self.first_operating(self.context.origin_subway_lines)
        line_b = self.first_operating(self.context.destination_subway_lines)
        if line_a is None or line_b is None:
            return None
        return line_a, line_b

    def subway_line(self) -> Optional[str]:
        """A single line for the subway part of mixed itineraries"""
        common = self.context.common_operating_lines()
        if common:
            return common[0]
        lines = self.transfer_lines()
        return lines[0] if lines else None

    def bus_route(self, rng: np.random.Generator) -> str:
        origin_routes = self.context.origin_bus_routes
        connecting = [r for r in origin_routes if r in self.context.destination_bus_routes]
        if connecting:
            return connecting[0]
        if origin_routes:
            return origin_routes[0]
        return self.fallback_bus_route(rng)

    def fallback_bus_route(self, rng: np.random.Generator) -> str:
        facts = self.reference.boroughs.get(self.origin.borough)
        prefix = facts.bus_prefix if facts else self.origin.borough.value[0]
        return f'{prefix}{int(rng.integers(1, 51))}'

    def walk_accessible(self, duration: int, topology: float) -> bool:
        return topology <= ACCESSIBLE_TOPOLOGY_MAX and duration <= ACCESSIBLE_WALK_MAX_MINUTES

    def walk_leg(self, start: Location, end: Location, duration: int, label: str, at_origin: bool) -> WalkSegment:
        topology = self.context.origin_topology if at_origin else self.context.destination_topology
        return WalkSegment(start, end, duration, 0.0, label=label,
                           accessible=self.walk_accessible(duration, topology), crowd_level='low')

    def subway_leg(self, line: str, start: Location, end: Location, duration: int, cost: float) -> TransitSegment:
        status = self.context.status_for(line)
        delay = status.delay if status else 0
        nickname = LINE_NICKNAMES.get(line)
        label = f'{line} Train ({nickname})' if nickname else f'{line} Train'
        return TransitSegment(start, end, duration + delay, cost, mode=Mode.SUBWAY, label=label,
                              accessible=bool(status and status.accessible),
                              crowd_level=status.crowd_level if status else 'medium', line_id=line)

    def bus_leg(self, route: str, label: str, start: Location, end: Location, duration: int,
                cost: float) -> TransitSegment:
        return TransitSegment(start, end, duration, cost, mode=Mode.BUS, label=label,
                              accessible=mode_spec(Mode.BUS).accessible, crowd_level='medium', line_id=route)

    def ride_leg(self, mode: Mode, start: Location, end: Location, duration: int, label: str,
                 cost: Optional[float] = None) -> RideSegment:
        if cost is None:
            cost = calculate_fare(mode.value, self.distance)
        return RideSegment(start, end, duration, cost, mode=mode, label=label,
                           accessible=mode_spec(mode).accessible, crowd_level='low')

