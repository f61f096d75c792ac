"""
Location Resolver: free text -> Location (coordinate, area, borough).

Resolution never fails. Inputs that match nothing in the curated table end up
with a sampled coordinate so downstream components always have something to
work with.
"""

import logging
import re
from typing import Optional, Tuple

import numpy as np

from .models.route_segments import Borough, Coordinate, Location
from .reference_data import Place, ReferenceData
from .utils.geo_utils import haversine_distance

logger = logging.getLogger(__name__)

# (lat_min, lat_max, lon_min, lon_max)
URBAN_CORE_BOX = (40.70, 40.80, -74.02, -73.93)
METRO_BOX = (40.50, 40.92, -74.26, -73.70)
URBAN_CORE_WEIGHT = 0.8
ADDRESS_JITTER_DEG = 0.01
MIN_REVERSE_MATCH_LEN = 3

_DIGITS = re.compile(r'\d')


class LocationResolver:
    """Resolve place names against the curated table with heuristic fallbacks"""

    def __init__(self, reference: ReferenceData, rng: np.random.Generator):
        self.reference = reference
        self.rng = rng
        # Longest names first so "Flushing Meadows" wins over "Flushing"
        self._by_length = sorted(reference.places, key=lambda p: len(p.location.name), reverse=True)

    def resolve(self, name: str) -> Location:
        text = (name or '').strip()
        normalized = text.lower()
        has_digits = bool(_DIGITS.search(normalized))

        place = self._exact_match(normalized)
        if place is None:
            place = self._substring_match(normalized, skip_boroughs=has_digits)
        if place is not None:
            return self._named(text, place.location)

        borough = self._keyword_borough(normalized)
        if borough is not None:
            facts = self.reference.borough_facts(borough)
            if has_digits:
                jitter = self.rng.uniform(-ADDRESS_JITTER_DEG, ADDRESS_JITTER_DEG, size=2)
                coordinate = Coordinate(facts.coordinate.lat + float(jitter[0]),
                                        facts.coordinate.lon + float(jitter[1]))
                logger.debug(f"Resolved address {text!r} to jittered {borough.value} coordinate")
            else:
                coordinate = facts.coordinate
                logger.debug(f"Resolved {text!r} to {borough.value} by neighborhood keyword")
            return Location(name=text, coordinate=coordinate, area=borough.value, borough=borough)

        coordinate = self._sample_coordinate()
        borough = self.nearest_borough(coordinate)
        logger.debug(f"No match for {text!r}; sampled coordinate near {borough.value}")
        return Location(name=text, coordinate=coordinate, area=borough.value, borough=borough)

    def _exact_match(self, normalized: str) -> Optional[Place]:
        for place in self.reference.places:
            if place.location.name.lower() == normalized:
                return place
        return None

    def _substring_match(self, normalized: str, skip_boroughs: bool = False) -> Optional[Place]:
        if not normalized:
            return None
        for place in self._by_length:
            if skip_boroughs and place.kind == 'borough':
                # "123 Main St, Brooklyn" should be jittered, not pinned to the borough centroid
                continue
            candidate = place.location.name.lower()
            if candidate in normalized:
                return place
            if len(normalized) >= MIN_REVERSE_MATCH_LEN and normalized in candidate:
                return place
        return None

    def _keyword_borough(self, normalized: str) -> Optional[Borough]:
        for borough in Borough:
            if borough.value.lower() in normalized:
                return borough
        for keyword, borough in self.reference.neighborhood_keywords:
            if keyword in normalized:
                return borough
        return None

    def _sample_coordinate(self) -> Coordinate:
        box = URBAN_CORE_BOX if self.rng.random() < URBAN_CORE_WEIGHT else METRO_BOX
        lat = self.rng.uniform(box[0], box[1])
        lon = self.rng.uniform(box[2], box[3])
        return Coordinate(float(lat), float(lon))

    def nearest_borough(self, coordinate: Coordinate) -> Borough:
        best: Tuple[float, Borough] = (float('inf'), Borough.MANHATTAN)
        for borough, facts in self.reference.boroughs.items():
            d = haversine_distance(coordinate.lat, coordinate.lon, facts.coordinate.lat, facts.coordinate.lon)
            if d < best[0]:
                best = (d, borough)
        return best[1]

    @staticmethod
    def _named(text: str, location: Location) -> Location:
        return Location(name=text or location.name, coordinate=location.coordinate,
                        area=location.area, borough=location.borough)
