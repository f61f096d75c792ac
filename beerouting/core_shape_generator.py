"""
Core Shape Generator for the BeeRoute engine
Turns each segment into a drawable polyline using curated line shapes, the
borough street reference lines, or a parametric fallback curve.
"""

import logging
import math
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
from shapely.geometry import LineString, Point
from shapely.ops import substring

from .models.route_segments import Borough, Candidate, Coordinate, PathGeometry, Segment
from .modes import mode_spec
from .reference_data import ReferenceData, StreetLine
from .utils.geo_utils import closest_point_index, haversine_distance, interpolate_points

logger = logging.getLogger(__name__)

LatLon = Tuple[float, float]
Strategy = Callable[[Segment, Borough], List[LatLon]]

CONNECTOR_POINTS = 3
MAX_DETOUR_RATIO = 3.0
MAX_STREET_SNAP_DEG = 0.01
GUIDEWAY_OFFSET = 0.08
FALLBACK_OFFSET = 0.2
MIN_FALLBACK_POINTS = 20
CATMULL_ROM_STEPS = 6
CYCLE_NOISE_DEG = 0.0003
DUPLICATE_KM = 0.005


class CoreShapeGenerator:
    """Path synthesizer with one registered strategy per mode family"""

    def __init__(self, reference: ReferenceData, rng: np.random.Generator):
        self.reference = reference
        self.rng = rng
        self._strategies: Dict[str, Strategy] = {}
        self.register_strategy('line_shape', self._line_shape_path)
        self.register_strategy('street', self._street_path)
        self.register_strategy('drive', self._drive_path)
        self.register_strategy('cycle', self._cycle_path)
        self.register_strategy('curve', self._curve_path)

    def register_strategy(self, name: str, strategy: Strategy):
        self._strategies[name] = strategy

    def synthesize(self, segment: Segment, borough: Optional[Borough] = None) -> PathGeometry:
        """Polyline for one segment, starting and ending exactly at its endpoints"""
        spec = mode_spec(segment.mode)
        strategy = self._strategies.get(spec.path_strategy, self._curve_path)
        points = strategy(segment, borough or segment.start.borough)
        points = self._pin_endpoints(points, segment)
        return PathGeometry(
            mode=segment.mode,
            points=[Coordinate(lat, lon) for lat, lon in points],
            color=spec.color,
            weight=spec.weight,
            dash_array=spec.dash_array,
        )

    def generate_route_paths(self, candidate: Candidate) -> List[PathGeometry]:
        return [self.synthesize(seg, seg.start.borough) for seg in candidate.segments]

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def _line_shape_path(self, segment: Segment, borough: Borough) -> List[LatLon]:
        start, end = _endpoints(segment)
        shape = self.reference.shape_for(segment.line)
        if shape is None:
            logger.debug(f"No curated shape for line {segment.line!r}; using guideway curve")
            return self._bezier(start, end, GUIDEWAY_OFFSET, 12)

        full_shape = [(p.lat, p.lon) for p in shape.points]
        sliced = self._slice_shape(full_shape, start, end)

        path = (self._straight_line_interpolation(start, sliced[0], CONNECTOR_POINTS)[:-1]
                + sliced
                + self._straight_line_interpolation(sliced[-1], end, CONNECTOR_POINTS)[1:])

        direct = haversine_distance(start[0], start[1], end[0], end[1])
        if direct > 0 and _path_length(path) / direct > MAX_DETOUR_RATIO:
            logger.debug(f"Shape slice for line {segment.line} is {_path_length(path) / direct:.1f}x "
                         f"the direct distance; using guideway curve")
            return self._bezier(start, end, GUIDEWAY_OFFSET, 12)
        return path

    def _street_path(self, segment: Segment, borough: Borough) -> List[LatLon]:
        start, end = _endpoints(segment)
        streets = self.reference.streets_in(borough)
        snapped_start = self._project_onto_streets(start, streets)
        snapped_end = self._project_onto_streets(end, streets)
        if snapped_start is None or snapped_end is None:
            return self._straight_line_interpolation(start, end, 5)

        street_a, proj_a, along_a = snapped_start
        street_b, proj_b, along_b = snapped_end

        if street_a is street_b:
            piece = substring(street_a.geometry, along_a, along_b)
            middle = [(lat, lon) for lon, lat in _coords(piece)]
        else:
            middle = self._straight_line_interpolation(proj_a, proj_b, 6)

        if not middle:
            middle = [proj_a, proj_b]
        path = [start] + middle + [end]

        direct = haversine_distance(start[0], start[1], end[0], end[1])
        if direct > 0 and _path_length(path) / direct > MAX_DETOUR_RATIO:
            return self._straight_line_interpolation(start, end, 5)
        return _dedupe(path)

    def _drive_path(self, segment: Segment, borough: Borough) -> List[LatLon]:
        return self._catmull_rom(self._street_path(segment, borough))

    def _cycle_path(self, segment: Segment, borough: Borough) -> List[LatLon]:
        start, end = _endpoints(segment)
        distance_km = haversine_distance(start[0], start[1], end[0], end[1])
        steps = int(np.clip(round(distance_km), 4, 10))
        anchors = interpolate_points(start, end, steps + 1)

        path = [start]
        for i, (a, b) in enumerate(zip(anchors[:-1], anchors[1:])):
            if i % 2 == 0:
                # Direct shortcut
                leg = self._straight_line_interpolation(a, b, 3)
            else:
                # Grid-following: latitude first, then longitude
                corner = (b[0], a[1])
                leg = [a, corner, b]
            path.extend(leg[1:])

        interior = np.array(path[1:-1], dtype=float)
        if len(interior):
            interior += self.rng.normal(0.0, CYCLE_NOISE_DEG, size=interior.shape)
            path = [start] + [(float(la), float(lo)) for la, lo in interior] + [end]
        return path

    def _curve_path(self, segment: Segment, borough: Borough) -> List[LatLon]:
        start, end = _endpoints(segment)
        return self._bezier(start, end, FALLBACK_OFFSET, MIN_FALLBACK_POINTS)

    # ------------------------------------------------------------------
    # Geometry helpers
    # ------------------------------------------------------------------

    def _slice_shape(self, full_shape: List[LatLon], start: LatLon, end: LatLon) -> List[LatLon]:
        """
        Slice the curated shape between the points closest to start and end.

        Returns the slice ordered from start to end, without points that duplicate
        the true endpoints.
        """
        first_idx = self._find_closest_shape_point(full_shape, start[0], start[1])
        last_idx = self._find_closest_shape_point(full_shape, end[0], end[1])

        if first_idx <= last_idx:
            sliced = full_shape[first_idx:last_idx + 1]
        else:
            sliced = list(reversed(full_shape[last_idx:first_idx + 1]))

        trimmed = list(sliced)
        if len(trimmed) > 1 and haversine_distance(start[0], start[1], *trimmed[0]) < DUPLICATE_KM:
            trimmed = trimmed[1:]
        if len(trimmed) > 1 and haversine_distance(end[0], end[1], *trimmed[-1]) < DUPLICATE_KM:
            trimmed = trimmed[:-1]
        return trimmed

    def _find_closest_shape_point(self, shape_points: List[LatLon], target_lat: float, target_lon: float) -> int:
        """Find the index of the closest shape point to the target"""
        return closest_point_index(shape_points, target_lat, target_lon)

    def _project_onto_streets(self, point: LatLon, streets: Tuple[StreetLine, ...]
                              ) -> Optional[Tuple[StreetLine, LatLon, float]]:
        """Nearest street, the projected (lat, lon) on it and the distance along it"""
        if not streets:
            return None
        target = Point(point[1], point[0])
        street = min(streets, key=lambda s: s.geometry.distance(target))
        if street.geometry.distance(target) > MAX_STREET_SNAP_DEG:
            return None
        along = street.geometry.project(target)
        projected = street.geometry.interpolate(along)
        return street, (projected.y, projected.x), along

    def _straight_line_interpolation(self, start: LatLon, end: LatLon, num_points: int = 10) -> List[LatLon]:
        return interpolate_points(start, end, num_points)

    def _bezier(self, start: LatLon, end: LatLon, offset_ratio: float, num_points: int) -> List[LatLon]:
        """Quadratic Bezier with one control point offset perpendicular to the chord"""
        p0 = np.array(start, dtype=float)
        p2 = np.array(end, dtype=float)
        chord = p2 - p0
        length = float(np.hypot(chord[0], chord[1]))
        if length == 0:
            return [start, end]
        normal = np.array([-chord[1], chord[0]]) / length
        p1 = (p0 + p2) / 2 + normal * length * offset_ratio

        t = np.linspace(0.0, 1.0, max(num_points, 2))[:, None]
        curve = (1 - t) ** 2 * p0 + 2 * (1 - t) * t * p1 + t ** 2 * p2
        return [(float(la), float(lo)) for la, lo in curve]

    def _catmull_rom(self, points: List[LatLon]) -> List[LatLon]:
        """Smooth a polyline with a uniform Catmull-Rom spline through every point"""
        if len(points) < 3:
            return points
        pts = np.array(points, dtype=float)
        padded = np.vstack([pts[0], pts, pts[-1]])
        t = np.linspace(0.0, 1.0, CATMULL_ROM_STEPS, endpoint=False)[:, None]

        smooth = []
        for i in range(1, len(padded) - 2):
            p0, p1, p2, p3 = padded[i - 1], padded[i], padded[i + 1], padded[i + 2]
            seg = 0.5 * ((2 * p1)
                         + (-p0 + p2) * t
                         + (2 * p0 - 5 * p1 + 4 * p2 - p3) * t ** 2
                         + (-p0 + 3 * p1 - 3 * p2 + p3) * t ** 3)
            smooth.extend((float(la), float(lo)) for la, lo in seg)
        smooth.append(points[-1])
        return smooth

    @staticmethod
    def _pin_endpoints(points: List[LatLon], segment: Segment) -> List[LatLon]:
        start, end = _endpoints(segment)
        if len(points) < 2:
            return [start, end]
        return [start] + list(points[1:-1]) + [end]


def _endpoints(segment: Segment) -> Tuple[LatLon, LatLon]:
    return ((segment.start.coordinate.lat, segment.start.coordinate.lon),
            (segment.end.coordinate.lat, segment.end.coordinate.lon))


def _coords(geometry) -> List[Tuple[float, float]]:
    if isinstance(geometry, LineString):
        return list(geometry.coords)
    if isinstance(geometry, Point):
        return [(geometry.x, geometry.y)]
    return []


def _path_length(points: List[LatLon]) -> float:
    """Approximate length (km) of a list of (lat, lon) points"""
    return sum(haversine_distance(a[0], a[1], b[0], b[1]) for a, b in zip(points[:-1], points[1:]))


def _dedupe(points: List[LatLon]) -> List[LatLon]:
    out = [points[0]]
    for p in points[1:]:
        if not math.isclose(p[0], out[-1][0], abs_tol=1e-9) or not math.isclose(p[1], out[-1][1], abs_tol=1e-9):
            out.append(p)
    if len(out) == 1:
        out.append(points[-1])
    return out
