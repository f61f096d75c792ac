import math
from typing import List, Sequence, Tuple

import numpy as np

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_MI = 3958.8


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate haversine distance between two points in kilometers"""
    return _haversine(lat1, lon1, lat2, lon2, EARTH_RADIUS_KM)


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate haversine distance between two points in statute miles"""
    return _haversine(lat1, lon1, lat2, lon2, EARTH_RADIUS_MI)


def _haversine(lat1: float, lon1: float, lat2: float, lon2: float, radius: float) -> float:
    lat1_rad = math.radians(lat1)
    lon1_rad = math.radians(lon1)
    lat2_rad = math.radians(lat2)
    lon2_rad = math.radians(lon2)
    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad
    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    c = 2 * math.asin(math.sqrt(min(1.0, a)))
    return radius * c


def closest_point_index(points: Sequence[Tuple[float, float]], lat: float, lon: float) -> int:
    """Index of the (lat, lon) point nearest to the target, by planar degree distance"""
    arr = np.asarray(points, dtype=float)
    dists = np.sqrt((arr[:, 0] - lat) ** 2 + (arr[:, 1] - lon) ** 2)
    return int(np.argmin(dists))


def interpolate_points(start: Tuple[float, float], end: Tuple[float, float],
                       num_points: int = 10) -> List[Tuple[float, float]]:
    """Evenly spaced (lat, lon) points from start to end, both ends included"""
    num_points = max(2, num_points)
    lats = np.linspace(start[0], end[0], num_points)
    lons = np.linspace(start[1], end[1], num_points)
    return [(float(la), float(lo)) for la, lo in zip(lats, lons)]
