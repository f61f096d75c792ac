"""
Bundled reference data: curated places, borough facts, per-area transit
listings, area traffic/terrain conditions, line statuses, line shapes, cross-borough express services and
reference street lines.

Everything is loaded once from ``config.data_dir`` and exposed as a frozen
``ReferenceData``; nothing here is mutated after loading.
"""

import json
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import pandas as pd
from shapely.geometry import LineString, shape

from .exceptions import DataGapError, ReferenceDataError
from .models.route_segments import Borough, Coordinate, LineStatus, Location

logger = logging.getLogger(__name__)

NO_SERVICE = '-'


@dataclass(frozen=True)
class Place:
    location: Location
    kind: str


@dataclass(frozen=True)
class BoroughFacts:
    borough: Borough
    coordinate: Coordinate
    traffic_level: str
    traffic_factor: float
    topology: float
    bus_prefix: str


@dataclass(frozen=True)
class AreaConditions:
    """Traffic and terrain facts for a curated area or a whole borough"""
    traffic_level: str
    traffic_factor: float
    topology: float


@dataclass(frozen=True)
class LineShape:
    shape_id: str
    mode: str
    points: Tuple[Coordinate, ...]


@dataclass(frozen=True)
class ExpressService:
    """A cross-borough express bus or ferry service between two boroughs"""
    boroughs: Tuple[Borough, Borough]
    mode: str
    route_id: str
    label: str
    service: str

    def connects(self, a: Borough, b: Borough) -> bool:
        return {a, b} == set(self.boroughs)


@dataclass(frozen=True)
class StreetLine:
    name: str
    borough: Borough
    geometry: LineString


@dataclass(frozen=True, eq=False)
class ReferenceData:
    places: Tuple[Place, ...]
    boroughs: Mapping[Borough, BoroughFacts]
    area_subway_lines: Mapping[str, Tuple[str, ...]]
    area_bus_routes: Mapping[str, Tuple[str, ...]]
    line_statuses: Tuple[LineStatus, ...]
    line_shapes: Mapping[str, LineShape]
    express_services: Tuple[ExpressService, ...]
    neighborhood_keywords: Tuple[Tuple[str, Borough], ...]
    streets: Mapping[Borough, Tuple[StreetLine, ...]]
    area_conditions: Mapping[str, AreaConditions]

    def borough_facts(self, borough: Borough) -> BoroughFacts:
        return self.boroughs[borough]

    def conditions_for(self, location: Location) -> Optional[AreaConditions]:
        """Area-level conditions when the area is curated, otherwise the borough's"""
        conditions = self.area_conditions.get(location.area)
        if conditions is not None:
            return conditions
        facts = self.boroughs.get(location.borough)
        if facts is None:
            return None
        return AreaConditions(facts.traffic_level, facts.traffic_factor, facts.topology)

    def subway_lines(self, area: str) -> Tuple[str, ...]:
        """Subway lines listed for an area; raises DataGapError when the area has no listing"""
        if area not in self.area_subway_lines:
            raise DataGapError(f"No subway listing for area {area!r}")
        return self.area_subway_lines[area]

    def bus_routes(self, area: str) -> Tuple[str, ...]:
        """Bus routes listed for an area; raises DataGapError when the area has no listing"""
        if area not in self.area_bus_routes:
            raise DataGapError(f"No bus listing for area {area!r}")
        return self.area_bus_routes[area]

    def shape_for(self, line: Optional[str]) -> Optional[LineShape]:
        if not line:
            return None
        return self.line_shapes.get(line)

    def express_between(self, a: Borough, b: Borough, mode: Optional[str] = None) -> List[ExpressService]:
        return [svc for svc in self.express_services
                if svc.connects(a, b) and (mode is None or svc.mode == mode)]

    def streets_in(self, borough: Borough) -> Tuple[StreetLine, ...]:
        return self.streets.get(borough, ())


def _read_csv(data_dir: str, filename: str) -> pd.DataFrame:
    path = os.path.join(data_dir, filename)
    if not os.path.exists(path):
        raise ReferenceDataError(f"Reference data file not found: {path}")
    # Line ids like "1" or "7" must stay strings
    return pd.read_csv(path, dtype=str, keep_default_na=False)


def _split_ids(cell: str) -> Optional[Tuple[str, ...]]:
    cell = cell.strip()
    if cell == '':
        return None
    if cell == NO_SERVICE:
        return ()
    return tuple(cell.split())


def _load_places(data_dir: str) -> Tuple[Place, ...]:
    df = _read_csv(data_dir, 'locations.csv')
    places = []
    for row in df.itertuples(index=False):
        location = Location(
            name=row.name,
            coordinate=Coordinate(float(row.lat), float(row.lon)),
            area=row.area,
            borough=Borough(row.borough),
        )
        places.append(Place(location=location, kind=row.kind))
    return tuple(places)


def _load_boroughs(data_dir: str) -> Dict[Borough, BoroughFacts]:
    df = _read_csv(data_dir, 'boroughs.csv')
    facts = {}
    for row in df.itertuples(index=False):
        borough = Borough(row.borough)
        facts[borough] = BoroughFacts(
            borough=borough,
            coordinate=Coordinate(float(row.lat), float(row.lon)),
            traffic_level=row.traffic_level,
            traffic_factor=float(row.traffic_factor),
            topology=float(row.topology),
            bus_prefix=row.bus_prefix,
        )
    missing = set(Borough) - set(facts)
    if missing:
        raise ReferenceDataError(f"Borough facts missing for: {sorted(b.value for b in missing)}")
    return facts


def _load_area_transit(data_dir: str) -> Tuple[Dict[str, Tuple[str, ...]], Dict[str, Tuple[str, ...]]]:
    df = _read_csv(data_dir, 'area_transit.csv')
    subway, buses = {}, {}
    for row in df.itertuples(index=False):
        lines = _split_ids(row.subway_lines)
        routes = _split_ids(row.bus_routes)
        if lines is not None:
            subway[row.area] = lines
        if routes is not None:
            buses[row.area] = routes
    return subway, buses


def _load_line_statuses(data_dir: str) -> Tuple[LineStatus, ...]:
    df = _read_csv(data_dir, 'line_status.csv')
    return tuple(
        LineStatus(
            line=row.line,
            status=row.status,
            delay=int(row.delay or 0),
            crowd_level=row.crowd_level or 'medium',
            accessible=row.accessible.strip().lower() == 'true',
        )
        for row in df.itertuples(index=False)
    )


def _load_line_shapes(data_dir: str) -> Dict[str, LineShape]:
    """Load line shapes laid out like GTFS shapes.txt"""
    df = _read_csv(data_dir, 'line_shapes.csv')
    df['shape_pt_sequence'] = df['shape_pt_sequence'].astype(int)
    df['shape_pt_lat'] = df['shape_pt_lat'].astype(float)
    df['shape_pt_lon'] = df['shape_pt_lon'].astype(float)

    shapes = {}
    for shape_id, points in df.groupby('shape_id', sort=False):
        points = points.sort_values('shape_pt_sequence')
        coords = tuple(Coordinate(lat, lon) for lat, lon in zip(points['shape_pt_lat'], points['shape_pt_lon']))
        if len(coords) < 2:
            logger.warning(f"Skipping line shape {shape_id} with fewer than 2 points")
            continue
        shapes[shape_id] = LineShape(shape_id=shape_id, mode=points['mode'].iloc[0], points=coords)
    return shapes


def _load_express_services(data_dir: str) -> Tuple[ExpressService, ...]:
    df = _read_csv(data_dir, 'express_routes.csv')
    return tuple(
        ExpressService(
            boroughs=(Borough(row.borough_a), Borough(row.borough_b)),
            mode=row.mode,
            route_id=row.route_id,
            label=row.label,
            service=row.service,
        )
        for row in df.itertuples(index=False)
    )


def _load_area_conditions(data_dir: str) -> Dict[str, AreaConditions]:
    df = _read_csv(data_dir, 'area_conditions.csv')
    return {
        row.area: AreaConditions(
            traffic_level=row.traffic_level,
            traffic_factor=float(row.traffic_factor),
            topology=float(row.topology),
        )
        for row in df.itertuples(index=False)
    }


def _load_keywords(data_dir: str) -> Tuple[Tuple[str, Borough], ...]:
    df = _read_csv(data_dir, 'neighborhood_keywords.csv')
    return tuple((row.keyword.lower(), Borough(row.borough)) for row in df.itertuples(index=False))


def _load_streets(data_dir: str) -> Dict[Borough, Tuple[StreetLine, ...]]:
    path = os.path.join(data_dir, 'streets.geojson')
    if not os.path.exists(path):
        logger.warning(f"GeoJSON file not found: {path}")
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    streets: Dict[Borough, List[StreetLine]] = {}
    for feature in data.get('features', []):
        geom = feature.get('geometry', {})
        if geom.get('type') != 'LineString':
            continue
        props = feature.get('properties', {})
        borough = Borough(props.get('borough', Borough.MANHATTAN.value))
        streets.setdefault(borough, []).append(
            StreetLine(name=props.get('name', ''), borough=borough, geometry=shape(geom)))
    return {b: tuple(lines) for b, lines in streets.items()}


@lru_cache(maxsize=4)
def load_reference_data(data_dir: str) -> ReferenceData:
    """Load and freeze every reference table under data_dir"""
    try:
        subway, buses = _load_area_transit(data_dir)
        data = ReferenceData(
            places=_load_places(data_dir),
            boroughs=MappingProxyType(_load_boroughs(data_dir)),
            area_subway_lines=MappingProxyType(subway),
            area_bus_routes=MappingProxyType(buses),
            line_statuses=_load_line_statuses(data_dir),
            line_shapes=MappingProxyType(_load_line_shapes(data_dir)),
            express_services=_load_express_services(data_dir),
            neighborhood_keywords=_load_keywords(data_dir),
            streets=MappingProxyType(_load_streets(data_dir)),
            area_conditions=MappingProxyType(_load_area_conditions(data_dir)),
        )
    except ReferenceDataError:
        raise
    except (KeyError, ValueError, AttributeError, json.JSONDecodeError) as e:
        raise ReferenceDataError(f"Malformed reference data in {data_dir}: {e}") from e

    logger.info(f"Loaded reference data from {data_dir}: {len(data.places)} places, "
                f"{len(data.line_shapes)} line shapes, "
                f"{sum(len(s) for s in data.streets.values())} street lines")
    return data
