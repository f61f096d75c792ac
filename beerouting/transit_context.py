"""
Transit Context Provider boundary.

The provider is an external collaborator exposing two side-effect-free reads:
``get_line_status()`` and ``get_bus_routes(area)``. The engine wraps the calls
in a per-call worker thread bounded by a timeout; on timeout or failure it logs an
UpstreamError and continues with a degraded default context.
"""

import logging
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import requests

from .exceptions import DataGapError, UpstreamError
from .logger import logger as bee_logger
from .models.route_segments import Borough, LineStatus, Location
from .reference_data import ReferenceData

logger = logging.getLogger(__name__)

DEFAULT_TRAFFIC_FACTOR = 1.25
DEFAULT_TRAFFIC_LEVEL = 'medium'
DEFAULT_TOPOLOGY = 0.2

PROVIDER_THREAD_PREFIX = 'transit-provider'


class TransitContextProvider(ABC):
    """Source of live line status and bus route listings"""

    name = 'provider'

    @abstractmethod
    def get_line_status(self) -> List[LineStatus]:
        """Return the current status of every subway line the provider knows about"""

    @abstractmethod
    def get_bus_routes(self, area: str) -> List[str]:
        """Return bus route ids serving an area"""


class StaticTransitProvider(TransitContextProvider):
    """Provider backed by the bundled reference tables"""

    name = 'static'

    def __init__(self, reference: ReferenceData):
        self.reference = reference

    def get_line_status(self) -> List[LineStatus]:
        return list(self.reference.line_statuses)

    def get_bus_routes(self, area: str) -> List[str]:
        try:
            return list(self.reference.bus_routes(area))
        except DataGapError:
            return []


class HttpTransitProvider(TransitContextProvider):
    """
    Provider backed by a JSON HTTP service.

    Expects ``GET {base_url}/line-status`` to return a list of
    ``{"line", "status", "delay", "crowdLevel", "accessible"}`` objects and
    ``GET {base_url}/bus-routes?area=...`` to return a list of route ids.
    """

    name = 'http'

    def __init__(self, base_url: str, timeout: float = 2.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path: str, params: Optional[dict] = None):
        url = f"{self.base_url}/{path}"
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            raise UpstreamError(f"Transit provider request to {url} failed: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"Transit provider returned invalid JSON from {url}") from e

    def get_line_status(self) -> List[LineStatus]:
        data = self._get('line-status')
        if not isinstance(data, list):
            raise UpstreamError("Line status payload is not a list")
        statuses = []
        for item in data:
            try:
                statuses.append(LineStatus(
                    line=str(item['line']),
                    status=str(item.get('status', 'normal')),
                    delay=int(item.get('delay') or 0),
                    crowd_level=str(item.get('crowdLevel', 'medium')),
                    accessible=bool(item.get('accessible', False)),
                ))
            except (KeyError, TypeError, ValueError) as e:
                raise UpstreamError(f"Malformed line status entry: {item!r}") from e
        return statuses

    def get_bus_routes(self, area: str) -> List[str]:
        data = self._get('bus-routes', params={'area': area})
        if not isinstance(data, list):
            raise UpstreamError("Bus route payload is not a list")
        return [str(route) for route in data]


@dataclass(frozen=True)
class TransitContext:
    """Read-only per-request transit facts for the two ends of a trip"""
    origin_area: str
    destination_area: str
    origin_borough: Borough
    destination_borough: Borough
    origin_subway_lines: Tuple[str, ...]
    destination_subway_lines: Tuple[str, ...]
    origin_bus_routes: Tuple[str, ...]
    destination_bus_routes: Tuple[str, ...]
    line_statuses: Mapping[str, LineStatus] = field(default_factory=lambda: MappingProxyType({}))
    origin_traffic: float = DEFAULT_TRAFFIC_FACTOR
    destination_traffic: float = DEFAULT_TRAFFIC_FACTOR
    origin_traffic_level: str = DEFAULT_TRAFFIC_LEVEL
    destination_traffic_level: str = DEFAULT_TRAFFIC_LEVEL
    origin_topology: float = DEFAULT_TOPOLOGY
    destination_topology: float = DEFAULT_TOPOLOGY
    degraded: bool = False

    def __post_init__(self):
        for factor in (self.origin_traffic, self.destination_traffic):
            if factor < 1.0:
                raise ValueError(f"Traffic factor must be >= 1.0, got {factor}")
        for topo in (self.origin_topology, self.destination_topology):
            if not 0.0 <= topo <= 1.0:
                raise ValueError(f"Topology difficulty must be within [0, 1], got {topo}")

    @property
    def average_traffic(self) -> float:
        return (self.origin_traffic + self.destination_traffic) / 2

    @property
    def average_topology(self) -> float:
        return (self.origin_topology + self.destination_topology) / 2

    @property
    def is_cross_borough(self) -> bool:
        return self.origin_borough != self.destination_borough

    def status_for(self, line: str) -> Optional[LineStatus]:
        return self.line_statuses.get(line)

    def is_operating(self, line: str) -> bool:
        """Lines without a reported status count as operating"""
        status = self.status_for(line)
        return status is None or status.is_operating

    def common_operating_lines(self) -> List[str]:
        return [line for line in self.origin_subway_lines
                if line in self.destination_subway_lines and self.is_operating(line)]

    @property
    def has_subway_at_both_ends(self) -> bool:
        return bool(self.origin_subway_lines) and bool(self.destination_subway_lines)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {
            'traffic': {
                'origin': self.origin_traffic,
                'destination': self.destination_traffic,
                'average': round(self.average_traffic, 3),
                'originLevel': self.origin_traffic_level,
                'destinationLevel': self.destination_traffic_level,
            },
            'topology': {
                'origin': self.origin_topology,
                'destination': self.destination_topology,
                'average': round(self.average_topology, 3),
            },
        }


def _listing_area(reference: ReferenceData, location: Location, bus: bool) -> str:
    lookup = reference.bus_routes if bus else reference.subway_lines
    try:
        lookup(location.area)
        return location.area
    except DataGapError:
        logger.debug(f"No {'bus' if bus else 'subway'} listing for {location.area!r}, "
                     f"using {location.borough.value}")
        return location.borough.value


def _subway_lines(reference: ReferenceData, location: Location) -> Tuple[str, ...]:
    area = _listing_area(reference, location, bus=False)
    try:
        return reference.subway_lines(area)
    except DataGapError:
        return ()


def _fallback_bus_routes(reference: ReferenceData, area: str) -> Tuple[str, ...]:
    try:
        return reference.bus_routes(area)
    except DataGapError:
        return ()


def _fetch(provider: TransitContextProvider, origin_area: str, destination_area: str):
    statuses = provider.get_line_status()
    return statuses, provider.get_bus_routes(origin_area), provider.get_bus_routes(destination_area)


def build_transit_context(provider: TransitContextProvider, reference: ReferenceData,
                          origin: Location, destination: Location,
                          timeout: float = 2.0) -> TransitContext:
    """Assemble the read-only TransitContext for a trip, degrading on provider failure"""
    origin_bus_area = _listing_area(reference, origin, bus=True)
    destination_bus_area = _listing_area(reference, destination, bus=True)

    degraded = False
    started = time.time()
    # One worker per call: a hung provider only ever holds its own thread
    pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix=PROVIDER_THREAD_PREFIX)
    future = pool.submit(_fetch, provider, origin_bus_area, destination_bus_area)
    try:
        try:
            statuses, origin_buses, destination_buses = future.result(timeout=timeout)
        except FutureTimeoutError as e:
            future.cancel()
            raise UpstreamError(f"Transit provider {provider.name!r} timed out after {timeout}s") from e
        except UpstreamError:
            raise
        except Exception as e:
            raise UpstreamError(f"Transit provider {provider.name!r} failed: {e}") from e
    except UpstreamError as e:
        logger.warning(f"{e}; using default transit context")
        degraded = True
        statuses = []
        origin_buses = _fallback_bus_routes(reference, origin_bus_area)
        destination_buses = _fallback_bus_routes(reference, destination_bus_area)
    finally:
        pool.shutdown(wait=False)
    bee_logger.log_provider_call(provider.name, (time.time() - started) * 1000, not degraded)

    if not origin_buses:
        origin_buses = _fallback_bus_routes(reference, origin_bus_area)
    if not destination_buses:
        destination_buses = _fallback_bus_routes(reference, destination_bus_area)

    origin_facts = reference.conditions_for(origin)
    destination_facts = reference.conditions_for(destination)

    return TransitContext(
        origin_area=origin.area,
        destination_area=destination.area,
        origin_borough=origin.borough,
        destination_borough=destination.borough,
        origin_subway_lines=_subway_lines(reference, origin),
        destination_subway_lines=_subway_lines(reference, destination),
        origin_bus_routes=tuple(origin_buses),
        destination_bus_routes=tuple(destination_buses),
        line_statuses=MappingProxyType({s.line: s for s in statuses}),
        origin_traffic=origin_facts.traffic_factor if origin_facts else DEFAULT_TRAFFIC_FACTOR,
        destination_traffic=destination_facts.traffic_factor if destination_facts else DEFAULT_TRAFFIC_FACTOR,
        origin_traffic_level=origin_facts.traffic_level if origin_facts else DEFAULT_TRAFFIC_LEVEL,
        destination_traffic_level=(destination_facts.traffic_level if destination_facts
                                   else DEFAULT_TRAFFIC_LEVEL),
        origin_topology=origin_facts.topology if origin_facts else DEFAULT_TOPOLOGY,
        destination_topology=destination_facts.topology if destination_facts else DEFAULT_TOPOLOGY,
        degraded=degraded,
    )


def create_provider(reference: ReferenceData, base_url: str = '', timeout: float = 2.0) -> TransitContextProvider:
    """HTTP provider when a base URL is configured, bundled static provider otherwise"""
    if base_url:
        return HttpTransitProvider(base_url, timeout=timeout)
    return StaticTransitProvider(reference)
