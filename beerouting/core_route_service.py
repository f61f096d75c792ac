"""
Route Service: per-request orchestration of the BeeRoute engine

Resolve -> transit context -> candidates -> scores -> ranking -> path geometry.
Reference data is loaded once and shared read-only; everything else is built
fresh for each request.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from .candidate_generator import RouteCandidateGenerator
from .config import config
from .core_shape_generator import CoreShapeGenerator
from .exceptions import InputError, InternalError
from .location_resolver import LocationResolver
from .models.route_segments import Candidate, PreferenceProfile, ScoredCandidate
from .ranking import RouteRanker, route_to_dict
from .reference_data import ReferenceData, load_reference_data
from .scoring import MultiCriteriaScorer, ScoringParameters
from .transit_context import TransitContext, TransitContextProvider, build_transit_context, create_provider
from .utils.geo_utils import haversine_miles


class RouteService:
    """
    Recommends ranked multi-modal itineraries between two named places.

    Collaborators (provider, scoring parameters, clock) can be injected; by
    default they come from the global configuration.
    """

    def __init__(self, data_dir: Optional[str] = None,
                 provider: Optional[TransitContextProvider] = None,
                 scoring_params: Optional[ScoringParameters] = None,
                 max_routes: Optional[int] = None,
                 min_routes: Optional[int] = None,
                 provider_timeout: Optional[float] = None,
                 seed: Optional[int] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.data_dir = data_dir or config.data_dir
        self.logger = logging.getLogger(__name__)

        self.reference: ReferenceData = load_reference_data(self.data_dir)

        provider_config = config.get_provider_config()
        self.provider_timeout = provider_timeout if provider_timeout is not None else provider_config['timeout']
        self.provider = provider or create_provider(self.reference, provider_config['base_url'],
                                                    self.provider_timeout)

        ranking_config = config.get_ranking_config()
        self.ranker = RouteRanker(
            max_routes=max_routes if max_routes is not None else ranking_config['max_routes'],
            min_routes=min_routes if min_routes is not None else ranking_config['min_routes'],
        )
        self.scorer = MultiCriteriaScorer(scoring_params or ScoringParameters.from_config())
        self.seed = seed if seed is not None else config.random_seed
        self.clock = clock

        self.logger.info(f"Route service ready (provider={self.provider.name}, data_dir={self.data_dir})")

    def find_routes(self, origin: str, destination: str, preference: Optional[PreferenceProfile] = None,
                    rng: Optional[np.random.Generator] = None) -> Dict[str, Any]:
        """Full response payload for one request"""
        if not origin or not origin.strip() or not destination or not destination.strip():
            raise InputError()
        preference = preference or PreferenceProfile()
        rng = rng if rng is not None else np.random.default_rng(self.seed)

        resolver = LocationResolver(self.reference, rng)
        origin_loc = resolver.resolve(origin)
        destination_loc = resolver.resolve(destination)
        distance = haversine_miles(origin_loc.coordinate.lat, origin_loc.coordinate.lon,
                                   destination_loc.coordinate.lat, destination_loc.coordinate.lon)

        context = build_transit_context(self.provider, self.reference, origin_loc, destination_loc,
                                        timeout=self.provider_timeout)

        generator = RouteCandidateGenerator(self.reference, rng)
        candidates = generator.generate(origin_loc, destination_loc, distance, context, preference)
        scored = self._score_all(candidates, preference, context)

        ranked = self.ranker.rank(
            scored, preference,
            backstop=lambda: self._score_all(
                generator.backstop_candidates(origin_loc, destination_loc, distance, context),
                preference, context),
            accessible=lambda: self.scorer.score(
                generator.accessible_candidate(origin_loc, destination_loc, distance, context),
                preference, context),
        )

        shapes = CoreShapeGenerator(self.reference, rng)
        now = self.clock()
        routes = [route_to_dict(sc, self._paths(shapes, sc), now) for sc in ranked]

        common = context.common_operating_lines()
        payload = {
            'routes': routes,
            'distance': round(distance, 2),
            'fromCoords': origin_loc.coordinate.as_list(),
            'toCoords': destination_loc.coordinate.as_list(),
            'fromArea': origin_loc.area,
            'toArea': destination_loc.area,
            'subwayAvailable': bool(common) or context.has_subway_at_both_ends,
            'transferRequired': not common and context.has_subway_at_both_ends,
            'degraded': context.degraded,
        }
        payload.update(context.to_dict())
        return payload

    def _score_all(self, candidates: List[Candidate], preference: PreferenceProfile,
                   context: TransitContext) -> List[ScoredCandidate]:
        return [self.scorer.score(c, preference, context) for c in candidates]

    def _paths(self, shapes: CoreShapeGenerator, scored: ScoredCandidate):
        try:
            return shapes.generate_route_paths(scored.candidate)
        except (ArithmeticError, ValueError, TypeError) as e:
            raise InternalError(f"Path synthesis failed for {scored.id!r}: {e}") from e
