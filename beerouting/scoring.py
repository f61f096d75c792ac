"""
Multi-Criteria Scorer.

Each candidate gets four sub-scores in [0, 1] (time, cost, comfort, transfer),
combined by a priority-dependent weighted sum into a raw score and a 0-10
display score. The scorer also derives adjusted segment durations, the cost
breakdown (with the peak-traffic surcharge), a CO2 estimate and per-segment
display scores.
"""

import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from .config import config
from .exceptions import InternalError
from .models.route_segments import (Candidate, ComfortTier, CostBreakdown, Mode, PreferenceProfile, Priority,
                                    ScoredCandidate, Segment, Sensitivity, SubScores)
from .modes import mode_spec
from .transit_context import TransitContext
from .utils.geo_utils import haversine_distance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Weights:
    time: float
    cost: float
    comfort: float
    transfer: float

    def as_dict(self) -> Dict[str, float]:
        return {'time': self.time, 'cost': self.cost, 'comfort': self.comfort, 'transfer': self.transfer}


DEFAULT_WEIGHTS = Weights(time=0.40, cost=0.35, comfort=0.15, transfer=0.10)

PRIORITY_WEIGHTS = MappingProxyType({
    Priority.SPEED: Weights(time=0.60, cost=0.20, comfort=0.10, transfer=0.10),
    Priority.COST: Weights(time=0.20, cost=0.60, comfort=0.10, transfer=0.10),
    Priority.COMFORT: Weights(time=0.20, cost=0.20, comfort=0.45, transfer=0.15),
    Priority.BALANCED: DEFAULT_WEIGHTS,
})

SCORE_COLORS = (
    (3, '#ef4444'),
    (5, '#f59e0b'),
    (7, '#facc15'),
    (9, '#65a30d'),
)
TOP_SCORE_COLOR = '#16a34a'


@dataclass(frozen=True)
class ScoringParameters:
    """Hand-tuned scoring constants; override through SCORING_* environment variables"""
    t_max: float = 120.0
    c_max: float = 30.0
    comfort_tiers: Mapping[ComfortTier, float] = field(default_factory=lambda: MappingProxyType({
        ComfortTier.HIGH: 0.9,
        ComfortTier.MEDIUM: 0.6,
        ComfortTier.LOW: 0.3,
    }))
    bag_penalty: float = 0.1
    comfort_floor: float = 0.1
    transfer_penalty: float = 0.15
    accessibility_penalty: float = 0.5
    noise_shift: float = 0.10
    safety_shift: float = 0.05
    traffic_surcharge: float = 0.15
    traffic_surcharge_threshold: float = 1.2
    high_traffic_threshold: float = 1.3
    medium_traffic_threshold: float = 1.1

    def __post_init__(self):
        if self.t_max <= 0 or self.c_max <= 0:
            raise ValueError("Scoring ceilings must be positive")
        if not 0.0 <= self.accessibility_penalty <= 1.0:
            raise ValueError("Accessibility penalty must be within [0, 1]")

    @classmethod
    def from_config(cls, cfg=None) -> 'ScoringParameters':
        cfg = cfg or config
        return cls(**cfg.get_scoring_config())


def compute_weights(preference: PreferenceProfile, params: Optional[ScoringParameters] = None) -> Weights:
    """Priority table lookup, then noise and safety perturbations (not renormalised)"""
    params = params or ScoringParameters()
    w = PRIORITY_WEIGHTS.get(Priority(preference.priority), DEFAULT_WEIGHTS)
    time, cost, comfort, transfer = w.time, w.cost, w.comfort, w.transfer

    if preference.noise == Sensitivity.HIGH:
        others = time + cost + transfer
        shift = params.noise_shift
        if others > 0:
            time -= shift * time / others
            cost -= shift * cost / others
            transfer -= shift * transfer / others
        comfort += shift

    if preference.safety == Sensitivity.HIGH:
        shift = params.safety_shift
        transfer += shift
        comfort += shift
        time = max(0.0, time - shift)
        cost = max(0.0, cost - shift)

    return Weights(time=time, cost=cost, comfort=comfort, transfer=transfer)


def score_color(score: int) -> str:
    """Color gradient from red (low score) to green (high score)"""
    for ceiling, color in SCORE_COLORS:
        if score <= ceiling:
            return color
    return TOP_SCORE_COLOR


def traffic_level(impact: float, params: Optional[ScoringParameters] = None) -> str:
    params = params or ScoringParameters()
    if impact > params.high_traffic_threshold:
        return 'high'
    if impact > params.medium_traffic_threshold:
        return 'medium'
    return 'low'


def segment_co2(segment: Segment) -> float:
    """Grams of CO2 for one segment: emission factor x straight-line km"""
    start, end = segment.start.coordinate, segment.end.coordinate
    km = haversine_distance(start.lat, start.lon, end.lat, end.lon)
    return mode_spec(segment.mode).emission_factor * km


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class MultiCriteriaScorer:
    """Score candidates against a rider preference profile"""

    def __init__(self, params: Optional[ScoringParameters] = None):
        self.params = params or ScoringParameters()

    def adjusted_duration(self, segment: Segment, context: TransitContext) -> int:
        spec = mode_spec(segment.mode)
        if spec.road_based:
            return max(1, _round_half_up(segment.duration * context.average_traffic))
        if spec.active:
            return max(1, _round_half_up(segment.duration * (1 + context.average_topology)))
        return segment.duration

    def comfort_score(self, candidate: Candidate, preference: PreferenceProfile, context: TransitContext) -> float:
        p = self.params
        comfort = p.comfort_tiers.get(candidate.comfort, p.comfort_tiers[ComfortTier.MEDIUM])
        if preference.bags > 0:
            comfort = max(p.comfort_floor, comfort - preference.bags * p.bag_penalty)
        if self._has_topology_impact(candidate):
            comfort = max(p.comfort_floor, comfort - context.average_topology)
        return comfort

    def segment_score(self, segment: Segment, topology_impact: bool, traffic_impact: float,
                      context: TransitContext) -> int:
        """0-10 display score for a single leg"""
        hills = int(math.floor(context.average_topology * 10))
        if segment.mode == Mode.WALK and topology_impact:
            return max(3, 7 - hills)
        if segment.mode in (Mode.EBIKE, Mode.BIKE) and topology_impact:
            return max(2, 6 - hills)
        if mode_spec(segment.mode).road_based:
            return max(2, 9 - int(math.floor((traffic_impact - 1) * 10)))
        return 7

    def score(self, candidate: Candidate, preference: PreferenceProfile, context: TransitContext) -> ScoredCandidate:
        try:
            return self._score(candidate, preference, context)
        except (ArithmeticError, KeyError, TypeError, ValueError) as e:
            raise InternalError(f"Failed to score candidate {candidate.id!r}: {e}") from e

    def _score(self, candidate: Candidate, preference: PreferenceProfile, context: TransitContext) -> ScoredCandidate:
        p = self.params
        adjusted = tuple(self.adjusted_duration(seg, context) for seg in candidate.segments)
        duration = sum(adjusted)

        road_based = any(mode_spec(seg.mode).road_based for seg in candidate.segments)
        traffic_impact = context.average_traffic if road_based else 1.0
        topology_impact = self._has_topology_impact(candidate)

        fare = round(sum(seg.cost for seg in candidate.segments if seg.cost > 0), 2)
        fees = 0.0
        if road_based and traffic_impact > p.traffic_surcharge_threshold:
            fees = round(fare * p.traffic_surcharge, 2)
        breakdown = CostBreakdown(fare=fare, additional_fees=fees)

        sub = SubScores(
            time=max(0.0, 1 - duration / p.t_max),
            cost=max(0.0, 1 - breakdown.total / p.c_max),
            comfort=self.comfort_score(candidate, preference, context),
            transfer=max(0.0, 1 - candidate.num_transfers * p.transfer_penalty),
        )
        weights = compute_weights(preference, p)
        raw = (sub.time * weights.time + sub.cost * weights.cost
               + sub.comfort * weights.comfort + sub.transfer * weights.transfer)
        if preference.wheelchair and not candidate.is_wheelchair_accessible:
            raw *= (1 - p.accessibility_penalty)

        display = min(10, max(0, _round_half_up(raw * 10)))
        co2 = round(sum(segment_co2(seg) for seg in candidate.segments), 1)

        return ScoredCandidate(
            candidate=candidate,
            adjusted_durations=adjusted,
            cost_breakdown=breakdown,
            sub_scores=sub,
            raw_score=raw,
            score=display,
            co2=co2,
            traffic_impact=traffic_impact,
            traffic_level=traffic_level(traffic_impact, p),
            has_topology_impact=topology_impact,
            segment_scores=tuple(self.segment_score(seg, topology_impact, traffic_impact, context)
                                 for seg in candidate.segments),
        )

    @staticmethod
    def _has_topology_impact(candidate: Candidate) -> bool:
        return any(mode_spec(seg.mode).active for seg in candidate.segments)
