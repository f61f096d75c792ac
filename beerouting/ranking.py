"""
Ranking & Assembly: dedupe, backstop, wheelchair filter, sort, cap, label,
and projection of scored candidates into response dictionaries.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from .exceptions import NoCandidateError
from .models.route_segments import PathGeometry, PreferenceProfile, Priority, ScoredCandidate
from .scoring import score_color

logger = logging.getLogger(__name__)

TOP_LABELS = {
    Priority.SPEED: 'Fastest Route',
    Priority.COST: 'Cheapest Route',
    Priority.COMFORT: 'Most Comfortable',
    Priority.BALANCED: 'Best Overall',
}

ETA_FORMAT = '%I:%M %p'


def _sort_key(priority: Priority) -> Callable[[ScoredCandidate], tuple]:
    if priority == Priority.SPEED:
        return lambda sc: (sc.duration, -sc.score, -sc.raw_score)
    if priority == Priority.COST:
        return lambda sc: (sc.cost, -sc.score, -sc.raw_score)
    if priority == Priority.COMFORT:
        return lambda sc: (-sc.comfort_score, -sc.score, -sc.raw_score)
    return lambda sc: (-sc.score, -sc.raw_score, sc.duration)


def deduplicate(scored: List[ScoredCandidate]) -> List[ScoredCandidate]:
    """Keep the first candidate for each mode/label sequence"""
    seen = set()
    unique = []
    for sc in scored:
        signature = sc.candidate.signature
        if signature in seen:
            logger.debug(f"Dropping duplicate candidate {sc.id!r}")
            continue
        seen.add(signature)
        unique.append(sc)
    return unique


class RouteRanker:
    """Order scored candidates for presentation"""

    def __init__(self, max_routes: int = 6, min_routes: int = 3):
        self.max_routes = max_routes
        self.min_routes = min_routes

    def rank(self, scored: List[ScoredCandidate], preference: PreferenceProfile,
             backstop: Optional[Callable[[], List[ScoredCandidate]]] = None,
             accessible: Optional[Callable[[], ScoredCandidate]] = None) -> List[ScoredCandidate]:
        """
        Args:
            scored: scored candidates in generation order
            preference: rider preference profile
            backstop: builds scored economy/premium candidates when too few survive
            accessible: builds a scored dedicated accessible candidate
        Returns:
            At most max_routes candidates, best first, with the top one labelled
        """
        candidates = deduplicate(scored)

        if len(candidates) < self.min_routes and backstop is not None:
            logger.info(f"Only {len(candidates)} candidates; adding backstop options")
            candidates = deduplicate(candidates + backstop())

        if preference.wheelchair:
            candidates = self._wheelchair_filter(candidates, accessible)

        ordered = sorted(candidates, key=_sort_key(Priority(preference.priority)))[:self.max_routes]
        if not ordered:
            raise NoCandidateError("No candidates survived ranking")

        top = ordered[0]
        label = TOP_LABELS.get(Priority(preference.priority), TOP_LABELS[Priority.BALANCED])
        ordered[0] = top.renamed(f"{top.name} ({label})")
        return ordered

    def _wheelchair_filter(self, candidates: List[ScoredCandidate],
                           accessible: Optional[Callable[[], ScoredCandidate]]) -> List[ScoredCandidate]:
        filtered = [sc for sc in candidates if sc.is_wheelchair_accessible]
        if filtered:
            return filtered
        if accessible is not None:
            synthesized = accessible()
            if synthesized.is_wheelchair_accessible:
                logger.info("Wheelchair filter removed every candidate; using synthesized accessible route")
                return [synthesized]
        raise NoCandidateError("No wheelchair accessible route could be built")


def format_eta(duration_minutes: int, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return (now + timedelta(minutes=duration_minutes)).strftime(ETA_FORMAT)


def _scaled(value: float) -> int:
    return int(round(value * 10))


def route_to_dict(scored: ScoredCandidate, paths: List[PathGeometry], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Response projection of one ranked candidate"""
    candidate = scored.candidate
    segments = []
    for seg, adjusted, seg_score, path in zip(candidate.segments, scored.adjusted_durations,
                                               scored.segment_scores, paths):
        segments.append({
            'mode': seg.mode.value,
            'line': seg.line,
            'lineInfo': seg.label,
            'startLocation': seg.start.name,
            'endLocation': seg.end.name,
            'duration': seg.duration,
            'adjustedDuration': adjusted,
            'cost': round(seg.cost, 2),
            'score': seg_score,
            'wheelchairAccessible': seg.accessible,
            'crowdLevel': seg.crowd_level,
            'path': path.to_dict(),
        })

    return {
        'id': candidate.id,
        'name': candidate.name,
        'duration': scored.duration,
        'cost': scored.cost,
        'comfort': candidate.comfort.value,
        'numTransfers': candidate.num_transfers,
        'isWheelchairAccessible': candidate.is_wheelchair_accessible,
        'co2': scored.co2,
        'eta': format_eta(scored.duration, now),
        'segments': segments,
        'scores': {
            'overall': scored.score,
            'raw': round(scored.raw_score, 4),
            'time': _scaled(scored.sub_scores.time),
            'cost': _scaled(scored.sub_scores.cost),
            'comfort': _scaled(scored.sub_scores.comfort),
            'transfers': _scaled(scored.sub_scores.transfer),
        },
        'routeColor': score_color(scored.score),
        'costBreakdown': {
            'fare': scored.cost_breakdown.fare,
            'additionalFees': scored.cost_breakdown.additional_fees,
            'totalCost': scored.cost_breakdown.total,
        },
        'traffic': {
            'level': scored.traffic_level,
            'impact': round(scored.traffic_impact, 3),
        },
        'hasTopologyImpact': scored.has_topology_impact,
    }
