from datetime import datetime

import numpy as np
import pytest

from beerouting.candidate_generator import RouteCandidateGenerator
from beerouting.core_shape_generator import CoreShapeGenerator
from beerouting.exceptions import NoCandidateError
from beerouting.models.route_segments import PreferenceProfile, Priority
from beerouting.ranking import RouteRanker, deduplicate, format_eta, route_to_dict
from beerouting.scoring import MultiCriteriaScorer


@pytest.fixture
def scored_trip(reference, trip):
    origin, destination, distance, context = trip('Flushing', 'Times Square')
    generator = RouteCandidateGenerator(reference, np.random.default_rng(2))
    scorer = MultiCriteriaScorer()

    def _score(preference):
        candidates = generator.generate(origin, destination, distance, context, preference)
        return [scorer.score(c, preference, context) for c in candidates]
    return _score


@pytest.mark.parametrize('priority, label', [
    (Priority.SPEED, 'Fastest Route'),
    (Priority.COST, 'Cheapest Route'),
    (Priority.COMFORT, 'Most Comfortable'),
    (Priority.BALANCED, 'Best Overall'),
])
def test_top_route_is_labelled(scored_trip, priority, label):
    preference = PreferenceProfile(priority=priority)
    ranked = RouteRanker().rank(scored_trip(preference), preference)
    assert ranked[0].name.endswith(f'({label})')
    assert not any(sc.name.endswith(f'({label})') for sc in ranked[1:])


def test_result_is_capped(scored_trip):
    preference = PreferenceProfile()
    scored = scored_trip(preference)
    assert len(scored) > 6
    assert len(RouteRanker(max_routes=6).rank(scored, preference)) == 6
    assert len(RouteRanker(max_routes=2).rank(scored, preference)) == 2


def test_speed_ordering(scored_trip):
    preference = PreferenceProfile(priority=Priority.SPEED)
    ranked = RouteRanker().rank(scored_trip(preference), preference)
    durations = [sc.duration for sc in ranked]
    assert durations == sorted(durations)
    assert ranked[0].id == 'subway-uber'


def test_cost_ordering(scored_trip):
    preference = PreferenceProfile(priority=Priority.COST)
    ranked = RouteRanker().rank(scored_trip(preference), preference)
    costs = [sc.cost for sc in ranked]
    assert costs == sorted(costs)
    assert ranked[0].id == 'walk'


def test_balanced_ordering(scored_trip):
    preference = PreferenceProfile()
    ranked = RouteRanker().rank(scored_trip(preference), preference)
    scores = [sc.score for sc in ranked]
    assert scores == sorted(scores, reverse=True)


def test_duplicates_are_dropped(scored_trip):
    scored = scored_trip(PreferenceProfile())
    doubled = scored + [scored[0].renamed('Walking Route Again', 'walk-2')]
    assert len(deduplicate(doubled)) == len(scored)


def test_backstop_fills_short_lists(scored_trip):
    scored = scored_trip(PreferenceProfile())[:1]
    extra = scored_trip(PreferenceProfile())[3:5]
    ranked = RouteRanker(min_routes=3).rank(scored, PreferenceProfile(), backstop=lambda: extra)
    assert len(ranked) == 3


def test_wheelchair_filter_uses_accessible_fallback(scored_trip):
    preference = PreferenceProfile(wheelchair=True)
    scored = [sc for sc in scored_trip(preference) if not sc.is_wheelchair_accessible]
    fallback = next(sc for sc in scored_trip(preference) if sc.is_wheelchair_accessible)
    ranked = RouteRanker().rank(scored, preference, accessible=lambda: fallback)
    assert [sc.id for sc in ranked] == [fallback.id]


def test_wheelchair_filter_without_fallback_raises(scored_trip):
    preference = PreferenceProfile(wheelchair=True)
    scored = [sc for sc in scored_trip(preference) if not sc.is_wheelchair_accessible]
    with pytest.raises(NoCandidateError):
        RouteRanker().rank(scored, preference)


def test_empty_input_raises():
    with pytest.raises(NoCandidateError):
        RouteRanker().rank([], PreferenceProfile())


def test_format_eta():
    assert format_eta(45, datetime(2024, 5, 1, 8, 30)) == '09:15 AM'
    assert format_eta(90, datetime(2024, 5, 1, 23, 0)) == '12:30 AM'


def test_route_to_dict(reference, scored_trip):
    scored = scored_trip(PreferenceProfile())
    taxi = next(sc for sc in scored if sc.id == 'taxi')
    paths = CoreShapeGenerator(reference, np.random.default_rng(0)).generate_route_paths(taxi.candidate)
    data = route_to_dict(taxi, paths, datetime(2024, 5, 1, 8, 30))
    assert data['id'] == 'taxi'
    assert data['duration'] == taxi.duration
    assert data['numTransfers'] == 1
    assert data['costBreakdown']['totalCost'] == pytest.approx(
        data['costBreakdown']['fare'] + data['costBreakdown']['additionalFees'])
    assert data['cost'] == data['costBreakdown']['totalCost']
    assert data['traffic']['level'] == 'high'
    assert [seg['mode'] for seg in data['segments']] == ['walk', 'taxi']
    assert data['segments'][1]['path']['type'] == 'taxi'
    assert 0 <= data['scores']['overall'] <= 10
