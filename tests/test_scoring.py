import numpy as np
import pytest

from beerouting.candidate_generator import RouteCandidateGenerator
from beerouting.models.route_segments import PreferenceProfile, Priority, Sensitivity
from beerouting.scoring import (MultiCriteriaScorer, ScoringParameters, compute_weights, score_color,
                                traffic_level)


@pytest.fixture
def scorer():
    return MultiCriteriaScorer(ScoringParameters())


@pytest.fixture
def flushing_trip(reference, trip):
    origin, destination, distance, context = trip('Flushing', 'Times Square')
    generator = RouteCandidateGenerator(reference, np.random.default_rng(1))
    candidates = {c.id: c for c in generator.generate(origin, destination, distance, context, PreferenceProfile())}
    return candidates, context


@pytest.mark.parametrize('priority', list(Priority))
def test_priority_weights_sum_to_one(priority):
    weights = compute_weights(PreferenceProfile(priority=priority))
    assert sum(weights.as_dict().values()) == pytest.approx(1.0)


def test_noise_sensitivity_moves_weight_to_comfort():
    base = compute_weights(PreferenceProfile(priority=Priority.SPEED))
    quiet = compute_weights(PreferenceProfile(priority=Priority.SPEED, noise=Sensitivity.HIGH))
    assert quiet.comfort == pytest.approx(base.comfort + 0.10)
    assert quiet.time < base.time
    assert sum(quiet.as_dict().values()) == pytest.approx(1.0)


def test_safety_sensitivity_shifts_weights():
    weights = compute_weights(PreferenceProfile(safety=Sensitivity.HIGH))
    assert weights.as_dict() == pytest.approx({'time': 0.35, 'cost': 0.30, 'comfort': 0.20, 'transfer': 0.15})


def test_scores_are_bounded(scorer, flushing_trip):
    candidates, context = flushing_trip
    for candidate in candidates.values():
        scored = scorer.score(candidate, PreferenceProfile(), context)
        assert 0 <= scored.score <= 10
        assert 0.0 <= scored.raw_score <= 1.0
        assert len(scored.segment_scores) == len(candidate.segments)
        assert all(0 <= s <= 10 for s in scored.segment_scores)


def test_walk_only_route_emits_no_co2(scorer, flushing_trip):
    candidates, context = flushing_trip
    assert scorer.score(candidates['walk'], PreferenceProfile(), context).co2 == 0
    assert scorer.score(candidates['taxi'], PreferenceProfile(), context).co2 > 0


def test_adjusted_durations(scorer, flushing_trip):
    candidates, context = flushing_trip
    taxi = scorer.score(candidates['taxi'], PreferenceProfile(), context)
    ride = candidates['taxi'].segments[1]
    assert taxi.adjusted_durations[1] == int(ride.duration * context.average_traffic + 0.5)
    subway = scorer.score(candidates['subway-direct'], PreferenceProfile(), context)
    assert subway.adjusted_durations[1] == candidates['subway-direct'].segments[1].duration
    assert subway.duration == sum(subway.adjusted_durations)


def test_traffic_surcharge_only_on_road_routes(scorer, flushing_trip):
    candidates, context = flushing_trip
    taxi = scorer.score(candidates['taxi'], PreferenceProfile(), context)
    assert taxi.traffic_level == 'high'
    assert taxi.cost_breakdown.additional_fees == pytest.approx(round(taxi.cost_breakdown.fare * 0.15, 2))
    subway = scorer.score(candidates['subway-direct'], PreferenceProfile(), context)
    assert subway.cost_breakdown.additional_fees == 0
    assert subway.traffic_level == 'low'


def test_bags_lower_comfort(scorer, flushing_trip):
    candidates, context = flushing_trip
    light = scorer.score(candidates['subway-direct'], PreferenceProfile(bags=0), context)
    heavy = scorer.score(candidates['subway-direct'], PreferenceProfile(bags=3), context)
    assert heavy.comfort_score < light.comfort_score
    assert heavy.comfort_score >= 0.1


def test_wheelchair_penalty_for_inaccessible_routes(scorer, flushing_trip):
    candidates, context = flushing_trip
    walk = candidates['walk']
    assert not walk.is_wheelchair_accessible
    plain = scorer.score(walk, PreferenceProfile(), context)
    penalised = scorer.score(walk, PreferenceProfile(wheelchair=True), context)
    assert penalised.raw_score == pytest.approx(plain.raw_score * 0.5)


def test_speed_priority_favours_faster_routes(scorer, flushing_trip):
    candidates, context = flushing_trip
    speed = PreferenceProfile(priority=Priority.SPEED)
    assert scorer.score(candidates['subway-uber'], speed, context).raw_score > \
        scorer.score(candidates['walk'], speed, context).raw_score



def test_score_color_and_traffic_level():
    assert score_color(2) == '#ef4444'
    assert score_color(10) == '#16a34a'
    assert traffic_level(1.0) == 'low'
    assert traffic_level(1.2) == 'medium'
    assert traffic_level(1.5) == 'high'


def test_parameters_validate():
    with pytest.raises(ValueError):
        ScoringParameters(t_max=0)
    with pytest.raises(ValueError):
        ScoringParameters(accessibility_penalty=1.5)
