import pytest

from beerouting.exceptions import DataGapError, ReferenceDataError
from beerouting.models.route_segments import Borough, Mode
from beerouting.modes import UNKNOWN_MODE, mode_spec, registered_modes
from beerouting.reference_data import load_reference_data


def test_every_borough_has_facts(reference):
    for borough in Borough:
        facts = reference.borough_facts(borough)
        assert facts.traffic_factor >= 1.0
        assert 0.0 <= facts.topology <= 1.0


def test_conditions_prefer_area_over_borough(reference, resolver):
    times_square = reference.conditions_for(resolver.resolve('Times Square'))
    assert (times_square.traffic_factor, times_square.topology, times_square.traffic_level) == (1.6, 0.1, 'high')
    assert reference.conditions_for(resolver.resolve('Bayside')).traffic_level == 'low'
    harlem = reference.conditions_for(resolver.resolve('Harlem'))
    assert harlem.traffic_factor == reference.borough_facts(Borough.MANHATTAN).traffic_factor


def test_area_listings(reference):
    assert reference.subway_lines('Flushing') == ('7',)
    assert reference.subway_lines('Bayside') == ()
    with pytest.raises(DataGapError):
        reference.subway_lines('Nowhere')
    with pytest.raises(DataGapError):
        reference.bus_routes('Main St')


def test_line_shapes_are_loaded_in_sequence(reference):
    shape = reference.shape_for('7')
    assert shape is not None
    assert len(shape.points) >= 2
    assert reference.shape_for('Z') is None
    assert reference.shape_for(None) is None


def test_express_services_are_symmetric(reference):
    there = reference.express_between(Borough.STATEN_ISLAND, Borough.MANHATTAN, 'ferry')
    back = reference.express_between(Borough.MANHATTAN, Borough.STATEN_ISLAND, 'ferry')
    assert [s.route_id for s in there] == [s.route_id for s in back] == ['SIF']
    assert reference.express_between(Borough.BRONX, Borough.STATEN_ISLAND) == []


def test_streets_are_grouped_by_borough(reference):
    for borough in Borough:
        assert reference.streets_in(borough)


def test_missing_data_dir_raises(tmp_path):
    with pytest.raises(ReferenceDataError):
        load_reference_data(str(tmp_path / 'missing'))


def test_every_mode_is_registered():
    assert set(registered_modes()) >= {m.value for m in Mode}
    assert mode_spec(Mode.WALK).emission_factor == 0
    assert mode_spec('bus').road_based
    assert mode_spec('hovercraft') is UNKNOWN_MODE
