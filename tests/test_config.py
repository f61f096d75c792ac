import pytest

from beerouting.config import DEFAULT_DATA_DIR, Config
from beerouting.scoring import ScoringParameters


def test_defaults(monkeypatch):
    for name in ('DATA_DIR', 'TRANSIT_API_URL', 'MAX_ROUTES', 'MIN_ROUTES', 'RANDOM_SEED', 'SCORING_T_MAX'):
        monkeypatch.delenv(name, raising=False)
    cfg = Config()
    cfg.validate()
    assert cfg.data_dir == DEFAULT_DATA_DIR
    assert cfg.get_provider_config() == {'base_url': '', 'timeout': 2.0}
    assert cfg.get_ranking_config() == {'max_routes': 6, 'min_routes': 3}
    assert cfg.random_seed is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv('MAX_ROUTES', '4')
    monkeypatch.setenv('RANDOM_SEED', '99')
    monkeypatch.setenv('SCORING_C_MAX', '50')
    cfg = Config()
    assert cfg.get_ranking_config()['max_routes'] == 4
    assert cfg.random_seed == 99
    assert ScoringParameters.from_config(cfg).c_max == 50.0


@pytest.mark.parametrize('name, value', [
    ('MIN_ROUTES', '0'),
    ('TRANSIT_API_TIMEOUT', '0'),
    ('DATA_DIR', '/definitely/not/here'),
])
def test_validate_rejects_bad_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        Config().validate()
