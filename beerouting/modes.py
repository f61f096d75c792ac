"""
Mode registry: one ModeSpec per travel mode.

Rendering style, emission factor, traffic/topology sensitivity, default
accessibility and the path strategy name all come from here, so adding a mode
means adding one registration.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from .models.route_segments import Mode


@dataclass(frozen=True)
class ModeSpec:
    mode: str
    color: str
    emission_factor: float          # grams CO2 per km
    path_strategy: str
    weight: int = 5
    dash_array: Optional[str] = None
    road_based: bool = False        # duration scales with traffic
    active: bool = False            # duration/comfort scale with topology
    accessible: bool = False


UNKNOWN_MODE = ModeSpec(mode='unknown', color='#ef4444', emission_factor=100.0, path_strategy='curve')

_REGISTRY: Dict[str, ModeSpec] = {}


def register_mode(spec: ModeSpec) -> ModeSpec:
    _REGISTRY[spec.mode] = spec
    return spec


def mode_spec(mode) -> ModeSpec:
    """Registered spec for a mode (enum or string), UNKNOWN_MODE otherwise"""
    key = mode.value if isinstance(mode, Mode) else str(mode)
    return _REGISTRY.get(key, UNKNOWN_MODE)


def registered_modes():
    return list(_REGISTRY)


register_mode(ModeSpec('walk', '#6b7280', 0.0, 'street', weight=4, dash_array='4,4', active=True))
register_mode(ModeSpec('subway', '#3b82f6', 30.0, 'line_shape', weight=6))
register_mode(ModeSpec('bus', '#22c55e', 70.0, 'line_shape', road_based=True, accessible=True))
register_mode(ModeSpec('bike', '#8b5cf6', 0.0, 'cycle', active=True))
register_mode(ModeSpec('ebike', '#8b5cf6', 5.0, 'cycle', active=True))
register_mode(ModeSpec('taxi', '#f59e0b', 150.0, 'drive', road_based=True))
register_mode(ModeSpec('uber', '#f59e0b', 150.0, 'drive', road_based=True))
register_mode(ModeSpec('shared', '#f59e0b', 90.0, 'drive', road_based=True))
register_mode(ModeSpec('ferry', '#0ea5e9', 120.0, 'curve', weight=5, dash_array='8,6', accessible=True))
