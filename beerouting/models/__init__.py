from .route_segments import (
    Borough,
    Candidate,
    ComfortTier,
    Coordinate,
    CostBreakdown,
    CycleSegment,
    LineStatus,
    Location,
    Mode,
    PathGeometry,
    PreferenceProfile,
    Priority,
    RideSegment,
    ScoredCandidate,
    Segment,
    Sensitivity,
    SubScores,
    TransitSegment,
    WalkSegment,
)

__all__ = [
    'Borough', 'Candidate', 'ComfortTier', 'Coordinate', 'CostBreakdown', 'CycleSegment',
    'LineStatus', 'Location', 'Mode', 'PathGeometry', 'PreferenceProfile', 'Priority',
    'RideSegment', 'ScoredCandidate', 'Segment', 'Sensitivity', 'SubScores',
    'TransitSegment', 'WalkSegment',
]
