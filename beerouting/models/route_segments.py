from dataclasses import dataclass, field, replace
from enum import Enum
from typing import ClassVar, FrozenSet, List, Optional, Tuple

import polyline as _poly


class Mode(str, Enum):
    WALK = 'walk'
    SUBWAY = 'subway'
    BUS = 'bus'
    BIKE = 'bike'
    EBIKE = 'ebike'
    TAXI = 'taxi'
    UBER = 'uber'
    SHARED = 'shared'
    FERRY = 'ferry'


class Borough(str, Enum):
    MANHATTAN = 'Manhattan'
    BROOKLYN = 'Brooklyn'
    QUEENS = 'Queens'
    BRONX = 'Bronx'
    STATEN_ISLAND = 'Staten Island'


class ComfortTier(str, Enum):
    HIGH = 'high'
    MEDIUM = 'medium'
    LOW = 'low'


class Priority(str, Enum):
    SPEED = 'speed'
    COST = 'cost'
    COMFORT = 'comfort'
    BALANCED = 'balanced'


class Sensitivity(str, Enum):
    LOW = 'low'
    MODERATE = 'moderate'
    HIGH = 'high'


@dataclass(frozen=True)
class Coordinate:
    """A resolved (lat, lon) pair"""
    lat: float
    lon: float

    def as_list(self) -> List[float]:
        return [self.lat, self.lon]


@dataclass(frozen=True)
class Location:
    """A named place with its resolved coordinate, curated area key and borough"""
    name: str
    coordinate: Coordinate
    area: str
    borough: Borough


NOT_OPERATING = frozenset({'suspended', 'closed', 'no service'})


@dataclass(frozen=True)
class LineStatus:
    """Operational status of one subway line as reported by the transit provider"""
    line: str
    status: str = 'normal'
    delay: int = 0
    crowd_level: str = 'medium'
    accessible: bool = False

    @property
    def is_operating(self) -> bool:
        return self.status.lower() not in NOT_OPERATING


@dataclass(frozen=True)
class PreferenceProfile:
    """Rider preferences supplied once per request"""
    priority: Priority = Priority.BALANCED
    noise: Sensitivity = Sensitivity.MODERATE
    safety: Sensitivity = Sensitivity.MODERATE
    bags: int = 0
    wheelchair: bool = False

    def __post_init__(self):
        if self.bags < 0:
            raise ValueError("Luggage count must be non-negative")


@dataclass(frozen=True)
class Segment:
    """One leg of travel; use the mode-specific subclasses below"""
    start: Location
    end: Location
    duration: int
    cost: float
    mode: Optional[Mode] = None
    label: str = ''
    accessible: bool = False
    crowd_level: str = 'medium'

    ALLOWED_MODES: ClassVar[FrozenSet[Mode]] = frozenset(Mode)
    DEFAULT_MODE: ClassVar[Optional[Mode]] = None

    def __post_init__(self):
        if self.mode is None:
            object.__setattr__(self, 'mode', self.DEFAULT_MODE)
        if self.mode is None or Mode(self.mode) not in self.ALLOWED_MODES:
            raise ValueError(f"{type(self).__name__} does not accept mode {self.mode!r}")
        object.__setattr__(self, 'mode', Mode(self.mode))
        if self.duration <= 0:
            raise ValueError(f"Segment duration must be positive, got {self.duration}")
        if self.cost < 0:
            raise ValueError(f"Segment cost must be non-negative, got {self.cost}")

    @property
    def line(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class WalkSegment(Segment):
    """Represents a walking segment"""
    ALLOWED_MODES: ClassVar[FrozenSet[Mode]] = frozenset({Mode.WALK})
    DEFAULT_MODE: ClassVar[Optional[Mode]] = Mode.WALK


@dataclass(frozen=True)
class TransitSegment(Segment):
    """Represents a fixed-route leg (subway, bus, ferry) on an identified line"""
    line_id: Optional[str] = None

    ALLOWED_MODES: ClassVar[FrozenSet[Mode]] = frozenset({Mode.SUBWAY, Mode.BUS, Mode.FERRY})
    DEFAULT_MODE: ClassVar[Optional[Mode]] = Mode.SUBWAY

    @property
    def line(self) -> Optional[str]:
        return self.line_id


@dataclass(frozen=True)
class CycleSegment(Segment):
    """Represents a docked bike or e-bike ride"""
    ALLOWED_MODES: ClassVar[FrozenSet[Mode]] = frozenset({Mode.BIKE, Mode.EBIKE})
    DEFAULT_MODE: ClassVar[Optional[Mode]] = Mode.EBIKE


@dataclass(frozen=True)
class RideSegment(Segment):
    """Represents a car ride: taxi, rideshare or shared ride"""
    ALLOWED_MODES: ClassVar[FrozenSet[Mode]] = frozenset({Mode.TAXI, Mode.UBER, Mode.SHARED})
    DEFAULT_MODE: ClassVar[Optional[Mode]] = Mode.UBER


@dataclass(frozen=True)
class Candidate:
    """Complete itinerary with all segments, before scoring"""
    id: str
    name: str
    segments: Tuple[Segment, ...]
    comfort: ComfortTier = ComfortTier.MEDIUM
    kind: str = ''

    def __post_init__(self):
        object.__setattr__(self, 'segments', tuple(self.segments))
        if not self.segments:
            raise ValueError(f"Candidate {self.name!r} has no segments")
        for current, following in zip(self.segments[:-1], self.segments[1:]):
            if current.end.name != following.start.name:
                raise ValueError(
                    f"Candidate {self.name!r} is not contiguous: "
                    f"{current.end.name!r} != {following.start.name!r}")

    @property
    def num_transfers(self) -> int:
        return len(self.segments) - 1

    @property
    def is_wheelchair_accessible(self) -> bool:
        return all(seg.accessible for seg in self.segments)

    @property
    def modes(self) -> Tuple[Mode, ...]:
        return tuple(seg.mode for seg in self.segments)

    @property
    def raw_duration(self) -> int:
        return sum(seg.duration for seg in self.segments)

    @property
    def fare(self) -> float:
        return round(sum(seg.cost for seg in self.segments), 2)

    @property
    def signature(self) -> Tuple[Tuple[str, str], ...]:
        """Mode/label sequence used to spot duplicate itineraries"""
        return tuple((seg.mode.value, seg.label) for seg in self.segments)

    def renamed(self, name: str, candidate_id: Optional[str] = None) -> 'Candidate':
        return replace(self, name=name, id=candidate_id if candidate_id is not None else self.id)


@dataclass(frozen=True)
class CostBreakdown:
    fare: float
    additional_fees: float = 0.0

    @property
    def total(self) -> float:
        return round(self.fare + self.additional_fees, 2)


@dataclass(frozen=True)
class SubScores:
    time: float
    cost: float
    comfort: float
    transfer: float


@dataclass(frozen=True)
class ScoredCandidate:
    """Candidate plus everything the scorer derived for it; immutable once built"""
    candidate: Candidate
    adjusted_durations: Tuple[int, ...]
    cost_breakdown: CostBreakdown
    sub_scores: SubScores
    raw_score: float
    score: int
    co2: float
    traffic_impact: float
    traffic_level: str
    has_topology_impact: bool
    segment_scores: Tuple[int, ...] = field(default_factory=tuple)

    @property
    def id(self) -> str:
        return self.candidate.id

    @property
    def name(self) -> str:
        return self.candidate.name

    @property
    def duration(self) -> int:
        return sum(self.adjusted_durations)

    @property
    def cost(self) -> float:
        return self.cost_breakdown.total

    @property
    def comfort_score(self) -> float:
        return self.sub_scores.comfort

    @property
    def is_wheelchair_accessible(self) -> bool:
        return self.candidate.is_wheelchair_accessible

    def renamed(self, name: str, candidate_id: Optional[str] = None) -> 'ScoredCandidate':
        return replace(self, candidate=self.candidate.renamed(name, candidate_id))


@dataclass(frozen=True)
class PathGeometry:
    """Drawable polyline for one segment"""
    mode: Mode
    points: Tuple[Coordinate, ...]
    color: str
    weight: int = 4
    dash_array: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'points', tuple(self.points))
        if len(self.points) < 2:
            raise ValueError("A path needs at least two points")

    def encoded(self) -> str:
        """Google encoded-polyline form of the points"""
        return _poly.encode([(p.lat, p.lon) for p in self.points])

    def to_dict(self) -> dict:
        return {
            'type': self.mode.value,
            'color': self.color,
            'weight': self.weight,
            'dashArray': self.dash_array,
            'points': [p.as_list() for p in self.points],
            'encoded': self.encoded(),
        }
