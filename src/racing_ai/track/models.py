"""Track modeling data structures."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum


class RacingDirection(str, Enum):
    """Rotational sense of travel on a downward-Y screen."""

    CLOCKWISE = "clockwise"
    COUNTER_CLOCKWISE = "counter-clockwise"


class CornerType(str, Enum):
    """Role of a racing-line waypoint."""

    STRAIGHT = "straight"
    ENTRY = "entry"
    APEX = "apex"
    EXIT = "exit"


class ZoneName(str, Enum):
    """Which side of the track a safe zone covers."""

    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


@dataclass(frozen=True)
class Vec:
    """A 2D point or direction in grid units (Y grows downward)."""

    x: float
    """X coordinate."""

    y: float
    """Y coordinate."""


@dataclass(frozen=True)
class Segment:
    """An oriented line from *a* to *b*."""

    a: Vec
    """Start point."""

    b: Vec
    """End point."""


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned rectangle, inclusive on every edge."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float

    def contains(self, p: Vec) -> bool:
        return self.min_x <= p.x <= self.max_x and self.min_y <= p.y <= self.max_y

    @property
    def center(self) -> Vec:
        return Vec((self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0)


@dataclass(frozen=True)
class RacingLinePoint:
    """One waypoint on the idealized racing line."""

    pos: Vec
    """Waypoint position."""

    target_speed: float
    """Speed the car should carry through this point (> 0)."""

    brake_zone: bool
    """True when the car should be shedding speed for an upcoming corner."""

    corner_type: CornerType
    """``straight``, ``entry``, ``apex`` or ``exit``."""

    safe_zone: ZoneName
    """Side of the track this waypoint belongs to."""


@dataclass(frozen=True)
class SafeZone:
    """A rectangular track region with one dominant travel direction."""

    name: ZoneName
    bounds: Bounds
    direction: Vec


@dataclass(frozen=True)
class Side:
    """A run of outer-boundary edges with a roughly constant heading."""

    start_s: float
    """Arc position where the side begins (wrapped to ``[0, lap length)``)."""

    length: float
    """Arc length of the side."""

    heading: Vec
    """Unit travel direction along the side's chord."""

    inward: Vec
    """Unit normal pointing from the outer boundary toward the infield."""

    points: tuple[Vec, ...]
    """Boundary vertices along the side, first to last in travel order."""

    @property
    def name(self) -> ZoneName:
        """Which side of the track this is, judged by where the infield lies."""
        n = self.inward
        if abs(n.x) >= abs(n.y):
            return ZoneName.LEFT if n.x > 0 else ZoneName.RIGHT
        return ZoneName.TOP if n.y > 0 else ZoneName.BOTTOM


@dataclass(frozen=True)
class Corner:
    """A detected corner of the travel ring, located by arc length.

    Phase layout (all values are arc positions along the lane):

    ::

        entry_s ──[Entry]── apex_s ──[Exit]── exit_s

    ``exit_s`` may be smaller than ``entry_s`` when the corner wraps past
    the start of the lap.
    """

    id: int
    """Sequential corner number (1-based, in travel order)."""

    entry_s: float
    """Arc position where the car should be on the outside, braking."""

    apex_s: float
    """Arc position of the turn vertex."""

    exit_s: float
    """Arc position where the car is back on the outside line."""

    direction: str
    """Turn direction on screen: ``'L'`` or ``'R'``."""

    angle: float
    """Heading change through the corner, radians (always positive)."""

    inward: bool
    """True when the corner turns toward the infield."""


@dataclass(frozen=True)
class TrackGeometry:
    """Static description of a track as drawn by the editor.

    Instances are hashable and serve as the cache key for analyses.
    """

    outer: tuple[Vec, ...]
    """Outer boundary polygon."""

    inner: tuple[Vec, ...]
    """Inner hole polygon."""

    start_line: Segment
    """Start/finish line."""

    name: str = "custom"
    """Display name."""

    racing_line: tuple[RacingLinePoint, ...] | None = None
    """Hand-placed waypoints used instead of the generated racing line."""


@dataclass(frozen=True)
class TrackAnalysis:
    """Everything the AI derives from a track's geometry.

    Read-only once built; safe to share across cars and turns.
    """

    outer: tuple[Vec, ...]
    inner: tuple[Vec, ...]
    start_line: Segment
    racing_direction: RacingDirection
    racing_line: tuple[RacingLinePoint, ...]
    """Cyclic sequence of waypoints in travel order."""

    checkpoints: tuple[Segment, ...]
    """Lap-validation gates in travel order, starting after the start line."""

    safe_zones: tuple[SafeZone, ...]
    track_bounds: Bounds
    inner_bounds: Bounds

    def to_dict(self) -> dict:
        """JSON-ready dict; enums become their string values."""
        d = asdict(self)
        d["racing_direction"] = self.racing_direction.value
        for wp, src in zip(d["racing_line"], self.racing_line):
            wp["corner_type"] = src.corner_type.value
            wp["safe_zone"] = src.safe_zone.value
        for zone, src in zip(d["safe_zones"], self.safe_zones):
            zone["name"] = src.name.value
        return d
