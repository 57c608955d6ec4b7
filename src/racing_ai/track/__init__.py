"""Track geometry, analysis and racing-line targeting."""

from racing_ai.track.analyzer import DegenerateTrackGeometry, TrackAnalyzer, analyze
from racing_ai.track.centerline import LaneModel
from racing_ai.track.detector import CornerDetector
from racing_ai.track.direction import Crossing, crossing_direction, expected_direction
from racing_ai.track.models import (
    Bounds,
    Corner,
    CornerType,
    RacingDirection,
    RacingLinePoint,
    SafeZone,
    Segment,
    Side,
    TrackAnalysis,
    TrackGeometry,
    Vec,
    ZoneName,
)
from racing_ai.track.racing_line import RacingLineBuilder
from racing_ai.track.schemas import dump_racing_line, load_racing_line
from racing_ai.track.targeting import nearest_forward_waypoint
from racing_ai.track.tracks import DEFAULT_RACING_LINE, DEFAULT_START_POSITIONS, DEFAULT_TRACK

__all__ = [
    "Bounds",
    "Corner",
    "CornerDetector",
    "CornerType",
    "Crossing",
    "DEFAULT_RACING_LINE",
    "DEFAULT_START_POSITIONS",
    "DEFAULT_TRACK",
    "DegenerateTrackGeometry",
    "LaneModel",
    "RacingDirection",
    "RacingLineBuilder",
    "RacingLinePoint",
    "SafeZone",
    "Segment",
    "Side",
    "TrackAnalysis",
    "TrackAnalyzer",
    "TrackGeometry",
    "Vec",
    "ZoneName",
    "analyze",
    "crossing_direction",
    "dump_racing_line",
    "expected_direction",
    "load_racing_line",
    "nearest_forward_waypoint",
]
