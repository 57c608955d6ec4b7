"""Track analysis: racing line, safe zones and lap checkpoints from geometry.

Analysis is a pure function of its inputs.  The same geometry always yields
an equal :class:`TrackAnalysis`, so results can be cached per track and
shared between every AI car for the whole race.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from racing_ai.track.centerline import LaneModel
from racing_ai.track.detector import CornerDetector
from racing_ai.track.geometry import (
    add,
    distance,
    point_in_polygon,
    polygon_bounds,
    polygon_edges,
    polygon_self_intersects,
    scale,
    segments_intersect,
    signed_area,
)
from racing_ai.track.models import (
    Bounds,
    RacingDirection,
    RacingLinePoint,
    SafeZone,
    Segment,
    Side,
    TrackAnalysis,
    TrackGeometry,
    Vec,
)
from racing_ai.track.racing_line import RacingLineBuilder

_logger = logging.getLogger(__name__)

ZONE_INWARD_BIAS = 0.3
CHECKPOINT_COUNT = 4


class DegenerateTrackGeometry(ValueError):
    """The track polygons cannot be raced on (zero area, self-intersecting, ...)."""


class TrackAnalyzer:
    """Derive a :class:`TrackAnalysis` from a track's boundaries.

    Parameters
    ----------
    detector:
        Side/corner detector.  Defaults to :class:`CornerDetector` with
        standard thresholds.
    builder:
        Racing-line generator.  Defaults to :class:`RacingLineBuilder`.
    """

    def __init__(
        self,
        detector: CornerDetector | None = None,
        builder: RacingLineBuilder | None = None,
    ) -> None:
        self._detector = detector or CornerDetector()
        self._builder = builder or RacingLineBuilder()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze(
        self,
        outer: Sequence[Vec],
        inner: Sequence[Vec],
        start_line: Segment,
        racing_line: Sequence[RacingLinePoint] | None = None,
        racing_direction: RacingDirection | None = None,
    ) -> TrackAnalysis:
        """Analyze a track.

        Parameters
        ----------
        outer, inner:
            Boundary polygons (closing edge implied).
        start_line:
            Start/finish line.
        racing_line:
            Hand-placed waypoints to use instead of the generated line.
        racing_direction:
            Forces the rotational sense instead of inferring it from the
            winding of *outer*.

        Raises
        ------
        DegenerateTrackGeometry
            If either polygon or the start line is malformed.
        """
        outer = tuple(outer)
        inner = tuple(inner)
        validate_geometry(outer, inner, start_line)

        track_bounds = polygon_bounds(outer)
        inner_bounds = polygon_bounds(inner)
        direction = racing_direction or racing_direction_of(outer)

        lane = LaneModel(outer, inner, start_line, direction)
        sides = self._detector.sides(lane)
        corners = self._detector.detect(lane, sides)

        safe_zones = tuple(self._safe_zone(side, inner_bounds) for side in sides)
        if racing_line:
            line = tuple(racing_line)
        else:
            line = self._builder.build(lane, sides, corners)

        _logger.debug(
            "analyzed track: %s, %d sides, %d corners, %d waypoints",
            direction.value, len(sides), len(corners), len(line),
        )

        return TrackAnalysis(
            outer=outer,
            inner=inner,
            start_line=start_line,
            racing_direction=direction,
            racing_line=line,
            checkpoints=self._checkpoints(lane),
            safe_zones=safe_zones,
            track_bounds=track_bounds,
            inner_bounds=inner_bounds,
        )

    def analyze_track(self, track: TrackGeometry) -> TrackAnalysis:
        """Analyze a :class:`TrackGeometry`, honouring its racing-line override."""
        return self.analyze(track.outer, track.inner, track.start_line, track.racing_line)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _safe_zone(side: Side, inner_bounds: Bounds) -> SafeZone:
        """Rectangle between one side of the outer wall and the infield.

        The side's bounding box is stretched along the dominant axis of its
        inward normal until it meets the infield's bounding box, then shrunk
        by one unit so the walls themselves are excluded.
        """
        b = polygon_bounds(side.points)
        min_x, max_x, min_y, max_y = b.min_x, b.max_x, b.min_y, b.max_y
        n = side.inward
        if abs(n.x) >= abs(n.y):
            if n.x > 0:
                max_x = max(max_x, inner_bounds.min_x)
            else:
                min_x = min(min_x, inner_bounds.max_x)
        elif n.y > 0:
            max_y = max(max_y, inner_bounds.min_y)
        else:
            min_y = min(min_y, inner_bounds.max_y)

        if max_x - min_x > 2.0:
            min_x, max_x = min_x + 1.0, max_x - 1.0
        if max_y - min_y > 2.0:
            min_y, max_y = min_y + 1.0, max_y - 1.0

        return SafeZone(
            name=side.name,
            bounds=Bounds(min_x, max_x, min_y, max_y),
            direction=add(side.heading, scale(side.inward, ZONE_INWARD_BIAS)),
        )

    @staticmethod
    def _checkpoints(lane: LaneModel) -> tuple[Segment, ...]:
        """Gates across the lane at the quarter-lap marks.

        The last gate sits half a unit before the finish line so a lap can
        only be completed by driving the whole circuit.
        """
        marks = [lane.length * k / CHECKPOINT_COUNT for k in range(1, CHECKPOINT_COUNT)]
        marks.append(max(lane.length * (2 * CHECKPOINT_COUNT - 1) / (2 * CHECKPOINT_COUNT), lane.length - 0.5))
        gates = []
        for s in marks:
            o = lane.point_at(s)
            gates.append(Segment(o, lane.inner_point(o)))
        return tuple(gates)


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------

_default_analyzer = TrackAnalyzer()


def analyze(
    outer: Sequence[Vec],
    inner: Sequence[Vec],
    start_line: Segment,
    racing_line: Sequence[RacingLinePoint] | None = None,
    racing_direction: RacingDirection | None = None,
) -> TrackAnalysis:
    """Analyze a track with the default detector and builder."""
    return _default_analyzer.analyze(outer, inner, start_line, racing_line, racing_direction)


def racing_direction_of(outer: Sequence[Vec]) -> RacingDirection:
    """Rotational sense implied by the winding of the outer boundary.

    Tracks are raced against the order their outer vertices are listed in:
    a positive shoelace area (listed clockwise on screen) means
    counter-clockwise racing.
    """
    area = signed_area(outer)
    return RacingDirection.CLOCKWISE if area < 0 else RacingDirection.COUNTER_CLOCKWISE


def validate_geometry(outer: Sequence[Vec], inner: Sequence[Vec], start_line: Segment) -> None:
    """Raise :class:`DegenerateTrackGeometry` if the track cannot be analyzed."""
    for label, poly in (("outer", outer), ("inner", inner)):
        if any(not (math.isfinite(p.x) and math.isfinite(p.y)) for p in poly):
            raise DegenerateTrackGeometry(f"{label} boundary has non-finite coordinates")
        if len({(p.x, p.y) for p in poly}) < 3:
            raise DegenerateTrackGeometry(f"{label} boundary needs at least 3 distinct vertices")
        if abs(signed_area(poly)) < 1e-9:
            raise DegenerateTrackGeometry(f"{label} boundary has zero area")
        if polygon_self_intersects(poly):
            raise DegenerateTrackGeometry(f"{label} boundary is self-intersecting")

    if not all(point_in_polygon(p, outer) for p in inner):
        raise DegenerateTrackGeometry("inner boundary is not inside the outer boundary")
    outer_edges = polygon_edges(outer)
    for edge in polygon_edges(inner):
        if any(segments_intersect(edge, o) for o in outer_edges):
            raise DegenerateTrackGeometry("inner boundary touches the outer boundary")

    a, b = start_line.a, start_line.b
    if not all(math.isfinite(v) for v in (a.x, a.y, b.x, b.y)):
        raise DegenerateTrackGeometry("start line has non-finite coordinates")
    if distance(a, b) < 1e-9:
        raise DegenerateTrackGeometry("start line has zero length")
