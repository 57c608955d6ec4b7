"""Locally expected direction of travel.

The answer comes from the safe zone holding the point.  Outside every zone
it is inferred from which side of the track the point is on, and as a last
resort from the racing line or the outer boundary.  The result is never the
zero vector.
"""

from __future__ import annotations

from enum import Enum

from racing_ai.track.geometry import (
    add,
    dot,
    length,
    lerp,
    normalize,
    point_segment_distance,
    scale,
    segments_intersect,
    signed_area,
    sub,
)
from racing_ai.track.models import RacingDirection, Segment, TrackAnalysis, Vec

FALLBACK_INWARD_BIAS = 0.3


class Crossing(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


def expected_direction(pos: Vec, analysis: TrackAnalysis) -> Vec:
    """Forward-travel vector at *pos* (not necessarily unit length)."""
    for zone in analysis.safe_zones:
        if zone.bounds.contains(pos):
            return zone.direction

    direction = _side_of_center_direction(pos, analysis)
    if direction is not None:
        return direction

    direction = _racing_line_tangent(pos, analysis)
    if direction is not None:
        return direction

    return _boundary_tangent(analysis)


def crossing_direction(
    from_pos: Vec,
    to_pos: Vec,
    gate: Segment,
    analysis: TrackAnalysis,
) -> Crossing | None:
    """Whether the move *from_pos* → *to_pos* crosses *gate*, and which way.

    Returns None when the move does not touch the gate or runs along it.
    """
    if not segments_intersect(Segment(from_pos, to_pos), gate):
        return None
    forward = expected_direction(lerp(gate.a, gate.b, 0.5), analysis)
    d = dot(sub(to_pos, from_pos), forward)
    if d > 0:
        return Crossing.FORWARD
    if d < 0:
        return Crossing.BACKWARD
    return None


# ---------------------------------------------------------------------------
# Fallbacks
# ---------------------------------------------------------------------------


def _side_of_center_direction(pos: Vec, analysis: TrackAnalysis) -> Vec | None:
    """Travel direction for the side of the track nearest *pos*.

    The offset from the centre of the track bounds is scaled by the
    half-extents, and its dominant axis picks the side.  Travel runs along
    that side, biased slightly toward the infield.
    """
    b = analysis.track_bounds
    c = b.center
    half_w = max((b.max_x - b.min_x) / 2.0, 1e-9)
    half_h = max((b.max_y - b.min_y) / 2.0, 1e-9)
    ox = (pos.x - c.x) / half_w
    oy = (pos.y - c.y) / half_h
    if ox == 0 and oy == 0:
        return None

    if abs(ox) >= abs(oy):
        axis = Vec(1.0 if ox > 0 else -1.0, 0.0)
    else:
        axis = Vec(0.0, 1.0 if oy > 0 else -1.0)

    if analysis.racing_direction is RacingDirection.COUNTER_CLOCKWISE:
        tangent = Vec(axis.y, -axis.x)
    else:
        tangent = Vec(-axis.y, axis.x)
    return add(tangent, scale(axis, -FALLBACK_INWARD_BIAS))


def _racing_line_tangent(pos: Vec, analysis: TrackAnalysis) -> Vec | None:
    line = analysis.racing_line
    n = len(line)
    best: Vec | None = None
    best_d = float("inf")
    for i in range(n):
        a, b = line[i].pos, line[(i + 1) % n].pos
        chord = sub(b, a)
        if length(chord) < 1e-9:
            continue
        d = point_segment_distance(pos, Segment(a, b))
        if d < best_d:
            best, best_d = normalize(chord), d
    return best


def _boundary_tangent(analysis: TrackAnalysis) -> Vec:
    outer = analysis.outer
    listed_clockwise = signed_area(outer) > 0
    reverse = listed_clockwise != (analysis.racing_direction is RacingDirection.CLOCKWISE)
    for i in range(len(outer)):
        a, b = outer[i], outer[(i + 1) % len(outer)]
        if reverse:
            a, b = b, a
        chord = sub(b, a)
        if length(chord) >= 1e-9:
            return normalize(chord)
    return Vec(1.0, 0.0)
