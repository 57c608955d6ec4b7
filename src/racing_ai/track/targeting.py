"""Selection of the next racing-line waypoint to aim for.

A plain nearest-point search happily picks a waypoint behind the car, which
sends it the wrong way round or leaves it dithering on the grid.  Every
candidate is therefore scored by how well the direction to it agrees with
the locally expected travel direction, and only then by distance.
"""

from __future__ import annotations

from racing_ai.track.direction import expected_direction
from racing_ai.track.geometry import distance, dot, normalize, sub
from racing_ai.track.models import RacingLinePoint, TrackAnalysis, Vec

MIN_TARGET_DISTANCE = 0.1
ALIGNMENT_THRESHOLD = 0.3


def waypoint_score(pos: Vec, waypoint: RacingLinePoint, forward: Vec) -> float | None:
    """Score one waypoint as a target from *pos*.

    Args:
        pos: Car position.
        waypoint: Candidate waypoint.
        forward: Expected travel direction at *pos*, as given by the
            direction oracle (not necessarily unit length).

    Returns:
        The score, or None if the waypoint is too close to target.
    """
    d = distance(pos, waypoint.pos)
    if d < MIN_TARGET_DISTANCE:
        return None

    alignment = dot(normalize(sub(waypoint.pos, pos)), forward)
    if alignment <= ALIGNMENT_THRESHOLD:
        return -100.0 - d

    score = alignment * 100.0
    if 2.0 <= d <= 8.0:
        score += (8.0 - abs(d - 5.0)) * 10.0
    elif 8.0 < d <= 15.0:
        score += (15.0 - d) * 2.0
    elif d > 15.0:
        score -= d
    if d < 3.0:
        score += 20.0
    return score


def nearest_forward_waypoint(pos: Vec, analysis: TrackAnalysis) -> RacingLinePoint:
    """Best waypoint to steer for from *pos*.

    Waypoints ahead (alignment above 0.3) always outrank those behind or to
    the side.  Ties go to the earliest waypoint in racing-line order.

    Raises:
        ValueError: If the racing line is empty.
    """
    if not analysis.racing_line:
        raise ValueError("racing line has no waypoints")

    forward = expected_direction(pos, analysis)
    best: RacingLinePoint | None = None
    best_score = float("-inf")
    for waypoint in analysis.racing_line:
        score = waypoint_score(pos, waypoint, forward)
        if score is not None and score > best_score:
            best, best_score = waypoint, score

    # Only reachable when the car sits on every waypoint at once
    return best if best is not None else analysis.racing_line[0]
