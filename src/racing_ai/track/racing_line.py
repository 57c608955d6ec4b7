"""Racing-line generation from detected sides and corners.

Every corner contributes an outside-inside-outside triple (``entry``,
``apex``, ``exit``); the straights between corners are filled with
centre-line waypoints.  Target speeds follow from the corner radius the
line can hold under grid physics, where a car can change speed by one unit
per turn.
"""

from __future__ import annotations

import math

from racing_ai.track.centerline import LaneModel
from racing_ai.track.detector import bisector_normal
from racing_ai.track.models import Corner, CornerType, RacingLinePoint, Side, Vec, ZoneName

MIN_SPEED = 1.5
MAX_SPEED = 5.0


class RacingLineBuilder:
    """Generate an ordered, cyclic racing line for a lane.

    Args:
        straight_spacing: Maximum spacing between straight waypoints.
        min_straight_gap: Straights shorter than this get no waypoints.
        outside_line: Lane fraction used for entry/exit on an infield turn.
        inside_line: Lane fraction used for the apex on an infield turn.
        braking: Speed units shed per unit of travel when computing how fast
            a straight may be driven before the next corner.
    """

    def __init__(
        self,
        straight_spacing: float = 7.0,
        min_straight_gap: float = 2.0,
        outside_line: float = 0.25,
        inside_line: float = 0.65,
        braking: float = 1.0,
    ) -> None:
        self.straight_spacing = straight_spacing
        self.min_straight_gap = min_straight_gap
        self.outside_line = outside_line
        self.inside_line = inside_line
        self.braking = braking

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(
        self,
        lane: LaneModel,
        sides: list[Side],
        corners: list[Corner],
    ) -> tuple[RacingLinePoint, ...]:
        """Build the racing line, ordered by arc position from the start line.

        Args:
            lane: Lane model of the track.
            sides: Sides from :meth:`CornerDetector.sides`, used for zone labels.
            corners: Corners from :meth:`CornerDetector.detect`.

        Returns:
            Tuple of :class:`RacingLinePoint`.  ``brake_zone`` is set on every
            ``entry`` waypoint and on the waypoint just before it.
        """
        placed: list[tuple[float, Vec, CornerType, float]] = []

        for corner in corners:
            placed.extend(self._corner_points(lane, corner))

        for s, pos, speed in self._straight_points(lane, corners):
            placed.append((s, pos, CornerType.STRAIGHT, speed))

        placed.sort(key=lambda item: item[0])

        n = len(placed)
        braking = [False] * n
        for i, (_, _, kind, _) in enumerate(placed):
            if kind is CornerType.ENTRY:
                braking[i] = True
                braking[(i - 1) % n] = True

        return tuple(
            RacingLinePoint(
                pos=pos,
                target_speed=round(speed, 3),
                brake_zone=braking[i],
                corner_type=kind,
                safe_zone=self._zone_at(lane, sides, s),
            )
            for i, (s, pos, kind, speed) in enumerate(placed)
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _corner_points(
        self, lane: LaneModel, corner: Corner
    ) -> list[tuple[float, Vec, CornerType, float]]:
        if corner.inward:
            u_out, u_in = self.outside_line, self.inside_line
        else:
            u_out, u_in = 1.0 - self.outside_line, 1.0 - self.inside_line

        apex_speed = self._apex_speed(lane, corner)
        return [
            (corner.entry_s, lane.lane_point(corner.entry_s, u_out), CornerType.ENTRY, apex_speed + 0.5),
            (
                corner.apex_s,
                lane.lane_point(corner.apex_s, u_in, bisector_normal(lane, corner)),
                CornerType.APEX,
                apex_speed,
            ),
            (corner.exit_s, lane.lane_point(corner.exit_s, u_out), CornerType.EXIT, apex_speed + 1.0),
        ]

    @staticmethod
    def _apex_speed(lane: LaneModel, corner: Corner) -> float:
        """Speed at which a car can hold the arc through the corner.

        The arc is tangent to both sides at the entry and exit points, so its
        radius is ``T / tan(θ / 2)`` for tangent length ``T``.
        """
        tangent_len = (
            lane.ahead(corner.entry_s, corner.apex_s) + lane.ahead(corner.apex_s, corner.exit_s)
        ) / 2.0
        half = corner.angle / 2.0
        if half >= math.pi / 2 - 1e-6:
            return MIN_SPEED
        radius = tangent_len / math.tan(half)
        return max(MIN_SPEED, min(MAX_SPEED, math.sqrt(radius)))

    def _straight_points(
        self, lane: LaneModel, corners: list[Corner]
    ) -> list[tuple[float, Vec, float]]:
        if not corners:
            count = max(1, int(lane.length // self.straight_spacing))
            return [
                (s, lane.lane_point(s, 0.5), MAX_SPEED)
                for s in (lane.length * k / count for k in range(count))
            ]

        points: list[tuple[float, Vec, float]] = []
        m = len(corners)
        for k in range(m):
            start = corners[k].exit_s
            nxt = corners[(k + 1) % m]
            gap = lane.ahead(start, nxt.entry_s)
            if gap < self.min_straight_gap:
                continue
            count = max(1, int(gap // self.straight_spacing))
            entry_speed = self._apex_speed(lane, nxt) + 0.5
            for j in range(1, count + 1):
                s = lane.wrap(start + gap * j / (count + 1))
                to_entry = lane.ahead(s, nxt.entry_s)
                speed = min(MAX_SPEED, math.sqrt(entry_speed ** 2 + 2.0 * self.braking * to_entry))
                points.append((s, lane.lane_point(s, 0.5), speed))
        return points

    @staticmethod
    def _zone_at(lane: LaneModel, sides: list[Side], s: float) -> ZoneName:
        for side in sides:
            if lane.ahead(side.start_s, s) < side.length:
                return side.name
        return sides[0].name
