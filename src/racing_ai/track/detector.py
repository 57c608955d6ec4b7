"""Side grouping and corner detection on the travel-ordered outer ring.

Consecutive boundary edges whose heading stays roughly constant are grouped
into *sides*; the junction between two sides is a *corner*.  Each corner is
given an entry / apex / exit division along the lane, mirroring the way a
driver brakes on the outside, clips the inside and drifts back out.
"""

from __future__ import annotations

import math
from dataclasses import replace

from racing_ai.track.centerline import LaneModel
from racing_ai.track.geometry import cross, distance, dot, length, normalize, sub
from racing_ai.track.models import Corner, RacingDirection, Side, Vec

# ---------------------------------------------------------------------------
# Geometry primitives
# ---------------------------------------------------------------------------

def _angle_between(a: Vec, b: Vec) -> float:
    """Unsigned angle between two unit vectors, radians."""
    return math.acos(max(-1.0, min(1.0, dot(a, b))))


def _signed_turn(a: Vec, b: Vec) -> float:
    """Signed heading change from *a* to *b* (positive when ``a × b > 0``)."""
    return math.atan2(cross(a, b), dot(a, b))


# ---------------------------------------------------------------------------
# Corner detector
# ---------------------------------------------------------------------------

class CornerDetector:
    """Split the outer ring into sides and locate the corners between them.

    Args:
        side_tolerance_deg: An edge joins the current side while its heading
            stays within this angle of the side's first edge.
        min_turn_deg: Junctions turning less than this are treated as a kink
            in a straight, not a corner.
        min_side_length: Sides shorter than this are folded into the corner
            around them (e.g. a chamfered rectangle corner).
        entry_fraction: Braking distance before the apex as a fraction of the
            lane width at the apex.
        exit_fraction: Run-out distance after the apex as a fraction of the
            lane width at the apex.
        max_side_share: Entry/exit may use at most this share of the
            neighbouring side, so consecutive corners never overlap.
    """

    def __init__(
        self,
        side_tolerance_deg: float = 30.0,
        min_turn_deg: float = 20.0,
        min_side_length: float = 3.0,
        entry_fraction: float = 0.5,
        exit_fraction: float = 0.8,
        max_side_share: float = 0.45,
    ) -> None:
        self.side_tolerance = math.radians(side_tolerance_deg)
        self.min_turn = math.radians(min_turn_deg)
        self.min_side_length = min_side_length
        self.entry_fraction = entry_fraction
        self.exit_fraction = exit_fraction
        self.max_side_share = max_side_share

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def sides(self, lane: LaneModel) -> list[Side]:
        """Group the ring's edges into sides, in travel order.

        The first side returned is the one holding ``s = 0`` (the start line).
        """
        pts = lane.points
        n = len(pts)
        groups: list[list[int]] = []
        first_heading: Vec | None = None

        for i in range(n):
            seg = lane.edge(i)
            if distance(seg.a, seg.b) < 1e-9:
                continue
            heading = normalize(sub(seg.b, seg.a))
            if first_heading is not None and _angle_between(first_heading, heading) <= self.side_tolerance:
                groups[-1].append(i)
            else:
                groups.append([i])
                first_heading = heading

        # The start line usually splits one side in two: rejoin it
        if len(groups) > 1:
            head = self._chord(lane, groups[0])
            tail = self._chord(lane, groups[-1])
            if _angle_between(head, tail) <= self.side_tolerance:
                groups[0] = groups.pop() + groups[0]

        return [self._build_side(lane, g) for g in groups]

    def detect(self, lane: LaneModel, sides: list[Side] | None = None) -> list[Corner]:
        """Locate the corners of *lane*, in travel order starting after ``s = 0``.

        Args:
            lane: The lane model of the track.
            sides: Pre-computed result of :meth:`sides`; computed if omitted.

        Returns:
            List of :class:`Corner` with 1-based ids.  Empty if the ring has
            fewer than two sides.
        """
        if sides is None:
            sides = self.sides(lane)
        long_sides = [sd for sd in sides if sd.length >= self.min_side_length]
        if len(long_sides) < 2:
            long_sides = sides
        if len(long_sides) < 2:
            return []

        corners: list[Corner] = []
        m = len(long_sides)
        for k in range(m):
            approach = long_sides[k]
            departure = long_sides[(k + 1) % m]
            corner = self._build_corner(lane, approach, departure)
            if corner is not None:
                corners.append(corner)

        corners.sort(key=lambda c: c.apex_s)
        return [replace(c, id=cid) for cid, c in enumerate(corners, start=1)]

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _chord(lane: LaneModel, group: list[int]) -> Vec:
        return normalize(sub(lane.edge(group[-1]).b, lane.edge(group[0]).a))

    def _build_side(self, lane: LaneModel, group: list[int]) -> Side:
        first = lane.edge(group[0])
        heading = self._chord(lane, group)
        points = [first.a] + [lane.edge(i).b for i in group]
        side_len = sum(distance(lane.edge(i).a, lane.edge(i).b) for i in group)
        return Side(
            start_s=lane.arc[group[0]],
            length=side_len,
            heading=heading,
            inward=lane.inward_of(heading),
            points=tuple(points),
        )

    def _build_corner(self, lane: LaneModel, approach: Side, departure: Side) -> Corner | None:
        """Corner joining *approach* to *departure*, or None for a shallow kink."""
        turn = _signed_turn(approach.heading, departure.heading)
        if abs(turn) < self.min_turn:
            return None

        end_s = approach.start_s + approach.length
        gap = lane.ahead(end_s, departure.start_s)
        apex_s = lane.wrap(end_s + gap / 2.0)

        apex_pt = lane.point_at(apex_s)
        width = lane.width_at(apex_pt)
        d_in = min(max(self.entry_fraction * width, 1.5), self.max_side_share * approach.length)
        d_out = min(max(self.exit_fraction * width, 1.5), self.max_side_share * departure.length)

        # Turning toward the infield is a left turn on screen for
        # counter-clockwise racing and a right turn for clockwise racing
        left = turn < 0
        inward = left if lane.direction is RacingDirection.COUNTER_CLOCKWISE else not left

        return Corner(
            id=0,
            entry_s=lane.wrap(apex_s - gap / 2.0 - d_in),
            apex_s=apex_s,
            exit_s=lane.wrap(apex_s + gap / 2.0 + d_out),
            direction="L" if left else "R",
            angle=abs(turn),
            inward=inward,
        )


def bisector_normal(lane: LaneModel, corner: Corner) -> Vec:
    """Direction from the corner's outer vertex toward the lane's interior."""
    n_in = lane.inward(corner.apex_s - 1e-6)
    n_out = lane.inward(corner.apex_s + 1e-6)
    b = Vec(n_in.x + n_out.x, n_in.y + n_out.y)
    if length(b) < 1e-9:
        return n_out
    return normalize(b)
