"""Arc-length model of the driving lane between the two boundaries.

The outer boundary is walked in travel order and parameterised by arc
length ``s`` with ``s = 0`` at the start/finish line.  A point in the lane is
addressed by ``(s, u)``: ``u = 0`` sits on the outer wall and ``u = 1`` on the
nearest point of the inner wall.
"""

from __future__ import annotations

import bisect
from collections.abc import Sequence

from racing_ai.track.geometry import (
    add,
    closest_point_on_polygon,
    closest_point_on_segment,
    distance,
    distance_to_boundary,
    lerp,
    normalize,
    polygon_edges,
    scale,
    signed_area,
)
from racing_ai.track.models import RacingDirection, Segment, Vec

_EPS = 1e-9


class LaneModel:
    """Travel-ordered outer ring with helpers for placing points in the lane.

    Args:
        outer: Outer boundary polygon, either winding.
        inner: Inner hole polygon.
        start_line: Start/finish line; its midpoint fixes ``s = 0``.
        direction: Racing direction, as seen on a downward-Y screen.  The ring
            is walked in that sense whatever order its vertices are listed in.
    """

    def __init__(
        self,
        outer: Sequence[Vec],
        inner: Sequence[Vec],
        start_line: Segment,
        direction: RacingDirection,
    ) -> None:
        self.direction = direction
        self.inner = tuple(inner)

        # A positive shoelace area lists the ring clockwise on screen
        listed_clockwise = signed_area(outer) > 0
        travel_clockwise = direction is RacingDirection.CLOCKWISE
        ring = list(outer) if listed_clockwise == travel_clockwise else list(reversed(outer))
        self.points = self._rotate_to_start(ring, lerp(start_line.a, start_line.b, 0.5))

        self.arc: list[float] = [0.0]
        for i in range(1, len(self.points)):
            self.arc.append(self.arc[-1] + distance(self.points[i - 1], self.points[i]))
        self.length = self.arc[-1] + distance(self.points[-1], self.points[0])

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def wrap(self, s: float) -> float:
        return s % self.length

    def ahead(self, s_from: float, s_to: float) -> float:
        """Arc distance travelled going forward from *s_from* to *s_to*."""
        return (s_to - s_from) % self.length

    def edge_index(self, s: float) -> int:
        """Index of the ring edge holding arc position *s* (edge ``i`` runs
        from ``points[i]`` to ``points[i + 1]``)."""
        return bisect.bisect_right(self.arc, self.wrap(s)) - 1

    def edge(self, i: int) -> Segment:
        n = len(self.points)
        return Segment(self.points[i % n], self.points[(i + 1) % n])

    def point_at(self, s: float) -> Vec:
        s = self.wrap(s)
        i = self.edge_index(s)
        seg = self.edge(i)
        seg_len = distance(seg.a, seg.b)
        if seg_len < _EPS:
            return seg.a
        return lerp(seg.a, seg.b, (s - self.arc[i]) / seg_len)

    def tangent(self, s: float) -> Vec:
        seg = self.edge(self.edge_index(s))
        return normalize(Vec(seg.b.x - seg.a.x, seg.b.y - seg.a.y))

    def inward_of(self, t: Vec) -> Vec:
        """Normal of travel direction *t* that points toward the infield."""
        if self.direction is RacingDirection.COUNTER_CLOCKWISE:
            return Vec(t.y, -t.x)
        return Vec(-t.y, t.x)

    def inward(self, s: float) -> Vec:
        return self.inward_of(self.tangent(s))

    def width_at(self, p: Vec) -> float:
        """Distance from *p* to the inner wall."""
        return distance_to_boundary(p, self.inner)

    def inner_point(self, p: Vec) -> Vec:
        return closest_point_on_polygon(p, self.inner)

    def lane_point(self, s: float, u: float, normal: Vec | None = None) -> Vec:
        """Point a fraction *u* of the lane width in from the outer wall."""
        o = self.point_at(s)
        n = normal if normal is not None else self.inward(s)
        return add(o, scale(n, u * self.width_at(o)))

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _rotate_to_start(ring: list[Vec], anchor: Vec) -> list[Vec]:
        """Rotate *ring* so it begins at the projection of *anchor*."""
        best_i = 0
        best_q = ring[0]
        best_d = float("inf")
        for i, seg in enumerate(polygon_edges(ring)):
            q = closest_point_on_segment(anchor, seg)
            d = distance(anchor, q)
            if d < best_d - _EPS:
                best_i, best_q, best_d = i, q, d

        n = len(ring)
        nxt = (best_i + 1) % n
        if distance(best_q, ring[best_i]) < _EPS:
            return ring[best_i:] + ring[:best_i]
        if distance(best_q, ring[nxt]) < _EPS:
            return ring[nxt:] + ring[:nxt]
        return [best_q] + ring[best_i + 1:] + ring[:best_i + 1]
