"""Vector math and polygon predicates shared by the analyzer and the AI."""

from __future__ import annotations

import math
from collections.abc import Sequence

from racing_ai.track.models import Bounds, Segment, Vec

# ---------------------------------------------------------------------------
# Vector primitives
# ---------------------------------------------------------------------------


def add(a: Vec, b: Vec) -> Vec:
    return Vec(a.x + b.x, a.y + b.y)


def sub(a: Vec, b: Vec) -> Vec:
    return Vec(a.x - b.x, a.y - b.y)


def scale(a: Vec, k: float) -> Vec:
    return Vec(a.x * k, a.y * k)


def dot(a: Vec, b: Vec) -> float:
    return a.x * b.x + a.y * b.y


def cross(a: Vec, b: Vec) -> float:
    """z-component of ``a × b``."""
    return a.x * b.y - a.y * b.x


def length(a: Vec) -> float:
    return math.hypot(a.x, a.y)


def distance(a: Vec, b: Vec) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def normalize(a: Vec) -> Vec:
    """Unit vector along *a*; the zero vector is returned unchanged."""
    n = length(a)
    if n < 1e-12:
        return Vec(0.0, 0.0)
    return Vec(a.x / n, a.y / n)


def lerp(a: Vec, b: Vec, t: float) -> Vec:
    return Vec(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)


# ---------------------------------------------------------------------------
# Polygons
# ---------------------------------------------------------------------------


def polygon_edges(poly: Sequence[Vec]) -> list[Segment]:
    """Closed edge list, last vertex joined back to the first."""
    n = len(poly)
    return [Segment(poly[i], poly[(i + 1) % n]) for i in range(n)]


def signed_area(poly: Sequence[Vec]) -> float:
    """Shoelace area of *poly*.

    Positive when the vertices are listed clockwise as seen on a
    downward-Y screen, negative when listed counter-clockwise.
    """
    n = len(poly)
    total = 0.0
    for i in range(n):
        p, q = poly[i], poly[(i + 1) % n]
        total += p.x * q.y - q.x * p.y
    return total / 2.0


def polygon_bounds(poly: Sequence[Vec]) -> Bounds:
    xs = [p.x for p in poly]
    ys = [p.y for p in poly]
    return Bounds(min(xs), max(xs), min(ys), max(ys))


def point_in_polygon(p: Vec, poly: Sequence[Vec]) -> bool:
    """Even-odd ray casting test."""
    inside = False
    n = len(poly)
    j = n - 1
    for i in range(n):
        a, b = poly[i], poly[j]
        if (a.y > p.y) != (b.y > p.y):
            x_cross = (b.x - a.x) * (p.y - a.y) / ((b.y - a.y) + 1e-12) + a.x
            if p.x < x_cross:
                inside = not inside
        j = i
    return inside


def segments_intersect(s1: Segment, s2: Segment) -> bool:
    """True when the two closed segments share at least one point."""
    d1 = cross(sub(s2.b, s2.a), sub(s1.a, s2.a))
    d2 = cross(sub(s2.b, s2.a), sub(s1.b, s2.a))
    d3 = cross(sub(s1.b, s1.a), sub(s2.a, s1.a))
    d4 = cross(sub(s1.b, s1.a), sub(s2.b, s1.a))

    if ((d1 > 0 > d2) or (d1 < 0 < d2)) and ((d3 > 0 > d4) or (d3 < 0 < d4)):
        return True

    # Collinear / touching cases
    return (
        (d1 == 0 and _on_segment(s1.a, s2))
        or (d2 == 0 and _on_segment(s1.b, s2))
        or (d3 == 0 and _on_segment(s2.a, s1))
        or (d4 == 0 and _on_segment(s2.b, s1))
    )


def polygon_self_intersects(poly: Sequence[Vec]) -> bool:
    """True if any two non-adjacent edges of the closed polygon touch."""
    edges = polygon_edges(poly)
    n = len(edges)
    for i in range(n):
        for j in range(i + 1, n):
            if j == i + 1 or (i == 0 and j == n - 1):
                continue
            if segments_intersect(edges[i], edges[j]):
                return True
    return False


def closest_point_on_segment(p: Vec, seg: Segment) -> Vec:
    ab = sub(seg.b, seg.a)
    denom = dot(ab, ab)
    if denom < 1e-12:
        return seg.a
    t = max(0.0, min(1.0, dot(sub(p, seg.a), ab) / denom))
    return lerp(seg.a, seg.b, t)


def point_segment_distance(p: Vec, seg: Segment) -> float:
    return distance(p, closest_point_on_segment(p, seg))


def distance_to_boundary(p: Vec, poly: Sequence[Vec]) -> float:
    """Shortest distance from *p* to any edge of *poly*."""
    return min(point_segment_distance(p, e) for e in polygon_edges(poly))


def closest_point_on_polygon(p: Vec, poly: Sequence[Vec]) -> Vec:
    best = poly[0]
    best_d = math.inf
    for edge in polygon_edges(poly):
        q = closest_point_on_segment(p, edge)
        d = distance(p, q)
        if d < best_d:
            best, best_d = q, d
    return best


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _on_segment(p: Vec, seg: Segment) -> bool:
    return (
        min(seg.a.x, seg.b.x) <= p.x <= max(seg.a.x, seg.b.x)
        and min(seg.a.y, seg.b.y) <= p.y <= max(seg.a.y, seg.b.y)
    )
