"""TrackAnalyzer: direction, safe zones, checkpoints and the racing line."""

from __future__ import annotations

import pytest

from racing_ai.track.analyzer import (
    DegenerateTrackGeometry,
    TrackAnalyzer,
    analyze,
    racing_direction_of,
)
from racing_ai.track.geometry import point_in_polygon
from racing_ai.track.models import (
    CornerType,
    RacingDirection,
    RacingLinePoint,
    Segment,
    Vec,
    ZoneName,
)
from racing_ai.track.tracks import DEFAULT_RACING_LINE, DEFAULT_TRACK

_OUTER = DEFAULT_TRACK.outer
_INNER = DEFAULT_TRACK.inner
_START = DEFAULT_TRACK.start_line
_OCTAGON_OUTER = (
    Vec(6, 2), Vec(44, 2), Vec(48, 6), Vec(48, 29),
    Vec(44, 33), Vec(6, 33), Vec(2, 29), Vec(2, 6),
)


def _in_band(p: Vec, outer, inner) -> bool:
    return point_in_polygon(p, outer) and not point_in_polygon(p, inner)


# ---------------------------------------------------------------------------
# Racing direction
# ---------------------------------------------------------------------------


def test_default_track_races_counter_clockwise():
    assert racing_direction_of(_OUTER) is RacingDirection.COUNTER_CLOCKWISE


def test_reversed_listing_races_clockwise():
    assert racing_direction_of(tuple(reversed(_OUTER))) is RacingDirection.CLOCKWISE


def test_direction_override_wins():
    result = analyze(_OUTER, _INNER, _START, racing_direction=RacingDirection.CLOCKWISE)
    assert result.racing_direction is RacingDirection.CLOCKWISE


# ---------------------------------------------------------------------------
# Safe zones and checkpoints
# ---------------------------------------------------------------------------


def test_default_safe_zones():
    zones = {z.name: z for z in analyze(_OUTER, _INNER, _START).safe_zones}
    assert set(zones) == {ZoneName.LEFT, ZoneName.BOTTOM, ZoneName.RIGHT, ZoneName.TOP}

    left = zones[ZoneName.LEFT]
    assert (left.bounds.min_x, left.bounds.max_x, left.bounds.min_y, left.bounds.max_y) == (3, 11, 3, 32)
    assert left.direction.x == pytest.approx(0.3)
    assert left.direction.y == pytest.approx(1.0)

    bottom = zones[ZoneName.BOTTOM]
    assert (bottom.bounds.min_y, bottom.bounds.max_y) == (26, 32)
    assert bottom.direction.x == pytest.approx(1.0)
    assert bottom.direction.y == pytest.approx(-0.3)

    right = zones[ZoneName.RIGHT]
    assert (right.bounds.min_x, right.bounds.max_x) == (39, 47)
    assert right.direction.y == pytest.approx(-1.0)

    top = zones[ZoneName.TOP]
    assert (top.bounds.min_y, top.bounds.max_y) == (3, 9)
    assert top.direction.x == pytest.approx(-1.0)


def test_clockwise_zone_directions_reverse():
    result = analyze(tuple(reversed(_OUTER)), _INNER, _START)
    left = next(z for z in result.safe_zones if z.name is ZoneName.LEFT)
    assert left.direction.x == pytest.approx(0.3)
    assert left.direction.y == pytest.approx(-1.0)


def test_checkpoints_at_quarter_marks():
    gates = analyze(_OUTER, _INNER, _START).checkpoints
    expected = [
        ((25.5, 33), (25.5, 25)),
        ((48, 17), (38, 17)),
        ((24.5, 2), (24.5, 10)),
        ((2, 17.5), (12, 17.5)),
    ]
    assert len(gates) == 4
    for gate, (a, b) in zip(gates, expected):
        assert (gate.a.x, gate.a.y) == pytest.approx(a)
        assert (gate.b.x, gate.b.y) == pytest.approx(b)


# ---------------------------------------------------------------------------
# Racing line
# ---------------------------------------------------------------------------


def test_override_is_used_verbatim():
    result = TrackAnalyzer().analyze_track(DEFAULT_TRACK)
    assert result.racing_line == DEFAULT_RACING_LINE


def test_empty_override_falls_back_to_generation():
    result = analyze(_OUTER, _INNER, _START, racing_line=())
    assert len(result.racing_line) > 0


def test_generated_line_follows_the_lap():
    line = analyze(_OUTER, _INNER, _START).racing_line
    first = line[0].pos
    assert first.x == pytest.approx(7.0)
    assert first.y > 18
    kinds = [wp.corner_type for wp in line]
    assert kinds.count(CornerType.ENTRY) == 4
    assert kinds.count(CornerType.APEX) == 4
    assert kinds.count(CornerType.EXIT) == 4
    assert all(wp.target_speed > 0 for wp in line)


def test_generated_entries_brake():
    line = analyze(_OUTER, _INNER, _START).racing_line
    n = len(line)
    for i, wp in enumerate(line):
        if wp.corner_type is CornerType.ENTRY:
            assert wp.brake_zone
            assert line[(i - 1) % n].brake_zone


def test_generated_apex_is_slowest_in_its_corner():
    line = analyze(_OUTER, _INNER, _START).racing_line
    for i, wp in enumerate(line):
        if wp.corner_type is CornerType.APEX:
            assert line[i - 1].target_speed > wp.target_speed
            assert line[(i + 1) % len(line)].target_speed > wp.target_speed


@pytest.mark.parametrize("outer", [_OUTER, _OCTAGON_OUTER, tuple(reversed(_OCTAGON_OUTER))])
def test_generated_waypoints_stay_in_the_lane(outer):
    result = analyze(outer, _INNER, _START)
    for wp in result.racing_line:
        assert _in_band(wp.pos, outer, _INNER), wp


def test_octagon_line_has_matching_corner_phases():
    kinds = [wp.corner_type for wp in analyze(_OCTAGON_OUTER, _INNER, _START).racing_line]
    assert kinds.count(CornerType.ENTRY) == kinds.count(CornerType.APEX) == kinds.count(CornerType.EXIT) == 8


# ---------------------------------------------------------------------------
# Purity
# ---------------------------------------------------------------------------


def test_analysis_is_deterministic():
    assert analyze(_OUTER, _INNER, _START) == analyze(_OUTER, _INNER, _START)


def test_to_dict_uses_plain_values():
    d = analyze(_OUTER, _INNER, _START).to_dict()
    assert d["racing_direction"] == "counter-clockwise"
    assert d["racing_line"][0]["corner_type"] in {"straight", "entry", "apex", "exit"}


def test_override_with_custom_points():
    custom = (
        RacingLinePoint(Vec(5, 20), 3.0, False, CornerType.STRAIGHT, ZoneName.LEFT),
        RacingLinePoint(Vec(25, 29), 4.0, False, CornerType.STRAIGHT, ZoneName.BOTTOM),
    )
    assert analyze(_OUTER, _INNER, _START, racing_line=custom).racing_line == custom


# ---------------------------------------------------------------------------
# Degenerate geometry
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "outer, inner, start",
    [
        # Zero-area outer
        ((Vec(0, 0), Vec(10, 0), Vec(20, 0)), _INNER, _START),
        # Too few distinct vertices
        ((Vec(2, 2), Vec(48, 2), Vec(2, 2)), _INNER, _START),
        # Self-intersecting outer
        ((Vec(2, 2), Vec(48, 33), Vec(48, 2), Vec(2, 33)), _INNER, _START),
        # Inner outside the outer boundary
        (_OUTER, (Vec(60, 60), Vec(70, 60), Vec(70, 70)), _START),
        # Inner crossing the outer boundary
        (_OUTER, (Vec(40, 10), Vec(55, 10), Vec(55, 20), Vec(40, 20)), _START),
        # Zero-length start line
        (_OUTER, _INNER, Segment(Vec(5, 18), Vec(5, 18))),
        # Non-finite coordinates
        ((Vec(2, 2), Vec(float("nan"), 2), Vec(48, 33), Vec(2, 33)), _INNER, _START),
    ],
)
def test_degenerate_geometry_raises(outer, inner, start):
    with pytest.raises(DegenerateTrackGeometry):
        analyze(outer, inner, start)


def test_degenerate_geometry_is_a_value_error():
    assert issubclass(DegenerateTrackGeometry, ValueError)
