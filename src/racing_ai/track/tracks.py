"""Built-in track definitions."""

from __future__ import annotations

from racing_ai.track.models import (
    CornerType,
    RacingLinePoint,
    Segment,
    TrackGeometry,
    Vec,
    ZoneName,
)


def _wp(
    x: float,
    y: float,
    speed: float,
    zone: ZoneName,
    kind: CornerType = CornerType.STRAIGHT,
    brake: bool = False,
) -> RacingLinePoint:
    return RacingLinePoint(
        pos=Vec(x, y),
        target_speed=speed,
        brake_zone=brake,
        corner_type=kind,
        safe_zone=zone,
    )


_L, _B, _R, _T = ZoneName.LEFT, ZoneName.BOTTOM, ZoneName.RIGHT, ZoneName.TOP
_ENTRY, _APEX, _EXIT = CornerType.ENTRY, CornerType.APEX, CornerType.EXIT

# Hand-tuned line for the default rectangle, raced counter-clockwise: down
# the left side, along the bottom, up the right side and back along the top.
DEFAULT_RACING_LINE: tuple[RacingLinePoint, ...] = (
    _wp(5, 20, 3, _L),
    _wp(5, 23, 3, _L),
    _wp(5, 26, 3, _L),
    # Turn 1: left side onto the bottom
    _wp(8, 28, 2, _L, _ENTRY, brake=True),
    _wp(11, 31, 2, _B, _APEX),
    _wp(18, 29, 3, _B, _EXIT),
    _wp(25, 29, 5, _B),
    _wp(32, 29, 4, _B),
    # Turn 2: bottom onto the right side
    _wp(39, 29, 2, _B, _ENTRY, brake=True),
    _wp(42, 25, 2, _R, _APEX),
    _wp(43, 20, 3, _R, _EXIT),
    _wp(43, 17, 4, _R),
    _wp(43, 14, 4, _R),
    # Turn 3: right side onto the top
    _wp(38, 8, 2, _R, _ENTRY, brake=True),
    _wp(32, 5, 2, _T, _APEX),
    _wp(25, 6, 3, _T, _EXIT),
    _wp(20, 6, 4, _T),
    _wp(15, 6, 4, _T),
    # Turn 4: top onto the left side
    _wp(10, 8, 2, _T, _ENTRY, brake=True),
    _wp(6, 12, 2, _L, _APEX),
    _wp(7, 16, 3, _L, _EXIT),
)

DEFAULT_TRACK = TrackGeometry(
    outer=(Vec(2, 2), Vec(48, 2), Vec(48, 33), Vec(2, 33)),
    inner=(Vec(12, 10), Vec(38, 10), Vec(38, 25), Vec(12, 25)),
    start_line=Segment(Vec(2, 18), Vec(12, 18)),
    name="default",
    racing_line=DEFAULT_RACING_LINE,
)

# Grid cells just past the start line, best slot first
DEFAULT_START_POSITIONS: tuple[Vec, ...] = (
    Vec(7, 19),
    Vec(5, 19),
    Vec(9, 19),
    Vec(4, 20),
)
