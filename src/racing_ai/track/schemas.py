"""Serializable racing-line configuration.

The JSON layout matches what the racing-line editor saves::

    {"waypoints": [{"pos": {"x": 5, "y": 20}, "targetSpeed": 3,
                    "brakeZone": false, "cornerType": "straight",
                    "safeZone": "left"}, ...]}
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from racing_ai.track.models import CornerType, RacingLinePoint, Vec, ZoneName


class PositionConfig(BaseModel):
    x: float
    y: float


class WaypointConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pos: PositionConfig
    target_speed: float = Field(default=3.0, gt=0, alias="targetSpeed")
    brake_zone: bool = Field(default=False, alias="brakeZone")
    corner_type: CornerType = Field(default=CornerType.STRAIGHT, alias="cornerType")
    safe_zone: ZoneName = Field(default=ZoneName.LEFT, alias="safeZone")

    def to_point(self) -> RacingLinePoint:
        return RacingLinePoint(
            pos=Vec(self.pos.x, self.pos.y),
            target_speed=self.target_speed,
            brake_zone=self.brake_zone,
            corner_type=self.corner_type,
            safe_zone=self.safe_zone,
        )

    @classmethod
    def from_point(cls, point: RacingLinePoint) -> WaypointConfig:
        return cls(
            pos=PositionConfig(x=point.pos.x, y=point.pos.y),
            target_speed=point.target_speed,
            brake_zone=point.brake_zone,
            corner_type=point.corner_type,
            safe_zone=point.safe_zone,
        )


class RacingLineConfig(BaseModel):
    """An ordered racing line, as stored by the editor."""

    waypoints: list[WaypointConfig] = Field(min_length=1)


def load_racing_line(data: str | bytes | dict[str, Any]) -> tuple[RacingLinePoint, ...]:
    """Parse an editor racing-line document into waypoints.

    Raises:
        ValueError: If *data* is not valid JSON or does not describe at least
            one well-formed waypoint.
    """
    if isinstance(data, (str, bytes)):
        data = json.loads(data)
    config = RacingLineConfig.model_validate(data)
    return tuple(wp.to_point() for wp in config.waypoints)


def dump_racing_line(points: Iterable[RacingLinePoint]) -> dict[str, Any]:
    """Serialize *points* into the editor's JSON layout."""
    config = RacingLineConfig(waypoints=[WaypointConfig.from_point(p) for p in points])
    return config.model_dump(mode="json", by_alias=True)
