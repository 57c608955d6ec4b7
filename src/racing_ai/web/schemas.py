"""Pydantic request/response schemas for the debug API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from racing_ai.track.models import Bounds, Segment, Vec
from racing_ai.track.schemas import RacingLineConfig, WaypointConfig


class HealthResponse(BaseModel):
    status: str
    version: str


class PointModel(BaseModel):
    x: float
    y: float

    def to_vec(self) -> Vec:
        return Vec(self.x, self.y)

    @classmethod
    def from_vec(cls, v: Vec) -> PointModel:
        return cls(x=v.x, y=v.y)


class SegmentModel(BaseModel):
    a: PointModel
    b: PointModel

    def to_segment(self) -> Segment:
        return Segment(self.a.to_vec(), self.b.to_vec())

    @classmethod
    def from_segment(cls, s: Segment) -> SegmentModel:
        return cls(a=PointModel.from_vec(s.a), b=PointModel.from_vec(s.b))


class BoundsModel(BaseModel):
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @classmethod
    def from_bounds(cls, b: Bounds) -> BoundsModel:
        return cls(min_x=b.min_x, max_x=b.max_x, min_y=b.min_y, max_y=b.max_y)


class SafeZoneModel(BaseModel):
    name: str
    bounds: BoundsModel
    direction: PointModel


class TrackRequest(BaseModel):
    outer: list[PointModel] = Field(min_length=3)
    inner: list[PointModel] = Field(min_length=3)
    start_line: SegmentModel
    name: str = "custom"
    racing_line: RacingLineConfig | None = None


class AnalysisResponse(BaseModel):
    name: str
    racing_direction: str
    racing_line: list[WaypointConfig]
    checkpoints: list[SegmentModel]
    safe_zones: list[SafeZoneModel]
    track_bounds: BoundsModel
    inner_bounds: BoundsModel


class CarModel(BaseModel):
    pos: PointModel
    vel: PointModel = PointModel(x=0, y=0)
    trail: list[PointModel] = []
    current_lap: int = 0


class MoveRequest(BaseModel):
    car: CarModel
    track: TrackRequest | None = None
    """Track to drive on; the default track if omitted."""

    difficulty: str = "medium"
    seed: int | None = None
    verbose: bool = True


class EventModel(BaseModel):
    kind: str
    car_index: int
    level: str
    message: str
    payload: dict[str, Any] = {}


class MoveResponse(BaseModel):
    acc: PointModel | None
    target: WaypointConfig | None
    events: list[EventModel]
