"""DebugService: track analysis and single AI decisions for the debug API."""

from __future__ import annotations

import random

from racing_ai.ai.controller import AIController, TrackAnalysisCache
from racing_ai.config import AIConfig, DiagnosticsConfig
from racing_ai.diagnostics.events import DiagnosticsBus, EventRecorder
from racing_ai.game.models import CarState, GameState, Player
from racing_ai.track.models import TrackAnalysis, TrackGeometry
from racing_ai.track.schemas import WaypointConfig
from racing_ai.track.tracks import DEFAULT_TRACK
from racing_ai.web.schemas import (
    AnalysisResponse,
    BoundsModel,
    EventModel,
    MoveRequest,
    MoveResponse,
    PointModel,
    SafeZoneModel,
    SegmentModel,
    TrackRequest,
)


class DebugService:
    """Runs the AI pipeline on request payloads.

    Parameters
    ----------
    config:
        Base AI configuration; per-request verbosity overrides its
        diagnostics settings.
    cache:
        Analysis cache shared across requests.
    """

    def __init__(self, config: AIConfig | None = None, cache: TrackAnalysisCache | None = None) -> None:
        self._config = config or AIConfig()
        self._cache = cache if cache is not None else TrackAnalysisCache()

    def analyze(self, req: TrackRequest | None = None) -> AnalysisResponse:
        """Analyze the posted track, or the default track if *req* is None.

        Raises
        ------
        ValueError
            If the geometry is degenerate.
        """
        track = self.track_from_request(req)
        return self._analysis_response(track.name, self._cache.get(track))

    def move(self, req: MoveRequest) -> MoveResponse:
        """Run one AI decision for a lone car on the requested track."""
        track = self.track_from_request(req.track)
        car = CarState(
            pos=req.car.pos.to_vec(),
            vel=req.car.vel.to_vec(),
            current_lap=req.car.current_lap,
            trail=tuple(p.to_vec() for p in req.car.trail) or (req.car.pos.to_vec(),),
        )
        state = GameState(
            track=track,
            cars=(car,),
            players=(Player(name="debug", is_ai=True, difficulty=req.difficulty),),
        )

        config = AIConfig(
            enabled=True,
            default_difficulty=self._config.default_difficulty,
            lookahead_budget_s=self._config.lookahead_budget_s,
            diagnostics=DiagnosticsConfig(verbose=req.verbose, log_level=self._config.diagnostics.log_level),
        )
        recorder = EventRecorder()
        bus = DiagnosticsBus(config.diagnostics)
        bus.subscribe(recorder)
        controller = AIController(
            config=config,
            diagnostics=bus,
            rng=random.Random(req.seed),
            cache=self._cache,
        )

        acc = controller.choose_ai_move(state)
        target = controller.current_target(0)
        return MoveResponse(
            acc=PointModel.from_vec(acc) if acc is not None else None,
            target=WaypointConfig.from_point(target) if target is not None else None,
            events=[EventModel(**e.to_dict()) for e in recorder.events],
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def track_from_request(req: TrackRequest | None) -> TrackGeometry:
        if req is None:
            return DEFAULT_TRACK
        racing_line = None
        if req.racing_line is not None:
            racing_line = tuple(wp.to_point() for wp in req.racing_line.waypoints)
        return TrackGeometry(
            outer=tuple(p.to_vec() for p in req.outer),
            inner=tuple(p.to_vec() for p in req.inner),
            start_line=req.start_line.to_segment(),
            name=req.name,
            racing_line=racing_line,
        )

    @staticmethod
    def _analysis_response(name: str, analysis: TrackAnalysis) -> AnalysisResponse:
        return AnalysisResponse(
            name=name,
            racing_direction=analysis.racing_direction.value,
            racing_line=[WaypointConfig.from_point(wp) for wp in analysis.racing_line],
            checkpoints=[SegmentModel.from_segment(s) for s in analysis.checkpoints],
            safe_zones=[
                SafeZoneModel(
                    name=z.name.value,
                    bounds=BoundsModel.from_bounds(z.bounds),
                    direction=PointModel.from_vec(z.direction),
                )
                for z in analysis.safe_zones
            ],
            track_bounds=BoundsModel.from_bounds(analysis.track_bounds),
            inner_bounds=BoundsModel.from_bounds(analysis.inner_bounds),
        )
