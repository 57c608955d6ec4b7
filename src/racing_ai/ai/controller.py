"""AIController: one acceleration per AI turn.

Per turn the controller:

1. obtains the (cached) :class:`TrackAnalysis` for the track,
2. picks the next racing-line waypoint to aim for,
3. asks the legality oracle for the legal moves,
4. scores them with the difficulty's strategy, or falls back to the
   emergency planner when there are none.

Geometry errors surface immediately so a race never starts on a broken
track.  Any failure inside a turn is logged, reported as a diagnostic event
and answered by the emergency planner, so the game loop never sees an
exception from here.
"""

from __future__ import annotations

import logging
import random
import time

from racing_ai.ai.emergency import EmergencyPlanner
from racing_ai.ai.profiles import profile_for
from racing_ai.ai.scorer import REVISIT_WINDOW, MoveScorer
from racing_ai.ai.strategy import strategy_for
from racing_ai.config import AIConfig
from racing_ai.diagnostics.events import DiagnosticsBus, EventKind
from racing_ai.game.models import CarState, GameState
from racing_ai.game.physics import TrackLegalityOracle
from racing_ai.track.analyzer import TrackAnalyzer
from racing_ai.track.models import RacingLinePoint, TrackAnalysis, TrackGeometry, Vec
from racing_ai.track.targeting import nearest_forward_waypoint

_logger = logging.getLogger(__name__)


class TrackAnalysisCache:
    """Analyses keyed by track geometry.

    A track edit produces a new :class:`TrackGeometry`, so stale entries are
    never returned.
    """

    def __init__(self, analyzer: TrackAnalyzer | None = None) -> None:
        self._analyzer = analyzer or TrackAnalyzer()
        self._entries: dict[TrackGeometry, TrackAnalysis] = {}

    def get(self, track: TrackGeometry) -> TrackAnalysis:
        """Analysis for *track*, computed on first use.

        Raises:
            DegenerateTrackGeometry: If *track* cannot be analyzed.
        """
        analysis = self._entries.get(track)
        if analysis is None:
            analysis = self._analyzer.analyze_track(track)
            self._entries[track] = analysis
            _logger.info("analyzed track %r: %d waypoints", track.name, len(analysis.racing_line))
        return analysis

    def invalidate(self, track: TrackGeometry | None = None) -> None:
        if track is None:
            self._entries.clear()
        else:
            self._entries.pop(track, None)

    def __len__(self) -> int:
        return len(self._entries)


class AIController:
    """Entry point for computer-controlled cars.

    Parameters
    ----------
    config:
        Subsystem settings; defaults to :class:`AIConfig` defaults.
    oracle:
        Legality oracle providing ``legal_step_options(state)`` and
        ``path_legal(pos, vel, candidate_pos)``.  If None, the reference
        :class:`TrackLegalityOracle` is used for each state's track.
    diagnostics:
        Event bus; one is created from ``config.diagnostics`` if omitted.
    rng:
        Source of score jitter.
    cache:
        Shared analysis cache.
    _time_fn:
        Callable returning monotonic time; injectable for testing.
    """

    def __init__(
        self,
        config: AIConfig | None = None,
        oracle=None,
        diagnostics: DiagnosticsBus | None = None,
        rng: random.Random | None = None,
        cache: TrackAnalysisCache | None = None,
        _time_fn=time.monotonic,
    ) -> None:
        self._config = config or AIConfig()
        self._oracle = oracle
        self._oracles: dict[TrackGeometry, TrackLegalityOracle] = {}
        self._bus = diagnostics or DiagnosticsBus(self._config.diagnostics)
        self._rng = rng or random.Random()
        self._cache = cache if cache is not None else TrackAnalysisCache()
        self._time_fn = _time_fn
        self._emergency = EmergencyPlanner(self._bus)
        self._targets: dict[int, RacingLinePoint] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def diagnostics(self) -> DiagnosticsBus:
        return self._bus

    @property
    def config(self) -> AIConfig:
        return self._config

    def analysis_for(self, track: TrackGeometry) -> TrackAnalysis:
        """Current analysis of *track* (racing line, checkpoints, safe zones)."""
        return self._cache.get(track)

    def current_target(self, car_index: int) -> RacingLinePoint | None:
        """Waypoint car *car_index* aimed for on its latest turn."""
        return self._targets.get(car_index)

    def choose_ai_move(self, state: GameState) -> Vec | None:
        """Acceleration for the car whose turn it is.

        Returns None only when the subsystem is disabled or the current car
        is not an AI car still in the race.  Otherwise a move is always
        returned, even from a position with no legal move.

        Raises
        ------
        DegenerateTrackGeometry
            If the track cannot be analyzed.
        """
        if not self._config.enabled:
            return None
        idx = state.current_index
        if not (0 <= idx < len(state.cars) and idx < len(state.players)):
            return None
        car = state.cars[idx]
        if not state.players[idx].is_ai or car.crashed or car.finished:
            return None

        analysis = self.analysis_for(state.track)
        try:
            return self._decide(state, idx, car, analysis)
        except Exception as exc:
            _logger.exception("AI decision failed for car %d", idx)
            self._bus.emit(
                EventKind.AI_ERROR,
                idx,
                f"{type(exc).__name__}: {exc}",
                error=type(exc).__name__,
            )
            move = self._emergency.plan(car, analysis, idx, reason="decision error")
            return move.acc

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _oracle_for(self, track: TrackGeometry):
        if self._oracle is not None:
            return self._oracle
        oracle = self._oracles.get(track)
        if oracle is None:
            oracle = self._oracles[track] = TrackLegalityOracle(track)
        return oracle

    def _decide(self, state: GameState, idx: int, car: CarState, analysis: TrackAnalysis) -> Vec:
        profile = profile_for(state.players[idx].difficulty, self._config.default_difficulty)

        target = nearest_forward_waypoint(car.pos, analysis)
        self._targets[idx] = target
        self._bus.emit(
            EventKind.WAYPOINT_TARGETED,
            idx,
            f"targeting {target.corner_type.value} waypoint at ({target.pos.x:g}, {target.pos.y:g})",
            pos=[target.pos.x, target.pos.y],
            corner_type=target.corner_type.value,
            target_speed=target.target_speed,
        )

        oracle = self._oracle_for(state.track)
        candidates = oracle.legal_step_options(state)
        if not candidates:
            move = self._emergency.plan(car, analysis, idx, reason="no legal moves")
            return move.acc

        traffic = [other for i, other in enumerate(state.cars) if i != idx]
        scorer = MoveScorer(oracle, self._rng, traffic)
        strategy = strategy_for(
            profile, scorer, oracle, self._config.lookahead_budget_s, self._bus, self._time_fn
        )
        chosen, breakdown = strategy.choose(state, target, analysis, profile, candidates)

        if chosen.pos in car.trail[-REVISIT_WINDOW:]:
            self._bus.emit(
                EventKind.STUCK_LOOP,
                idx,
                f"revisiting ({chosen.pos.x:g}, {chosen.pos.y:g})",
                pos=[chosen.pos.x, chosen.pos.y],
            )
        self._bus.emit(
            EventKind.MOVE_CHOSEN,
            idx,
            f"acc ({chosen.acc.x:+g}, {chosen.acc.y:+g}) scored {breakdown.total:.1f}",
            acc=[chosen.acc.x, chosen.acc.y],
            breakdown=breakdown.to_dict(),
        )
        return chosen.acc
