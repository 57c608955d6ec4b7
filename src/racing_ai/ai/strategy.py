"""Move strategies: single-step scoring or bounded lookahead search.

Whatever the strategy, a move must come back promptly.  The lookahead
search runs against a wall-clock deadline and, if the deadline passes,
answers with the single-step choice it computed up front.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import replace

from racing_ai.ai.profiles import DifficultyProfile
from racing_ai.ai.scorer import MoveScorer, ScoreBreakdown
from racing_ai.diagnostics.events import DiagnosticsBus, EventKind
from racing_ai.game.models import Candidate, GameState
from racing_ai.track.models import RacingLinePoint, TrackAnalysis
from racing_ai.track.targeting import nearest_forward_waypoint

DISCOUNT = 0.7
DEAD_END_PENALTY = -1000.0


class MoveStrategy:
    """Base class: pick one of the legal candidates for the current car."""

    def choose(
        self,
        state: GameState,
        target: RacingLinePoint,
        analysis: TrackAnalysis,
        profile: DifficultyProfile,
        candidates: Sequence[Candidate],
    ) -> tuple[Candidate, ScoreBreakdown]:
        raise NotImplementedError


class SingleStepStrategy(MoveStrategy):
    """Best candidate by the one-turn score."""

    def __init__(self, scorer: MoveScorer) -> None:
        self._scorer = scorer

    def choose(self, state, target, analysis, profile, candidates):
        return self._scorer.rank(candidates, state.current_car, target, analysis, profile)


class _DeadlineExceeded(Exception):
    pass


class LookaheadStrategy(MoveStrategy):
    """Depth-limited search over future turns of the current car.

    A candidate's value is its own score plus ``0.7`` times the best value
    reachable from it, recursively, down to *depth* turns.  Other cars are
    assumed to stay where they are.  Positions with no legal continuation
    are valued at a flat dead-end penalty.

    Parameters
    ----------
    scorer:
        Single-step scorer used at every node.
    oracle:
        Legality oracle providing ``legal_step_options(state)``.
    depth:
        Number of turns searched, including the current one.
    budget_s:
        Wall-clock ceiling for one :meth:`choose` call.
    diagnostics:
        Bus on which timeouts are reported.
    _time_fn:
        Callable returning monotonic time; injectable for testing.
    """

    def __init__(
        self,
        scorer: MoveScorer,
        oracle,
        depth: int,
        budget_s: float,
        diagnostics: DiagnosticsBus | None = None,
        _time_fn=time.monotonic,
    ) -> None:
        self._scorer = scorer
        self._oracle = oracle
        self.depth = depth
        self.budget_s = budget_s
        self._bus = diagnostics or DiagnosticsBus()
        self._time_fn = _time_fn
        self._deadline = 0.0

    def choose(self, state, target, analysis, profile, candidates):
        car = state.current_car
        fallback = self._scorer.rank(candidates, car, target, analysis, profile)
        if self.depth <= 1:
            return fallback

        self._deadline = self._time_fn() + self.budget_s
        try:
            best: Candidate | None = None
            best_value = float("-inf")
            for candidate in candidates:
                value = self._scorer.score(candidate, car, target, analysis, profile)
                value += DISCOUNT * self._future_value(state, candidate, analysis, profile, self.depth - 1)
                if value > best_value:
                    best, best_value = candidate, value
        except _DeadlineExceeded:
            self._bus.emit(
                EventKind.LOOKAHEAD_TIMEOUT,
                state.current_index,
                f"lookahead exceeded {self.budget_s * 1000:.0f} ms; using single-step move",
                budget_s=self.budget_s,
                depth=self.depth,
            )
            return fallback

        assert best is not None
        return best, self._scorer.evaluate(best, car, target, analysis, profile)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _check_deadline(self) -> None:
        if self._time_fn() > self._deadline:
            raise _DeadlineExceeded

    def _future_value(
        self,
        state: GameState,
        move: Candidate,
        analysis: TrackAnalysis,
        profile: DifficultyProfile,
        remaining: int,
    ) -> float:
        """Best discounted value reachable after making *move*."""
        self._check_deadline()
        if remaining <= 0:
            return 0.0

        car = state.current_car
        moved = replace(car, pos=move.pos, vel=move.vel, trail=car.trail + (move.pos,))
        cars = list(state.cars)
        cars[state.current_index] = moved
        next_state = replace(state, cars=tuple(cars))

        options = self._oracle.legal_step_options(next_state)
        if not options:
            return DEAD_END_PENALTY

        target = nearest_forward_waypoint(moved.pos, analysis)
        best = float("-inf")
        for option in options:
            self._check_deadline()
            value = self._scorer.evaluate(option, moved, target, analysis, profile).total
            value += DISCOUNT * self._future_value(next_state, option, analysis, profile, remaining - 1)
            best = max(best, value)
        return best


def strategy_for(
    profile: DifficultyProfile,
    scorer: MoveScorer,
    oracle,
    budget_s: float,
    diagnostics: DiagnosticsBus | None = None,
    _time_fn=time.monotonic,
) -> MoveStrategy:
    """Strategy matching the profile's lookahead depth."""
    if profile.lookahead_depth > 0:
        return LookaheadStrategy(scorer, oracle, profile.lookahead_depth, budget_s, diagnostics, _time_fn)
    return SingleStepStrategy(scorer)
