"""Single-step and lookahead move strategies."""

from __future__ import annotations

import itertools

from racing_ai.ai.profiles import DifficultyProfile
from racing_ai.ai.scorer import ScoreBreakdown
from racing_ai.ai.strategy import (
    DEAD_END_PENALTY,
    LookaheadStrategy,
    SingleStepStrategy,
    strategy_for,
)
from racing_ai.config import DiagnosticsConfig
from racing_ai.diagnostics.events import DiagnosticsBus, EventKind, EventRecorder
from racing_ai.game.models import Candidate, CarState, GameState, Player
from racing_ai.track.analyzer import TrackAnalyzer
from racing_ai.track.models import CornerType, RacingLinePoint, Vec, ZoneName
from racing_ai.track.tracks import DEFAULT_TRACK

_ANALYSIS = TrackAnalyzer().analyze_track(DEFAULT_TRACK)
_PROFILE = DifficultyProfile(target_speed_range=(2.0, 4.0), randomness=0.0, lookahead_depth=2)
_TARGET = RacingLinePoint(Vec(5, 23), 3.0, False, CornerType.STRAIGHT, ZoneName.LEFT)

_TRAP = Candidate(acc=Vec(1, 1), pos=Vec(8, 20), vel=Vec(1, 1))
_SAFE = Candidate(acc=Vec(0, 1), pos=Vec(7, 20), vel=Vec(0, 1))
_ONWARD = Candidate(acc=Vec(0, 0), pos=Vec(7, 21), vel=Vec(0, 1))

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class _TableScorer:
    """Scores candidates from a fixed table keyed by position."""

    def __init__(self, table: dict[Vec, float]) -> None:
        self.table = table

    def evaluate(self, candidate, car, target, analysis, profile):
        return ScoreBreakdown(progress=self.table.get(candidate.pos, 0.0))

    def score(self, candidate, car, target, analysis, profile):
        return self.evaluate(candidate, car, target, analysis, profile).total

    def rank(self, candidates, car, target, analysis, profile):
        best = max(candidates, key=lambda c: self.table.get(c.pos, 0.0))
        return best, self.evaluate(best, car, target, analysis, profile)


class _TrapOracle:
    """No way out of the trap cell; one onward move from anywhere else."""

    def legal_step_options(self, state):
        if state.current_car.pos == _TRAP.pos:
            return []
        return [_ONWARD]


def _state() -> GameState:
    car = CarState(pos=Vec(7, 19), vel=Vec(0, 0), trail=(Vec(7, 19),))
    return GameState(track=DEFAULT_TRACK, cars=(car,), players=(Player("ai", is_ai=True),))


def _bus() -> tuple[DiagnosticsBus, EventRecorder]:
    bus = DiagnosticsBus(DiagnosticsConfig())
    recorder = EventRecorder()
    bus.subscribe(recorder)
    return bus, recorder


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


def test_single_step_takes_the_best_score():
    scorer = _TableScorer({_TRAP.pos: 10.0, _SAFE.pos: 5.0})
    chosen, breakdown = SingleStepStrategy(scorer).choose(_state(), _TARGET, _ANALYSIS, _PROFILE, [_SAFE, _TRAP])
    assert chosen == _TRAP
    assert breakdown.total == 10.0


def test_lookahead_avoids_dead_end():
    scorer = _TableScorer({_TRAP.pos: 10.0, _SAFE.pos: 5.0})
    strategy = LookaheadStrategy(scorer, _TrapOracle(), depth=2, budget_s=1.0, _time_fn=lambda: 0.0)
    chosen, breakdown = strategy.choose(_state(), _TARGET, _ANALYSIS, _PROFILE, [_TRAP, _SAFE])
    assert chosen == _SAFE
    assert breakdown.total == 5.0
    assert 10.0 + 0.7 * DEAD_END_PENALTY < 5.0


def test_depth_one_is_single_step():
    scorer = _TableScorer({_TRAP.pos: 10.0, _SAFE.pos: 5.0})
    strategy = LookaheadStrategy(scorer, _TrapOracle(), depth=1, budget_s=1.0, _time_fn=lambda: 0.0)
    chosen, _ = strategy.choose(_state(), _TARGET, _ANALYSIS, _PROFILE, [_TRAP, _SAFE])
    assert chosen == _TRAP


def test_timeout_returns_single_step_choice():
    clock = itertools.count(0.0, 1.0)
    bus, recorder = _bus()
    scorer = _TableScorer({_TRAP.pos: 10.0, _SAFE.pos: 5.0})
    strategy = LookaheadStrategy(
        scorer, _TrapOracle(), depth=2, budget_s=0.03, diagnostics=bus, _time_fn=lambda: next(clock)
    )
    chosen, _ = strategy.choose(_state(), _TARGET, _ANALYSIS, _PROFILE, [_TRAP, _SAFE])
    assert chosen == _TRAP
    (event,) = recorder.of_kind(EventKind.LOOKAHEAD_TIMEOUT)
    assert event.payload["depth"] == 2


def test_strategy_for_profile():
    scorer = _TableScorer({})
    flat = DifficultyProfile(target_speed_range=(2.0, 4.0), randomness=0.0)
    assert isinstance(strategy_for(flat, scorer, _TrapOracle(), 0.03), SingleStepStrategy)
    deep = strategy_for(_PROFILE, scorer, _TrapOracle(), 0.03)
    assert isinstance(deep, LookaheadStrategy)
    assert deep.depth == 2
