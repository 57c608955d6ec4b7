"""Damage-control move search for positions with no legal move."""

from __future__ import annotations

from racing_ai.diagnostics.events import DiagnosticsBus, EventKind
from racing_ai.game.models import Candidate, CarState
from racing_ai.game.physics import step_options
from racing_ai.track.geometry import distance, length
from racing_ai.track.models import TrackAnalysis

SPEED_REDUCTION_BONUS = 20.0
DECELERATION_BONUS = 15.0
SPEED_INCREASE_PENALTY = -10.0
FULL_STOP_BONUS = 50.0
CRAWL_SPEED = 2.0
CRAWL_BONUS = 25.0
LINE_DISTANCE_PENALTY = -2.0
INPUT_PENALTY = -3.0


class EmergencyPlanner:
    """Pick the least-bad move from the full 3×3 acceleration grid.

    The search ignores legality entirely: when the physics reports no legal
    move the car is about to crash anyway, so the planner only tries to shed
    speed and stay near the racing line.  It always returns a move for a
    running car, which keeps the turn loop from stalling.

    Parameters
    ----------
    diagnostics:
        Bus on which every activation is reported as a warning event.
    """

    def __init__(self, diagnostics: DiagnosticsBus | None = None) -> None:
        self._bus = diagnostics or DiagnosticsBus()

    def plan(
        self,
        car: CarState,
        analysis: TrackAnalysis,
        car_index: int = 0,
        reason: str = "no legal moves",
    ) -> Candidate | None:
        """Best damage-control candidate, or None for a crashed/finished car."""
        if car.crashed or car.finished:
            return None

        best: Candidate | None = None
        best_score = float("-inf")
        for candidate in step_options(car):
            score = self.score(candidate, car, analysis)
            if score > best_score:
                best, best_score = candidate, score

        assert best is not None
        self._bus.emit(
            EventKind.EMERGENCY_FALLBACK,
            car_index,
            f"{reason}; emergency move {best.acc.x:+g},{best.acc.y:+g}",
            reason=reason,
            acc=[best.acc.x, best.acc.y],
            score=best_score,
        )
        return best

    @staticmethod
    def score(candidate: Candidate, car: CarState, analysis: TrackAnalysis) -> float:
        current = length(car.vel)
        new = length(candidate.vel)

        score = 0.0
        if new < current:
            score += SPEED_REDUCTION_BONUS * (current - new)
            score += DECELERATION_BONUS
        else:
            score += SPEED_INCREASE_PENALTY * (new - current)
        if new == 0:
            score += FULL_STOP_BONUS
        elif new < CRAWL_SPEED:
            score += CRAWL_BONUS

        if analysis.racing_line:
            nearest = min(distance(candidate.pos, wp.pos) for wp in analysis.racing_line)
            score += LINE_DISTANCE_PENALTY * nearest

        score += INPUT_PENALTY * length(candidate.acc)
        return score
