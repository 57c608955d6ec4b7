"""Multi-factor scoring of candidate moves.

Each legal candidate is scored as the sum of these factors (higher is
better):

1. progress: agreement of the new velocity with the expected direction
2. speed: staying inside the profile's speed band, slowing for corners
3. pace: matching the targeted waypoint's own target speed
4. safety: predicted crash one step ahead, whether the car can still brake
   to a stop on the track, and proximity to walls
5. line: closeness to the targeted waypoint
6. stall: standing still or revisiting recent cells
7. start: leaving the grid decisively in the right direction
8. traffic: closing on other running cars
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import asdict, dataclass, replace

from racing_ai.ai.profiles import DifficultyProfile
from racing_ai.game.models import Candidate, CarState
from racing_ai.track.direction import expected_direction
from racing_ai.track.geometry import (
    add,
    distance,
    distance_to_boundary,
    dot,
    length,
    normalize,
    point_segment_distance,
)
from racing_ai.track.models import CornerType, RacingLinePoint, TrackAnalysis, Vec

# Progress
PROGRESS_WEIGHT = 60.0
BACKWARD_PENALTY = -500.0
BACKWARD_SPEED_PENALTY = -100.0

# Speed
IN_RANGE_BONUS = 30.0
OUT_OF_RANGE_PENALTY = -10.0
CRASH_RISK_SPEED = 4.5
CRASH_RISK_WEIGHT = -80.0
CORNER_SAFE_SPEED = 3.5
CORNER_SURCHARGE = -150.0

# Waypoint pace
PACE_MISMATCH_PENALTY = -4.0
BRAKE_OVERSPEED_PENALTY = -12.0

# Safety
PROJECTED_CRASH_PENALTY = -2000.0
UNRECOVERABLE_PENALTY = -10000.0
WALL_MARGIN = 2.0
WALL_MARGIN_PENALTY = -100.0
WALL_TIGHT_MARGIN = 1.0
WALL_TIGHT_PENALTY = -300.0

# Racing line
LINE_DISTANCE_PENALTY = -8.0
LINE_PULL_DISTANCE = 8.0
LINE_PULL_BONUS = 15.0

# Stall / loops
ZERO_VELOCITY_PENALTY = -300.0
REVISIT_PENALTY = -50.0
REVISIT_WINDOW = 4

# Start area
START_AREA_RADIUS = 3.0
START_FORWARD_BONUS = 100.0
START_LATERAL_PENALTY = -150.0
START_MIN_SPEED = 1.5
START_SLOW_PENALTY = -100.0
START_LAUNCH_BONUS = 75.0

# Traffic
CLOSE_CAR_DISTANCE = 3.0
CLOSE_CAR_PENALTY = -15.0
PREDICTED_CAR_DISTANCE = 2.5
PREDICTED_CAR_PENALTY = -10.0

JITTER_SCALE = 10.0


class NoLegalMoves(LookupError):
    """Raised when asked to pick from an empty candidate list."""


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-factor contributions to one candidate's score."""

    progress: float = 0.0
    speed: float = 0.0
    pace: float = 0.0
    safety: float = 0.0
    line: float = 0.0
    stall: float = 0.0
    start: float = 0.0
    traffic: float = 0.0
    jitter: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.progress
            + self.speed
            + self.pace
            + self.safety
            + self.line
            + self.stall
            + self.start
            + self.traffic
            + self.jitter
        )

    def to_dict(self) -> dict[str, float]:
        d = asdict(self)
        d["total"] = self.total
        return d


class MoveScorer:
    """Score and rank candidate moves for one car.

    Parameters
    ----------
    oracle:
        Legality oracle providing ``path_legal(pos, vel, candidate_pos)``,
        used for the one-step-ahead crash check and the braking check.
    rng:
        Source of score jitter.  Pass a seeded :class:`random.Random` for
        reproducible races.
    traffic:
        Other cars on the track this turn.  Crashed and finished cars are
        ignored.
    """

    def __init__(
        self,
        oracle,
        rng: random.Random | None = None,
        traffic: Sequence[CarState] = (),
    ) -> None:
        self._oracle = oracle
        self._rng = rng or random.Random()
        self._traffic = tuple(c for c in traffic if not c.crashed and not c.finished)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def evaluate(
        self,
        candidate: Candidate,
        car: CarState,
        target: RacingLinePoint,
        analysis: TrackAnalysis,
        profile: DifficultyProfile,
    ) -> ScoreBreakdown:
        """Deterministic per-factor score of *candidate* (no jitter)."""
        forward = normalize(expected_direction(car.pos, analysis))
        speed = length(candidate.vel)
        return ScoreBreakdown(
            progress=self._progress(candidate, forward, speed),
            speed=self._speed(speed, target, profile),
            pace=self._pace(speed, target),
            safety=self._safety(candidate, analysis, speed),
            line=self._line(candidate, car, target),
            stall=self._stall(candidate, car),
            start=self._start(candidate, car, analysis, forward, speed),
            traffic=self._traffic_risk(candidate),
        )

    def score(
        self,
        candidate: Candidate,
        car: CarState,
        target: RacingLinePoint,
        analysis: TrackAnalysis,
        profile: DifficultyProfile,
    ) -> float:
        """Total score of *candidate*, including difficulty jitter."""
        return self.evaluate(candidate, car, target, analysis, profile).total + self._jitter(profile)

    def rank(
        self,
        candidates: Sequence[Candidate],
        car: CarState,
        target: RacingLinePoint,
        analysis: TrackAnalysis,
        profile: DifficultyProfile,
    ) -> tuple[Candidate, ScoreBreakdown]:
        """Best candidate with its breakdown.

        The first candidate wins ties.

        Raises
        ------
        NoLegalMoves
            If *candidates* is empty.
        """
        if not candidates:
            raise NoLegalMoves("no candidates to score")

        best: tuple[Candidate, ScoreBreakdown] | None = None
        best_total = float("-inf")
        for candidate in candidates:
            breakdown = self.evaluate(candidate, car, target, analysis, profile)
            jitter = self._jitter(profile)
            if jitter:
                breakdown = replace(breakdown, jitter=jitter)
            if breakdown.total > best_total:
                best, best_total = (candidate, breakdown), breakdown.total
        assert best is not None
        return best

    def choose_best_move(
        self,
        candidates: Sequence[Candidate],
        car: CarState,
        target: RacingLinePoint,
        analysis: TrackAnalysis,
        profile: DifficultyProfile,
    ) -> Candidate:
        """Highest-scoring candidate; see :meth:`rank`."""
        return self.rank(candidates, car, target, analysis, profile)[0]

    # ------------------------------------------------------------------
    # Factors
    # ------------------------------------------------------------------

    @staticmethod
    def _progress(candidate: Candidate, forward: Vec, speed: float) -> float:
        alignment = dot(normalize(candidate.vel), forward)
        score = PROGRESS_WEIGHT * alignment
        if alignment < 0:
            score += BACKWARD_PENALTY + BACKWARD_SPEED_PENALTY * speed
        return score

    @staticmethod
    def _speed(speed: float, target: RacingLinePoint, profile: DifficultyProfile) -> float:
        lo, hi = profile.target_speed_range
        if lo <= speed <= hi:
            score = IN_RANGE_BONUS
        elif speed < lo:
            score = OUT_OF_RANGE_PENALTY * (lo - speed)
        else:
            score = OUT_OF_RANGE_PENALTY * (speed - hi)

        if speed > CRASH_RISK_SPEED:
            score += CRASH_RISK_WEIGHT * (speed - CRASH_RISK_SPEED) ** 2

        if speed > CORNER_SAFE_SPEED and (target.corner_type is CornerType.ENTRY or target.brake_zone):
            score += CORNER_SURCHARGE * (speed - CORNER_SAFE_SPEED)
        return score

    @staticmethod
    def _pace(speed: float, target: RacingLinePoint) -> float:
        score = PACE_MISMATCH_PENALTY * abs(speed - target.target_speed)
        if target.brake_zone and speed > target.target_speed:
            score += BRAKE_OVERSPEED_PENALTY * (speed - target.target_speed)
        return score

    def _safety(self, candidate: Candidate, analysis: TrackAnalysis, speed: float) -> float:
        score = 0.0
        projected = add(candidate.pos, candidate.vel)
        if not self._oracle.path_legal(candidate.pos, candidate.vel, projected):
            score += PROJECTED_CRASH_PENALTY
        if not self._can_stop(candidate):
            score += UNRECOVERABLE_PENALTY

        wall = min(
            distance_to_boundary(candidate.pos, analysis.outer),
            distance_to_boundary(candidate.pos, analysis.inner),
        )
        if wall < WALL_TIGHT_MARGIN:
            margin = WALL_TIGHT_PENALTY
        elif wall < WALL_MARGIN:
            margin = WALL_MARGIN_PENALTY
        else:
            margin = 0.0
        return score + margin * (1.0 + 0.5 * max(0.0, speed - 2.0))

    @staticmethod
    def _line(candidate: Candidate, car: CarState, target: RacingLinePoint) -> float:
        d_new = distance(candidate.pos, target.pos)
        score = LINE_DISTANCE_PENALTY * d_new
        if d_new > LINE_PULL_DISTANCE:
            score += LINE_PULL_BONUS * (distance(car.pos, target.pos) - d_new)
        return score

    @staticmethod
    def _stall(candidate: Candidate, car: CarState) -> float:
        score = 0.0
        if candidate.vel.x == 0 and candidate.vel.y == 0:
            score += ZERO_VELOCITY_PENALTY
        if candidate.pos in car.trail[-REVISIT_WINDOW:]:
            score += REVISIT_PENALTY
        return score

    @staticmethod
    def _start(
        candidate: Candidate,
        car: CarState,
        analysis: TrackAnalysis,
        forward: Vec,
        speed: float,
    ) -> float:
        if point_segment_distance(car.pos, analysis.start_line) > START_AREA_RADIUS:
            return 0.0

        along = dot(candidate.vel, forward)
        score = START_FORWARD_BONUS * along
        if speed > 0 and abs(along) < 0.5 * speed:
            score += START_LATERAL_PENALTY
        if speed < START_MIN_SPEED:
            score += START_SLOW_PENALTY
        at_rest = car.vel.x == 0 and car.vel.y == 0
        if at_rest and (candidate.acc.x != 0 or candidate.acc.y != 0):
            score += START_LAUNCH_BONUS
        return score

    def _traffic_risk(self, candidate: Candidate) -> float:
        score = 0.0
        for other in self._traffic:
            d_now = distance(candidate.pos, other.pos)
            if d_now < CLOSE_CAR_DISTANCE:
                score += CLOSE_CAR_PENALTY * (CLOSE_CAR_DISTANCE - d_now)
            d_next = distance(candidate.pos, add(other.pos, other.vel))
            if d_next < PREDICTED_CAR_DISTANCE:
                score += PREDICTED_CAR_PENALTY * (PREDICTED_CAR_DISTANCE - d_next)
        return score

    def _can_stop(self, candidate: Candidate) -> bool:
        """Whether braking hard on every later turn keeps the car on the track.

        A car that keeps this property can never be forced off: braking once
        more is always a legal move that keeps it.
        """
        pos, vel = candidate.pos, candidate.vel
        while vel.x != 0 or vel.y != 0:
            vel = Vec(_toward_zero(vel.x), _toward_zero(vel.y))
            nxt = add(pos, vel)
            if not self._oracle.path_legal(pos, vel, nxt):
                return False
            pos = nxt
        return True

    def _jitter(self, profile: DifficultyProfile) -> float:
        if profile.randomness <= 0:
            return 0.0
        return self._rng.uniform(-1.0, 1.0) * profile.randomness * JITTER_SCALE


def _toward_zero(v: float) -> float:
    """One turn of braking on a single axis."""
    if v >= 1:
        return v - 1
    if v <= -1:
        return v + 1
    return 0.0
