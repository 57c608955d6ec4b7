"""Reference grid physics: move enumeration, legality and turn application.

The real game owns its own physics.  This module provides the same
contract so races can be simulated headless (scripts, debug API, tests).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import replace

from racing_ai.game.models import Candidate, CarState, GameState
from racing_ai.track.direction import Crossing, crossing_direction
from racing_ai.track.geometry import add, lerp, point_in_polygon
from racing_ai.track.models import TrackAnalysis, TrackGeometry, Vec

_logger = logging.getLogger(__name__)

ACCELERATIONS: tuple[Vec, ...] = tuple(Vec(ax, ay) for ax in (-1, 0, 1) for ay in (-1, 0, 1))
"""The 3×3 acceleration grid, ``ax`` outer and ``ay`` inner."""


def step_options(car: CarState) -> list[Candidate]:
    """Every acceleration on the grid with its resulting position and velocity."""
    options = []
    for acc in ACCELERATIONS:
        vel = add(car.vel, acc)
        options.append(Candidate(acc=acc, pos=add(car.pos, vel), vel=vel))
    return options


def inside_track(p: Vec, outer: Sequence[Vec], inner: Sequence[Vec]) -> bool:
    return point_in_polygon(p, outer) and not point_in_polygon(p, inner)


def path_clear(start: Vec, end: Vec, outer: Sequence[Vec], inner: Sequence[Vec]) -> bool:
    """True if every half-unit sample along ``start → end`` is on the track."""
    span = max(abs(end.x - start.x), abs(end.y - start.y))
    steps = max(1, math.ceil(span * 2))
    return all(inside_track(lerp(start, end, i / steps), outer, inner) for i in range(steps + 1))


class TrackLegalityOracle:
    """Legality checks against one track's boundaries.

    Parameters
    ----------
    track:
        Geometry whose outer/inner polygons bound the drivable area.
    """

    def __init__(self, track: TrackGeometry) -> None:
        self._outer = track.outer
        self._inner = track.inner

    def legal_step_options(self, state: GameState) -> list[Candidate]:
        """Candidates for the current car that stay on track and do not end
        on a cell occupied by another running car."""
        car = state.current_car
        occupied = {
            (other.pos.x, other.pos.y)
            for i, other in enumerate(state.cars)
            if i != state.current_index and not other.crashed and not other.finished
        }
        return [
            c
            for c in step_options(car)
            if (c.pos.x, c.pos.y) not in occupied
            and path_clear(car.pos, c.pos, self._outer, self._inner)
        ]

    def path_legal(self, pos: Vec, vel: Vec, candidate_pos: Vec) -> bool:
        """Whether a car at *pos* moving with *vel* may travel to *candidate_pos*.

        Only the straight path is checked; *vel* is accepted for interface
        compatibility with the game's own oracle.
        """
        return path_clear(pos, candidate_pos, self._outer, self._inner)


def apply_move(state: GameState, acc: Vec, analysis: TrackAnalysis) -> GameState:
    """Apply *acc* to the current car and hand the turn to the next car.

    A move whose path leaves the track crashes the car in place.  Crossing
    the lap gates in order and then the start line forward completes a lap.
    """
    idx = state.current_index
    car = state.current_car
    vel = add(car.vel, acc)
    new_pos = add(car.pos, vel)

    if not path_clear(car.pos, new_pos, analysis.outer, analysis.inner):
        _logger.info("car %d crashed moving %s -> %s", idx, car.pos, new_pos)
        moved = replace(car, vel=Vec(0, 0), crashed=True)
    else:
        moved = _advance_progress(car, new_pos, vel, analysis, state.target_laps)

    cars = list(state.cars)
    cars[idx] = moved
    return replace(
        state,
        cars=tuple(cars),
        current_index=_next_index(cars, idx),
        turn=state.turn + 1,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _advance_progress(
    car: CarState,
    new_pos: Vec,
    vel: Vec,
    analysis: TrackAnalysis,
    target_laps: int,
) -> CarState:
    gates = analysis.checkpoints
    next_cp = car.next_checkpoint
    while next_cp < len(gates) and (
        crossing_direction(car.pos, new_pos, gates[next_cp], analysis) is Crossing.FORWARD
    ):
        next_cp += 1

    lap = car.current_lap
    finished = False
    if next_cp == len(gates) and (
        crossing_direction(car.pos, new_pos, analysis.start_line, analysis) is Crossing.FORWARD
    ):
        lap += 1
        next_cp = 0
        finished = lap >= target_laps

    return replace(
        car,
        pos=new_pos,
        vel=vel,
        current_lap=lap,
        next_checkpoint=next_cp,
        finished=finished,
        trail=car.trail + (new_pos,),
    )


def _next_index(cars: list[CarState], current: int) -> int:
    n = len(cars)
    for step in range(1, n + 1):
        i = (current + step) % n
        if not cars[i].crashed and not cars[i].finished:
            return i
    return current
