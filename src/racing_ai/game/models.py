"""Game-state snapshots consumed by the AI."""

from __future__ import annotations

from dataclasses import dataclass

from racing_ai.track.models import TrackGeometry, Vec


@dataclass(frozen=True)
class CarState:
    """One car as the turn system sees it.

    Velocity components are integers: each turn a car may change each of them
    by at most one.
    """

    pos: Vec
    """Current grid position."""

    vel: Vec
    """Current velocity."""

    crashed: bool = False
    finished: bool = False

    current_lap: int = 0
    """Laps completed so far."""

    trail: tuple[Vec, ...] = ()
    """Visited positions, oldest first; the current position is last."""

    next_checkpoint: int = 0
    """Index of the lap-validation gate the car must cross next."""


@dataclass(frozen=True)
class Candidate:
    """A legal acceleration and where it leads."""

    acc: Vec
    """Acceleration, each component in ``{-1, 0, 1}``."""

    pos: Vec
    """Resulting position."""

    vel: Vec
    """Resulting velocity."""


@dataclass(frozen=True)
class Player:
    name: str
    is_ai: bool = False
    difficulty: str = "medium"
    """Difficulty tier name for AI players (``easy``, ``medium`` or ``hard``)."""


@dataclass(frozen=True)
class GameState:
    """Snapshot of a race at the start of one car's turn."""

    track: TrackGeometry
    cars: tuple[CarState, ...]
    players: tuple[Player, ...]
    current_index: int = 0
    """Index of the car whose turn it is."""

    target_laps: int = 1
    turn: int = 0

    @property
    def current_car(self) -> CarState:
        return self.cars[self.current_index]

    @property
    def current_player(self) -> Player:
        return self.players[self.current_index]
