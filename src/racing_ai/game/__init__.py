"""Game-state models and the reference grid physics."""

from racing_ai.game.models import Candidate, CarState, GameState, Player
from racing_ai.game.physics import (
    ACCELERATIONS,
    TrackLegalityOracle,
    apply_move,
    inside_track,
    path_clear,
    step_options,
)

__all__ = [
    "ACCELERATIONS",
    "Candidate",
    "CarState",
    "GameState",
    "Player",
    "TrackLegalityOracle",
    "apply_move",
    "inside_track",
    "path_clear",
    "step_options",
]
