"""Difficulty tiers for AI opponents."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class DifficultyProfile:
    """How one AI car drives, fixed for the whole race."""

    target_speed_range: tuple[float, float]
    """Preferred ``(min, max)`` speed after a move."""

    randomness: float
    """Scale of the uniform jitter added to move scores (0 = deterministic)."""

    lookahead_depth: int = 0
    """Turns searched ahead; 0 uses the single-step scorer only."""


PROFILES: dict[Difficulty, DifficultyProfile] = {
    Difficulty.EASY: DifficultyProfile(target_speed_range=(1.5, 3.0), randomness=0.5),
    Difficulty.MEDIUM: DifficultyProfile(target_speed_range=(2.0, 4.0), randomness=0.15),
    Difficulty.HARD: DifficultyProfile(target_speed_range=(2.5, 5.0), randomness=0.0, lookahead_depth=2),
}


def profile_for(name: str | Difficulty, default: str | Difficulty = Difficulty.MEDIUM) -> DifficultyProfile:
    """Profile for tier *name*, falling back to *default* for unknown names."""
    try:
        return PROFILES[Difficulty(name)]
    except ValueError:
        return PROFILES[Difficulty(default)]
