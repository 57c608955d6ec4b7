"""Move selection for computer-controlled cars."""

from racing_ai.ai.controller import AIController, TrackAnalysisCache
from racing_ai.ai.emergency import EmergencyPlanner
from racing_ai.ai.profiles import PROFILES, Difficulty, DifficultyProfile, profile_for
from racing_ai.ai.scorer import MoveScorer, NoLegalMoves, ScoreBreakdown
from racing_ai.ai.strategy import LookaheadStrategy, MoveStrategy, SingleStepStrategy, strategy_for

__all__ = [
    "AIController",
    "Difficulty",
    "DifficultyProfile",
    "EmergencyPlanner",
    "LookaheadStrategy",
    "MoveScorer",
    "MoveStrategy",
    "NoLegalMoves",
    "PROFILES",
    "ScoreBreakdown",
    "SingleStepStrategy",
    "TrackAnalysisCache",
    "profile_for",
    "strategy_for",
]
