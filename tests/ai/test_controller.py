"""AIController: end-to-end move selection and failure handling."""

from __future__ import annotations

import random
from unittest.mock import MagicMock

import pytest

from racing_ai.ai.controller import AIController, TrackAnalysisCache
from racing_ai.config import AIConfig, DiagnosticsConfig
from racing_ai.diagnostics.events import DiagnosticsBus, EventKind, EventRecorder
from racing_ai.game.models import CarState, GameState, Player
from racing_ai.game.physics import ACCELERATIONS
from racing_ai.track.analyzer import DegenerateTrackGeometry
from racing_ai.track.models import Segment, TrackGeometry, Vec
from racing_ai.track.tracks import DEFAULT_TRACK

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _no_moves_oracle() -> MagicMock:
    oracle = MagicMock()
    oracle.legal_step_options.return_value = []
    return oracle


def _broken_oracle() -> MagicMock:
    oracle = MagicMock()
    oracle.legal_step_options.side_effect = RuntimeError("physics unavailable")
    return oracle


def _state(
    car: CarState | None = None,
    is_ai: bool = True,
    difficulty: str = "medium",
    track: TrackGeometry = DEFAULT_TRACK,
) -> GameState:
    car = car or CarState(pos=Vec(7, 19), vel=Vec(0, 0), trail=(Vec(7, 19),))
    return GameState(track=track, cars=(car,), players=(Player("ai", is_ai=is_ai, difficulty=difficulty),))


def _controller(
    oracle=None,
    verbose: bool = True,
    enabled: bool = True,
) -> tuple[AIController, EventRecorder]:
    config = AIConfig(enabled=enabled, diagnostics=DiagnosticsConfig(verbose=verbose))
    bus = DiagnosticsBus(config.diagnostics)
    recorder = EventRecorder()
    bus.subscribe(recorder)
    controller = AIController(config=config, oracle=oracle, diagnostics=bus, rng=random.Random(1))
    return controller, recorder


# ---------------------------------------------------------------------------
# Normal turns
# ---------------------------------------------------------------------------


def test_launch_from_the_grid():
    controller, recorder = _controller()
    assert controller.choose_ai_move(_state()) == Vec(1, 1)
    assert controller.current_target(0).pos == Vec(5, 23)
    assert len(recorder.of_kind(EventKind.WAYPOINT_TARGETED)) == 1
    (chosen,) = recorder.of_kind(EventKind.MOVE_CHOSEN)
    assert chosen.payload["acc"] == [1, 1]
    assert "total" in chosen.payload["breakdown"]


def test_quiet_by_default():
    controller, recorder = _controller(verbose=False)
    controller.choose_ai_move(_state())
    assert recorder.events == []


def test_hard_tier_returns_a_grid_move():
    controller, _ = _controller()
    assert controller.choose_ai_move(_state(difficulty="hard")) in ACCELERATIONS


def test_unknown_difficulty_uses_default_tier():
    controller, _ = _controller()
    assert controller.choose_ai_move(_state(difficulty="insane")) in ACCELERATIONS


def test_revisit_reported_as_stuck_loop():
    trail = (Vec(8, 20), Vec(7, 20), Vec(6, 20), Vec(7, 19))
    car = CarState(pos=Vec(7, 19), vel=Vec(0, 0), trail=trail)
    controller, recorder = _controller()
    controller.choose_ai_move(_state(car))
    assert len(recorder.of_kind(EventKind.STUCK_LOOP)) == 1


# ---------------------------------------------------------------------------
# Declined turns
# ---------------------------------------------------------------------------


def test_human_player_gets_no_move():
    controller, _ = _controller()
    assert controller.choose_ai_move(_state(is_ai=False)) is None


def test_disabled_subsystem_declines():
    controller, _ = _controller(enabled=False)
    assert controller.choose_ai_move(_state()) is None


def test_crashed_car_gets_no_move():
    controller, _ = _controller()
    car = CarState(pos=Vec(7, 19), vel=Vec(0, 0), crashed=True)
    assert controller.choose_ai_move(_state(car)) is None


# ---------------------------------------------------------------------------
# Failure handling
# ---------------------------------------------------------------------------


def test_no_legal_moves_still_moves():
    oracle = _no_moves_oracle()
    controller, recorder = _controller(oracle=oracle)
    move = controller.choose_ai_move(_state())
    assert move in ACCELERATIONS
    oracle.legal_step_options.assert_called_once()
    assert len(recorder.of_kind(EventKind.EMERGENCY_FALLBACK)) == 1


def test_decision_error_falls_back(caplog):
    controller, recorder = _controller(oracle=_broken_oracle(), verbose=False)
    move = controller.choose_ai_move(_state())
    assert move in ACCELERATIONS
    (error,) = recorder.of_kind(EventKind.AI_ERROR)
    assert error.payload["error"] == "RuntimeError"
    assert len(recorder.of_kind(EventKind.EMERGENCY_FALLBACK)) == 1
    assert "AI decision failed" in caplog.text


def test_degenerate_track_raises():
    bad = TrackGeometry(
        outer=(Vec(0, 0), Vec(10, 0), Vec(20, 0)),
        inner=(Vec(1, 1), Vec(2, 1), Vec(2, 2)),
        start_line=Segment(Vec(0, 0), Vec(1, 0)),
    )
    controller, _ = _controller()
    with pytest.raises(DegenerateTrackGeometry):
        controller.choose_ai_move(_state(track=bad))


# ---------------------------------------------------------------------------
# Analysis cache
# ---------------------------------------------------------------------------


def test_cache_analyzes_each_track_once():
    cache = TrackAnalysisCache()
    first = cache.get(DEFAULT_TRACK)
    assert cache.get(DEFAULT_TRACK) is first
    assert len(cache) == 1


def test_cache_invalidate():
    cache = TrackAnalysisCache()
    cache.get(DEFAULT_TRACK)
    cache.invalidate(DEFAULT_TRACK)
    assert len(cache) == 0


def test_controllers_share_a_cache():
    cache = TrackAnalysisCache()
    a = AIController(cache=cache)
    b = AIController(cache=cache)
    assert a.analysis_for(DEFAULT_TRACK) is b.analysis_for(DEFAULT_TRACK)
    assert len(cache) == 1


def test_empty_injected_cache_is_used():
    cache = TrackAnalysisCache()
    controller = AIController(cache=cache)
    controller.choose_ai_move(_state())
    assert cache.get(DEFAULT_TRACK) is controller.analysis_for(DEFAULT_TRACK)
    assert len(cache) == 1
