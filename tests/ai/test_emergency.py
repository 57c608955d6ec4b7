"""EmergencyPlanner: damage control when no legal move exists."""

from __future__ import annotations

import pytest

from racing_ai.ai.emergency import EmergencyPlanner
from racing_ai.config import DiagnosticsConfig
from racing_ai.diagnostics.events import DiagnosticsBus, EventKind, EventRecorder
from racing_ai.game.models import Candidate, CarState
from racing_ai.track.analyzer import TrackAnalyzer
from racing_ai.track.models import Vec
from racing_ai.track.tracks import DEFAULT_TRACK

_ANALYSIS = TrackAnalyzer().analyze_track(DEFAULT_TRACK)


def _planner() -> tuple[EmergencyPlanner, EventRecorder]:
    bus = DiagnosticsBus(DiagnosticsConfig())
    recorder = EventRecorder()
    bus.subscribe(recorder)
    return EmergencyPlanner(bus), recorder


def test_brakes_when_moving():
    planner, _ = _planner()
    car = CarState(pos=Vec(25, 29), vel=Vec(3, 0))
    move = planner.plan(car, _ANALYSIS)
    assert move.acc.x == -1
    assert move.vel == Vec(2, 0)


def test_stays_put_at_rest_on_the_line():
    planner, _ = _planner()
    car = CarState(pos=Vec(25, 29), vel=Vec(0, 0))
    assert planner.plan(car, _ANALYSIS).acc == Vec(0, 0)


def test_reports_activation():
    planner, recorder = _planner()
    car = CarState(pos=Vec(25, 29), vel=Vec(3, 0))
    planner.plan(car, _ANALYSIS, car_index=2, reason="no legal moves")
    (event,) = recorder.of_kind(EventKind.EMERGENCY_FALLBACK)
    assert event.car_index == 2
    assert event.payload["reason"] == "no legal moves"
    assert event.payload["acc"] == [-1, 0]


def test_no_move_for_stopped_cars():
    planner, recorder = _planner()
    assert planner.plan(CarState(pos=Vec(25, 29), vel=Vec(0, 0), crashed=True), _ANALYSIS) is None
    assert planner.plan(CarState(pos=Vec(25, 29), vel=Vec(0, 0), finished=True), _ANALYSIS) is None
    assert recorder.events == []


def test_crawl_speed_rewarded():
    car = CarState(pos=Vec(25, 29), vel=Vec(2, 0))
    crawl = Candidate(acc=Vec(-1, 0), pos=Vec(26, 29), vel=Vec(1, 0))
    # 20 shed + 15 braking + 25 crawl - 2 off the line - 3 input
    assert EmergencyPlanner.score(crawl, car, _ANALYSIS) == pytest.approx(55.0)
