"""Headless race between AI cars on the default track.

Usage:
    python scripts/simulate_race.py
    python scripts/simulate_race.py --cars 3 --laps 2 --difficulty hard
    python scripts/simulate_race.py --seed 7 --verbose     # per-move diagnostics
"""

from __future__ import annotations

import argparse
import logging
import random
import sys

from dotenv import load_dotenv

load_dotenv()

from racing_ai.ai.controller import AIController  # noqa: E402
from racing_ai.config import AIConfig, DiagnosticsConfig  # noqa: E402
from racing_ai.diagnostics.events import DiagnosticEvent, EventKind  # noqa: E402
from racing_ai.game.models import CarState, GameState, Player  # noqa: E402
from racing_ai.game.physics import apply_move  # noqa: E402
from racing_ai.track.models import Vec  # noqa: E402
from racing_ai.track.tracks import DEFAULT_START_POSITIONS, DEFAULT_TRACK  # noqa: E402


def _initial_state(n_cars: int, laps: int, difficulty: str) -> GameState:
    if n_cars > len(DEFAULT_START_POSITIONS):
        raise SystemExit(f"at most {len(DEFAULT_START_POSITIONS)} cars fit on the grid")
    cars = tuple(
        CarState(pos=pos, vel=Vec(0, 0), trail=(pos,))
        for pos in DEFAULT_START_POSITIONS[:n_cars]
    )
    players = tuple(Player(name=f"AI {i + 1}", is_ai=True, difficulty=difficulty) for i in range(n_cars))
    return GameState(track=DEFAULT_TRACK, cars=cars, players=players, target_laps=laps)


def main() -> None:
    ap = argparse.ArgumentParser(description="Simulate a headless AI race on the default track")
    ap.add_argument("--cars", type=int, default=2, help="Number of AI cars")
    ap.add_argument("--laps", type=int, default=1, help="Laps to complete")
    ap.add_argument("--difficulty", default=None, help="easy / medium / hard")
    ap.add_argument("--max-turns", type=int, default=600, help="Stop after this many turns")
    ap.add_argument("--seed", type=int, default=None, help="Seed for score jitter")
    ap.add_argument("--verbose", action="store_true", help="Emit per-move diagnostic events")
    args = ap.parse_args()

    env_config = AIConfig.from_env()
    config = AIConfig(
        enabled=env_config.enabled,
        default_difficulty=env_config.default_difficulty,
        lookahead_budget_s=env_config.lookahead_budget_s,
        diagnostics=DiagnosticsConfig(
            verbose=args.verbose or env_config.diagnostics.verbose,
            log_level="DEBUG" if args.verbose else env_config.diagnostics.log_level,
        ),
    )
    logging.basicConfig(level=config.diagnostics.log_level, format="%(levelname)s %(name)s: %(message)s")

    if not config.enabled:
        print("AI subsystem disabled (RACING_AI_ENABLED); nothing to simulate.", file=sys.stderr)
        return

    difficulty = args.difficulty or config.default_difficulty
    controller = AIController(config=config, rng=random.Random(args.seed))
    emergencies: list[DiagnosticEvent] = []

    def _on_event(event: DiagnosticEvent) -> None:
        if event.kind is EventKind.EMERGENCY_FALLBACK:
            emergencies.append(event)

    controller.diagnostics.subscribe(_on_event)

    state = _initial_state(args.cars, args.laps, difficulty)
    analysis = controller.analysis_for(state.track)
    print(
        f"Track {state.track.name!r}: {analysis.racing_direction.value}, "
        f"{len(analysis.racing_line)} waypoints, {len(analysis.checkpoints)} checkpoints"
    )

    while state.turn < args.max_turns:
        if all(c.crashed or c.finished for c in state.cars):
            break
        idx = state.current_index
        acc = controller.choose_ai_move(state)
        if acc is None:
            break
        state = apply_move(state, acc, analysis)
        car = state.cars[idx]
        status = "CRASH" if car.crashed else ("FINISH" if car.finished else "")
        print(
            f"turn {state.turn:4d}  car {idx}  acc ({acc.x:+g},{acc.y:+g})  "
            f"pos ({car.pos.x:g},{car.pos.y:g})  vel ({car.vel.x:g},{car.vel.y:g})  "
            f"lap {car.current_lap} cp {car.next_checkpoint} {status}",
            flush=True,
        )

    print()
    for player, car in zip(state.players, state.cars):
        outcome = "crashed" if car.crashed else ("finished" if car.finished else "running")
        print(f"  {player.name}: {car.current_lap} lap(s), {outcome}")
    print(f"  emergency fallbacks: {len(emergencies)}")


if __name__ == "__main__":
    main()
