"""Structured diagnostic events emitted by the AI.

Decision code never prints or branches on a debug flag.  It emits events on
a :class:`DiagnosticsBus`, which logs them and forwards them to subscribers
such as the debug visualizer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from racing_ai.config import DiagnosticsConfig

_logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    EMERGENCY_FALLBACK = "emergency_fallback_activated"
    WAYPOINT_TARGETED = "waypoint_targeted"
    MOVE_CHOSEN = "move_chosen"
    LOOKAHEAD_TIMEOUT = "lookahead_timeout"
    STUCK_LOOP = "stuck_loop"
    AI_ERROR = "ai_error"


# Kinds only emitted when verbose diagnostics are on
VERBOSE_KINDS = frozenset({EventKind.WAYPOINT_TARGETED, EventKind.MOVE_CHOSEN})

DEFAULT_LEVELS: dict[EventKind, int] = {
    EventKind.EMERGENCY_FALLBACK: logging.WARNING,
    EventKind.WAYPOINT_TARGETED: logging.DEBUG,
    EventKind.MOVE_CHOSEN: logging.DEBUG,
    EventKind.LOOKAHEAD_TIMEOUT: logging.INFO,
    EventKind.STUCK_LOOP: logging.INFO,
    EventKind.AI_ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class DiagnosticEvent:
    """One observation about an AI decision."""

    kind: EventKind
    car_index: int
    message: str
    payload: dict[str, Any] = field(default_factory=dict)
    level: int = logging.INFO

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "car_index": self.car_index,
            "message": self.message,
            "level": logging.getLevelName(self.level),
            "payload": self.payload,
        }


Subscriber = Callable[[DiagnosticEvent], None]


class DiagnosticsBus:
    """Fan-out point for diagnostic events.

    Parameters
    ----------
    config:
        Verbosity settings; verbose-only kinds are dropped unless
        ``config.verbose`` is set.
    """

    def __init__(self, config: DiagnosticsConfig | None = None) -> None:
        self._config = config or DiagnosticsConfig()
        self._subscribers: list[Subscriber] = []

    @property
    def verbose(self) -> bool:
        return self._config.verbose

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def emit(
        self,
        kind: EventKind,
        car_index: int,
        message: str,
        **payload: Any,
    ) -> DiagnosticEvent | None:
        """Log and publish an event.

        Returns the event, or None if it was suppressed by verbosity.
        """
        if kind in VERBOSE_KINDS and not self._config.verbose:
            return None

        event = DiagnosticEvent(
            kind=kind,
            car_index=car_index,
            message=message,
            payload=payload,
            level=DEFAULT_LEVELS[kind],
        )
        _logger.log(event.level, "[car %d] %s: %s", car_index, kind.value, message)

        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                _logger.exception("diagnostics subscriber %r failed", callback)
        return event


class EventRecorder:
    """Subscriber that keeps every event it receives."""

    def __init__(self) -> None:
        self.events: list[DiagnosticEvent] = []

    def __call__(self, event: DiagnosticEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> list[DiagnosticEvent]:
        return [e for e in self.events if e.kind is kind]

    def clear(self) -> None:
        self.events.clear()
