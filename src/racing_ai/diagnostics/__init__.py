"""Diagnostic event stream for AI decisions."""

from racing_ai.diagnostics.events import (
    DiagnosticEvent,
    DiagnosticsBus,
    EventKind,
    EventRecorder,
)

__all__ = ["DiagnosticEvent", "DiagnosticsBus", "EventKind", "EventRecorder"]
