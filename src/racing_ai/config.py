"""AI subsystem configuration.

Configuration is passed explicitly into :class:`~racing_ai.ai.controller.AIController`
rather than read from process-wide flags.  :meth:`AIConfig.from_env` builds
one from environment variables (after ``load_dotenv()`` in entry points):

=================================  ==========================================
``RACING_AI_ENABLED``              ``1``/``true`` (default) or ``0``/``false``
``RACING_AI_VERBOSE``              emit per-move diagnostic events
``RACING_AI_LOG_LEVEL``            logging level name (default ``INFO``)
``RACING_AI_DIFFICULTY``           fallback tier for players without one
``RACING_AI_LOOKAHEAD_BUDGET_MS``  wall-clock ceiling for lookahead search
=================================  ==========================================
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class DiagnosticsConfig:
    """Diagnostic output settings."""

    verbose: bool = False
    """Emit per-move events (chosen waypoint, score breakdown)."""

    log_level: str = "INFO"


@dataclass(frozen=True)
class AIConfig:
    """Settings for the AI subsystem as a whole."""

    enabled: bool = True
    """When False, the controller declines every move request."""

    default_difficulty: str = "medium"
    """Tier used for AI players whose difficulty is not a known tier."""

    lookahead_budget_s: float = 0.03
    """Hard ceiling on lookahead search time per move."""

    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> AIConfig:
        """Build a config from ``RACING_AI_*`` variables.

        Raises:
            ValueError: If a variable holds an unparseable value.
        """
        env = os.environ if env is None else env
        budget_ms = float(env.get("RACING_AI_LOOKAHEAD_BUDGET_MS", "30"))
        if budget_ms <= 0:
            raise ValueError("RACING_AI_LOOKAHEAD_BUDGET_MS must be positive")
        return cls(
            enabled=_parse_bool(env.get("RACING_AI_ENABLED", "1"), "RACING_AI_ENABLED"),
            default_difficulty=env.get("RACING_AI_DIFFICULTY", "medium").strip().lower(),
            lookahead_budget_s=budget_ms / 1000.0,
            diagnostics=DiagnosticsConfig(
                verbose=_parse_bool(env.get("RACING_AI_VERBOSE", "0"), "RACING_AI_VERBOSE"),
                log_level=env.get("RACING_AI_LOG_LEVEL", "INFO").strip().upper(),
            ),
        )


def _parse_bool(raw: str, name: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")
