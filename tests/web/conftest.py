"""Shared fixtures for web tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from racing_ai.web.app import app


@pytest.fixture
def client():
    """FastAPI test client."""
    with TestClient(app) as c:
        yield c


def make_track_payload(
    outer: list[tuple[float, float]] | None = None,
    inner: list[tuple[float, float]] | None = None,
    start_line: tuple[tuple[float, float], tuple[float, float]] = ((2, 18), (12, 18)),
    name: str = "custom",
) -> dict:
    """Build a TrackRequest body, defaulting to the default rectangle."""
    outer = outer or [(2, 2), (48, 2), (48, 33), (2, 33)]
    inner = inner or [(12, 10), (38, 10), (38, 25), (12, 25)]
    (ax, ay), (bx, by) = start_line
    return {
        "outer": [{"x": x, "y": y} for x, y in outer],
        "inner": [{"x": x, "y": y} for x, y in inner],
        "start_line": {"a": {"x": ax, "y": ay}, "b": {"x": bx, "y": by}},
        "name": name,
    }
