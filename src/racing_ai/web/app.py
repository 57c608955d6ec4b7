"""FastAPI debug application for inspecting AI decisions."""

from __future__ import annotations

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException

from racing_ai import __version__
from racing_ai.config import AIConfig
from racing_ai.web.schemas import (
    AnalysisResponse,
    HealthResponse,
    MoveRequest,
    MoveResponse,
    TrackRequest,
)
from racing_ai.web.service import DebugService

load_dotenv()  # loads .env from project root; must run before env vars are consumed

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

app = FastAPI(title="Racing AI debug", version=__version__)

_service = DebugService(AIConfig.from_env())


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


@app.get("/api/track/analysis", response_model=AnalysisResponse)
def default_analysis() -> AnalysisResponse:
    """Analysis of the default track."""
    return _service.analyze()


@app.post("/api/track/analyze", response_model=AnalysisResponse)
def analyze_track(req: TrackRequest) -> AnalysisResponse:
    """Analyze posted track geometry."""
    try:
        return _service.analyze(req)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@app.post("/api/ai/move", response_model=MoveResponse)
def ai_move(req: MoveRequest) -> MoveResponse:
    """Run one AI decision and return the move with its diagnostic events."""
    try:
        return _service.move(req)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
