"""
Read-only HTTP inspector for a running DecisionEngine.

Exposes the active events, the active decisions and the activation graph so
that an external viewer can follow what an agent is doing. Every route reads
through the engine's snapshot queries, which copy before sorting and never
notify the observer, so inspecting leaves selection and the graph unchanged.

The engine itself is not thread-safe. Serve the inspector from the thread
that drives the engine, or pause ticks while a request is handled:
    uvicorn.run(create_inspector_app(engine), host="127.0.0.1", port=8080)
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from .activation import ActivationGraph
from .engine import DecisionEngine

logger = logging.getLogger(__name__)


# ============================================================================
# Pydantic Models for API
# ============================================================================

class HealthResponse(BaseModel):
    status: str = "ok"
    engine_id: str
    tick: int


class DecisionInfo(BaseModel):
    """An active decision."""
    name: str
    description: str
    utility: str
    utility_value: int
    never_executed: bool
    seconds_since_execution: Optional[float] = Field(
        None, description="None if the decision never ran"
    )


class ActivationEntryInfo(BaseModel):
    name: str
    score: float


class ActivationInfo(BaseModel):
    """Snapshot of the activation graph."""
    entries: List[ActivationEntryInfo]
    best_index: Optional[int]
    searches: int


# ============================================================================
# App factory
# ============================================================================

def create_inspector_app(
    engine: DecisionEngine,
    graph: Optional[ActivationGraph] = None,
) -> FastAPI:
    """
    Build the inspector app for one engine.

    Args:
        engine: Engine to inspect
        graph: Activation graph to expose; defaults to the engine's observer
            when that is an ActivationGraph

    Returns:
        FastAPI application
    """
    if graph is None and isinstance(engine.observer, ActivationGraph):
        graph = engine.observer

    app = FastAPI(
        title="Behavior Engine Inspector",
        description=f"Read-only view of decision engine '{engine.config.engine_id}'",
    )

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(engine_id=engine.config.engine_id, tick=engine.tick)

    @app.get("/events", response_model=List[str])
    def events():
        return [_event_label(e) for e in engine.get_active_events()]

    @app.get("/decisions", response_model=List[DecisionInfo])
    def decisions():
        result = []
        for decision in engine.get_active_decisions():
            never = decision.is_never_executed()
            result.append(DecisionInfo(
                name=decision.name,
                description=decision.description,
                utility=decision.utility.name,
                utility_value=int(decision.utility),
                never_executed=never,
                seconds_since_execution=None if never else decision.time_since_execution(),
            ))
        return result

    @app.get("/activation", response_model=ActivationInfo)
    def activation():
        if graph is None:
            raise HTTPException(status_code=404, detail="No activation graph attached")
        return ActivationInfo(**graph.to_dict())

    logger.debug(f"Inspector created for engine '{engine.config.engine_id}'")
    return app


def _event_label(event) -> str:
    name = getattr(event, "name", None)
    return name if isinstance(name, str) else str(event)
