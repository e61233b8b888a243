"""FastAPI application for the workflow dependency graph."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .config import settings
from .models import DependencyEdge, DependencyType, WorkflowSection, WorkflowTask
from workflow_graph.exceptions import SessionNotFoundError, UnknownLayoutStrategyError
from workflow_graph.graph.validators import IntegrityReport, RejectionReason
from workflow_graph.layout import Direction, get_layout_strategy
from workflow_graph.orchestrator import MutationResult, SessionStore, WorkflowSnapshot

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

store = SessionStore(
    default_strategy=settings.layout_strategy,
    default_options=settings.layout_options(),
    default_auto_layout=settings.auto_layout,
    idle_timeout=settings.session_idle_timeout,
)


def get_store() -> SessionStore:
    """Session store dependency."""
    return store


class CreateSessionRequest(BaseModel):
    """Body of POST /sessions."""
    model_config = ConfigDict(populate_by_name=True)

    tasks: list[WorkflowTask]
    sections: list[WorkflowSection] = []
    strategy: Optional[str] = None
    direction: Optional[Direction] = None
    auto_layout: Optional[bool] = Field(default=None, alias="autoLayout")


class ConnectRequest(BaseModel):
    """Body of POST /sessions/{id}/dependencies."""
    source: str
    target: str


class UpdateDependencyRequest(BaseModel):
    """Body of PATCH /sessions/{id}/dependencies/{edge_id}."""
    type: Optional[DependencyType] = None
    lag: Optional[int] = None


class LayoutRequest(BaseModel):
    """Body of POST /sessions/{id}/layout."""
    direction: Optional[Direction] = None
    strategy: Optional[str] = None


class CriticalPathResponse(BaseModel):
    path: list[str]
    edges: list[DependencyEdge]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    # Startup
    logger.info("Starting workflow-graph API")

    yield

    # Shutdown
    logger.info(f"Shutting down workflow-graph API ({len(store)} open sessions)")


# Create FastAPI app
app = FastAPI(
    title="Workflow Graph API",
    description="Task dependency graph engine: validation, layout and critical path",
    version="0.1.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SessionNotFoundError)
async def session_not_found_handler(request: Request, exc: SessionNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(UnknownLayoutStrategyError)
async def unknown_strategy_handler(request: Request, exc: UnknownLayoutStrategyError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def _mutation_response(result: MutationResult) -> DependencyEdge:
    """Return the edge of a successful mutation or raise the matching HTTP error."""
    if result.ok:
        return result.edge
    status_code = 404 if result.reason == RejectionReason.UNKNOWN_DEPENDENCY else 409
    raise HTTPException(status_code=status_code, detail={"reason": result.reason.value})


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Workflow Graph API",
        "version": "0.1.0",
        "status": "running"
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.post("/sessions", response_model=WorkflowSnapshot, status_code=201)
def create_session(body: CreateSessionRequest, sessions: SessionStore = Depends(get_store)):
    session = sessions.create(
        body.tasks,
        sections=body.sections,
        strategy=body.strategy,
        direction=body.direction,
        auto_layout=body.auto_layout,
    )
    return session.snapshot()


@app.get("/sessions/{session_id}", response_model=WorkflowSnapshot)
def get_session(session_id: str, sessions: SessionStore = Depends(get_store)):
    return sessions.get(session_id).snapshot()


@app.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str, sessions: SessionStore = Depends(get_store)):
    sessions.delete(session_id)
    return Response(status_code=204)


@app.post("/sessions/{session_id}/dependencies", response_model=DependencyEdge, status_code=201)
def connect(session_id: str, body: ConnectRequest, sessions: SessionStore = Depends(get_store)):
    """Add a dependency; 409 with the reason if it is rejected."""
    result = sessions.get(session_id).connect(body.source, body.target)
    return _mutation_response(result)


@app.post("/sessions/{session_id}/dependencies/{edge_id}/retype", response_model=DependencyEdge)
def retype(session_id: str, edge_id: str, sessions: SessionStore = Depends(get_store)):
    result = sessions.get(session_id).retype(edge_id)
    return _mutation_response(result)


@app.patch("/sessions/{session_id}/dependencies/{edge_id}", response_model=DependencyEdge)
def update_dependency(
    session_id: str,
    edge_id: str,
    body: UpdateDependencyRequest,
    sessions: SessionStore = Depends(get_store)
):
    """Set type and/or lag of a dependency."""
    result = sessions.get(session_id).update_edge(edge_id, type=body.type, lag=body.lag)
    return _mutation_response(result)


@app.delete("/sessions/{session_id}/dependencies/{edge_id}", status_code=204)
def disconnect(session_id: str, edge_id: str, sessions: SessionStore = Depends(get_store)):
    result = sessions.get(session_id).disconnect(edge_id)
    _mutation_response(result)
    return Response(status_code=204)


@app.post("/sessions/{session_id}/layout", response_model=WorkflowSnapshot)
def layout(session_id: str, body: LayoutRequest, sessions: SessionStore = Depends(get_store)):
    session = sessions.get(session_id)
    strategy = None
    if body.strategy is not None:
        strategy = get_layout_strategy(body.strategy, session.sections)
    session.auto_layout(direction=body.direction, strategy=strategy)
    return session.snapshot()


@app.get("/sessions/{session_id}/critical-path", response_model=CriticalPathResponse)
def get_critical_path(session_id: str, sessions: SessionStore = Depends(get_store)):
    session = sessions.get(session_id)
    return CriticalPathResponse(path=session.critical_path(), edges=session.critical_path_edges())


@app.get("/sessions/{session_id}/integrity", response_model=IntegrityReport)
def get_integrity(session_id: str, sessions: SessionStore = Depends(get_store)):
    return sessions.get(session_id).check_integrity()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
