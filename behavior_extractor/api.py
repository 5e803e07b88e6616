"""
FastAPI API layer for the Behavior Extractor.

Provides REST endpoints for:
- Session ingestion and retrieval
- Transformation of inline sessions into absolute behavior models
- Building and retrieving models for stored sessions
"""

from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from .config import ExtractorConfig
from .diagnostics import CollectingDiagnosticSink, LoggingDiagnosticSink
from .exceptions import InvalidSessionError
from .models import ObservedUseCaseExecution, Session, UseCase
from .store import SessionStore
from .transformer import SessionTransformer

API_VERSION = "0.1.0"


# Pydantic models for API
class UseCaseInput(BaseModel):
    """Input model for a use case."""

    use_case_id: str
    name: str = ""


class ExecutionInput(BaseModel):
    """Input model for a single use-case execution."""

    use_case: UseCaseInput
    start_time: int
    end_time: Optional[int] = None


class SessionInput(BaseModel):
    """Input model for a session trace."""

    session_id: str
    executions: list[ExecutionInput] = Field(default_factory=list)


class IngestResponse(BaseModel):
    """Response from session ingestion."""

    status: str
    session_id: str
    execution_count: int


class SessionSummary(BaseModel):
    """Summary of a stored session."""

    session_id: str
    execution_count: int
    start_time: Optional[int] = None
    end_time: Optional[int] = None


class SessionListResponse(BaseModel):
    """Response for listing sessions."""

    sessions: list[SessionSummary]
    total: int
    limit: int
    offset: int


class TransformRequest(BaseModel):
    """Request to transform inline sessions."""

    sessions: list[SessionInput]
    default_use_cases: Optional[list[UseCaseInput]] = None


class DiagnosticItem(BaseModel):
    """A diagnostic raised during transformation."""

    severity: str
    session_id: str
    source_use_case_id: str
    target_use_case_id: str
    time_distance: int
    message: str


class TransformResponse(BaseModel):
    """Response from a transformation."""

    models: list[dict]
    diagnostics: list[DiagnosticItem]


class BuildRequest(BaseModel):
    """Request to build models for all stored sessions."""

    default_use_cases: Optional[list[UseCaseInput]] = None


class BuildResponse(BaseModel):
    """Response from building stored models."""

    status: str
    models_built: int
    diagnostics: list[DiagnosticItem]


def _to_use_case(data: UseCaseInput) -> UseCase:
    return UseCase(use_case_id=data.use_case_id, name=data.name)


def _to_session(data: SessionInput) -> Session:
    return Session(
        session_id=data.session_id,
        executions=[
            ObservedUseCaseExecution(
                use_case=_to_use_case(e.use_case),
                start_time=e.start_time,
                end_time=e.end_time,
            )
            for e in data.executions
        ],
    )


# FastAPI app factory
def create_app(config: Optional[ExtractorConfig] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Configuration for the behavior extractor

    Returns:
        Configured FastAPI app
    """
    config = config or ExtractorConfig()

    app = FastAPI(
        title="Behavior Extractor API",
        description="Transforms session traces into absolute behavior models",
        version=API_VERSION,
    )

    # Initialize store lazily
    _store: Optional[SessionStore] = None

    def get_store() -> SessionStore:
        nonlocal _store
        if _store is None:
            _store = SessionStore(config)
        return _store

    def new_transformer() -> tuple[SessionTransformer, CollectingDiagnosticSink]:
        sink = CollectingDiagnosticSink(
            forward_to=LoggingDiagnosticSink() if config.log_negative_time_ranges else None
        )
        return SessionTransformer(config, sink=sink), sink

    def defaults_from(items: Optional[list[UseCaseInput]]) -> Optional[list[UseCase]]:
        if items is None:
            return None
        return [_to_use_case(u) for u in items]

    # Health check
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": API_VERSION}

    # =========================================================================
    # Sessions
    # =========================================================================

    @app.post("/sessions", response_model=IngestResponse)
    async def ingest_session(request: SessionInput):
        """
        Ingest a session trace and persist it to the store.
        """
        store = get_store()
        session = _to_session(request)

        if not store.save_session(session):
            raise HTTPException(status_code=500, detail="Failed to save session")

        return IngestResponse(
            status="accepted",
            session_id=session.session_id,
            execution_count=session.execution_count,
        )

    @app.get("/sessions", response_model=SessionListResponse)
    async def list_sessions(
        limit: int = Query(50, ge=1, le=1000),
        offset: int = Query(0, ge=0),
    ):
        """
        List stored sessions.
        """
        store = get_store()
        rows, total = store.list_session_summaries(limit=limit, offset=offset)
        summaries = [SessionSummary(**row) for row in rows]

        return SessionListResponse(
            sessions=summaries,
            total=total,
            limit=limit,
            offset=offset,
        )

    @app.get("/sessions/{session_id}")
    async def get_session(session_id: str):
        """
        Get full session detail including all executions.
        """
        session = get_store().get_session(session_id, include_executions=True)
        if not session:
            raise HTTPException(status_code=404, detail="Session not found")
        return {"session": session.to_dict()}

    # =========================================================================
    # Behavior Models
    # =========================================================================

    @app.post("/models/transform", response_model=TransformResponse)
    async def transform(request: TransformRequest):
        """
        Transform inline sessions into absolute behavior models.

        Nothing is persisted; negative time ranges are reported as diagnostics.
        """
        if len(request.sessions) > config.max_sessions_per_request:
            raise HTTPException(
                status_code=400,
                detail=f"At most {config.max_sessions_per_request} sessions per request",
            )

        transformer, sink = new_transformer()
        try:
            models = transformer.transform(
                [_to_session(s) for s in request.sessions],
                defaults_from(request.default_use_cases),
            )
        except InvalidSessionError as e:
            raise HTTPException(status_code=422, detail={"error": e.message, **e.details})

        return TransformResponse(
            models=[m.to_dict() for m in models],
            diagnostics=[DiagnosticItem(**d.to_dict()) for d in sink.events],
        )

    @app.post("/models/build", response_model=BuildResponse)
    async def build_models(request: Optional[BuildRequest] = None):
        """
        Build and persist a model for every stored session.

        Nothing is persisted if any stored session is invalid.
        """
        store = get_store()
        transformer, sink = new_transformer()
        defaults = defaults_from(request.default_use_cases) if request else None

        # Transform everything before saving anything
        try:
            models = transformer.transform(store.iter_sessions(), defaults)
        except InvalidSessionError as e:
            raise HTTPException(status_code=422, detail={"error": e.message, **e.details})

        built = sum(1 for model in models if store.save_behavior_model(model))

        return BuildResponse(
            status="completed",
            models_built=built,
            diagnostics=[DiagnosticItem(**d.to_dict()) for d in sink.events],
        )

    @app.get("/models/{session_id}")
    async def get_model(session_id: str):
        """
        Get the persisted model of a session.
        """
        model = get_store().get_behavior_model(session_id)
        if model is None:
            raise HTTPException(status_code=404, detail="Model not found")
        return {"model": model}

    # =========================================================================
    # Stats
    # =========================================================================

    @app.get("/stats")
    async def get_stats():
        """
        Get overall statistics about stored sessions and models.
        """
        return {"store": get_store().get_stats()}

    return app


# Create default app instance
app = create_app()
