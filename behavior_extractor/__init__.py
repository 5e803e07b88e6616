"""
Behavior Extractor - Session traces to absolute behavior models.

Turns recorded user sessions (ordered, timestamped use-case executions) into
per-session graphs: one vertex per use case plus a final state, with
transitions carrying raw traversal counts and raw time samples. These models
are the input for later probability and think-time estimation.

Usage:
    from behavior_extractor import (
        ExtractorConfig, SessionStore, SessionTransformer, UseCase
    )

    config = ExtractorConfig(db_path=Path("db/sessions.db"))
    store = SessionStore(config)

    # Ingest mock data for testing
    from behavior_extractor.mock import generate_sample_sessions
    for session in generate_sample_sessions(100):
        store.save_session(session)

    # Build one absolute behavior model per session
    transformer = SessionTransformer(config)
    models = transformer.transform(store.iter_sessions())
    for model in models:
        store.save_behavior_model(model)
"""

from .config import ExtractorConfig
from .models import (
    FINAL_STATE_KEY,
    FinalState,
    UseCase,
    ObservedUseCaseExecution,
    Session,
    Transition,
    UseCaseVertex,
    FinalVertex,
    Vertex,
    AbsoluteBehaviorModel,
)
from .diagnostics import (
    NegativeTimeRange,
    DiagnosticSink,
    LoggingDiagnosticSink,
    NullDiagnosticSink,
    CollectingDiagnosticSink,
)
from .exceptions import (
    BehaviorExtractorError,
    InvalidSessionError,
    MissingUseCaseError,
    MissingUseCaseIdError,
    InvalidStartTimeError,
    StoreError,
    StoreDatabaseError,
)
from .builder import GraphBuilder
from .transformer import SessionTransformer, transform_sessions
from .store import SessionStore
from .api import create_app

__version__ = "0.1.0"
__all__ = [
    # Config
    "ExtractorConfig",
    # Models
    "FINAL_STATE_KEY",
    "FinalState",
    "UseCase",
    "ObservedUseCaseExecution",
    "Session",
    "Transition",
    "UseCaseVertex",
    "FinalVertex",
    "Vertex",
    "AbsoluteBehaviorModel",
    # Diagnostics
    "NegativeTimeRange",
    "DiagnosticSink",
    "LoggingDiagnosticSink",
    "NullDiagnosticSink",
    "CollectingDiagnosticSink",
    # Exceptions
    "BehaviorExtractorError",
    "InvalidSessionError",
    "MissingUseCaseError",
    "MissingUseCaseIdError",
    "InvalidStartTimeError",
    "StoreError",
    "StoreDatabaseError",
    # Core components
    "GraphBuilder",
    "SessionTransformer",
    "transform_sessions",
    "SessionStore",
    # API
    "create_app",
]
