"""Pytest fixtures for behavior_extractor tests."""

import pytest
from pathlib import Path
import tempfile

from behavior_extractor.config import ExtractorConfig
from behavior_extractor.diagnostics import CollectingDiagnosticSink
from behavior_extractor.models import ObservedUseCaseExecution, Session, UseCase
from behavior_extractor.store import SessionStore
from behavior_extractor.mock import MockSessionGenerator


def make_session(session_id: str, trace: list[tuple[UseCase, int]]) -> Session:
    """Build a session from (use case, start time) pairs."""
    return Session(
        session_id=session_id,
        executions=[
            ObservedUseCaseExecution(use_case=uc, start_time=t)
            for uc, t in trace
        ],
    )


@pytest.fixture
def build_session():
    """Factory for sessions built from (use case, start time) pairs."""
    return make_session


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test_sessions.db"


@pytest.fixture
def config(temp_db_path):
    """Create test configuration."""
    return ExtractorConfig(db_path=temp_db_path)


@pytest.fixture
def store(config):
    """Create test session store."""
    store = SessionStore(config)
    yield store
    store.close()


@pytest.fixture
def sink():
    """Collecting diagnostic sink."""
    return CollectingDiagnosticSink()


@pytest.fixture
def use_case_a():
    return UseCase("A", "Login")


@pytest.fixture
def use_case_b():
    return UseCase("B", "Browse")


@pytest.fixture
def use_case_c():
    return UseCase("C", "Checkout")


@pytest.fixture
def example_session(use_case_a, use_case_b):
    """Session S1: A@0, B@5, A@3, B@20."""
    return make_session("S1", [
        (use_case_a, 0),
        (use_case_b, 5),
        (use_case_a, 3),
        (use_case_b, 20),
    ])


@pytest.fixture
def mock_generator():
    """Create mock session generator with fixed seed."""
    return MockSessionGenerator(seed=42)


@pytest.fixture
def sample_sessions(mock_generator):
    """Generate sample sessions for testing."""
    return mock_generator.generate_batch(20)
