"""
Test configuration and fixtures for the TextScan AI API.

This module provides the necessary fixtures and configuration for running tests
with proper database isolation and environment setup.
"""

import os
import tempfile
from datetime import datetime, timezone
from typing import Generator

from dotenv import load_dotenv

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

load_dotenv()

# Must be set before app.platform.config is imported
test_db_path = tempfile.mktemp(suffix=".db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_path}"
os.environ["SCREENSHOT_DIR"] = tempfile.mkdtemp(prefix="textscan-screenshots-")
os.environ["REDIS_URL"] = "redis://localhost:6399/15"
os.environ["OPENAI_API_KEY"] = "test-key"
os.environ["SUPERUSER_TOKEN"] = "test-superuser-token"

SUPERUSER_TOKEN = os.environ["SUPERUSER_TOKEN"]


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    """
    Create a test client for making HTTP requests.
    This fixture provides a clean TestClient instance for each test function,
    ensuring proper isolation between tests.
    """
    with TestClient(test_app) as test_client:
        yield test_client
    test_app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def sync_engine():
    """Plain sqlite engine on the test database, used to seed rows from tests."""
    from app.platform.db.base import Base
    from app.features.scan.models import ScanCorrection, ScanRun  # noqa: F401

    engine = create_engine(f"sqlite:///{test_db_path}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(sync_engine) -> Generator[Session, None, None]:
    with Session(sync_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def screenshot_dir() -> str:
    return os.environ["SCREENSHOT_DIR"]


def make_run(session: Session, correlation_id: str, corrections=(), **overrides):
    """Insert a completed run with the given (severity, uuid) corrections."""
    from app.features.scan.models import ScanCorrection, ScanRun

    values = dict(
        uuid=correlation_id,
        url="https://example.com",
        state="completed",
        state_internal="completed",
        run_start_time=datetime.now(timezone.utc),
        run_end_time=datetime.now(timezone.utc),
        debugging_info={"generate_corrections_model": "gpt-4o", "input_tokens": 120},
    )
    values.update(overrides)
    run = ScanRun(**values)
    for severity, correction_uuid in corrections:
        run.corrections.append(
            ScanCorrection(
                uuid=correction_uuid,
                issue_type="spelling",
                original_text="teh",
                corrected_text="the",
                surrounding_text="teh quick fox",
                explanation_for_correction="Typo",
                probability_of_correctness=0.95,
                severity=severity,
            )
        )
    session.add(run)
    session.commit()
    return run


@pytest.fixture
def seed_run(db_session):
    def _seed(correlation_id: str, corrections=(), **overrides):
        return make_run(db_session, correlation_id, corrections, **overrides)

    return _seed


@pytest.fixture
def superuser_headers():
    return {"X-Superuser-Token": SUPERUSER_TOKEN}
