"""Shared test fixtures for the wireframe version-control test suite.

Tests run against a throwaway SQLite file created per session. Each test
starts from empty tables, so tests never see each other's rows.

Set TEST_DATABASE_URL to run the suite against PostgreSQL instead.
"""

import os
import tempfile

# Force auth off and point at the test database before any app imports.
_tmpdir = tempfile.mkdtemp(prefix="wireframe-vc-tests-")
os.environ["DATABASE_URL"] = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite:///{os.path.join(_tmpdir, 'test.db')}",
)
os.environ["AUTH_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"

import pytest
from sqlalchemy import text
from fastapi.testclient import TestClient

from wireframe_vc.database import get_db, SessionLocal
from wireframe_vc.main import app
from wireframe_vc.core.token_factory import create_token
from wireframe_vc.core.config import settings
from wireframe_vc.middleware.request_context import rate_limiter

# Tables to wipe between tests (order matters for foreign keys).
_CLEAN_TABLES = ["audit_log", "wireframe_branches", "wireframe_versions", "wireframes"]


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty all data tables before each test.

    Runs before the test (not after) so test failures leave data
    available for debugging.
    """
    db = SessionLocal()
    try:
        for table in _CLEAN_TABLES:
            db.execute(text(f"DELETE FROM {table}"))
        db.commit()
    finally:
        db.close()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def client(db):
    """FastAPI TestClient with the DB dependency overridden to use the test session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    rate_limiter.reset()  # so tests don't hit 429
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_token(subject: str = "test-user", role: str = "editor") -> str:
    return create_token(subject=subject, role=role, secret=settings.jwt_secret_key)


@pytest.fixture()
def auth_headers() -> dict:
    """Valid editor auth headers for write endpoints (when auth is enabled)."""
    return {"Authorization": f"Bearer {make_token()}"}


def make_snapshot(title: str = "Landing page", sections: int = 2, **overrides) -> dict:
    """Factory for wireframe snapshots."""
    data = {
        "id": "wf-landing",
        "title": title,
        "sections": [
            {"type": "hero" if i == 0 else "features", "title": f"Section {i}", "layout": "stack"}
            for i in range(sections)
        ],
        "colorScheme": {"primary": "#3366ff", "background": "#ffffff"},
        "typography": {"headingFont": "Inter", "bodyFont": "Inter"},
    }
    data.update(overrides)
    return data
