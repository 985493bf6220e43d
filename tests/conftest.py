"""
Pytest configuration to ensure paths are set up correctly for tests.

This allows imports like `from handlers import main` to work
when running tests, simulating the Lambda environment where code
is deployed from the src/ directory.
"""

import json
import os
import sys
from pathlib import Path

import boto3
import pytest


def _ensure_paths_on_sys_path() -> None:
    """Add repository root AND src/ to sys.path if missing.

    The src/ directory is added to simulate Lambda's import behavior,
    where Code.from_asset("src") makes src/ the root of the package.
    """
    repo_root = Path(__file__).resolve().parents[1]
    src_root = repo_root / "src"

    # Add repo root first (for imports like infrastructure.*)
    root_str = str(repo_root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)

    # Add src/ for Lambda-style imports (from handlers import ...)
    src_str = str(src_root)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


_ensure_paths_on_sys_path()

# Ensure boto3 has offline-friendly defaults so tests do not require AWS access.
os.environ.setdefault("AWS_REGION", "eu-west-2")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-2")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("AWS_SESSION_TOKEN", "test")
os.environ.setdefault("ENVIRONMENT", "dev")

# Data Service settings read by utils.config; nothing connects during tests.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")

# Create a default boto3 session so resources/clients do not error during import.
boto3.setup_default_session(region_name="eu-west-2")


@pytest.fixture
def engine():
    """In-memory SQLite database with the help desk tables."""
    from sqlalchemy import create_engine
    from sqlalchemy.pool import StaticPool

    from repositories.schema import metadata

    db = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(db)
    yield db
    db.dispose()


@pytest.fixture
def make_session():
    """Build a SessionContext for a given role."""
    from models.profile import Role
    from models.session import SessionContext

    def _make(role=Role.ADMIN, user_id="user-1", **kwargs):
        return SessionContext(user_id=user_id, role=role, access_token="token", **kwargs)

    return _make


@pytest.fixture
def api_event():
    """Build an API Gateway HTTP API (v2) event."""

    def _event(method="GET", path="/", body=None, token="token", path_params=None, query=None, headers=None):
        event_headers = {"content-type": "application/json"}
        if token:
            event_headers["authorization"] = f"Bearer {token}"
        event_headers.update(headers or {})
        return {
            "requestContext": {"http": {"method": method, "path": path}},
            "headers": event_headers,
            "pathParameters": path_params,
            "queryStringParameters": query,
            "body": json.dumps(body) if isinstance(body, (dict, list)) else body,
        }

    return _event


@pytest.fixture
def auth_as(monkeypatch, make_session):
    """Make the route guard resolve every token to a session with the given role."""
    from unittest.mock import MagicMock

    from utils import auth_guard

    def _auth(role, user_id="user-1"):
        service = MagicMock()
        session = make_session(role=role, user_id=user_id)
        service.resolve_session.return_value = session
        monkeypatch.setattr(auth_guard, "_auth_service", service)
        return service

    return _auth
