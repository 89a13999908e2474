"""Shared test fixtures."""

import os
import tempfile


# Settings are cached on first import; configure the test environment first
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="maplepress-logs-"))
os.environ.setdefault("LOG_REQUESTS", "false")
os.environ.setdefault("ADMIN_PASSWORD", "test-admin-password")
os.environ.setdefault("ADMIN_NICKNAME", "Maple")
os.environ.setdefault("ADMIN_EMAIL", "maple@example.com")
os.environ.setdefault("CONTENT_DIR", tempfile.mkdtemp(prefix="maplepress-content-"))

from collections.abc import Iterator  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from src.auth.security import create_admin_token  # noqa: E402
from src.config.settings import get_settings  # noqa: E402
from src.main import app as main_app  # noqa: E402


@pytest.fixture
def app() -> Iterator[FastAPI]:
    """The application, with dependency overrides reset after each test."""
    yield main_app
    main_app.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client without lifespan (no backends wired up)."""
    return TestClient(app)


@pytest.fixture
def admin_cookies() -> dict[str, str]:
    """Cookie jar carrying a valid admin token."""
    return {get_settings().auth_cookie_name: create_admin_token()}
