"""Pytest configuration and fixtures for firebase_rest.

Settings are cached per process; every test starts from a clean cache and an
environment without Firebase variables so results do not depend on the host.
"""

import pytest

from firebase_rest.core.config import get_settings
from firebase_rest.domain.value_objects.core import Database

_FIREBASE_ENV_VARS = (
    "DEBUG",
    "FIREBASE_PROJECT_ID",
    "FIREBASE_DATABASE_ID",
    "FIREBASE_SERVICE_ACCOUNT_KEY",
    "FIREBASE_SERVICE_ACCOUNT_PATH",
    "FIRESTORE_BASE_URL",
    "REQUEST_TIMEOUT_SECONDS",
    "NAMING_POLICY",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch):
    """Drop Firebase env vars and the cached Settings around each test."""
    for name in _FIREBASE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def database() -> Database:
    """The demo project's default database."""
    return Database(project_id="demo")

