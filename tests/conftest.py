"""Shared pytest fixtures for deploymark tests."""

from __future__ import annotations

import pytest
import structlog

from deploymark.config import get_settings

_SETTINGS_ENV = (
    "DEPLOYMARK_TAG",
    "DEPLOYMARK_REMOTE",
    "INITIAL_AS_CHANGES",
    "REPO_PATH",
    "GIT_BINARY",
    "GIT_TIMEOUT",
    "SUGGESTION_MAX_DISTANCE",
    "GITHUB_OUTPUT",
    "GITHUB_REF_NAME",
    "ENVIRONMENT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch):
    """Keep the runner's environment out of Settings and clear the cache."""
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _quiet_structlog():
    """Route log events nowhere so stdout only carries step outputs."""
    structlog.configure(logger_factory=structlog.ReturnLoggerFactory())
    yield
    structlog.reset_defaults()
