"""Shared fixtures: isolate every test from the caller's Bitbucket environment."""

import pytest

BITBUCKET_ENV_VARS = (
    "BITBUCKET_EMAIL",
    "BITBUCKET_API_TOKEN",
    "BITBUCKET_API_BASE",
    "BITBUCKET_REQUEST_TIMEOUT",
    "BITBUCKET_DEBUG",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Clear BITBUCKET_* vars and move away from any local .env file."""
    for var in BITBUCKET_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def credentials(monkeypatch):
    monkeypatch.setenv("BITBUCKET_EMAIL", "test@example.com")
    monkeypatch.setenv("BITBUCKET_API_TOKEN", "test-token")
