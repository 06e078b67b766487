"""Pytest configuration and fixtures."""
import os
import sys
import pytest

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

VALID_TOKEN = "ghp_" + "1" * 36


@pytest.fixture
def valid_token():
    return VALID_TOKEN


@pytest.fixture
def clean_env(monkeypatch):
    """Remove runner variables that would leak into the tests."""
    for key in list(os.environ):
        if key.startswith("INPUT_"):
            monkeypatch.delenv(key)
    for key in ("GITHUB_OUTPUT", "GITHUB_API_URL", "RUNNER_DEBUG", "ACTIONS_STEP_DEBUG"):
        monkeypatch.delenv(key, raising=False)
