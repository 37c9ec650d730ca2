"""Pytest configuration and fixtures."""

import os

import pytest

# Modules read settings lazily, but collection imports them before fixtures run
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["SUPABASE_URL"] = "https://test.supabase.co"
    os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-key"
    os.environ["OPENAI_API_KEY"] = "test-openai-key"
    os.environ["READINESS_ENV"] = "test"


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop the cached Settings so monkeypatched env vars take effect."""
    from readiness_engine.core.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
