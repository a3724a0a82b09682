"""Pytest configuration and fixtures."""

import os

import pytest

# regulon.main reads settings at import time (CORS allow-list), so these must
# be in place before any test module is collected.
os.environ["SUPABASE_URL"] = "https://test.supabase.co"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-key"
os.environ["LLM_GATEWAY_API_KEY"] = "test-gateway-key"
os.environ["REGULON_ENV"] = "test"
os.environ["ENFORCE_FUNCTION_AUTH"] = "false"
os.environ["ALLOWED_ORIGINS"] = ""


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Start the session from settings built off the test environment."""
    from regulon.core.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings_factory():
    """Build a real Settings object with selected fields overridden."""
    from regulon.core.config import get_settings

    def _make(**overrides):
        return get_settings().model_copy(update=overrides)

    return _make
