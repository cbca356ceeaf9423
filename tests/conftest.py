"""Pytest configuration for tests."""

import pytest

# Register fixture modules as pytest plugins
# NOTE: These modules must be registered here to make fixtures available
pytest_plugins = [
    "tests.fixtures.database",
    "tests.fixtures.catalog",
    "tests.fixtures.api",
]


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; env changes in a test must not leak."""
    from grocer.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
