"""Shared fixtures for engine tests."""

from collections.abc import Iterator
from datetime import datetime

import pytest
from builders import NOW

from insight_core.config import get_config


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture(autouse=True)
def clear_config_cache() -> Iterator[None]:
    """Ensure get_config cache is cleared before and after each test."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()
