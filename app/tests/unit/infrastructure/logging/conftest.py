"""Fixtures for infrastructure.logging tests."""

import pytest
import structlog


@pytest.fixture(autouse=True)
def clean_contextvars():
    """Start and end every test with an empty logging context."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
