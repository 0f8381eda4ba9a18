"""Pytest configuration and fixtures."""

import pytest

from structhash.options import HashOptions
from structhash.registry import RecordRegistry


@pytest.fixture
def registry():
    """Create a fresh RecordRegistry instance."""
    registry = RecordRegistry()
    registry.clear()
    yield registry
    registry.clear()


@pytest.fixture
def options():
    """Default hashing options."""
    return HashOptions()


@pytest.fixture
def zero_nil():
    """Options treating None as the zero value of its declared type."""
    return HashOptions(zero_nil=True)
