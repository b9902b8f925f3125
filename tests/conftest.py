"""
Pytest configuration for the Durak tests.

This module contains fixtures shared across the test packages.
"""

import pytest

from durak.events import EventBus


# Reset event bus before each test
@pytest.fixture(scope="function", autouse=True)
def reset_event_bus():
    """Reset the event bus singleton before each test."""
    EventBus._instance = None
    yield
    EventBus._instance = None
