"""Pytest configuration and shared fixtures."""
import os

import pytest

from eventhub.config import RegistryConfig
from eventhub.events import EventRegistry


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "stress: mark test as a long-running thread stress test")


def pytest_collection_modifyitems(config, items):
    """Skip stress tests unless EVENTHUB_STRESS=1."""
    if os.environ.get("EVENTHUB_STRESS") in ("1", "true", "True"):
        return
    skip = pytest.mark.skip(reason="Set EVENTHUB_STRESS=1 to run stress tests")
    for item in items:
        if "stress" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def registry():
    return EventRegistry(RegistryConfig())


@pytest.fixture
def calls():
    """Record of (label, args) tuples appended by test handlers."""
    return []
