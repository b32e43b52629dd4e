"""
eventhub: named-event publish/subscribe for a single process.
"""

from eventhub.config import RegistryConfig
from eventhub.events import (
    ArgumentMismatch,
    EventRegistry,
    HandlerMarker,
    Topic,
    create_registry,
    handles,
)

__version__ = "0.1.0"

__all__ = [
    "ArgumentMismatch",
    "EventRegistry",
    "HandlerMarker",
    "RegistryConfig",
    "Topic",
    "create_registry",
    "handles",
]
