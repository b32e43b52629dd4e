"""
In-process publish/subscribe.

Handlers subscribe to string-named events and receive positional payloads
when those events are published.
"""

from eventhub.events.discovery import collect_handlers, scan_modules, scan_package
from eventhub.events.errors import (
    ArgumentMismatch,
    BootstrapError,
    DiscoveryError,
    EventHubError,
    MarkerError,
)
from eventhub.events.handler import HandlerRef
from eventhub.events.marker import HandlerMarker, get_marker, handles
from eventhub.events.registry import EventRegistry, create_registry
from eventhub.events.topic import Topic

__all__ = [
    "ArgumentMismatch",
    "BootstrapError",
    "DiscoveryError",
    "EventHubError",
    "EventRegistry",
    "HandlerMarker",
    "HandlerRef",
    "MarkerError",
    "Topic",
    "collect_handlers",
    "create_registry",
    "get_marker",
    "handles",
    "scan_modules",
    "scan_package",
]
