"""
Declarative handler markers.

A marker names the event(s) a callable wants to be subscribed to when its
module, class or instance is handed to discovery:

    @handles("Error")
    def log(msg: str) -> None:
        ...

    class Audit:
        @handles("user.created", "user.deleted")
        def record(self, user_id: int) -> None:
            ...

Markers carry no behavior; nothing is subscribed until the candidates are
passed to ``EventRegistry.bootstrap`` or ``EventRegistry.register``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from eventhub.events.errors import MarkerError

MARKER_ATTR = "__event_marker__"

F = TypeVar("F")

# a discovered handler paired with the marker it was declared with
Candidate = tuple[Callable[..., Any], "HandlerMarker"]


@dataclass(frozen=True, init=False)
class HandlerMarker:
    """Immutable, non-empty, ordered set of event names."""

    event_names: tuple[str, ...]

    def __init__(self, event_names: str | Iterable[str]):
        if isinstance(event_names, str):
            names = [event_names]
        else:
            names = list(event_names)
        if not names:
            raise MarkerError("a handler marker needs at least one event name")
        for name in names:
            if not isinstance(name, str):
                raise MarkerError(f"event names must be strings, got {name!r}")
            if not name:
                raise MarkerError("event names must be non-empty")
        object.__setattr__(self, "event_names", tuple(dict.fromkeys(names)))

    def __iter__(self):
        return iter(self.event_names)

    def __len__(self) -> int:
        return len(self.event_names)

    def __contains__(self, name: object) -> bool:
        return name in self.event_names

    def merged(self, other: HandlerMarker) -> HandlerMarker:
        return HandlerMarker(self.event_names + other.event_names)


def _target(obj: Any) -> Any:
    if isinstance(obj, (staticmethod, classmethod)):
        return obj.__func__
    return obj


def get_marker(obj: Any) -> HandlerMarker | None:
    """Return the marker attached to a function, method or descriptor."""
    marker = getattr(_target(obj), MARKER_ATTR, None)
    return marker if isinstance(marker, HandlerMarker) else None


def handles(*event_names: str) -> Callable[[F], F]:
    """
    Mark a function or method as a handler for one or more events.

    Works on plain functions, instance methods, and ``staticmethod`` /
    ``classmethod`` objects in either decorator order. Applying it twice to
    the same callable merges the event names.

    Args:
        *event_names: Event names the callable subscribes to

    Returns:
        Decorator returning the callable unchanged apart from the marker
    """
    marker = HandlerMarker(event_names)

    def decorator(fn: F) -> F:
        target = _target(fn)
        if not callable(target):
            raise MarkerError(f"@handles can only mark callables, got {fn!r}")
        existing = get_marker(target)
        setattr(target, MARKER_ATTR, existing.merged(marker) if existing else marker)
        return fn

    return decorator
