"""
Exceptions raised by the event registry.

Publishing to or unsubscribing from an unknown event is not an error, and
neither is subscribing the same handler twice. Exceptions raised by a
handler's own code are never wrapped: they leave ``publish`` unchanged.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any


class EventHubError(Exception):
    """Base class for eventhub errors."""


class ArgumentMismatch(EventHubError, TypeError):
    """Raised when a payload does not fit a handler's declared parameters."""

    def __init__(
        self,
        handler: Callable[..., Any] | None,
        payload: Sequence[Any] | None,
        reason: str,
        event_name: str | None = None,
    ):
        self.handler = handler
        self.payload = tuple(payload) if payload is not None else None
        self.reason = reason
        self.event_name = event_name
        if handler is None:
            target = f"event '{event_name}'"
        elif event_name is None:
            target = _callable_name(handler)
        else:
            target = f"{_callable_name(handler)} for event '{event_name}'"
        if self.payload is None:
            self.message = f"{target} rejected: {reason}"
        else:
            self.message = f"Payload {self.payload!r} does not match {target}: {reason}"
        super().__init__(self.message)


class MarkerError(EventHubError, ValueError):
    """Raised for an invalid handler marker declaration."""


class DiscoveryError(EventHubError):
    """Raised when discovery finds a handler it cannot bind on its own."""

    def __init__(self, owner: type, attribute: str, message: str | None = None):
        self.owner = owner
        self.attribute = attribute
        self.message = message or (
            f"{owner.__qualname__}.{attribute} is an instance method; "
            f"pass an instance of {owner.__qualname__} to bind it"
        )
        super().__init__(self.message)


class BootstrapError(EventHubError, RuntimeError):
    """Raised when a registry is bootstrapped more than once."""


def _callable_name(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)
