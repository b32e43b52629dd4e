"""
Typed event declarations.

A Topic pins an event name to a fixed positional payload shape:

    DISK_FULL = Topic("Error", str)

    registry.subscribe(DISK_FULL, log)       # log's parameters checked here
    registry.publish(DISK_FULL, ["disk full"])  # payload checked before dispatch

Plain string names and topics share the same handler lists.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from eventhub.events.checks import matches, type_name
from eventhub.events.errors import ArgumentMismatch


@dataclass(frozen=True, init=False)
class Topic:
    name: str
    param_types: tuple[Any, ...]

    def __init__(self, name: str, *param_types: Any):
        if not isinstance(name, str) or not name:
            raise ValueError("topic name must be a non-empty string")
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "param_types", param_types)

    def __str__(self) -> str:
        return self.name

    @property
    def arity(self) -> int:
        return len(self.param_types)

    def validate(self, payload: Sequence[Any]) -> None:
        """Raise ArgumentMismatch unless ``payload`` fits this topic's shape."""
        if len(payload) != self.arity:
            raise ArgumentMismatch(
                None,
                payload,
                f"expected {self.arity} argument(s), got {len(payload)}",
                event_name=self.name,
            )
        for index, (value, expected) in enumerate(zip(payload, self.param_types)):
            if not matches(value, expected):
                raise ArgumentMismatch(
                    None,
                    payload,
                    f"argument {index} expected {type_name(expected)}, "
                    f"got {type(value).__name__}",
                    event_name=self.name,
                )


def event_key(event: str | Topic) -> str:
    """Return the registry key for an event name or Topic."""
    if isinstance(event, Topic):
        return event.name
    if isinstance(event, str):
        return event
    raise TypeError(f"event must be a str or Topic, got {type(event).__name__}")
