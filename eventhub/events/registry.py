"""
Event registry for in-process publish/subscribe.

Provides:
- Ordered, duplicate-friendly handler lists per event name
- Thread-safe subscribe / unsubscribe under a single lock
- Snapshot dispatch outside the lock, fail-fast on the first handler error
- One-shot bootstrap from marked handler candidates
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from eventhub.config import RegistryConfig
from eventhub.events.errors import BootstrapError
from eventhub.events.handler import HandlerRef
from eventhub.events.marker import Candidate
from eventhub.events.topic import Topic, event_key
from eventhub.logging_config import get_logger

logger = get_logger(__name__)


class EventRegistry:
    """
    Maps event names to ordered handler lists and dispatches payloads to them.

    Handler lists are never mutated in place: subscribe and unsubscribe swap
    in a new list under the lock, so the list ``publish`` picks up is a
    snapshot that later subscriptions cannot change.

    Build one registry at startup and hand it to the components that publish
    or subscribe; there is no module-level instance.
    """

    def __init__(self, config: RegistryConfig | None = None):
        """
        Initialize the registry.

        Args:
            config: Registry settings, defaults to RegistryConfig()
        """
        self.config = config or RegistryConfig()
        self._handlers: dict[str, list[HandlerRef]] = {}
        self._lock = threading.Lock()
        self._bootstrapped = False

    # -------------------------------------------------------------------------
    # Subscription
    # -------------------------------------------------------------------------

    def subscribe(self, event: str | Topic, handler: Callable[..., Any] | HandlerRef) -> HandlerRef:
        """
        Append a handler to the list for an event.

        The same handler may be subscribed more than once; every occurrence
        is invoked. Subscribing to a Topic checks the handler against the
        topic's payload shape first.

        Args:
            event: Event name or Topic
            handler: Callable or an existing HandlerRef; a ref whose
                check_types differs from the registry config is rebuilt

        Returns:
            The HandlerRef that was added

        Raises:
            ArgumentMismatch: handler cannot accept the Topic's payload shape
        """
        name = event_key(event)
        ref = self._handler_ref(handler)
        if isinstance(event, Topic):
            ref.check_shape(event.param_types, name)

        with self._lock:
            self._handlers[name] = [*self._handlers.get(name, ()), ref]
            count = len(self._handlers[name])

        logger.debug("event_subscribed", event_name=name, handler=ref.name, handlers=count)
        return ref

    def unsubscribe(self, event: str | Topic, handler: Callable[..., Any] | HandlerRef) -> bool:
        """
        Remove the first occurrence of a handler from an event.

        Unknown events and handlers that are not subscribed are ignored.

        Args:
            event: Event name or Topic
            handler: Callable or HandlerRef to remove

        Returns:
            True if an occurrence was removed
        """
        name = event_key(event)
        with self._lock:
            current = self._handlers.get(name)
            if not current:
                return False
            for index, ref in enumerate(current):
                if ref == handler:
                    break
            else:
                return False
            remaining = current[:index] + current[index + 1:]
            if remaining:
                self._handlers[name] = remaining
            else:
                del self._handlers[name]

        logger.debug("event_unsubscribed", event_name=name, handler=ref.name, handlers=len(remaining))
        return True

    def clear(self, event: str | Topic | None = None) -> None:
        """
        Drop all handlers for one event, or for every event.

        Args:
            event: Event to clear, or None for all
        """
        with self._lock:
            if event is None:
                self._handlers = {}
            else:
                self._handlers.pop(event_key(event), None)
        logger.debug("event_handlers_cleared", event_name=None if event is None else event_key(event))

    # -------------------------------------------------------------------------
    # Publishing
    # -------------------------------------------------------------------------

    def publish(self, event: str | Topic, payload: Sequence[Any] = ()) -> int:
        """
        Invoke every handler of an event, in subscription order, with ``payload``.

        Handlers run synchronously on the calling thread, outside the
        registry lock. The first exception, an ArgumentMismatch or one raised
        by the handler itself, propagates to the caller and the remaining
        handlers are skipped.

        Args:
            event: Event name or Topic
            payload: Positional arguments passed to each handler

        Returns:
            Number of handlers invoked

        Raises:
            ArgumentMismatch: payload does not fit the Topic or a handler
        """
        name = event_key(event)
        if isinstance(payload, (str, bytes)) or not isinstance(payload, Sequence):
            raise TypeError(
                f"payload must be a sequence of arguments, got {type(payload).__name__}"
            )
        if isinstance(event, Topic):
            event.validate(payload)

        with self._lock:
            handlers = self._handlers.get(name)
        if not handlers:
            return 0

        for ref in handlers:
            ref.invoke(payload, name)
        return len(handlers)

    def emit(self, event: str | Topic, *args: Any) -> int:
        """Publish ``args`` as the payload of ``event``."""
        return self.publish(event, args)

    # -------------------------------------------------------------------------
    # Bootstrap
    # -------------------------------------------------------------------------

    def _handler_ref(self, handler: Callable[..., Any] | HandlerRef) -> HandlerRef:
        check_types = self.config.check_types
        if isinstance(handler, HandlerRef):
            if handler.check_types == check_types:
                return handler
            handler = handler.callback
        return HandlerRef(handler, check_types=check_types)

    def _prepare(self, candidates: Iterable[Candidate]) -> list[tuple[str, HandlerRef]]:
        return [
            (name, self._handler_ref(handler))
            for handler, marker in candidates
            for name in marker.event_names
        ]

    def _commit(self, prepared: list[tuple[str, HandlerRef]]) -> None:
        # caller holds self._lock
        for name, ref in prepared:
            self._handlers[name] = [*self._handlers.get(name, ()), ref]

    def register(self, candidates: Iterable[Candidate]) -> list[HandlerRef]:
        """
        Subscribe each candidate under every event name of its marker.

        Every candidate is checked before any is subscribed, so an invalid
        one leaves the registry unchanged. Callables that need an instance
        must arrive already bound; the registry never creates instances.

        Args:
            candidates: (callable, HandlerMarker) pairs

        Returns:
            The HandlerRefs that were added, in subscription order
        """
        prepared = self._prepare(candidates)
        with self._lock:
            self._commit(prepared)
        logger.debug("event_handlers_registered", handlers=len(prepared))
        return [ref for _, ref in prepared]

    def bootstrap(self, candidates: Iterable[Candidate]) -> list[HandlerRef]:
        """
        Register the startup set of handler candidates. Allowed once per registry.

        A bootstrap that fails on an invalid candidate subscribes nothing and
        may be retried.

        Raises:
            BootstrapError: the registry was already bootstrapped
        """
        prepared = self._prepare(candidates)
        with self._lock:
            if self._bootstrapped:
                raise BootstrapError("event registry has already been bootstrapped")
            self._commit(prepared)
            self._bootstrapped = True

        logger.info("event_registry_bootstrapped", handlers=len(prepared), events=len(self.event_names()))
        return [ref for _, ref in prepared]

    @property
    def bootstrapped(self) -> bool:
        return self._bootstrapped

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    def handlers_for(self, event: str | Topic) -> tuple[HandlerRef, ...]:
        """Snapshot of the handlers subscribed to an event."""
        with self._lock:
            return tuple(self._handlers.get(event_key(event), ()))

    def has_subscribers(self, event: str | Topic) -> bool:
        with self._lock:
            return event_key(event) in self._handlers

    def event_names(self) -> list[str]:
        with self._lock:
            return list(self._handlers)

    def get_stats(self) -> dict[str, Any]:
        """Get registry statistics."""
        with self._lock:
            counts = {name: len(refs) for name, refs in self._handlers.items()}
        return {
            "events": len(counts),
            "total_subscriptions": sum(counts.values()),
            "subscriptions": counts,
            "bootstrapped": self._bootstrapped,
            "check_types": self.config.check_types,
        }


def create_registry(
    config: RegistryConfig | None = None,
    candidates: Iterable[Candidate] | None = None,
) -> EventRegistry:
    """
    Build the application's registry, bootstrapping it when candidates are given.

    Args:
        config: Registry settings, defaults to RegistryConfig.from_env()
        candidates: Optional (callable, HandlerMarker) pairs to bootstrap with

    Returns:
        A new EventRegistry
    """
    registry = EventRegistry(config or RegistryConfig.from_env())
    if candidates is not None:
        registry.bootstrap(candidates)
    return registry
