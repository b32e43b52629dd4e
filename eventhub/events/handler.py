"""
Handler references.

A HandlerRef pairs a callable with its signature so a published payload can
be bound and type checked at the moment the handler is invoked.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Sequence
from typing import Any

from eventhub.events.checks import compatible, matches, resolve_hints, type_name
from eventhub.events.errors import ArgumentMismatch

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class HandlerRef:
    """
    A subscribed callable plus the parameter information used to bind payloads.

    Two refs are equal when their callables are equal, so a bound method is
    only equal to a method bound to the same instance.

    Args:
        callback: Function, bound method or other callable
        check_types: Check payload values against parameter annotations
    """

    def __init__(self, callback: Callable[..., Any], *, check_types: bool = True):
        if not callable(callback):
            raise TypeError(f"handler must be callable, got {type(callback).__name__}")
        self.callback = callback
        self.check_types = check_types
        try:
            self.signature: inspect.Signature | None = inspect.signature(callback)
        except (TypeError, ValueError):
            # some builtins expose no signature; they bind their own arguments
            self.signature = None
        self.hints = resolve_hints(callback, self.signature) if self.signature else {}

    @property
    def name(self) -> str:
        return getattr(self.callback, "__qualname__", None) or repr(self.callback)

    def __repr__(self) -> str:
        return f"HandlerRef({self.name}{self.signature or '(...)'})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HandlerRef):
            return self.callback == other.callback
        if callable(other):
            return self.callback == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def bind(self, payload: Sequence[Any], event_name: str | None = None) -> inspect.BoundArguments | None:
        """
        Bind ``payload`` positionally against the handler's parameters.

        Raises:
            ArgumentMismatch: wrong number of values, or a value whose type
                does not match its parameter annotation
        """
        if self.signature is None:
            return None
        try:
            bound = self.signature.bind(*payload)
        except TypeError as exc:
            raise ArgumentMismatch(self.callback, payload, str(exc), event_name) from exc
        if self.check_types:
            self._check_types(bound, payload, event_name)
        return bound

    def invoke(self, payload: Sequence[Any], event_name: str | None = None) -> Any:
        """Bind ``payload`` and call the handler with it."""
        self.bind(payload, event_name)
        return self.callback(*payload)

    def _check_types(
        self,
        bound: inspect.BoundArguments,
        payload: Sequence[Any],
        event_name: str | None,
    ) -> None:
        for name, value in bound.arguments.items():
            annotation = self.hints.get(name, inspect.Parameter.empty)
            kind = self.signature.parameters[name].kind
            values = value if kind is inspect.Parameter.VAR_POSITIONAL else (value,)
            for item in values:
                if not matches(item, annotation):
                    raise ArgumentMismatch(
                        self.callback,
                        payload,
                        f"argument '{name}' expected {type_name(annotation)}, "
                        f"got {type(item).__name__}",
                        event_name,
                    )

    def check_shape(self, param_types: Sequence[Any], event_name: str | None = None) -> None:
        """
        Check, without calling it, that the handler accepts payloads of
        ``param_types``.

        Raises:
            ArgumentMismatch: arity or declared types are incompatible
        """
        if self.signature is None:
            return
        params = list(self.signature.parameters.values())
        positional = [p for p in params if p.kind in _POSITIONAL]
        required = [p for p in positional if p.default is inspect.Parameter.empty]
        var_positional = next(
            (p for p in params if p.kind is inspect.Parameter.VAR_POSITIONAL), None
        )
        keyword_only = [
            p
            for p in params
            if p.kind is inspect.Parameter.KEYWORD_ONLY and p.default is inspect.Parameter.empty
        ]
        count = len(param_types)
        shape = "(" + ", ".join(type_name(t) for t in param_types) + ")"

        if keyword_only:
            names = ", ".join(p.name for p in keyword_only)
            raise ArgumentMismatch(
                self.callback, None, f"required keyword-only parameter(s) {names}", event_name
            )
        if count < len(required) or (count > len(positional) and var_positional is None):
            raise ArgumentMismatch(
                self.callback,
                None,
                f"payload shape {shape} does not fit {len(required)}..."
                f"{'*' if var_positional else len(positional)} positional parameter(s)",
                event_name,
            )
        if not self.check_types:
            return
        for index, provided in enumerate(param_types):
            param = positional[index] if index < len(positional) else var_positional
            declared = self.hints.get(param.name, inspect.Parameter.empty)
            if not compatible(provided, declared):
                raise ArgumentMismatch(
                    self.callback,
                    None,
                    f"parameter '{param.name}' declared {type_name(declared)}, "
                    f"payload shape {shape} provides {type_name(provided)}",
                    event_name,
                )
