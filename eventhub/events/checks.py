"""
Runtime type matching for payload values.

Only what ``isinstance`` can answer is checked. Parameterized generics are
matched on their origin (``list[int]`` accepts any list), and annotations
that cannot be resolved or checked at runtime accept every value.
"""

from __future__ import annotations

import builtins
import inspect
import types
import typing
from collections.abc import Callable
from typing import Any

# PEP 484 numeric tower: an int is acceptable where a float is declared
_NUMERIC_PROMOTIONS: dict[type, tuple[type, ...]] = {
    float: (float, int),
    complex: (complex, float, int),
}

_UNION_TYPES: tuple[Any, ...] = (typing.Union, types.UnionType)


def _unchecked(annotation: Any) -> bool:
    return (
        annotation is inspect.Parameter.empty
        or annotation is Any
        or annotation is object
        or isinstance(annotation, (str, typing.ForwardRef))
    )


def type_name(annotation: Any) -> str:
    if annotation is None or annotation is type(None):
        return "None"
    if isinstance(annotation, type) and not typing.get_args(annotation):
        return annotation.__qualname__
    return repr(annotation).replace("typing.", "")


def matches(value: Any, annotation: Any) -> bool:
    """Return True if ``value`` satisfies ``annotation``."""
    if _unchecked(annotation):
        return True
    if annotation is None or annotation is type(None):
        return value is None

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin in _UNION_TYPES:
        return any(matches(value, arg) for arg in args)
    if origin is typing.Literal:
        return value in args
    if origin is typing.Annotated:
        return matches(value, args[0])
    if origin is type:
        if not isinstance(value, type):
            return False
        return not args or _unchecked(args[0]) or (
            isinstance(args[0], type) and issubclass(value, args[0])
        )
    if isinstance(annotation, typing.TypeVar):
        if annotation.__bound__ is not None:
            return matches(value, annotation.__bound__)
        if annotation.__constraints__:
            return any(matches(value, c) for c in annotation.__constraints__)
        return True
    if origin is not None:
        annotation = origin

    if annotation is Callable:
        return callable(value)
    if isinstance(annotation, type):
        try:
            return isinstance(value, _NUMERIC_PROMOTIONS.get(annotation, annotation))
        except TypeError:
            # non runtime-checkable protocols
            return True
    return True


def compatible(provided: Any, declared: Any) -> bool:
    """
    Return True if every value of type ``provided`` would satisfy ``declared``.

    Used for the subscribe-time check of typed topics. Pairs that cannot be
    compared statically are assumed compatible; the runtime check still
    applies when the payload is published.
    """
    if _unchecked(declared):
        return True
    if _unchecked(provided):
        return True
    if provided is None:
        provided = type(None)
    if declared is None:
        declared = type(None)

    if typing.get_origin(provided) in _UNION_TYPES:
        return all(compatible(arg, declared) for arg in typing.get_args(provided))
    declared_origin = typing.get_origin(declared)
    if declared_origin in _UNION_TYPES:
        return any(compatible(provided, arg) for arg in typing.get_args(declared))
    if declared_origin is typing.Annotated:
        return compatible(provided, typing.get_args(declared)[0])

    provided_cls = typing.get_origin(provided) or provided
    declared_cls = declared_origin or declared
    if isinstance(provided_cls, type) and isinstance(declared_cls, type):
        accepted = _NUMERIC_PROMOTIONS.get(declared_cls, (declared_cls,))
        try:
            return issubclass(provided_cls, accepted)
        except TypeError:
            return True
    return True


def resolve_hints(fn: Callable[..., Any], signature: inspect.Signature) -> dict[str, Any]:
    """
    Resolve parameter annotations of ``fn`` to runtime objects.

    String annotations that cannot be evaluated (names local to a function
    body, for instance) are kept as strings and therefore left unchecked.
    """
    target = inspect.unwrap(getattr(fn, "__func__", fn))
    if not (inspect.isfunction(target) or inspect.ismethod(target)):
        call = getattr(type(target), "__call__", None)
        if call is not None and inspect.isfunction(call):
            target = call
    try:
        return typing.get_type_hints(target)
    except (NameError, TypeError, AttributeError):
        pass

    namespace = dict(vars(builtins))
    namespace.update(getattr(target, "__globals__", {}))
    hints: dict[str, Any] = {}
    for name, param in signature.parameters.items():
        annotation = param.annotation
        if isinstance(annotation, str):
            annotation = _lookup(annotation, namespace)
        hints[name] = annotation
    return hints


def _lookup(expr: str, namespace: dict[str, Any]) -> Any:
    parts = expr.strip().split(".")
    if not all(part.isidentifier() for part in parts) or parts[0] not in namespace:
        return expr
    value = namespace[parts[0]]
    for part in parts[1:]:
        value = getattr(value, part, None)
        if value is None:
            return expr
    return value
