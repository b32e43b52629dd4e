"""
Explicit discovery of marked handlers.

Each module that defines handlers is handed to discovery during startup,
either directly or through a package walk:

    registry.bootstrap(scan_package("myapp.handlers"))
    registry.register(collect_handlers(AuditTrail(store)))

Discovery never constructs instances. Marked instance methods are only
collected from an instance the caller passes in, so stateful handlers are
always bound to the object the application actually uses.
"""

from __future__ import annotations

import importlib
import inspect
import pkgutil
import types
from collections.abc import Iterable
from typing import Any

from eventhub.events.errors import DiscoveryError
from eventhub.events.marker import Candidate, get_marker
from eventhub.logging_config import get_logger

logger = get_logger(__name__)


def _class_candidates(cls: type, *, strict: bool) -> list[Candidate]:
    found: list[Candidate] = []
    for attribute, raw in vars(cls).items():
        marker = get_marker(raw)
        if marker is None:
            continue
        if isinstance(raw, (staticmethod, classmethod)):
            found.append((getattr(cls, attribute), marker))
        elif strict:
            raise DiscoveryError(cls, attribute)
        else:
            logger.warning(
                "handler_needs_instance",
                owner=cls.__qualname__,
                handler=attribute,
                events=list(marker.event_names),
            )
    return found


def _instance_candidates(instance: Any) -> list[Candidate]:
    found: list[Candidate] = []
    seen: set[str] = set()
    for klass in type(instance).__mro__:
        for attribute, raw in vars(klass).items():
            if attribute in seen:
                continue
            seen.add(attribute)
            marker = get_marker(raw)
            if marker is not None:
                found.append((getattr(instance, attribute), marker))
    return found


def _module_candidates(module: types.ModuleType) -> list[Candidate]:
    found: list[Candidate] = []
    for attribute, value in vars(module).items():
        if getattr(value, "__module__", None) != module.__name__:
            continue
        if inspect.isclass(value):
            found.extend(_class_candidates(value, strict=False))
        elif inspect.isfunction(value):
            marker = get_marker(value)
            if marker is not None:
                found.append((value, marker))
    return found


def collect_handlers(target: Any) -> list[Candidate]:
    """
    Collect (callable, HandlerMarker) pairs from a module, class or instance.

    - module: marked functions, plus marked static and class methods of
      classes defined in it; marked instance methods are skipped with a
      warning
    - class: marked static and class methods
    - instance: every marked method, bound to ``target``

    Args:
        target: Module, class or instance to inspect

    Returns:
        Candidates in definition order

    Raises:
        DiscoveryError: ``target`` is a class with a marked instance method
    """
    if isinstance(target, types.ModuleType):
        found = _module_candidates(target)
    elif inspect.isclass(target):
        found = _class_candidates(target, strict=True)
    else:
        found = _instance_candidates(target)

    logger.debug(
        "handlers_collected",
        target=getattr(target, "__name__", type(target).__qualname__),
        count=len(found),
    )
    return found


def scan_modules(modules: Iterable[types.ModuleType | str]) -> list[Candidate]:
    """
    Collect handlers from several modules, importing names given as strings.

    Args:
        modules: Module objects or dotted module names

    Returns:
        Candidates from every module, in the order given
    """
    found: list[Candidate] = []
    for module in modules:
        if isinstance(module, str):
            module = importlib.import_module(module)
        found.extend(collect_handlers(module))
    return found


def scan_package(package: types.ModuleType | str) -> list[Candidate]:
    """
    Import a package and all of its submodules, and collect their handlers.

    Args:
        package: Package object or dotted package name

    Returns:
        Candidates from the package and its submodules, sorted by module name
    """
    if isinstance(package, str):
        package = importlib.import_module(package)

    names = [package.__name__]
    search_path = getattr(package, "__path__", None)
    if search_path is not None:
        prefix = package.__name__ + "."
        names.extend(info.name for info in pkgutil.walk_packages(search_path, prefix))

    found = scan_modules(sorted(names))
    logger.info("handlers_discovered", package=package.__name__, modules=len(names), count=len(found))
    return found
