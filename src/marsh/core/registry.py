"""
Process-wide Type Descriptor Registry.

Each registered type owns an entry holding its build function, a run-once guard and,
after the first lookup, its frozen Descriptor. Lookups after initialization read the
entry without locking; the first lookup for a type runs the build exactly once, and
concurrent first callers block on that type's guard until the descriptor is complete.

Access rules
- register() records how to build; nothing is reflected until get_descriptor().
- Descriptors are read-only after their build; no code mutates them afterwards.
- Types that were never registered are reflected on first use when they are
  dataclasses, pydantic models, or carry a ``__marsh_fields__(builder)`` hook.

Examples:
    >>> from marsh.core.registry import Registry
    >>> from marsh.core.rules import INT
    >>> class Point:
    ...     def __init__(self):
    ...         self.x = 0
    >>> reg = Registry()
    >>> reg.register(Point, lambda b: b.field("x", INT))
    >>> reg.get_descriptor(Point).names()
    ('x',)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import is_dataclass
from typing import Any, TypeVar, get_origin

from pydantic import BaseModel

from .descriptor import Descriptor, DescriptorBuilder
from .errors import DescriptorError, UnregisteredTypeError
from .once import Once
from .reflect import describe_dataclass, describe_model

__all__ = [
    "BuildFn",
    "Registry",
    "default_registry",
    "get_descriptor",
    "register",
    "marshaled",
]

logger = logging.getLogger(__name__)

BuildFn = Callable[[DescriptorBuilder], Any]
T = TypeVar("T", bound=type)

FIELDS_HOOK = "__marsh_fields__"


def _is_class(obj: Any) -> bool:
    # list[int] and friends pass isinstance(..., type) on some interpreters
    return isinstance(obj, type) and get_origin(obj) is None


class _Entry:
    __slots__ = ("build", "once", "descriptor", "builds")

    def __init__(self, build: BuildFn) -> None:
        self.build = build
        self.once = Once()
        self.descriptor: Descriptor | None = None
        self.builds = 0


class Registry:
    """Descriptor registry keyed by type identity."""

    def __init__(self) -> None:
        self._entries: dict[type, _Entry] = {}
        self._lock = threading.Lock()

    def register(self, type_: type, build: BuildFn) -> None:
        """
        Record how to build the descriptor for type_.

        Raises:
            DescriptorError: If type_ is already registered.
        """
        with self._lock:
            if type_ in self._entries:
                raise DescriptorError(f"{type_.__qualname__} is already registered")
            self._entries[type_] = _Entry(build)

    def is_registered(self, type_: type) -> bool:
        return type_ in self._entries

    def can_describe(self, type_: Any) -> bool:
        """True if get_descriptor(type_) would find or reflect a registration."""
        if not _is_class(type_):
            return False
        return type_ in self._entries or self._reflector(type_) is not None

    def build_count(self, type_: type) -> int:
        entry = self._entries.get(type_)
        return entry.builds if entry is not None else 0

    def get_descriptor(self, type_: type) -> Descriptor:
        """
        Return the descriptor for type_, building it on first use.

        Raises:
            UnregisteredTypeError: If type_ has no registration and cannot be reflected.
        """
        entry = self._entries.get(type_)
        if entry is None:
            entry = self._auto_register(type_)
        if not entry.once.done:
            entry.once.run(lambda: self._build(type_, entry))
        if entry.descriptor is None:
            raise DescriptorError(f"descriptor for {type_.__qualname__} was not built")
        return entry.descriptor

    def _build(self, type_: type, entry: _Entry) -> None:
        builder = DescriptorBuilder(type_)
        entry.build(builder)
        entry.descriptor = builder.build()
        entry.builds += 1
        logger.debug("built descriptor %s", entry.descriptor)

    def _reflector(self, type_: type) -> BuildFn | None:
        hook = getattr(type_, FIELDS_HOOK, None)
        if hook is not None:
            return hook
        if isinstance(type_, type) and issubclass(type_, BaseModel):
            return lambda b: describe_model(b, self)
        if is_dataclass(type_):
            return lambda b: describe_dataclass(b, self)
        return None

    def _auto_register(self, type_: type) -> _Entry:
        build = self._reflector(type_) if _is_class(type_) else None
        if build is None:
            raise UnregisteredTypeError(f"no descriptor registered for {type_!r}")
        with self._lock:
            return self._entries.setdefault(type_, _Entry(build))


default_registry = Registry()


def get_descriptor(type_: type) -> Descriptor:
    """Descriptor for type_ from the default registry."""
    return default_registry.get_descriptor(type_)


def register(type_: type, build: BuildFn) -> None:
    """Register type_ with the default registry."""
    default_registry.register(type_, build)


def marshaled(cls: T | None = None, *, registry: Registry | None = None) -> Any:
    """
    Class decorator registering a class through its ``__marsh_fields__`` hook.

    Examples:
        >>> from marsh.core.rules import INT
        >>> @marshaled(registry=Registry())
        ... class Counter:
        ...     def __init__(self):
        ...         self.n = 0
        ...     @staticmethod
        ...     def __marsh_fields__(b):
        ...         b.field("n", INT)
    """

    def wrap(c: T) -> T:
        hook = getattr(c, FIELDS_HOOK, None)
        if hook is None:
            raise DescriptorError(f"{c.__qualname__} has no {FIELDS_HOOK} hook")
        (registry or default_registry).register(c, hook)
        return c

    if cls is None:
        return wrap
    return wrap(cls)
