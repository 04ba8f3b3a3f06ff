"""
Declarative shape rules and the owned-reference Box.

A rule names the declared shape of a slot. The traversal engine dispatches on the
rule, never on the runtime type of the value it finds in the slot.

Rules
- Obj(type): composite with a registered descriptor.
- MapOf(value): str-keyed dict with homogeneous values.
- SeqOf(element): list with homogeneous elements.
- Ref(target): exclusively-owned optional value held in a Box.
- Nullable(target): plain attribute holding either None or a value.
- Bool, Int, Float, Text: primitive leaves (singletons BOOL, INT, FLOAT, TEXT).
- FixedText(capacity): bounded text.

Every rule knows the default value a freshly inserted element or entry gets.

Examples:
    >>> box = Box()
    >>> box.present
    False
    >>> box.attach([1, 2])
    >>> box.get()
    [1, 2]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .errors import DescriptorError

if TYPE_CHECKING:
    from .registry import Registry

__all__ = [
    "Box",
    "Rule",
    "Obj",
    "MapOf",
    "SeqOf",
    "Ref",
    "Nullable",
    "Bool",
    "Int",
    "Float",
    "Text",
    "FixedText",
    "BOOL",
    "INT",
    "FLOAT",
    "TEXT",
]

T = TypeVar("T")

_EMPTY: Any = object()


class Box(Generic[T]):
    """
    Optional, exclusively owned value with explicit presence.

    A Box starts empty or holding one value. attach() fills an empty box; release()
    hands the value back and leaves the box empty. Two boxes compare equal when both
    are empty or both hold equal values.
    """

    # presence is tracked apart from the value so copied boxes keep it
    __slots__ = ("_value", "_present")

    def __init__(self, value: Any = _EMPTY) -> None:
        self._present = value is not _EMPTY
        self._value = value if self._present else None

    @property
    def present(self) -> bool:
        return self._present

    def get(self) -> T:
        if not self._present:
            raise LookupError("box is empty")
        return self._value

    def attach(self, value: T) -> None:
        if self._present:
            raise ValueError("box already holds a value")
        self._value = value
        self._present = True

    def release(self) -> T:
        value = self.get()
        self.clear()
        return value

    def clear(self) -> None:
        self._value = None
        self._present = False

    def __bool__(self) -> bool:
        return self.present

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Box):
            return NotImplemented
        if not self.present or not other.present:
            return self.present == other.present
        return self._value == other._value

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Box({self._value!r})" if self.present else "Box()"


class Rule:
    """Base class for declared shapes."""

    __slots__ = ()

    def default(self, registry: Registry) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class Obj(Rule):
    type: type

    def default(self, registry: Registry) -> Any:
        return registry.get_descriptor(self.type).new()


@dataclass(frozen=True)
class MapOf(Rule):
    value: Rule

    def default(self, registry: Registry) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class SeqOf(Rule):
    element: Rule

    def default(self, registry: Registry) -> list[Any]:
        return []


@dataclass(frozen=True)
class Ref(Rule):
    target: Rule

    def default(self, registry: Registry) -> Box[Any]:
        return Box()


@dataclass(frozen=True)
class Nullable(Rule):
    target: Rule

    def default(self, registry: Registry) -> None:
        return None


@dataclass(frozen=True)
class Bool(Rule):
    def default(self, registry: Registry) -> bool:
        return False


@dataclass(frozen=True)
class Int(Rule):
    def default(self, registry: Registry) -> int:
        return 0


@dataclass(frozen=True)
class Float(Rule):
    def default(self, registry: Registry) -> float:
        return 0.0


@dataclass(frozen=True)
class Text(Rule):
    def default(self, registry: Registry) -> str:
        return ""


@dataclass(frozen=True)
class FixedText(Rule):
    capacity: int

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise DescriptorError(f"FixedText capacity must be >= 1, got {self.capacity}")

    def default(self, registry: Registry) -> str:
        return ""


BOOL = Bool()
INT = Int()
FLOAT = Float()
TEXT = Text()
