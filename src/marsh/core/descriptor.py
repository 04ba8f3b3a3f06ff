"""
Field, slot and descriptor data model.

A Descriptor is the per-type reflection record: its fields in declared order plus a
name index. A Field is a relation (name + rule + accessor pair), never a value
holder. Locating a field on an instance yields a Slot, a short-lived read/write
handle that is rebuilt on every call so nothing caches where a value lives.

Responsibilities
- Slot kinds: AttrSlot (object fields), ItemSlot (list items and dict entries),
  Cell (free-standing root values).
- Field.locate(instance) -> Slot.
- Descriptor lookups: has, field_by_name, field_by_index, field_count.
- DescriptorBuilder: the explicit registration API (name, rule, accessors).

Notes:
    - Descriptors are immutable once built (tuple + read-only name mapping) and can be
      read concurrently by any number of traversals.
    - field_by_index out of range raises IndexError; only the engine indexes
      descriptors, so this is a programming error, not a recoverable condition.

Examples:
    >>> from marsh.core.descriptor import DescriptorBuilder
    >>> from marsh.core.rules import INT
    >>> class Point:
    ...     def __init__(self):
    ...         self.x = 0
    >>> desc = DescriptorBuilder(Point).field("x", INT).build()
    >>> p = Point()
    >>> desc.field_by_name("x").locate(p).set(3)
    >>> p.x
    3
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, MutableMapping, MutableSequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .errors import DescriptorError

if TYPE_CHECKING:
    from .rules import Rule

__all__ = [
    "Slot",
    "AttrSlot",
    "ItemSlot",
    "Cell",
    "Field",
    "Descriptor",
    "DescriptorBuilder",
]

Getter = Callable[[Any], Any]
Setter = Callable[[Any, Any], None]


class Slot:
    """Read/write handle onto one storage location."""

    __slots__ = ()

    def get(self) -> Any:
        raise NotImplementedError

    def set(self, value: Any) -> None:
        raise NotImplementedError


class AttrSlot(Slot):
    """Slot reached through a field's accessor pair on one instance."""

    __slots__ = ("_instance", "_getter", "_setter")

    def __init__(self, instance: Any, getter: Getter, setter: Setter) -> None:
        self._instance = instance
        self._getter = getter
        self._setter = setter

    def get(self) -> Any:
        return self._getter(self._instance)

    def set(self, value: Any) -> None:
        self._setter(self._instance, value)


class ItemSlot(Slot):
    """Slot for container[key]: a list index or a dict key."""

    __slots__ = ("_container", "_key")

    def __init__(self, container: MutableSequence[Any] | MutableMapping[str, Any], key: Any) -> None:
        self._container = container
        self._key = key

    def get(self) -> Any:
        return self._container[self._key]

    def set(self, value: Any) -> None:
        self._container[self._key] = value


class Cell(Slot):
    """Free-standing slot holding a root value."""

    __slots__ = ("value",)

    def __init__(self, value: Any = None) -> None:
        self.value = value

    def get(self) -> Any:
        return self.value

    def set(self, value: Any) -> None:
        self.value = value


def _attr_getter(name: str) -> Getter:
    def get(instance: Any) -> Any:
        return getattr(instance, name)

    return get


def _attr_setter(name: str) -> Setter:
    def set_(instance: Any, value: Any) -> None:
        setattr(instance, name, value)

    return set_


@dataclass(frozen=True)
class Field:
    """
    One named, typed slot on a composite type.

    Attributes:
        name (str): Field name, unique within its descriptor; also the wire key.
        rule (Rule): Declared shape rule used to traverse the field's value.
        getter (Callable): instance -> current value.
        setter (Callable): (instance, value) -> None.
    """

    name: str
    rule: Rule
    getter: Getter = field(repr=False)
    setter: Setter = field(repr=False)

    def locate(self, instance: Any) -> Slot:
        return AttrSlot(instance, self.getter, self.setter)


class Descriptor:
    """
    Immutable, ordered field table for one registered type.

    Attributes:
        type (type): The described type.
        factory (Callable[[], Any]): Builds a default instance of the type.
    """

    __slots__ = ("type", "factory", "_fields", "_by_name")

    def __init__(self, type_: type, fields: tuple[Field, ...], factory: Callable[[], Any]) -> None:
        self.type = type_
        self.factory = factory
        self._fields = fields
        self._by_name = MappingProxyType({f.name: f for f in fields})

    def has(self, name: str) -> bool:
        return name in self._by_name

    def field_by_name(self, name: str) -> Field:
        return self._by_name[name]

    def field_by_index(self, index: int) -> Field:
        if index < 0:
            raise IndexError(f"field index out of range: {index}")
        return self._fields[index]

    def field_count(self) -> int:
        return len(self._fields)

    def names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self._fields)

    def new(self) -> Any:
        return self.factory()

    def __iter__(self) -> Iterator[Field]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Descriptor({self.type.__qualname__}, fields={list(self.names())})"


class DescriptorBuilder:
    """
    Collects (name, rule, accessor) registrations for one type, then freezes them.

    Args:
        type_ (type): The type being described. Its zero-argument constructor is the
            default factory.

    Raises:
        DescriptorError: On empty/non-str names or a name registered twice.
    """

    def __init__(self, type_: type) -> None:
        self.type = type_
        self._fields: list[Field] = []
        self._names: set[str] = set()
        self._factory: Callable[[], Any] = type_

    def field(
        self,
        name: str,
        rule: Rule,
        getter: Getter | None = None,
        setter: Setter | None = None,
    ) -> DescriptorBuilder:
        if not isinstance(name, str) or not name:
            raise DescriptorError(f"{self.type.__qualname__}: field name must be a non-empty str, got {name!r}")
        if name in self._names:
            raise DescriptorError(f"{self.type.__qualname__}: duplicate field name {name!r}")
        self._names.add(name)
        self._fields.append(
            Field(
                name=name,
                rule=rule,
                getter=getter or _attr_getter(name),
                setter=setter or _attr_setter(name),
            )
        )
        return self

    def factory(self, factory: Callable[[], Any]) -> DescriptorBuilder:
        self._factory = factory
        return self

    def build(self) -> Descriptor:
        return Descriptor(self.type, tuple(self._fields), self._factory)
