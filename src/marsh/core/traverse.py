"""
Generic traversal dispatch: one recursive walk for both directions.

Traversal.run(slot, rule) selects the algorithm from the declared rule of the slot
and drives the visitor:

- Obj: consume(OBJECT) with a per-field callback; unknown names go to the sink.
  When producing: produce_start(OBJECT), then name + value per field in declared
  order, produce_end(OBJECT).
- MapOf: same split; incoming keys insert (or reuse) an entry and recurse into it.
- SeqOf: consume(ARRAY) appends a default element per incoming element; producing
  brackets every element with produce_start/produce_end(ARRAY).
- Ref / Nullable: a non-null upcoming value fills an empty slot with a fresh default
  target; an explicit null empties the slot; an empty slot visits null.
- Bool, Int, Float, Text, FixedText: a single symmetric visitor call whose return
  value is written back into the slot.

Notes:
    - The engine is synchronous and reentrant; it holds no state shared across
      traversals apart from read-only descriptors.
    - Visitor errors are never caught here; they propagate to the caller.
    - Unknown fields are always drained; with unknown_fields="log" each one is also
      logged at WARNING. The qualified names land in Traversal.unknown either way.

Examples:
    >>> from marsh.core.rules import INT
    >>> from marsh.core.registry import Registry
    >>> from marsh.io.tree import TreeWriter
    >>> class Point:
    ...     def __init__(self):
    ...         self.x = 1
    >>> reg = Registry()
    >>> reg.register(Point, lambda b: b.field("x", INT))
    >>> w = TreeWriter()
    >>> _ = visit(w, Point(), registry=reg)
    >>> w.result()
    {'x': 1}
"""

from __future__ import annotations

import logging
from functools import singledispatchmethod
from typing import Any

from .constants import UNKNOWN_FIELD_POLICIES, UNKNOWN_FIELDS
from .descriptor import Cell, Descriptor, ItemSlot, Slot
from .registry import Registry, default_registry
from .rules import (
    Bool,
    Box,
    FixedText,
    Float,
    Int,
    MapOf,
    Nullable,
    Obj,
    Ref,
    Rule,
    SeqOf,
    Text,
)
from .shapes import Shape
from .sink import drain
from .visitor import Visitor, is_producing

__all__ = [
    "Traversal",
    "visit",
]

logger = logging.getLogger(__name__)


class _BoxSlot(Slot):
    __slots__ = ("_box",)

    def __init__(self, box: Box[Any]) -> None:
        self._box = box

    def get(self) -> Any:
        return self._box.get()

    def set(self, value: Any) -> None:
        self._box.clear()
        self._box.attach(value)


class Traversal:
    """
    One traversal call tree bound to a single visitor.

    Args:
        visitor (Visitor): Codec driving or receiving values.
        unknown_fields (str): "ignore" or "log".
        registry (Registry | None): Descriptor source; the default registry if None.

    Attributes:
        unknown (list[str]): "Type.field" for every unknown field drained so far.
    """

    def __init__(
        self,
        visitor: Visitor,
        unknown_fields: str = UNKNOWN_FIELDS,
        registry: Registry | None = None,
    ) -> None:
        if unknown_fields not in UNKNOWN_FIELD_POLICIES:
            raise ValueError(f"unknown_fields must be one of {sorted(UNKNOWN_FIELD_POLICIES)}, got {unknown_fields!r}")
        self.visitor = visitor
        self.unknown_fields = unknown_fields
        self.registry = registry or default_registry
        self.unknown: list[str] = []

    def run(self, slot: Slot, rule: Rule) -> None:
        self._visit(rule, slot)

    def _skip(self, desc: Descriptor, name: str | None) -> None:
        qualified = f"{desc.type.__qualname__}.{name}"
        self.unknown.append(qualified)
        if self.unknown_fields == "log":
            logger.warning("dropping unknown field %s", qualified)
        drain(self.visitor)

    # ------------------------------------------------------------------
    # Dispatch on the declared rule
    # ------------------------------------------------------------------

    @singledispatchmethod
    def _visit(self, rule: Rule, slot: Slot) -> None:
        raise TypeError(f"no traversal for rule {rule!r}")

    @_visit.register(Obj)
    def _visit_obj(self, rule: Obj, slot: Slot) -> None:
        v = self.visitor
        desc = self.registry.get_descriptor(rule.type)
        instance = slot.get()

        def on_field(name: str | None) -> None:
            if name is None or not desc.has(name):
                self._skip(desc, name)
                return
            f = desc.field_by_name(name)
            self.run(f.locate(instance), f.rule)

        if v.consume(Shape.OBJECT, on_field):
            return
        v.produce_start(Shape.OBJECT)
        for i in range(desc.field_count()):
            f = desc.field_by_index(i)
            v.visit_string(f.name)
            self.run(f.locate(instance), f.rule)
        v.produce_end(Shape.OBJECT)

    @_visit.register(MapOf)
    def _visit_map(self, rule: MapOf, slot: Slot) -> None:
        v = self.visitor
        mapping = slot.get()

        def on_key(key: str | None) -> None:
            if key not in mapping:
                mapping[key] = rule.value.default(self.registry)
            self.run(ItemSlot(mapping, key), rule.value)

        if v.consume(Shape.OBJECT, on_key):
            return
        v.produce_start(Shape.OBJECT)
        for key in list(mapping):
            v.visit_string(key)
            self.run(ItemSlot(mapping, key), rule.value)
        v.produce_end(Shape.OBJECT)

    @_visit.register(SeqOf)
    def _visit_seq(self, rule: SeqOf, slot: Slot) -> None:
        v = self.visitor
        items = slot.get()

        def on_element(_key: str | None) -> None:
            items.append(rule.element.default(self.registry))
            self.run(ItemSlot(items, len(items) - 1), rule.element)

        if v.consume(Shape.ARRAY, on_element):
            return
        v.produce_start(Shape.ARRAY)
        for i in range(len(items)):
            self.run(ItemSlot(items, i), rule.element)
        v.produce_end(Shape.ARRAY)

    @_visit.register(Ref)
    def _visit_ref(self, rule: Ref, slot: Slot) -> None:
        v = self.visitor
        box = slot.get()
        if box is None:
            box = Box()
            slot.set(box)
        shape = v.peek()
        if shape is Shape.NULL and box.present:
            box.clear()
        elif shape is not Shape.NULL and not box.present and not is_producing(v):
            box.attach(rule.target.default(self.registry))
        if box.present:
            self.run(_BoxSlot(box), rule.target)
        else:
            v.visit_null()

    @_visit.register(Nullable)
    def _visit_nullable(self, rule: Nullable, slot: Slot) -> None:
        v = self.visitor
        shape = v.peek()
        current = slot.get()
        if shape is Shape.NULL and current is not None:
            slot.set(None)
            current = None
        elif shape is not Shape.NULL and current is None and not is_producing(v):
            current = rule.target.default(self.registry)
            slot.set(current)
        if current is None:
            v.visit_null()
        else:
            self.run(slot, rule.target)

    @_visit.register(Bool)
    def _visit_bool(self, rule: Bool, slot: Slot) -> None:
        slot.set(self.visitor.visit_bool(slot.get()))

    @_visit.register(Int)
    def _visit_int(self, rule: Int, slot: Slot) -> None:
        slot.set(self.visitor.visit_int(slot.get()))

    @_visit.register(Float)
    def _visit_float(self, rule: Float, slot: Slot) -> None:
        slot.set(self.visitor.visit_float(slot.get()))

    @_visit.register(Text)
    def _visit_text(self, rule: Text, slot: Slot) -> None:
        slot.set(self.visitor.visit_string(slot.get()))

    @_visit.register(FixedText)
    def _visit_fixed_text(self, rule: FixedText, slot: Slot) -> None:
        slot.set(self.visitor.visit_text(slot.get(), rule.capacity))


def visit(
    visitor: Visitor,
    value: Any,
    rule: Rule | None = None,
    *,
    unknown_fields: str = UNKNOWN_FIELDS,
    registry: Registry | None = None,
) -> Any:
    """
    Traverse value with visitor and return the (possibly replaced) root value.

    Args:
        visitor (Visitor): Producing or consuming codec.
        value (Any): Root value; for consuming, the target to populate.
        rule (Rule | None): Declared root shape; Obj(type(value)) if None.
        unknown_fields (str): "ignore" or "log".
        registry (Registry | None): Descriptor source; the default registry if None.

    Returns:
        Any: The root value after traversal. Composite roots are populated in place;
        primitive or nullable roots come back as new values.
    """
    if rule is None:
        rule = Obj(type(value))
    cell = Cell(value)
    Traversal(visitor, unknown_fields=unknown_fields, registry=registry).run(cell, rule)
    return cell.get()
