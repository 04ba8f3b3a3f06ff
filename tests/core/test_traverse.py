from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import pytest

from marsh.core.descriptor import Cell
from marsh.core.registry import Registry
from marsh.core.rules import INT, TEXT, Box, MapOf, Nullable, Obj, Ref, SeqOf
from marsh.core.shapes import Shape
from marsh.core.traverse import Traversal, visit
from marsh.core.visitor import Visitor
from marsh.io.tree import TreeReader, TreeWriter


class Recorder(Visitor):
    """Producing visitor that records every call it receives."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def peek(self) -> Shape:
        return Shape.NONE

    def consume(self, shape, callback) -> bool:
        return False

    def produce_start(self, shape: Shape) -> None:
        self.calls.append(("start", shape.value))

    def produce_end(self, shape: Shape) -> None:
        self.calls.append(("end", shape.value))

    def visit_null(self) -> None:
        self.calls.append(("null", None))

    def visit_bool(self, value: bool) -> bool:
        self.calls.append(("bool", value))
        return value

    def visit_int(self, value: int) -> int:
        self.calls.append(("int", value))
        return value

    def visit_float(self, value: float) -> float:
        self.calls.append(("float", value))
        return value

    def visit_string(self, value: str) -> str:
        self.calls.append(("string", value))
        return value

    def visit_text(self, value: str, capacity: int) -> str:
        self.calls.append(("text", (value, capacity)))
        return value


@dataclass
class Ser1:
    x: int = 0


@dataclass
class Ser2:
    a: int = 0
    sub: Ser1 = field(default_factory=Ser1)


@dataclass
class Ser2P:
    a: int = 0
    sub: Box[Ser1] = field(default_factory=Box)


@dataclass
class SerVI:
    ints: list[int] = field(default_factory=list)


@dataclass
class Opt:
    name: str | None = None
    child: Ser1 | None = None


@dataclass
class Index:
    entries: dict[str, Ser1] = field(default_factory=dict)


class Counted:
    made = 0

    def __init__(self) -> None:
        Counted.made += 1
        self.x = 0


class Holder:
    def __init__(self) -> None:
        self.sub: Box[Counted] = Box()


def _counted_registry() -> Registry:
    reg = Registry()
    reg.register(Counted, lambda b: b.field("x", INT))
    reg.register(Holder, lambda b: b.field("sub", Ref(Obj(Counted))))
    return reg


def _produce(value: Any, rule=None) -> Any:
    w = TreeWriter()
    visit(w, value, rule)
    return w.result()


def test_producing_emits_fields_in_declared_order_with_brackets() -> None:
    rec = Recorder()
    visit(rec, Ser2(a=2, sub=Ser1(x=1)))
    assert rec.calls == [
        ("start", "object"),
        ("string", "a"),
        ("int", 2),
        ("string", "sub"),
        ("start", "object"),
        ("string", "x"),
        ("int", 1),
        ("end", "object"),
        ("end", "object"),
    ]


def test_producing_shapes_match_expected_trees() -> None:
    assert _produce(Ser1(x=1)) == {"x": 1}
    assert _produce(Ser2(a=2, sub=Ser1(x=1))) == {"a": 2, "sub": {"x": 1}}
    assert _produce(Ser2P(a=3)) == {"a": 3, "sub": None}
    assert _produce(Ser2P(a=3, sub=Box(Ser1(x=1)))) == {"a": 3, "sub": {"x": 1}}
    assert _produce(SerVI(ints=[1, 23, 456])) == {"ints": [1, 23, 456]}
    assert _produce(Opt()) == {"name": None, "child": None}


def test_sequence_brackets_with_array_shape() -> None:
    rec = Recorder()
    visit(rec, [1, 2], SeqOf(INT))
    assert rec.calls == [("start", "array"), ("int", 1), ("int", 2), ("end", "array")]


def test_consuming_populates_object_and_drops_unknown_fields() -> None:
    target = Ser1()
    reader = TreeReader({"x": 1, "y": 2})
    t = Traversal(reader)
    t.run(Cell(target), Obj(Ser1))
    assert target == Ser1(x=1)
    assert t.unknown == ["Ser1.y"]
    assert reader.done


def test_unknown_subtree_is_drained_without_side_effects() -> None:
    target = Ser2(a=5)
    tree = {"junk": {"deep": [1, {"z": None}, "s", True, 2.5]}, "sub": {"x": 4, "w": []}}
    visit(TreeReader(tree), target)
    assert target == Ser2(a=5, sub=Ser1(x=4))


def test_unknown_field_log_policy(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="marsh.core.traverse")
    visit(TreeReader({"x": 1, "y": 2}), Ser1(), unknown_fields="log")
    assert "Ser1.y" in caplog.text


def test_unknown_field_ignore_policy_is_silent(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="marsh.core.traverse")
    visit(TreeReader({"x": 1, "y": 2}), Ser1())
    assert "Ser1.y" not in caplog.text


def test_invalid_unknown_field_policy_rejected() -> None:
    with pytest.raises(ValueError):
        Traversal(Recorder(), unknown_fields="explode")


def test_lazy_allocation_creates_exactly_one_target() -> None:
    reg = _counted_registry()
    holder = Holder()
    before = Counted.made
    visit(TreeReader({"sub": {"x": 5}}), holder, registry=reg)
    assert Counted.made == before + 1
    assert holder.sub.present and holder.sub.get().x == 5


def test_present_reference_is_reused() -> None:
    reg = _counted_registry()
    holder = Holder()
    existing = Counted()
    holder.sub.attach(existing)
    before = Counted.made
    visit(TreeReader({"sub": {"x": 9}}), holder, registry=reg)
    assert Counted.made == before
    assert holder.sub.get() is existing
    assert existing.x == 9


def test_absent_reference_without_input_is_not_allocated() -> None:
    reg = _counted_registry()
    holder = Holder()
    before = Counted.made
    visit(TreeReader({}), holder, registry=reg)
    assert Counted.made == before
    assert not holder.sub.present


def test_null_into_reference_leaves_or_makes_it_absent() -> None:
    empty = Ser2P()
    visit(TreeReader({"a": 1, "sub": None}), empty)
    assert empty == Ser2P(a=1)
    assert not empty.sub.present

    full = Ser2P(sub=Box(Ser1(x=3)))
    visit(TreeReader({"sub": None}), full)
    assert not full.sub.present


def test_nullable_fields_allocate_and_clear() -> None:
    target = Opt()
    visit(TreeReader({"name": "n", "child": {"x": 2}}), target)
    assert target == Opt(name="n", child=Ser1(x=2))
    visit(TreeReader({"name": None, "child": None}), target)
    assert target == Opt()


def test_map_consumption_inserts_and_reuses_entries() -> None:
    existing = Ser1(x=1)
    target = Index(entries={"a": existing})
    visit(TreeReader({"entries": {"a": {"x": 7}, "b": {"x": 8}}}), target)
    assert target.entries["a"] is existing
    assert target.entries == {"a": Ser1(x=7), "b": Ser1(x=8)}
    assert _produce(target) == {"entries": {"a": {"x": 7}, "b": {"x": 8}}}


def test_sequence_consumption_appends_elements() -> None:
    target = SerVI(ints=[9])
    visit(TreeReader({"ints": [1, 2]}), target)
    assert target.ints == [9, 1, 2]


def test_primitive_and_container_roots() -> None:
    assert visit(TreeReader(5), 0, INT) == 5
    assert visit(TreeReader("hi"), "", TEXT) == "hi"
    assert visit(TreeReader(None), 3, Nullable(INT)) is None
    assert visit(TreeReader({"k": [1]}), {}, MapOf(SeqOf(INT))) == {"k": [1]}
    assert _produce(3, INT) == 3
    assert _produce(None, Nullable(INT)) is None


def test_custom_registry_descriptor_drives_traversal() -> None:
    class Pair:
        def __init__(self) -> None:
            self.left = 0
            self.right = 0

    reg = Registry()
    reg.register(Pair, lambda b: b.field("right", INT).field("left", INT))
    p = Pair()
    p.left, p.right = 1, 2
    w = TreeWriter()
    visit(w, p, registry=reg)
    assert list(w.result().items()) == [("right", 2), ("left", 1)]
