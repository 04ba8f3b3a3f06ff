"""
In-memory tree codec: a conforming Visitor pair over plain Python values.

TreeWriter produces dict/list/scalar/None trees (dicts keep insertion order, so field
order equals declared order). TreeReader consumes such trees, reporting lookahead
through shape_of and rejecting wrong shapes with ShapeMismatchError.

Number policy (reader)
- bool never counts as a number.
- int fields accept integral floats (2.0 -> 2); anything else raises.
- float fields accept ints (1 -> 1.0); ints too large for a float raise.

Fixed-capacity text (reader)
- text_overflow="error" raises CapacityError when text exceeds capacity.
- text_overflow="truncate" keeps the first `capacity` characters.

Examples:
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Point:
    ...     x: int = 0
    >>> to_tree(Point(x=1))
    {'x': 1}
    >>> from_tree({"x": 1, "y": 2}, Point)
    Point(x=1)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from marsh.core.constants import TEXT_OVERFLOW, TEXT_OVERFLOW_POLICIES
from marsh.core.registry import Registry, default_registry
from marsh.core.rules import Rule
from marsh.core.shapes import COMPOSITE_SHAPES, Shape, shape_of
from marsh.core.traverse import visit
from marsh.core.visitor import ConsumeCallback, Visitor

from .config import MarshSettings
from .errors import CapacityError, CodecError, ShapeMismatchError

__all__ = [
    "TreeWriter",
    "TreeReader",
    "to_tree",
    "from_tree",
]

_UNSET: Any = object()


@dataclass
class _Frame:
    shape: Shape
    container: Any
    key: str | None = None


class TreeWriter(Visitor):
    """Producing visitor that assembles a plain Python value."""

    def __init__(self) -> None:
        self._stack: list[_Frame] = []
        self._root: Any = _UNSET

    def result(self) -> Any:
        """
        Return the produced tree.

        Raises:
            CodecError: If a composite is still open or nothing was produced.
        """
        if self._stack:
            raise CodecError(f"{len(self._stack)} composite(s) still open")
        if self._root is _UNSET:
            raise CodecError("nothing was produced")
        return self._root

    def _emit(self, value: Any) -> None:
        if not self._stack:
            if self._root is not _UNSET:
                raise CodecError("root value already produced")
            self._root = value
            return
        frame = self._stack[-1]
        if frame.shape is Shape.ARRAY:
            frame.container.append(value)
        elif frame.key is None:
            if not isinstance(value, str):
                raise CodecError(f"object key must be a string, got {value!r}")
            frame.key = value
        else:
            frame.container[frame.key] = value
            frame.key = None

    def peek(self) -> Shape:
        return Shape.NONE

    def consume(self, shape: Shape, callback: ConsumeCallback) -> bool:
        return False

    def produce_start(self, shape: Shape) -> None:
        if shape not in COMPOSITE_SHAPES:
            raise CodecError(f"cannot open a {shape.value!r}")
        container: Any = {} if shape is Shape.OBJECT else []
        self._emit(container)
        self._stack.append(_Frame(shape, container))

    def produce_end(self, shape: Shape) -> None:
        if not self._stack:
            raise CodecError(f"produce_end({shape.value}) without matching produce_start")
        frame = self._stack.pop()
        if frame.shape is not shape:
            raise CodecError(f"produce_end({shape.value}) closes an open {frame.shape.value}")
        if frame.key is not None:
            raise CodecError(f"key {frame.key!r} has no value")

    def visit_null(self) -> None:
        self._emit(None)

    def visit_bool(self, value: bool) -> bool:
        self._emit(value)
        return value

    def visit_int(self, value: int) -> int:
        self._emit(value)
        return value

    def visit_float(self, value: float) -> float:
        self._emit(value)
        return value

    def visit_string(self, value: str) -> str:
        self._emit(value)
        return value

    def visit_text(self, value: str, capacity: int) -> str:
        self._emit(value)
        return value


class TreeReader(Visitor):
    """
    Consuming visitor over a plain Python value.

    Args:
        tree (Any): Value to read (e.g. the result of json.loads).
        text_overflow (str): "error" or "truncate" for fixed-capacity text.
    """

    def __init__(self, tree: Any, text_overflow: str = TEXT_OVERFLOW) -> None:
        if text_overflow not in TEXT_OVERFLOW_POLICIES:
            raise ValueError(f"text_overflow must be one of {sorted(TEXT_OVERFLOW_POLICIES)}, got {text_overflow!r}")
        self.text_overflow = text_overflow
        self._pending: Any = tree

    @property
    def done(self) -> bool:
        """True once every value of the tree has been consumed."""
        return self._pending is _UNSET

    def _put(self, value: Any) -> None:
        self._pending = value

    def _take(self, *shapes: Shape) -> Any:
        found = self.peek()
        if found not in shapes:
            expected = "/".join(s.value for s in shapes)
            raise ShapeMismatchError(f"expected {expected}, found {found.value}")
        value = self._pending
        self._pending = _UNSET
        return value

    def peek(self) -> Shape:
        if self._pending is _UNSET:
            return Shape.ERROR
        return shape_of(self._pending)

    def consume(self, shape: Shape, callback: ConsumeCallback) -> bool:
        if shape not in COMPOSITE_SHAPES:
            raise CodecError(f"cannot consume a {shape.value!r} as a composite")
        value = self._take(shape)
        if shape is Shape.OBJECT:
            for key, item in value.items():
                if not isinstance(key, str):
                    raise ShapeMismatchError(f"object key must be a string, got {key!r}")
                self._step(callback, key, item)
        else:
            for item in value:
                self._step(callback, None, item)
        return True

    def _step(self, callback: ConsumeCallback, key: str | None, item: Any) -> None:
        self._put(item)
        callback(key)
        if not self.done:
            raise CodecError(f"value for {key!r} was left unconsumed")

    def produce_start(self, shape: Shape) -> None:
        raise CodecError("TreeReader cannot produce")

    def produce_end(self, shape: Shape) -> None:
        raise CodecError("TreeReader cannot produce")

    def visit_null(self) -> None:
        self._take(Shape.NULL)

    def visit_bool(self, value: bool) -> bool:
        return self._take(Shape.BOOL)

    def visit_int(self, value: int) -> int:
        number = self._take(Shape.NUMBER)
        if isinstance(number, float):
            if not number.is_integer():
                raise ShapeMismatchError(f"expected an integer, found {number!r}")
            return int(number)
        return number

    def visit_float(self, value: float) -> float:
        number = self._take(Shape.NUMBER)
        try:
            return float(number)
        except OverflowError as exc:
            raise ShapeMismatchError(f"number does not fit a float: {number}") from exc

    def visit_number(self, value: int | float) -> int | float:
        return self._take(Shape.NUMBER)

    def visit_string(self, value: str) -> str:
        return self._take(Shape.STRING)

    def visit_text(self, value: str, capacity: int) -> str:
        text = self._take(Shape.STRING)
        if len(text) > capacity:
            if self.text_overflow == "truncate":
                return text[:capacity]
            raise CapacityError(f"text of length {len(text)} exceeds capacity {capacity}")
        return text


def to_tree(value: Any, rule: Rule | None = None, *, registry: Registry | None = None) -> Any:
    """Produce value into a plain Python tree."""
    writer = TreeWriter()
    visit(writer, value, rule, registry=registry)
    return writer.result()


def from_tree(
    tree: Any,
    target: Any,
    rule: Rule | None = None,
    *,
    settings: MarshSettings | None = None,
    registry: Registry | None = None,
) -> Any:
    """
    Consume a plain Python tree into target.

    Args:
        tree (Any): Input value.
        target (Any): Instance to populate, or a registered type to default-construct.
        rule (Rule | None): Declared root shape; Obj(type(target)) if None.
        settings (MarshSettings | None): Unknown-field and text-overflow policies.
        registry (Registry | None): Descriptor source; the default registry if None.

    Returns:
        Any: The populated root value.
    """
    s = settings or MarshSettings()
    reg = registry or default_registry
    if isinstance(target, type) and rule is None:
        target = reg.get_descriptor(target).new()
    reader = TreeReader(tree, text_overflow=s.text_overflow)
    return visit(reader, target, rule, unknown_fields=s.unknown_fields, registry=reg)
