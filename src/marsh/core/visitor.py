"""
Visitor contract: the only channel through which values and structure flow.

A concrete codec (JSON, binary, in-memory tree, ...) subclasses Visitor. The same
instance is threaded through a whole traversal and is used in exactly one of two
modes:

- Producing (serialize): peek() returns Shape.NONE and consume() returns False, so the
  engine brackets composites with produce_start/produce_end and pushes every value
  through the primitive visits.
- Consuming (deserialize): peek() reports the shape of the next input value and
  consume() drives the callback once per incoming field (with its name) or array
  element (with None), then returns True.

Primitive visits are symmetric: they receive the slot's current value and return the
value the slot must hold afterwards. Producers return their argument unchanged;
consumers ignore it and return what they read. The engine always writes the
returned value back.

Invariants
- Every produce_start(S) is matched by exactly one produce_end(S), nested LIFO.
- In consuming mode the callback receives the field/key name before the value is
  visited.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from .shapes import Shape

__all__ = [
    "Visitor",
    "ConsumeCallback",
    "is_producing",
]

# Called once per incoming object field (with its name) or array element (with None).
ConsumeCallback = Callable[[str | None], None]


class Visitor(ABC):
    """Abstract capability set every format implementation must satisfy."""

    @abstractmethod
    def peek(self) -> Shape:
        """Shape of the next value to consume, or Shape.NONE when producing."""

    @abstractmethod
    def consume(self, shape: Shape, callback: ConsumeCallback) -> bool:
        """Drive callback over an incoming composite; False when producing."""

    @abstractmethod
    def produce_start(self, shape: Shape) -> None:
        """Open an emitted object or array."""

    @abstractmethod
    def produce_end(self, shape: Shape) -> None:
        """Close the innermost emitted object or array."""

    @abstractmethod
    def visit_null(self) -> None:
        """Emit or acknowledge an explicit null."""

    @abstractmethod
    def visit_bool(self, value: bool) -> bool: ...

    @abstractmethod
    def visit_int(self, value: int) -> int: ...

    @abstractmethod
    def visit_float(self, value: float) -> float: ...

    @abstractmethod
    def visit_string(self, value: str) -> str: ...

    @abstractmethod
    def visit_text(self, value: str, capacity: int) -> str:
        """Read or write text bounded by capacity characters."""

    def visit_number(self, value: int | float) -> int | float:
        """
        Read or write a number of either kind, without coercing it.

        Used by the unknown-field sink. Codecs whose numbers may not fit a float should
        override it; the default goes through visit_float.
        """
        return self.visit_float(value)


def is_producing(visitor: Visitor) -> bool:
    """True when the visitor offers no lookahead (serialize direction)."""
    return visitor.peek() is Shape.NONE
