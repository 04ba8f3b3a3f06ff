"""
Unknown-field sink: consume one value of any shape and discard it.

Used when incoming structured data names a field the target type does not declare.
Nested arrays and objects are drained recursively, so a whole unrecognized subtree is
read past without being attached anywhere.
"""

from __future__ import annotations

from .errors import ShapeError
from .shapes import Shape
from .visitor import Visitor

__all__ = ["drain"]


def drain(visitor: Visitor) -> None:
    """
    Consume and discard the next value, whatever its shape.

    Raises:
        ShapeError: If the visitor reports Shape.NONE (a producer has nothing to
            drain) or Shape.ERROR (unclassifiable input).
    """
    shape = visitor.peek()
    if shape is Shape.NULL:
        visitor.visit_null()
    elif shape is Shape.BOOL:
        visitor.visit_bool(False)
    elif shape is Shape.NUMBER:
        visitor.visit_number(0)
    elif shape is Shape.STRING:
        visitor.visit_string("")
    elif shape is Shape.ARRAY or shape is Shape.OBJECT:
        visitor.consume(shape, lambda _key: drain(visitor))
    else:
        raise ShapeError(f"cannot drain a value of shape {shape.value!r}")
