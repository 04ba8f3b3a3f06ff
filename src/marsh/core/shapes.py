"""
Shape grammar: the structural categories a value can take during traversal.

Responsibilities
- Define the Shape enum shared by visitors, the traversal engine and the sink.
- Classify plain JSON-like Python values into shapes for tree-backed visitors.
- Normalize shape names coming from configuration or tests.

Naming
- Enum members are UPPER_SNAKE; serialized values are lower_snake.
- Shape.NONE is what a producing visitor reports from peek() (no lookahead).
- Shape.ERROR is the reserved sentinel a consuming visitor reports for input it
  cannot classify.

Examples
--------
>>> from marsh.core.shapes import Shape, shape_of
>>> shape_of({"x": 1}) is Shape.OBJECT
True
>>> shape_of(True) is Shape.BOOL
True
>>> shape_of(object()) is Shape.ERROR
True
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from .errors import ShapeError

__all__ = [
    "Shape",
    "COMPOSITE_SHAPES",
    "shape_of",
    "shape_from_value",
]


class Shape(Enum):
    """
    Structural category of the next value a visitor will read or write.

    Values:
        - none: producing mode, no lookahead available
        - error: input cannot be classified (shape mismatch sentinel)
        - object, array: composites bracketed by produce_start/produce_end
        - null, bool, number, string: leaves
    """

    NONE = "none"
    ERROR = "error"
    OBJECT = "object"
    ARRAY = "array"
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"


COMPOSITE_SHAPES: frozenset[Shape] = frozenset({Shape.OBJECT, Shape.ARRAY})


def shape_of(value: Any) -> Shape:
    """
    Classify a plain Python value into a Shape.

    Args:
        value (Any): Value as produced by json.loads or built by a tree writer.

    Returns:
        Shape: Matching shape, or Shape.ERROR for values outside the JSON data model.

    Notes:
        bool is checked before int since bool is an int subclass.
    """
    if value is None:
        return Shape.NULL
    if isinstance(value, bool):
        return Shape.BOOL
    if isinstance(value, (int, float)):
        return Shape.NUMBER
    if isinstance(value, str):
        return Shape.STRING
    if isinstance(value, dict):
        return Shape.OBJECT
    if isinstance(value, (list, tuple)):
        return Shape.ARRAY
    return Shape.ERROR


def shape_from_value(value: str | Shape) -> Shape:
    """
    Normalize a shape name (case-insensitive) to a Shape.

    Raises:
        ShapeError: If the name is not a known shape.

    Examples:
        >>> shape_from_value("OBJECT") is Shape.OBJECT
        True
    """
    if isinstance(value, Shape):
        return value
    try:
        return Shape(str(value).strip().lower())
    except ValueError as exc:
        raise ShapeError(f"unknown shape: {value!r}") from exc
