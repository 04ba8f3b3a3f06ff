"""
Core package aggregator for marsh contracts (shapes, visitor, descriptors, traversal).

## Contracts (single source of truth)
- Shapes — the Shape enum and value classification.
- Visitor — the abstract codec contract, symmetric for both directions.
- Descriptors — Field/Slot/Descriptor and the DescriptorBuilder registration API.
- Registry — process-wide, lazily built, run-once-guarded descriptors per type.
- Rules — declared shapes (Obj, MapOf, SeqOf, Ref, Nullable, primitives) and Box.
- Traversal — the dual-mode recursive walk and the unknown-field sink.

## Notes
- Zero-IO policy: stdlib + pydantic only; no file/network IO.
- Concrete codecs live in marsh.io.

## Examples
```python
from dataclasses import dataclass, field
from marsh.core import Box, visit
from marsh.io.tree import TreeReader, TreeWriter

@dataclass
class Sub:
    x: int = 0

@dataclass
class Outer:
    a: int = 0
    sub: Box[Sub] = field(default_factory=Box)

w = TreeWriter()
visit(w, Outer(a=3))
w.result()  # {'a': 3, 'sub': None}
```
"""

from __future__ import annotations

from .descriptor import Cell, Descriptor, DescriptorBuilder, Field, Slot
from .errors import DescriptorError, MarshError, ShapeError, UnregisteredTypeError
from .once import Once
from .reflect import Capacity, rule_for
from .registry import Registry, default_registry, get_descriptor, marshaled, register
from .rules import (
    BOOL,
    FLOAT,
    INT,
    TEXT,
    Box,
    FixedText,
    MapOf,
    Nullable,
    Obj,
    Ref,
    Rule,
    SeqOf,
)
from .shapes import Shape, shape_of
from .sink import drain
from .traverse import Traversal, visit
from .visitor import Visitor, is_producing

__all__ = [
    "BOOL",
    "FLOAT",
    "INT",
    "TEXT",
    "Box",
    "Capacity",
    "Cell",
    "Descriptor",
    "DescriptorBuilder",
    "DescriptorError",
    "Field",
    "FixedText",
    "MapOf",
    "MarshError",
    "Nullable",
    "Obj",
    "Once",
    "Ref",
    "Registry",
    "Rule",
    "SeqOf",
    "Shape",
    "ShapeError",
    "Slot",
    "Traversal",
    "UnregisteredTypeError",
    "Visitor",
    "default_registry",
    "drain",
    "get_descriptor",
    "is_producing",
    "marshaled",
    "register",
    "rule_for",
    "shape_of",
    "visit",
]
