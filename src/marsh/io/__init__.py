"""
marsh.io — Concrete codecs and runtime settings.

## Responsibilities
- Provide conforming Visitor implementations: TreeWriter/TreeReader over plain
  Python values, and a JSON codec layered on top of them.
- Carry runtime policy (unknown fields, text overflow, JSON rendering) in
  MarshSettings with env > TOML > defaults precedence.

## Public API
- MarshSettings — configuration (defaults sourced from marsh.core.constants).
- TreeWriter, TreeReader, to_tree, from_tree — in-memory codec.
- to_json, from_json — JSON codec.

## Import DAG discipline
- Depends only on stdlib and marsh.core.*.

## Examples
```python
from dataclasses import dataclass
from marsh.io import from_json, to_json

@dataclass
class Ser1:
    x: int = 0

to_json(Ser1(x=1))                      # '{"x":1}'
from_json('{"x": 1, "y": 2}', Ser1)     # Ser1(x=1); "y" drained
```
"""

from __future__ import annotations

from .config import MarshSettings
from .errors import CapacityError, CodecError, ShapeMismatchError
from .jsonio import from_json, to_json
from .tree import TreeReader, TreeWriter, from_tree, to_tree

__all__ = [
    "MarshSettings",
    "CodecError",
    "ShapeMismatchError",
    "CapacityError",
    "TreeReader",
    "TreeWriter",
    "to_tree",
    "from_tree",
    "to_json",
    "from_json",
]
