"""
marsh — format-agnostic object marshaling through a single dual-mode visitor walk.

- marsh.core: shapes, visitor contract, descriptors/registry, traversal engine.
- marsh.io: concrete codecs (in-memory tree, JSON) and runtime settings.
"""

from __future__ import annotations

__version__ = "0.1.0"
