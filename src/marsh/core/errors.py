"""
Core exception types raised by descriptor registration and shape handling.

Provides typed exceptions for core-domain failures:
- DescriptorError for registration contract violations (duplicate or invalid field
  names, unsupported annotations, double registration).
- UnregisteredTypeError when a descriptor is requested for a type nobody declared.
- ShapeError for shape-level failures (unknown shape names, draining a producer).

Notes:
    - This module uses only the Python standard library and has no side effects.
    - The traversal engine never catches these; visitor-raised errors propagate to the
      caller unchanged.

Examples:
    Catch a duplicate registration.

    >>> from marsh.core.descriptor import DescriptorBuilder
    >>> from marsh.core.errors import DescriptorError
    >>> from marsh.core.rules import INT
    >>> b = DescriptorBuilder(object).field("x", INT)
    >>> try:
    ...     b.field("x", INT)
    ... except DescriptorError as e:
    ...     msg = str(e)
    >>> "duplicate" in msg
    True
"""

from __future__ import annotations

__all__ = [
    "MarshError",
    "DescriptorError",
    "UnregisteredTypeError",
    "ShapeError",
]


class MarshError(Exception):
    """Base class for every error raised by marsh."""


class DescriptorError(MarshError, ValueError):
    """Descriptor registration contract violation (duplicate name, bad annotation, ...)."""


class UnregisteredTypeError(DescriptorError):
    """A descriptor was requested for a type with no registration and no reflectable fields."""


class ShapeError(MarshError, ValueError):
    """Shape-level failure (unknown shape name, unexpected shape for the operation)."""
