"""
Custom exceptions for the marsh.io codecs.

Purpose
- Give codec failures their own types, distinct from core registration errors.
- Keep marsh.core.errors as the source of truth for descriptor/shape contracts.

Boundaries
- CodecError: malformed input, misuse of a reader/writer (e.g. unbalanced
  produce_start/produce_end).
- ShapeMismatchError: the input holds a different shape than the target expects.
  Also a marsh.core.errors.ShapeError so callers can catch either.
- CapacityError: text longer than a fixed-capacity field under the "error" policy.

Notes
- Stdlib-only, no side effects.
"""

from __future__ import annotations

from marsh.core.errors import MarshError, ShapeError

__all__ = [
    "CodecError",
    "ShapeMismatchError",
    "CapacityError",
]


class CodecError(MarshError):
    """
    Base class for codec failures in marsh.io.

    Notes:
        Raised from inside visitor methods; the traversal engine lets it propagate.
    """


class ShapeMismatchError(CodecError, ShapeError):
    """
    Raised when a consuming codec finds a value of the wrong shape.

    Examples:
        - A string where an int field is declared
        - An array where an object is declared
    """


class CapacityError(CodecError):
    """Raised when consumed text does not fit a fixed-capacity field."""
