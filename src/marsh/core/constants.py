"""
Core defaults consumed by the traversal engine and the IO codecs.

Notes:
    - marsh.io.config.MarshSettings sources its defaults from here.
    - Zero-IO, stdlib only.
"""

from __future__ import annotations

__all__ = [
    "UNKNOWN_FIELDS",
    "UNKNOWN_FIELD_POLICIES",
    "TEXT_OVERFLOW",
    "TEXT_OVERFLOW_POLICIES",
    "JSON_INDENT",
    "ENSURE_ASCII",
]

# What the traversal does with incoming fields the target type does not declare.
UNKNOWN_FIELDS: str = "ignore"
UNKNOWN_FIELD_POLICIES: frozenset[str] = frozenset({"ignore", "log"})

# What a consuming codec does when text exceeds a fixed-capacity buffer.
TEXT_OVERFLOW: str = "error"
TEXT_OVERFLOW_POLICIES: frozenset[str] = frozenset({"error", "truncate"})

# JSON rendering; None means compact output.
JSON_INDENT: int | None = None
ENSURE_ASCII: bool = False
