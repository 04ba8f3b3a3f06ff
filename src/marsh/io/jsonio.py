"""
JSON codec built on the tree codec and the stdlib json module.

to_json produces through TreeWriter and renders with json.dumps; keys are never
sorted, so objects come out in declared field order. from_json parses with
json.loads and consumes through TreeReader.

Examples:
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Point:
    ...     x: int = 0
    >>> to_json(Point(x=1))
    '{"x":1}'
    >>> from_json('{"x": 1, "y": 2}', Point)
    Point(x=1)
"""

from __future__ import annotations

import json
from typing import Any

from marsh.core.registry import Registry
from marsh.core.rules import Rule

from .config import MarshSettings
from .errors import CodecError
from .tree import from_tree, to_tree

__all__ = [
    "to_json",
    "from_json",
]


def to_json(
    value: Any,
    rule: Rule | None = None,
    *,
    settings: MarshSettings | None = None,
    registry: Registry | None = None,
) -> str:
    """
    Serialize value to a JSON string.

    Args:
        value (Any): Root value.
        rule (Rule | None): Declared root shape; Obj(type(value)) if None.
        settings (MarshSettings | None): json_indent and ensure_ascii.
        registry (Registry | None): Descriptor source; the default registry if None.

    Returns:
        str: JSON text, compact unless settings.json_indent is set.
    """
    s = settings or MarshSettings()
    tree = to_tree(value, rule, registry=registry)
    separators = (",", ":") if s.json_indent is None else (",", ": ")
    return json.dumps(tree, ensure_ascii=s.ensure_ascii, indent=s.json_indent, separators=separators)


def from_json(
    text: str | bytes,
    target: Any,
    rule: Rule | None = None,
    *,
    settings: MarshSettings | None = None,
    registry: Registry | None = None,
) -> Any:
    """
    Deserialize JSON text into target.

    Args:
        text (str | bytes): JSON document.
        target (Any): Instance to populate, or a registered type to default-construct.
        rule (Rule | None): Declared root shape; Obj(type(target)) if None.
        settings (MarshSettings | None): Unknown-field and text-overflow policies.
        registry (Registry | None): Descriptor source; the default registry if None.

    Returns:
        Any: The populated root value.

    Raises:
        CodecError: If text is not valid JSON.
        ShapeMismatchError: If the document's shapes do not match the target's.
    """
    try:
        tree = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CodecError(f"invalid JSON: {exc}") from exc
    return from_tree(tree, target, rule, settings=settings, registry=registry)
