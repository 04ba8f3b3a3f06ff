"""
Annotation-driven field registration for dataclasses and pydantic models.

Maps Python type annotations onto shape rules so that plain dataclasses and
pydantic v2 models can be traversed without a hand-written builder.

Annotation mapping
| Annotation                       | Rule
|----------------------------------|-----------------------------
| bool / int / float / str         | BOOL / INT / FLOAT / TEXT
| Annotated[str, Capacity(n)]      | FixedText(n)
| list[X]                          | SeqOf(rule(X))
| dict[str, X]                     | MapOf(rule(X))
| X | None, Optional[X]            | Nullable(rule(X))
| Box[X]                           | Ref(rule(X))
| describable class                | Obj(class)

Notes:
    - Field order is declaration order (dataclasses.fields / model_fields).
    - Dataclasses are constructed with ``cls(...)`` and pydantic models with
      ``model_construct(...)`` (defaults apply, no validation). Fields without a
      default receive their rule default as a placeholder.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any, Union, get_args, get_origin

from .errors import DescriptorError
from .rules import BOOL, FLOAT, INT, TEXT, Box, FixedText, MapOf, Nullable, Obj, Ref, Rule, SeqOf

if TYPE_CHECKING:
    from .descriptor import DescriptorBuilder
    from .registry import Registry

__all__ = [
    "Capacity",
    "rule_for",
    "describe_dataclass",
    "describe_model",
]

_PRIMITIVES: dict[Any, Rule] = {bool: BOOL, int: INT, float: FLOAT, str: TEXT}


@dataclass(frozen=True)
class Capacity:
    """Annotated marker bounding a str field: ``Annotated[str, Capacity(16)]``."""

    size: int


def _capacity(metadata: typing.Iterable[Any]) -> Capacity | None:
    for item in metadata:
        if isinstance(item, Capacity):
            return item
    return None


def rule_for(annotation: Any, registry: Registry) -> Rule:
    """
    Resolve a type annotation to a shape rule.

    Args:
        annotation (Any): Evaluated annotation (not a string).
        registry (Registry): Registry deciding which classes are describable.

    Returns:
        Rule: The declared shape rule.

    Raises:
        DescriptorError: If the annotation has no rule (e.g. set[int], dict[int, X]).
    """
    origin = get_origin(annotation)

    if origin is Annotated:
        base, *meta = get_args(annotation)
        cap = _capacity(meta)
        if cap is not None:
            if base is not str:
                raise DescriptorError(f"Capacity applies to str only, got {base!r}")
            return FixedText(cap.size)
        return rule_for(base, registry)

    if isinstance(annotation, type) and annotation in _PRIMITIVES:
        return _PRIMITIVES[annotation]

    if origin is list:
        (elem,) = get_args(annotation) or (Any,)
        return SeqOf(rule_for(elem, registry))

    if origin is dict:
        key, value = get_args(annotation) or (Any, Any)
        if key is not str:
            raise DescriptorError(f"map keys must be str, got {key!r}")
        return MapOf(rule_for(value, registry))

    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) != 1 or len(args) == len(get_args(annotation)):
            raise DescriptorError(f"only X | None unions are supported, got {annotation!r}")
        return Nullable(rule_for(args[0], registry))

    if origin is Box:
        (target,) = get_args(annotation)
        return Ref(rule_for(target, registry))

    if registry.can_describe(annotation):
        return Obj(annotation)

    raise DescriptorError(f"no shape rule for annotation {annotation!r}")


def describe_dataclass(builder: DescriptorBuilder, registry: Registry) -> None:
    """Register every dataclass field of builder.type in declaration order."""
    cls = builder.type
    hints = typing.get_type_hints(cls, include_extras=True)
    required: list[tuple[str, Rule]] = []
    for f in dataclasses.fields(cls):
        rule = rule_for(hints[f.name], registry)
        builder.field(f.name, rule)
        if f.init and f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            required.append((f.name, rule))

    def factory() -> Any:
        return cls(**{name: rule.default(registry) for name, rule in required})

    builder.factory(factory)


def describe_model(builder: DescriptorBuilder, registry: Registry) -> None:
    """
    Register every pydantic model field of builder.type in declaration order.

    Notes:
        Required fields get their rule default (0, "", [], a nested default model, ...)
        as a placeholder in the factory, so freshly allocated list items, map entries
        and Box targets can be read before input overwrites them.
    """
    cls = builder.type
    required: list[tuple[str, Rule]] = []
    for name, info in cls.model_fields.items():
        cap = _capacity(info.metadata)
        if cap is not None and info.annotation is str:
            rule: Rule = FixedText(cap.size)
        else:
            rule = rule_for(info.annotation, registry)
        builder.field(name, rule)
        if info.is_required():
            required.append((name, rule))

    def factory() -> Any:
        return cls.model_construct(**{name: rule.default(registry) for name, rule in required})

    builder.factory(factory)
