from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Optional

import pytest
from pydantic import BaseModel, Field

from marsh.core.errors import DescriptorError
from marsh.core.reflect import Capacity, rule_for
from marsh.core.registry import Registry
from marsh.core.rules import (
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
    SeqOf,
)


@dataclass
class Sub:
    x: int = 0


@dataclass
class Everything:
    flag: bool = False
    count: int = 0
    ratio: float = 0.0
    name: str = ""
    code: Annotated[str, Capacity(4)] = ""
    tags: list[str] = field(default_factory=list)
    scores: dict[str, float] = field(default_factory=dict)
    sub: Sub = field(default_factory=Sub)
    owned: Box[Sub] = field(default_factory=Box)
    maybe: Optional[Sub] = None
    note: str | None = None


class Point(BaseModel):
    x: int = 0


class Profile(BaseModel):
    name: str = ""
    nick: Annotated[str, Capacity(4)] = ""
    tags: list[str] = Field(default_factory=list)
    best: Point | None = None


def test_rule_for_primitives_and_containers() -> None:
    reg = Registry()
    assert rule_for(bool, reg) is BOOL
    assert rule_for(int, reg) is INT
    assert rule_for(float, reg) is FLOAT
    assert rule_for(str, reg) is TEXT
    assert rule_for(list[int], reg) == SeqOf(INT)
    assert rule_for(dict[str, list[float]], reg) == MapOf(SeqOf(FLOAT))
    assert rule_for(Box[Sub], reg) == Ref(Obj(Sub))
    assert rule_for(Optional[int], reg) == Nullable(INT)
    assert rule_for(Annotated[str, Capacity(8)], reg) == FixedText(8)


@pytest.mark.parametrize(
    "annotation",
    [dict[int, str], set[int], int | str | None, Annotated[int, Capacity(2)], object],
)
def test_rule_for_rejects_unsupported(annotation) -> None:
    with pytest.raises(DescriptorError):
        rule_for(annotation, Registry())


def test_fixed_text_capacity_must_be_positive() -> None:
    with pytest.raises(DescriptorError):
        FixedText(0)


def test_dataclass_reflection_in_declared_order() -> None:
    desc = Registry().get_descriptor(Everything)
    assert desc.names() == (
        "flag",
        "count",
        "ratio",
        "name",
        "code",
        "tags",
        "scores",
        "sub",
        "owned",
        "maybe",
        "note",
    )
    assert desc.field_by_name("code").rule == FixedText(4)
    assert desc.field_by_name("owned").rule == Ref(Obj(Sub))
    assert desc.field_by_name("maybe").rule == Nullable(Obj(Sub))
    assert desc.field_by_name("note").rule == Nullable(TEXT)


def test_pydantic_model_reflection() -> None:
    reg = Registry()
    desc = reg.get_descriptor(Profile)
    assert desc.names() == ("name", "nick", "tags", "best")
    assert desc.field_by_name("nick").rule == FixedText(4)
    assert desc.field_by_name("best").rule == Nullable(Obj(Point))
    fresh = desc.new()
    assert isinstance(fresh, Profile)
    assert fresh.tags == [] and fresh.best is None


@dataclass
class NeedsValues:
    x: int
    tags: list[str]
    sub: Sub
    note: str | None


class Part(BaseModel):
    sku: str
    qty: int
    at: Point


def test_required_dataclass_fields_get_rule_defaults() -> None:
    fresh = Registry().get_descriptor(NeedsValues).new()
    assert fresh == NeedsValues(x=0, tags=[], sub=Sub(), note=None)


def test_required_model_fields_get_rule_defaults() -> None:
    fresh = Registry().get_descriptor(Part).new()
    assert (fresh.sku, fresh.qty) == ("", 0)
    assert fresh.at.x == 0
