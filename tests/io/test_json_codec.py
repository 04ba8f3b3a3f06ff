from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Annotated

import pytest
from pydantic import BaseModel, ConfigDict, Field

from marsh.core.reflect import Capacity
from marsh.core.rules import INT, Box, SeqOf
from marsh.io.config import MarshSettings
from marsh.io.errors import CodecError, ShapeMismatchError
from marsh.io.jsonio import from_json, to_json


@dataclass
class Ser1:
    x: int = 0


@dataclass
class Ser2P:
    a: int = 0
    sub: Box[Ser1] = field(default_factory=Box)


@dataclass
class SerVI:
    ints: list[int] = field(default_factory=list)


class Point(BaseModel):
    x: int = 0


class Profile(BaseModel):
    name: str = ""
    age: int = 0
    nick: Annotated[str, Capacity(4)] = ""
    tags: list[str] = Field(default_factory=list)
    best: Point | None = None


def test_single_field_object() -> None:
    assert to_json(Ser1(x=1)) == '{"x":1}'


def test_unknown_field_dropped() -> None:
    assert from_json('{"x": 1, "y": 2}', Ser1) == Ser1(x=1)


def test_absent_reference_renders_null_and_stays_absent() -> None:
    assert to_json(Ser2P(a=3)) == '{"a":3,"sub":null}'
    back = from_json('{"a": 3}', Ser2P)
    assert back == Ser2P(a=3)
    assert not back.sub.present


def test_present_reference_and_sequence() -> None:
    assert to_json(Ser2P(a=3, sub=Box(Ser1(x=1)))) == '{"a":3,"sub":{"x":1}}'
    assert to_json(SerVI(ints=[1, 23, 456])) == '{"ints":[1,23,456]}'
    assert to_json([4, 5], SeqOf(INT)) == "[4,5]"


def test_settings_control_rendering() -> None:
    text = to_json(Ser1(x=1), settings=MarshSettings(json_indent=2))
    assert text == '{\n  "x": 1\n}'
    assert to_json(Profile(name="é"), settings=MarshSettings(ensure_ascii=True)).startswith('{"name":"\\u00e9"')


def test_pydantic_round_trip() -> None:
    original = Profile(name="ada", age=36, nick="ad", tags=["math"], best=Point(x=2))
    text = to_json(original)
    assert json.loads(text) == {
        "name": "ada",
        "age": 36,
        "nick": "ad",
        "tags": ["math"],
        "best": {"x": 2},
    }
    back = from_json(text, Profile)
    assert back.model_dump() == original.model_dump()


def test_pydantic_unknown_and_null_fields() -> None:
    back = from_json('{"name": "b", "best": null, "extra": {"k": [1]}}', Profile)
    assert back.model_dump() == Profile(name="b").model_dump()


def test_invalid_json_raises_codec_error() -> None:
    with pytest.raises(CodecError):
        from_json("{not json", Ser1)


class Part(BaseModel):
    sku: str
    qty: int


class Order(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    lines: list[Part] = Field(default_factory=list)
    by_sku: dict[str, Part] = Field(default_factory=dict)
    primary: Box[Part] = Field(default_factory=Box)


def test_required_field_models_in_containers_and_box() -> None:
    text = (
        '{"lines": [{"sku": "a", "qty": 1}, {"sku": "b", "qty": 2}],'
        ' "by_sku": {"a": {"sku": "a", "qty": 1}},'
        ' "primary": {"sku": "p", "qty": 9}}'
    )
    order = from_json(text, Order)
    assert [p.model_dump() for p in order.lines] == [{"sku": "a", "qty": 1}, {"sku": "b", "qty": 2}]
    assert order.by_sku["a"].model_dump() == {"sku": "a", "qty": 1}
    assert order.primary.present
    assert order.primary.get().model_dump() == {"sku": "p", "qty": 9}


def test_default_box_on_model_starts_empty() -> None:
    order = from_json('{"primary": null}', Order)
    assert not order.primary.present
    assert json.loads(to_json(Order())) == {"lines": [], "by_sku": {}, "primary": None}


def test_huge_integer_in_unknown_field_is_drained() -> None:
    assert from_json('{"x": 1, "y": ' + "9" * 400 + "}", Ser1) == Ser1(x=1)


def test_huge_integer_into_float_field_is_a_shape_mismatch() -> None:
    @dataclass
    class Reading:
        value: float = 0.0

    with pytest.raises(ShapeMismatchError):
        from_json('{"value": ' + "9" * 400 + "}", Reading)
