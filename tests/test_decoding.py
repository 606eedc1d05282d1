# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the decode engine."""

from __future__ import annotations

import logging
import sys

import pytest

from jsonbind import (
    ConfigurationError,
    CreatorRegistry,
    DecodeError,
    DecodeOptions,
    Deserializer,
    MaxDepthExceededError,
    ShapeMismatchError,
    TypeResolver,
    UnconstructibleTypeError,
    UnconvertiblePrimitiveError,
    UnresolvableTypeError,
    decode,
    type_name,
)
from jsonbind.options import DEFAULT_MAX_DEPTH
from jsonbind.primitives import to_single
from tests.models import (
    Account,
    Animal,
    Apple,
    Bar,
    Car,
    CarType,
    Cat,
    Dog,
    Drawing,
    Foo,
    FooDict,
    Fruit,
    Holder,
    Message,
    MessageDataKeyDown,
    MessageDataMouseMove,
    MessageDie,
    MessageSetColor,
    MessageToClient,
    Mixed,
    Moo,
    NeedsArguments,
    Node,
    Primitives,
    PrivateFields,
    Raspberry,
    Vector2,
)


def test_decode_nested_composites() -> None:
    foo = decode(Foo, '{"x":1,"y":2,"g":[{"z":3,"a":4}],"b":[[1,2],[3]]}')
    assert foo == Foo(x=1, y=2, g=[Bar(z=3, a=4)], b=[[1, 2], [3]])


def test_absent_keys_keep_defaults() -> None:
    moo = decode(Moo, '{"b":[5]}')
    assert moo.a is None
    assert moo.b == [5]
    assert moo.c is None


def test_unknown_keys_are_ignored_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="jsonbind.decoding"):
        bar = decode(Bar, '{"z":1,"extra":true}')
    assert bar == Bar(z=1)
    assert "extra" in caplog.text


def test_null_into_nullable_and_composite_fields() -> None:
    moo = decode(Moo, '{"a":null,"c":null}')
    assert moo.a is None
    assert moo.c is None


def test_null_into_non_nullable_primitive_is_rejected() -> None:
    with pytest.raises(ShapeMismatchError) as excinfo:
        decode(Bar, '{"z":null}')
    assert excinfo.value.path == "$.z"


def test_root_containers() -> None:
    assert decode(list[Bar], '[{"z":1},{"a":2}]') == [Bar(z=1), Bar(a=2)]
    assert decode(dict[str, int], '{"b":1,"a":2}') == {"b": 1, "a": 2}
    assert decode(tuple[int, ...], "[1,2]") == (1, 2)


def test_int_keyed_mapping() -> None:
    value = decode(FooDict, '{"g":{"k":{"z":1}},"h":{"7":{"a":2}}}')
    assert value.g == {"k": Bar(z=1)}
    assert value.h == {7: Bar(a=2)}


def test_bad_int_key_reports_path() -> None:
    with pytest.raises(UnconvertiblePrimitiveError) as excinfo:
        decode(FooDict, '{"h":{"seven":{}}}')
    assert excinfo.value.path == "$.h.seven"


def test_primitives() -> None:
    text = (
        '{"some_boolean":false,"some_byte":200,"some_sbyte":-100,"some_int16":-300,'
        '"some_uint16":300,"some_int32":-70000,"some_uint32":70000,"some_int64":-5000000000,'
        '"some_uint64":5000000000,"some_char":"z","some_double":9.5,"some_single":1.2,"some_int":7}'
    )
    value = decode(Primitives, text)
    assert value.some_boolean is False
    assert value.some_byte == 200
    assert value.some_sbyte == -100
    assert value.some_int64 == -5000000000
    assert value.some_char == "z"
    assert value.some_single == to_single(1.2)


def test_out_of_range_primitive_is_unconvertible() -> None:
    with pytest.raises(UnconvertiblePrimitiveError) as excinfo:
        decode(Primitives, '{"some_byte":256}')
    assert excinfo.value.path == "$.some_byte"


def test_enum_by_member_name() -> None:
    assert decode(Car, '{"type":"Chevy"}').type is CarType.Chevy
    with pytest.raises(UnconvertiblePrimitiveError):
        decode(Car, '{"type":"chevy"}')
    with pytest.raises(ShapeMismatchError):
        decode(Car, '{"type":1}')


def test_shape_mismatches() -> None:
    with pytest.raises(ShapeMismatchError):
        decode(Foo, "[1,2]")
    with pytest.raises(ShapeMismatchError) as excinfo:
        decode(Foo, '{"g":{"z":1}}')
    assert excinfo.value.path == "$.g"


def test_frozen_dataclass_is_populated() -> None:
    vector = decode(Vector2, '{"x":1.5,"y":-2}')
    assert vector == Vector2(x=1.5, y=-2.0)


def test_creator_reads_own_map(deserializer: Deserializer) -> None:
    fruits = deserializer.deserialize(list[Fruit], '[{"fruit_type":0,"height":1.5},{"fruit_type":1,"num_bulbs":9}]')
    assert isinstance(fruits[0], Apple)
    assert fruits[0].height == 1.5
    assert isinstance(fruits[1], Raspberry)
    assert fruits[1].num_bulbs == 9


def test_creator_returning_none_falls_back_to_declared_type(deserializer: Deserializer) -> None:
    fruit = deserializer.deserialize(Fruit, '{"fruit_type":5}')
    assert type(fruit) is Fruit
    assert fruit.fruit_type == 5


def test_creator_reads_parent_map(deserializer: Deserializer) -> None:
    moved = deserializer.deserialize(Message, '{"msg_type":"mouseMove","data":{"x":3,"y":4}}')
    pressed = deserializer.deserialize(Message, '{"msg_type":"keyDown","data":{"key_code":13}}')
    assert moved.data == MessageDataMouseMove(x=3, y=4)
    assert pressed.data == MessageDataKeyDown(key_code=13)


def test_named_creator_uses_enclosing_cmd(deserializer: Deserializer) -> None:
    text = '{"cmd":"update","id":123,"data":{"cmd":"setColor","data":{"color":"red","style":"bold"}}}'
    message = deserializer.deserialize(MessageToClient, text)
    assert message.id == 123
    assert message.data is not None
    assert message.data.cmd == "setColor"
    assert message.data.data == MessageSetColor(color="red", style="bold")

    die = deserializer.deserialize(MessageToClient, '{"data":{"cmd":"die","data":{"killer":"bob","crash":true}}}')
    assert die.data is not None
    assert die.data.data == MessageDie(killer="bob", crash=True)


def test_registries_are_isolated(deserializer: Deserializer) -> None:
    bare = Deserializer()
    fruit = bare.deserialize(Fruit, '{"fruit_type":0}')
    assert type(fruit) is Fruit
    assert isinstance(deserializer.deserialize(Fruit, '{"fruit_type":0}'), Apple)


def test_creator_with_wrong_type_is_rejected() -> None:
    registry = CreatorRegistry()
    registry.register(Bar, lambda src, parent: Foo())
    with pytest.raises(UnresolvableTypeError):
        Deserializer(registry).deserialize(Bar, "{}")


def test_type_tag_selects_subclass() -> None:
    text = f'[{{"$type":"{type_name(Dog)}","barkiness":3}},{{"$type":"{type_name(Cat)}","stealthiness":"high"}}]'
    animals = decode(list[Animal], text)
    assert animals == [Dog(barkiness=3), Cat(stealthiness="high")]


def test_type_tag_must_name_a_subtype() -> None:
    with pytest.raises(UnresolvableTypeError):
        decode(Dog, f'{{"$type":"{type_name(Cat)}"}}')
    with pytest.raises(UnresolvableTypeError):
        decode(Animal, '{"$type":"no.such.Type"}')
    with pytest.raises(ShapeMismatchError):
        decode(Animal, '{"$type":7}')


def test_dynamic_fields() -> None:
    text = (
        f'{{"payload":{{"n":[1,"two",null]}},"pet":{{"$type":"{type_name(Cat)}","stealthiness":"x"}},'
        f'"pets":[{{"$type":"{type_name(Dog)}","barkiness":1}}]}}'
    )
    holder = decode(Holder, text)
    assert holder.payload == {"n": [1, "two", None]}
    assert holder.pet == Cat(stealthiness="x")
    assert holder.pets == (Dog(barkiness=1),)


def test_dynamic_union_rejects_foreign_tag() -> None:
    with pytest.raises(UnresolvableTypeError):
        decode(Holder, f'{{"pet":{{"$type":"{type_name(Bar)}"}}}}')


def test_unconstructible_targets() -> None:
    with pytest.raises(UnconstructibleTypeError):
        decode(NeedsArguments, '{"value":1}')
    with pytest.raises(UnconstructibleTypeError) as excinfo:
        decode(Drawing, '{"shape":{}}')
    assert excinfo.value.path == "$.shape"


def test_private_fields_need_opt_in() -> None:
    hidden = decode(PrivateFields, '{"_num":4,"_text":"t"}')
    assert (hidden.num, hidden.text) == (0, None)
    shown = decode(PrivateFields, '{"_num":4,"_text":"t"}', include_private=True)
    assert (shown.num, shown.text) == (4, "t")


def test_max_depth() -> None:
    text = '{"child":{"child":{"child":{"name":"deep"}}}}'
    assert decode(Node, text, max_depth=8).child.child.child.name == "deep"
    with pytest.raises(MaxDepthExceededError):
        decode(Node, text, max_depth=2)


def test_pydantic_model_target() -> None:
    account = decode(Account, '{"name":"a","displayName":"Alice","balance":1.5,"tags":["x","y"]}')
    assert isinstance(account, Account)
    assert account.name == "a"
    assert account.display == "Alice"
    assert account.balance == 1.5
    assert account.tags == ["x", "y"]


def test_decode_accepts_value_trees() -> None:
    assert decode(Bar, {"z": 2}) == Bar(z=2)


def test_decode_errors_are_value_errors() -> None:
    with pytest.raises(ValueError):
        decode(Bar, "not json")
    assert issubclass(MaxDepthExceededError, DecodeError)


def test_untagged_values_must_fit_a_union_member() -> None:
    for text in ('{"pet":{"stealthiness":"x"}}', '{"pet":[1,2]}', '{"pet":5}'):
        with pytest.raises(ShapeMismatchError) as excinfo:
            decode(Holder, text)
        assert excinfo.value.path == "$.pet"
    assert decode(Holder, '{"pet":null}').pet is None


def test_union_members_are_tried_by_value_kind() -> None:
    assert decode(Mixed, '{"value":5}').value == 5
    assert decode(Mixed, '{"value":"five"}').value == "five"
    assert decode(Mixed, '{"pet_or_ids":{"barkiness":2}}').pet_or_ids == Dog(barkiness=2)
    assert decode(Mixed, '{"pet_or_ids":[1,2]}').pet_or_ids == [1, 2]
    for text in ('{"value":1.5}', '{"value":true}', '{"pet_or_ids":"a"}', '{"pet_or_ids":["a"]}', '{"required":null}'):
        with pytest.raises(ShapeMismatchError):
            decode(Mixed, text)


def test_default_depth_limit_fires_before_the_interpreter_limit() -> None:
    depth = DEFAULT_MAX_DEPTH + 100
    with pytest.raises(MaxDepthExceededError):
        decode(object, "[" * depth + "]" * depth)
    with pytest.raises(MaxDepthExceededError):
        decode(Node, '{"child":' * depth + "{}" + "}" * depth)


def test_interpreter_recursion_limit_is_reported_as_depth_error() -> None:
    tree: list[object] = []
    for _ in range(20000):
        tree = [tree]
    with pytest.raises(MaxDepthExceededError):
        decode(object, tree, max_depth=100000)


def test_tags_on_static_targets_never_import(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delitem(sys.modules, "tabnanny", raising=False)
    with pytest.raises(UnresolvableTypeError):
        decode(Dog, '{"$type":"tabnanny.NannyNag"}', allow_type_import=True)
    with pytest.raises(UnresolvableTypeError):
        decode(Holder, '{"payload":{"$type":"tabnanny.NannyNag"}}')
    assert "tabnanny" not in sys.modules


def test_explicit_resolver_must_agree_with_options() -> None:
    with pytest.raises(ConfigurationError):
        Deserializer(options=DecodeOptions(allow_type_import=True), resolver=TypeResolver())
    importing = TypeResolver(allow_import=True)
    assert Deserializer(resolver=importing).resolver is importing
