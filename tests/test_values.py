# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the value tree helpers."""

from __future__ import annotations

import pytest

from jsonbind import EncodeError, ShapeMismatchError, ValueKind, kind_of, parse, render


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ValueKind.NULL),
        (True, ValueKind.BOOL),
        (0, ValueKind.NUMBER),
        (1.5, ValueKind.NUMBER),
        ("x", ValueKind.STRING),
        ([], ValueKind.SEQUENCE),
        ({}, ValueKind.MAP),
    ],
)
def test_kind_of_classifies_nodes(value: object, expected: ValueKind) -> None:
    assert kind_of(value) is expected


def test_kind_of_rejects_foreign_objects() -> None:
    with pytest.raises(ShapeMismatchError) as excinfo:
        kind_of(object(), path="$.x")
    assert excinfo.value.path == "$.x"


def test_parse_preserves_key_order() -> None:
    tree = parse('{"z":1,"a":2,"m":{"y":0,"b":1}}')
    assert list(tree) == ["z", "a", "m"]
    assert list(tree["m"]) == ["y", "b"]


def test_parse_reports_malformed_text() -> None:
    with pytest.raises(ShapeMismatchError):
        parse('{"a":')


def test_render_compact_has_no_whitespace() -> None:
    assert render({"a": [1, 2], "b": None}) == '{"a":[1,2],"b":null}'


def test_render_pretty_indents() -> None:
    text = render({"a": 1}, pretty=True, indent=4)
    assert text == '{\n    "a": 1\n}'


def test_render_keeps_non_ascii() -> None:
    assert render("héllo") == '"héllo"'


def test_render_rejects_non_finite_numbers() -> None:
    with pytest.raises(EncodeError):
        render([float("nan")])
    with pytest.raises(EncodeError):
        render({"x": float("inf")}, pretty=True)
