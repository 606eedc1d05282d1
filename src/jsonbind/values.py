# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Dynamic value tree exchanged with the JSON text parser and printer.

The tree uses plain Python containers: ``dict`` keeps first-insertion order,
so key order survives a parse, any number of decode/encode passes through the
dynamic path, and a final render.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import TypeAlias

from .errors import EncodeError, MaxDepthExceededError, ShapeMismatchError

JsonScalar: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = "JsonScalar | list[JsonValue] | dict[str, JsonValue]"
JsonMap: TypeAlias = "dict[str, JsonValue]"

_COMPACT_SEPARATORS = (",", ":")


class ValueKind(Enum):
    """Discriminant of a value tree node."""

    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAP = "map"


def kind_of(value: object, *, path: str = "$") -> ValueKind:
    """Return the :class:`ValueKind` describing ``value``.

    Args:
        value: Node taken from a value tree.
        path: Location of the node, used in error messages.

    Returns:
        ValueKind: Discriminant of the node.

    Raises:
        ShapeMismatchError: If ``value`` is not a value tree node.
    """

    if value is None:
        return ValueKind.NULL
    # bool is checked before int because it is an int subclass.
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, list):
        return ValueKind.SEQUENCE
    if isinstance(value, dict):
        return ValueKind.MAP
    raise ShapeMismatchError(f"{type(value).__name__} is not a JSON value", path=path)


def parse(text: str | bytes | bytearray) -> JsonValue:
    """Parse JSON ``text`` into a value tree.

    Args:
        text: JSON document.

    Returns:
        JsonValue: Parsed tree with map key order preserved.

    Raises:
        ShapeMismatchError: If ``text`` is not well-formed JSON.
        MaxDepthExceededError: If ``text`` nests beyond the parser recursion limit.
    """

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ShapeMismatchError(f"malformed JSON: {exc}") from exc
    except RecursionError as exc:
        raise MaxDepthExceededError("document nests deeper than the parser allows") from exc


def render(value: JsonValue, *, pretty: bool = False, indent: int = 2) -> str:
    """Render ``value`` as JSON text.

    Args:
        value: Value tree to print.
        pretty: When ``True`` indent nested containers for readability.
        indent: Number of spaces per nesting level in pretty mode.

    Returns:
        str: JSON text. Compact output carries no insignificant whitespace.

    Raises:
        EncodeError: If ``value`` holds NaN or an infinity.
    """

    try:
        if pretty:
            return json.dumps(value, indent=indent, ensure_ascii=False, allow_nan=False)
        return json.dumps(value, separators=_COMPACT_SEPARATORS, ensure_ascii=False, allow_nan=False)
    except ValueError as exc:
        raise EncodeError(f"value has no JSON representation: {exc}") from exc


__all__ = ["JsonMap", "JsonScalar", "JsonValue", "ValueKind", "kind_of", "parse", "render"]
