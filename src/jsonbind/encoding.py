# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Encode engine: typed object graph to value tree and JSON text."""

from __future__ import annotations

from enum import Enum
from typing import Any

from .descriptors import ANY_SHAPE, ShapeKind, TypeShape, describe, is_composite_value, shape_of
from .errors import EncodeError
from .options import EncodeOptions
from .primitives import primitive_to_value
from .tagging import type_name
from .values import JsonMap, JsonValue, render


class Serializer:
    """Walk object graphs and produce value trees mirroring the decoder's rules.

    ``None`` fields are omitted rather than written as null, enums are written
    by member name, and in tagging mode every composite whose class the static
    type does not pin down carries a type identity tag as its first key.
    """

    def __init__(self, options: EncodeOptions | None = None) -> None:
        """Bind the encode ``options`` used by this serializer."""

        self.options = options or EncodeOptions()

    def serialize(self, obj: object, static_type: object = None) -> str:
        """Encode ``obj`` and render it as JSON text.

        Args:
            obj: Value to encode.
            static_type: Declared type of ``obj``; see :meth:`to_value`.

        Returns:
            str: JSON text, indented when ``pretty`` is set.
        """

        tree = self.to_value(obj, static_type)
        return render(tree, pretty=self.options.pretty, indent=self.options.indent)

    def to_value(self, obj: object, static_type: object = None) -> JsonValue:
        """Encode ``obj`` into a value tree.

        Without ``static_type`` a composite root is treated as exactly its own
        class (never tagged) while elements of a root container are treated as
        dynamically typed.

        Args:
            obj: Value to encode.
            static_type: Declared type of ``obj``, e.g. ``list[Animal]``.

        Returns:
            JsonValue: Value tree.

        Raises:
            EncodeError: If the graph holds a value with no JSON representation.
        """

        if static_type is not None:
            shape = shape_of(static_type)
        elif is_composite_value(obj):
            shape = shape_of(type(obj))
        else:
            shape = ANY_SHAPE
        try:
            return self._encode(obj, shape, "$", 0)
        except RecursionError as exc:
            raise EncodeError("$: nesting exceeds the interpreter recursion limit (is the graph cyclic?)") from exc

    def _encode(self, value: object, shape: TypeShape, path: str, depth: int) -> JsonValue:
        if depth > self.options.max_depth:
            raise EncodeError(f"{path}: nesting exceeds {self.options.max_depth} levels (is the graph cyclic?)")
        if value is None:
            return None
        if shape.kind is ShapeKind.PRIMITIVE and shape.primitive is not None:
            return primitive_to_value(shape.primitive, value, path=path)
        if isinstance(value, Enum):
            return value.name
        if isinstance(value, (str, int, float, bool)):
            return value
        if isinstance(value, dict):
            element = shape.element if shape.kind is ShapeKind.MAPPING and shape.element else ANY_SHAPE
            return {
                _encode_key(key, path): self._encode(item, element, f"{path}.{key}", depth + 1)
                for key, item in value.items()
            }
        if isinstance(value, (list, tuple)):
            element = shape.element if shape.kind is ShapeKind.SEQUENCE and shape.element else ANY_SHAPE
            return [self._encode(item, element, f"{path}[{index}]", depth + 1) for index, item in enumerate(value)]
        if is_composite_value(value):
            return self._encode_object(value, shape, path, depth)
        raise EncodeError(f"{path}: cannot encode {type(value).__name__}")

    def _encode_object(self, value: object, shape: TypeShape, path: str, depth: int) -> JsonMap:
        cls = type(value)
        encoded: JsonMap = {}
        if self.options.tag_types and not (shape.kind is ShapeKind.COMPOSITE and shape.target is cls):
            encoded[self.options.type_key] = type_name(cls)
        for field in describe(cls).visible_fields(include_private=self.options.include_private):
            item = field.get(value)
            if item is None:
                continue
            encoded[field.key] = self._encode(item, field.shape, f"{path}.{field.key}", depth + 1)
        return encoded


def _encode_key(key: object, path: str) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, int) and not isinstance(key, bool):
        return str(key)
    raise EncodeError(f"{path}: map key {key!r} is neither str nor int")


def encode(obj: object, static_type: object = None, **overrides: Any) -> str:
    """Encode ``obj`` as JSON text with a throwaway :class:`Serializer`.

    Args:
        obj: Value to encode.
        static_type: Declared type of ``obj``.
        **overrides: Fields of :class:`EncodeOptions`.

    Returns:
        str: JSON text.
    """

    return Serializer(EncodeOptions(**overrides)).serialize(obj, static_type)


def to_value(obj: object, static_type: object = None, **overrides: Any) -> JsonValue:
    """Encode ``obj`` into a value tree with a throwaway :class:`Serializer`."""

    return Serializer(EncodeOptions(**overrides)).to_value(obj, static_type)


__all__ = ["Serializer", "encode", "to_value"]
