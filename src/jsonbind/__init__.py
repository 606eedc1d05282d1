# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Bind JSON value trees to dataclasses, pydantic models, and annotated classes."""

from __future__ import annotations

from .creators import CreatorFactory, CreatorRegistry, CustomCreator, NamedCreator
from .decoding import Deserializer, decode
from .descriptors import FieldDescriptor, ShapeKind, TypeDescriptor, TypeShape, describe, shape_of
from .encoding import Serializer, encode, to_value
from .errors import (
    ConfigurationError,
    DecodeError,
    EncodeError,
    JsonBindError,
    MaxDepthExceededError,
    MissingDiscriminatorError,
    ShapeMismatchError,
    UnconstructibleTypeError,
    UnconvertiblePrimitiveError,
    UnresolvableTypeError,
    UnsupportedTypeError,
)
from .options import DecodeOptions, EncodeOptions
from .primitives import Char, Float32, Float64, Int8, Int16, Int32, Int64, UInt8, UInt16, UInt32, UInt64
from .tagging import DEFAULT_TYPE_KEY, TypeResolver, resolve_type_by_name, type_name
from .values import JsonMap, JsonScalar, JsonValue, ValueKind, kind_of, parse, render

__all__ = [
    "Char",
    "ConfigurationError",
    "CreatorFactory",
    "CreatorRegistry",
    "CustomCreator",
    "DEFAULT_TYPE_KEY",
    "DecodeError",
    "DecodeOptions",
    "Deserializer",
    "EncodeError",
    "EncodeOptions",
    "FieldDescriptor",
    "Float32",
    "Float64",
    "Int16",
    "Int32",
    "Int64",
    "Int8",
    "JsonBindError",
    "JsonMap",
    "JsonScalar",
    "JsonValue",
    "MaxDepthExceededError",
    "MissingDiscriminatorError",
    "NamedCreator",
    "Serializer",
    "ShapeKind",
    "ShapeMismatchError",
    "TypeDescriptor",
    "TypeResolver",
    "TypeShape",
    "UInt16",
    "UInt32",
    "UInt64",
    "UInt8",
    "UnconstructibleTypeError",
    "UnconvertiblePrimitiveError",
    "UnresolvableTypeError",
    "UnsupportedTypeError",
    "ValueKind",
    "decode",
    "describe",
    "encode",
    "kind_of",
    "parse",
    "render",
    "resolve_type_by_name",
    "shape_of",
    "to_value",
    "type_name",
]
