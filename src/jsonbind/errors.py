# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Exceptions raised by the jsonbind conversion engines."""

from __future__ import annotations


class JsonBindError(Exception):
    """Base class for every error raised by jsonbind."""


class DecodeError(JsonBindError, ValueError):
    """Raised when a value tree cannot be converted into the requested type."""

    def __init__(self, message: str, *, path: str = "$") -> None:
        """Record the failure ``message`` together with the JSON ``path`` it occurred at.

        Args:
            message: Human readable description of the failure.
            path: JSON-path style location of the offending node.
        """

        super().__init__(f"{path}: {message}")
        self.message = message
        self.path = path


class ShapeMismatchError(DecodeError):
    """Raised when a node's kind does not match what the target requires."""


class UnconvertiblePrimitiveError(DecodeError):
    """Raised when a scalar cannot be represented by the target primitive or enum."""


class UnresolvableTypeError(DecodeError):
    """Raised when a type tag or creator result cannot be mapped to a usable type."""


class UnconstructibleTypeError(DecodeError):
    """Raised when the declared type cannot be default constructed."""


class MaxDepthExceededError(DecodeError):
    """Raised when the value tree nests deeper than the configured limit."""


class EncodeError(JsonBindError, TypeError):
    """Raised when an object graph contains a value with no JSON representation."""


class ConfigurationError(JsonBindError, ValueError):
    """Raised when the engine is configured incorrectly."""


class MissingDiscriminatorError(ConfigurationError):
    """Raised when a named creator is registered without a discriminator name."""


class UnsupportedTypeError(ConfigurationError, TypeError):
    """Raised when an annotation cannot be mapped onto a value tree shape."""


__all__ = [
    "ConfigurationError",
    "DecodeError",
    "EncodeError",
    "JsonBindError",
    "MaxDepthExceededError",
    "MissingDiscriminatorError",
    "ShapeMismatchError",
    "UnconstructibleTypeError",
    "UnconvertiblePrimitiveError",
    "UnresolvableTypeError",
    "UnsupportedTypeError",
]
