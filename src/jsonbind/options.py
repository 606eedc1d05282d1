# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Option models shared by the decode and encode engines."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .tagging import DEFAULT_TYPE_KEY

DEFAULT_MAX_DEPTH = 200


class _EngineOptions(BaseModel):
    """Settings that must agree between a paired encoder and decoder."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    include_private: bool = False
    type_key: str = Field(default=DEFAULT_TYPE_KEY, min_length=1)
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1)


class DecodeOptions(_EngineOptions):
    """Configure a :class:`~jsonbind.decoding.Deserializer`.

    Attributes:
        include_private: Also populate underscore-prefixed fields.
        type_key: Map key carrying a type identity tag.
        max_depth: Deepest nesting accepted before decoding aborts.
        allow_type_import: Let the type resolver import modules named by tags
            on dynamically typed fields.
    """

    allow_type_import: bool = False


class EncodeOptions(_EngineOptions):
    """Configure a :class:`~jsonbind.encoding.Serializer`.

    Attributes:
        pretty: Indent the rendered text; the value tree is unaffected.
        indent: Spaces per nesting level in pretty mode.
        tag_types: Embed type identity tags for values whose class the
            static type does not already determine.
    """

    pretty: bool = False
    indent: int = Field(default=2, ge=0)
    tag_types: bool = False


__all__ = ["DEFAULT_MAX_DEPTH", "DecodeOptions", "EncodeOptions"]
