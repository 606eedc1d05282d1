# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from jsonbind import CreatorRegistry, Deserializer

from tests.models import FruitCreator, MessageDataCreator, build_command_creator


@pytest.fixture
def registry() -> CreatorRegistry:
    """Return a registry holding every creator used by the example payloads."""
    registry = CreatorRegistry()
    registry.register_creator(FruitCreator())
    registry.register_creator(MessageDataCreator())
    registry.register_creator(build_command_creator())
    return registry


@pytest.fixture
def deserializer(registry: CreatorRegistry) -> Deserializer:
    """Return a deserializer bound to :func:`registry`."""
    return Deserializer(registry)
