# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Creator registry used to pick concrete classes for base-typed targets.

A creator receives the map being decoded and the map of its enclosing node
and returns an instance of a concrete subclass, or ``None`` to let the
decoder construct the declared type. Registries are plain objects passed to
a :class:`~jsonbind.decoding.Deserializer`; sharing one between threads is
safe only while nobody mutates it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Literal, TypeAlias, TypeVar

from .errors import ConfigurationError, MissingDiscriminatorError
from .values import JsonMap

LOGGER = logging.getLogger(__name__)

CreatorFactory: TypeAlias = "Callable[[JsonMap, JsonMap | None], object | None]"
VariantFactory: TypeAlias = Callable[[], object]

ClassT = TypeVar("ClassT", bound=type)


class CustomCreator(ABC):
    """Base class for creators that know which base type they build."""

    @abstractmethod
    def create(self, src: JsonMap, parent_src: JsonMap | None) -> object | None:
        """Return a concrete instance for ``src`` or ``None`` for no opinion.

        Args:
            src: Fields of the object about to be created.
            parent_src: Fields of the enclosing object, ``None`` at the root.

        Returns:
            object | None: Instance of a subclass of :meth:`type_to_create`.
        """

    @abstractmethod
    def type_to_create(self) -> type:
        """Return the base type this creator is registered for."""

    def __call__(self, src: JsonMap, parent_src: JsonMap | None) -> object | None:
        """Delegate to :meth:`create` so creators satisfy :data:`CreatorFactory`."""

        return self.create(src, parent_src)


class CreatorRegistry:
    """Map target types to creator factories."""

    def __init__(self) -> None:
        """Initialise an empty registry."""

        self._factories: dict[type, CreatorFactory] = {}

    def register(self, target: type, factory: CreatorFactory) -> None:
        """Register ``factory`` for ``target``; a later registration replaces an earlier one.

        Args:
            target: Declared (usually base) type the factory builds.
            factory: Callable invoked with ``(src, parent_src)``.
        """

        if target in self._factories:
            LOGGER.debug("replacing creator for %s", target.__qualname__)
        self._factories[target] = factory

    def register_creator(self, creator: CustomCreator) -> None:
        """Register ``creator`` under the type reported by :meth:`CustomCreator.type_to_create`."""

        self.register(creator.type_to_create(), creator)

    def get(self, target: type) -> CreatorFactory | None:
        """Return the factory registered for ``target`` or ``None``."""

        return self._factories.get(target)

    def copy(self) -> CreatorRegistry:
        """Return an independent registry holding the same registrations."""

        clone = CreatorRegistry()
        clone._factories.update(self._factories)
        return clone

    def __contains__(self, target: type) -> bool:
        """Return whether a factory is registered for ``target``."""

        return target in self._factories

    def __len__(self) -> int:
        """Return the number of registered factories."""

        return len(self._factories)

    def __repr__(self) -> str:
        """Return a developer-facing representation listing registered types."""

        names = ", ".join(sorted(target.__qualname__ for target in self._factories))
        return f"CreatorRegistry(types=[{names}])"


class NamedCreator(CustomCreator):
    """Choose a concrete class from a discriminator string.

    The discriminator is read from the enclosing node (``source="parent"``) or
    from the node itself (``source="self"``) and mapped to a zero-argument
    factory registered up front::

        creator = NamedCreator(MessageCmdData, discriminator="cmd")
        creator.register_type(MessageSetColor, "setColor")
        registry.register_creator(creator)
    """

    def __init__(
        self,
        base: type,
        *,
        discriminator: str = "cmd",
        source: Literal["parent", "self"] = "parent",
    ) -> None:
        """Initialise a creator for ``base``.

        Args:
            base: Type this creator is registered for.
            discriminator: Key holding the variant name.
            source: Whether the key lives on the enclosing node or the node itself.
        """

        self.base = base
        self.discriminator = discriminator
        self.source = source
        self._variants: dict[str, VariantFactory] = {}

    @property
    def names(self) -> tuple[str, ...]:
        """Return registered discriminator names in registration order."""

        return tuple(self._variants)

    def register(self, name: str | None, factory: VariantFactory) -> None:
        """Register ``factory`` for the discriminator value ``name``.

        Raises:
            MissingDiscriminatorError: If ``name`` is missing or empty.
        """

        if not name:
            raise MissingDiscriminatorError(f"{self.base.__qualname__} variant registered without a discriminator name")
        self._variants[name] = factory

    def register_type(self, cls: type, name: str | None = None) -> None:
        """Register ``cls`` (constructed with no arguments) for the discriminator value ``name``.

        Raises:
            MissingDiscriminatorError: If ``name`` is missing or empty.
            ConfigurationError: If ``cls`` does not derive from the base type.
        """

        if not name:
            raise MissingDiscriminatorError(f"{cls.__qualname__} registered without a discriminator name")
        if not issubclass(cls, self.base):
            raise ConfigurationError(f"{cls.__qualname__} is not a subclass of {self.base.__qualname__}")
        self.register(name, cls)

    def variant(self, name: str) -> Callable[[ClassT], ClassT]:
        """Return a class decorator registering the decorated class under ``name``."""

        def _decorator(cls: ClassT) -> ClassT:
            self.register_type(cls, name)
            return cls

        return _decorator

    def create(self, src: JsonMap, parent_src: JsonMap | None) -> object | None:
        """Build the variant named by the discriminator, or ``None`` when unknown."""

        holder = parent_src if self.source == "parent" else src
        if holder is None:
            return None
        name = holder.get(self.discriminator)
        if not isinstance(name, str):
            return None
        factory = self._variants.get(name)
        if factory is None:
            LOGGER.debug("no %s variant registered for %r", self.base.__qualname__, name)
            return None
        return factory()

    def type_to_create(self) -> type:
        """Return the base type this creator builds."""

        return self.base


__all__ = ["CreatorFactory", "CreatorRegistry", "CustomCreator", "NamedCreator", "VariantFactory"]
