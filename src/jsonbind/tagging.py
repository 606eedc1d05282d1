# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Type identity tags used for automatic polymorphic round trips."""

from __future__ import annotations

import importlib
import logging
import sys
from typing import Final, TypeVar

from .errors import UnresolvableTypeError

LOGGER = logging.getLogger(__name__)

DEFAULT_TYPE_KEY: Final = "$type"

TypeT = TypeVar("TypeT", bound=type)


def type_name(cls: type) -> str:
    """Return the globally resolvable name embedded in a type tag.

    Args:
        cls: Runtime class of an encoded value.

    Returns:
        str: Dotted ``module.QualifiedName`` identifier.
    """

    return f"{cls.__module__}.{cls.__qualname__}"


class TypeResolver:
    """Map type tag names back to classes.

    Explicit aliases win. When the caller knows the admissible base classes
    the name is matched against them and their loaded subclasses only, so a
    tag can never trigger an import. Otherwise the name is looked up among
    loaded modules and, when ``allow_import`` is set, by importing the longest
    importable module prefix. Successful lookups are cached per resolver.
    """

    def __init__(self, *, allow_import: bool = False) -> None:
        """Initialise an empty resolver.

        Args:
            allow_import: When ``True`` modules named by a tag may be imported.
        """

        self.allow_import = allow_import
        self._aliases: dict[str, type] = {}
        self._cache: dict[str, type] = {}

    def register(self, cls: TypeT, name: str | None = None) -> TypeT:
        """Register ``cls`` under ``name`` (defaults to :func:`type_name`).

        Returns ``cls`` unchanged so the method doubles as a class decorator.
        """

        self._aliases[name or type_name(cls)] = cls
        return cls

    def resolve(self, name: str, *, path: str = "$", bases: tuple[type, ...] = ()) -> type:
        """Return the class identified by ``name``.

        Args:
            name: Tag value read from an encoded map.
            path: Location of the tagged node, used in error messages.
            bases: Admissible base classes. When given, only aliases and
                loaded subclasses of ``bases`` are considered.

        Returns:
            type: Resolved class.

        Raises:
            UnresolvableTypeError: If ``name`` does not identify a reachable class.
        """

        found = self._aliases.get(name) or self._cache.get(name)
        if found is not None:
            return found
        if bases:
            found = _find_subclass(name, bases)
            if found is None:
                admissible = ", ".join(base.__qualname__ for base in bases)
                raise UnresolvableTypeError(f"{name!r} is not a subtype of {admissible}", path=path)
        elif "<locals>" not in name:
            found = self._lookup(name)
        if found is None:
            raise UnresolvableTypeError(f"cannot resolve type {name!r}", path=path)
        LOGGER.debug("resolved type tag %s", name)
        self._cache[name] = found
        return found

    def _lookup(self, name: str) -> type | None:
        parts = name.split(".")
        for split in range(len(parts) - 1, 0, -1):
            module_name = ".".join(parts[:split])
            module = sys.modules.get(module_name)
            if module is None and self.allow_import:
                try:
                    module = importlib.import_module(module_name)
                except ImportError:
                    continue
            if module is None:
                continue
            target: object = module
            for attribute in parts[split:]:
                target = getattr(target, attribute, None)
                if target is None:
                    break
            if isinstance(target, type):
                return target
        return None

    def __contains__(self, name: str) -> bool:
        """Return whether ``name`` has an explicit alias."""

        return name in self._aliases

    def __len__(self) -> int:
        """Return the number of explicit aliases."""

        return len(self._aliases)

    def __repr__(self) -> str:
        """Return a developer-facing summary of the registered aliases."""

        names = ", ".join(sorted(self._aliases))
        return f"TypeResolver(aliases=[{names}], allow_import={self.allow_import})"


def _find_subclass(name: str, bases: tuple[type, ...]) -> type | None:
    pending = list(bases)
    seen: set[type] = set()
    while pending:
        candidate = pending.pop()
        if candidate in seen:
            continue
        seen.add(candidate)
        if type_name(candidate) == name:
            return candidate
        pending.extend(candidate.__subclasses__())
    return None


_DEFAULT_RESOLVER: Final = TypeResolver(allow_import=True)


def resolve_type_by_name(name: str) -> type:
    """Resolve ``name`` with the shared default resolver.

    Raises:
        UnresolvableTypeError: If ``name`` does not identify a reachable class.
    """

    return _DEFAULT_RESOLVER.resolve(name)


__all__ = ["DEFAULT_TYPE_KEY", "TypeResolver", "resolve_type_by_name", "type_name"]
