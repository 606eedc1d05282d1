# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Decode engine: value tree to typed object graph."""

from __future__ import annotations

import logging
from typing import Any, TypeVar, overload

from .creators import CreatorRegistry, CustomCreator
from .descriptors import ANY_SHAPE, ShapeKind, TypeShape, describe, shape_of
from .errors import (
    ConfigurationError,
    DecodeError,
    MaxDepthExceededError,
    ShapeMismatchError,
    UnconstructibleTypeError,
    UnconvertiblePrimitiveError,
    UnresolvableTypeError,
)
from .options import DecodeOptions
from .primitives import PrimitiveFamily, coerce_primitive
from .tagging import TypeResolver
from .values import JsonMap, JsonValue, kind_of, parse

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_CONTAINER_KINDS = frozenset({ShapeKind.ANY, ShapeKind.SEQUENCE, ShapeKind.MAPPING, ShapeKind.COMPOSITE})
_SCALAR_TYPES: dict[PrimitiveFamily, tuple[type, ...]] = {
    PrimitiveFamily.BOOL: (bool,),
    PrimitiveFamily.INTEGER: (int,),
    PrimitiveFamily.FLOAT: (int, float),
    PrimitiveFamily.CHAR: (str,),
    PrimitiveFamily.STRING: (str,),
}


class Deserializer:
    """Convert value trees into instances of declared types.

    Each deserializer owns (or explicitly shares) a :class:`CreatorRegistry`,
    so sessions configured with different creators never interfere.

    Example::

        deserializer = Deserializer()
        deserializer.register_creator(FruitCreator())
        fruit = deserializer.deserialize(Fruit, '{"fruit_type":0,"height":1.2}')
    """

    def __init__(
        self,
        registry: CreatorRegistry | None = None,
        *,
        options: DecodeOptions | None = None,
        resolver: TypeResolver | None = None,
    ) -> None:
        """Bind the registry, options, and type resolver used by this session.

        Args:
            registry: Creators consulted before default construction.
            options: Decode settings; defaults to :class:`DecodeOptions`.
            resolver: Resolver for type identity tags. A supplied resolver
                keeps its own ``allow_import`` setting.

        Raises:
            ConfigurationError: If ``options`` explicitly sets ``allow_type_import``
                and it disagrees with the supplied ``resolver``.
        """

        self.registry = registry if registry is not None else CreatorRegistry()
        self.options = options or DecodeOptions()
        if resolver is None:
            resolver = TypeResolver(allow_import=self.options.allow_type_import)
        elif (
            "allow_type_import" in self.options.model_fields_set
            and resolver.allow_import != self.options.allow_type_import
        ):
            raise ConfigurationError(
                f"allow_type_import={self.options.allow_type_import} conflicts with {resolver!r}",
            )
        self.resolver = resolver

    def register_creator(self, creator: CustomCreator) -> None:
        """Register ``creator`` with the bound registry."""

        self.registry.register_creator(creator)

    @overload
    def deserialize(self, target: type[T], text: str | bytes | bytearray) -> T: ...

    @overload
    def deserialize(self, target: object, text: str | bytes | bytearray) -> Any: ...

    def deserialize(self, target: object, text: str | bytes | bytearray) -> Any:
        """Parse JSON ``text`` and convert it into ``target``.

        Args:
            target: Declared type, e.g. ``Foo``, ``list[Bar]`` or ``dict[int, Bar]``.
            text: JSON document.

        Returns:
            Any: Instance of ``target``.

        Raises:
            DecodeError: If the document does not fit ``target``.
        """

        return self.convert(target, parse(text))

    @overload
    def convert(self, target: type[T], value: JsonValue, parent: JsonMap | None = None) -> T: ...

    @overload
    def convert(self, target: object, value: JsonValue, parent: JsonMap | None = None) -> Any: ...

    def convert(self, target: object, value: JsonValue, parent: JsonMap | None = None) -> Any:
        """Convert an already parsed value tree into ``target``.

        Args:
            target: Declared type.
            value: Root node of the value tree.
            parent: Map enclosing ``value``, visible to creators; ``None`` at the root.

        Returns:
            Any: Instance of ``target``.

        Raises:
            DecodeError: If the tree does not fit ``target``.
        """

        try:
            return self._convert(shape_of(target), value, parent, "$", 0)
        except RecursionError as exc:
            # max_depth above what the interpreter stack allows
            raise MaxDepthExceededError("nesting exceeds the interpreter recursion limit") from exc

    def _convert(self, shape: TypeShape, value: JsonValue, parent: JsonMap | None, path: str, depth: int) -> Any:
        if depth > self.options.max_depth:
            raise MaxDepthExceededError(f"nesting exceeds {self.options.max_depth} levels", path=path)
        if value is None:
            if shape.nullable or (shape.kind in _CONTAINER_KINDS and not shape.members):
                return None
            raise ShapeMismatchError(f"null is not a valid {shape.describe()}", path=path)
        match shape.kind:
            case ShapeKind.PRIMITIVE:
                assert shape.primitive is not None
                return coerce_primitive(shape.primitive, value, path=path)
            case ShapeKind.ENUM:
                return self._convert_enum(shape, value, path)
            case ShapeKind.SEQUENCE:
                return self._convert_sequence(shape, value, parent, path, depth)
            case ShapeKind.MAPPING:
                return self._convert_mapping(shape, value, parent, path, depth)
            case ShapeKind.COMPOSITE:
                assert shape.target is not None
                return self._convert_object(shape.target, value, parent, path, depth)
            case _:
                return self._convert_any(shape, value, parent, path, depth)

    def _convert_enum(self, shape: TypeShape, value: JsonValue, path: str) -> Any:
        assert shape.target is not None
        if not isinstance(value, str):
            raise ShapeMismatchError(
                f"expected a member name of {shape.target.__name__}, found {kind_of(value, path=path).value}",
                path=path,
            )
        member = shape.target.__members__.get(value)
        if member is None:
            raise UnconvertiblePrimitiveError(f"{value!r} is not a member of {shape.target.__name__}", path=path)
        return member

    def _convert_sequence(
        self,
        shape: TypeShape,
        value: JsonValue,
        parent: JsonMap | None,
        path: str,
        depth: int,
    ) -> list[Any] | tuple[Any, ...]:
        if not isinstance(value, list):
            raise ShapeMismatchError(f"expected a sequence, found {kind_of(value, path=path).value}", path=path)
        element = shape.element or ANY_SHAPE
        items = [
            self._convert(element, item, parent, f"{path}[{index}]", depth + 1) for index, item in enumerate(value)
        ]
        return tuple(items) if shape.target is tuple else items

    def _convert_mapping(
        self,
        shape: TypeShape,
        value: JsonValue,
        parent: JsonMap | None,
        path: str,
        depth: int,
    ) -> dict[Any, Any]:
        if not isinstance(value, dict):
            raise ShapeMismatchError(f"expected a map, found {kind_of(value, path=path).value}", path=path)
        element = shape.element or ANY_SHAPE
        result: dict[Any, Any] = {}
        for key, item in value.items():
            item_path = f"{path}.{key}"
            converted_key = coerce_primitive(shape.key, key, path=item_path) if shape.key else key
            result[converted_key] = self._convert(element, item, parent, item_path, depth + 1)
        return result

    def _convert_any(
        self,
        shape: TypeShape,
        value: JsonValue,
        parent: JsonMap | None,
        path: str,
        depth: int,
    ) -> Any:
        open_ended = not shape.members or any(member.kind is ShapeKind.ANY for member in shape.members)
        if isinstance(value, dict):
            tag = value.get(self.options.type_key)
            if isinstance(tag, str) and (open_ended or shape.bounds):
                bases = () if open_ended else shape.bounds
                concrete = self.resolver.resolve(tag, path=path, bases=bases)
                if not open_ended and not issubclass(concrete, shape.bounds):
                    raise UnresolvableTypeError(f"{tag!r} is not one of the admissible types", path=path)
                return self._convert_object(concrete, value, parent, path, depth)
        if shape.members:
            return self._convert_union(shape, value, parent, path, depth)
        if isinstance(value, dict):
            return {key: self._convert(ANY_SHAPE, item, value, f"{path}.{key}", depth + 1) for key, item in value.items()}
        if isinstance(value, list):
            return [self._convert(ANY_SHAPE, item, parent, f"{path}[{index}]", depth + 1) for index, item in enumerate(value)]
        kind_of(value, path=path)
        return value

    def _convert_union(
        self,
        shape: TypeShape,
        value: JsonValue,
        parent: JsonMap | None,
        path: str,
        depth: int,
    ) -> Any:
        candidates = [member for member in shape.members if _accepts(member, value)]
        composites = [member for member in candidates if member.kind is ShapeKind.COMPOSITE]
        if len(composites) > 1:
            # several classes fit an untagged map; only a tag can pick one
            candidates = [member for member in candidates if member.kind is not ShapeKind.COMPOSITE]
            if not candidates:
                raise ShapeMismatchError(
                    f"untagged map is ambiguous for {shape.describe()}; add a {self.options.type_key!r} tag",
                    path=path,
                )
        failure: DecodeError | None = None
        for member in candidates:
            try:
                return self._convert(member, value, parent, path, depth)
            except MaxDepthExceededError:
                raise
            except DecodeError as exc:
                failure = exc
        raise ShapeMismatchError(
            f"{kind_of(value, path=path).value} does not fit {shape.describe()}",
            path=path,
        ) from failure

    def _convert_object(self, cls: type, value: JsonValue, parent: JsonMap | None, path: str, depth: int) -> Any:
        if not isinstance(value, dict):
            raise ShapeMismatchError(
                f"expected a map for {cls.__qualname__}, found {kind_of(value, path=path).value}",
                path=path,
            )
        instance = self._instantiate(cls, value, parent, path)
        descriptor = describe(type(instance))
        fields = descriptor.visible_fields(include_private=self.options.include_private)
        for field in fields:
            if field.key not in value:
                continue
            converted = self._convert(field.shape, value[field.key], value, f"{path}.{field.key}", depth + 1)
            field.set(instance, converted)
        if LOGGER.isEnabledFor(logging.DEBUG):
            known = {field.key for field in fields} | {self.options.type_key}
            ignored = [key for key in value if key not in known]
            if ignored:
                LOGGER.debug("%s: ignoring keys %s for %s", path, ignored, type(instance).__qualname__)
        return instance

    def _instantiate(self, cls: type, src: JsonMap, parent: JsonMap | None, path: str) -> object:
        factory = self.registry.get(cls)
        if factory is not None:
            created = factory(src, parent)
            if created is not None:
                if not isinstance(created, cls):
                    raise UnresolvableTypeError(
                        f"creator for {cls.__qualname__} returned {type(created).__qualname__}",
                        path=path,
                    )
                LOGGER.debug("%s: creator chose %s", path, type(created).__qualname__)
                return created

        tag = src.get(self.options.type_key)
        if tag is not None:
            if not isinstance(tag, str):
                raise ShapeMismatchError(f"type tag {self.options.type_key!r} must be a string", path=path)
            concrete = self.resolver.resolve(tag, path=path, bases=(cls,))
            if not issubclass(concrete, cls):
                raise UnresolvableTypeError(f"{tag!r} is not a subtype of {cls.__qualname__}", path=path)
            cls = concrete

        try:
            return describe(cls).factory()
        except TypeError as exc:
            raise UnconstructibleTypeError(f"cannot construct {cls.__qualname__}: {exc}", path=path) from exc


def _accepts(member: TypeShape, value: JsonValue) -> bool:
    match member.kind:
        case ShapeKind.ANY:
            return True
        case ShapeKind.PRIMITIVE:
            assert member.primitive is not None
            if isinstance(value, bool):
                return member.primitive.family is PrimitiveFamily.BOOL
            return isinstance(value, _SCALAR_TYPES[member.primitive.family])
        case ShapeKind.ENUM:
            return isinstance(value, str)
        case ShapeKind.SEQUENCE:
            return isinstance(value, list)
        case _:
            return isinstance(value, dict)


def decode(
    target: object,
    source: str | bytes | bytearray | JsonValue,
    registry: CreatorRegistry | None = None,
    *,
    resolver: TypeResolver | None = None,
    **overrides: Any,
) -> Any:
    """Decode ``source`` into ``target`` with a throwaway :class:`Deserializer`.

    Args:
        target: Declared type.
        source: JSON text, or an already parsed value tree when not a ``str``/``bytes``.
        registry: Optional creator registry.
        resolver: Optional type tag resolver.
        **overrides: Fields of :class:`DecodeOptions`.

    Returns:
        Any: Instance of ``target``.

    Raises:
        DecodeError: If ``source`` does not fit ``target``.
        pydantic.ValidationError: If an override is unknown or invalid.
    """

    deserializer = Deserializer(registry, options=DecodeOptions(**overrides), resolver=resolver)
    if isinstance(source, (str, bytes, bytearray)):
        return deserializer.deserialize(target, source)
    return deserializer.convert(target, source)


__all__ = ["Deserializer", "decode"]
