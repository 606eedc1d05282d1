# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Per-type metadata driving both conversion engines.

Annotations are analysed once into a :class:`TypeShape` and classes into a
:class:`TypeDescriptor`. Both are immutable and cached, so they may be shared
between threads; building them is pure, which makes a racing first build
harmless.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import logging
import types
import typing
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Annotated, Any, ClassVar, Final, Union, get_args, get_origin

from pydantic import BaseModel

from .errors import UnsupportedTypeError
from .primitives import BUILTIN_SPECS, INT_SPEC, STR_SPEC, PrimitiveSpec

LOGGER = logging.getLogger(__name__)


class ShapeKind(Enum):
    """Conversion strategy selected for an annotation."""

    ANY = "any"
    PRIMITIVE = "primitive"
    ENUM = "enum"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    COMPOSITE = "composite"


@dataclass(frozen=True, slots=True)
class TypeShape:
    """Resolved view of a field annotation.

    ``target`` holds the enum or composite class, or the container factory
    (``list``/``tuple``/``dict``) for sequences and mappings. ``members`` holds
    the shapes of a union of several types and ``bounds`` the composite
    classes among them.
    """

    kind: ShapeKind
    annotation: object
    nullable: bool = False
    target: type | None = None
    primitive: PrimitiveSpec | None = None
    element: TypeShape | None = None
    key: PrimitiveSpec | None = None
    bounds: tuple[type, ...] = ()
    members: tuple[TypeShape, ...] = ()

    def describe(self) -> str:
        """Return a short human readable label for the shape."""

        match self.kind:
            case ShapeKind.PRIMITIVE:
                label = self.primitive.name if self.primitive else "primitive"
            case ShapeKind.SEQUENCE:
                inner = self.element.describe() if self.element else "any"
                label = f"sequence[{inner}]"
            case ShapeKind.MAPPING:
                key = self.key.name if self.key else "str"
                inner = self.element.describe() if self.element else "any"
                label = f"mapping[{key}, {inner}]"
            case ShapeKind.ENUM | ShapeKind.COMPOSITE:
                label = f"{self.kind.value} {self.target.__name__ if self.target else '?'}"
            case _ if self.members:
                label = " | ".join(member.describe() for member in self.members)
            case _:
                label = "any"
        return f"{label}?" if self.nullable else label


ANY_SHAPE: Final = TypeShape(ShapeKind.ANY, Any, nullable=True)

_SEQUENCE_ORIGINS: Final = frozenset({list, collections.abc.Sequence, collections.abc.MutableSequence})
_MAPPING_ORIGINS: Final = frozenset({dict, collections.abc.Mapping, collections.abc.MutableMapping})
_UNSUPPORTED_CLASSES: Final = (set, frozenset, bytes, bytearray, memoryview, complex)


def shape_of(annotation: object) -> TypeShape:
    """Return the :class:`TypeShape` for ``annotation``.

    Args:
        annotation: Resolved type annotation (no string forward references).

    Returns:
        TypeShape: Cached shape describing how values of the annotation convert.

    Raises:
        UnsupportedTypeError: If the annotation has no value tree representation.
    """

    try:
        hash(annotation)
    except TypeError:
        return _build_shape(annotation)
    return _cached_shape(annotation)


@lru_cache(maxsize=None)
def _cached_shape(annotation: object) -> TypeShape:
    return _build_shape(annotation)


def _build_shape(annotation: object) -> TypeShape:
    if annotation is Any or annotation is object:
        return ANY_SHAPE
    if isinstance(annotation, str):
        raise UnsupportedTypeError(f"unresolved forward reference {annotation!r}")
    origin = get_origin(annotation)
    args = get_args(annotation)
    if origin is Annotated:
        return _annotated_shape(annotation, args)
    if origin is Union or origin is types.UnionType:
        return _union_shape(annotation, args)
    if origin in _SEQUENCE_ORIGINS or annotation is list:
        element = shape_of(args[0]) if args else ANY_SHAPE
        return TypeShape(ShapeKind.SEQUENCE, annotation, target=list, element=element)
    if annotation is tuple:
        return TypeShape(ShapeKind.SEQUENCE, annotation, target=tuple, element=ANY_SHAPE)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return TypeShape(ShapeKind.SEQUENCE, annotation, target=tuple, element=shape_of(args[0]))
        raise UnsupportedTypeError(f"fixed-length tuple {annotation!r} is not supported; use tuple[T, ...]")
    if origin in _MAPPING_ORIGINS or annotation is dict:
        key_type, value_type = args if args else (str, Any)
        return TypeShape(
            ShapeKind.MAPPING,
            annotation,
            target=dict,
            key=_key_spec(annotation, key_type),
            element=shape_of(value_type),
        )
    if isinstance(annotation, type):
        return _class_shape(annotation)
    raise UnsupportedTypeError(f"cannot convert values of {annotation!r}")


def _annotated_shape(annotation: object, args: tuple[object, ...]) -> TypeShape:
    base = args[0]
    for marker in getattr(annotation, "__metadata__", ()):
        if isinstance(marker, PrimitiveSpec):
            return TypeShape(ShapeKind.PRIMITIVE, annotation, target=typing.cast(type, base), primitive=marker)
    return shape_of(base)


def _union_shape(annotation: object, args: tuple[object, ...]) -> TypeShape:
    members = tuple(arg for arg in args if arg is not type(None))
    nullable = len(members) != len(args)
    if len(members) == 1:
        return dataclasses.replace(shape_of(members[0]), annotation=annotation, nullable=nullable)
    shapes = tuple(shape_of(member) for member in members)
    bounds = tuple(
        shape.target for shape in shapes if shape.kind is ShapeKind.COMPOSITE and shape.target is not None
    )
    return TypeShape(ShapeKind.ANY, annotation, nullable=nullable, bounds=bounds, members=shapes)


def _key_spec(annotation: object, key_type: object) -> PrimitiveSpec:
    if key_type is str or key_type is Any:
        return STR_SPEC
    if key_type is int:
        return INT_SPEC
    raise UnsupportedTypeError(f"{annotation!r}: map keys must be str or int")


def _class_shape(cls: type) -> TypeShape:
    if issubclass(cls, Enum):
        return TypeShape(ShapeKind.ENUM, cls, target=cls)
    spec = BUILTIN_SPECS.get(cls)
    if spec is not None:
        return TypeShape(ShapeKind.PRIMITIVE, cls, target=cls, primitive=spec)
    if issubclass(cls, _UNSUPPORTED_CLASSES) or cls is type(None):
        raise UnsupportedTypeError(f"cannot convert values of {cls.__name__}")
    return TypeShape(ShapeKind.COMPOSITE, cls, target=cls)


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Describe one instance field and the accessor pair used to reach it."""

    name: str
    key: str
    shape: TypeShape
    private: bool
    getter: Callable[[object], object]
    setter: Callable[[object, object], None]

    def get(self, instance: object) -> object:
        """Return the current value of the field on ``instance``."""

        return self.getter(instance)

    def set(self, instance: object, value: object) -> None:
        """Store ``value`` into the field on ``instance``."""

        self.setter(instance, value)


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """Ordered instance fields of a composite type plus its default factory."""

    target: type
    fields: tuple[FieldDescriptor, ...]
    factory: Callable[[], object]

    def visible_fields(self, *, include_private: bool) -> tuple[FieldDescriptor, ...]:
        """Return the fields walked by an engine honouring ``include_private``.

        Args:
            include_private: When ``True`` underscore-prefixed fields are included.

        Returns:
            tuple[FieldDescriptor, ...]: Fields in declaration order.
        """

        if include_private:
            return self.fields
        return tuple(field for field in self.fields if not field.private)

    def field(self, name: str) -> FieldDescriptor | None:
        """Return the descriptor for ``name`` or ``None`` when absent."""

        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        return None


def describe(cls: type) -> TypeDescriptor:
    """Return the cached :class:`TypeDescriptor` for ``cls``.

    Dataclasses, pydantic models, and plain annotated classes are supported.
    ``ClassVar`` annotations are type-level state and never appear.

    Args:
        cls: Composite class to inspect.

    Returns:
        TypeDescriptor: Descriptor listing instance fields in declaration order.

    Raises:
        UnsupportedTypeError: If a field annotation cannot be resolved or converted.
    """

    return _cached_descriptor(cls)


@lru_cache(maxsize=None)
def _cached_descriptor(cls: type) -> TypeDescriptor:
    if issubclass(cls, BaseModel):
        entries = _model_entries(cls)
        frozen = bool(cls.model_config.get("frozen", False))
        factory: Callable[[], object] = cls.model_construct
    else:
        try:
            hints = typing.get_type_hints(cls, include_extras=True)
        except (NameError, TypeError) as exc:
            raise UnsupportedTypeError(f"cannot resolve annotations of {cls.__qualname__}: {exc}") from exc
        if dataclasses.is_dataclass(cls):
            entries = [(field.name, field.name, hints.get(field.name, field.type)) for field in dataclasses.fields(cls)]
            frozen = cls.__dataclass_params__.frozen  # type: ignore[attr-defined]
        else:
            entries = [(name, name, hint) for name, hint in hints.items() if not _is_class_var(hint)]
            frozen = False
        factory = cls

    fields = tuple(
        FieldDescriptor(
            name=name,
            key=key,
            shape=_field_shape(cls, name, annotation),
            private=name.startswith("_"),
            getter=_make_getter(name),
            setter=_make_setter(name, frozen=frozen),
        )
        for name, key, annotation in entries
    )
    LOGGER.debug("built descriptor for %s with %d field(s)", cls.__qualname__, len(fields))
    return TypeDescriptor(target=cls, fields=fields, factory=factory)


def _model_entries(cls: type[BaseModel]) -> list[tuple[str, str, object]]:
    # pydantic moves Annotated metadata off the annotation; put primitive markers back.
    entries: list[tuple[str, str, object]] = []
    for name, info in cls.model_fields.items():
        annotation: object = info.annotation
        markers = [marker for marker in info.metadata if isinstance(marker, PrimitiveSpec)]
        if markers:
            annotation = Annotated[annotation, markers[0]]  # type: ignore[valid-type]
        entries.append((name, info.alias or name, annotation))
    return entries


def _field_shape(cls: type, name: str, annotation: object) -> TypeShape:
    try:
        return shape_of(annotation)
    except UnsupportedTypeError as exc:
        raise UnsupportedTypeError(f"{cls.__qualname__}.{name}: {exc}") from exc


def _is_class_var(hint: object) -> bool:
    return hint is ClassVar or get_origin(hint) is ClassVar


def _make_getter(name: str) -> Callable[[object], object]:
    def _get(instance: object) -> object:
        return getattr(instance, name, None)

    return _get


def _make_setter(name: str, *, frozen: bool) -> Callable[[object, object], None]:
    def _set(instance: object, value: object) -> None:
        setattr(instance, name, value)

    def _set_frozen(instance: object, value: object) -> None:
        object.__setattr__(instance, name, value)

    return _set_frozen if frozen else _set


def is_composite_value(value: object) -> bool:
    """Return ``True`` when ``value`` should be encoded through its descriptor."""

    if value is None or isinstance(value, (str, int, float, bool, list, tuple, dict, Enum)):
        return False
    return not isinstance(value, (*_UNSUPPORTED_CLASSES, type))


__all__ = [
    "ANY_SHAPE",
    "FieldDescriptor",
    "ShapeKind",
    "TypeDescriptor",
    "TypeShape",
    "describe",
    "is_composite_value",
    "shape_of",
]
