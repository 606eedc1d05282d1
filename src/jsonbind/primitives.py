# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Fixed-width primitive aliases and the scalar coercion table.

Python has a single ``int`` and a single ``float``. Fields that must honour a
narrower wire range annotate themselves with one of the aliases below, e.g.
``level: UInt8 = 0`` or ``ratio: Float32 = 0.0``.
"""

from __future__ import annotations

import json
import math
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Final

from .errors import EncodeError, ShapeMismatchError, UnconvertiblePrimitiveError
from .values import JsonScalar


class PrimitiveFamily(Enum):
    """Coercion family a primitive target belongs to."""

    BOOL = "bool"
    INTEGER = "integer"
    FLOAT = "float"
    CHAR = "char"
    STRING = "string"


@dataclass(frozen=True, slots=True)
class PrimitiveSpec:
    """Describe a primitive target: its family and representable range."""

    name: str
    family: PrimitiveFamily
    minimum: int | None = None
    maximum: int | None = None
    single_precision: bool = False


BOOL_SPEC: Final = PrimitiveSpec("bool", PrimitiveFamily.BOOL)
INT_SPEC: Final = PrimitiveSpec("int", PrimitiveFamily.INTEGER)
FLOAT_SPEC: Final = PrimitiveSpec("float", PrimitiveFamily.FLOAT)
STR_SPEC: Final = PrimitiveSpec("str", PrimitiveFamily.STRING)
CHAR_SPEC: Final = PrimitiveSpec("Char", PrimitiveFamily.CHAR)


def _signed(name: str, bits: int) -> PrimitiveSpec:
    bound = 1 << (bits - 1)
    return PrimitiveSpec(name, PrimitiveFamily.INTEGER, -bound, bound - 1)


def _unsigned(name: str, bits: int) -> PrimitiveSpec:
    return PrimitiveSpec(name, PrimitiveFamily.INTEGER, 0, (1 << bits) - 1)


Int8 = Annotated[int, _signed("Int8", 8)]
UInt8 = Annotated[int, _unsigned("UInt8", 8)]
Int16 = Annotated[int, _signed("Int16", 16)]
UInt16 = Annotated[int, _unsigned("UInt16", 16)]
Int32 = Annotated[int, _signed("Int32", 32)]
UInt32 = Annotated[int, _unsigned("UInt32", 32)]
Int64 = Annotated[int, _signed("Int64", 64)]
UInt64 = Annotated[int, _unsigned("UInt64", 64)]
Float32 = Annotated[float, PrimitiveSpec("Float32", PrimitiveFamily.FLOAT, single_precision=True)]
Float64 = Annotated[float, FLOAT_SPEC]
Char = Annotated[str, CHAR_SPEC]

BUILTIN_SPECS: Final[dict[type, PrimitiveSpec]] = {
    bool: BOOL_SPEC,
    int: INT_SPEC,
    float: FLOAT_SPEC,
    str: STR_SPEC,
}

_SINGLE: Final = struct.Struct("<f")
_MAX_CODE_POINT: Final = 0x10FFFF


def to_single(value: float) -> float:
    """Round ``value`` to the nearest IEEE-754 single precision number.

    Raises:
        OverflowError: If a finite ``value`` is outside the single range.
    """

    return _SINGLE.unpack(_SINGLE.pack(value))[0]


def shortest_single_repr(value: float) -> float:
    """Return the shortest decimal float that rounds to the same single as ``value``."""

    if not math.isfinite(value):
        return value
    single = to_single(value)
    for digits in range(1, 10):
        candidate = float(f"{single:.{digits}g}")
        if to_single(candidate) == single:
            return candidate
    return single


def coerce_primitive(spec: PrimitiveSpec, value: object, *, path: str = "$") -> object:
    """Convert the scalar ``value`` into the primitive described by ``spec``.

    Args:
        spec: Target primitive description.
        value: Node taken from the value tree.
        path: Location of the node, used in error messages.

    Returns:
        object: Python value ready to be stored in a field.

    Raises:
        ShapeMismatchError: If ``value`` is null, a sequence, or a map.
        UnconvertiblePrimitiveError: If ``value`` cannot be represented by ``spec``.
    """

    if value is None or isinstance(value, (list, dict)):
        raise ShapeMismatchError(f"expected {spec.name}, found {_describe(value)}", path=path)
    match spec.family:
        case PrimitiveFamily.BOOL:
            return _to_bool(spec, value, path)
        case PrimitiveFamily.INTEGER:
            return _check_range(spec, _to_int(spec, value, path), path)
        case PrimitiveFamily.FLOAT:
            return _to_float(spec, value, path)
        case PrimitiveFamily.CHAR:
            return _to_char(spec, value, path)
        case PrimitiveFamily.STRING:
            if isinstance(value, str):
                return value
            return json.dumps(value)
    raise UnconvertiblePrimitiveError(f"unknown primitive {spec.name}", path=path)  # pragma: no cover


def primitive_to_value(spec: PrimitiveSpec, value: object, *, path: str = "$") -> JsonScalar:
    """Render a primitive field value as a value tree scalar.

    Raises:
        EncodeError: If ``value`` is not a JSON scalar.
    """

    if spec.single_precision and isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return shortest_single_repr(float(value))
        except OverflowError as exc:
            raise EncodeError(f"{path}: {value!r} overflows {spec.name}") from exc
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    raise EncodeError(f"{path}: {type(value).__name__} cannot be encoded as {spec.name}")


def _describe(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, list):
        return "a sequence"
    if isinstance(value, dict):
        return "a map"
    return type(value).__name__


def _to_bool(spec: PrimitiveSpec, value: object, path: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"
    raise UnconvertiblePrimitiveError(f"cannot convert {value!r} to {spec.name}", path=path)


def _to_int(spec: PrimitiveSpec, value: object, path: str) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise UnconvertiblePrimitiveError(f"{value!r} is not representable as {spec.name}", path=path)
        # round() is half-to-even
        return round(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise UnconvertiblePrimitiveError(f"cannot parse {value!r} as {spec.name}", path=path) from exc
    raise UnconvertiblePrimitiveError(f"cannot convert {value!r} to {spec.name}", path=path)


def _check_range(spec: PrimitiveSpec, number: int, path: str) -> int:
    if spec.minimum is not None and number < spec.minimum:
        raise UnconvertiblePrimitiveError(f"{number} underflows {spec.name}", path=path)
    if spec.maximum is not None and number > spec.maximum:
        raise UnconvertiblePrimitiveError(f"{number} overflows {spec.name}", path=path)
    return number


def _to_float(spec: PrimitiveSpec, value: object, path: str) -> float:
    if not isinstance(value, (str, int, float)):
        raise UnconvertiblePrimitiveError(f"cannot convert {value!r} to {spec.name}", path=path)
    try:
        number = float(value.strip()) if isinstance(value, str) else float(value)
        return to_single(number) if spec.single_precision else number
    except (OverflowError, ValueError) as exc:
        raise UnconvertiblePrimitiveError(f"{value!r} is not representable as {spec.name}", path=path) from exc


def _to_char(spec: PrimitiveSpec, value: object, path: str) -> str:
    if isinstance(value, str) and len(value) == 1:
        return value
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= _MAX_CODE_POINT:
        return chr(value)
    raise UnconvertiblePrimitiveError(f"{value!r} is not a single character", path=path)


__all__ = [
    "BUILTIN_SPECS",
    "CHAR_SPEC",
    "Char",
    "Float32",
    "Float64",
    "Int16",
    "Int32",
    "Int64",
    "Int8",
    "PrimitiveFamily",
    "PrimitiveSpec",
    "UInt16",
    "UInt32",
    "UInt64",
    "UInt8",
    "coerce_primitive",
    "primitive_to_value",
    "shortest_single_repr",
    "to_single",
]
