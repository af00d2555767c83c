"""
Column value types and the closed set of value kinds dialects map to SQL.
"""

from __future__ import annotations

import enum
import types
import typing
from datetime import datetime
from typing import Any, Optional


class Id(int):
    """Auto-incrementing integer primary key."""


class Int64(int):
    """Signed 64-bit integer column."""


class UInt(int):
    """Unsigned integer column."""


class UInt64(int):
    """Unsigned 64-bit integer column."""


class VarChar(str):
    """Variable-length string column, sized with ``column(size=...)``."""


class Created(datetime):
    """Timestamp set automatically when a row is inserted."""


class Updated(datetime):
    """Timestamp set automatically whenever a row is saved."""


class Index:
    """Annotation marking a non-unique index declaration."""


class UniqueIndex(Index):
    """Annotation marking a unique index declaration."""


class ValueKind(enum.Enum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    BIG_INTEGER = "big_integer"
    UNSIGNED = "unsigned"
    BIG_UNSIGNED = "big_unsigned"
    ID = "id"
    FLOAT = "float"
    BYTES = "bytes"
    TEXT = "text"
    VARCHAR = "varchar"
    TIMESTAMP = "timestamp"


INTEGER_KINDS = frozenset(
    {
        ValueKind.INTEGER,
        ValueKind.BIG_INTEGER,
        ValueKind.UNSIGNED,
        ValueKind.BIG_UNSIGNED,
        ValueKind.ID,
    }
)

# Order matters: subclasses before their bases, bool before int.
_KIND_TABLE: tuple[tuple[type, ValueKind], ...] = (
    (bool, ValueKind.BOOLEAN),
    (Id, ValueKind.ID),
    (Int64, ValueKind.BIG_INTEGER),
    (UInt64, ValueKind.BIG_UNSIGNED),
    (UInt, ValueKind.UNSIGNED),
    (int, ValueKind.INTEGER),
    (float, ValueKind.FLOAT),
    (bytes, ValueKind.BYTES),
    (bytearray, ValueKind.BYTES),
    (memoryview, ValueKind.BYTES),
    (VarChar, ValueKind.VARCHAR),
    (str, ValueKind.TEXT),
    (datetime, ValueKind.TIMESTAMP),
)

_ZERO_VALUES: dict[ValueKind, Any] = {
    ValueKind.BOOLEAN: False,
    ValueKind.INTEGER: 0,
    ValueKind.BIG_INTEGER: Int64(0),
    ValueKind.UNSIGNED: UInt(0),
    ValueKind.BIG_UNSIGNED: UInt64(0),
    ValueKind.ID: Id(0),
    ValueKind.FLOAT: 0.0,
    ValueKind.BYTES: b"",
    ValueKind.TEXT: "",
    ValueKind.VARCHAR: VarChar(""),
    ValueKind.TIMESTAMP: None,
}


def unwrap_optional(annotation: Any) -> Any:
    """
    Strip ``Optional[X]`` / ``X | None`` down to ``X``.
    """
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is getattr(types, "UnionType", None):
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def kind_of_type(annotation: Any) -> Optional[ValueKind]:
    annotation = unwrap_optional(annotation)
    if not isinstance(annotation, type):
        return None
    for candidate, kind in _KIND_TABLE:
        if issubclass(annotation, candidate):
            return kind
    return None


def classify(value: Any, annotation: Any = None) -> Optional[ValueKind]:
    """
    Return the value kind of a column.

    The runtime type decides, except when it and the annotation belong to the
    same type family (``5`` in an ``Id`` field, an ``Id`` in an ``int`` field);
    then the declared field type is authoritative.
    """
    if value is not None:
        runtime = type(value)
        declared = unwrap_optional(annotation)
        if isinstance(declared, type) and (issubclass(declared, runtime) or issubclass(runtime, declared)):
            kind = kind_of_type(declared)
            if kind is not None:
                return kind
        kind = kind_of_type(runtime)
        if kind is not None:
            return kind
    if annotation is not None:
        return kind_of_type(annotation)
    return None


def zero_value(kind: Optional[ValueKind], annotation: Any = None) -> Any:
    target = unwrap_optional(annotation)
    if isinstance(target, type) and issubclass(target, (Id, Int64, UInt, UInt64, VarChar)):
        return target()
    if kind is None:
        return None
    return _ZERO_VALUES[kind]


def is_zero(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (bool, int, float, str, bytes, bytearray)):
        return not value
    return False


def coerce(annotation: Any, value: Any) -> Any:
    """
    Wrap a driver value into the declared marker type (``Id``, ``Created``...).
    """
    target = unwrap_optional(annotation)
    if value is None or not isinstance(target, type) or isinstance(value, target):
        return value
    if issubclass(target, datetime) and isinstance(value, datetime):
        return target.combine(value.date(), value.timetz())
    if issubclass(target, bool):
        return bool(value)
    if issubclass(target, int) and isinstance(value, int):
        return target(value)
    if issubclass(target, str) and isinstance(value, str):
        return target(value)
    return value
