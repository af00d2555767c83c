"""
Dialect strategy interfaces describing SQL syntax differences between engines.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, ClassVar, Optional, Protocol

from ..core.errors import UnmappedTypeError
from ..core.types import (
    Created,
    Id,
    Int64,
    UInt,
    UInt64,
    Updated,
    ValueKind,
    VarChar,
    classify,
    coerce,
)

if TYPE_CHECKING:
    from ..core.model import Model, ModelField
    from ..persistence.session import Session

DEFAULT_VARCHAR_SIZE = 255

_UNSIGNED_WRAP = 1 << 64


@dataclass(frozen=True)
class DialectCapabilities:
    """
    Feature flags describing backend capabilities.
    """

    supports_returning: bool = False
    supports_savepoints: bool = True
    supports_alter_column: bool = True
    supports_drop_column: bool = True


class Dialect(Protocol):
    """
    Strategy interface consumed across query, schema, and persistence layers.
    """

    @property
    def name(self) -> str: ...

    @property
    def capabilities(self) -> DialectCapabilities: ...

    KEYWORD_NOT_NULL: str
    KEYWORD_PRIMARY_KEY: str
    KEYWORD_AUTO_INCREMENT: str

    def marker(self, position: int) -> str: ...

    def quote_identifier(self, identifier: str) -> str: ...

    def format_table(self, table_name: str) -> str: ...

    def keyword_default(self, literal: str) -> str: ...

    def sql_type(self, value: Any, size: int = 0, auto_increment: bool = False, annotation: Any = None) -> str: ...

    def column_type(self, field: "ModelField") -> str: ...

    def render_column_definition(self, field: "ModelField") -> str: ...

    def convert_value(self, value: Any) -> Any: ...

    def value_to_field(self, value: Any, kind: Optional[ValueKind], annotation: Any = None) -> Any: ...

    def insert(self, session: "Session", model: "Model", sql: str, args: list[Any]) -> tuple[Any, bool]: ...


class BaseDialect:
    """
    Behaviour shared by every shipped dialect.

    Subclasses provide ``name``, ``capabilities``, ``TYPE_NAMES`` (one entry per
    :class:`ValueKind`) and :meth:`marker`; the rest can be overridden where the
    engine differs.
    """

    name: ClassVar[str] = ""
    capabilities: ClassVar[DialectCapabilities] = DialectCapabilities()
    TYPE_NAMES: ClassVar[dict[ValueKind, str]] = {}
    marker_origin: ClassVar[int] = 0

    KEYWORD_NOT_NULL: ClassVar[str] = "NOT NULL"
    KEYWORD_PRIMARY_KEY: ClassVar[str] = "PRIMARY KEY"
    KEYWORD_AUTO_INCREMENT: ClassVar[str] = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        missing = [kind.name for kind in ValueKind if kind not in cls.TYPE_NAMES]
        if cls.TYPE_NAMES and missing:
            raise TypeError(f"{cls.__name__} has no column type for {', '.join(missing)}")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

    # Markers and quoting -------------------------------------------------
    def marker(self, position: int) -> str:
        raise NotImplementedError

    def quote_identifier(self, identifier: str) -> str:
        escaped = identifier.replace('"', '""')
        return f'"{escaped}"'

    def format_table(self, table_name: str) -> str:
        if "." in table_name:
            schema, table = table_name.split(".", 1)
            return f"{self.quote_identifier(schema)}.{self.quote_identifier(table)}"
        return self.quote_identifier(table_name)

    # Column types --------------------------------------------------------
    def keyword_default(self, literal: str) -> str:
        return f"DEFAULT {literal}"

    def sql_type(self, value: Any, size: int = 0, auto_increment: bool = False, annotation: Any = None) -> str:
        kind = classify(value, annotation)
        if kind is None:
            raise UnmappedTypeError(
                f"{self.name} dialect cannot map {type(value).__name__} values to a column type"
            )
        return self.type_for_kind(kind, size, auto_increment)

    def type_for_kind(self, kind: ValueKind, size: int = 0, auto_increment: bool = False) -> str:
        return self.TYPE_NAMES[kind]

    def column_type(self, field: "ModelField") -> str:
        return self.sql_type(field.value, field.size, field.auto_increment, field.annotation)

    def render_column_definition(self, field: "ModelField") -> str:
        parts = [self.quote_identifier(field.name), self.column_type(field)]
        if field.not_null:
            parts.append(self.KEYWORD_NOT_NULL)
        if field.default:
            parts.append(self.keyword_default(field.default))
        if field.primary_key:
            parts.append(self.KEYWORD_PRIMARY_KEY)
            if field.auto_increment and self.KEYWORD_AUTO_INCREMENT:
                parts.append(self.KEYWORD_AUTO_INCREMENT)
        return " ".join(parts)

    # Value conversion ----------------------------------------------------
    def convert_value(self, value: Any) -> Any:
        """
        Unwrap marker types into the primitives drivers bind natively.
        """
        if isinstance(value, bool):
            return value
        if isinstance(value, (Id, Int64, UInt, UInt64)):
            return int(value)
        if isinstance(value, VarChar):
            return str(value)
        if isinstance(value, (Created, Updated)):
            return datetime.combine(value.date(), value.timetz())
        return value

    def parse_bool(self, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in ("1", "t", "true", "y", "yes")
        return bool(value)

    def parse_timestamp(self, value: Any) -> datetime:
        if isinstance(value, datetime):
            return value
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return datetime.fromisoformat(str(value))

    def value_to_field(self, value: Any, kind: Optional[ValueKind], annotation: Any = None) -> Any:
        """
        Convert a driver value into the Python value for a field of ``kind``.
        """
        if value is None or kind is None:
            return value
        if kind is ValueKind.BOOLEAN:
            converted: Any = self.parse_bool(value)
        elif kind is ValueKind.ID:
            converted = Id(int(value))
        elif kind is ValueKind.INTEGER:
            converted = int(value)
        elif kind is ValueKind.BIG_INTEGER:
            converted = Int64(int(value))
        elif kind in (ValueKind.UNSIGNED, ValueKind.BIG_UNSIGNED):
            number = int(value)
            # drivers may hand back an unsigned column as a signed integer
            if number < 0:
                number %= _UNSIGNED_WRAP
            converted = UInt(number) if kind is ValueKind.UNSIGNED else UInt64(number)
        elif kind is ValueKind.FLOAT:
            converted = float(value)
        elif kind in (ValueKind.TEXT, ValueKind.VARCHAR):
            if isinstance(value, (bytes, bytearray, memoryview)):
                value = bytes(value).decode("utf-8")
            converted = VarChar(value) if kind is ValueKind.VARCHAR else str(value)
        elif kind is ValueKind.BYTES:
            converted = value.encode("utf-8") if isinstance(value, str) else bytes(value)
        else:
            converted = self.parse_timestamp(value)
        return coerce(annotation, converted)

    # Inserts -------------------------------------------------------------
    def insert(self, session: "Session", model: "Model", sql: str, args: list[Any]) -> tuple[Any, bool]:
        """
        Perform a dialect-specific insert.

        Returns ``(primary key, True)`` when the dialect ran the statement
        itself, or ``(None, False)`` to let the caller execute it and read the
        driver's last inserted id.
        """
        return None, False
