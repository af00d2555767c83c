"""
SQLite dialect implementation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Final

from ..core.types import ValueKind
from .base import BaseDialect, DialectCapabilities


class SQLiteDialect(BaseDialect):
    """
    SQLite dialect using qmark markers and ``AUTOINCREMENT`` primary keys.
    """

    name: Final[str] = "sqlite3"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        supports_returning=False,
        supports_savepoints=True,
        supports_alter_column=False,
        supports_drop_column=True,
    )
    TYPE_NAMES = {
        ValueKind.BOOLEAN: "integer",
        ValueKind.INTEGER: "integer",
        ValueKind.UNSIGNED: "integer",
        ValueKind.BIG_INTEGER: "integer",
        ValueKind.BIG_UNSIGNED: "integer",
        ValueKind.ID: "integer",
        ValueKind.FLOAT: "real",
        ValueKind.BYTES: "blob",  # stored as blob, not text
        ValueKind.TEXT: "text",
        ValueKind.VARCHAR: "text",
        ValueKind.TIMESTAMP: "text",
    }
    KEYWORD_AUTO_INCREMENT = "AUTOINCREMENT"

    def marker(self, position: int) -> str:
        return "?"

    def convert_value(self, value: Any) -> Any:
        value = super().convert_value(value)
        if isinstance(value, datetime):
            return value.isoformat(sep=" ")
        return value
