"""
SQLite database adapter implementation.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any, Sequence

from ..dialects.sqlite import SQLiteDialect
from ..security.redaction import redact_params
from ..utils import get_logger, resolve_slow_query_ms, time_call
from .base import (
    AdapterConnectionError,
    AdapterExecutionError,
    AdapterTransactionError,
    ConnectionConfig,
    DatabaseAdapter,
)


@dataclass(slots=True)
class SQLiteConnectionState:
    connection: sqlite3.Connection


class SQLiteAdapter(DatabaseAdapter):
    """
    Adapter wrapping the Python stdlib sqlite3 module.
    """

    def __init__(self, dialect: SQLiteDialect | None = None, slow_query_ms: int | None = None) -> None:
        self.dialect = dialect or SQLiteDialect()
        self._state: SQLiteConnectionState | None = None
        self.logger = get_logger("adapters.sqlite")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    # ------------------------------------------------------------------ #
    # Connection management
    # ------------------------------------------------------------------ #
    def connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        path = self._normalize_path(config.url)
        timeout = config.timeout if config.timeout is not None else 5.0

        try:
            connection = sqlite3.connect(
                path,
                isolation_level=None if config.autocommit else "",
                timeout=timeout,
                check_same_thread=False,
            )
        except sqlite3.Error as exc:
            raise AdapterConnectionError(f"Failed to open SQLite database {path!r}.") from exc
        connection.execute("PRAGMA foreign_keys = ON")

        if config.isolation_level:
            connection.isolation_level = config.isolation_level

        self._state = SQLiteConnectionState(connection)
        self.logger.debug("Opened SQLite database %s", path)
        return connection

    def close(self) -> None:
        if self._state:
            self._state.connection.close()
            self._state = None

    def _ensure_connection(self) -> sqlite3.Connection:
        if not self._state:
            raise AdapterConnectionError("SQLiteAdapter is not connected.")
        return self._state.connection

    # ------------------------------------------------------------------ #
    # Execution helpers
    # ------------------------------------------------------------------ #
    def execute(self, sql: str, params: Sequence[Any] | None = None) -> sqlite3.Cursor:
        connection = self._ensure_connection()
        cursor = connection.cursor()
        params = params or ()
        with time_call(
            "sqlite.execute",
            self.logger,
            sql=sql,
            params=redact_params(params),
            threshold_ms=self.slow_query_ms,
        ):
            try:
                cursor.execute(sql, params)
            except sqlite3.Error as exc:
                raise AdapterExecutionError(f"SQLite rejected statement: {exc}") from exc
        return cursor

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    def begin(self) -> None:
        if self._ensure_connection().in_transaction:
            # without autocommit sqlite3 has already opened one before the last write
            return
        self._transaction_command("BEGIN")

    def commit(self) -> None:
        connection = self._ensure_connection()
        try:
            connection.commit()
        except sqlite3.Error as exc:
            raise AdapterTransactionError("SQLite commit failed.") from exc

    def rollback(self) -> None:
        connection = self._ensure_connection()
        try:
            connection.rollback()
        except sqlite3.Error as exc:
            raise AdapterTransactionError("SQLite rollback failed.") from exc

    def _transaction_command(self, sql: str) -> None:
        connection = self._ensure_connection()
        try:
            connection.execute(sql)
        except sqlite3.Error as exc:
            raise AdapterTransactionError(f"SQLite could not run {sql}.") from exc

    # ------------------------------------------------------------------ #
    def last_insert_id(self, cursor: sqlite3.Cursor, table: str, pk_column: str) -> Any:
        return cursor.lastrowid

    @staticmethod
    def _normalize_path(url: str) -> str:
        prefix = "sqlite:///"
        if url.startswith(prefix):
            # settings in the query were parsed into the config already
            url = url.split("?", 1)[0]
        if url in ("sqlite:///:memory:", "file::memory:"):
            return ":memory:"
        if url.startswith(prefix):
            return url[len(prefix) :]
        return url
