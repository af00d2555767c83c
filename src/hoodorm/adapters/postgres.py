"""
PostgreSQL database adapter implementation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Sequence

from ..dialects.postgres import PostgresDialect
from ..security.redaction import redact_params
from ..utils import get_logger, resolve_slow_query_ms, time_call
from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    AdapterExecutionError,
    AdapterTransactionError,
    ConnectionConfig,
    DatabaseAdapter,
)

_MARKER_RE = re.compile(r"\$(\d+)")


def _load_driver():
    try:
        import psycopg

        return psycopg
    except ImportError:
        return None


@dataclass
class PostgresConnectionState:
    connection: Any
    config: ConnectionConfig
    driver: Any


class PostgresAdapter(DatabaseAdapter):
    """
    Adapter wrapping the psycopg PostgreSQL driver.

    Connections use psycopg's ``RawCursor`` so statements keep the server-side
    ``$1, $2, ...`` markers the dialect emits.
    """

    def __init__(self, dialect: PostgresDialect | None = None, slow_query_ms: int | None = None) -> None:
        self.dialect = dialect or PostgresDialect()
        self._state: PostgresConnectionState | None = None
        self.logger = get_logger("adapters.postgres")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    @staticmethod
    def _driver_options(config: ConnectionConfig) -> dict[str, Any]:
        # explicit options beat ssl settings, which beat the generic timeout
        merged: dict[str, Any] = {}
        if config.timeout:
            merged["connect_timeout"] = int(config.timeout)
        if config.ssl:
            merged.update(config.ssl.postgres_options())
        merged.update(config.options or {})
        return merged

    def connect(self, config: ConnectionConfig) -> Any:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError("psycopg is required to use PostgresAdapter.")

        self.logger.info(
            "Opening PostgreSQL connection to %s (autocommit=%s)",
            config.descriptive_label(),
            config.autocommit,
        )
        try:
            connection = driver.connect(
                config.url,
                cursor_factory=driver.RawCursor,
                **self._driver_options(config),
            )
        except driver.Error as exc:
            raise AdapterConnectionError(
                f"Could not connect to PostgreSQL at {config.descriptive_label()}."
            ) from exc

        connection.autocommit = bool(config.autocommit)
        if config.isolation_level:
            connection.isolation_level = config.isolation_level
        self._state = PostgresConnectionState(connection, config, driver)
        return connection

    def close(self) -> None:
        state, self._state = self._state, None
        if state is not None:
            state.connection.close()

    def _ensure_connection(self) -> Any:
        if self._state is None:
            raise AdapterConnectionError("PostgresAdapter is not connected.")
        if getattr(self._state.connection, "closed", False):
            raise AdapterConnectionError(
                f"PostgreSQL connection to {self._state.config.descriptive_label()} is closed."
            )
        return self._state.connection

    def execute(self, sql: str, params: Sequence[Any] | None = None):
        connection = self._ensure_connection()
        cursor = connection.cursor()
        params = params or ()
        self._validate_params(sql, params)
        with time_call(
            "postgres.execute",
            self.logger,
            sql=sql,
            params=redact_params(params),
            threshold_ms=self.slow_query_ms,
        ):
            try:
                cursor.execute(sql, params)
            except self._state.driver.Error as exc:
                raise AdapterExecutionError(f"PostgreSQL rejected statement: {exc}") from exc
        return cursor

    def begin(self) -> None:
        connection = self._ensure_connection()
        if not getattr(connection, "autocommit", False):
            # psycopg opens the transaction implicitly on the next statement
            return
        try:
            connection.cursor().execute("BEGIN")
        except self._state.driver.Error as exc:
            raise AdapterTransactionError("PostgreSQL could not begin a transaction.") from exc

    def commit(self) -> None:
        connection = self._ensure_connection()
        try:
            connection.commit()
        except self._state.driver.Error as exc:
            raise AdapterTransactionError("PostgreSQL commit failed.") from exc

    def rollback(self) -> None:
        connection = self._ensure_connection()
        try:
            connection.rollback()
        except self._state.driver.Error as exc:
            raise AdapterTransactionError("PostgreSQL rollback failed.") from exc

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        row = cursor.fetchone()
        if not row:
            raise AdapterExecutionError("No RETURNING data available for last insert id.")
        return row[0]

    @staticmethod
    def _count_placeholders(sql: str) -> int:
        positions = [int(match) for match in _MARKER_RE.findall(sql)]
        return max(positions, default=0)

    def _validate_params(self, sql: str, params: Sequence[Any]) -> None:
        placeholder_count = self._count_placeholders(sql)
        if placeholder_count == 0:
            if params:
                raise AdapterExecutionError(
                    "Parameters provided but SQL statement has no placeholders."
                )
            return
        if placeholder_count != len(params):
            raise AdapterExecutionError(
                f"Parameter count mismatch: expected {placeholder_count}, received {len(params)}."
            )
