"""
Adapter protocol, error hierarchy and connection configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any, Callable, Protocol, Sequence

from ..dialects.base import Dialect
from ..security.dsns import DSNConfig, parse_dsn, redact_source


class AdapterError(RuntimeError):
    """Base error for adapter-related failures."""


class AdapterConfigurationError(AdapterError):
    """Raised when configuration or required dependencies are invalid."""


class UnknownDialectError(AdapterConfigurationError):
    """Raised when a driver name has no registered dialect."""


class AdapterConnectionError(AdapterError):
    """Raised when establishing or using a connection fails."""


class AdapterExecutionError(AdapterError):
    """Raised when SQL execution or parameter validation fails."""


class AdapterTransactionError(AdapterError):
    """Raised when transaction operations fail."""


_BOOLEANS = {"1": True, "true": True, "yes": True, "on": True, "0": False, "false": False, "no": False, "off": False}


def _parse_bool(key: str, value: str) -> bool:
    try:
        return _BOOLEANS[value.strip().lower()]
    except KeyError:
        raise AdapterConfigurationError(f"Invalid boolean value for '{key}': {value!r}") from None


def _parse_number(cast: Callable[[str], Any]) -> Callable[[str, str], Any]:
    def parse(key: str, value: str) -> Any:
        try:
            return cast(value)
        except ValueError as exc:
            raise AdapterConfigurationError(f"Invalid {cast.__name__} value for '{key}': {value!r}") from exc

    return parse


def _passthrough(key: str, value: str) -> str:
    return value


# DSN query keys consumed by ConnectionConfig itself.
_SETTING_PARSERS: dict[str, Callable[[str, str], Any]] = {
    "autocommit": _parse_bool,
    "timeout": _parse_number(float),
    "isolation_level": _passthrough,
}

# Remaining keys are driver options; these are typed, the rest stay strings.
_OPTION_PARSERS: dict[str, Callable[[str, str], Any]] = {
    "connect_timeout": _parse_number(int),
}


@dataclass
class SSLConfig:
    """
    libpq TLS settings collected from ``ssl*`` DSN parameters.
    """

    mode: str | None = None
    rootcert: str | None = None
    cert: str | None = None
    key: str | None = None

    @classmethod
    def from_query(cls, query: dict[str, str]) -> "SSLConfig | None":
        """
        Pop the ``ssl*`` keys out of ``query``; ``None`` when none were given.
        """
        values = {item.name: query.pop(f"ssl{item.name}", None) for item in fields(cls)}
        if not any(values.values()):
            return None
        return cls(**values)

    def postgres_options(self) -> dict[str, Any]:
        return {f"ssl{item.name}": getattr(self, item.name) for item in fields(self) if getattr(self, item.name)}


@dataclass
class ConnectionConfig:
    """
    Normalized connection configuration for adapters.

    ``url`` is the source handed to the driver: a DSN URL, a libpq
    ``key=value`` string or an SQLite file path.
    """

    url: str
    autocommit: bool = True
    isolation_level: str | None = None
    timeout: float | None = None
    options: dict[str, Any] | None = None
    ssl: SSLConfig | None = None
    dsn: DSNConfig | None = None
    source: str | None = None

    @classmethod
    def from_dsn(cls, dsn: str, **overrides: Any) -> "ConnectionConfig":
        """
        Parse a URL-style DSN; keyword arguments override values from its query.
        """
        parsed = parse_dsn(dsn)
        query = dict(parsed.query)
        settings: dict[str, Any] = {
            key: parser(key, query.pop(key)) for key, parser in _SETTING_PARSERS.items() if key in query
        }
        settings["ssl"] = SSLConfig.from_query(query)
        options = {key: _OPTION_PARSERS.get(key, _passthrough)(key, value) for key, value in query.items()}
        options.update(overrides.pop("options", None) or {})
        settings.update(overrides)
        if settings.get("autocommit") is None:
            settings["autocommit"] = True
        return cls(url=dsn, dsn=parsed, options=options or None, **settings)

    @classmethod
    def from_source(cls, source: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a config from a driver source string.

        URL-style sources are parsed as DSNs; anything else (a file path, a
        libpq ``key=value`` string) is handed to the driver untouched.
        """
        if "://" in source:
            return cls.from_dsn(source, **kwargs)
        return cls(url=source, **kwargs)

    @classmethod
    def from_env(cls, env_var: str, **kwargs: Any) -> "ConnectionConfig":
        value = os.getenv(env_var)
        if not value:
            raise AdapterConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_source(value, source=env_var, **kwargs)

    def redacted_dsn(self) -> str:
        """
        Return the connection source safe for logging (credentials masked).
        """
        if self.dsn:
            return self.dsn.redacted()
        return redact_source(self.url)

    def descriptive_label(self) -> str:
        redacted = self.redacted_dsn()
        if self.source:
            return f"{self.source} ({redacted})"
        return redacted


class DatabaseAdapter(Protocol):
    """
    Adapter interface exposing database operations used by higher layers.
    """

    dialect: Dialect
    slow_query_ms: int

    def connect(self, config: ConnectionConfig) -> Any:
        """
        Establish a connection handle using the supplied configuration.
        """

    def close(self) -> None:
        """
        Close underlying resources. Implementations should be idempotent.
        """

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        """
        Execute a single SQL statement returning a cursor-like object.
        """

    def begin(self) -> None:
        """
        Start a transaction on the connection.
        """

    def commit(self) -> None:
        """
        Commit the current transaction.
        """

    def rollback(self) -> None:
        """
        Roll back the current transaction.
        """

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        """
        Retrieve the primary key value generated by the previous insert.
        """
