"""Masking of credentials in connection sources and logged SQL arguments."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

REDACTED_VALUE = "***"

# Matched against lower-cased keys with separators removed.
_SENSITIVE_KEYS = (
    "password",
    "passwd",
    "pwd",
    "secret",
    "token",
    "apikey",
    "accesskey",
    "privatekey",
    "sslkey",
    "sslcert",
    "sslrootcert",
    "sslpassword",
    "sslca",
)

# Matched against lower-cased string arguments bound to statements.
_SENSITIVE_VALUES = (
    "password",
    "passwd",
    "secret",
    "token",
    "api_key",
    "apikey",
    "private_key",
    "bearer ",
    "authorization",
)

# libpq keyword/value pairs: ``host=db password='s3 cret'``
_CONNINFO_PAIR_RE = re.compile(r"(?P<key>\w+)(?P<sep>\s*=\s*)(?P<value>'(?:[^'\\]|\\.)*'|\S+)")


def _compact(key: str) -> str:
    return "".join(ch for ch in key.lower() if ch.isalnum())


def is_sensitive_key(key: str) -> bool:
    compact = _compact(key)
    return any(token in compact for token in _SENSITIVE_KEYS)


def is_sensitive_value(value: str) -> bool:
    normalized = value.lower()
    return any(token in normalized for token in _SENSITIVE_VALUES)


def redact_query_params(query: Mapping[str, str]) -> dict[str, str]:
    return {key: REDACTED_VALUE if is_sensitive_key(key) else value for key, value in query.items()}


def redact_conninfo(conninfo: str) -> str:
    """
    Mask sensitive values in a libpq ``key=value`` connection string.

    Strings without ``=`` pairs (SQLite file paths) are returned unchanged.
    """

    def _mask(match: re.Match[str]) -> str:
        if not is_sensitive_key(match.group("key")):
            return match.group(0)
        return f"{match.group('key')}{match.group('sep')}{REDACTED_VALUE}"

    return _CONNINFO_PAIR_RE.sub(_mask, conninfo)


def redact_value(value: Any, *, key: str | None = None) -> Any:
    if key is not None and is_sensitive_key(key):
        return REDACTED_VALUE
    if isinstance(value, Mapping):
        return {k: redact_value(v, key=str(k)) for k, v in value.items()}
    if isinstance(value, tuple):
        return tuple(redact_value(item) for item in value)
    if isinstance(value, list):
        return [redact_value(item) for item in value]
    if isinstance(value, (bytes, bytearray)):
        decoded = bytes(value).decode("utf-8", errors="ignore")
        return REDACTED_VALUE if decoded and is_sensitive_value(decoded) else value
    if isinstance(value, str) and is_sensitive_value(value):
        return REDACTED_VALUE
    return value


def redact_params(params: Iterable[Any]) -> list[Any]:
    """
    Copy statement arguments for logging with secret-looking values masked.
    """
    return [redact_value(value) for value in params]
