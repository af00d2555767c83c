"""Structured logging helpers for hoodorm."""

from __future__ import annotations

import logging
import os
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterable, Iterator, Optional

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

ROOT_LOGGER = "hoodorm"
LOG_LEVEL_ENV = "HOODORM_LOG_LEVEL"
SLOW_QUERY_ENV = "HOODORM_SLOW_QUERY_MS"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(correlation_id)s | %(name)s | %(message)s"


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


def configure_logging(level: int | str | None = None) -> None:
    """
    Attach the package handler once. ``level`` falls back to ``$HOODORM_LOG_LEVEL``, then INFO.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(CorrelationIdFilter())
    logger.addHandler(handler)
    logger.setLevel(level or os.getenv(LOG_LEVEL_ENV, "").upper() or logging.INFO)


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def set_correlation_id(value: Optional[str] = None) -> str:
    token = value or uuid.uuid4().hex
    _correlation_id.set(token)
    return token


def get_correlation_id() -> str:
    cid = _correlation_id.get()
    if cid is None:
        cid = set_correlation_id()
    return cid


def resolve_slow_query_ms(default: int = 100, override: int | None = None) -> int:
    """
    Pick the slow-query threshold: explicit override, then environment, then default.
    """
    if override is not None:
        return override
    value = os.getenv(SLOW_QUERY_ENV)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logging.getLogger(ROOT_LOGGER).warning("Ignoring invalid %s value %r", SLOW_QUERY_ENV, value)
        return default


@contextmanager
def time_call(
    name: str,
    logger: logging.Logger,
    *,
    sql: str | None = None,
    params: Iterable[Any] | None = None,
    threshold_ms: int = 100,
) -> Iterator[None]:
    """
    Log the duration of the block at DEBUG, or at WARNING with the statement
    once it reaches ``threshold_ms``. ``params`` must already be redacted.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        extra = {"sql": sql, "params": params, "elapsed_ms": elapsed_ms}
        if elapsed_ms >= threshold_ms:
            logger.warning("%s took %.2fms (slow): %s %s", name, elapsed_ms, sql, params, extra=extra)
        else:
            logger.debug("%s took %.2fms", name, elapsed_ms, extra=extra)
