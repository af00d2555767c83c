"""
Utility helpers shared across hoodorm packages.
"""

from .logging import (
    configure_logging,
    get_correlation_id,
    get_logger,
    resolve_slow_query_ms,
    set_correlation_id,
    time_call,
)
from .naming import camel_to_snake, snake_to_camel

__all__ = [
    "camel_to_snake",
    "configure_logging",
    "get_correlation_id",
    "get_logger",
    "resolve_slow_query_ms",
    "set_correlation_id",
    "snake_to_camel",
    "time_call",
]
