"""
Dialect strategies and the registry that resolves them by driver name.
"""

from .base import BaseDialect, Dialect, DialectCapabilities
from .postgres import PostgresDialect
from .registry import DialectRegistration, DialectRegistry, default_registry
from .sqlite import SQLiteDialect

__all__ = [
    "BaseDialect",
    "Dialect",
    "DialectCapabilities",
    "DialectRegistration",
    "DialectRegistry",
    "PostgresDialect",
    "SQLiteDialect",
    "default_registry",
]
