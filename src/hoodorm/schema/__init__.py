"""
Schema and migration utilities.
"""

from .builder import SchemaBuilder
from .migration import Migration, MigrationError, MigrationRunner, MigrationState, discover_migrations

__all__ = [
    "Migration",
    "MigrationError",
    "MigrationRunner",
    "MigrationState",
    "SchemaBuilder",
    "discover_migrations",
]
