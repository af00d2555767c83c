"""
hoodorm public package initialization.

Structures are plain dataclasses annotated with the column helpers below; a
:class:`Session` turns them into SQL for the active dialect.
"""

from .core.errors import (  # noqa: F401
    EmptyTableError,
    MissingPrimaryKeyError,
    ModelConfigurationError,
    NotAStructError,
    ProgrammingError,
    UnmappedTypeError,
    UnsupportedOperationError,
)
from .core.fields import column, embed, index  # noqa: F401
from .core.model import Model, ModelField, ModelIndex, model_from  # noqa: F401
from .core.types import (  # noqa: F401
    Created,
    Id,
    Index,
    Int64,
    UInt,
    UInt64,
    UniqueIndex,
    Updated,
    VarChar,
)
from .dialects import (  # noqa: F401
    DialectRegistry,
    PostgresDialect,
    SQLiteDialect,
    default_registry,
)
from .persistence import Session  # noqa: F401
from .query import JoinKind, QueryBuilder  # noqa: F401
from .schema import Migration, MigrationRunner, SchemaBuilder, discover_migrations  # noqa: F401
from .validation import ValidationCode, ValidationError  # noqa: F401

__all__ = [
    "Created",
    "DialectRegistry",
    "EmptyTableError",
    "Id",
    "Index",
    "Int64",
    "JoinKind",
    "Migration",
    "MigrationRunner",
    "MissingPrimaryKeyError",
    "Model",
    "ModelConfigurationError",
    "ModelField",
    "ModelIndex",
    "NotAStructError",
    "PostgresDialect",
    "ProgrammingError",
    "QueryBuilder",
    "SQLiteDialect",
    "SchemaBuilder",
    "Session",
    "UInt",
    "UInt64",
    "UniqueIndex",
    "UnmappedTypeError",
    "UnsupportedOperationError",
    "Updated",
    "ValidationCode",
    "ValidationError",
    "VarChar",
    "column",
    "default_registry",
    "discover_migrations",
    "embed",
    "index",
    "model_from",
]
