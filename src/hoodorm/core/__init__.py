"""
Core building blocks for hoodorm structures and metadata handling.
"""

from .errors import (
    EmptyTableError,
    MissingPrimaryKeyError,
    ModelConfigurationError,
    NotAStructError,
    ProgrammingError,
    UnmappedTypeError,
    UnsupportedOperationError,
)
from .fields import ColumnSpec, IndexSpec, column, embed, index
from .model import Model, ModelField, ModelIndex, model_from, table_name
from .types import (
    Created,
    Id,
    Index,
    Int64,
    UInt,
    UInt64,
    UniqueIndex,
    Updated,
    ValueKind,
    VarChar,
    classify,
)

__all__ = [
    "ColumnSpec",
    "Created",
    "EmptyTableError",
    "Id",
    "Index",
    "IndexSpec",
    "Int64",
    "MissingPrimaryKeyError",
    "Model",
    "ModelConfigurationError",
    "ModelField",
    "ModelIndex",
    "NotAStructError",
    "ProgrammingError",
    "UInt",
    "UInt64",
    "UniqueIndex",
    "UnmappedTypeError",
    "UnsupportedOperationError",
    "Updated",
    "ValueKind",
    "VarChar",
    "classify",
    "column",
    "embed",
    "index",
    "model_from",
    "table_name",
]
