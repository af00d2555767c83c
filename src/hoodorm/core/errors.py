"""
Programmer-error hierarchy for hoodorm.

These exceptions signal misuse that no valid runtime state could cause. They
are raised eagerly and never caught inside the package.
"""

from __future__ import annotations


class ProgrammingError(Exception):
    """Base class for errors caused by incorrect use of the API."""


class NotAStructError(ProgrammingError, TypeError):
    """Raised when a dataclass was required but something else was supplied."""


class ModelConfigurationError(ProgrammingError):
    """Raised when a structure's column declarations are inconsistent."""


class MissingPrimaryKeyError(ModelConfigurationError):
    """Raised when an operation needs a primary key the model does not declare."""


class UnmappedTypeError(ProgrammingError, TypeError):
    """Raised when a dialect cannot express a value's type as a column type."""


class EmptyTableError(ProgrammingError, ValueError):
    """Raised when a query is rendered without a target table."""


class UnsupportedOperationError(ProgrammingError):
    """Raised when a dialect cannot express the requested statement."""
