"""
Query construction APIs for hoodorm.
"""

from .builder import QueryBuilder
from .compiler import MarkerCounter, SQLCompiler, WriteCompiler, substitute_markers
from .state import Join, JoinKind, QueryState

__all__ = [
    "Join",
    "JoinKind",
    "MarkerCounter",
    "QueryBuilder",
    "QueryState",
    "SQLCompiler",
    "WriteCompiler",
    "substitute_markers",
]
