"""
Fluent query builder accumulating SELECT clauses until rendered.
"""

from __future__ import annotations

from typing import Any, List, Tuple

from ..core.errors import EmptyTableError
from ..core.model import table_name
from ..dialects.base import Dialect
from .compiler import SQLCompiler
from .state import Join, JoinKind, QueryState


class QueryBuilder:
    """
    Single-owner mutable accumulator for one query at a time.

    Mutators return ``self`` for chaining. :meth:`render` is terminal and
    resets the accumulated state, so one builder can be reused for the next
    query but must not be shared between threads.
    """

    def __init__(self, dialect: Dialect) -> None:
        self.dialect = dialect
        self.state = QueryState()

    def select(self, table: Any, *columns: str) -> "QueryBuilder":
        name = table_name(table)
        if not name:
            raise EmptyTableError("select() needs a table name or dataclass.")
        self.state.select_table = name
        self.state.select_columns = list(columns)
        return self

    def where(self, predicate: str, *args: Any) -> "QueryBuilder":
        self.state.where_clauses.append(predicate)
        self.state.where_args.extend(args)
        return self

    def join(self, kind: JoinKind | str, table: Any, left_column: str, right_column: str) -> "QueryBuilder":
        if isinstance(kind, str):
            kind = JoinKind[kind.upper()]
        self.state.joins.append(Join(kind, table_name(table), left_column, right_column))
        return self

    def group_by(self, *columns: str) -> "QueryBuilder":
        self.state.group_by.extend(columns)
        return self

    def having(self, condition: str, *args: Any) -> "QueryBuilder":
        self.state.having = condition
        self.state.having_args = list(args)
        return self

    def order_by(self, *keys: str) -> "QueryBuilder":
        self.state.order_by.extend(keys)
        return self

    def limit(self, count: int) -> "QueryBuilder":
        self.state.limit = count
        return self

    def offset(self, count: int) -> "QueryBuilder":
        self.state.offset = count
        return self

    def render(self) -> Tuple[str, List[Any]]:
        try:
            return SQLCompiler(self.state, self.dialect).compile()
        finally:
            self.reset()

    def reset(self) -> None:
        self.state = QueryState()
