"""
Accumulated SELECT state shared by the builder and the compiler.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, List, Optional


class JoinKind(enum.Enum):
    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    FULL = "FULL"


@dataclass(frozen=True)
class Join:
    """
    Equality join between a column of the selected table and a column of ``table``.
    """

    kind: JoinKind
    table: str
    left_column: str
    right_column: str


@dataclass
class QueryState:
    select_table: str = ""
    select_columns: List[str] = field(default_factory=list)
    joins: List[Join] = field(default_factory=list)
    where_clauses: List[str] = field(default_factory=list)
    where_args: List[Any] = field(default_factory=list)
    group_by: List[str] = field(default_factory=list)
    having: Optional[str] = None
    having_args: List[Any] = field(default_factory=list)
    order_by: List[str] = field(default_factory=list)
    limit: int = 0
    offset: int = 0

    def is_empty(self) -> bool:
        return self == QueryState()

    def copy(self) -> "QueryState":
        return QueryState(
            select_table=self.select_table,
            select_columns=list(self.select_columns),
            joins=list(self.joins),
            where_clauses=list(self.where_clauses),
            where_args=list(self.where_args),
            group_by=list(self.group_by),
            having=self.having,
            having_args=list(self.having_args),
            order_by=list(self.order_by),
            limit=self.limit,
            offset=self.offset,
        )
