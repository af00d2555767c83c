"""
SQL compilation utilities turning builder state and models into statements.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Tuple

from ..core.errors import EmptyTableError, MissingPrimaryKeyError, ModelConfigurationError
from ..dialects.base import Dialect
from .state import QueryState

if TYPE_CHECKING:
    from ..core.model import Model, ModelField


class MarkerCounter:
    """
    Hands out dialect markers for consecutive argument positions.
    """

    def __init__(self, dialect: Dialect, start: int = 0) -> None:
        self.dialect = dialect
        self.start = start
        self.position = start

    def next(self) -> str:
        marker = self.dialect.marker(self.position)
        self.position += 1
        return marker

    @property
    def count(self) -> int:
        return self.position - self.start


def substitute_markers(sql: str, counter: MarkerCounter) -> str:
    """
    Replace each ``?`` with the counter's next marker in one left-to-right pass.
    """
    if "?" not in sql:
        return sql
    return "".join(counter.next() if char == "?" else char for char in sql)


class SQLCompiler:
    """
    Compile accumulated query state into a SELECT statement and its arguments.

    Clauses are assembled in the fixed order SELECT, JOIN, WHERE, GROUP BY,
    HAVING, ORDER BY, LIMIT, OFFSET. Markers are substituted afterwards by
    textual position, so the argument list must be built in that same order.
    """

    def __init__(self, state: QueryState, dialect: Dialect) -> None:
        self.state = state
        self.dialect = dialect

    def compile(self) -> Tuple[str, List[Any]]:
        state = self.state
        if not state.select_table:
            raise EmptyTableError("Cannot render a query without a select table.")

        table = self.dialect.format_table(state.select_table)
        if state.select_columns:
            selector = ", ".join(self._quote(name) for name in state.select_columns)
        else:
            selector = "*"
        sql_parts: List[str] = [f"SELECT {selector} FROM {table}"]
        params: List[Any] = []

        for join in state.joins:
            joined = self.dialect.format_table(join.table)
            sql_parts.append(
                f"{join.kind.value} JOIN {joined} ON "
                f"{table}.{self.dialect.quote_identifier(join.left_column)} = "
                f"{joined}.{self.dialect.quote_identifier(join.right_column)}"
            )

        if state.where_clauses:
            sql_parts.append("WHERE " + " AND ".join(state.where_clauses))
            params.extend(state.where_args)

        if state.group_by:
            sql_parts.append(
                "GROUP BY " + ", ".join(self._quote(name) for name in state.group_by)
            )

        if state.having:
            sql_parts.append(f"HAVING {state.having}")
            params.extend(state.having_args)

        if state.order_by:
            sql_parts.append("ORDER BY " + ", ".join(self._compile_ordering(key) for key in state.order_by))

        if state.limit > 0:
            sql_parts.append("LIMIT ?")
            params.append(state.limit)

        if state.offset > 0:
            sql_parts.append("OFFSET ?")
            params.append(state.offset)

        sql = substitute_markers(" ".join(sql_parts), MarkerCounter(self.dialect))
        return sql, params

    def _quote(self, name: str) -> str:
        # table-qualified names quote each part; "*" stays bare
        return ".".join(part if part == "*" else self.dialect.quote_identifier(part) for part in name.split("."))

    def _compile_ordering(self, key: str) -> str:
        descending = key.startswith("-")
        name = key[1:] if descending else key
        clause = self._quote(name)
        if descending:
            clause += " DESC"
        return clause


class WriteCompiler:
    """
    Generate INSERT, UPDATE and DELETE statements for a model.
    """

    def __init__(self, dialect: Dialect) -> None:
        self.dialect = dialect

    def _data_fields(self, model: "Model", *, include_pk: bool) -> List["ModelField"]:
        return [f for f in model.fields if include_pk or not f.primary_key]

    def insert_sql(self, model: "Model") -> Tuple[str, List[Any]]:
        pk = model.pk
        # generated keys are left to the database
        include_pk = pk is not None and not pk.auto_increment
        fields = self._data_fields(model, include_pk=include_pk)
        table = self.dialect.format_table(model.table)
        if not fields:
            return f"INSERT INTO {table} DEFAULT VALUES", []
        counter = MarkerCounter(self.dialect)
        columns = ", ".join(self.dialect.quote_identifier(f.name) for f in fields)
        markers = ", ".join(counter.next() for _ in fields)
        return f"INSERT INTO {table} ({columns}) VALUES ({markers})", [f.value for f in fields]

    def update_sql(self, model: "Model") -> Tuple[str, List[Any]]:
        pk = self._require_pk(model, "update")
        fields = self._data_fields(model, include_pk=False)
        if not fields:
            raise ModelConfigurationError(f"Table '{model.table}' has no columns to update.")
        counter = MarkerCounter(self.dialect)
        assignments = ", ".join(
            f"{self.dialect.quote_identifier(f.name)} = {counter.next()}" for f in fields
        )
        sql = (
            f"UPDATE {self.dialect.format_table(model.table)} SET {assignments} "
            f"WHERE {self.dialect.quote_identifier(pk.name)} = {counter.next()}"
        )
        return sql, [f.value for f in fields] + [pk.value]

    def delete_sql(self, model: "Model") -> Tuple[str, List[Any]]:
        pk = self._require_pk(model, "delete")
        counter = MarkerCounter(self.dialect)
        sql = (
            f"DELETE FROM {self.dialect.format_table(model.table)} "
            f"WHERE {self.dialect.quote_identifier(pk.name)} = {counter.next()}"
        )
        return sql, [pk.value]

    @staticmethod
    def _require_pk(model: "Model", action: str) -> "ModelField":
        if model.pk is None:
            raise MissingPrimaryKeyError(f"Cannot {action} rows of '{model.table}' without a primary key.")
        return model.pk
