"""
Session facade executing builder queries, saves and schema changes.
"""

from __future__ import annotations

import copy
import dataclasses
import os
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Type, TypeVar

from ..adapters.base import (
    AdapterConnectionError,
    ConnectionConfig,
    DatabaseAdapter,
)
from ..config import load_config
from ..core.errors import MissingPrimaryKeyError, ModelConfigurationError, NotAStructError
from ..core.model import (
    ColumnTarget,
    Model,
    column_targets,
    model_from,
    new_instance,
    set_path,
    table_name,
)
from ..core.types import Created, Updated, coerce, unwrap_optional
from ..dialects.base import Dialect
from ..dialects.registry import DialectRegistry, default_registry
from ..hooks import HookDispatcher
from ..query.builder import QueryBuilder
from ..query.compiler import MarkerCounter, SQLCompiler, WriteCompiler, substitute_markers
from ..schema.builder import SchemaBuilder
from ..security.redaction import redact_params
from ..utils import camel_to_snake, get_logger, time_call
from ..validation import validate_instance
from .transaction import TransactionError, TransactionManager

T = TypeVar("T")

SCHEMA_HEADER = (
    "from dataclasses import dataclass\n"
    "\n"
    "from hoodorm import (\n"
    "    Created,\n"
    "    Id,\n"
    "    Index,\n"
    "    Int64,\n"
    "    UInt,\n"
    "    UInt64,\n"
    "    UniqueIndex,\n"
    "    Updated,\n"
    "    VarChar,\n"
    "    column,\n"
    "    index,\n"
    ")\n"
)


class Session(QueryBuilder):
    """
    Execution facade over one database connection.

    The session is also a :class:`QueryBuilder`: clauses accumulate on it and
    :meth:`find` renders and resets them. :meth:`begin` returns a derived
    session bound to a transaction on the same connection; the parent and the
    derived handle no longer share builder state after the copy.
    """

    def __init__(
        self,
        adapter: Optional[DatabaseAdapter] = None,
        *,
        dialect: Optional[Dialect] = None,
        config: Optional[ConnectionConfig] = None,
        dry_run: bool = False,
    ) -> None:
        if adapter is None and dialect is None:
            raise ValueError("Session needs an adapter or a dialect.")
        super().__init__(dialect or adapter.dialect)
        self.adapter = adapter
        self.dry_run = dry_run
        self.schema: List[Model] = []
        self.writer = WriteCompiler(self.dialect)
        self.schema_builder = SchemaBuilder(self.dialect)
        self.hooks = HookDispatcher()
        self.transaction_manager = TransactionManager(adapter, self.dialect) if adapter else None
        self.logger = get_logger("persistence.session")
        self._tx_token: Optional[int] = None
        if adapter is not None and config is not None:
            adapter.connect(config)

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #
    @classmethod
    def open(
        cls,
        driver: str,
        source: str,
        *,
        registry: Optional[DialectRegistry] = None,
        **options: Any,
    ) -> "Session":
        """
        Connect by driver name (``postgres`` or ``sqlite3`` by default).
        """
        registration = (registry or default_registry()).get(driver)
        config = ConnectionConfig.from_source(source, **options)
        return cls(registration.create_adapter(), dialect=registration.dialect, config=config)

    @classmethod
    def load(
        cls,
        path: str | os.PathLike[str],
        env: Optional[str] = None,
        *,
        registry: Optional[DialectRegistry] = None,
    ) -> "Session":
        environment = load_config(path, env)
        return cls.open(environment.driver, environment.source, registry=registry)

    @classmethod
    def dry(cls, dialect: Dialect) -> "Session":
        """
        Session that only tracks schema changes and never touches a database.
        """
        return cls(dialect=dialect, dry_run=True)

    def close(self) -> None:
        if self.adapter is not None:
            self.adapter.close()

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    @property
    def is_transactional(self) -> bool:
        return self._tx_token is not None

    def begin(self) -> "Session":
        manager = self._require_manager()
        tx = copy.copy(self)
        tx.state = self.state.copy()
        tx._tx_token = manager.begin()
        self.logger.debug("Opened transaction level %s", tx._tx_token)
        return tx

    def commit(self) -> None:
        if self._tx_token is None:
            return
        token, self._tx_token = self._tx_token, None
        self._require_manager().commit(token)

    def rollback(self) -> None:
        if self._tx_token is None:
            return
        token, self._tx_token = self._tx_token, None
        self._require_manager().rollback(token)

    @contextmanager
    def transaction(self) -> Iterator["Session"]:
        """
        Yield a transactional session, committing on success and rolling back on error.
        """

        tx = self.begin()
        try:
            yield tx
        except Exception:
            tx.rollback()
            raise
        else:
            tx.commit()

    # ------------------------------------------------------------------ #
    # Raw execution
    # ------------------------------------------------------------------ #
    def exec(self, sql: str, *args: Any) -> Any:
        """
        Execute ``sql`` with ``?`` placeholders and return the driver cursor.
        """
        try:
            return self._execute(self._substitute(sql), args)
        finally:
            self.reset()

    def query_row(self, sql: str, *args: Any) -> Optional[Sequence[Any]]:
        cursor = self._execute(self._substitute(sql), args)
        return cursor.fetchone()

    def _substitute(self, sql: str) -> str:
        return substitute_markers(sql, MarkerCounter(self.dialect))

    def _execute(self, sql: str, args: Iterable[Any]) -> Any:
        adapter = self._require_adapter()
        params = [self.dialect.convert_value(value) for value in args]
        with time_call(
            "session.execute",
            self.logger,
            sql=sql,
            params=redact_params(params),
            threshold_ms=adapter.slow_query_ms,
        ):
            return adapter.execute(sql, params)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    def find(self, cls: Type[T]) -> List[T]:
        """
        Run the accumulated query and scan every row into a new ``cls`` instance.

        The select table defaults to the one derived from ``cls``. Columns
        without a matching field are ignored; fields without a matching
        column keep their zero value.
        """
        try:
            if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
                raise NotAStructError(f"find() expects a dataclass type, got {cls!r}")
            if not self.state.select_table:
                self.select(cls)
            sql, args = SQLCompiler(self.state, self.dialect).compile()
            cursor = self._execute(sql, args)
            columns = [description[0] for description in cursor.description or ()]
            targets = column_targets(cls)
            return [self._scan(cls, targets, columns, row) for row in cursor.fetchall()]
        finally:
            self.reset()

    def find_one(self, cls: Type[T]) -> Optional[T]:
        self.limit(1)
        rows = self.find(cls)
        return rows[0] if rows else None

    def _scan(self, cls: Type[T], targets: dict[str, ColumnTarget], columns: List[str], row: Sequence[Any]) -> T:
        instance = new_instance(cls)
        for column, value in zip(columns, row):
            target = targets.get(camel_to_snake(column))
            if target is None:
                continue
            set_path(instance, target.path, self.dialect.value_to_field(value, target.kind, target.annotation))
        return instance

    # ------------------------------------------------------------------ #
    # Persistence
    # ------------------------------------------------------------------ #
    def validate(self, obj: Any) -> None:
        validate_instance(obj)

    def save(self, obj: Any) -> Any:
        """
        Insert or update ``obj`` and return its primary key.

        Generated keys are written back to ``obj`` after an insert, as are
        ``Created``/``Updated`` timestamps.
        """
        validate_instance(obj)
        self.hooks.fire("before_save", obj, session=self)
        model = self._require_pk(model_from(obj))
        pk = model.pk
        if pk.auto_increment:
            is_update = not pk.is_zero()
        else:
            is_update = self._exists(model)

        if is_update:
            self.hooks.fire("before_update", obj, session=self)
            model = model_from(obj)
            pk_value = self._update(obj, model)
            self.hooks.fire("after_update", obj, session=self)
        else:
            self.hooks.fire("before_insert", obj, session=self)
            model = model_from(obj)
            pk_value = self._insert(obj, model)
            self.hooks.fire("after_insert", obj, session=self)
        self.hooks.fire("after_save", obj, session=self)
        return pk_value

    def save_all(self, objs: Iterable[Any]) -> List[Any]:
        """
        Save each object in order, stopping at the first failure.
        """
        return [self.save(obj) for obj in self._require_batch(objs)]

    def delete(self, obj: Any) -> Any:
        model = self._require_pk(model_from(obj))
        self.hooks.fire("before_delete", obj, session=self)
        sql, args = self.writer.delete_sql(model)
        self._execute(sql, args)
        self.hooks.fire("after_delete", obj, session=self)
        return model.pk.value

    def delete_all(self, objs: Iterable[Any]) -> List[Any]:
        return [self.delete(obj) for obj in self._require_batch(objs)]

    def _insert(self, obj: Any, model: Model) -> Any:
        self._stamp(obj, model, Created, Updated)
        sql, args = self.writer.insert_sql(model)
        pk = model.pk
        if pk.auto_increment:
            pk_value, handled = self.dialect.insert(self, model, sql, args)
            if not handled:
                cursor = self._execute(sql, args)
                pk_value = self._require_adapter().last_insert_id(cursor, model.table, pk.name)
            set_path(obj, pk.path, coerce(pk.annotation, pk_value))
        else:
            self._execute(sql, args)
            pk_value = pk.value
        return pk_value

    def _update(self, obj: Any, model: Model) -> Any:
        self._stamp(obj, model, Updated)
        sql, args = self.writer.update_sql(model)
        self._execute(sql, args)
        return model.pk.value

    def _exists(self, model: Model) -> bool:
        if model.pk.is_zero():
            return False
        table = self.dialect.format_table(model.table)
        column = self.dialect.quote_identifier(model.pk.name)
        return self.query_row(f"SELECT 1 FROM {table} WHERE {column} = ?", model.pk.value) is not None

    @staticmethod
    def _stamp(obj: Any, model: Model, *kinds: type) -> None:
        now = datetime.now(timezone.utc)
        for field in model.fields:
            annotation = unwrap_optional(field.annotation)
            if isinstance(annotation, type) and issubclass(annotation, kinds):
                field.value = coerce(annotation, now)
                set_path(obj, field.path, field.value)

    @staticmethod
    def _require_pk(model: Model) -> Model:
        if model.pk is None:
            raise MissingPrimaryKeyError(f"Table '{model.table}' has no primary key.")
        return model

    @staticmethod
    def _require_batch(objs: Iterable[Any]) -> List[Any]:
        if isinstance(objs, (str, bytes)) or dataclasses.is_dataclass(objs) or not isinstance(objs, Iterable):
            raise NotAStructError(f"Expected a sequence of dataclass instances, got {objs!r}")
        return list(objs)

    # ------------------------------------------------------------------ #
    # Schema changes
    # ------------------------------------------------------------------ #
    def create_table(self, table: Any, *, if_not_exists: bool = False) -> None:
        """
        Create the table (and its declared indexes) for a dataclass.
        """
        model = model_from(table)
        self.schema[:] = [tracked for tracked in self.schema if tracked.table != model.table]
        self.schema.append(model)
        if self.dry_run:
            return
        with self.transaction() as tx:
            tx._execute(self.schema_builder.create_table_sql(model, if_not_exists=if_not_exists), ())
            for sql in self.schema_builder.create_indexes_sql(model, if_not_exists=if_not_exists):
                tx._execute(sql, ())

    def create_table_if_not_exists(self, table: Any) -> None:
        self.create_table(table, if_not_exists=True)

    def drop_table(self, table: Any, *, if_exists: bool = False) -> None:
        name = table_name(table)
        self.schema[:] = [tracked for tracked in self.schema if tracked.table != name]
        if self.dry_run:
            return
        self._execute(self.schema_builder.drop_table_sql(name, if_exists=if_exists), ())

    def drop_table_if_exists(self, table: Any) -> None:
        self.drop_table(table, if_exists=True)

    def rename_table(self, table: Any, new_name: str) -> None:
        name = table_name(table)
        for tracked in self.schema:
            if tracked.table == name:
                tracked.table = new_name
        if self.dry_run:
            return
        self._execute(self.schema_builder.rename_table_sql(name, new_name), ())

    def add_columns(self, table: Any, columns: Any) -> None:
        """
        Add every column declared on the ``columns`` dataclass to ``table``.
        """
        additions = model_from(columns)
        if additions.pk is not None:
            raise ModelConfigurationError("Primary keys can only be declared when the table is created.")
        tracked = self._tracked(table_name(table))
        tracked.fields.extend(additions.fields)
        self._run_all(self.schema_builder.add_column_sql(tracked.table, field) for field in additions.fields)

    def rename_column(self, table: Any, column: str, new_name: str) -> None:
        tracked = self._tracked(table_name(table))
        for field in tracked.fields:
            if field.name == column:
                field.name = new_name
        if self.dry_run:
            return
        self._execute(self.schema_builder.rename_column_sql(tracked.table, column, new_name), ())

    def change_columns(self, table: Any, columns: Any) -> None:
        changes = model_from(columns)
        tracked = self._tracked(table_name(table))
        replacements = {field.name: field for field in changes.fields}
        tracked.fields = [replacements.get(field.name, field) for field in tracked.fields]
        self._run_all(self.schema_builder.change_column_sql(tracked.table, field) for field in changes.fields)

    def remove_columns(self, table: Any, columns: Any) -> None:
        names = [field.name for field in model_from(columns).fields]
        tracked = self._tracked(table_name(table))
        tracked.fields = [field for field in tracked.fields if field.name not in names]
        self._run_all(self.schema_builder.drop_column_sql(tracked.table, name) for name in names)

    def create_index(self, table: Any, indexes: Any) -> None:
        """
        Create the indexes declared with ``index(...)`` on the ``indexes`` dataclass.
        """
        declared = model_from(indexes).indexes
        tracked = self._tracked(table_name(table))
        tracked.indexes.extend(declared)
        self._run_all(
            self.schema_builder.create_index_sql(item.name, tracked.table, item.unique, *item.columns)
            for item in declared
        )

    def drop_index(self, table: Any, name: str) -> None:
        tracked = self._tracked(table_name(table))
        tracked.indexes = [item for item in tracked.indexes if item.name != name]
        if self.dry_run:
            return
        self._execute(self.schema_builder.drop_index_sql(name), ())

    def schema_definition(self) -> str:
        """
        Render the tracked schema as dataclass source code.
        """
        if not self.schema:
            return ""
        declarations = "\n\n\n".join(model.python_declaration() for model in self.schema)
        return f"{SCHEMA_HEADER}\n\n{declarations}\n"

    def _tracked(self, name: str) -> Model:
        for tracked in self.schema:
            if tracked.table == name:
                return tracked
        tracked = Model(table=name)
        self.schema.append(tracked)
        return tracked

    def _run_all(self, statements: Iterable[str]) -> None:
        if self.dry_run:
            return
        statements = list(statements)
        if not statements:
            return
        with self.transaction() as tx:
            for sql in statements:
                tx._execute(sql, ())

    # ------------------------------------------------------------------ #
    def _require_adapter(self) -> DatabaseAdapter:
        if self.adapter is None:
            raise AdapterConnectionError("Session has no database connection (dry run).")
        return self.adapter

    def _require_manager(self) -> TransactionManager:
        if self.transaction_manager is None:
            raise TransactionError("Session has no database connection (dry run).")
        return self.transaction_manager
