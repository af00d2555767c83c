"""
Transaction manager handling nested transactions and savepoints.
"""

from __future__ import annotations

import itertools
from typing import List, Optional

from ..adapters.base import AdapterTransactionError, DatabaseAdapter
from ..dialects.base import Dialect


class TransactionError(AdapterTransactionError):
    pass


class TransactionManager:
    """
    Coordinates begin/commit/rollback on one connection.

    The outermost level is a real transaction; nested levels become
    savepoints. Levels must be closed innermost first.
    """

    def __init__(self, adapter: DatabaseAdapter, dialect: Dialect) -> None:
        self.adapter = adapter
        self.dialect = dialect
        self._stack: List[Optional[str]] = []
        self._savepoint_counter = itertools.count(1)

    @property
    def depth(self) -> int:
        return len(self._stack)

    def begin(self) -> int:
        """
        Open a level and return its depth token for the matching commit/rollback.
        """
        if self.depth == 0:
            self.adapter.begin()
            self._stack.append(None)
            return self.depth

        if not self.dialect.capabilities.supports_savepoints:
            raise TransactionError("Nested transactions not supported by current dialect.")

        name = self._next_savepoint_name()
        self.adapter.execute(f"SAVEPOINT {name}")
        self._stack.append(name)
        return self.depth

    def commit(self, token: int) -> None:
        savepoint_name = self._pop(token, "commit")
        if savepoint_name is None:
            self.adapter.commit()
            return

        self.adapter.execute(f"RELEASE SAVEPOINT {savepoint_name}")

    def rollback(self, token: int) -> None:
        savepoint_name = self._pop(token, "roll back")
        if savepoint_name is None:
            self.adapter.rollback()
            return

        self.adapter.execute(f"ROLLBACK TO SAVEPOINT {savepoint_name}")
        self.adapter.execute(f"RELEASE SAVEPOINT {savepoint_name}")

    def _pop(self, token: int, action: str) -> Optional[str]:
        if self.depth == 0:
            raise TransactionError(f"No active transaction to {action}.")
        if token != self.depth:
            raise TransactionError(
                f"Cannot {action} transaction level {token} while level {self.depth} is open."
            )
        return self._stack.pop()

    def _next_savepoint_name(self) -> str:
        return f"sp_{next(self._savepoint_counter)}"
