"""
Explicit registry mapping driver names to dialects and adapter factories.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterator

from .base import Dialect

if TYPE_CHECKING:
    from ..adapters.base import DatabaseAdapter


AdapterFactory = Callable[[Dialect], "DatabaseAdapter"]


@dataclass(frozen=True)
class DialectRegistration:
    name: str
    dialect: Dialect
    adapter_factory: AdapterFactory

    def create_adapter(self) -> "DatabaseAdapter":
        return self.adapter_factory(self.dialect)


class DialectRegistry:
    """
    Driver-name lookup consulted when opening a connection by name.

    Build one at startup (usually via :func:`default_registry`) and pass it to
    whatever opens sessions.
    """

    def __init__(self) -> None:
        self._entries: dict[str, DialectRegistration] = {}

    def register(self, name: str, dialect: Dialect, adapter_factory: AdapterFactory) -> None:
        if name in self._entries:
            raise ValueError(f"Dialect '{name}' is already registered")
        self._entries[name] = DialectRegistration(name, dialect, adapter_factory)

    def get(self, name: str) -> DialectRegistration:
        from ..adapters.base import UnknownDialectError

        try:
            return self._entries[name]
        except KeyError:
            known = ", ".join(sorted(self._entries)) or "none"
            raise UnknownDialectError(f"No dialect registered for driver '{name}' (known: {known})") from None

    def dialect(self, name: str) -> Dialect:
        return self.get(name).dialect

    def names(self) -> list[str]:
        return sorted(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[DialectRegistration]:
        return iter(self._entries.values())


def default_registry() -> DialectRegistry:
    """
    Build a fresh registry holding the shipped ``postgres`` and ``sqlite3`` dialects.
    """
    from ..adapters.postgres import PostgresAdapter
    from ..adapters.sqlite import SQLiteAdapter
    from .postgres import PostgresDialect
    from .sqlite import SQLiteDialect

    registry = DialectRegistry()
    registry.register(PostgresDialect.name, PostgresDialect(), PostgresAdapter)
    registry.register(SQLiteDialect.name, SQLiteDialect(), SQLiteAdapter)
    return registry
