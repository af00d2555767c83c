"""
Migration runner applying timestamped schema units with version tracking.
"""

from __future__ import annotations

import importlib.util
import inspect
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional

from ..core.types import Id, Int64
from ..utils import get_logger

if TYPE_CHECKING:
    from ..persistence.session import Session


MIGRATION_FILE_RE = re.compile(r"^(?P<stamp>\d+)_(?P<name>\w+)\.py$")


class MigrationError(RuntimeError):
    """Raised when stored migration state does not match the available units."""


class Migration:
    """
    One schema change. Subclasses implement :meth:`up` and :meth:`down`, each
    receiving a transactional session.
    """

    stamp: int = 0
    name: str = ""

    def up(self, session: "Session") -> None:
        raise NotImplementedError

    def down(self, session: "Session") -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.stamp}_{self.name}>"


@dataclass
class MigrationState:
    """Single bookkeeping row holding the last applied stamp."""

    __table__ = "hoodorm_migrations"

    id: Id = Id(0)
    current: Int64 = Int64(0)


class MigrationRunner:
    """
    Applies pending migrations in ascending stamp order, one transaction each.
    """

    def __init__(self, session: "Session", migrations: Mapping[int, Migration] | Iterable[Migration]) -> None:
        self.session = session
        if isinstance(migrations, Mapping):
            units = dict(migrations)
            for stamp, migration in units.items():
                migration.stamp = stamp
        else:
            units = {}
            for migration in migrations:
                if migration.stamp in units:
                    raise MigrationError(
                        f"Duplicate migration stamp {migration.stamp}: {units[migration.stamp]!r} and {migration!r}"
                    )
                units[migration.stamp] = migration
        self.migrations: Dict[int, Migration] = dict(sorted(units.items()))
        self.logger = get_logger("schema.migration")

    def _require_known(self, stamp: int) -> None:
        if stamp and stamp not in self.migrations:
            raise MigrationError(f"Current migration {stamp} is not among the available migrations")

    def _ensure_table(self) -> None:
        self.session.create_table_if_not_exists(MigrationState)

    def _state(self) -> MigrationState:
        self._ensure_table()
        row = self.session.find_one(MigrationState)
        return row if row is not None else MigrationState()

    def current(self) -> int:
        return int(self._state().current)

    def pending(self) -> List[Migration]:
        current = self.current()
        return [migration for stamp, migration in self.migrations.items() if stamp > current]

    def migrate(self) -> List[Migration]:
        """
        Apply every pending migration and return the ones applied.
        """
        state = self._state()
        self._require_known(int(state.current))
        applied: List[Migration] = []
        for stamp, migration in self.migrations.items():
            if stamp <= state.current:
                continue
            with self.session.transaction() as tx:
                migration.up(tx)
                state.current = Int64(stamp)
                tx.save(state)
            self.logger.info("Applied migration %s_%s", stamp, migration.name)
            applied.append(migration)
        self.logger.info("Applied %d migrations", len(applied))
        return applied

    def rollback(self) -> Optional[Migration]:
        """
        Undo the current migration and return it, or ``None`` when nothing is applied.
        """
        state = self._state()
        current = int(state.current)
        if current == 0:
            self.logger.info("No migrations to roll back")
            return None
        self._require_known(current)
        migration = self.migrations[current]
        previous = max((stamp for stamp in self.migrations if stamp < current), default=0)
        with self.session.transaction() as tx:
            migration.down(tx)
            state.current = Int64(previous)
            tx.save(state)
        self.logger.info("Rolled back migration %s_%s", current, migration.name)
        return migration


def discover_migrations(directory: str | os.PathLike[str]) -> Dict[int, Migration]:
    """
    Load ``<stamp>_<name>.py`` files from ``directory``.

    Each file must define exactly one :class:`Migration` subclass.
    """
    migrations: Dict[int, Migration] = {}
    for path in sorted(Path(directory).glob("*.py")):
        match = MIGRATION_FILE_RE.match(path.name)
        if match is None:
            continue
        stamp = int(match.group("stamp"))
        if stamp in migrations:
            raise MigrationError(f"Duplicate migration stamp {stamp} in {directory}")
        module_name = f"hoodorm_migration_{stamp}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise MigrationError(f"Cannot load migration file {path}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        classes = [
            obj
            for obj in vars(module).values()
            if inspect.isclass(obj) and issubclass(obj, Migration) and obj.__module__ == module_name
        ]
        if len(classes) != 1:
            raise MigrationError(f"{path} must define exactly one Migration subclass, found {len(classes)}")
        migration = classes[0]()
        migration.stamp = stamp
        migration.name = match.group("name")
        migrations[stamp] = migration
    return migrations
