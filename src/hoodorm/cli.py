"""
Command line entry point: ``hoodorm <command>``.

Commands operate on ``db/config.json`` and ``db/migrations/`` below the
project root (the current directory unless ``--root`` is given).
"""

from __future__ import annotations

import argparse
import logging
import re
import time
from pathlib import Path
from typing import List, Optional

from .adapters.base import AdapterError
from .config import write_config_template
from .core.errors import ProgrammingError
from .persistence.session import Session
from .schema.migration import MigrationError, MigrationRunner, discover_migrations
from .utils import get_logger, snake_to_camel
from .validation import ValidationError

DB_DIR = "db"
MIGRATIONS_DIR = "migrations"
CONFIG_FILE = "config.json"

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

MIGRATION_TEMPLATE = '''"""
Migration {stamp}_{name}.
"""

from hoodorm import Migration


class {class_name}(Migration):
    def up(self, session):
        pass

    def down(self, session):
        pass
'''

logger = get_logger("cli")


class CommandError(Exception):
    """Raised when a command cannot run with the given arguments."""


def _db_dir(args: argparse.Namespace) -> Path:
    return Path(args.root) / DB_DIR


def create_migration(args: argparse.Namespace) -> str:
    name = args.name
    if not _NAME_RE.match(name):
        raise CommandError(f"invalid migration name {name!r}")
    directory = _db_dir(args) / MIGRATIONS_DIR
    directory.mkdir(parents=True, exist_ok=True)
    stamp = int(time.time())
    path = directory / f"{stamp}_{name}.py"
    path.write_text(
        MIGRATION_TEMPLATE.format(stamp=stamp, name=name, class_name=snake_to_camel(name) or "Migration"),
        encoding="utf-8",
    )
    return f"created migration '{path}'"


def create_config(args: argparse.Namespace) -> str:
    path = write_config_template(_db_dir(args) / CONFIG_FILE)
    return f"created db configuration '{path}'"


def _runner(args: argparse.Namespace, session: Session) -> MigrationRunner:
    directory = _db_dir(args) / MIGRATIONS_DIR
    if not directory.is_dir():
        raise CommandError(f"migration directory '{directory}' does not exist")
    return MigrationRunner(session, discover_migrations(directory))


def db_migrate(args: argparse.Namespace) -> str:
    with Session.load(_db_dir(args) / CONFIG_FILE, args.env) as session:
        applied = _runner(args, session).migrate()
    return f"applied {len(applied)} migrations"


def db_rollback(args: argparse.Namespace) -> str:
    with Session.load(_db_dir(args) / CONFIG_FILE, args.env) as session:
        migration = _runner(args, session).rollback()
    if migration is None:
        return "nothing to roll back"
    return f"rolled back migration {migration.stamp}_{migration.name}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hoodorm", description="hoodorm schema migration tool")
    parser.add_argument("--root", default=".", help="project directory containing db/ (default: .)")
    parser.add_argument("--env", default=None, help="config environment (default: $HOODORM_ENV or development)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log executed SQL")
    commands = parser.add_subparsers(dest="command", required=True)

    migration = commands.add_parser("create:migration", help="create a migration file")
    migration.add_argument("name", help="migration name, e.g. add_users")
    migration.set_defaults(handler=create_migration)

    commands.add_parser("create:config", help="write a db/config.json template").set_defaults(handler=create_config)
    commands.add_parser("db:migrate", help="apply pending migrations").set_defaults(handler=db_migrate)
    commands.add_parser("db:rollback", help="roll back the current migration").set_defaults(handler=db_rollback)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger("hoodorm").setLevel(logging.DEBUG)
    try:
        status = args.handler(args)
    except (AdapterError, CommandError, MigrationError, OSError, ProgrammingError, ValidationError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1
    logger.info(status)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
