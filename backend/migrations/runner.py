"""
Ordered, tracked migration runner.

Each ``Migration`` is a named step with explicit prerequisites. The runner
orders steps topologically, skips the ones already recorded in the tracking
table, and applies each remaining step in its own transaction together with
its tracking row, so a step is either fully applied and recorded or not at all.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

TRACKING_TABLE = "__drizzle_migrations"


class MigrationError(RuntimeError):
    """Raised when migrations cannot be ordered or a step fails."""

    def __init__(self, message: str, migration: Optional[str] = None):
        self.migration = migration
        super().__init__(message)


@dataclass(frozen=True)
class Migration:
    name: str
    description: str
    apply: Callable[[Connection], None]
    requires: tuple = ()
    # Table rebuilds need foreign key enforcement off around the transaction
    disable_foreign_keys: bool = False


@dataclass
class MigrationReport:
    applied: list = field(default_factory=list)
    skipped: list = field(default_factory=list)


def ensure_tracking_table(conn: Connection) -> None:
    conn.execute(text(f"""
        CREATE TABLE IF NOT EXISTS {TRACKING_TABLE} (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            hash TEXT NOT NULL UNIQUE,
            created_at INTEGER NOT NULL
        )
    """))


def applied_migrations(conn: Connection) -> list:
    """(hash, created_at) pairs from the tracking table, oldest first."""
    ensure_tracking_table(conn)
    rows = conn.execute(text(
        f"SELECT hash, created_at FROM {TRACKING_TABLE} ORDER BY created_at, id"
    )).fetchall()
    return [(row[0], row[1]) for row in rows]


def record_migration(conn: Connection, name: str, created_at: Optional[int] = None) -> None:
    """Record a migration as applied; recording it twice is a no-op."""
    ensure_tracking_table(conn)
    if created_at is None:
        created_at = int(time.time() * 1000)
    conn.execute(
        text(f"INSERT OR IGNORE INTO {TRACKING_TABLE} (hash, created_at) VALUES (:hash, :created_at)"),
        {"hash": name, "created_at": created_at},
    )


def order_migrations(migrations: Sequence[Migration]) -> list:
    """Topologically order migrations by their prerequisites.

    Among steps whose prerequisites are met, declaration order wins.
    """
    names = set()
    for migration in migrations:
        if migration.name in names:
            raise MigrationError(f"Duplicate migration name: {migration.name}", migration.name)
        names.add(migration.name)

    for migration in migrations:
        for requirement in migration.requires:
            if requirement not in names:
                raise MigrationError(
                    f"Migration {migration.name} requires unknown migration {requirement}",
                    migration.name,
                )

    remaining = list(migrations)
    done = set()
    ordered = []
    while remaining:
        for migration in remaining:
            if all(requirement in done for requirement in migration.requires):
                break
        else:
            stuck = ", ".join(m.name for m in remaining)
            raise MigrationError(f"Migration dependency cycle among: {stuck}")
        remaining.remove(migration)
        ordered.append(migration)
        done.add(migration.name)
    return ordered


def plan(conn: Connection, migrations: Sequence[Migration]) -> list:
    """Ordered list of migrations not yet recorded in the tracking table."""
    done = {name for name, _created_at in applied_migrations(conn)}
    return [migration for migration in order_migrations(migrations) if migration.name not in done]


def apply_migration(engine: Engine, migration: Migration) -> None:
    """Apply one migration and record it in a single transaction."""
    with engine.connect() as conn:
        foreign_keys = None
        if migration.disable_foreign_keys:
            # Pooled connections keep PRAGMA state; restore what we found
            foreign_keys = conn.exec_driver_sql("PRAGMA foreign_keys").scalar()
            conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
        try:
            migration.apply(conn)
            record_migration(conn, migration.name)
            conn.commit()
        except Exception as e:
            conn.rollback()
            raise MigrationError(f"Migration {migration.name} failed: {e}", migration.name) from e
        finally:
            if foreign_keys:
                conn.exec_driver_sql("PRAGMA foreign_keys=ON")
                conn.commit()


def run_migrations(
    engine: Engine,
    migrations: Sequence[Migration],
    only: Optional[Iterable[str]] = None,
) -> MigrationReport:
    """Apply every pending migration in dependency order.

    ``only`` restricts the run to the named steps (their prerequisites must
    already be applied or be named too). Stops at the first failure.
    """
    report = MigrationReport()
    with engine.connect() as conn:
        pending = plan(conn, migrations)
        conn.commit()

    pending_names = {migration.name for migration in pending}
    report.skipped = [m.name for m in order_migrations(migrations) if m.name not in pending_names]

    if only is not None:
        selected = set(only)
        unknown = selected - {migration.name for migration in migrations}
        if unknown:
            raise MigrationError(f"Unknown migrations: {', '.join(sorted(unknown))}")
        for migration in pending:
            if migration.name in selected:
                blocked = [r for r in migration.requires if r in pending_names and r not in selected]
                if blocked:
                    raise MigrationError(
                        f"Migration {migration.name} requires unapplied {', '.join(blocked)}",
                        migration.name,
                    )
        pending = [migration for migration in pending if migration.name in selected]

    for migration in pending:
        logger.info("Applying migration %s", migration.name)
        apply_migration(engine, migration)
        report.applied.append(migration.name)
        logger.info("Applied migration %s", migration.name)

    return report


def mark_baseline_applied(engine: Engine, name: str) -> bool:
    """Record ``name`` in an empty tracking table.

    Used when the schema was created outside the runner. Returns False and
    changes nothing when any migration is already recorded.
    """
    with engine.connect() as conn:
        if applied_migrations(conn):
            conn.commit()
            return False
        record_migration(conn, name)
        conn.commit()
    logger.info("Marked %s as applied", name)
    return True
