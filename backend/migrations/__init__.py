"""
Database migrations for the church directory.

Steps live in ``backend.migrations.steps`` and are registered here in the
order they were written. Each step checks the current schema before
changing it, so a partially migrated database can be brought forward safely,
and the runner records every applied step in the tracking table.
"""

from backend.migrations.runner import (
    TRACKING_TABLE,
    Migration,
    MigrationError,
    MigrationReport,
    applied_migrations,
    mark_baseline_applied,
    order_migrations,
    plan,
    record_migration,
    run_migrations,
)
from backend.migrations.steps import affiliations, church_images, columns, paths, service_times

MIGRATIONS = [
    *paths.MIGRATIONS,
    *affiliations.MIGRATIONS,
    *columns.MIGRATIONS,
    *service_times.MIGRATIONS,
    *church_images.MIGRATIONS,
]


def get_migration(name: str) -> Migration:
    for migration in MIGRATIONS:
        if migration.name == name:
            return migration
    raise MigrationError(f"Unknown migration: {name}", name)


__all__ = [
    "MIGRATIONS",
    "TRACKING_TABLE",
    "Migration",
    "MigrationError",
    "MigrationReport",
    "applied_migrations",
    "get_migration",
    "mark_baseline_applied",
    "order_migrations",
    "plan",
    "record_migration",
    "run_migrations",
]
