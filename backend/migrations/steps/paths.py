"""
URL paths for counties and affiliations.

Both tables predate path-based routing; these steps add the ``path`` column
and derive a slug from each row's name.
"""

import logging

from sqlalchemy import text
from sqlalchemy.engine import Connection

from backend.migrations.helpers import add_column_if_missing, slugify
from backend.migrations.runner import Migration

logger = logging.getLogger(__name__)


def add_county_path(conn: Connection) -> None:
    add_column_if_missing(conn, "counties", "path", "TEXT")
    conn.execute(text(
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_counties_path ON counties(path) WHERE path IS NOT NULL"
    ))
    result = conn.execute(text(
        "UPDATE counties SET path = LOWER(REPLACE(REPLACE(name, ' ', '-'), '.', '')) WHERE path IS NULL"
    ))
    logger.info("  - Generated paths for %d counties", result.rowcount)


def add_affiliation_path(conn: Connection) -> None:
    # No UNIQUE yet: existing names can slug to the same path
    add_column_if_missing(conn, "affiliations", "path", "TEXT")
    rows = conn.execute(text("SELECT id, name FROM affiliations WHERE path IS NULL")).fetchall()
    for affiliation_id, name in rows:
        conn.execute(
            text("UPDATE affiliations SET path = :path WHERE id = :id"),
            {"path": slugify(name), "id": affiliation_id},
        )
    logger.info("  - Generated paths for %d affiliations", len(rows))


MIGRATIONS = [
    Migration(
        name="add_county_path",
        description="Add counties.path with a unique index and backfill it from names",
        apply=add_county_path,
    ),
    Migration(
        name="add_affiliation_path",
        description="Add affiliations.path and backfill it from names",
        apply=add_affiliation_path,
    ),
]
