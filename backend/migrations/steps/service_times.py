"""
Backfill church_gatherings from the legacy churches.service_times column.

Churches that already have gatherings are left alone. Once this has run the
column can be dropped from the schema without losing data.
"""

import logging
import time

from sqlalchemy import text
from sqlalchemy.engine import Connection

from backend.db import column_exists
from backend.migrations.runner import Migration

logger = logging.getLogger(__name__)


def migrate_service_times(conn: Connection) -> None:
    if not column_exists(conn, "churches", "service_times"):
        logger.info("  - churches.service_times no longer exists, nothing to migrate")
        return

    rows = conn.execute(text("""
        SELECT id, name, service_times
        FROM churches
        WHERE service_times IS NOT NULL
          AND service_times != ''
    """)).fetchall()
    logger.info("  - Found %d churches with service times", len(rows))

    now = int(time.time())
    migrated = 0
    for church_id, name, service_times in rows:
        existing = conn.execute(
            text("SELECT COUNT(*) FROM church_gatherings WHERE church_id = :church_id"),
            {"church_id": church_id},
        ).scalar()
        if existing:
            logger.info("  - Skipped %s: already has gatherings", name)
            continue

        conn.execute(
            text("""
                INSERT INTO church_gatherings (church_id, time, notes, created_at, updated_at)
                VALUES (:church_id, :time, NULL, :now, :now)
            """),
            {"church_id": church_id, "time": service_times, "now": now},
        )
        migrated += 1

    logger.info("  - Migrated %d service times", migrated)


MIGRATIONS = [
    Migration(
        name="migrate_service_times",
        description="Copy churches.service_times into church_gatherings",
        apply=migrate_service_times,
    ),
]
