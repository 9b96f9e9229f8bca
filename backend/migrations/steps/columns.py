"""Column additions for comments, pages and church suggestions."""

import logging

from sqlalchemy import text
from sqlalchemy.engine import Connection

from backend.migrations.helpers import add_column_if_missing
from backend.migrations.runner import Migration

logger = logging.getLogger(__name__)

SUGGESTION_COLUMNS = (
    "denomination",
    "service_times",
    "statement_of_faith",
    "facebook",
    "instagram",
    "youtube",
    "spotify",
)


def add_comment_type(conn: Connection) -> None:
    # 'system' comments record automated change history
    add_column_if_missing(
        conn, "comments", "type", "TEXT DEFAULT 'user' CHECK (type IN ('user', 'system'))"
    )
    add_column_if_missing(conn, "comments", "metadata", "TEXT")
    result = conn.execute(text("UPDATE comments SET type = 'user' WHERE type IS NULL"))
    logger.info("  - Set type 'user' on %d existing comments", result.rowcount)


def add_navbar_order(conn: Connection) -> None:
    add_column_if_missing(conn, "pages", "navbar_order", "INTEGER")


def add_suggestion_fields(conn: Connection) -> None:
    for column in SUGGESTION_COLUMNS:
        add_column_if_missing(conn, "church_suggestions", column, "TEXT")


MIGRATIONS = [
    Migration(
        name="add_comment_type",
        description="Add comments.type and comments.metadata",
        apply=add_comment_type,
    ),
    Migration(
        name="add_navbar_order",
        description="Add pages.navbar_order",
        apply=add_navbar_order,
    ),
    Migration(
        name="add_suggestion_fields",
        description="Add denomination, service times and social links to church_suggestions",
        apply=add_suggestion_fields,
    ),
]
