"""Schema probes and small DDL helpers shared by the migration steps."""

import logging

from sqlalchemy import text
from sqlalchemy.engine import Connection

from backend.db import column_exists, table_exists

logger = logging.getLogger(__name__)


def add_column_if_missing(conn: Connection, table_name: str, column_name: str, definition: str) -> bool:
    """ALTER TABLE ... ADD COLUMN unless the column is already there.

    Returns True when the column was added.
    """
    if column_exists(conn, table_name, column_name):
        logger.info("  - %s.%s already exists", table_name, column_name)
        return False
    conn.execute(text(f"ALTER TABLE {table_name} ADD COLUMN {column_name} {definition}"))
    logger.info("  - Added %s.%s", table_name, column_name)
    return True


def unique_index_columns(conn: Connection, table_name: str) -> list:
    """Column tuples covered by full unique indexes (including inline UNIQUE).

    Partial indexes are left out: they do not constrain every row.
    """
    if not table_exists(conn, table_name):
        return []
    result = []
    for index in conn.exec_driver_sql(f"PRAGMA index_list('{table_name}')").fetchall():
        # seq, name, unique, origin, partial
        if not index[2] or index[4]:
            continue
        columns = conn.exec_driver_sql(f"PRAGMA index_info('{index[1]}')").fetchall()
        result.append(tuple(column[2] for column in columns))
    return result


def has_unique_column(conn: Connection, table_name: str, column_name: str) -> bool:
    return (column_name,) in unique_index_columns(conn, table_name)


def slugify(name: str) -> str:
    """URL path segment for a directory entry name."""
    slug = name.replace(" ", "-").replace("&", "and")
    for char in ".,'\"()":
        slug = slug.replace(char, "")
    slug = slug.replace("/", "-").replace("--", "-")
    return slug.lower()
