"""
Merge duplicate affiliations and enforce unique affiliation paths.

Two affiliations were entered twice: "IFCA International" (60 is a copy of 29
with a trailing space) and "Potter's House Christian Fellowship" (42 is an
unused copy of 61). Churches are moved onto the surviving rows, the copies are
deleted, and the table is rebuilt so that ``name`` and ``path`` are UNIQUE
(SQLite cannot add a constraint to an existing table).
"""

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection

from backend.migrations.helpers import has_unique_column
from backend.migrations.runner import Migration

logger = logging.getLogger(__name__)

# duplicate id -> surviving id
AFFILIATION_MERGES = {
    60: 29,
    42: 61,
}

CANONICAL_PATHS = {
    61: "potters-house-christian-fellowship",
}

AFFILIATION_COLUMNS = (
    "id",
    "name",
    "path",
    "status",
    "website",
    "private_notes",
    "public_notes",
    "created_at",
    "updated_at",
)

CREATE_AFFILIATIONS_NEW = """
    CREATE TABLE affiliations_new (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE,
        path TEXT UNIQUE,
        status TEXT DEFAULT 'Listed',
        website TEXT,
        private_notes TEXT,
        public_notes TEXT,
        created_at INTEGER DEFAULT (strftime('%s', 'now')) NOT NULL,
        updated_at INTEGER DEFAULT (strftime('%s', 'now')) NOT NULL
    )
"""


def merge_affiliation(conn: Connection, duplicate_id: int, canonical_id: int) -> int:
    """Point every church at the surviving affiliation; returns rows moved."""
    moved = conn.execute(
        text("""
            UPDATE OR IGNORE church_affiliations
            SET affiliation_id = :canonical_id
            WHERE affiliation_id = :duplicate_id
        """),
        {"canonical_id": canonical_id, "duplicate_id": duplicate_id},
    ).rowcount
    # Churches linked to both rows keep their existing link
    conn.execute(
        text("DELETE FROM church_affiliations WHERE affiliation_id = :duplicate_id"),
        {"duplicate_id": duplicate_id},
    )
    conn.execute(text("DELETE FROM affiliations WHERE id = :id"), {"id": duplicate_id})
    logger.info("  - Merged affiliation %d into %d (%d church links moved)", duplicate_id, canonical_id, moved)
    return moved


def rebuild_with_unique_paths(conn: Connection) -> None:
    existing = {column["name"] for column in inspect(conn).get_columns("affiliations")}
    columns = ", ".join(column for column in AFFILIATION_COLUMNS if column in existing)

    conn.execute(text("DROP TABLE IF EXISTS affiliations_new"))
    conn.execute(text(CREATE_AFFILIATIONS_NEW))
    conn.execute(text(f"INSERT INTO affiliations_new ({columns}) SELECT {columns} FROM affiliations"))
    conn.execute(text("DROP TABLE affiliations"))
    conn.execute(text("ALTER TABLE affiliations_new RENAME TO affiliations"))
    logger.info("  - Rebuilt affiliations with UNIQUE name and path")


def merge_duplicate_affiliations(conn: Connection) -> None:
    for duplicate_id, canonical_id in AFFILIATION_MERGES.items():
        merge_affiliation(conn, duplicate_id, canonical_id)

    for canonical_id in set(AFFILIATION_MERGES.values()):
        conn.execute(text("UPDATE affiliations SET name = TRIM(name) WHERE id = :id"), {"id": canonical_id})

    for affiliation_id, path in CANONICAL_PATHS.items():
        conn.execute(
            text("UPDATE affiliations SET path = :path WHERE id = :id"),
            {"path": path, "id": affiliation_id},
        )

    if has_unique_column(conn, "affiliations", "path"):
        logger.info("  - affiliations.path is already unique")
        return
    rebuild_with_unique_paths(conn)


MIGRATIONS = [
    Migration(
        name="merge_duplicate_affiliations",
        description="Merge duplicate affiliations 60->29 and 42->61 and make paths unique",
        apply=merge_duplicate_affiliations,
        requires=("add_affiliation_path",),
        disable_foreign_keys=True,
    ),
]
