"""
Move legacy church_images rows into the normalized image system.

The legacy table stores one row per (church, image path). The new shape keeps
one ``images`` row per distinct file and a ``church_images_new`` join row per
church, carrying the display order and the primary flag. The steps must run
in order: tables, unique images, join rows, then clearing the legacy columns
on ``churches``.
"""

import logging

from sqlalchemy import text
from sqlalchemy.engine import Connection

from backend.db import column_exists, table_exists
from backend.migrations.runner import Migration

logger = logging.getLogger(__name__)

# Real dimensions and blurhashes are filled in later by the metadata job
PLACEHOLDER_MIME_TYPE = "image/jpeg"
PLACEHOLDER_WIDTH = 800
PLACEHOLDER_HEIGHT = 600
PLACEHOLDER_BLURHASH = "L6PZfSi_.AyE_3t7t7R**0o#DgR4"

LEGACY_CHURCH_IMAGE_COLUMNS = ("image_path", "image_alt")


def _has_legacy_images(conn: Connection) -> bool:
    if not table_exists(conn, "church_images") or not column_exists(conn, "church_images", "image_path"):
        logger.info("  - No legacy church_images.image_path data, nothing to migrate")
        return False
    return True


def create_image_tables(conn: Connection) -> None:
    conn.execute(text("""
        CREATE TABLE IF NOT EXISTS images (
            id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
            filename TEXT NOT NULL,
            original_filename TEXT,
            mime_type TEXT NOT NULL,
            file_size INTEGER NOT NULL,
            width INTEGER NOT NULL,
            height INTEGER NOT NULL,
            blurhash TEXT NOT NULL,
            alt_text TEXT,
            caption TEXT,
            uploaded_by TEXT,
            created_at INTEGER DEFAULT CURRENT_TIMESTAMP NOT NULL,
            updated_at INTEGER DEFAULT CURRENT_TIMESTAMP NOT NULL
        )
    """))
    conn.execute(text("""
        CREATE TABLE IF NOT EXISTS church_images_new (
            id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
            church_id INTEGER NOT NULL,
            image_id INTEGER NOT NULL,
            display_order INTEGER DEFAULT 0 NOT NULL,
            is_primary INTEGER DEFAULT false NOT NULL,
            created_at INTEGER DEFAULT CURRENT_TIMESTAMP NOT NULL,
            FOREIGN KEY (church_id) REFERENCES churches(id) ON UPDATE no action ON DELETE cascade,
            FOREIGN KEY (image_id) REFERENCES images(id) ON UPDATE no action ON DELETE cascade
        )
    """))
    conn.execute(text(
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_church_images_new_unique "
        "ON church_images_new (church_id, image_id)"
    ))


def insert_unique_images(conn: Connection) -> None:
    if not _has_legacy_images(conn):
        return
    # First legacy row per path wins; paths already in images are skipped
    result = conn.execute(
        text("""
            INSERT INTO images (
                filename, original_filename, mime_type, file_size, width, height,
                blurhash, alt_text, caption, uploaded_by, created_at, updated_at
            )
            SELECT
                ci.image_path, ci.image_path, :mime_type, 0, :width, :height,
                :blurhash, ci.image_alt, ci.caption, NULL, ci.created_at, ci.updated_at
            FROM church_images ci
            WHERE ci.id IN (
                SELECT MIN(id) FROM church_images
                WHERE image_path IS NOT NULL
                GROUP BY image_path
            )
            AND ci.image_path NOT IN (SELECT filename FROM images)
            ORDER BY ci.id
        """),
        {
            "mime_type": PLACEHOLDER_MIME_TYPE,
            "width": PLACEHOLDER_WIDTH,
            "height": PLACEHOLDER_HEIGHT,
            "blurhash": PLACEHOLDER_BLURHASH,
        },
    )
    logger.info("  - Created %d images", result.rowcount)


def link_church_images(conn: Connection) -> None:
    if not _has_legacy_images(conn):
        return
    result = conn.execute(text("""
        INSERT OR IGNORE INTO church_images_new (church_id, image_id, display_order, is_primary, created_at)
        SELECT ci.church_id, i.id, ci.sort_order, ci.is_featured, ci.created_at
        FROM church_images ci
        INNER JOIN images i ON i.filename = ci.image_path
        ORDER BY ci.church_id, ci.sort_order, ci.id
    """))
    logger.info("  - Created %d church image links", result.rowcount)


def clear_legacy_image_columns(conn: Connection) -> None:
    columns = [column for column in LEGACY_CHURCH_IMAGE_COLUMNS if column_exists(conn, "churches", column)]
    if not columns:
        logger.info("  - churches has no legacy image columns")
        return
    assignments = ", ".join(f"{column} = NULL" for column in columns)
    result = conn.execute(text(f"""
        UPDATE churches
        SET {assignments}
        WHERE id IN (SELECT DISTINCT church_id FROM church_images_new)
    """))
    logger.info("  - Cleared legacy image columns on %d churches", result.rowcount)


MIGRATIONS = [
    Migration(
        name="create_image_tables",
        description="Create images and church_images_new",
        apply=create_image_tables,
    ),
    Migration(
        name="insert_unique_images",
        description="Create one images row per distinct legacy image path",
        apply=insert_unique_images,
        requires=("create_image_tables",),
    ),
    Migration(
        name="link_church_images",
        description="Link churches to images preserving display order and primary flag",
        apply=link_church_images,
        requires=("insert_unique_images",),
    ),
    Migration(
        name="clear_legacy_image_columns",
        description="Null legacy churches.image_path/image_alt once images are linked",
        apply=clear_legacy_image_columns,
        requires=("link_church_images",),
    ),
]
