from sqlalchemy import text

from backend.migrations import MIGRATIONS, run_migrations
from backend.migrations.steps.church_images import PLACEHOLDER_BLURHASH

IMAGE_STEPS = ["create_image_tables", "insert_unique_images", "link_church_images", "clear_legacy_image_columns"]


def test_one_image_per_distinct_path(legacy_engine):
    run_migrations(legacy_engine, MIGRATIONS, only=IMAGE_STEPS)

    with legacy_engine.connect() as conn:
        images = conn.execute(text(
            "SELECT filename, alt_text, caption, mime_type, file_size, width, height, blurhash "
            "FROM images ORDER BY id"
        )).fetchall()

    assert [image.filename for image in images] == ["shared.jpg", "inside.jpg"]
    shared = images[0]
    # The first legacy row for a path provides the metadata
    assert shared.alt_text == "Front"
    assert shared.caption == "Building"
    assert (shared.mime_type, shared.file_size, shared.width, shared.height) == ("image/jpeg", 0, 800, 600)
    assert shared.blurhash == PLACEHOLDER_BLURHASH


def test_links_keep_order_and_primary_flag(legacy_engine):
    run_migrations(legacy_engine, MIGRATIONS, only=IMAGE_STEPS)

    with legacy_engine.connect() as conn:
        links = conn.execute(text("""
            SELECT cin.church_id, i.filename, cin.display_order, cin.is_primary
            FROM church_images_new cin
            JOIN images i ON i.id = cin.image_id
            ORDER BY cin.church_id, cin.display_order
        """)).fetchall()

    assert [tuple(link) for link in links] == [
        (1, "shared.jpg", 0, 1),
        (1, "inside.jpg", 1, 0),
        (2, "shared.jpg", 1, 0),
    ]


def test_existing_images_are_not_duplicated(legacy_engine):
    run_migrations(legacy_engine, MIGRATIONS, only=["create_image_tables"])
    with legacy_engine.connect() as conn:
        conn.execute(text("""
            INSERT INTO images (filename, mime_type, file_size, width, height, blurhash, created_at, updated_at)
            VALUES ('inside.jpg', 'image/png', 10, 1, 1, 'x', 1, 1)
        """))
        conn.commit()

    run_migrations(legacy_engine, MIGRATIONS, only=IMAGE_STEPS[1:])

    with legacy_engine.connect() as conn:
        assert conn.execute(text("SELECT COUNT(*) FROM images WHERE filename = 'inside.jpg'")).scalar() == 1
        assert conn.execute(text("SELECT COUNT(*) FROM church_images_new")).scalar() == 3


def test_legacy_columns_cleared_only_for_linked_churches(legacy_engine):
    run_migrations(legacy_engine, MIGRATIONS, only=IMAGE_STEPS)

    with legacy_engine.connect() as conn:
        rows = conn.execute(text("SELECT id, image_path, image_alt FROM churches ORDER BY id")).fetchall()

    assert [tuple(row) for row in rows] == [
        (1, None, None),
        (2, None, None),
        (3, "valley.jpg", "Valley"),
    ]


def test_steps_skip_without_legacy_table(engine):
    report = run_migrations(engine, MIGRATIONS, only=IMAGE_STEPS[:3])
    assert report.applied == IMAGE_STEPS[:3]

    with engine.connect() as conn:
        assert conn.execute(text("SELECT COUNT(*) FROM images")).scalar() == 0
