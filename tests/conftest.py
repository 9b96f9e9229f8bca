import pytest
from sqlalchemy import create_engine, event

LEGACY_SCHEMA = """
CREATE TABLE counties (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    description TEXT
);
CREATE TABLE affiliations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    status TEXT DEFAULT 'Listed',
    website TEXT,
    public_notes TEXT,
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL
);
CREATE TABLE churches (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    path TEXT,
    county_id INTEGER REFERENCES counties(id),
    service_times TEXT,
    image_path TEXT,
    image_alt TEXT
);
CREATE TABLE church_affiliations (
    church_id INTEGER NOT NULL REFERENCES churches(id),
    affiliation_id INTEGER NOT NULL REFERENCES affiliations(id),
    PRIMARY KEY (church_id, affiliation_id)
);
CREATE TABLE church_gatherings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    church_id INTEGER NOT NULL REFERENCES churches(id),
    time TEXT NOT NULL,
    notes TEXT,
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL
);
CREATE TABLE pages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    path TEXT
);
CREATE TABLE comments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    church_id INTEGER REFERENCES churches(id),
    content TEXT NOT NULL,
    created_at INTEGER
);
CREATE TABLE church_suggestions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    church_name TEXT NOT NULL
);
CREATE TABLE church_images (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    church_id INTEGER NOT NULL REFERENCES churches(id),
    image_path TEXT NOT NULL,
    image_alt TEXT,
    caption TEXT,
    sort_order INTEGER DEFAULT 0 NOT NULL,
    is_featured INTEGER DEFAULT 0 NOT NULL,
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL
);
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT NOT NULL,
    username TEXT NOT NULL,
    password_hash TEXT,
    user_type TEXT NOT NULL
);
CREATE TABLE sessions (
    id TEXT PRIMARY KEY,
    user_id INTEGER NOT NULL,
    expires_at INTEGER NOT NULL,
    created_at INTEGER NOT NULL
);

INSERT INTO counties (id, name) VALUES (1, 'Salt Lake'), (2, 'St. George');

INSERT INTO affiliations (id, name, created_at, updated_at) VALUES
    (5, 'Southern Baptist Convention', 1700000000, 1700000000),
    (29, 'IFCA International', 1700000000, 1700000000),
    (42, 'Potter''s House Christian Fellowship', 1700000000, 1700000000),
    (60, 'IFCA International ', 1700000000, 1700000000),
    (61, 'Potter’s House Christian Fellowship', 1700000000, 1700000000);

INSERT INTO churches (id, name, path, county_id, service_times, image_path, image_alt) VALUES
    (1, 'Grace Church', 'grace-church', 1, 'Sundays 10am', 'grace.jpg', 'Grace'),
    (2, 'Hope Chapel', 'hope-chapel', 1, '', 'hope.jpg', 'Hope'),
    (3, 'Valley Fellowship', 'valley-fellowship', 2, 'Sun 9:00', 'valley.jpg', 'Valley');

INSERT INTO church_affiliations (church_id, affiliation_id) VALUES
    (1, 29), (1, 60), (2, 60), (3, 42), (3, 5);

INSERT INTO church_gatherings (church_id, time, created_at, updated_at) VALUES
    (3, 'Sunday 9:00 AM', 1700000000, 1700000000);

INSERT INTO pages (id, title, path) VALUES (1, 'About', 'about');
INSERT INTO comments (id, church_id, content, created_at) VALUES (1, 1, 'Great church', 1700000000);
INSERT INTO church_suggestions (id, church_name) VALUES (1, 'New Church');

INSERT INTO church_images (id, church_id, image_path, image_alt, caption, sort_order, is_featured, created_at, updated_at) VALUES
    (1, 1, 'shared.jpg', 'Front', 'Building', 0, 1, 1700000001, 1700000001),
    (2, 2, 'shared.jpg', 'Other alt', NULL, 1, 0, 1700000002, 1700000002),
    (3, 1, 'inside.jpg', 'Sanctuary', NULL, 1, 0, 1700000003, 1700000003),
    (4, 1, 'shared.jpg', 'Duplicate', NULL, 2, 0, 1700000004, 1700000004);

INSERT INTO users (id, email, username, password_hash, user_type) VALUES
    (1, 'admin@example.com', 'admin', 'x', 'admin'),
    (2, 'editor@example.com', 'editor', 'y', 'contributor'),
    (3, 'missing@example.com', 'missing', 'z', 'admin');
INSERT INTO sessions (id, user_id, expires_at, created_at) VALUES ('s1', 1, 1800000000, 1700000000);
"""


def load_schema(engine, sql):
    raw = engine.raw_connection()
    try:
        raw.driver_connection.executescript(sql)
        raw.commit()
    finally:
        raw.close()


@pytest.fixture
def engine(tmp_path):
    """Empty file-backed SQLite database."""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def legacy_engine(engine):
    """Database in the shape production had before the migrations."""
    load_schema(engine, LEGACY_SCHEMA)
    return engine


@pytest.fixture
def strict_legacy_engine(tmp_path):
    """Legacy database whose connections enforce foreign keys."""
    engine = create_engine(f"sqlite:///{tmp_path / 'strict.db'}")

    @event.listens_for(engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    load_schema(engine, LEGACY_SCHEMA)
    yield engine
    engine.dispose()
