# db.py
import logging
from contextlib import contextmanager
from typing import Optional
from urllib.parse import quote, urlsplit

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError

from backend.config import DatabaseSettings, get_database_settings

logger = logging.getLogger(__name__)


def build_engine_url(settings: DatabaseSettings) -> str:
    """Translate a configured database URL into a SQLAlchemy URL.

    Remote libsql/Turso URLs go through the ``sqlite+libsql`` dialect with the
    auth token in the query string; ``file:`` URLs become plain SQLite paths.
    """
    url = settings.url
    parts = urlsplit(url)
    scheme = parts.scheme

    if scheme in ("libsql", "https", "wss"):
        secure = "true"
    elif scheme in ("http", "ws"):
        secure = "false"
    elif scheme == "file":
        return "sqlite:///" + parts.path
    else:
        return url

    query = f"secure={secure}"
    if settings.auth_token:
        query = f"authToken={quote(settings.auth_token, safe='')}&{query}"
    return f"sqlite+libsql://{parts.netloc}{parts.path or '/'}?{query}"


def create_db_engine(settings: DatabaseSettings) -> Engine:
    return create_engine(build_engine_url(settings))


@contextmanager
def open_database(settings: Optional[DatabaseSettings] = None):
    """Yield an engine for one script run and always dispose it afterwards."""
    if settings is None:
        settings = get_database_settings()
    engine = create_db_engine(settings)
    logger.info("Opened database connection to %s", settings.display_url())
    try:
        yield engine
    finally:
        engine.dispose()
        logger.info("Closed database connection")


def probe(conn: Connection, sql: str) -> bool:
    """Run a lightweight SELECT; a failure means the feature is not there yet."""
    try:
        conn.execute(text(sql)).fetchall()
        return True
    except DBAPIError:
        return False


def column_exists(conn: Connection, table_name: str, column_name: str) -> bool:
    """Check if a column exists in a table."""
    return probe(conn, f"SELECT {column_name} FROM {table_name} LIMIT 1")


def table_exists(conn: Connection, table_name: str) -> bool:
    """Check if a table exists."""
    return inspect(conn).has_table(table_name)


def list_tables(conn: Connection) -> list:
    return sorted(inspect(conn).get_table_names())


def check_database(engine: Optional[Engine]) -> str:
    if engine is None:
        return "error: database is not configured"
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return "ok"
    except Exception as e:
        return f"error: {str(e)}"
