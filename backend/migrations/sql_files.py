"""Run a hand-written .sql file statement by statement."""

import logging
from pathlib import Path
from typing import Union

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 50


def _is_comment_only(statement: str) -> bool:
    return all(line.strip().startswith("--") or not line.strip() for line in statement.splitlines())


def split_statements(sql: str) -> list:
    """Split SQL text on semicolons.

    The split is naive: semicolons inside string literals or trigger bodies
    are not supported.
    """
    statements = []
    for statement in sql.split(";"):
        statement = statement.strip()
        if statement and not _is_comment_only(statement):
            statements.append(statement)
    return statements


def run_sql_file(engine: Engine, path: Union[str, Path]) -> int:
    """Execute every statement of ``path`` in order in one transaction.

    Returns the number of statements executed.
    """
    sql = Path(path).read_text(encoding="utf-8")
    statements = split_statements(sql)
    with engine.begin() as conn:
        for statement in statements:
            logger.info("Executing: %s...", statement[:PREVIEW_LENGTH])
            conn.exec_driver_sql(statement)
    return len(statements)
