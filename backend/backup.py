"""
Database backups through the Cloudflare ``wrangler d1 export`` CLI.

A whole-database export is all or nothing; the table-by-table export keeps
going past failed tables and reports them at the end. Legacy auth tables can
also be dumped to JSON straight from a SQLAlchemy engine.
"""

import json
import logging
import os
import shlex
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Union

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

DATABASE_NAME = "utahchurches-production"
BACKUPS_DIR = "backups"

# Parents before children so a restore can replay them in order
TABLES = (
    "counties",
    "affiliations",
    "churches",
    "church_affiliations",
    "church_gatherings",
    "pages",
    "settings",
    "church_images",
    "church_suggestions",
    "comments",
    "users",
    "sessions",
    "accounts",
    "verification_tokens",
    "verification",
)

LEGACY_AUTH_TABLES = ("users", "sessions")

DEFAULT_EXPORT_PREFIX = "bun run"


class BackupError(RuntimeError):
    """Raised when a whole-database export fails."""


@dataclass
class TableBackupResult:
    table: str
    status: str
    file: Optional[str] = None
    error: Optional[str] = None


@dataclass
class BackupSummary:
    results: list = field(default_factory=list)

    @property
    def succeeded(self) -> list:
        return [r for r in self.results if r.status == "success"]

    @property
    def failed(self) -> list:
        return [r for r in self.results if r.status == "failed"]

    @property
    def ok(self) -> bool:
        return not self.failed


def format_timestamp(now: Optional[datetime] = None) -> str:
    """Local time as YYYY-MM-DD_HHMMSS."""
    return (now or datetime.now()).strftime("%Y-%m-%d_%H%M%S")


def ensure_backups_dir(path: Union[str, Path] = BACKUPS_DIR) -> bool:
    """Create the backups directory; True when it did not exist yet."""
    path = Path(path)
    if path.is_dir():
        return False
    path.mkdir(parents=True, exist_ok=True)
    logger.info("Created %s directory", path)
    return True


def export_command(database: str, output: Union[str, Path], table: Optional[str] = None) -> list:
    prefix = shlex.split(os.getenv("BACKUP_EXPORT_CMD", DEFAULT_EXPORT_PREFIX))
    command = prefix + ["wrangler", "d1", "export", database, "--remote"]
    if table:
        command += ["--table", table]
    return command + ["--output", str(output)]


def _run_export(command: list) -> str:
    result = subprocess.run(command, capture_output=True, text=True)
    if result.returncode != 0:
        raise BackupError((result.stderr or result.stdout or "").strip() or f"exit status {result.returncode}")
    return result.stdout


def backup_database(
    database: str = DATABASE_NAME,
    directory: Union[str, Path] = BACKUPS_DIR,
    now: Optional[datetime] = None,
) -> Path:
    """Export the whole database to one timestamped .sql file."""
    ensure_backups_dir(directory)
    filepath = Path(directory) / f"{format_timestamp(now)}_{database}.sql"
    command = export_command(database, filepath)
    logger.info("Running: %s", " ".join(command))

    try:
        output = _run_export(command)
    except (BackupError, OSError) as e:
        raise BackupError(f"Backup failed: {e}") from e
    if output:
        logger.info(output.strip())

    if not filepath.exists():
        raise BackupError(f"Backup file was not created: {filepath}")
    return filepath


def backup_table(database: str, table: str, directory: Union[str, Path], timestamp: str) -> TableBackupResult:
    filename = f"{timestamp}_{table}.sql"
    filepath = Path(directory) / filename
    try:
        _run_export(export_command(database, filepath, table=table))
    except (BackupError, OSError) as e:
        return TableBackupResult(table=table, status="failed", error=str(e))
    if not filepath.exists():
        return TableBackupResult(table=table, status="failed", error="File not created")
    return TableBackupResult(table=table, status="success", file=filename)


def backup_all_tables(
    database: str = DATABASE_NAME,
    tables: Iterable[str] = TABLES,
    directory: Union[str, Path] = BACKUPS_DIR,
    now: Optional[datetime] = None,
) -> BackupSummary:
    """Export each table to its own file, continuing past failures."""
    ensure_backups_dir(directory)
    timestamp = format_timestamp(now)
    summary = BackupSummary()
    for table in tables:
        result = backup_table(database, table, directory, timestamp)
        if result.status == "success":
            logger.info("Backed up table %s to %s", table, result.file)
        else:
            logger.warning("Backup of table %s failed: %s", table, result.error)
        summary.results.append(result)
    return summary


def backup_tables_to_json(
    engine: Engine,
    tables: Iterable[str] = LEGACY_AUTH_TABLES,
    directory: Union[str, Path] = ".",
) -> dict:
    """Dump each table to backup-<table>.json; returns {table: row count}."""
    counts = {}
    with engine.connect() as conn:
        for table in tables:
            rows = [dict(row) for row in conn.execute(text(f"SELECT * FROM {table}")).mappings()]
            path = Path(directory) / f"backup-{table}.json"
            with open(path, "w", encoding="utf-8") as f:
                json.dump(rows, f, indent=2, default=str)
            counts[table] = len(rows)
            logger.info("Backed up %d rows from %s to %s", len(rows), table, path)
    return counts
