import json
import subprocess
from datetime import datetime
from pathlib import Path

import pytest

from backend import backup
from backend.backup import (
    TABLES,
    BackupError,
    backup_all_tables,
    backup_database,
    backup_tables_to_json,
    ensure_backups_dir,
    export_command,
    format_timestamp,
)

NOW = datetime(2024, 3, 7, 9, 5, 1)


def fake_wrangler(fail_tables=(), write_file=True, returncode=0):
    """Stand-in for subprocess.run that writes the --output file."""
    calls = []

    def run(command, capture_output=True, text=True):
        calls.append(command)
        table = command[command.index("--table") + 1] if "--table" in command else None
        if table in fail_tables:
            return subprocess.CompletedProcess(command, 1, stdout="", stderr=f"export of {table} failed")
        if write_file:
            Path(command[command.index("--output") + 1]).write_text("-- dump\n")
        return subprocess.CompletedProcess(command, returncode, stdout="", stderr="" if returncode == 0 else "denied")

    run.calls = calls
    return run


def test_format_timestamp():
    assert format_timestamp(NOW) == "2024-03-07_090501"


def test_ensure_backups_dir(tmp_path):
    target = tmp_path / "backups"
    assert ensure_backups_dir(target) is True
    assert ensure_backups_dir(target) is False


def test_export_command(monkeypatch):
    monkeypatch.delenv("BACKUP_EXPORT_CMD", raising=False)
    assert export_command("db", "out.sql", table="churches") == [
        "bun", "run", "wrangler", "d1", "export", "db", "--remote", "--table", "churches", "--output", "out.sql",
    ]
    monkeypatch.setenv("BACKUP_EXPORT_CMD", "npx")
    assert export_command("db", "out.sql") == ["npx", "wrangler", "d1", "export", "db", "--remote", "--output", "out.sql"]


def test_tables_in_dependency_order():
    assert len(TABLES) == 15
    assert TABLES.index("churches") < TABLES.index("church_affiliations")
    assert TABLES.index("affiliations") < TABLES.index("church_affiliations")


def test_backup_database(tmp_path, monkeypatch):
    monkeypatch.setattr(backup.subprocess, "run", fake_wrangler())
    path = backup_database(directory=tmp_path / "backups", now=NOW)
    assert path.name == "2024-03-07_090501_utahchurches-production.sql"
    assert path.exists()


def test_backup_database_failure_raises(tmp_path, monkeypatch):
    monkeypatch.setattr(backup.subprocess, "run", fake_wrangler(write_file=False, returncode=1))
    with pytest.raises(BackupError, match="denied"):
        backup_database(directory=tmp_path, now=NOW)


def test_backup_database_missing_file_raises(tmp_path, monkeypatch):
    monkeypatch.setattr(backup.subprocess, "run", fake_wrangler(write_file=False))
    with pytest.raises(BackupError, match="not created"):
        backup_database(directory=tmp_path, now=NOW)


def test_backup_all_tables_continues_past_failures(tmp_path, monkeypatch):
    runner = fake_wrangler(fail_tables=("churches", "sessions"))
    monkeypatch.setattr(backup.subprocess, "run", runner)

    summary = backup_all_tables(directory=tmp_path, now=NOW)

    assert len(runner.calls) == len(TABLES)
    assert [r.table for r in summary.failed] == ["churches", "sessions"]
    assert len(summary.succeeded) == len(TABLES) - 2
    assert summary.ok is False
    assert summary.succeeded[0].file == "2024-03-07_090501_counties.sql"
    assert summary.failed[0].error == "export of churches failed"


def test_backup_all_tables_ok(tmp_path, monkeypatch):
    monkeypatch.setattr(backup.subprocess, "run", fake_wrangler())
    summary = backup_all_tables(tables=["pages"], directory=tmp_path, now=NOW)
    assert summary.ok
    assert (tmp_path / "2024-03-07_090501_pages.sql").exists()


def test_backup_tables_to_json(legacy_engine, tmp_path):
    counts = backup_tables_to_json(legacy_engine, ["users", "sessions"], tmp_path)
    assert counts == {"users": 3, "sessions": 1}

    users = json.loads((tmp_path / "backup-users.json").read_text())
    assert users[0]["email"] == "admin@example.com"
    assert set(users[0]) == {"id", "email", "username", "password_hash", "user_type"}
