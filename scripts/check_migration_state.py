#!/usr/bin/env python3
"""Print tables, recorded migrations and which newer schema features exist."""

import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from backend.config import ConfigurationError, load_environment
from backend.db import column_exists, list_tables, open_database, table_exists
from backend.logging_config import setup_logging
from backend.migrations import TRACKING_TABLE

COLUMN_PROBES = (
    ("churches", "language"),
    ("churches", "path"),
)
TABLE_PROBES = ("pages", "settings")


def report_state(conn):
    print("=== Current Database Tables ===")
    for name in list_tables(conn):
        print(f"  - {name}")

    print("\n=== Migration Tracking Table ===")
    if table_exists(conn, TRACKING_TABLE):
        print(f"✅ {TRACKING_TABLE} table exists")
        rows = conn.exec_driver_sql(f"SELECT hash, created_at FROM {TRACKING_TABLE} ORDER BY created_at").fetchall()
        print("Applied migrations:")
        for i, (name, created_at) in enumerate(rows, start=1):
            print(f"  {i}. {name} ({created_at})")
    else:
        print(f"❌ {TRACKING_TABLE} table does NOT exist")
        print("   This means no migrations have been recorded yet")

    print("\n=== Schema State Analysis ===")
    for table, column in COLUMN_PROBES:
        if column_exists(conn, table, column):
            print(f"✅ {table}.{column} field exists")
        else:
            print(f"❌ {table}.{column} field missing")
    for table in TABLE_PROBES:
        if column_exists(conn, table, "id"):
            print(f"✅ {table} table exists")
        else:
            print(f"❌ {table} table missing")


def main():
    load_environment()
    setup_logging()
    try:
        with open_database() as engine:
            with engine.connect() as conn:
                report_state(conn)
    except ConfigurationError as e:
        print(f"❌ {e}")
        return 1
    except Exception as e:
        print(f"❌ Error checking migration state: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
