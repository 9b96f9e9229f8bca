#!/usr/bin/env python3
"""
Run a hand-written SQL migration file against the configured database.

Usage:
    python scripts/run_sql_migration.py path/to/migration.sql
"""

import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from backend.config import ConfigurationError, load_environment
from backend.db import open_database
from backend.logging_config import setup_logging
from backend.migrations.sql_files import run_sql_file


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print("Please provide a SQL file path as an argument")
        return 1

    sql_file_path = argv[0]
    load_environment()
    setup_logging()
    print(f"Running migration from {sql_file_path}...")

    try:
        with open_database() as engine:
            count = run_sql_file(engine, sql_file_path)
    except ConfigurationError as e:
        print(f"❌ {e}")
        return 1
    except Exception as e:
        print(f"❌ Migration failed: {e}")
        return 1

    print(f"✅ Migration completed successfully! ({count} statements)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
