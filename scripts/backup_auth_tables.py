#!/usr/bin/env python3
"""
Dump the legacy users and sessions tables to backup-<table>.json before the
auth schema is replaced.
"""

import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from backend.backup import LEGACY_AUTH_TABLES, backup_tables_to_json
from backend.config import ConfigurationError, load_environment
from backend.db import open_database
from backend.logging_config import setup_logging


def main():
    load_environment()
    setup_logging()

    print("📦 Backing up old auth tables...\n")
    try:
        with open_database() as engine:
            counts = backup_tables_to_json(engine, LEGACY_AUTH_TABLES)
    except ConfigurationError as e:
        print(f"❌ {e}")
        return 1
    except Exception as e:
        print(f"❌ Error: {e}")
        return 1

    for table, count in counts.items():
        print(f"✅ Backed up {count} {table} to backup-{table}.json")
    print("\n📝 Backup complete!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
