#!/usr/bin/env python3
"""
Export every table to its own backups/<timestamp>_<table>.sql file.

Failed tables do not stop the run; the exit status is 1 if any failed.
"""

import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from backend.backup import BACKUPS_DIR, DATABASE_NAME, TABLES, backup_all_tables
from backend.config import load_environment
from backend.logging_config import setup_logging


def print_summary(summary):
    total = len(summary.results)
    print("\n📋 Backup Summary:")
    print("==================")
    print(f"✅ Successful: {len(summary.succeeded)}/{total}")
    for result in summary.succeeded:
        print(f"   • {result.table} → {result.file}")

    if summary.failed:
        print(f"\n❌ Failed: {len(summary.failed)}/{total}")
        for result in summary.failed:
            print(f"   • {result.table}: {result.error}")

    print(f"\n📂 Backup location: {BACKUPS_DIR}/")


def main():
    load_environment()
    setup_logging()

    print("🔄 Starting complete table-by-table backup...")
    print(f"📂 Database: {DATABASE_NAME}")
    print(f"📊 Tables to backup: {len(TABLES)}")

    summary = backup_all_tables()
    print_summary(summary)

    if not summary.ok:
        print("\n⚠️  Some tables failed to backup. Check errors above.")
        return 1
    print("\n🎉 All tables backed up successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
