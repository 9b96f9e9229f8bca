#!/usr/bin/env python3
"""
Export the whole production database to backups/<timestamp>_<database>.sql.

Usage:
    python scripts/backup_database.py
"""

import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from backend.backup import BACKUPS_DIR, DATABASE_NAME, BackupError, backup_database
from backend.config import load_environment
from backend.logging_config import setup_logging


def main():
    load_environment()
    setup_logging()

    print("🔄 Creating database backup...")
    print(f"📂 Database: {DATABASE_NAME}")
    try:
        filepath = backup_database()
    except BackupError as e:
        print(f"❌ {e}")
        return 1

    print(f"✅ Backup created successfully: {filepath}")
    print(f"📊 Use 'ls -la {BACKUPS_DIR}/' to view all backups")
    return 0


if __name__ == "__main__":
    sys.exit(main())
