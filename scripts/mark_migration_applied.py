#!/usr/bin/env python3
"""
Mark the baseline migration as applied on a database whose schema was
created by hand, so the runner does not try to recreate it.

Usage:
    python scripts/mark_migration_applied.py [HASH]
"""

import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from backend.config import ConfigurationError, load_environment
from backend.db import open_database
from backend.logging_config import setup_logging
from backend.migrations import applied_migrations, mark_baseline_applied

BASELINE_MIGRATION = "0000_sparkling_northstar"


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    name = argv[0] if argv else BASELINE_MIGRATION

    load_environment()
    setup_logging()

    try:
        with open_database() as engine:
            if mark_baseline_applied(engine, name):
                print(f"✅ Marked {name} as applied")
                return 0
            with engine.connect() as conn:
                existing = applied_migrations(conn)
    except ConfigurationError as e:
        print(f"❌ {e}")
        return 1
    except Exception as e:
        print(f"❌ Failed to mark migration: {e}")
        return 1

    print("⚠️  Migrations are already recorded, nothing to do:")
    for recorded_name, created_at in existing:
        print(f"   - {recorded_name} ({created_at})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
