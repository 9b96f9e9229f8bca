#!/usr/bin/env python3
"""
Database Migration Runner
Applies the registered schema and data migrations in dependency order,
recording each one in the tracking table.

Usage:
    python run_migrations.py              # apply everything pending
    python run_migrations.py --list       # show applied / pending status
    python run_migrations.py --only NAME  # apply selected migrations
"""
import argparse
import sys

from backend.config import ConfigurationError, load_environment
from backend.db import open_database
from backend.logging_config import setup_logging
from backend.migrations import MIGRATIONS, applied_migrations, order_migrations, run_migrations


def list_migrations(engine):
    with engine.connect() as conn:
        applied = dict(applied_migrations(conn))
        conn.commit()

    print("📋 Migrations:")
    for migration in order_migrations(MIGRATIONS):
        marker = "✅" if migration.name in applied else "⏳"
        print(f"   {marker} {migration.name}: {migration.description}")

    extra = [name for name in applied if name not in {m.name for m in MIGRATIONS}]
    for name in extra:
        print(f"   📌 {name} (recorded outside this runner)")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Apply database migrations")
    parser.add_argument("--list", action="store_true", help="Show migration status and exit")
    parser.add_argument("--only", nargs="+", metavar="NAME", help="Apply only these migrations")
    args = parser.parse_args(argv)

    load_environment()
    setup_logging()

    try:
        with open_database() as engine:
            if args.list:
                list_migrations(engine)
                return 0

            print("🚀 Starting database migrations...")
            report = run_migrations(engine, MIGRATIONS, only=args.only)
    except ConfigurationError as e:
        print(f"❌ {e}")
        return 1
    except Exception as e:
        print(f"❌ Migration failed: {e}")
        return 1

    print("=" * 60)
    print("📊 Migration Summary:")
    print(f"   ✅ Applied: {len(report.applied)}")
    for name in report.applied:
        print(f"      • {name}")
    print(f"   ⏭️  Already applied: {len(report.skipped)}")
    print("=" * 60)
    print("✅ All migrations completed successfully!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
