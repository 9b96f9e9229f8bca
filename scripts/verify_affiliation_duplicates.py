#!/usr/bin/env python3
"""
Show the duplicate affiliations and the churches linked to them.

Read-only; run it before and after ``merge_duplicate_affiliations``.
"""

import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import bindparam, text

from backend.config import ConfigurationError, load_environment
from backend.db import open_database
from backend.logging_config import setup_logging
from backend.migrations.steps.affiliations import AFFILIATION_MERGES

AFFILIATION_IDS = sorted(set(AFFILIATION_MERGES) | set(AFFILIATION_MERGES.values()))


def verify(conn):
    print("Verifying affiliations that need path updates...\n")
    rows = conn.execute(
        text("""
            SELECT id, name, path,
                CASE WHEN name LIKE '% ' THEN 'Has trailing space' ELSE '' END AS issue
            FROM affiliations
            WHERE id IN :ids
            ORDER BY name, id
        """).bindparams(bindparam("ids", expanding=True)),
        {"ids": AFFILIATION_IDS},
    ).fetchall()

    print("Affiliations to be updated:")
    for row in rows:
        print(f'  ID {row.id}: "{row.name}" → "{row.path}" {row.issue}')

    print("\nChurches affiliated with these organizations:")
    for row in rows:
        churches = conn.execute(
            text("""
                SELECT c.id, c.name, c.path
                FROM churches c
                JOIN church_affiliations ca ON c.id = ca.church_id
                WHERE ca.affiliation_id = :affiliation_id
                ORDER BY c.name
            """),
            {"affiliation_id": row.id},
        ).fetchall()
        if churches:
            print(f"\n  Affiliation ID {row.id} ({row.name}):")
            for church in churches:
                print(f"    - {church.name} (/churches/{church.path})")
        else:
            print(f"\n  Affiliation ID {row.id} ({row.name}): No churches affiliated")


def main():
    load_environment()
    setup_logging()
    try:
        with open_database() as engine:
            with engine.connect() as conn:
                verify(conn)
    except ConfigurationError as e:
        print(f"❌ {e}")
        return 1
    except Exception as e:
        print(f"❌ Verification failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
