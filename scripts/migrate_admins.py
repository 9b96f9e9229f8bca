#!/usr/bin/env python3
"""
Grant the admin role on the user-management service to every legacy admin.

Requires CLERK_SECRET_KEY in addition to the database settings.
"""

import asyncio
import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from backend.config import ConfigurationError, get_user_api_settings, load_environment
from backend.db import open_database
from backend.logging_config import setup_logging
from backend.user_admin import UserApiClient, promote_legacy_admins


async def run():
    api_settings = get_user_api_settings()
    with open_database() as engine:
        async with UserApiClient(api_settings.secret_key, api_settings.base_url) as client:
            return await promote_legacy_admins(engine, client)


def main():
    load_environment()
    setup_logging()
    print("Starting admin migration...\n")

    try:
        report = asyncio.run(run())
    except ConfigurationError as e:
        print(f"❌ {e}")
        return 1
    except Exception as e:
        print(f"❌ Migration failed: {e}")
        return 1

    print("\nMigration Summary:")
    print("==================")
    print(f"Total legacy admins: {report.total}")
    print(f"✅ Promoted: {len(report.promoted)}")
    for email in report.not_found:
        print(f"❌ Not found (needs to sign up first): {email}")
    for email, error in report.errors.items():
        print(f"❌ Error for {email}: {error}")
    return 1 if report.errors else 0


if __name__ == "__main__":
    sys.exit(main())
