# backend/health_checks.py

import os
import time

from backend.config import DATABASE_URL_KEYS


def check_env(required=None):
    # Any one of the database URL variables is enough. Missing values are
    # reported as details rather than failing the health endpoint.
    if required is None:
        return "ok" if any(os.getenv(key) for key in DATABASE_URL_KEYS) else {"missing": list(DATABASE_URL_KEYS)}
    missing = [var for var in required if not os.getenv(var)]
    return "ok" if not missing else {"missing": missing}


def get_app_metadata(start_time):
    uptime = int(time.time() - start_time)
    return {
        "status": "running",
        "version": os.getenv("APP_VERSION", "dev"),
        "uptime": f"{uptime}s"
    }
