# backend/config.py
"""
Environment loading for the web app and the operator scripts.

Settings come from the process environment plus a local key=value file
(``.dev.vars`` by default). Values already present in the environment are
never overridden by the file, and the file is skipped entirely inside a
container so platform-provided variables stay authoritative.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import urlsplit

from dotenv import dotenv_values, load_dotenv

DEV_VARS_FILE = ".dev.vars"

# Newer scripts use the TURSO_* pair, older ones the generic pair.
DATABASE_URL_KEYS = ("TURSO_DATABASE_URL", "DATABASE_URL")
DATABASE_TOKEN_KEYS = ("TURSO_AUTH_TOKEN", "DATABASE_AUTH_TOKEN")

REMOTE_SCHEMES = ("libsql", "https", "http", "wss", "ws")

DEFAULT_USER_API_URL = "https://api.clerk.com/v1"


class ConfigurationError(RuntimeError):
    """Raised when required settings are missing or malformed."""

    def __init__(self, message: str, missing: tuple = ()):
        self.missing = tuple(missing)
        super().__init__(message)


@dataclass(frozen=True)
class DatabaseSettings:
    url: str
    auth_token: Optional[str] = None

    @property
    def is_remote(self) -> bool:
        return urlsplit(self.url).scheme in REMOTE_SCHEMES

    def display_url(self) -> str:
        """URL safe for logs: no credentials, no query string."""
        parts = urlsplit(self.url)
        if not parts.netloc:
            return self.url.split("?", 1)[0]
        host = parts.netloc.rsplit("@", 1)[-1]
        return f"{parts.scheme}://{host}{parts.path}"


@dataclass(frozen=True)
class UserApiSettings:
    secret_key: str
    base_url: str = DEFAULT_USER_API_URL


def _dev_vars_path(path=None) -> Path:
    return Path(path or os.getenv("DEV_VARS_PATH", DEV_VARS_FILE))


def load_env_file(path=None) -> dict:
    """Read key=value pairs from the local settings file ({} if absent)."""
    env_path = _dev_vars_path(path)
    if not env_path.is_file():
        return {}
    return {key: value for key, value in dotenv_values(env_path).items() if value is not None}


def load_environment(path=None) -> dict:
    """Load the settings file into os.environ without overriding existing values."""
    if os.path.exists("/.dockerenv"):
        return {}
    values = load_env_file(path)
    if values:
        load_dotenv(_dev_vars_path(path), override=False)
    return values


def _first(env: Mapping[str, str], keys) -> Optional[str]:
    for key in keys:
        value = env.get(key)
        if value:
            return value.strip()
    return None


def get_database_settings(env: Optional[Mapping[str, str]] = None) -> DatabaseSettings:
    """Resolve database credentials, failing before any network call."""
    if env is None:
        env = os.environ

    url = _first(env, DATABASE_URL_KEYS)
    token = _first(env, DATABASE_TOKEN_KEYS)

    if not url:
        raise ConfigurationError(
            f"Missing required environment variables: {' or '.join(DATABASE_URL_KEYS)}",
            missing=DATABASE_URL_KEYS,
        )

    settings = DatabaseSettings(url=url, auth_token=token)
    if settings.is_remote and not token:
        raise ConfigurationError(
            f"Missing required environment variables: {' or '.join(DATABASE_TOKEN_KEYS)}",
            missing=DATABASE_TOKEN_KEYS,
        )
    return settings


def get_user_api_settings(env: Optional[Mapping[str, str]] = None) -> UserApiSettings:
    if env is None:
        env = os.environ
    secret_key = env.get("CLERK_SECRET_KEY")
    if not secret_key:
        raise ConfigurationError(
            "Missing required environment variables: CLERK_SECRET_KEY",
            missing=("CLERK_SECRET_KEY",),
        )
    return UserApiSettings(
        secret_key=secret_key,
        base_url=env.get("CLERK_API_URL", DEFAULT_USER_API_URL).rstrip("/"),
    )
