"""
Promote legacy admin accounts on the hosted user-management service.

Legacy ``users`` rows with ``user_type = 'admin'`` are looked up on the
remote service by email and get ``role=admin`` merged into their public
metadata. Users who have not signed up remotely yet are reported, not
created.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class UserApiError(RuntimeError):
    """Raised when the user-management API answers with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class EmailAddress(BaseModel):
    id: Optional[str] = None
    email_address: str


class RemoteUser(BaseModel):
    id: str
    email_addresses: List[EmailAddress] = []
    public_metadata: Dict[str, Any] = {}

    @property
    def primary_email(self) -> Optional[str]:
        return self.email_addresses[0].email_address if self.email_addresses else None


class LegacyAdmin(BaseModel):
    id: int
    email: str
    username: Optional[str] = None


class UserApiClient:
    """Minimal async client for the user-management REST API."""

    def __init__(self, secret_key: str, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {secret_key}"},
            transport=transport,
            timeout=30.0,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._client.request(method, path, **kwargs)
        if not response.is_success:
            raise UserApiError(
                f"{method} {path} failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        return response.json()

    async def list_users(self, email: Optional[str] = None) -> List[RemoteUser]:
        params = {"email_address": email} if email else None
        data = await self._request("GET", "/users", params=params)
        return [RemoteUser.model_validate(item) for item in data]

    async def get_user(self, user_id: str) -> RemoteUser:
        return RemoteUser.model_validate(await self._request("GET", f"/users/{user_id}"))

    async def update_user_metadata(self, user_id: str, public_metadata: Dict[str, Any]) -> RemoteUser:
        data = await self._request("PATCH", f"/users/{user_id}", json={"public_metadata": public_metadata})
        return RemoteUser.model_validate(data)


@dataclass
class AdminMigrationReport:
    total: int = 0
    promoted: list = field(default_factory=list)
    not_found: list = field(default_factory=list)
    errors: dict = field(default_factory=dict)


def fetch_legacy_admins(engine: Engine) -> List[LegacyAdmin]:
    with engine.connect() as conn:
        rows = conn.execute(text(
            "SELECT id, email, username FROM users WHERE user_type = 'admin' ORDER BY id"
        )).mappings()
        return [LegacyAdmin.model_validate(dict(row)) for row in rows]


async def promote_legacy_admins(
    engine: Engine,
    client: UserApiClient,
    now: Optional[datetime] = None,
) -> AdminMigrationReport:
    """Give every legacy admin the admin role on the remote service."""
    admins = fetch_legacy_admins(engine)
    migrated_at = (now or datetime.now(timezone.utc)).isoformat()
    report = AdminMigrationReport(total=len(admins))
    logger.info("Found %d admin users to migrate", len(admins))

    for admin in admins:
        try:
            matches = await client.list_users(email=admin.email)
            if not matches:
                logger.warning("User %s not found remotely; they need to sign up first", admin.email)
                report.not_found.append(admin.email)
                continue

            remote = matches[0]
            metadata = {
                **remote.public_metadata,
                "role": "admin",
                "migratedFrom": "legacy",
                "migratedAt": migrated_at,
            }
            await client.update_user_metadata(remote.id, metadata)
            logger.info("Updated user %s (%s) to admin role", remote.id, admin.email)
            report.promoted.append(admin.email)
        except (UserApiError, httpx.HTTPError) as e:
            logger.error("Error processing user %s: %s", admin.email, e)
            report.errors[admin.email] = str(e)

    return report
