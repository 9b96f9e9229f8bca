import pytest
from fastapi.testclient import TestClient

from backend.app import create_app
from backend.config import DatabaseSettings
from backend.errors import errors


@pytest.fixture
def app(tmp_path):
    return create_app(DatabaseSettings(f"sqlite:///{tmp_path / 'api.db'}"))


@pytest.fixture
def test_client(app):
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


def test_public_health_ok(test_client):
    resp = test_client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body.get("status") == "ok"
    assert resp.headers["X-Request-ID"]
    assert resp.headers["X-DB-Time"] == "0.00"


def test_api_health_checks_database(test_client):
    resp = test_client.get("/api/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["database"] == "ok"
    assert resp.headers["Server-Timing"].startswith("health_check;dur=")


def test_api_health_degraded_without_database(monkeypatch):
    monkeypatch.delenv("TURSO_DATABASE_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with TestClient(create_app()) as client:
        body = client.get("/api/health").json()
    assert body["status"] == "degraded"
    assert body["database"].startswith("error:")
    assert body["environment"] == {"missing": ["TURSO_DATABASE_URL", "DATABASE_URL"]}


def test_language_from_header(test_client):
    resp = test_client.get("/api/i18n/nav.map", headers={"Accept-Language": "es-MX;q=0.8,fr;q=0.9"})
    assert resp.status_code == 200
    assert resp.json() == {"key": "nav.map", "language": "fr", "value": "Carte"}
    assert resp.headers["Content-Language"] == "fr"


def test_lang_query_overrides_header(test_client):
    resp = test_client.get(
        "/api/i18n/county.churchesIn",
        params={"lang": "es", "county": "Utah"},
        headers={"Accept-Language": "fr"},
    )
    assert resp.json()["value"] == "Iglesias en Utah"
    assert resp.headers["Content-Language"] == "es"


def test_unknown_key_is_not_found(test_client):
    resp = test_client.get("/api/i18n/does.not.exist")
    assert resp.status_code == 404
    assert resp.json() == {
        "error": "Not Found",
        "message": "Translation key 'does.not.exist' not found",
        "status_code": 404,
    }


def test_app_error_handler(app, test_client):
    @app.get("/forbidden")
    async def forbidden():
        raise errors.forbidden()

    resp = test_client.get("/forbidden")
    assert resp.status_code == 403
    assert resp.json() == {"error": "Permission Error", "message": "Access denied", "status_code": 403}


def test_unhandled_error_is_sanitized(app, test_client, caplog):
    @app.get("/boom")
    async def boom():
        raise RuntimeError("Failed query for admin@example.com")

    with caplog.at_level("ERROR", logger="backend.error_handlers"):
        resp = test_client.get("/boom")

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Internal server error"
    assert body["error_id"].startswith("ERR-")
    assert "admin@example.com" not in body["message"]
    assert body["type"] == "Database Error"
    assert any(getattr(r, "fields", {}).get("error_id") == body["error_id"] for r in caplog.records)
