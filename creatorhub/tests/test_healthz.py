from creatorhub.core.database import Database, users


def test_healthz_always_ok(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json().get("status") == "ok"


def test_readyz_ok_with_tables(client):
    resp = client.get("/readyz")
    assert resp.status_code == 200
    assert resp.json().get("status") == "ok"


def test_readyz_reports_missing_tables(client, db):
    users.drop(db.engine)
    resp = client.get("/readyz")
    assert resp.status_code == 503
    assert "users" in resp.json()["detail"]


def test_readyz_handles_db_down(client, monkeypatch):
    monkeypatch.setattr(Database, "check_connection", lambda self: False)
    resp = client.get("/readyz")
    assert resp.status_code == 503
    assert resp.json()["detail"] == "database unreachable"
