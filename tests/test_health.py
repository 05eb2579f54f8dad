from __future__ import annotations


def test_health(client):
    rv = client.get("/api/health")
    assert rv.status_code == 200
    body = rv.get_json()
    assert body["status"] == "healthy"
    assert body["services"]["database"] == "healthy"


def test_docs_redirect(client):
    rv = client.get("/api/docs")
    assert rv.status_code == 302
    assert rv.headers["Location"].endswith("/apidocs")


def test_unknown_route_is_json(client):
    rv = client.get("/api/nope")
    assert rv.status_code == 404
    assert "error" in rv.get_json()
