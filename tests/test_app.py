"""Tests for app-level wiring: health, error bodies, queue fallback."""
from app import extensions


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["status"] == "ok"
    assert data["db"] == "ok"
    assert data["queue"] == "inline"
    assert data["preview"] == "isolated"
    assert data["transpiler"] in ("ready", "not loaded")


def test_api_errors_are_json(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert "error" in resp.get_json()

    resp = client.put("/api/generations")
    assert resp.status_code == 405
    assert "error" in resp.get_json()


def test_page_errors_stay_html(client, db):
    resp = client.get("/preview/does-not-exist")
    assert resp.status_code == 404
    assert resp.mimetype == "text/html"


def test_inline_queue_without_redis():
    assert extensions.redis_client is None
    assert extensions.task_queue.enqueue(print, "x") is None
