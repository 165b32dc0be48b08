"""Smoke tests for the assembled application."""

from fastapi.testclient import TestClient

from livecast.main import app, build_granian_kwargs


def test_health():
    client = TestClient(app)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["results"] == "OK"


def test_routes_mounted():
    paths = {route.path for route in app.routes}

    assert "/api/v1/session/create_session" in paths
    assert "/api/v1/session/get_delivery" in paths
    assert "/webhooks/ingest" in paths


def test_lifespan_starts_and_stops_sweeper():
    with TestClient(app) as client:
        sweeper = app.state.expiry_sweeper
        assert sweeper.sweep_task.running
        assert client.get("/health").status_code == 200

    assert not sweeper.sweep_task.running


def test_unknown_session_envelope():
    response = TestClient(app).get("/api/v1/session/get_session", params={"session_id": "st_missing"})

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["errcode"] == "E_SESSION_NOT_FOUND"


def test_granian_kwargs():
    kwargs = build_granian_kwargs()

    assert kwargs["interface"] == "asgi"
    assert isinstance(kwargs["port"], int)
