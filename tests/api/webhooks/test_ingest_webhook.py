"""Tests for the ingest webhook endpoint and signature verification."""

import time

import orjson
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from livecast.api.errors import app_error_handler
from livecast.api.webhooks.ingest import router, sign_ingest_payload, verify_ingest_signature
from livecast.app_config import get_app_environ_config
from livecast.domain.live.session.session_domain import get_session_service
from livecast.domain.live.session.session_models import SessionCreateParams
from livecast.utils.app_errors import AppError, ForbiddenError

SECRET = "whsec_test"


class TestVerifyIngestSignature:
    def test_valid_signature(self):
        body = b'{"access_key":"sk_1","event":"feed-detected"}'
        header = sign_ingest_payload(body, SECRET, 1_700_000_000)

        assert verify_ingest_signature(body, header, SECRET, now=1_700_000_010) is True

    def test_tampered_body(self):
        header = sign_ingest_payload(b"{}", SECRET, 1_700_000_000)

        assert verify_ingest_signature(b'{"x":1}', header, SECRET, now=1_700_000_000) is False

    def test_wrong_secret(self):
        header = sign_ingest_payload(b"{}", "other", 1_700_000_000)

        assert verify_ingest_signature(b"{}", header, SECRET, now=1_700_000_000) is False

    def test_missing_parts(self):
        with pytest.raises(ForbiddenError):
            verify_ingest_signature(b"{}", "v1=abc", SECRET)

    def test_bad_timestamp(self):
        with pytest.raises(ForbiddenError):
            verify_ingest_signature(b"{}", "t=soon,v1=abc", SECRET)

    def test_outside_tolerance(self):
        header = sign_ingest_payload(b"{}", SECRET, 1_700_000_000)

        with pytest.raises(ForbiddenError):
            verify_ingest_signature(b"{}", header, SECRET, tolerance_seconds=300, now=1_700_000_301)


@pytest.fixture
def test_app(service) -> FastAPI:
    app = FastAPI()
    app.dependency_overrides[get_session_service] = lambda: service
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.include_router(router)
    return app


@pytest.fixture
def client(test_app: FastAPI) -> TestClient:
    return TestClient(test_app)


@pytest.fixture
def no_secret(monkeypatch):
    monkeypatch.setattr(get_app_environ_config(), "INGEST_WEBHOOK_SECRET", None)


@pytest.fixture
def with_secret(monkeypatch):
    monkeypatch.setattr(get_app_environ_config(), "INGEST_WEBHOOK_SECRET", SECRET)


@pytest.fixture
async def access_key(service, store) -> str:
    view = await service.create_session(SessionCreateParams(owner_id="owner_a", title="demo"))
    return (await store.get(view.session_id)).access_key


class TestIngestWebhook:
    def test_events_drive_session_to_active(self, client: TestClient, access_key: str, no_secret):
        first = client.post("/webhooks/ingest", json={"access_key": access_key, "event": "feed-detected"})
        assert first.status_code == 200
        assert first.json()["results"]["status"] == "processing"

        second = client.post(
            "/webhooks/ingest", json={"access_key": access_key, "event": "first-segment-ready"}
        )
        results = second.json()["results"]
        assert results["status"] == "active"
        assert results["delivery_address"].endswith("/index.m3u8")

    def test_unknown_access_key(self, client: TestClient, no_secret):
        response = client.post("/webhooks/ingest", json={"access_key": "sk_nope", "event": "feed-detected"})

        assert response.status_code == 404

    def test_out_of_order_event_conflict(self, client: TestClient, access_key: str, no_secret):
        response = client.post("/webhooks/ingest", json={"access_key": access_key, "event": "feed-dropped"})

        assert response.status_code == 409
        assert response.json()["errcode"] == "E_INVALID_TRANSITION"

    def test_unknown_event_rejected(self, client: TestClient, access_key: str, no_secret):
        response = client.post("/webhooks/ingest", json={"access_key": access_key, "event": "exploded"})

        assert response.status_code == 400

    def test_signature_required_when_secret_set(self, client: TestClient, access_key: str, with_secret):
        response = client.post("/webhooks/ingest", json={"access_key": access_key, "event": "feed-detected"})

        assert response.status_code == 403
        assert response.json()["errcode"] == "E_WEBHOOK_INVALID_SIGNATURE"

    def test_signed_request_accepted(self, client: TestClient, access_key: str, with_secret):
        body = orjson.dumps({"access_key": access_key, "event": "feed-detected"})
        header = sign_ingest_payload(body, SECRET, int(time.time()))

        response = client.post(
            "/webhooks/ingest",
            content=body,
            headers={"X-Ingest-Signature": header, "Content-Type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json()["results"]["status"] == "processing"

    def test_bad_signature_rejected(self, client: TestClient, access_key: str, with_secret):
        body = orjson.dumps({"access_key": access_key, "event": "feed-detected"})
        header = sign_ingest_payload(body, "wrong", int(time.time()))

        response = client.post(
            "/webhooks/ingest",
            content=body,
            headers={"X-Ingest-Signature": header, "Content-Type": "application/json"},
        )

        assert response.status_code == 403
