"""Тесты health endpoints."""
import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client():
    from apps.backend.main import app
    return TestClient(app)


def test_healthz(client: TestClient):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"
    assert r.headers.get("X-Trace-Id")


def test_trace_id_is_echoed_when_supplied(client: TestClient):
    r = client.get("/healthz", headers={"X-Trace-Id": "abc-123-trace"})
    assert r.headers.get("X-Trace-Id") == "abc-123-trace"
