"""Tests for the version and health routes."""

import pytest
from fastapi.testclient import TestClient

from api.routes.system import router
from infrastructure.configuration import settings
from infrastructure.operations import OperationResult
from infrastructure.resilience import get_circuit_breaker
from utils.tests import create_test_app, rate_limiting_helper


@pytest.fixture
def app():
    return create_test_app(router)


@pytest.mark.unit
def test_version(app):
    response = TestClient(app).get("/version")

    assert response.status_code == 200
    assert response.json() == {"version": settings.GIT_SHA}


@pytest.mark.unit
def test_health_ok(app):
    assert TestClient(app).get("/health").json() == {"status": "ok", "open_circuits": []}


@pytest.mark.unit
def test_health_degraded_when_a_circuit_is_open(app):
    breaker = get_circuit_breaker("webhook:https://example.com/hook", failure_threshold=1)
    breaker.call(lambda: OperationResult.transient_error("down"))

    response = TestClient(app).get("/health")

    assert response.json() == {
        "status": "degraded",
        "open_circuits": ["webhook:https://example.com/hook"],
    }


@pytest.mark.unit
@pytest.mark.asyncio
async def test_version_rate_limiting(app):
    await rate_limiting_helper(app, "/version", 50)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_forwarded_clients_are_limited_separately(app):
    await rate_limiting_helper(app, "/health", 50, headers={"X-Forwarded-For": "10.0.0.1"})
    await rate_limiting_helper(app, "/health", 50, headers={"X-Forwarded-For": "10.0.0.2, 10.0.0.9"})
