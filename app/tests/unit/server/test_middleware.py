"""Tests for request correlation ids."""

import pytest
from fastapi import APIRouter
from fastapi.testclient import TestClient

from infrastructure.logging import get_correlation_id
from server.middleware import CORRELATION_HEADER, CorrelationIdMiddleware
from utils.tests import create_test_app

router = APIRouter()


@router.get("/echo")
def echo():
    return {"correlation_id": get_correlation_id()}


@pytest.fixture
def client():
    return TestClient(create_test_app(router, middlewares=[(CorrelationIdMiddleware, {})]))


@pytest.mark.unit
def test_incoming_id_is_bound_and_echoed(client):
    response = client.get("/echo", headers={CORRELATION_HEADER: "req-42"})

    assert response.headers[CORRELATION_HEADER] == "req-42"


@pytest.mark.unit
def test_id_is_generated_when_missing(client):
    response = client.get("/echo")

    assert response.headers[CORRELATION_HEADER]
