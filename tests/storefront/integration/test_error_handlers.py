"""Errors raised below the routes are rendered in the response envelope."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError
from storefront.api.errors import register_error_handlers
from storefront.errors import AccessDeniedError, NotFoundError


@pytest.fixture()
def failing_client():
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/stale")
    async def stale():
        raise ExpectedVersionError("Wrong expected version: 0 (Aggregate: Discount(d-1), Version: 1)")

    @app.get("/not-found")
    async def not_found():
        raise NotFoundError({"discount_id": ["Discount not found"]})

    @app.get("/bare-not-found")
    async def bare_not_found():
        raise ObjectNotFoundError("Discount with id d-1 does not exist")

    @app.get("/denied")
    async def denied():
        raise AccessDeniedError({"order_id": ["You are not allowed to view this order"]})

    @app.get("/boom")
    async def boom():
        raise RuntimeError("boom")

    return TestClient(app, raise_server_exceptions=False)


def test_stale_write_is_a_conflict(failing_client):
    response = failing_client.get("/stale")

    assert response.status_code == 409
    body = response.json()
    assert body["status"] == "error"
    assert body["message"] == "The record was changed by another request, please retry"
    assert body["data"]["version"] == ["Wrong expected version: 0 (Aggregate: Discount(d-1), Version: 1)"]
    assert "pagination" not in body


def test_not_found_keeps_field_messages(failing_client):
    response = failing_client.get("/not-found")

    assert response.status_code == 404
    assert response.json() == {
        "status": "error",
        "message": "Discount not found",
        "data": {"discount_id": ["Discount not found"]},
    }


def test_not_found_without_field_messages(failing_client):
    response = failing_client.get("/bare-not-found")

    assert response.status_code == 404
    assert response.json()["message"] == "Resource not found"
    assert response.json()["data"] == []


def test_access_denied_keeps_field_messages(failing_client):
    response = failing_client.get("/denied")

    assert response.status_code == 403
    assert response.json()["message"] == "You are not allowed to view this order"


def test_unexpected_error_is_hidden(failing_client):
    response = failing_client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {"status": "error", "message": "Internal server error", "data": []}


def test_domain_errors_expose_messages():
    error = NotFoundError({"item_id": ["Item not found in cart"]})

    assert error.messages == {"item_id": ["Item not found in cart"]}
    assert AccessDeniedError({"order_id": ["nope"]}).messages == {"order_id": ["nope"]}
