"""Tests for global exception handlers.

Validates that all exception types are handled consistently with
proper HTTP status codes, error format, and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from gateway.core.errors import AppError, ConfigurationAppError, ValidationAppError
from gateway.core.exception_handlers import general_exception_handler, setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers, raise_server_exceptions=False)


class TestAppErrorHandler:
    def test_validation_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation")
        async def endpoint():
            raise ValidationAppError(code="invalid_item", message="Item name must not be empty")

        response = client.get("/test-validation")

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "invalid_item"
        assert error["message"] == "Item name must not be empty"
        assert "request_id" in error
        assert "details" not in error

    def test_details_are_included_when_present(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-details")
        async def endpoint():
            raise ValidationAppError(
                code="invalid_item",
                message="Item id must not be empty",
                details={"field": "id"},
            )

        response = client.get("/test-details")

        assert response.json()["error"]["details"] == {"field": "id"}

    @pytest.mark.parametrize("error_cls", [AppError, ConfigurationAppError])
    def test_other_app_errors_return_500(self, client, app_with_handlers, error_cls):
        @app_with_handlers.get("/test-server-fault")
        async def endpoint():
            raise error_cls(code="invalid_duration", message="Invalid duration: 'x'")

        response = client.get("/test-server-fault")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "invalid_duration"


class TestGeneralExceptionHandler:
    def test_handler_registered(self, app_with_handlers: FastAPI):
        assert Exception in app_with_handlers.exception_handlers

    def test_returns_generic_error(self):
        request = AsyncMock()
        request.url.path = "/api/v1/items"
        request.method = "GET"

        response = asyncio.run(general_exception_handler(request, RuntimeError("db password=hunter2")))

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["error"]["code"] == "internal_server_error"
        assert "hunter2" not in response.body.decode()

    def test_unexpected_exception_through_app(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-crash")
        async def endpoint():
            raise RuntimeError("boom")

        response = client.get("/test-crash")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "internal_server_error"
