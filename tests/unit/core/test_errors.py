"""Unit tests for the error envelope."""

import json
from unittest.mock import MagicMock

import pytest

from rolegate.config import settings
from rolegate.core.errors import (
    ConflictError,
    DuplicateAssignmentError,
    DuplicateNameError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from rolegate.core.errors.handlers import app_exception_handler


pytestmark = pytest.mark.unit


def _request() -> MagicMock:
    request = MagicMock()
    request.url.path = "/api/v1/roles"
    request.method = "GET"
    request.state.principal = None
    return request


async def _render(exc) -> tuple[int, dict]:
    response = await app_exception_handler(_request(), exc)
    return response.status_code, json.loads(response.body)


class TestExceptions:
    def test_status_codes(self):
        assert UnauthorizedError().status_code == 401
        assert ForbiddenError().status_code == 403
        assert NotFoundError().status_code == 404
        assert ConflictError().status_code == 409
        assert DuplicateAssignmentError().status_code == 409
        assert DuplicateNameError().status_code == 400
        assert ValidationError().status_code == 400
        assert InternalError().status_code == 500

    def test_default_messages(self):
        assert UnauthorizedError().message == "Token de autenticación requerido"
        assert DuplicateAssignmentError().message == "El usuario ya tiene este rol asignado"
        assert DuplicateNameError().message == "Ya existe un rol con ese nombre"

    def test_not_found_records_resource(self):
        exc = NotFoundError("Rol no encontrado", resource="role", resource_id="42")

        assert exc.message == "Rol no encontrado"
        assert exc.details == {"resource": "role", "resource_id": "42"}

    def test_validation_error_carries_field_errors(self):
        exc = ValidationError(errors=[{"field": "name", "message": "requerido"}])

        assert exc.details["errors"] == [{"field": "name", "message": "requerido"}]


class TestAppExceptionHandler:
    async def test_envelope_shape(self):
        status, body = await _render(ForbiddenError("No tienes permisos para leer roles"))

        assert status == 403
        assert body == {"success": False, "message": "No tienes permisos para leer roles"}

    async def test_details_merged_into_body(self):
        status, body = await _render(
            ConflictError("No se puede eliminar el rol", details={"count": 3})
        )

        assert status == 409
        assert body["count"] == 3
        assert body["success"] is False

    async def test_internal_error_exposes_detail_when_enabled(self, monkeypatch):
        monkeypatch.setattr(settings, "expose_error_detail", True)

        status, body = await _render(InternalError(detail="connection reset"))

        assert status == 500
        assert body["message"] == "Error interno del servidor"
        assert body["error"] == "connection reset"

    async def test_internal_error_hides_detail_when_disabled(self, monkeypatch):
        monkeypatch.setattr(settings, "expose_error_detail", False)

        _, body = await _render(InternalError(detail="connection reset"))

        assert "error" not in body
