"""Domain exceptions for the application.

These exceptions represent business-logic and authorization errors and are
converted to ``{"success": false, "message": ...}`` responses by the
exception handlers.
"""

from typing import Any

from rolegate.core.constants import (
    MSG_AUTH_REQUIRED,
    MSG_INTERNAL_ERROR,
    MSG_INVALID_DATA,
    MSG_METHOD_NOT_ALLOWED,
)


class AppException(Exception):
    """Base exception for all application errors.

    All domain exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Additional error details, merged into the response body
    """

    message: str = MSG_INTERNAL_ERROR
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Raised when a requested resource is not found.

    Example:
        raise NotFoundError("Rol no encontrado", resource="role", resource_id=str(role_id))
    """

    message = "Recurso no encontrado"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    """Raised when an operation is blocked by dependent data.

    Example:
        raise ConflictError(
            "No se puede eliminar el rol",
            details={"count": 3},
        )
    """

    message = "Conflicto con el estado actual del recurso"
    error_code = "conflict"
    status_code = 409


class DuplicateAssignmentError(ConflictError):
    """Raised when a principal already holds the role being granted."""

    message = "El usuario ya tiene este rol asignado"
    error_code = "duplicate_assignment"


class ValidationError(AppException):
    """Raised when request data fails validation.

    Example:
        raise ValidationError(
            "Datos inválidos",
            errors=[{"field": "permissionIds", "message": "Permiso inexistente"}]
        )
    """

    message = MSG_INVALID_DATA
    error_code = "validation_error"
    status_code = 400

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors
        super().__init__(message=message, details=details, **kwargs)


class BadRequestError(AppException):
    """Raised for general client errors."""

    message = "Solicitud inválida"
    error_code = "bad_request"
    status_code = 400


class DuplicateNameError(BadRequestError):
    """Raised when a role name is already taken."""

    message = "Ya existe un rol con ese nombre"
    error_code = "duplicate_name"


class DuplicateActionError(BadRequestError):
    """Raised when a permission with the same action and resource exists."""

    message = "Ya existe un permiso con esa acción"
    error_code = "duplicate_action"


class UnauthorizedError(AppException):
    """Raised when no authenticated principal is attached to the request."""

    message = MSG_AUTH_REQUIRED
    error_code = "unauthenticated"
    status_code = 401


class ForbiddenError(AppException):
    """Raised when the principal lacks the required role, permission or ownership.

    Example:
        raise ForbiddenError("No tienes permisos para eliminar roles")
    """

    message = "Acceso denegado"
    error_code = "forbidden"
    status_code = 403


class MethodNotAllowedError(AppException):
    """Raised when a dynamic policy has no entry for the request method."""

    message = MSG_METHOD_NOT_ALLOWED
    error_code = "method_not_allowed"
    status_code = 405


class InternalError(AppException):
    """Raised when the store fails while an operation is in progress.

    The client-visible message stays generic; ``detail`` travels in the
    ``error`` field only when ``expose_error_detail`` is enabled.
    """

    message = MSG_INTERNAL_ERROR
    error_code = "internal_error"
    status_code = 500

    def __init__(self, detail: str | None = None, **kwargs: Any) -> None:
        self.detail = detail
        super().__init__(**kwargs)
