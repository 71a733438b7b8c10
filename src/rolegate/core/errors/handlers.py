"""Exception handlers producing the ``{success, message}`` error envelope.

Every error leaving the API has the shape::

    {"success": false, "message": "...", ...}

Extra keys come from the exception ``details`` (for example ``count`` on a
blocked deletion or ``errors`` on validation failures).
"""

from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from rolegate.config import settings
from rolegate.core.constants import (
    MSG_INTERNAL_ERROR,
    MSG_INVALID_DATA,
    MSG_METHOD_NOT_ALLOWED,
)
from rolegate.core.errors.exceptions import AppException, InternalError


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()


class FieldError(BaseModel):
    """Represents a single field validation error."""

    field: str
    message: str
    type: str | None = None


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing endpoint.

    Attributes:
        success: Always False
        message: Human-readable, user-facing message
        error: Internal detail (only on 500 responses)
        errors: Field-level errors (only on validation failures)
    """

    success: bool = False
    message: str
    error: str | None = None
    errors: list[FieldError] | None = None

    model_config = {"extra": "allow"}


def _principal_id(request: Request) -> str | None:
    principal = getattr(request.state, "principal", None)
    return str(principal.id) if principal is not None else None


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle application-specific exceptions.

    Converts AppException subclasses to the error envelope.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "app_exception",
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        path=str(request.url.path),
        method=request.method,
        user_id=_principal_id(request),
        details=exc.details,
    )

    error_detail = None
    if isinstance(exc, InternalError) and settings.expose_error_detail:
        error_detail = exc.detail

    content: dict[str, Any] = ErrorResponse(
        message=exc.message,
        error=error_detail,
    ).model_dump(exclude_none=True)

    # Add any additional details from the exception
    for key, value in exc.details.items():
        if key not in content:
            content[key] = value

    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors.

    Converts FastAPI/Pydantic validation errors to a 400 envelope with
    field-level error information.
    """
    errors: list[FieldError] = []

    for error in exc.errors():
        # Build field path from location
        loc = error.get("loc", ())
        # Skip "body"/"query"/"path" prefix in field path
        field_parts = [str(part) for part in loc if part not in ("body", "query", "path")]
        field = ".".join(field_parts) if field_parts else "unknown"

        errors.append(
            FieldError(
                field=field,
                message=error.get("msg", "Valor inválido"),
                type=error.get("type"),
            )
        )

    logger.warning(
        "validation_error",
        path=str(request.url.path),
        error_count=len(errors),
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(
            message=MSG_INVALID_DATA,
            errors=errors,
        ).model_dump(exclude_none=True),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Wrap router-level HTTP errors (unknown path, unrouted method)."""
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        message = MSG_METHOD_NOT_ALLOWED
    else:
        message = str(exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=message).model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions.

    Catches all unhandled exceptions and returns a generic 500 error.
    """
    logger.exception(
        "unhandled_exception",
        path=str(request.url.path),
        error_type=type(exc).__name__,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            message=MSG_INTERNAL_ERROR,
            error=str(exc) if settings.expose_error_detail else None,
        ).model_dump(exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Call this function during app initialization:

        app = FastAPI()
        register_exception_handlers(app)
    """
    app.add_exception_handler(
        AppException, cast("ExceptionHandler", app_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast("ExceptionHandler", validation_exception_handler)
    )
    app.add_exception_handler(
        StarletteHTTPException, cast("ExceptionHandler", http_exception_handler)
    )
    app.add_exception_handler(Exception, generic_exception_handler)
