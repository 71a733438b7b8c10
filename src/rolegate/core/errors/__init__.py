"""Error handling module with the success/message response envelope."""

from rolegate.core.errors.exceptions import (
    AppException,
    BadRequestError,
    ConflictError,
    DuplicateActionError,
    DuplicateAssignmentError,
    DuplicateNameError,
    ForbiddenError,
    InternalError,
    MethodNotAllowedError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from rolegate.core.errors.handlers import (
    ErrorResponse,
    FieldError,
    register_exception_handlers,
)


__all__ = [
    # Exceptions
    "AppException",
    "BadRequestError",
    "ConflictError",
    "DuplicateActionError",
    "DuplicateAssignmentError",
    "DuplicateNameError",
    # Handlers
    "ErrorResponse",
    "FieldError",
    "ForbiddenError",
    "InternalError",
    "MethodNotAllowedError",
    "NotFoundError",
    "UnauthorizedError",
    "ValidationError",
    "register_exception_handlers",
]
