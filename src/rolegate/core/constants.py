"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# String field lengths
MIN_ROLE_NAME_LENGTH = 2
MAX_ROLE_NAME_LENGTH = 50
MIN_PERMISSION_ACTION_LENGTH = 2
MIN_PERMISSION_RESOURCE_LENGTH = 1
MAX_PERMISSION_ACTION_LENGTH = 100
MAX_PERMISSION_RESOURCE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500

# Pagination defaults
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Role granted by the ownership fallback and required by system endpoints
ADMIN_ROLE_NAME = "admin"

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"

# User-facing messages shared by the guards and the error handlers
MSG_AUTH_REQUIRED = "Token de autenticación requerido"
MSG_METHOD_NOT_ALLOWED = "Método no permitido"
MSG_INTERNAL_ERROR = "Error interno del servidor"
MSG_RESOURCE_FORBIDDEN = "No tienes permisos para acceder a este recurso"
MSG_INVALID_DATA = "Datos inválidos"
