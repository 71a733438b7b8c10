"""Principal and request tracing middleware.

This module provides middleware for:
- Attaching the authenticated principal to requests
- Request tracing with unique IDs
"""

import uuid

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from rolegate.core.auth.backend import decode_token
from rolegate.core.auth.schemas import Principal


logger = structlog.get_logger()


class PrincipalMiddleware(BaseHTTPMiddleware):
    """Middleware that attaches the authenticated principal to the request.

    Reads a bearer token from the Authorization header and, when it decodes
    to a valid access token, stores ``Principal(id, role_hint)`` on
    ``request.state.principal``. Missing or invalid tokens leave the request
    unauthenticated; the authorization guards turn that into a 401.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process the request and attach the principal if present.

        Args:
            request: The incoming request
            call_next: The next middleware/handler

        Returns:
            The response from the handler
        """
        request.state.principal = None

        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            token = auth_header.split(" ", 1)[1]
            token_data = decode_token(token)

            if token_data and token_data.type == "access":
                request.state.principal = Principal(
                    id=token_data.user_id,
                    role_hint=token_data.role,
                )
                structlog.contextvars.bind_contextvars(user_id=str(token_data.user_id))
            else:
                logger.info("invalid_token_ignored", path=request.url.path)

        return await call_next(request)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware that adds a unique request ID to each request.

    The request ID is added to:
    - request.state.request_id
    - Response header X-Request-ID
    - Structlog context
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process the request and add request ID.

        Args:
            request: The incoming request
            call_next: The next middleware/handler

        Returns:
            The response with X-Request-ID header
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id

        structlog.contextvars.unbind_contextvars("request_id", "user_id")

        return response
