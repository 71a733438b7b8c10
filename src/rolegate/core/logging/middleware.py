"""Access log middleware.

Every request produces one structured line when it finishes. Requests the
guards turned away (401, 403, 405) are logged as ``request_denied`` so the
authorization trail can be filtered on a single event name.
"""

import time
from collections.abc import Sequence
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


logger = structlog.get_logger()

QUIET_PATH_PREFIXES = ("/health", "/docs", "/redoc", "/openapi.json")
DENIAL_STATUSES = frozenset({401, 403, 405})


def _access_fields(request: Request) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "method": request.method,
        "path": request.url.path,
    }
    if request.url.query:
        fields["query"] = request.url.query
    if request.client:
        fields["client_ip"] = request.client.host

    principal = getattr(request.state, "principal", None)
    if principal is not None:
        fields["user_id"] = str(principal.id)
        if principal.role_hint:
            fields["role_hint"] = principal.role_hint
    return fields


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request with its outcome and duration.

    Runs inside ``PrincipalMiddleware`` so the principal, when present, is
    already attached. Paths under ``quiet_prefixes`` are not logged.
    """

    def __init__(
        self,
        app: Any,
        quiet_prefixes: Sequence[str] = QUIET_PATH_PREFIXES,
    ) -> None:
        super().__init__(app)
        self.quiet_prefixes = tuple(quiet_prefixes)

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path.startswith(self.quiet_prefixes):
            return await call_next(request)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_failed",
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
                **_access_fields(request),
            )
            raise

        fields = _access_fields(request)
        fields["status_code"] = response.status_code
        fields["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)

        if response.status_code in DENIAL_STATUSES:
            logger.warning("request_denied", **fields)
        elif response.status_code >= 500:
            logger.error("request_completed", **fields)
        elif response.status_code >= 400:
            logger.warning("request_completed", **fields)
        else:
            logger.info("request_completed", **fields)

        return response
