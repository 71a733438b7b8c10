"""FastAPI dependencies exposing the authenticated principal."""

from typing import Annotated

from fastapi import Depends, Request

from rolegate.core.auth.schemas import Principal
from rolegate.core.errors import UnauthorizedError


def get_optional_principal(request: Request) -> Principal | None:
    """Get the principal attached by the authentication layer, if any."""
    return getattr(request.state, "principal", None)


def get_principal(request: Request) -> Principal:
    """Get the authenticated principal.

    Raises:
        UnauthorizedError: If no principal is attached to the request
    """
    principal = get_optional_principal(request)
    if principal is None:
        raise UnauthorizedError()
    return principal


OptionalPrincipal = Annotated[Principal | None, Depends(get_optional_principal)]
CurrentPrincipal = Annotated[Principal, Depends(get_principal)]
