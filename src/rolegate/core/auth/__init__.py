"""Authentication adapter: principal extraction from bearer tokens."""

from rolegate.core.auth.backend import create_access_token, decode_token
from rolegate.core.auth.dependencies import (
    CurrentPrincipal,
    OptionalPrincipal,
    get_optional_principal,
    get_principal,
)
from rolegate.core.auth.middleware import PrincipalMiddleware, RequestIdMiddleware
from rolegate.core.auth.schemas import Principal, TokenData


__all__ = [
    "CurrentPrincipal",
    "OptionalPrincipal",
    "Principal",
    "PrincipalMiddleware",
    "RequestIdMiddleware",
    "TokenData",
    "create_access_token",
    "decode_token",
    "get_optional_principal",
    "get_principal",
]
