"""Route guards.

Each constructor returns an async FastAPI dependency that resolves the
request's principal, evaluates a policy against the assignment store and
either lets the request through or raises. Guards return the principal so
handlers can reuse it.

Usage:
    @router.delete("/{role_id}")
    async def delete_role(
        role_id: UUID,
        principal: Annotated[Principal, Depends(require_permission("eliminar", "roles"))],
    ):
        ...

    @router.get("/", dependencies=[Depends(require_admin())])
    async def admin_only():
        ...
"""

from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Annotated, Any

import structlog
from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.config import settings
from rolegate.core.auth import CurrentPrincipal, OptionalPrincipal, Principal
from rolegate.core.database import get_db
from rolegate.core.errors import InternalError, MethodNotAllowedError
from rolegate.core.permissions.policies import (
    Policy,
    RequireOwnership,
    RequirePermission,
    RequireRole,
    enforce,
    is_owner,
)
from rolegate.core.permissions.resolver import AssignmentResolver


logger = structlog.get_logger()

GuardSession = Annotated[AsyncSession, Depends(get_db)]
Guard = Callable[..., Awaitable[Principal]]
IdExtractor = Callable[[Request], Any]


async def _run(
    policy: Policy,
    principal: Principal,
    request: Request,
    resolver: AssignmentResolver,
    path_params: Mapping[str, Any] | None = None,
) -> None:
    """Evaluate a policy, turning store failures into ``InternalError``."""
    try:
        await enforce(
            policy,
            principal.id,
            resolver,
            request.path_params if path_params is None else path_params,
            request.url.path,
        )
    except SQLAlchemyError as exc:
        logger.error(
            "authorization_check_failed",
            user_id=str(principal.id),
            path=request.url.path,
            error=str(exc),
        )
        raise InternalError(detail=str(exc)) from exc


async def _remember_roles(
    request: Request, principal: Principal, resolver: AssignmentResolver
) -> None:
    try:
        names = await resolver.get_active_role_names(principal.id)
    except SQLAlchemyError as exc:
        raise InternalError(detail=str(exc)) from exc
    request.state.user_roles = sorted(names)


def require_permission(action: str, resource: str) -> Guard:
    """Guard requiring the ``action`` permission on ``resource``.

    Args:
        action: The action being performed (e.g., "eliminar")
        resource: The resource being accessed (e.g., "roles")
    """
    policy = RequirePermission(action, resource)

    async def permission_guard(
        request: Request, principal: CurrentPrincipal, db: GuardSession
    ) -> Principal:
        await _run(policy, principal, request, AssignmentResolver(db))
        return principal

    return permission_guard


def _role_guard(names: Iterable[str], require_all: bool) -> Guard:
    policy = RequireRole(tuple(names), require_all=require_all)

    async def role_guard(
        request: Request, principal: CurrentPrincipal, db: GuardSession
    ) -> Principal:
        resolver = AssignmentResolver(db)
        await _run(policy, principal, request, resolver)
        await _remember_roles(request, principal, resolver)
        return principal

    return role_guard


def require_any_role(names: Iterable[str]) -> Guard:
    """Guard requiring at least one of the named roles.

    On success the principal's role names are stored on
    ``request.state.user_roles``.
    """
    return _role_guard(names, require_all=False)


def require_all_roles(names: Iterable[str]) -> Guard:
    """Guard requiring every one of the named roles.

    On success the principal's role names are stored on
    ``request.state.user_roles``.
    """
    return _role_guard(names, require_all=True)


def require_admin() -> Guard:
    """Guard requiring the administrator role."""
    return require_any_role([settings.admin_role_name])


def require_ownership_or_admin(id_extractor: IdExtractor | str = "user_id") -> Guard:
    """Guard letting a principal through when it owns the target, or is admin.

    Args:
        id_extractor: Either the name of the path parameter holding the
            target principal id, or a callable extracting it from the request
    """
    if isinstance(id_extractor, str):
        field = id_extractor

        def extract(request: Request) -> Any:
            return request.path_params.get(field)

    else:
        extract = id_extractor

    policy = RequireOwnership("target")

    async def ownership_guard(
        request: Request, principal: CurrentPrincipal, db: GuardSession
    ) -> Principal:
        resolver = AssignmentResolver(db)
        target = extract(request)
        await _run(policy, principal, request, resolver, {"target": target})
        if not is_owner(principal.id, target):
            # Passed through the admin fallback
            await _remember_roles(request, principal, resolver)
        return principal

    return ownership_guard


def dynamic_policy(config: Mapping[str, Policy]) -> Guard:
    """Guard selecting the policy by HTTP method.

    Methods without an entry are rejected with 405.

    Example:
        dynamic_policy({
            "GET": RequireOwnership("user_id"),
            "DELETE": RequireRole(("admin",)),
        })
    """
    by_method = {method.upper(): policy for method, policy in config.items()}

    async def dynamic_guard(
        request: Request, principal: CurrentPrincipal, db: GuardSession
    ) -> Principal:
        policy = by_method.get(request.method.upper())
        if policy is None:
            logger.warning(
                "method_not_configured",
                user_id=str(principal.id),
                method=request.method,
                path=request.url.path,
            )
            raise MethodNotAllowedError()
        await _run(policy, principal, request, AssignmentResolver(db))
        return principal

    return dynamic_guard


def enrich_user_context() -> Callable[..., Awaitable[None]]:
    """Dependency attaching the principal's roles and permissions to the request.

    Sets ``request.state.user_roles`` and ``request.state.user_permissions``
    when a principal is present. Never denies: anonymous requests pass
    untouched and a store failure leaves the context empty.
    """

    async def enrich(
        request: Request, principal: OptionalPrincipal, db: GuardSession
    ) -> None:
        request.state.user_roles = []
        request.state.user_permissions = []
        if principal is None:
            return

        try:
            names, permissions = await AssignmentResolver(db).describe(principal.id)
        except SQLAlchemyError as exc:
            logger.warning(
                "user_context_unavailable",
                user_id=str(principal.id),
                error=str(exc),
            )
            return

        request.state.user_roles = names
        request.state.user_permissions = [
            {
                "action": permission.action,
                "resource": permission.resource,
                "description": permission.description,
            }
            for permission in permissions
        ]
        logger.debug(
            "user_context_enriched",
            role_count=len(names),
            permission_count=len(permissions),
        )

    return enrich
