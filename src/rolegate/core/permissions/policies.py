"""Access policies.

A policy describes what a request needs in order to pass. Policies are plain
values so a route can declare them up front, for example one per HTTP method:

    {
        "GET": RequireOwnership("user_id"),
        "PUT": Combined((RequireRole(("admin",)), RequirePermission("actualizar", "usuarios"))),
    }

``enforce`` evaluates a policy for a principal and raises ``ForbiddenError``
on the first requirement that is not met.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import structlog

from rolegate.config import settings
from rolegate.core.constants import MSG_RESOURCE_FORBIDDEN
from rolegate.core.errors import ForbiddenError
from rolegate.core.permissions.resolver import AssignmentResolver


logger = structlog.get_logger()


@dataclass(frozen=True)
class RequireRole:
    """Principal must hold one of ``roles`` (or all of them with ``require_all``)."""

    roles: tuple[str, ...]
    require_all: bool = False


@dataclass(frozen=True)
class RequirePermission:
    """Principal must hold the ``action`` permission on ``resource``."""

    action: str
    resource: str


@dataclass(frozen=True)
class RequireOwnership:
    """Path parameter ``field`` must be the principal's id, unless the principal is admin."""

    field: str = "user_id"


@dataclass(frozen=True)
class Combined:
    """Every policy must pass, evaluated in order."""

    policies: tuple["Policy", ...]


Policy = RequireRole | RequirePermission | RequireOwnership | Combined


def permission_denied_message(action: str, resource: str) -> str:
    return f"No tienes permisos para {action} {resource}"


def role_denied_message(roles: tuple[str, ...] | list[str], require_all: bool) -> str:
    names = ", ".join(roles)
    if require_all:
        return f"Se requieren todos los siguientes roles: {names}"
    return f"Se requiere uno de los siguientes roles: {names}"


def is_owner(principal_id: UUID, target: Any) -> bool:
    """Check if a raw path value identifies the principal.

    Values that are not valid UUIDs never match.
    """
    if target is None:
        return False
    if isinstance(target, UUID):
        return target == principal_id
    try:
        return UUID(str(target)) == principal_id
    except ValueError:
        return False


async def enforce(
    policy: Policy,
    principal_id: UUID,
    resolver: AssignmentResolver,
    path_params: Mapping[str, Any],
    path: str = "",
) -> None:
    """Evaluate a policy, raising on the first unmet requirement.

    Args:
        policy: The policy to evaluate
        principal_id: The authenticated principal's UUID
        resolver: Resolver bound to the request's session
        path_params: Route path parameters (used by ownership checks)
        path: Request path, for logging

    Raises:
        ForbiddenError: If the policy denies access
    """
    match policy:
        case RequirePermission(action=action, resource=resource):
            if not await resolver.has_permission(principal_id, action, resource):
                logger.warning(
                    "permission_denied",
                    user_id=str(principal_id),
                    action=action,
                    resource=resource,
                    path=path,
                )
                raise ForbiddenError(
                    permission_denied_message(action, resource),
                    error_code="permission_denied",
                )

        case RequireRole(roles=roles, require_all=require_all):
            if require_all:
                allowed = await resolver.has_all_roles(principal_id, roles)
            else:
                allowed = await resolver.has_any_role(principal_id, roles)
            if not allowed:
                logger.warning(
                    "role_denied",
                    user_id=str(principal_id),
                    roles=list(roles),
                    require_all=require_all,
                    path=path,
                )
                raise ForbiddenError(
                    role_denied_message(roles, require_all),
                    error_code="role_required",
                )

        case RequireOwnership(field=field):
            if is_owner(principal_id, path_params.get(field)):
                return
            if await resolver.has_any_role(principal_id, [settings.admin_role_name]):
                return
            logger.warning(
                "ownership_denied",
                user_id=str(principal_id),
                field=field,
                path=path,
            )
            raise ForbiddenError(MSG_RESOURCE_FORBIDDEN, error_code="not_owner")

        case Combined(policies=policies):
            for inner in policies:
                await enforce(inner, principal_id, resolver, path_params, path)

        case _:
            raise TypeError(f"Unknown policy: {policy!r}")
