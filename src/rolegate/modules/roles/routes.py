"""Role store and role assignment API routes.

Static paths (``/assign``, ``/remove/...``, ``/users/...``, ``/me/access``)
are declared before ``/{role_id}`` so they are matched first.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from rolegate.api.dependencies import Pagination
from rolegate.core.auth import CurrentPrincipal
from rolegate.core.permissions import require_ownership_or_admin, require_permission
from rolegate.core.schemas import MessageResponse, PaginationMeta, SuccessResponse
from rolegate.modules.permissions.schemas import PermissionBrief
from rolegate.modules.roles.schemas import (
    AccessResponse,
    AssignmentResponse,
    RoleAssign,
    RoleCreate,
    RoleListData,
    RoleResponse,
    RoleUpdate,
)
from rolegate.modules.roles.services import RoleAssignmentSvc, RoleSvc


router = APIRouter(prefix="/roles", tags=["roles"])


@router.get(
    "",
    response_model=SuccessResponse[RoleListData],
    summary="List roles",
    description="Paginated roles, newest first, with their permissions.",
    dependencies=[Depends(require_permission("leer", "roles"))],
)
async def list_roles(
    service: RoleSvc,
    pagination: Pagination,
    active: Annotated[bool | None, Query()] = None,
) -> SuccessResponse[RoleListData]:
    """List roles."""
    roles, total = await service.list_roles(
        active=active,
        page=pagination.page,
        limit=pagination.limit,
    )
    return SuccessResponse(
        data=RoleListData(
            roles=[RoleResponse.model_validate(role) for role in roles],
            pagination=PaginationMeta.build(total, pagination.page, pagination.limit),
        )
    )


@router.post(
    "",
    response_model=SuccessResponse[RoleResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a role",
    dependencies=[Depends(require_permission("crear", "roles"))],
)
async def create_role(
    data: RoleCreate,
    service: RoleSvc,
) -> SuccessResponse[RoleResponse]:
    """Create a role with its permissions."""
    role = await service.create_role(data)
    return SuccessResponse(
        message="Rol creado exitosamente",
        data=RoleResponse.model_validate(role),
    )


@router.post(
    "/assign",
    response_model=SuccessResponse[AssignmentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Grant a role to a principal",
    description="Fails with 409 when the principal already holds the role.",
    dependencies=[Depends(require_permission("asignar", "roles"))],
)
async def assign_role(
    data: RoleAssign,
    service: RoleAssignmentSvc,
) -> SuccessResponse[AssignmentResponse]:
    """Grant a role, optionally until ``expiresAt``."""
    assignment = await service.assign_role(data.user_id, data.role_id, data.expires_at)
    return SuccessResponse(
        message="Rol asignado exitosamente al usuario",
        data=AssignmentResponse.model_validate(assignment),
    )


@router.delete(
    "/remove/{user_id}/{role_id}",
    response_model=MessageResponse,
    summary="Revoke a role from a principal",
    dependencies=[Depends(require_permission("asignar", "roles"))],
)
async def remove_role(
    user_id: UUID,
    role_id: UUID,
    service: RoleAssignmentSvc,
) -> MessageResponse:
    """Revoke a role."""
    await service.revoke_role(user_id, role_id)
    return MessageResponse(message="Rol removido exitosamente del usuario")


@router.get(
    "/users/{user_id}",
    response_model=SuccessResponse[list[AssignmentResponse]],
    summary="List a principal's assignments",
    description="Available to the principal itself and to administrators.",
    dependencies=[Depends(require_ownership_or_admin("user_id"))],
)
async def list_user_assignments(
    user_id: UUID,
    service: RoleAssignmentSvc,
) -> SuccessResponse[list[AssignmentResponse]]:
    """List assignments, expired ones included."""
    assignments = await service.list_assignments(user_id)
    return SuccessResponse(
        data=[AssignmentResponse.model_validate(a) for a in assignments]
    )


@router.get(
    "/me/access",
    response_model=SuccessResponse[AccessResponse],
    summary="Caller's roles and permissions",
)
async def my_access(
    principal: CurrentPrincipal,
    service: RoleAssignmentSvc,
) -> SuccessResponse[AccessResponse]:
    """Describe what the caller can currently do."""
    names, permissions = await service.describe_access(principal.id)
    return SuccessResponse(
        data=AccessResponse(
            user_id=principal.id,
            roles=names,
            permissions=[PermissionBrief.model_validate(p) for p in permissions],
        )
    )


@router.get(
    "/{role_id}",
    response_model=SuccessResponse[RoleResponse],
    summary="Get a role",
    dependencies=[Depends(require_permission("leer", "roles"))],
)
async def get_role(
    role_id: UUID,
    service: RoleSvc,
) -> SuccessResponse[RoleResponse]:
    """Get a role with its permissions."""
    role = await service.get_role(role_id)
    return SuccessResponse(data=RoleResponse.model_validate(role))


@router.put(
    "/{role_id}",
    response_model=SuccessResponse[RoleResponse],
    summary="Update a role",
    description="``permissionIds``, when sent, replaces the role's whole permission set.",
    dependencies=[Depends(require_permission("actualizar", "roles"))],
)
async def update_role(
    role_id: UUID,
    data: RoleUpdate,
    service: RoleSvc,
) -> SuccessResponse[RoleResponse]:
    """Apply a partial update to a role."""
    role = await service.update_role(role_id, data)
    return SuccessResponse(
        message="Rol actualizado exitosamente",
        data=RoleResponse.model_validate(role),
    )


@router.delete(
    "/{role_id}",
    response_model=MessageResponse,
    summary="Deactivate a role",
    description="Fails with 409 while any principal holds an active assignment of the role.",
    dependencies=[Depends(require_permission("eliminar", "roles"))],
)
async def delete_role(
    role_id: UUID,
    service: RoleSvc,
) -> MessageResponse:
    """Deactivate a role and unlink its permissions."""
    await service.deactivate_role(role_id)
    return MessageResponse(message="Rol eliminado exitosamente")
