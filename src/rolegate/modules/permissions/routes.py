"""Permission catalog API routes.

All routes require an authenticated principal. Reading and editing the
catalog is governed by the ``roles`` permissions; seeding the defaults
requires the admin role.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from rolegate.api.dependencies import Pagination
from rolegate.core.permissions import require_admin, require_permission
from rolegate.core.schemas import MessageResponse, PaginationMeta, SuccessResponse
from rolegate.modules.permissions.schemas import (
    InitializeData,
    PermissionBrief,
    PermissionCreate,
    PermissionListData,
    PermissionResponse,
    PermissionUpdate,
)
from rolegate.modules.permissions.services import PermissionSvc


router = APIRouter(prefix="/permissions", tags=["permissions"])


@router.get(
    "",
    response_model=SuccessResponse[PermissionListData],
    summary="List permissions",
    description="Paginated permissions ordered by resource and action, with the roles holding each.",
    dependencies=[Depends(require_permission("leer", "roles"))],
)
async def list_permissions(
    service: PermissionSvc,
    pagination: Pagination,
    resource: Annotated[str | None, Query()] = None,
) -> SuccessResponse[PermissionListData]:
    """List permissions."""
    permissions, total = await service.list_permissions(
        resource=resource,
        page=pagination.page,
        limit=pagination.limit,
    )
    return SuccessResponse(
        data=PermissionListData(
            permissions=[PermissionResponse.model_validate(p) for p in permissions],
            pagination=PaginationMeta.build(total, pagination.page, pagination.limit),
        )
    )


@router.get(
    "/by-resource",
    response_model=SuccessResponse[dict[str, list[PermissionBrief]]],
    summary="Permissions grouped by resource",
    dependencies=[Depends(require_permission("leer", "roles"))],
)
async def permissions_by_resource(
    service: PermissionSvc,
) -> SuccessResponse[dict[str, list[PermissionBrief]]]:
    """Group every permission under its resource."""
    grouped = await service.group_by_resource()
    return SuccessResponse(
        data={
            resource: [PermissionBrief.model_validate(p) for p in permissions]
            for resource, permissions in grouped.items()
        }
    )


@router.post(
    "/initialize",
    response_model=SuccessResponse[InitializeData],
    summary="Seed the default permissions",
    description="Creates the default permissions that do not exist yet. Safe to call repeatedly.",
    dependencies=[Depends(require_admin())],
)
async def initialize_permissions(
    service: PermissionSvc,
) -> SuccessResponse[InitializeData]:
    """Seed the default permission set."""
    created, total = await service.initialize_defaults()
    return SuccessResponse(
        message=f"Permisos inicializados. {len(created)} nuevos permisos creados",
        data=InitializeData(
            new_permissions=[PermissionBrief.model_validate(p) for p in created],
            total_permissions=total,
        ),
    )


@router.get(
    "/{permission_id}",
    response_model=SuccessResponse[PermissionResponse],
    summary="Get a permission",
    dependencies=[Depends(require_permission("leer", "roles"))],
)
async def get_permission(
    permission_id: UUID,
    service: PermissionSvc,
) -> SuccessResponse[PermissionResponse]:
    """Get a permission with the roles holding it."""
    permission = await service.get_permission(permission_id)
    return SuccessResponse(data=PermissionResponse.model_validate(permission))


@router.post(
    "",
    response_model=SuccessResponse[PermissionResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a permission",
    dependencies=[Depends(require_permission("crear", "roles"))],
)
async def create_permission(
    data: PermissionCreate,
    service: PermissionSvc,
) -> SuccessResponse[PermissionResponse]:
    """Declare a new permission."""
    permission = await service.create_permission(data)
    return SuccessResponse(
        message="Permiso creado exitosamente",
        data=PermissionResponse.model_validate(permission),
    )


@router.put(
    "/{permission_id}",
    response_model=SuccessResponse[PermissionResponse],
    summary="Update a permission",
    dependencies=[Depends(require_permission("actualizar", "roles"))],
)
async def update_permission(
    permission_id: UUID,
    data: PermissionUpdate,
    service: PermissionSvc,
) -> SuccessResponse[PermissionResponse]:
    """Apply a partial update to a permission."""
    permission = await service.update_permission(permission_id, data)
    return SuccessResponse(
        message="Permiso actualizado exitosamente",
        data=PermissionResponse.model_validate(permission),
    )


@router.delete(
    "/{permission_id}",
    response_model=MessageResponse,
    summary="Delete a permission",
    description="Fails with 409 while any role still holds the permission.",
    dependencies=[Depends(require_permission("eliminar", "roles"))],
)
async def delete_permission(
    permission_id: UUID,
    service: PermissionSvc,
) -> MessageResponse:
    """Delete a permission."""
    await service.delete_permission(permission_id)
    return MessageResponse(message="Permiso eliminado exitosamente")
