"""Permission catalog service."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from rolegate.core.database import atomic
from rolegate.core.errors import ConflictError, DuplicateActionError, NotFoundError
from rolegate.core.permissions.defaults import DEFAULT_PERMISSIONS
from rolegate.core.permissions.models import Permission
from rolegate.modules.permissions.repos import PermissionRepo
from rolegate.modules.permissions.schemas import PermissionCreate, PermissionUpdate


logger = structlog.get_logger()


class PermissionService:
    """Service for the permission catalog.

    A permission is identified by its ``(action, resource)`` pair, which must
    be unique. Permissions still linked to a role cannot be deleted.
    """

    def __init__(self, repo: PermissionRepo) -> None:
        self.repo = repo
        self.session = repo.session

    async def create_permission(self, data: PermissionCreate) -> Permission:
        """Declare a new permission.

        Args:
            data: Permission creation data

        Returns:
            The created permission

        Raises:
            DuplicateActionError: If the (action, resource) pair exists
        """
        if await self.repo.get_by_key(data.action, data.resource):
            raise DuplicateActionError(details={"permission": f"{data.action}:{data.resource}"})

        try:
            async with atomic(self.session):
                permission = await self.repo.create(
                    Permission(
                        action=data.action,
                        resource=data.resource,
                        description=data.description,
                    )
                )
        except IntegrityError as exc:
            raise DuplicateActionError() from exc

        logger.info("permission_created", permission=permission.name)
        return await self.get_permission(permission.id)

    async def get_permission(self, permission_id: UUID) -> Permission:
        """Get a permission with the roles holding it.

        Raises:
            NotFoundError: If the permission does not exist
        """
        permission = await self.repo.get_by_id(permission_id)
        if not permission:
            raise NotFoundError(
                "Permiso no encontrado",
                resource="permission",
                resource_id=str(permission_id),
            )
        return permission

    async def update_permission(
        self, permission_id: UUID, data: PermissionUpdate
    ) -> Permission:
        """Apply a partial update.

        Raises:
            NotFoundError: If the permission does not exist
            DuplicateActionError: If the new pair collides with another permission
        """
        permission = await self.get_permission(permission_id)
        changes = data.model_dump(exclude_unset=True)

        action = changes.get("action") or permission.action
        resource = changes.get("resource") or permission.resource
        if (action, resource) != permission.key:
            clash = await self.repo.get_by_key(action, resource)
            if clash is not None and clash.id != permission.id:
                raise DuplicateActionError(details={"permission": f"{action}:{resource}"})

        permission.action = action
        permission.resource = resource
        if "description" in changes:
            permission.description = changes["description"]

        try:
            async with atomic(self.session):
                await self.repo.update(permission)
        except IntegrityError as exc:
            raise DuplicateActionError() from exc

        logger.info("permission_updated", permission_id=str(permission_id))
        return await self.get_permission(permission_id)

    async def delete_permission(self, permission_id: UUID) -> None:
        """Delete a permission no role holds.

        Raises:
            NotFoundError: If the permission does not exist
            ConflictError: If roles still hold the permission; ``count`` tells how many
        """
        permission = await self.get_permission(permission_id)

        linked = await self.repo.count_role_links(permission_id)
        if linked > 0:
            raise ConflictError(
                f"No se puede eliminar el permiso. Hay {linked} rol(es) que lo tienen asignado",
                error_code="permission_in_use",
                details={"count": linked},
            )

        async with atomic(self.session):
            await self.repo.delete(permission)

        logger.info("permission_deleted", permission_id=str(permission_id))

    async def list_permissions(
        self,
        resource: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Permission], int]:
        """List permissions ordered by (resource, action), with their roles."""
        return await self.repo.list_page(resource=resource, page=page, limit=limit)

    async def group_by_resource(self) -> dict[str, list[Permission]]:
        """Group every permission under its resource.

        Returns:
            Mapping of resource to permissions, both ordered by (resource, action)
        """
        grouped: dict[str, list[Permission]] = {}
        for permission in await self.repo.list_all():
            grouped.setdefault(permission.resource, []).append(permission)
        return grouped

    async def initialize_defaults(self) -> tuple[list[Permission], int]:
        """Declare the default permissions that are still missing.

        Running it again creates nothing.

        Returns:
            Tuple of (newly created permissions, size of the default set)
        """
        existing = await self.repo.get_existing_keys()
        missing = [
            Permission(action=seed.action, resource=seed.resource, description=seed.description)
            for seed in DEFAULT_PERMISSIONS
            if (seed.action, seed.resource) not in existing
        ]

        created: list[Permission] = []
        if missing:
            async with atomic(self.session):
                created = await self.repo.add_many(missing)

        logger.info(
            "default_permissions_initialized",
            created=len(created),
            total=len(DEFAULT_PERMISSIONS),
        )
        return created, len(DEFAULT_PERMISSIONS)


# Type alias for dependency injection
PermissionSvc = Annotated[PermissionService, Depends(PermissionService)]
