"""Permission repository for database operations."""

from collections.abc import Iterable
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import Select, func, select
from sqlalchemy.orm import selectinload

from rolegate.api.dependencies import DBSession
from rolegate.core.permissions.models import Permission, RolePermission


class PermissionRepository:
    """Repository for Permission database operations.

    Every permission returned by this repository has its ``roles``
    relationship loaded.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    def _select(self) -> Select[tuple[Permission]]:
        return select(Permission).options(selectinload(Permission.roles))

    async def create(self, permission: Permission) -> Permission:
        """Create a new permission.

        Args:
            permission: Permission instance to create

        Returns:
            The created permission with ID populated
        """
        self.session.add(permission)
        await self.session.flush()
        await self.session.refresh(permission)
        return permission

    async def add_many(self, permissions: list[Permission]) -> list[Permission]:
        """Insert several permissions in one flush."""
        self.session.add_all(permissions)
        await self.session.flush()
        for permission in permissions:
            await self.session.refresh(permission)
        return permissions

    async def get_by_id(self, permission_id: UUID) -> Permission | None:
        """Get a permission by ID, with the roles holding it.

        Args:
            permission_id: The permission's UUID

        Returns:
            Permission if found, None otherwise
        """
        stmt = (
            self._select()
            .where(Permission.id == permission_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_key(self, action: str, resource: str) -> Permission | None:
        """Get a permission by its ``(action, resource)`` pair."""
        stmt = select(Permission).where(
            Permission.action == action,
            Permission.resource == resource,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_existing_keys(self) -> set[tuple[str, str]]:
        """Get every declared ``(action, resource)`` pair."""
        result = await self.session.execute(select(Permission.action, Permission.resource))
        return {(action, resource) for action, resource in result.all()}

    async def get_ids(self, permission_ids: Iterable[UUID]) -> set[UUID]:
        """Return which of the given ids exist."""
        wanted = set(permission_ids)
        if not wanted:
            return set()
        result = await self.session.execute(
            select(Permission.id).where(Permission.id.in_(wanted))
        )
        return set(result.scalars().all())

    async def list_page(
        self,
        resource: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Permission], int]:
        """List permissions with pagination, ordered by (resource, action).

        Args:
            resource: Optional resource filter
            page: Page number (1-indexed)
            limit: Number of items per page

        Returns:
            Tuple of (permissions list, total count)
        """
        count_stmt = select(func.count()).select_from(Permission)
        stmt = self._select()
        if resource:
            count_stmt = count_stmt.where(Permission.resource == resource)
            stmt = stmt.where(Permission.resource == resource)

        total = (await self.session.execute(count_stmt)).scalar_one()

        offset = (page - 1) * limit
        stmt = (
            stmt.order_by(Permission.resource, Permission.action)
            .offset(offset)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def list_all(self) -> list[Permission]:
        """List every permission ordered by (resource, action)."""
        stmt = select(Permission).order_by(Permission.resource, Permission.action)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_role_links(self, permission_id: UUID) -> int:
        """Count the roles a permission is linked to."""
        stmt = (
            select(func.count())
            .select_from(RolePermission)
            .where(RolePermission.permission_id == permission_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def update(self, permission: Permission) -> Permission:
        """Flush pending changes on a permission.

        Args:
            permission: Permission instance with updated fields

        Returns:
            The updated permission
        """
        await self.session.flush()
        await self.session.refresh(permission)
        return permission

    async def delete(self, permission: Permission) -> None:
        """Delete a permission.

        Args:
            permission: Permission instance to delete
        """
        await self.session.delete(permission)
        await self.session.flush()


# Type aliases for dependency injection
PermissionRepo = Annotated[PermissionRepository, Depends(PermissionRepository)]
