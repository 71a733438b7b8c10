"""Role, role-permission link and role assignment repositories."""

from collections.abc import Iterable
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import delete, func, or_, select

from rolegate.api.dependencies import DBSession
from rolegate.core.permissions.models import (
    Role,
    RoleAssignment,
    RolePermission,
    RoleStatus,
)
from rolegate.core.utils.timezone import utc_now


class RoleRepository:
    """Repository for Role database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, role: Role) -> Role:
        """Create a new role.

        Args:
            role: Role instance to create

        Returns:
            The created role with ID populated
        """
        self.session.add(role)
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def get_by_id(self, role_id: UUID) -> Role | None:
        """Get a role by ID with its permissions freshly loaded.

        Args:
            role_id: The role's UUID

        Returns:
            Role if found, None otherwise
        """
        stmt = (
            select(Role)
            .where(Role.id == role_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> Role | None:
        """Get a role by its unique name."""
        result = await self.session.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()

    async def list_page(
        self,
        status: RoleStatus | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Role], int]:
        """List roles with pagination, newest first.

        Args:
            status: Optional status filter
            page: Page number (1-indexed)
            limit: Number of items per page

        Returns:
            Tuple of (roles list, total count)
        """
        count_stmt = select(func.count()).select_from(Role)
        stmt = select(Role)
        if status is not None:
            count_stmt = count_stmt.where(Role.status == status)
            stmt = stmt.where(Role.status == status)

        total = (await self.session.execute(count_stmt)).scalar_one()

        offset = (page - 1) * limit
        stmt = (
            stmt.order_by(Role.created_at.desc(), Role.name)
            .offset(offset)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def update(self, role: Role) -> Role:
        """Flush pending changes on a role.

        Args:
            role: Role instance with updated fields

        Returns:
            The updated role
        """
        await self.session.flush()
        await self.session.refresh(role)
        return role


class RolePermissionRepository:
    """Repository for the role-permission links."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def add(self, role_id: UUID, permission_ids: Iterable[UUID]) -> None:
        """Link permissions to a role; duplicates in the input are ignored."""
        links = [
            RolePermission(role_id=role_id, permission_id=permission_id)
            for permission_id in dict.fromkeys(permission_ids)
        ]
        if links:
            self.session.add_all(links)
            await self.session.flush()

    async def clear(self, role_id: UUID) -> int:
        """Remove every link of a role.

        Returns:
            Number of links removed
        """
        result = await self.session.execute(
            delete(RolePermission).where(RolePermission.role_id == role_id)
        )
        await self.session.flush()
        return result.rowcount or 0

    async def replace(self, role_id: UUID, permission_ids: Iterable[UUID]) -> None:
        """Make ``permission_ids`` the complete link set of a role."""
        await self.clear(role_id)
        await self.add(role_id, permission_ids)


class RoleAssignmentRepository:
    """Repository for principal-role assignments."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def get(self, user_id: UUID, role_id: UUID) -> RoleAssignment | None:
        """Get the assignment of a role to a principal, expired or not."""
        stmt = select(RoleAssignment).where(
            RoleAssignment.user_id == user_id,
            RoleAssignment.role_id == role_id,
        ).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, assignment: RoleAssignment) -> RoleAssignment:
        """Insert an assignment.

        Raises:
            IntegrityError: If the principal already holds the role
        """
        self.session.add(assignment)
        await self.session.flush()
        await self.session.refresh(assignment)
        return assignment

    async def delete(self, assignment: RoleAssignment) -> None:
        await self.session.delete(assignment)
        await self.session.flush()

    async def count_active_for_role(self, role_id: UUID) -> int:
        """Count the principals currently holding a role (expired rows excluded)."""
        stmt = (
            select(func.count())
            .select_from(RoleAssignment)
            .where(
                RoleAssignment.role_id == role_id,
                or_(
                    RoleAssignment.expires_at.is_(None),
                    RoleAssignment.expires_at > utc_now(),
                ),
            )
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def list_for_user(self, user_id: UUID) -> list[RoleAssignment]:
        """List every assignment of a principal, expired ones included."""
        stmt = (
            select(RoleAssignment)
            .where(RoleAssignment.user_id == user_id)
            .order_by(RoleAssignment.assigned_at)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


# Type aliases for dependency injection
RoleRepo = Annotated[RoleRepository, Depends(RoleRepository)]
RolePermissionRepo = Annotated[RolePermissionRepository, Depends(RolePermissionRepository)]
RoleAssignmentRepo = Annotated[RoleAssignmentRepository, Depends(RoleAssignmentRepository)]
