"""Assignment resolution.

This module computes, for a principal, the roles it currently holds and the
permissions those roles grant. It only reads: "access denied" is never an
exception here, only a ``False`` or an empty set. Store failures propagate.
"""

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import ColumnElement, exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.permissions.models import (
    Permission,
    Role,
    RoleAssignment,
    RolePermission,
    RoleStatus,
)
from rolegate.core.utils.timezone import utc_now


def _assignment_is_current(principal_id: UUID, now: datetime) -> ColumnElement[bool]:
    """Filter for a principal's assignments that have not expired."""
    return (RoleAssignment.user_id == principal_id) & or_(
        RoleAssignment.expires_at.is_(None),
        RoleAssignment.expires_at > now,
    )


class AssignmentResolver:
    """Service resolving a principal's active roles and effective permissions.

    A role counts for a principal when an assignment exists, the assignment
    has not expired and the role itself is active.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_active_roles(self, principal_id: UUID) -> list[Role]:
        """Get the roles currently held by a principal.

        Args:
            principal_id: The principal's UUID

        Returns:
            Active, non-expired roles (ordering carries no meaning)
        """
        stmt = (
            select(Role)
            .join(RoleAssignment, RoleAssignment.role_id == Role.id)
            .where(
                _assignment_is_current(principal_id, utc_now()),
                Role.status == RoleStatus.ACTIVE,
            )
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().unique().all())

    async def get_active_role_names(self, principal_id: UUID) -> set[str]:
        """Get the names of the roles currently held by a principal."""
        stmt = (
            select(Role.name)
            .join(RoleAssignment, RoleAssignment.role_id == Role.id)
            .where(
                _assignment_is_current(principal_id, utc_now()),
                Role.status == RoleStatus.ACTIVE,
            )
        )
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def get_effective_permissions(self, principal_id: UUID) -> list[Permission]:
        """Get every permission reachable through the principal's active roles.

        Permissions granted by several roles appear once.

        Args:
            principal_id: The principal's UUID

        Returns:
            Permissions ordered by (resource, action)
        """
        stmt = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(Role, Role.id == RolePermission.role_id)
            .join(RoleAssignment, RoleAssignment.role_id == Role.id)
            .where(
                _assignment_is_current(principal_id, utc_now()),
                Role.status == RoleStatus.ACTIVE,
            )
            .distinct()
            .order_by(Permission.resource, Permission.action)
        )
        result = await self.session.execute(stmt)

        permissions: list[Permission] = []
        seen: set[tuple[str, str]] = set()
        for permission in result.scalars().all():
            if permission.key not in seen:
                seen.add(permission.key)
                permissions.append(permission)
        return permissions

    async def get_permission_keys(self, principal_id: UUID) -> set[tuple[str, str]]:
        """Get the effective permissions as ``(action, resource)`` pairs."""
        permissions = await self.get_effective_permissions(principal_id)
        return {permission.key for permission in permissions}

    async def has_permission(self, principal_id: UUID, action: str, resource: str) -> bool:
        """Check if a principal holds a specific permission.

        A permission that is not declared in the catalog never grants access.

        Args:
            principal_id: The principal's UUID
            action: The action to check (e.g., "leer")
            resource: The resource to check (e.g., "roles")

        Returns:
            True if one of the principal's active roles grants the permission
        """
        permission_id = await self.session.scalar(
            select(Permission.id).where(
                Permission.action == action,
                Permission.resource == resource,
            )
        )
        if permission_id is None:
            return False

        granted = await self.session.scalar(
            select(
                exists()
                .where(RolePermission.permission_id == permission_id)
                .where(RolePermission.role_id == Role.id)
                .where(Role.status == RoleStatus.ACTIVE)
                .where(RoleAssignment.role_id == Role.id)
                .where(_assignment_is_current(principal_id, utc_now()))
            )
        )
        return bool(granted)

    async def has_any_role(self, principal_id: UUID, names: Iterable[str]) -> bool:
        """Check if a principal holds at least one of the named roles."""
        required = set(names)
        if not required:
            return False
        held = await self.get_active_role_names(principal_id)
        return not held.isdisjoint(required)

    async def has_all_roles(self, principal_id: UUID, names: Iterable[str]) -> bool:
        """Check if a principal holds every one of the named roles."""
        required = set(names)
        held = await self.get_active_role_names(principal_id)
        return required <= held

    async def describe(
        self, principal_id: UUID
    ) -> tuple[list[str], list[Permission]]:
        """Get a principal's role names and effective permissions together.

        Returns:
            Tuple of (sorted role names, permissions)
        """
        names = await self.get_active_role_names(principal_id)
        permissions = await self.get_effective_permissions(principal_id)
        return sorted(names), permissions
