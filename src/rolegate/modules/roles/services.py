"""Role store and role assignment services."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from rolegate.core.database import atomic
from rolegate.core.errors import (
    ConflictError,
    DuplicateAssignmentError,
    DuplicateNameError,
    NotFoundError,
    ValidationError,
)
from rolegate.core.permissions.models import Permission, Role, RoleAssignment, RoleStatus
from rolegate.core.permissions.resolver import AssignmentResolver
from rolegate.core.utils.timezone import as_utc, is_expired
from rolegate.modules.permissions.repos import PermissionRepo
from rolegate.modules.roles.repos import RoleAssignmentRepo, RolePermissionRepo, RoleRepo
from rolegate.modules.roles.schemas import RoleCreate, RoleUpdate


logger = structlog.get_logger()


def _role_not_found(role_id: UUID, message: str = "Rol no encontrado") -> NotFoundError:
    return NotFoundError(message, resource="role", resource_id=str(role_id))


class RoleService:
    """Service for the role store.

    A role and its permission links are always written together. Roles are
    never deleted: deactivation unlinks the permissions and flips the status.
    """

    def __init__(
        self,
        repo: RoleRepo,
        links: RolePermissionRepo,
        assignments: RoleAssignmentRepo,
        permissions: PermissionRepo,
    ) -> None:
        self.repo = repo
        self.links = links
        self.assignments = assignments
        self.permissions = permissions
        self.session = repo.session

    async def _check_permission_ids(self, permission_ids: list[UUID]) -> None:
        known = await self.permissions.get_ids(permission_ids)
        unknown = [str(pid) for pid in dict.fromkeys(permission_ids) if pid not in known]
        if unknown:
            raise ValidationError(
                errors=[
                    {"field": "permissionIds", "message": f"Permiso no encontrado: {pid}"}
                    for pid in unknown
                ],
                details={"unknown_permission_ids": unknown},
            )

    async def _check_name_free(self, name: str, role_id: UUID | None = None) -> None:
        existing = await self.repo.get_by_name(name)
        if existing is not None and existing.id != role_id:
            raise DuplicateNameError(details={"name": name})

    async def _check_unheld(self, role_id: UUID) -> None:
        holders = await self.assignments.count_active_for_role(role_id)
        if holders > 0:
            raise ConflictError(
                f"No se puede eliminar el rol. Hay {holders} usuario(s) asignado(s) a este rol",
                error_code="role_in_use",
                details={"count": holders},
            )

    async def create_role(self, data: RoleCreate) -> Role:
        """Create a role and link its permissions in one transaction.

        Args:
            data: Role creation data

        Returns:
            The created role with its permissions

        Raises:
            DuplicateNameError: If the name is taken
            ValidationError: If a permission id does not exist
        """
        await self._check_name_free(data.name)
        await self._check_permission_ids(data.permission_ids)

        try:
            async with atomic(self.session):
                role = await self.repo.create(
                    Role(name=data.name, description=data.description)
                )
                await self.links.add(role.id, data.permission_ids)
        except IntegrityError as exc:
            raise DuplicateNameError() from exc

        logger.info(
            "role_created",
            role_id=str(role.id),
            name=role.name,
            permission_count=len(set(data.permission_ids)),
        )
        return await self.get_role(role.id)

    async def get_role(self, role_id: UUID) -> Role:
        """Get a role with its permissions.

        Raises:
            NotFoundError: If the role does not exist
        """
        role = await self.repo.get_by_id(role_id)
        if not role:
            raise _role_not_found(role_id)
        return role

    async def update_role(self, role_id: UUID, data: RoleUpdate) -> Role:
        """Apply a partial update.

        When ``permission_ids`` is given the role's links are replaced by
        exactly that set, in the same transaction as the field changes.
        Changing ``active`` only flips the status: links and assignments are
        kept, so re-activating restores what the role granted. Switching a
        role off is refused while principals hold it, as for deactivation.

        Raises:
            NotFoundError: If the role does not exist
            ConflictError: If ``active`` is false and principals hold the role
            DuplicateNameError: If the new name is taken
            ValidationError: If a permission id does not exist
        """
        role = await self.get_role(role_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("name") and changes["name"] != role.name:
            await self._check_name_free(changes["name"], role_id)
        if data.permission_ids is not None:
            await self._check_permission_ids(data.permission_ids)
        if changes.get("active") is False and role.is_active:
            await self._check_unheld(role_id)

        if changes.get("name"):
            role.name = changes["name"]
        if "description" in changes:
            role.description = changes["description"]
        if changes.get("active") is not None:
            role.status = RoleStatus.from_flag(changes["active"])

        try:
            async with atomic(self.session):
                await self.repo.update(role)
                if data.permission_ids is not None:
                    await self.links.replace(role_id, data.permission_ids)
        except IntegrityError as exc:
            raise DuplicateNameError() from exc

        logger.info("role_updated", role_id=str(role_id), fields=sorted(changes))
        return await self.get_role(role_id)

    async def deactivate_role(self, role_id: UUID) -> None:
        """Deactivate a role nobody currently holds.

        Removes every permission link and marks the role inactive.

        Raises:
            NotFoundError: If the role does not exist
            ConflictError: If principals hold an active assignment; ``count`` tells how many
        """
        role = await self.get_role(role_id)
        await self._check_unheld(role_id)

        async with atomic(self.session):
            removed = await self.links.clear(role_id)
            role.status = RoleStatus.INACTIVE
            await self.repo.update(role)

        logger.info("role_deactivated", role_id=str(role_id), links_removed=removed)

    async def list_roles(
        self,
        active: bool | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Role], int]:
        """List roles newest first, optionally filtered by status."""
        status = None if active is None else RoleStatus.from_flag(active)
        return await self.repo.list_page(status=status, page=page, limit=limit)


class RoleAssignmentService:
    """Service granting and revoking roles.

    Principals are owned by the authentication service; their ids are
    accepted as given.
    """

    def __init__(self, repo: RoleAssignmentRepo, roles: RoleRepo) -> None:
        self.repo = repo
        self.roles = roles
        self.session = repo.session

    async def assign_role(
        self,
        user_id: UUID,
        role_id: UUID,
        expires_at: datetime | None = None,
    ) -> RoleAssignment:
        """Grant a role to a principal, optionally until ``expires_at``.

        Raises:
            ValidationError: If ``expires_at`` is already in the past
            NotFoundError: If the role does not exist or is inactive
            DuplicateAssignmentError: If the principal already holds the role
        """
        if expires_at is not None:
            expires_at = as_utc(expires_at)
            if is_expired(expires_at):
                raise ValidationError(
                    errors=[
                        {"field": "expiresAt", "message": "La fecha de expiración debe ser futura"}
                    ]
                )

        role = await self.roles.get_by_id(role_id)
        if role is None or not role.is_active:
            raise _role_not_found(role_id, "Rol no encontrado o inactivo")

        if await self.repo.get(user_id, role_id) is not None:
            raise DuplicateAssignmentError(
                details={"user_id": str(user_id), "role_id": str(role_id)}
            )

        try:
            async with atomic(self.session):
                assignment = await self.repo.create(
                    RoleAssignment(user_id=user_id, role_id=role_id, expires_at=expires_at)
                )
        except IntegrityError as exc:
            # Lost a race against a concurrent grant of the same pair
            raise DuplicateAssignmentError(
                details={"user_id": str(user_id), "role_id": str(role_id)}
            ) from exc

        logger.info(
            "role_assigned",
            user_id=str(user_id),
            role=role.name,
            expires_at=expires_at.isoformat() if expires_at else None,
        )
        return await self.repo.get(user_id, role_id) or assignment

    async def revoke_role(self, user_id: UUID, role_id: UUID) -> None:
        """Remove a principal's assignment.

        Raises:
            NotFoundError: If the principal does not hold the role
        """
        assignment = await self.repo.get(user_id, role_id)
        if assignment is None:
            raise NotFoundError(
                "Asignación de rol no encontrada",
                resource="role_assignment",
                resource_id=f"{user_id}:{role_id}",
            )

        async with atomic(self.session):
            await self.repo.delete(assignment)

        logger.info("role_revoked", user_id=str(user_id), role_id=str(role_id))

    async def list_assignments(self, user_id: UUID) -> list[RoleAssignment]:
        """List every assignment of a principal, expired ones included."""
        return await self.repo.list_for_user(user_id)

    async def describe_access(self, user_id: UUID) -> tuple[list[str], list[Permission]]:
        """Get the principal's active role names and effective permissions."""
        return await AssignmentResolver(self.session).describe(user_id)


# Type aliases for dependency injection
RoleSvc = Annotated[RoleService, Depends(RoleService)]
RoleAssignmentSvc = Annotated[RoleAssignmentService, Depends(RoleAssignmentService)]
