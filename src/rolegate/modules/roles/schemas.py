"""Pydantic schemas for roles and role assignments."""

from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, Field

from rolegate.core.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_ROLE_NAME_LENGTH,
    MIN_ROLE_NAME_LENGTH,
)
from rolegate.core.schemas import CamelModel, PaginationMeta
from rolegate.modules.permissions.schemas import PermissionBrief, RoleSummary


# ============================================================
# Role Schemas
# ============================================================


class RoleCreate(CamelModel):
    """Schema for creating a role together with its permissions."""

    name: str = Field(..., min_length=MIN_ROLE_NAME_LENGTH, max_length=MAX_ROLE_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    permission_ids: list[UUID] = []


class RoleUpdate(CamelModel):
    """Schema for a partial role update.

    ``permission_ids``, when present, replaces the whole permission set.
    """

    name: str | None = Field(
        None, min_length=MIN_ROLE_NAME_LENGTH, max_length=MAX_ROLE_NAME_LENGTH
    )
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    active: bool | None = None
    permission_ids: list[UUID] | None = None


class RoleResponse(CamelModel):
    """A role with the permissions it grants."""

    id: UUID
    name: str
    description: str | None = None
    active: bool = Field(validation_alias=AliasChoices("is_active", "active"))
    created_at: datetime
    updated_at: datetime
    permissions: list[PermissionBrief] = []


class RoleListData(CamelModel):
    roles: list[RoleResponse]
    pagination: PaginationMeta


# ============================================================
# Assignment Schemas
# ============================================================


class RoleAssign(CamelModel):
    """Schema for granting a role to a principal."""

    user_id: UUID
    role_id: UUID
    expires_at: datetime | None = None


class AssignmentResponse(CamelModel):
    """A principal's role assignment.

    ``active`` is False once ``expires_at`` has passed.
    """

    user_id: UUID
    role_id: UUID
    assigned_at: datetime
    expires_at: datetime | None = None
    active: bool = Field(validation_alias=AliasChoices("is_active", "active"))
    role: RoleSummary


class AccessResponse(CamelModel):
    """What a principal can currently do."""

    user_id: UUID
    roles: list[str]
    permissions: list[PermissionBrief]
