"""Pydantic schemas for permission operations."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from rolegate.core.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_PERMISSION_ACTION_LENGTH,
    MAX_PERMISSION_RESOURCE_LENGTH,
    MIN_PERMISSION_ACTION_LENGTH,
    MIN_PERMISSION_RESOURCE_LENGTH,
)
from rolegate.core.schemas import CamelModel, PaginationMeta


# ============================================================
# Requests
# ============================================================


class PermissionCreate(CamelModel):
    """Schema for declaring a permission."""

    action: str = Field(
        ...,
        min_length=MIN_PERMISSION_ACTION_LENGTH,
        max_length=MAX_PERMISSION_ACTION_LENGTH,
    )
    resource: str = Field(
        ...,
        min_length=MIN_PERMISSION_RESOURCE_LENGTH,
        max_length=MAX_PERMISSION_RESOURCE_LENGTH,
    )
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)


class PermissionUpdate(CamelModel):
    """Schema for a partial permission update."""

    action: str | None = Field(
        None,
        min_length=MIN_PERMISSION_ACTION_LENGTH,
        max_length=MAX_PERMISSION_ACTION_LENGTH,
    )
    resource: str | None = Field(
        None,
        min_length=MIN_PERMISSION_RESOURCE_LENGTH,
        max_length=MAX_PERMISSION_RESOURCE_LENGTH,
    )
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)


# ============================================================
# Responses
# ============================================================


class RoleSummary(CamelModel):
    """A role holding a permission."""

    id: UUID
    name: str
    description: str | None = None


class PermissionBrief(CamelModel):
    """A permission without its roles."""

    id: UUID
    action: str
    resource: str
    description: str | None = None


class PermissionResponse(PermissionBrief):
    """A permission with the roles holding it."""

    created_at: datetime
    roles: list[RoleSummary] = []


class PermissionListData(CamelModel):
    permissions: list[PermissionResponse]
    pagination: PaginationMeta


class InitializeData(CamelModel):
    """Result of seeding the default permissions."""

    new_permissions: list[PermissionBrief]
    total_permissions: int
