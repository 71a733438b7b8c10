"""Permission system database models.

This module defines the RBAC (Role-Based Access Control) entities:
- Permission: An action that can be performed on a resource
- Role: A named, independently activatable bundle of permissions
- RolePermission: Explicit join entity granting a permission to a role
- RoleAssignment: Explicit join entity binding a principal to a role,
  optionally until ``expires_at``

Both join entities use their edge as a composite primary key, so a duplicate
edge is rejected by the store itself, and each side of an edge is indexed.
"""

import enum
from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolegate.core.constants import (
    MAX_PERMISSION_ACTION_LENGTH,
    MAX_PERMISSION_RESOURCE_LENGTH,
    MAX_ROLE_NAME_LENGTH,
)
from rolegate.core.database.base import Base, CreatedAtMixin, TimestampMixin, UUIDMixin
from rolegate.core.utils.timezone import is_expired


class RoleStatus(enum.StrEnum):
    """Lifecycle state of a role.

    Only active roles grant permissions. Transitions:
        active -> inactive   via deactivation (guarded) or an update
        inactive -> active   via an update
    """

    ACTIVE = "active"
    INACTIVE = "inactive"

    @classmethod
    def from_flag(cls, active: bool) -> "RoleStatus":
        return cls.ACTIVE if active else cls.INACTIVE


class Permission(Base, UUIDMixin, CreatedAtMixin):
    """Permission model representing an action on a resource.

    Attributes:
        action: The verb (e.g., "leer", "crear", "asignar")
        resource: The protected resource type (e.g., "roles", "productos")
        description: Human-readable description of the permission
    """

    __tablename__ = "permissions"
    __table_args__ = (
        UniqueConstraint("action", "resource", name="uq_permission_action_resource"),
    )

    action: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_ACTION_LENGTH),
        nullable=False,
    )
    resource: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_RESOURCE_LENGTH),
        nullable=False,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    # Relationships
    roles: Mapped[list["Role"]] = relationship(
        "Role",
        secondary="role_permissions",
        viewonly=True,
        order_by="Role.name",
    )

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the permission as an ``(action, resource)`` pair."""
        return (self.action, self.resource)

    @property
    def name(self) -> str:
        """Return the permission name as 'action:resource'."""
        return f"{self.action}:{self.resource}"

    def __repr__(self) -> str:
        return f"<Permission({self.action}:{self.resource})>"


class Role(Base, UUIDMixin, TimestampMixin):
    """Role model representing a named set of permissions.

    Attributes:
        name: Unique role name (e.g., "admin", "productor", "consumidor")
        description: Human-readable description of the role
        status: Whether the role currently grants its permissions
    """

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(
        String(MAX_ROLE_NAME_LENGTH),
        nullable=False,
        unique=True,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    status: Mapped[RoleStatus] = mapped_column(
        Enum(
            RoleStatus,
            name="role_status",
            native_enum=False,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=RoleStatus.ACTIVE,
        nullable=False,
        index=True,
    )

    # Relationships
    permissions: Mapped[list["Permission"]] = relationship(
        "Permission",
        secondary="role_permissions",
        viewonly=True,
        lazy="selectin",
        order_by=[Permission.resource, Permission.action],
    )

    @property
    def is_active(self) -> bool:
        return self.status is RoleStatus.ACTIVE

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name}, status={self.status})>"


class RolePermission(Base, CreatedAtMixin):
    """Join entity granting a permission to a role."""

    __tablename__ = "role_permissions"

    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    permission_id: Mapped[UUID] = mapped_column(
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<RolePermission(role_id={self.role_id}, "
            f"permission_id={self.permission_id})>"
        )


class RoleAssignment(Base):
    """Join entity binding a principal to a role.

    An assignment is active while ``expires_at`` is unset or in the future.
    Expired rows are kept; they simply stop contributing roles.

    Attributes:
        user_id: The principal's UUID (owned by the authentication service)
        role_id: The assigned role
        assigned_at: When the grant happened
        expires_at: Optional end of the validity window
    """

    __tablename__ = "user_roles"

    user_id: Mapped[UUID] = mapped_column(
        primary_key=True,
        index=True,
    )
    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )

    role: Mapped["Role"] = relationship(
        "Role",
        lazy="selectin",
    )

    @property
    def is_active(self) -> bool:
        return not is_expired(self.expires_at)

    def __repr__(self) -> str:
        return (
            f"<RoleAssignment(user_id={self.user_id}, role_id={self.role_id}, "
            f"expires_at={self.expires_at})>"
        )
