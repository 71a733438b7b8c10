"""Role-based access control: entities, resolution, policies and guards."""

from rolegate.core.permissions.defaults import (
    DEFAULT_PERMISSIONS,
    DEFAULT_ROLES,
    PermissionSeed,
    RoleSeed,
)
from rolegate.core.permissions.guards import (
    dynamic_policy,
    enrich_user_context,
    require_admin,
    require_all_roles,
    require_any_role,
    require_ownership_or_admin,
    require_permission,
)
from rolegate.core.permissions.models import (
    Permission,
    Role,
    RoleAssignment,
    RolePermission,
    RoleStatus,
)
from rolegate.core.permissions.policies import (
    Combined,
    Policy,
    RequireOwnership,
    RequirePermission,
    RequireRole,
    enforce,
)
from rolegate.core.permissions.resolver import AssignmentResolver


__all__ = [
    "DEFAULT_PERMISSIONS",
    "DEFAULT_ROLES",
    "AssignmentResolver",
    "Combined",
    "Permission",
    "PermissionSeed",
    "Policy",
    "RequireOwnership",
    "RequirePermission",
    "RequireRole",
    "Role",
    "RoleAssignment",
    "RolePermission",
    "RoleSeed",
    "RoleStatus",
    "dynamic_policy",
    "enforce",
    "enrich_user_context",
    "require_admin",
    "require_all_roles",
    "require_any_role",
    "require_ownership_or_admin",
    "require_permission",
]
