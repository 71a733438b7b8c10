#!/usr/bin/env python
"""
Seed the default permissions and roles.

Creates the default permission catalog, the admin/productor/consumidor roles
and links every permission to admin. Optionally grants admin to a principal:

    python scripts/seed.py --admin-user 5f0c...
"""

import argparse
import asyncio
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.config import settings
from rolegate.core.database import async_session_factory
from rolegate.core.permissions import (
    DEFAULT_PERMISSIONS,
    DEFAULT_ROLES,
    Permission,
    Role,
    RoleAssignment,
    RolePermission,
)


async def seed_rbac(session: AsyncSession, admin_user: UUID | None = None) -> dict[str, int]:
    """Create whatever part of the default catalog is missing.

    Safe to run repeatedly.

    Args:
        session: Session to write with; committed on success
        admin_user: Principal to grant the admin role to, if any

    Returns:
        Counts of created permissions, roles, links and assignments
    """
    created = {"permissions": 0, "roles": 0, "links": 0, "assignments": 0}

    result = await session.execute(select(Permission))
    permissions = {p.key: p for p in result.scalars().all()}
    for seed in DEFAULT_PERMISSIONS:
        if (seed.action, seed.resource) not in permissions:
            permission = Permission(
                action=seed.action,
                resource=seed.resource,
                description=seed.description,
            )
            session.add(permission)
            permissions[permission.key] = permission
            created["permissions"] += 1
    await session.flush()

    result = await session.execute(select(Role))
    roles = {r.name: r for r in result.scalars().all()}
    for seed in DEFAULT_ROLES:
        if seed.name not in roles:
            role = Role(name=seed.name, description=seed.description)
            session.add(role)
            roles[seed.name] = role
            created["roles"] += 1
    await session.flush()

    admin = roles[settings.admin_role_name]
    result = await session.execute(
        select(RolePermission.permission_id).where(RolePermission.role_id == admin.id)
    )
    linked = set(result.scalars().all())
    for permission in permissions.values():
        if permission.id not in linked:
            session.add(RolePermission(role_id=admin.id, permission_id=permission.id))
            created["links"] += 1

    if admin_user is not None:
        existing = await session.get(RoleAssignment, (admin_user, admin.id))
        if existing is None:
            session.add(RoleAssignment(user_id=admin_user, role_id=admin.id))
            created["assignments"] += 1

    await session.commit()
    return created


async def main(admin_user: UUID | None) -> None:
    """Run the seeding."""
    async with async_session_factory() as session:
        created = await seed_rbac(session, admin_user)

    print(
        f"Created {created['permissions']} permissions, {created['roles']} roles, "
        f"{created['links']} admin links, {created['assignments']} assignments"
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the default roles and permissions")
    parser.add_argument(
        "--admin-user",
        "-a",
        type=UUID,
        default=None,
        help="Principal id to grant the admin role to",
    )
    args = parser.parse_args()

    asyncio.run(main(args.admin_user))
