"""Integration tests for the default catalog seeding."""

from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.permissions.defaults import DEFAULT_PERMISSIONS, DEFAULT_ROLES
from rolegate.core.permissions.models import Permission, Role
from rolegate.core.permissions.resolver import AssignmentResolver
from scripts.seed import seed_rbac


pytestmark = pytest.mark.integration


async def _count(db: AsyncSession, model) -> int:
    return await db.scalar(select(func.count()).select_from(model))


async def test_first_run_creates_catalog(db: AsyncSession):
    created = await seed_rbac(db)

    assert created == {
        "permissions": len(DEFAULT_PERMISSIONS),
        "roles": len(DEFAULT_ROLES),
        "links": len(DEFAULT_PERMISSIONS),
        "assignments": 0,
    }
    assert await _count(db, Permission) == len(DEFAULT_PERMISSIONS)
    assert await _count(db, Role) == len(DEFAULT_ROLES)


async def test_second_run_creates_nothing(db: AsyncSession):
    await seed_rbac(db)

    created = await seed_rbac(db)

    assert created == {"permissions": 0, "roles": 0, "links": 0, "assignments": 0}


async def test_admin_grant(db: AsyncSession):
    admin_id = uuid4()

    first = await seed_rbac(db, admin_user=admin_id)
    second = await seed_rbac(db, admin_user=admin_id)

    assert first["assignments"] == 1
    assert second["assignments"] == 0
    resolver = AssignmentResolver(db)
    assert await resolver.has_permission(admin_id, "administrar", "sistema") is True


async def test_existing_permissions_are_kept(db: AsyncSession):
    db.add(Permission(action="leer", resource="roles", description="Personalizado"))
    await db.commit()

    created = await seed_rbac(db)

    assert created["permissions"] == len(DEFAULT_PERMISSIONS) - 1
    description = await db.scalar(
        select(Permission.description).where(
            Permission.action == "leer", Permission.resource == "roles"
        )
    )
    assert description == "Personalizado"
