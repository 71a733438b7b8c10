"""Integration tests for assignment resolution against the store.

These tests verify:
- a grant gives exactly the role's permissions
- expired assignments and inactive roles grant nothing
- undeclared permissions never grant access
"""

from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.permissions.models import RoleStatus
from rolegate.core.permissions.resolver import AssignmentResolver
from rolegate.core.utils.timezone import utc_now
from tests.factories.rbac import RBACBuilder


pytestmark = pytest.mark.integration


@pytest.fixture
def resolver(db: AsyncSession) -> AssignmentResolver:
    return AssignmentResolver(db)


class TestEffectivePermissions:
    async def test_grant_gives_role_permissions(self, rbac: RBACBuilder, resolver):
        leer = await rbac.permission("leer", "productos")
        crear = await rbac.permission("crear", "productos")
        await rbac.permission("eliminar", "productos")
        role = await rbac.role("productor", [leer, crear])
        user_id = uuid4()
        await rbac.grant(user_id, role)

        keys = await resolver.get_permission_keys(user_id)

        assert keys == {("leer", "productos"), ("crear", "productos")}
        assert await resolver.has_permission(user_id, "leer", "productos") is True
        assert await resolver.has_permission(user_id, "eliminar", "productos") is False

    async def test_shared_permission_listed_once(self, rbac: RBACBuilder, resolver):
        leer = await rbac.permission("leer", "productos")
        comprar = await rbac.permission("comprar", "productos")
        user_id = uuid4()
        await rbac.grant(user_id, await rbac.role("productor", [leer]))
        await rbac.grant(user_id, await rbac.role("consumidor", [leer, comprar]))

        permissions = await resolver.get_effective_permissions(user_id)

        assert [p.key for p in permissions] == [
            ("comprar", "productos"),
            ("leer", "productos"),
        ]

    async def test_principal_without_roles(self, resolver):
        user_id = uuid4()

        assert await resolver.get_effective_permissions(user_id) == []
        assert await resolver.get_active_role_names(user_id) == set()

    async def test_undeclared_permission_never_granted(self, rbac: RBACBuilder, resolver):
        leer = await rbac.permission("leer", "productos")
        user_id = uuid4()
        await rbac.grant(user_id, await rbac.role("productor", [leer]))

        assert await resolver.has_permission(user_id, "volar", "productos") is False


class TestExpiry:
    async def test_expired_assignment_grants_nothing(self, rbac: RBACBuilder, resolver):
        leer = await rbac.permission("leer", "productos")
        role = await rbac.role("productor", [leer])
        user_id = uuid4()
        await rbac.grant(user_id, role, expires_at=utc_now() - timedelta(minutes=1))

        assert await resolver.has_permission(user_id, "leer", "productos") is False
        assert await resolver.get_active_role_names(user_id) == set()

    async def test_future_expiry_still_grants(self, rbac: RBACBuilder, resolver):
        leer = await rbac.permission("leer", "productos")
        role = await rbac.role("productor", [leer])
        user_id = uuid4()
        await rbac.grant(user_id, role, expires_at=utc_now() + timedelta(days=1))

        assert await resolver.has_permission(user_id, "leer", "productos") is True


class TestRoleStatus:
    async def test_inactive_role_grants_nothing(self, rbac: RBACBuilder, resolver):
        leer = await rbac.permission("leer", "productos")
        role = await rbac.role("productor", [leer], status=RoleStatus.INACTIVE)
        user_id = uuid4()
        await rbac.grant(user_id, role)

        assert await resolver.has_permission(user_id, "leer", "productos") is False
        assert await resolver.has_any_role(user_id, ["productor"]) is False

    async def test_reactivation_restores_grants(
        self, rbac: RBACBuilder, resolver, db: AsyncSession
    ):
        leer = await rbac.permission("leer", "productos")
        role = await rbac.role("productor", [leer])
        user_id = uuid4()
        await rbac.grant(user_id, role)

        role.status = RoleStatus.INACTIVE
        await db.commit()
        assert await resolver.has_permission(user_id, "leer", "productos") is False

        role.status = RoleStatus.ACTIVE
        await db.commit()
        assert await resolver.has_permission(user_id, "leer", "productos") is True


class TestRoleChecks:
    async def test_any_and_all(self, rbac: RBACBuilder, resolver):
        user_id = uuid4()
        await rbac.grant(user_id, await rbac.role("productor"))
        await rbac.role("admin")

        assert await resolver.has_any_role(user_id, ["admin", "productor"]) is True
        assert await resolver.has_all_roles(user_id, ["admin", "productor"]) is False
        assert await resolver.has_all_roles(user_id, ["productor"]) is True

    async def test_empty_any_is_false(self, resolver):
        assert await resolver.has_any_role(uuid4(), []) is False

    async def test_describe_sorts_names(self, rbac: RBACBuilder, resolver):
        user_id = uuid4()
        await rbac.grant(user_id, await rbac.role("productor"))
        await rbac.grant(user_id, await rbac.role("consumidor"))

        names, permissions = await resolver.describe(user_id)

        assert names == ["consumidor", "productor"]
        assert permissions == []
