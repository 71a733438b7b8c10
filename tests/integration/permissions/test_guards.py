"""Integration tests for route guards.

These tests mount a throwaway router guarded by each constructor and verify:
- 401 without a principal, 403 with the denial message
- request.state context set by role guards and enrich_user_context
- ownership with the admin fallback
- 405 for methods a dynamic policy does not configure
- 500 when the store fails mid-check
"""

from typing import Annotated
from uuid import uuid4

import pytest
from fastapi import APIRouter, Depends, Request
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.auth import Principal
from rolegate.core.permissions import (
    RequireOwnership,
    RequirePermission,
    dynamic_policy,
    enrich_user_context,
    require_admin,
    require_all_roles,
    require_any_role,
    require_ownership_or_admin,
    require_permission,
)
from tests.factories.rbac import RBACBuilder, auth_headers_for


pytestmark = pytest.mark.integration


guarded = APIRouter()


@guarded.get("/reports")
async def read_reports(
    principal: Annotated[Principal, Depends(require_permission("leer", "reportes"))],
):
    return {"user_id": str(principal.id)}


@guarded.get("/any-role", dependencies=[Depends(require_any_role(["productor", "admin"]))])
async def any_role(request: Request):
    return {"roles": request.state.user_roles}


@guarded.get("/all-roles", dependencies=[Depends(require_all_roles(["productor", "consumidor"]))])
async def all_roles(request: Request):
    return {"roles": request.state.user_roles}


@guarded.get("/admin", dependencies=[Depends(require_admin())])
async def admin_only():
    return {"ok": True}


@guarded.get("/owned/{user_id}", dependencies=[Depends(require_ownership_or_admin("user_id"))])
async def owned(request: Request, user_id: str):
    return {"roles": getattr(request.state, "user_roles", None)}


@guarded.get(
    "/owned-by-query",
    dependencies=[
        Depends(require_ownership_or_admin(lambda request: request.query_params.get("owner")))
    ],
)
async def owned_by_query():
    return {"ok": True}


@guarded.api_route(
    "/profiles/{user_id}",
    methods=["GET", "PUT", "DELETE"],
    dependencies=[
        Depends(
            dynamic_policy(
                {
                    "get": RequireOwnership("user_id"),
                    "PUT": RequirePermission("actualizar", "perfiles"),
                }
            )
        )
    ],
)
async def profiles(user_id: str):
    return {"ok": True}


@guarded.get("/context", dependencies=[Depends(enrich_user_context())])
async def context(request: Request):
    return {
        "roles": request.state.user_roles,
        "permissions": request.state.user_permissions,
    }


@pytest.fixture
async def guarded_client(app):
    app.include_router(guarded, prefix="/test")
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
async def reader(rbac: RBACBuilder):
    """A principal holding a role with leer:reportes."""
    leer = await rbac.permission("leer", "reportes", "Ver reportes")
    user_id = uuid4()
    await rbac.grant(user_id, await rbac.role("productor", [leer]))
    return user_id


class TestAuthentication:
    async def test_missing_token(self, guarded_client: AsyncClient):
        response = await guarded_client.get("/test/reports")

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "message": "Token de autenticación requerido",
        }

    async def test_invalid_token(self, guarded_client: AsyncClient):
        response = await guarded_client.get(
            "/test/reports", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401


class TestRequirePermission:
    async def test_granted(self, guarded_client: AsyncClient, reader):
        response = await guarded_client.get("/test/reports", headers=auth_headers_for(reader))

        assert response.status_code == 200
        assert response.json()["user_id"] == str(reader)

    async def test_denied(self, guarded_client: AsyncClient, rbac: RBACBuilder):
        await rbac.permission("leer", "reportes")

        response = await guarded_client.get(
            "/test/reports", headers=auth_headers_for(uuid4())
        )

        assert response.status_code == 403
        assert response.json() == {
            "success": False,
            "message": "No tienes permisos para leer reportes",
        }

    async def test_role_hint_is_not_trusted(self, guarded_client: AsyncClient, rbac: RBACBuilder):
        await rbac.role("admin")

        response = await guarded_client.get(
            "/test/admin", headers=auth_headers_for(uuid4(), role="admin")
        )

        assert response.status_code == 403


class TestRoleGuards:
    async def test_any_role_records_roles(self, guarded_client: AsyncClient, reader):
        response = await guarded_client.get("/test/any-role", headers=auth_headers_for(reader))

        assert response.status_code == 200
        assert response.json()["roles"] == ["productor"]

    async def test_all_roles_denied(self, guarded_client: AsyncClient, reader):
        response = await guarded_client.get("/test/all-roles", headers=auth_headers_for(reader))

        assert response.status_code == 403
        assert response.json()["message"] == (
            "Se requieren todos los siguientes roles: productor, consumidor"
        )

    async def test_all_roles_granted(self, guarded_client: AsyncClient, rbac: RBACBuilder):
        user_id = uuid4()
        await rbac.grant(user_id, await rbac.role("productor"))
        await rbac.grant(user_id, await rbac.role("consumidor"))

        response = await guarded_client.get("/test/all-roles", headers=auth_headers_for(user_id))

        assert response.status_code == 200
        assert response.json()["roles"] == ["consumidor", "productor"]

    async def test_admin(self, guarded_client: AsyncClient, rbac: RBACBuilder):
        user_id = uuid4()
        await rbac.grant(user_id, await rbac.role("admin"))

        response = await guarded_client.get("/test/admin", headers=auth_headers_for(user_id))

        assert response.status_code == 200


class TestOwnership:
    async def test_owner(self, guarded_client: AsyncClient):
        user_id = uuid4()

        response = await guarded_client.get(
            f"/test/owned/{user_id}", headers=auth_headers_for(user_id)
        )

        assert response.status_code == 200
        assert response.json()["roles"] is None

    async def test_other_principal_denied(self, guarded_client: AsyncClient):
        response = await guarded_client.get(
            f"/test/owned/{uuid4()}", headers=auth_headers_for(uuid4())
        )

        assert response.status_code == 403
        assert response.json()["message"] == "No tienes permisos para acceder a este recurso"

    async def test_admin_fallback(self, guarded_client: AsyncClient, rbac: RBACBuilder):
        admin_id = uuid4()
        await rbac.grant(admin_id, await rbac.role("admin"))

        response = await guarded_client.get(
            f"/test/owned/{uuid4()}", headers=auth_headers_for(admin_id)
        )

        assert response.status_code == 200
        assert response.json()["roles"] == ["admin"]

    async def test_callable_extractor(self, guarded_client: AsyncClient):
        user_id = uuid4()

        own = await guarded_client.get(
            "/test/owned-by-query",
            params={"owner": str(user_id)},
            headers=auth_headers_for(user_id),
        )
        other = await guarded_client.get(
            "/test/owned-by-query",
            params={"owner": str(uuid4())},
            headers=auth_headers_for(user_id),
        )

        assert own.status_code == 200
        assert other.status_code == 403


class TestDynamicPolicy:
    async def test_policy_selected_by_method(self, guarded_client: AsyncClient):
        user_id = uuid4()
        headers = auth_headers_for(user_id)

        read = await guarded_client.get(f"/test/profiles/{user_id}", headers=headers)
        write = await guarded_client.put(f"/test/profiles/{user_id}", headers=headers)

        assert read.status_code == 200
        assert write.status_code == 403

    async def test_unconfigured_method(self, guarded_client: AsyncClient):
        user_id = uuid4()

        response = await guarded_client.delete(
            f"/test/profiles/{user_id}", headers=auth_headers_for(user_id)
        )

        assert response.status_code == 405
        assert response.json() == {"success": False, "message": "Método no permitido"}


class TestStoreFailure:
    async def test_failure_mid_check_is_internal_error(
        self, guarded_client: AsyncClient, db: AsyncSession, monkeypatch
    ):
        async def broken(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "scalar", broken)

        response = await guarded_client.get(
            "/test/reports", headers=auth_headers_for(uuid4())
        )

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Error interno del servidor"
        assert "database is locked" in body["error"]

    async def test_enrichment_never_denies(
        self, guarded_client: AsyncClient, db: AsyncSession, monkeypatch
    ):
        async def broken(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "execute", broken)

        response = await guarded_client.get("/test/context", headers=auth_headers_for(uuid4()))

        assert response.status_code == 200
        assert response.json() == {"roles": [], "permissions": []}


class TestEnrichUserContext:
    async def test_anonymous(self, guarded_client: AsyncClient):
        response = await guarded_client.get("/test/context")

        assert response.status_code == 200
        assert response.json() == {"roles": [], "permissions": []}

    async def test_attaches_roles_and_permissions(self, guarded_client: AsyncClient, reader):
        response = await guarded_client.get("/test/context", headers=auth_headers_for(reader))

        assert response.json() == {
            "roles": ["productor"],
            "permissions": [
                {"action": "leer", "resource": "reportes", "description": "Ver reportes"}
            ],
        }
