"""Root API router: probes at the top level, feature modules under ``/api/v1``."""

from typing import Any

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from rolegate import __version__
from rolegate.api.dependencies import DBSession
from rolegate.config import settings
from rolegate.core.permissions.models import Permission, Role
from rolegate.modules import discover_modules


logger = structlog.get_logger()


class LivenessResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    """Store reachability plus the size of the authorization catalog.

    ``catalog`` is informational: an empty catalog does not make the
    service unready, it only means nothing has been seeded yet.
    """

    status: str
    checks: dict[str, str]
    catalog: dict[str, int] = {}


health_router = APIRouter(tags=["health"])


@health_router.get(
    "/health/live",
    response_model=LivenessResponse,
    summary="Liveness probe",
    description="Returns 200 while the process is running.",
)
async def liveness() -> LivenessResponse:
    return LivenessResponse(status="alive")


@health_router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Checks that the assignment store answers and reports the catalog size.",
)
async def readiness(db: DBSession) -> JSONResponse:
    """Answer 503 while the store cannot be queried."""
    try:
        permissions = await db.scalar(select(func.count()).select_from(Permission))
        roles = await db.scalar(select(func.count()).select_from(Role))
    except SQLAlchemyError as exc:
        logger.warning("readiness_database_failed", error=str(exc))
        body = ReadinessResponse(status="degraded", checks={"database": str(exc)})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=body.model_dump(),
        )

    body = ReadinessResponse(
        status="ready",
        checks={"database": "ok"},
        catalog={"permissions": permissions or 0, "roles": roles or 0},
    )
    return JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump())


@health_router.get(
    "/info",
    summary="Application info",
    description="Returns application metadata.",
)
async def info() -> dict[str, Any]:
    return {
        "app": settings.app_name,
        "version": __version__,
        "environment": settings.environment,
        "admin_role": settings.admin_role_name,
    }


v1_router = APIRouter(prefix="/api/v1")
for module_router in discover_modules():
    v1_router.include_router(module_router)

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(v1_router)
