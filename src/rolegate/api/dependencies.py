"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.config import settings
from rolegate.core.database import get_db


# Type alias for database session dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]


class PageParams(BaseModel):
    """Page/limit query parameters."""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def get_page_params(
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1)] = settings.default_page_size,
) -> PageParams:
    """Read pagination from the query string, capping ``limit``."""
    return PageParams(page=page, limit=min(limit, settings.max_page_size))


Pagination = Annotated[PageParams, Depends(get_page_params)]
