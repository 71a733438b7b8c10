"""Response envelope shared by every successful endpoint.

Successful responses have the shape::

    {"success": true, "message": "...", "data": {...}}

Field names are exposed in camelCase; request bodies accept both the
camelCase alias and the Python name.
"""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(CamelModel):
    """Pagination block attached to list responses."""

    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PaginationMeta":
        return cls(
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if limit else 0,
        )


class SuccessResponse(CamelModel, Generic[DataT]):
    """Success envelope."""

    success: bool = True
    message: str | None = None
    data: DataT | None = None


class MessageResponse(CamelModel):
    """Success envelope without a payload."""

    success: bool = True
    message: str
