"""Pagination metadata and the generic paged response envelope."""

from typing import Generic, TypeVar

from pydantic import Field

from strongroom.schemas.common import APIModel

T = TypeVar("T")


class PaginationMeta(APIModel):
    """{ total, page, limit, totalPages, hasNextPage, hasPreviousPage }"""

    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    has_next_page: bool
    has_previous_page: bool


class Paginated(APIModel, Generic[T]):
    """Response envelope for list endpoints: { data, meta }."""

    data: list[T]
    meta: PaginationMeta
