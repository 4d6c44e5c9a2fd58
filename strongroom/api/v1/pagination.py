"""Shared query parameters for paginated list endpoints."""

from typing import Annotated, Any

from fastapi import Query


def list_query_params(
    page: Annotated[str | None, Query(description="Page number (default: 1)")] = None,
    limit: Annotated[
        str | None, Query(description="Items per page (default: 10, max: 100)")
    ] = None,
    q: Annotated[str | None, Query(max_length=100, description="Search term")] = None,
    sort_by: Annotated[
        str | None,
        Query(alias="sortBy", max_length=50, description="Field to sort by (default: createdAt)"),
    ] = None,
    sort_order: Annotated[
        str | None, Query(alias="sortOrder", description="asc or desc (default: desc)")
    ] = None,
    start_date: Annotated[
        str | None, Query(alias="startDate", description="Created at or after (ISO 8601)")
    ] = None,
    end_date: Annotated[
        str | None, Query(alias="endDate", description="Created at or before (ISO 8601)")
    ] = None,
) -> dict[str, Any]:
    """
    Raw list parameters keyed the way compose_query expects.

    page and limit are taken as strings so out-of-range or malformed values are
    coerced by the composer instead of rejected.
    """
    return {
        "page": page,
        "limit": limit,
        "search": q,
        "sort": sort_by,
        "order": sort_order,
        "start_date": start_date,
        "end_date": end_date,
    }
