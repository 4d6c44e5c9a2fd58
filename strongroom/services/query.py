"""
Query composer: turn untrusted list parameters into a bounded, normalized descriptor.

compose_query never raises; every input is coerced into range. Sort fields are kept
verbatim and only checked when the descriptor is applied to a model (apply_query),
where an unknown column raises InvalidQueryError.
"""

import logging
import math
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from sqlalchemy import Select, and_, func, inspect, or_, select, true
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from strongroom.core.errors import InvalidQueryError
from strongroom.schemas.pagination import PaginationMeta

logger = logging.getLogger(__name__)

SortDirection = Literal["asc", "desc"]

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# Largest page whose offset still fits a signed 64-bit OFFSET at MAX_LIMIT.
MAX_PAGE = (2**63 - 1) // MAX_LIMIT
DEFAULT_SORT_FIELD = "created_at"
DEFAULT_SORT_DIRECTION: SortDirection = "desc"
DATE_RANGE_FIELD = "created_at"
LIKE_ESCAPE = "\\"

# Keys with a fixed meaning; every other key is a candidate equality filter.
RESERVED_KEYS = frozenset(
    {"page", "limit", "sort", "order", "search", "start_date", "end_date"}
)

# Columns never exposed to sorting, search or filtering.
SECRET_FIELDS = frozenset({"password_hash"})

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass(frozen=True)
class SearchClause:
    """Case-insensitive 'field contains term' over any of fields."""

    term: str
    fields: tuple[str, ...]


@dataclass(frozen=True)
class QueryDescriptor:
    """Normalized list query: offset/limit, ordering and the filter predicate parts."""

    page: int
    skip: int
    take: int
    sort_field: str
    sort_direction: SortDirection
    search: SearchClause | None = None
    filters: Mapping[str, Any] = field(default_factory=dict)
    created_from: datetime | None = None
    created_to: datetime | None = None

    @property
    def is_unfiltered(self) -> bool:
        """True when the where-predicate is unconditionally true."""
        return (
            self.search is None
            and not self.filters
            and self.created_from is None
            and self.created_to is None
        )


def _coerce_int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def normalize_page(value: Any) -> int:
    """Page number, default 1, clamped to [1, MAX_PAGE]."""
    return min(MAX_PAGE, max(DEFAULT_PAGE, _coerce_int(value, DEFAULT_PAGE)))


def normalize_limit(value: Any) -> int:
    """Page size, default 10, clamped to [1, MAX_LIMIT]."""
    return min(MAX_LIMIT, max(1, _coerce_int(value, DEFAULT_LIMIT)))


def normalize_direction(value: Any) -> SortDirection:
    if isinstance(value, str) and value.strip().lower() == "asc":
        return "asc"
    return DEFAULT_SORT_DIRECTION


def _parse_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        logger.debug("Ignoring unparsable date bound %r", value)
        return None


def _typed_filters(
    params: Mapping[str, Any],
    filterable_fields: Mapping[str, Callable[[Any], Any]],
) -> dict[str, Any]:
    filters: dict[str, Any] = {}
    for key, raw in params.items():
        if key in RESERVED_KEYS or raw is None or raw == "":
            continue
        convert = filterable_fields.get(key)
        if convert is None:
            continue
        try:
            filters[key] = convert(raw)
        except (TypeError, ValueError):
            logger.debug("Dropping filter %s=%r: value does not convert", key, raw)
    return filters


def compose_query(
    params: Mapping[str, Any],
    searchable_fields: Sequence[str] = (),
    filterable_fields: Mapping[str, Callable[[Any], Any]] | None = None,
    default_sort: str = DEFAULT_SORT_FIELD,
) -> QueryDescriptor:
    """
    Build a QueryDescriptor from raw parameters.

    Recognised keys: page, limit, sort, order, search, start_date, end_date. Any other
    key becomes an equality filter only if it is in filterable_fields, converted with
    the mapped callable; keys outside the allow-list and values that fail conversion
    are ignored.
    """
    page = normalize_page(params.get("page"))
    take = normalize_limit(params.get("limit"))

    sort_raw = params.get("sort")
    sort_field = sort_raw.strip() if isinstance(sort_raw, str) and sort_raw.strip() else default_sort

    search: SearchClause | None = None
    term = params.get("search")
    if isinstance(term, str) and term.strip() and searchable_fields:
        search = SearchClause(term=term.strip(), fields=tuple(searchable_fields))

    return QueryDescriptor(
        page=page,
        skip=(page - 1) * take,
        take=take,
        sort_field=sort_field,
        sort_direction=normalize_direction(params.get("order")),
        search=search,
        filters=_typed_filters(params, filterable_fields or {}),
        created_from=_parse_datetime(params.get("start_date")),
        created_to=_parse_datetime(params.get("end_date")),
    )


def build_meta(page: int, limit: int, total: int) -> PaginationMeta:
    """Pagination metadata for a result page."""
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    return PaginationMeta(
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_previous_page=page > 1,
    )


def contains_pattern(term: str) -> str:
    """LIKE pattern matching term anywhere, with %, _ and the escape char taken literally."""
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def _column(model: type, name: str) -> ColumnElement[Any]:
    """Mapped column by attribute name, accepting camelCase for snake_case attributes."""
    columns = inspect(model).columns
    for candidate in (name, _CAMEL_BOUNDARY.sub("_", name).lower()):
        if candidate in SECRET_FIELDS:
            break
        if candidate in columns:
            return getattr(model, candidate)
    raise InvalidQueryError(f"Unknown field for {model.__name__}: {name}")


def where_clause(model: type, descriptor: QueryDescriptor) -> ColumnElement[bool]:
    """Conjunction of the search disjunction, equality filters and date range."""
    parts: list[ColumnElement[bool]] = []
    if descriptor.search is not None:
        pattern = contains_pattern(descriptor.search.term)
        parts.append(
            or_(
                *(
                    _column(model, f).ilike(pattern, escape=LIKE_ESCAPE)
                    for f in descriptor.search.fields
                )
            )
        )
    for key, value in descriptor.filters.items():
        parts.append(_column(model, key) == value)
    if descriptor.created_from is not None:
        parts.append(_column(model, DATE_RANGE_FIELD) >= descriptor.created_from)
    if descriptor.created_to is not None:
        parts.append(_column(model, DATE_RANGE_FIELD) <= descriptor.created_to)
    if not parts:
        return true()
    return and_(*parts)


def apply_query(stmt: Select, model: type, descriptor: QueryDescriptor) -> Select:
    """Apply filter, ordering and offset/limit to a select over model."""
    column = _column(model, descriptor.sort_field)
    order = column.asc() if descriptor.sort_direction == "asc" else column.desc()
    return (
        stmt.where(where_clause(model, descriptor))
        .order_by(order)
        .offset(descriptor.skip)
        .limit(descriptor.take)
    )


def fetch_page(
    session: Session,
    stmt: Select,
    model: type,
    descriptor: QueryDescriptor,
) -> tuple[list[Any], int]:
    """Run the page query and the matching count; return (rows, total)."""
    page_stmt = apply_query(stmt, model, descriptor)
    count_stmt = select(func.count()).select_from(
        stmt.where(where_clause(model, descriptor)).subquery()
    )
    total = session.scalar(count_stmt) or 0
    rows = list(session.scalars(page_stmt).all())
    return rows, total
