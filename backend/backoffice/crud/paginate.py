"""
Generic paginated query engine.

Every listable entity describes itself with a ``Listing``: which public
(camelCase) field names map to which columns, which of them take part in
free-text search, which may be filtered on and which may be changed through
bulk actions. ``find_all_paginate`` turns ``PaginateOptions`` into a filtered,
searched, ordered and paginated SELECT against any such listing.
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, false, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from ..config import settings
from ..errors import ValidationError

logger = logging.getLogger("backoffice.paginate")

T = TypeVar("T")

SORT_ORDERS = ("ASC", "DESC")
LIKE_ESCAPE = "\\"


@dataclass(frozen=True)
class Listing:
    """Query configuration for one entity."""

    label: str
    model: type
    fields: Mapping[str, str]
    searchable: frozenset[str] = frozenset()
    filterable: frozenset[str] | None = None
    mutable: Mapping[str, Callable[[Any], Any]] = field(default_factory=dict)
    system_flag: str | None = None

    def column(self, public_name: str) -> InstrumentedAttribute:
        return getattr(self.model, self.fields[public_name])

    @property
    def primary_key(self) -> InstrumentedAttribute:
        return getattr(self.model, "id")

    def can_filter(self, public_name: str) -> bool:
        if public_name not in self.fields:
            return False
        return self.filterable is None or public_name in self.filterable


@dataclass
class PaginateOptions:
    """List query options; ``page_number`` is 0-based as sent by clients."""

    page_number: int = 0
    per_page: int | None = None
    sort: str = "createdAt"
    order: str = "ASC"
    filters: dict[str, Any] = field(default_factory=dict)
    q: str | None = None
    ignore_global: frozenset[str] = frozenset()

    @property
    def page(self) -> int:
        return self.page_number + 1


@dataclass
class Page(Generic[T]):
    rows: list[T]
    total: int
    page: int
    per_page: int


def coerce_value(public_name: str, column: InstrumentedAttribute, raw: Any) -> Any:
    """Convert a raw client value to the Python type of ``column``."""
    if raw is None:
        return None
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return raw

    try:
        if python_type is bool:
            if isinstance(raw, bool):
                return raw
            lowered = str(raw).strip().lower()
            if lowered in {"1", "true", "yes"}:
                return True
            if lowered in {"0", "false", "no"}:
                return False
            raise ValueError(raw)
        if python_type is int:
            if isinstance(raw, bool):
                raise ValueError(raw)
            if isinstance(raw, int):
                return raw
            return int(str(raw).strip())
        if python_type is uuid.UUID:
            return raw if isinstance(raw, uuid.UUID) else uuid.UUID(str(raw))
        if python_type is datetime:
            return raw if isinstance(raw, datetime) else datetime.fromisoformat(str(raw))
        if python_type is str:
            return str(raw)
        return python_type(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            f"Invalid value for field '{public_name}'",
            details={"field": public_name, "value": str(raw)},
        ) from exc


def _escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def _validate_options(listing: Listing, options: PaginateOptions) -> tuple[int, str]:
    per_page = options.per_page if options.per_page is not None else settings.default_per_page
    if per_page <= 0:
        raise ValidationError("perPage must be a positive integer", details={"perPage": per_page})
    if per_page > settings.max_per_page:
        raise ValidationError(
            f"perPage cannot exceed {settings.max_per_page}",
            details={"perPage": per_page},
        )
    if options.page_number < 0:
        raise ValidationError(
            "pageNumber cannot be negative", details={"pageNumber": options.page_number}
        )
    if options.sort not in listing.fields:
        raise ValidationError(
            f"Cannot sort {listing.label} by '{options.sort}'",
            details={"sort": options.sort, "allowed": sorted(listing.fields)},
        )
    order = options.order.upper()
    if order not in SORT_ORDERS:
        raise ValidationError(
            "order must be ASC or DESC", details={"order": options.order}
        )
    return per_page, order


def apply_filters(query: Select, listing: Listing, filters: Mapping[str, Any]) -> Select:
    """AND together one equality predicate per filter; unknown keys are rejected."""
    unknown = sorted(name for name in filters if not listing.can_filter(name))
    if unknown:
        raise ValidationError(
            f"Unknown filter field(s) for {listing.label}: {', '.join(unknown)}",
            details={"fields": unknown},
        )
    for public_name, raw in filters.items():
        column = listing.column(public_name)
        query = query.where(column == coerce_value(public_name, column, raw))
    return query


def apply_search(
    query: Select, listing: Listing, term: str | None, ignore: Iterable[str]
) -> Select:
    """OR a case-insensitive substring match across searchable fields."""
    if term is None or not term.strip():
        return query
    ignored = set(ignore)
    fields = sorted(name for name in listing.searchable if name not in ignored)
    if not fields:
        return query.where(false())
    pattern = f"%{_escape_like(term.strip())}%"
    return query.where(
        or_(*(listing.column(name).ilike(pattern, escape=LIKE_ESCAPE) for name in fields))
    )


async def find_all_paginate(
    session: AsyncSession, listing: Listing, options: PaginateOptions
) -> Page[Any]:
    per_page, order = _validate_options(listing, options)

    query = select(listing.model)
    query = apply_filters(query, listing, options.filters)
    query = apply_search(query, listing, options.q, options.ignore_global)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await session.execute(count_query)).scalar() or 0

    sort_column = listing.column(options.sort)
    primary_key = listing.primary_key
    if order == "DESC":
        query = query.order_by(sort_column.desc(), primary_key.asc())
    else:
        query = query.order_by(sort_column.asc(), primary_key.asc())

    page = options.page
    query = query.limit(per_page).offset((page - 1) * per_page)

    result = await session.execute(query)
    rows = list(result.scalars().all())
    logger.debug(
        "paginate entity=%s page=%s per_page=%s total=%s returned=%s",
        listing.label,
        page,
        per_page,
        total,
        len(rows),
    )
    return Page(rows=rows, total=total, page=page, per_page=per_page)
