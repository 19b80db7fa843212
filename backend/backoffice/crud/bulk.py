"""
Bulk actions shared by every listable entity.

Both operations skip system records (``is_system = 1``) for entities carrying
that flag and raise ``NotFoundError`` when nothing was affected, so callers can
tell "nothing matched" apart from a successful no-op.
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import NotFoundError, ValidationError
from ..models.enums import SystemFlag
from .paginate import Listing, coerce_value

logger = logging.getLogger("backoffice.bulk")


@dataclass(frozen=True)
class FieldUpdate:
    name: str
    value: Any


@dataclass
class BulkResult:
    requested: int
    affected: int
    ids: list[uuid.UUID] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return self.affected < self.requested


def _unique_ids(ids: Iterable[uuid.UUID]) -> list[uuid.UUID]:
    unique = list(dict.fromkeys(ids))
    if not unique:
        raise ValidationError("ids must contain at least one id")
    return unique


def _target_conditions(listing: Listing, ids: list[uuid.UUID]) -> list[Any]:
    conditions = [listing.primary_key.in_(ids)]
    if listing.system_flag is not None:
        flag = getattr(listing.model, listing.system_flag)
        conditions.append(flag != SystemFlag.YES)
    return conditions


def _rowcount(outcome: Any, fallback: int) -> int:
    # some drivers report -1 when the count is unavailable
    rowcount = getattr(outcome, "rowcount", None)
    if rowcount is None or rowcount < 0:
        return fallback
    return rowcount


def _report(action: str, listing: Listing, result: BulkResult) -> None:
    if result.is_partial:
        logger.warning(
            "bulk_%s_partial entity=%s requested=%s affected=%s",
            action,
            listing.label,
            result.requested,
            result.affected,
        )
    else:
        logger.info(
            "bulk_%s entity=%s affected=%s", action, listing.label, result.affected
        )


async def bulk_delete(
    session: AsyncSession, listing: Listing, ids: Iterable[uuid.UUID]
) -> BulkResult:
    """Delete every non-system row whose id is in ``ids``."""
    requested = _unique_ids(ids)
    conditions = _target_conditions(listing, requested)

    deletable = list(
        (await session.execute(select(listing.primary_key).where(*conditions))).scalars().all()
    )
    if not deletable:
        raise NotFoundError(
            f"No deletable {listing.label} records found",
            details={"requested": len(requested), "affected": 0},
        )

    outcome = await session.execute(
        delete(listing.model).where(listing.primary_key.in_(deletable))
    )
    affected = _rowcount(outcome, len(deletable))
    result = BulkResult(requested=len(requested), affected=affected, ids=deletable)
    _report("delete", listing, result)
    return result


async def bulk_update_field(
    session: AsyncSession,
    listing: Listing,
    ids: Iterable[uuid.UUID],
    field_update: FieldUpdate,
) -> BulkResult:
    """Set one allowlisted field on every non-system row whose id is in ``ids``."""
    validator = listing.mutable.get(field_update.name)
    if validator is None:
        raise ValidationError(
            f"Field '{field_update.name}' cannot be changed in bulk for {listing.label}",
            details={"field": field_update.name, "allowed": sorted(listing.mutable)},
        )
    requested = _unique_ids(ids)

    column = listing.column(field_update.name)
    value = validator(coerce_value(field_update.name, column, field_update.value))

    conditions = _target_conditions(listing, requested)
    targets = list(
        (await session.execute(select(listing.primary_key).where(*conditions))).scalars().all()
    )
    if not targets:
        raise NotFoundError(
            f"No updatable {listing.label} records found",
            details={"requested": len(requested), "affected": 0},
        )

    outcome = await session.execute(
        update(listing.model)
        .where(listing.primary_key.in_(targets))
        .values({listing.fields[field_update.name]: value})
    )
    affected = _rowcount(outcome, len(targets))
    result = BulkResult(requested=len(requested), affected=affected, ids=targets)
    _report("update", listing, result)
    return result
