"""Shared helpers for the per-user record routers.

Every lookup filters on the owning user, so a row that belongs to someone
else is indistinguishable from a missing one (404).
"""

import logging
import uuid
from typing import Any, List, Optional, Sequence, Type

from fastapi import HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from buildaura.deps import _safe_error

logger = logging.getLogger(__name__)


def _owner(current_user: dict) -> uuid.UUID:
    return uuid.UUID(str(current_user["id"]))


async def list_owned_rows(
    db: AsyncSession,
    model: Type[Any],
    current_user: dict,
    *,
    search: Optional[str] = None,
    search_columns: Sequence[Any] = (),
    filters: Sequence[Any] = (),
    order_by: Sequence[Any] = (),
    label: str = "records",
) -> List[Any]:
    """Return the caller's rows, newest first unless *order_by* is given."""
    stmt = select(model).where(model.user_id == _owner(current_user), *filters)
    if search and search.strip() and search_columns:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(*(col.ilike(pattern) for col in search_columns)))
    stmt = stmt.order_by(*(order_by or (model.created_at.desc(),)))

    try:
        result = await db.execute(stmt)
        return list(result.scalars().all())
    except Exception as e:
        logger.error("Failed to list %s: %s", label, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_safe_error(f"listing {label}", e),
        ) from e


async def get_owned_row(
    db: AsyncSession,
    model: Type[Any],
    item_id: uuid.UUID,
    current_user: dict,
    *,
    label: str,
) -> Any:
    """Fetch one of the caller's rows or raise 404."""
    try:
        result = await db.execute(
            select(model).where(
                model.id == item_id,
                model.user_id == _owner(current_user),
            )
        )
        row = result.scalar_one_or_none()
    except Exception as e:
        logger.error("Failed to fetch %s %s: %s", label, item_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_safe_error(f"fetching {label}", e),
        ) from e

    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{label.capitalize()} not found",
        )
    return row


async def delete_owned_row(
    db: AsyncSession,
    model: Type[Any],
    item_id: uuid.UUID,
    current_user: dict,
    *,
    label: str,
) -> None:
    """Delete one of the caller's rows; 404 when absent or not owned."""
    row = await get_owned_row(db, model, item_id, current_user, label=label)
    try:
        await db.delete(row)
        await db.flush()
    except Exception as e:
        logger.error("Failed to delete %s %s: %s", label, item_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_safe_error(f"{label} deletion", e),
        ) from e
    logger.info("Deleted %s %s for user %s", label, item_id, current_user["id"])
