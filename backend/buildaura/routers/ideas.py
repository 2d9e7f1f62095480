"""Ideas router: the caller's saved business ideas."""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from buildaura.deps import get_current_user, get_db
from buildaura.models.db.business_idea import BusinessIdea
from buildaura.models.records import BusinessIdeaResponse
from buildaura.routers.record_helpers import (
    delete_owned_row,
    get_owned_row,
    list_owned_rows,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/me", tags=["ideas"])


# ---------------------------------------------------------------------------
# GET /me/ideas
# ---------------------------------------------------------------------------


@router.get("/ideas", response_model=List[BusinessIdeaResponse])
async def list_ideas(
    search: Optional[str] = Query(None, max_length=200),
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """List saved ideas, newest first, optionally filtered by title/description."""
    rows = await list_owned_rows(
        db,
        BusinessIdea,
        current_user,
        search=search,
        search_columns=(BusinessIdea.title, BusinessIdea.description),
        order_by=(BusinessIdea.created_at.desc(), BusinessIdea.sort_order),
        label="ideas",
    )
    return [BusinessIdeaResponse.model_validate(r) for r in rows]


# ---------------------------------------------------------------------------
# GET /me/ideas/{idea_id}
# ---------------------------------------------------------------------------


@router.get("/ideas/{idea_id}", response_model=BusinessIdeaResponse)
async def get_idea(
    idea_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    row = await get_owned_row(db, BusinessIdea, idea_id, current_user, label="idea")
    return BusinessIdeaResponse.model_validate(row)


# ---------------------------------------------------------------------------
# DELETE /me/ideas/{idea_id}
# ---------------------------------------------------------------------------


@router.delete("/ideas/{idea_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_idea(
    idea_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Delete one idea. Other ideas from the same generation are kept."""
    await delete_owned_row(db, BusinessIdea, idea_id, current_user, label="idea")
