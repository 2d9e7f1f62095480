"""Plans router: the caller's saved business plans."""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from buildaura.deps import get_current_user, get_db
from buildaura.models.db.business_plan import BusinessPlan
from buildaura.models.records import BusinessPlanResponse
from buildaura.routers.record_helpers import (
    delete_owned_row,
    get_owned_row,
    list_owned_rows,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/me", tags=["plans"])


# ---------------------------------------------------------------------------
# GET /me/plans
# ---------------------------------------------------------------------------


@router.get("/plans", response_model=List[BusinessPlanResponse])
async def list_plans(
    search: Optional[str] = Query(None, max_length=200),
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """List saved plans, newest first.

    ``search`` matches business name, target market or problem statement.
    """
    rows = await list_owned_rows(
        db,
        BusinessPlan,
        current_user,
        search=search,
        search_columns=(
            BusinessPlan.business_name,
            BusinessPlan.target_market,
            BusinessPlan.problem,
        ),
        label="plans",
    )
    return [BusinessPlanResponse.model_validate(r) for r in rows]


# ---------------------------------------------------------------------------
# GET /me/plans/{plan_id}
# ---------------------------------------------------------------------------


@router.get("/plans/{plan_id}", response_model=BusinessPlanResponse)
async def get_plan(
    plan_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    row = await get_owned_row(db, BusinessPlan, plan_id, current_user, label="plan")
    return BusinessPlanResponse.model_validate(row)


# ---------------------------------------------------------------------------
# DELETE /me/plans/{plan_id}
# ---------------------------------------------------------------------------


@router.delete("/plans/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_plan(
    plan_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    await delete_owned_row(db, BusinessPlan, plan_id, current_user, label="plan")
