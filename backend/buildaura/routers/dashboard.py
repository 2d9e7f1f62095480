"""Dashboard router -- consolidated counts for the signed-in user's home view.

Returns per-collection record counts and the most recent tool invocations in
a single call so the client does not fan out five list requests, plus a
week-by-week series of created records for the activity chart.
"""

import logging
import uuid
from datetime import date, datetime, time, timedelta, timezone
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from buildaura.deps import _safe_error, get_current_user, get_db
from buildaura.models.db.business_idea import BusinessIdea
from buildaura.models.db.business_plan import BusinessPlan
from buildaura.models.db.launch_asset import LaunchAsset
from buildaura.models.db.prompt_history import PromptHistory
from buildaura.models.db.user_task import UserTask
from buildaura.models.records import (
    DashboardResponse,
    PromptHistoryResponse,
    RecordCounts,
    WeeklyCounts,
    WeeklyDashboardResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/me", tags=["dashboard"])

RECENT_ACTIVITY_LIMIT = 5

_COUNTED = {
    "ideas": BusinessIdea,
    "plans": BusinessPlan,
    "launch_assets": LaunchAsset,
    "tasks": UserTask,
    "prompt_history": PromptHistory,
}

# Generated entity collections in the weekly series
_CHARTED = {
    "ideas": BusinessIdea,
    "plans": BusinessPlan,
    "launch_assets": LaunchAsset,
    "tasks": UserTask,
}

DEFAULT_WEEKS = 8
MAX_WEEKS = 52


# ---------------------------------------------------------------------------
# GET /api/v1/me/dashboard
# ---------------------------------------------------------------------------


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Return record counts and recent activity for the authenticated user."""
    user_id = uuid.UUID(str(current_user["id"]))

    try:
        counts = {}
        for key, model in _COUNTED.items():
            result = await db.execute(
                select(func.count()).select_from(model).where(model.user_id == user_id)
            )
            counts[key] = result.scalar() or 0

        recent = await db.execute(
            select(PromptHistory)
            .where(PromptHistory.user_id == user_id)
            .order_by(PromptHistory.created_at.desc())
            .limit(RECENT_ACTIVITY_LIMIT)
        )
        recent_rows = list(recent.scalars().all())
    except Exception as e:
        logger.error("Failed to build dashboard for %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_safe_error("loading dashboard", e),
        ) from e

    return DashboardResponse(
        counts=RecordCounts(**counts),
        recent_activity=[PromptHistoryResponse.model_validate(r) for r in recent_rows],
    )


# ---------------------------------------------------------------------------
# GET /api/v1/me/dashboard/weekly
# ---------------------------------------------------------------------------


def week_start(day: date) -> date:
    """Monday of the week containing *day*."""
    return day - timedelta(days=day.weekday())


def week_starts(today: date, weeks: int) -> List[date]:
    """The *weeks* most recent week starts, oldest first, ending with this week."""
    current = week_start(today)
    return [current - timedelta(weeks=n) for n in range(weeks - 1, -1, -1)]


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive values that were written as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@router.get("/dashboard/weekly", response_model=WeeklyDashboardResponse)
async def get_weekly_dashboard(
    weeks: int = Query(DEFAULT_WEEKS, ge=1, le=MAX_WEEKS),
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """
    Return per-collection counts of records created in each recent week.

    Weeks start on Monday (UTC); the last entry is the current, partial
    week.  Weeks without activity are present with zero counts.

    Query parameters:
    - weeks: Number of weeks to return (1-52, default 8)
    """
    user_id = uuid.UUID(str(current_user["id"]))
    starts = week_starts(datetime.now(timezone.utc).date(), weeks)
    since = datetime.combine(starts[0], time.min, tzinfo=timezone.utc)
    buckets = {start: dict.fromkeys(_CHARTED, 0) for start in starts}

    try:
        for key, model in _CHARTED.items():
            result = await db.execute(
                select(model.created_at).where(
                    model.user_id == user_id, model.created_at >= since
                )
            )
            for created_at in result.scalars():
                bucket = buckets.get(week_start(_as_utc(created_at).date()))
                if bucket is not None:
                    bucket[key] += 1
    except Exception as e:
        logger.error("Failed to build weekly dashboard for %s: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_safe_error("loading weekly dashboard", e),
        ) from e

    series = [
        WeeklyCounts(week_start=start, total=sum(counts.values()), **counts)
        for start, counts in buckets.items()
    ]
    return WeeklyDashboardResponse(weeks=series, total=sum(w.total for w in series))
