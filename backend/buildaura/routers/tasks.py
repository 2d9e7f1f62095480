"""Tasks router: the caller's weekly task list with completion toggling."""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from buildaura.deps import _safe_error, get_current_user, get_db
from buildaura.models.db.user_task import UserTask
from buildaura.models.records import UserTaskResponse, UserTaskUpdate
from buildaura.routers.record_helpers import (
    delete_owned_row,
    get_owned_row,
    list_owned_rows,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/me", tags=["tasks"])


# ---------------------------------------------------------------------------
# GET /me/tasks
# ---------------------------------------------------------------------------


@router.get("/tasks", response_model=List[UserTaskResponse])
async def list_tasks(
    completed: Optional[bool] = Query(None, description="Filter by completion state"),
    search: Optional[str] = Query(None, max_length=200),
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """List tasks, newest generation first and in generated order within it."""
    filters = []
    if completed is not None:
        filters.append(UserTask.completed == completed)
    rows = await list_owned_rows(
        db,
        UserTask,
        current_user,
        search=search,
        search_columns=(UserTask.title, UserTask.description),
        filters=filters,
        order_by=(UserTask.created_at.desc(), UserTask.sort_order),
        label="tasks",
    )
    return [UserTaskResponse.model_validate(r) for r in rows]


# ---------------------------------------------------------------------------
# PATCH /me/tasks/{task_id}
# ---------------------------------------------------------------------------


@router.patch("/tasks/{task_id}", response_model=UserTaskResponse)
async def update_task(
    task_id: uuid.UUID,
    body: UserTaskUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Toggle completion or adjust priority / due date of one task.

    Raises:
        HTTPException 404: Task not found (or owned by another user).
    """
    task = await get_owned_row(db, UserTask, task_id, current_user, label="task")

    if body.completed is not None:
        task.completed = body.completed
    if body.priority is not None:
        task.priority = body.priority
    if body.due_date is not None:
        task.due_date = body.due_date

    try:
        await db.flush()
        await db.refresh(task)
    except Exception as e:
        logger.error("Failed to update task %s: %s", task_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_safe_error("task update", e),
        ) from e

    return UserTaskResponse.model_validate(task)


# ---------------------------------------------------------------------------
# DELETE /me/tasks/{task_id}
# ---------------------------------------------------------------------------


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    await delete_owned_row(db, UserTask, task_id, current_user, label="task")
