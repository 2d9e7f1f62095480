"""Prompt history router: the audit trail of generation calls.

Rows are append-only from the generation endpoints; users may browse,
filter by tool, and delete their own entries.  Deleting a history row keeps
the records it produced (their link is set to NULL by the database).
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from buildaura.deps import _safe_error, get_current_user, get_db
from buildaura.models.db.prompt_history import PromptHistory
from buildaura.models.records import PromptHistoryResponse, ToolUsage
from buildaura.routers.record_helpers import delete_owned_row, list_owned_rows

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/me", tags=["prompt-history"])


# ---------------------------------------------------------------------------
# GET /me/prompt-history
# ---------------------------------------------------------------------------


@router.get("/prompt-history", response_model=List[PromptHistoryResponse])
async def list_prompt_history(
    tool_name: Optional[str] = Query(None, max_length=100),
    search: Optional[str] = Query(None, max_length=200),
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """List history entries, newest first.

    ``tool_name`` narrows to one tool; ``search`` matches the prompt or
    response text (case-insensitive).
    """
    filters = []
    if tool_name:
        filters.append(PromptHistory.tool_name == tool_name)
    rows = await list_owned_rows(
        db,
        PromptHistory,
        current_user,
        search=search,
        search_columns=(PromptHistory.prompt_summary, PromptHistory.response_body),
        filters=filters,
        label="prompt history",
    )
    return [PromptHistoryResponse.model_validate(r) for r in rows]


# ---------------------------------------------------------------------------
# GET /me/prompt-history/tools
# ---------------------------------------------------------------------------


@router.get("/prompt-history/tools", response_model=List[ToolUsage])
async def list_prompt_history_tools(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Distinct tool names in the caller's history with usage counts."""
    try:
        result = await db.execute(
            select(PromptHistory.tool_name, func.count(PromptHistory.id))
            .where(PromptHistory.user_id == uuid.UUID(str(current_user["id"])))
            .group_by(PromptHistory.tool_name)
            .order_by(PromptHistory.tool_name)
        )
        rows = result.all()
    except Exception as e:
        logger.error("Failed to aggregate prompt history tools: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_safe_error("listing prompt history tools", e),
        ) from e

    return [ToolUsage(tool_name=name, count=count) for name, count in rows]


# ---------------------------------------------------------------------------
# DELETE /me/prompt-history/{entry_id}
# ---------------------------------------------------------------------------


@router.delete("/prompt-history/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_prompt_history_entry(
    entry_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    await delete_owned_row(
        db, PromptHistory, entry_id, current_user, label="prompt history entry"
    )
