"""Pydantic response/request schemas for the per-user record collections."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class BusinessIdeaResponse(BaseModel):
    """Stored business idea (mirrors the ``business_ideas`` columns)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    prompt_history_id: Optional[UUID] = None
    title: str
    description: str
    difficulty: Optional[str] = None
    market_size: Optional[str] = None
    time_to_market: Optional[str] = None
    skills_input: Optional[str] = None
    interests_input: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BusinessPlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    prompt_history_id: Optional[UUID] = None
    business_name: str
    industry: Optional[str] = None
    target_market: Optional[str] = None
    problem: Optional[str] = None
    solution: Optional[str] = None
    revenue_model: Optional[str] = None
    competition: Optional[str] = None
    plan_content: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LaunchAssetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    prompt_history_id: Optional[UUID] = None
    business_name: str
    industry: Optional[str] = None
    name_suggestions: Optional[List[Dict[str, Any]]] = None
    logo_concepts: Optional[List[Dict[str, Any]]] = None
    brand_colors: Optional[List[Dict[str, Any]]] = None
    taglines: Optional[List[str]] = None
    brand_voice: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserTaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    prompt_history_id: Optional[UUID] = None
    title: str
    description: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[date] = None
    completed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserTaskUpdate(BaseModel):
    """Request body for toggling a task. All fields optional."""

    completed: Optional[bool] = None
    priority: Optional[str] = Field(None, pattern="^(high|medium|low)$")
    due_date: Optional[date] = None


class PromptHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tool_name: str
    prompt_summary: str
    response_body: str
    created_at: Optional[datetime] = None


class ToolUsage(BaseModel):
    tool_name: str
    count: int


class RecordCounts(BaseModel):
    ideas: int = 0
    plans: int = 0
    launch_assets: int = 0
    tasks: int = 0
    prompt_history: int = 0


class DashboardResponse(BaseModel):
    """Counts per collection plus the most recent tool invocations."""

    counts: RecordCounts
    recent_activity: List[PromptHistoryResponse]


class WeeklyCounts(BaseModel):
    """Records created in one week, starting Monday 00:00 UTC."""

    week_start: date
    ideas: int = 0
    plans: int = 0
    launch_assets: int = 0
    tasks: int = 0
    total: int = 0


class WeeklyDashboardResponse(BaseModel):
    weeks: List[WeeklyCounts]
    total: int = 0
