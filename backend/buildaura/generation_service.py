"""Generation service for the BuildAura guided tools.

Turns validated wizard inputs into LLM prompts, decodes the model's JSON
output into strict draft models, and persists the resulting records together
with their prompt-history row in a single transaction.

Decoding fails closed: output that is not JSON or does not match the draft
model raises ``MalformedResponse``; nothing is persisted in that case.
"""

from __future__ import annotations

import json
import logging
import os
import uuid
from typing import Any, Dict, List, Optional, Tuple

import openai
from pydantic import BaseModel, ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from buildaura.errors import GenerationFailed, MalformedResponse, PersistenceFailed
from buildaura.models.db.base import utcnow
from buildaura.models.db.business_idea import BusinessIdea as BusinessIdeaRow
from buildaura.models.db.business_plan import BusinessPlan
from buildaura.models.db.launch_asset import LaunchAsset
from buildaura.models.db.prompt_history import PromptHistory
from buildaura.models.db.user_task import UserTask
from buildaura.models.generation import (
    PLAN_DRAFT_ADAPTER,
    BusinessIdea,
    IdeaDrafts,
    IdeaRequest,
    IdeaSet,
    PlanRequest,
    PlanSections,
    TaskDrafts,
    TaskItem,
    TaskList,
    TasksRequest,
    ToolkitBundle,
    ToolkitDraft,
    ToolkitRequest,
    get_tool,
)
from buildaura.openai_provider import get_async_client, get_chat_model

logger = logging.getLogger(__name__)

IDEA_COUNT = int(os.getenv("BUILDAURA_IDEA_COUNT", "4"))

# Defaults recorded on every generated idea until the user edits them
DEFAULT_DIFFICULTY = "Medium"
DEFAULT_MARKET_SIZE = "Medium"
DEFAULT_TIME_TO_MARKET = "6-12 months"
DEFAULT_BUSINESS_NAME = "New Business"


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

IDEA_SYSTEM_PROMPT = """\
You are a senior business strategist and startup incubator partner. An \
entrepreneur has shared their background with you and you generate \
high-potential startup ideas that match their profile.

Ideas must be realistic given their skills, address real market needs, have \
clear monetization paths, and leverage the founder's unique advantages.

You MUST return a valid JSON object with this structure:

{
  "ideas": [
    {
      "name": "Concise, memorable business name",
      "description": "2-sentence elevator pitch",
      "problem": "Specific problem this solves",
      "solution": "How the approach solves it uniquely",
      "target_audience": "Detailed customer profile",
      "monetization": "Clear revenue model with pricing",
      "why_match": "Why this fits the founder's skills and interests"
    }
  ]
}\
"""

PLAN_SYSTEM_PROMPT = """\
You are a senior business consultant working with a startup founder. Create \
an investor-ready business plan based on their inputs. Include specific \
numbers, timelines, and concrete next steps.

You MUST return a valid JSON object whose keys are exactly these section \
headings and whose values are plain text:

{
  "Executive Summary": "2-paragraph overview of the opportunity and strategy",
  "Problem Statement": "Clear definition of the market problem and its impact",
  "Solution Overview": "Detailed explanation of the solution and how it works",
  "Market Analysis": "Target market size, trends, and customer segments",
  "Competitive Landscape": "Key competitors and the differentiation strategy",
  "Business Model": "Revenue streams, pricing strategy, and unit economics",
  "Go-to-Market Strategy": "Customer acquisition plan and marketing approach",
  "Operations Plan": "Key resources, partnerships, and operational requirements",
  "Financial Projections": "Revenue forecasts and key assumptions for years 1-3",
  "Risk Assessment": "Primary risks and mitigation strategies"
}\
"""

TOOLKIT_SYSTEM_PROMPT = """\
You are a world-class brand strategist who creates unique, personalized brand \
identities. Every suggestion must be tailored to the specific business; avoid \
generic options like "Pro", "Hub", "Build Better" or default color schemes.

Produce five business name alternatives (with a realistic .com domain \
assessment and rationale), three logo concepts, a palette of 4-5 colors with \
HEX codes and usage guidelines, three taglines under six words each, and a \
brand voice description.

You MUST return a valid JSON object with this structure:

{
  "name_alternatives": [
    {"name": "...", "domain": "example.com", "available": true, "rationale": "..."}
  ],
  "logo_ideas": [
    {"concept": "...", "style": "...", "elements": "..."}
  ],
  "brand_colors": [
    {"name": "Color Name", "hex": "#HEXCODE", "usage": "..."}
  ],
  "taglines": ["...", "...", "..."],
  "brand_voice": {"tone": "...", "style": "..."}
}\
"""

TASKS_SYSTEM_PROMPT = """\
You are a business productivity coach who creates actionable task lists. \
Generate 5-8 specific, practical tasks that move the business forward within \
the stated timeframe.

You MUST return a valid JSON object with this structure:

{
  "tasks": [
    {
      "title": "Clear, actionable title",
      "description": "1-2 sentence description",
      "priority": "high|medium|low",
      "due_date": "YYYY-MM-DD"
    }
  ]
}\
"""


def _strip_code_fences(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("```"):
        lines = [ln for ln in raw.split("\n") if not ln.strip().startswith("```")]
        raw = "\n".join(lines)
    return raw


# ---------------------------------------------------------------------------
# Entity builders (shared by generation and reload)
# ---------------------------------------------------------------------------


def idea_set_from_rows(
    generation_id: uuid.UUID, rows: List[BusinessIdeaRow]
) -> IdeaSet:
    ideas = []
    for row in rows:
        details = row.details or {}
        ideas.append(
            BusinessIdea(
                id=row.id,
                name=row.title,
                description=row.description,
                problem=details.get("problem", ""),
                solution=details.get("solution", ""),
                target_audience=details.get("target_audience", ""),
                monetization=details.get("monetization", ""),
                why_match=details.get("why_match", ""),
                created_at=row.created_at,
            )
        )
    return IdeaSet(generation_id=generation_id, ideas=ideas)


def plan_sections_from_row(row: BusinessPlan) -> PlanSections:
    return PlanSections(
        id=row.id,
        generation_id=row.prompt_history_id,
        business_name=row.business_name,
        sections=row.plan_content or {},
        created_at=row.created_at,
    )


def toolkit_bundle_from_row(row: LaunchAsset) -> ToolkitBundle:
    return ToolkitBundle(
        id=row.id,
        generation_id=row.prompt_history_id,
        business_name=row.business_name,
        name_alternatives=row.name_suggestions or [],
        logo_ideas=row.logo_concepts or [],
        brand_colors=row.brand_colors or [],
        taglines=row.taglines or [],
        brand_voice=row.brand_voice or {},
        created_at=row.created_at,
    )


def task_list_from_rows(generation_id: uuid.UUID, rows: List[UserTask]) -> TaskList:
    return TaskList(
        generation_id=generation_id,
        tasks=[
            TaskItem(
                id=row.id,
                title=row.title,
                description=row.description or "",
                priority=row.priority or "medium",
                due_date=row.due_date,
                completed=row.completed,
            )
            for row in rows
        ],
    )


# ---------------------------------------------------------------------------
# GenerationService
# ---------------------------------------------------------------------------


class GenerationService:
    """Stateless service for the four generation tools."""

    def __init__(self, client: Any = None, model: Optional[str] = None) -> None:
        self._client = client
        self._model = model

    @property
    def async_client(self):
        if self._client is None:
            self._client = get_async_client()
        return self._client

    @property
    def model(self) -> str:
        if self._model is None:
            self._model = get_chat_model()
        return self._model

    # -- LLM plumbing -------------------------------------------------------

    async def _complete_json(
        self,
        tool_name: str,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> Tuple[Any, str]:
        """Run one chat completion and return ``(parsed_json, raw_text)``.

        Raises:
            GenerationFailed: If the provider call fails.
            MalformedResponse: If the output is empty or not JSON.
        """
        try:
            client, model = self.async_client, self.model
        except ValueError as e:
            logger.error("LLM provider not configured: %s", e)
            raise GenerationFailed("LLM provider is not configured", detail=str(e)) from e

        logger.info("Generating %s using %s", tool_name, model)

        try:
            response = await client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
            )
        except openai.APIStatusError as e:
            logger.error(
                "LLM provider error for %s: %s - %s", tool_name, e.status_code, e.message
            )
            raise GenerationFailed(
                f"LLM provider returned {e.status_code}",
                status=e.status_code,
                detail=e.message,
            ) from e
        except openai.APIError as e:
            logger.error("LLM request for %s failed: %s", tool_name, e)
            raise GenerationFailed(
                f"LLM request failed: {type(e).__name__}", detail=str(e)
            ) from e

        raw_content = _strip_code_fences(response.choices[0].message.content or "")
        if not raw_content:
            raise MalformedResponse(f"AI returned an empty response for {tool_name}")

        try:
            parsed = json.loads(raw_content)
        except json.JSONDecodeError as e:
            logger.error("Failed to parse %s JSON: %s", tool_name, e)
            raise MalformedResponse(f"AI returned invalid JSON for {tool_name}: {e}") from e

        return parsed, raw_content

    @staticmethod
    def _validate_draft(tool_name: str, model: type[BaseModel], parsed: Any):
        try:
            return model.model_validate(parsed)
        except ValidationError as e:
            logger.error("AI output for %s did not match schema: %s", tool_name, e)
            raise MalformedResponse(
                f"AI response did not match expected {tool_name} schema: "
                f"{e.error_count()} validation error(s)"
            ) from e

    async def _persist(
        self,
        db: AsyncSession,
        history: PromptHistory,
        rows: List[Any],
    ) -> None:
        """Write the records and their prompt-history row in one transaction.

        Records of one generation share the history row's timestamp.
        """
        for row in rows:
            row.prompt_history_id = history.id
            row.created_at = history.created_at
        try:
            db.add(history)
            db.add_all(rows)
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to persist %s generation: %s", history.tool_name, e)
            raise PersistenceFailed(
                f"Could not save {history.tool_name} results"
            ) from e

        logger.info(
            "Persisted %s generation %s (%d record(s), user=%s)",
            history.tool_name,
            history.id,
            len(rows),
            history.user_id,
        )

    @staticmethod
    def _history(
        user_id: uuid.UUID, tool_name: str, summary: str, parsed: Any
    ) -> PromptHistory:
        return PromptHistory(
            id=uuid.uuid4(),
            user_id=user_id,
            tool_name=tool_name,
            prompt_summary=summary,
            response_body=json.dumps(parsed, ensure_ascii=False),
            created_at=utcnow(),
        )

    # -- Ideas --------------------------------------------------------------

    async def generate_ideas(
        self, db: AsyncSession, user_id: str, request: IdeaRequest
    ) -> IdeaSet:
        user_prompt = (
            "ENTREPRENEUR PROFILE:\n"
            f"- Skills/Expertise: {request.skills}\n"
            f"- Problems they want to solve: {request.problems}\n"
            f"- Industry interests: {request.industries}\n\n"
            f"Provide {IDEA_COUNT} startup ideas as a JSON object. Focus on real "
            "business opportunities that could generate $100K+ ARR within 18 months."
        )
        parsed, _ = await self._complete_json(
            "idea-generator",
            IDEA_SYSTEM_PROMPT,
            user_prompt,
            temperature=0.8,
            max_tokens=2000,
        )
        drafts = self._validate_draft("idea-generator", IdeaDrafts, parsed)

        owner = uuid.UUID(user_id)
        history = self._history(
            owner,
            "idea-generator",
            f"Skills: {request.skills} | Problems: {request.problems} | "
            f"Industries: {request.industries}",
            parsed,
        )
        rows = [
            BusinessIdeaRow(
                id=uuid.uuid4(),
                user_id=owner,
                title=draft.name,
                description=draft.description,
                difficulty=DEFAULT_DIFFICULTY,
                market_size=DEFAULT_MARKET_SIZE,
                time_to_market=DEFAULT_TIME_TO_MARKET,
                sort_order=position,
                skills_input=request.skills,
                interests_input=f"{request.problems} | {request.industries}",
                details={
                    "problem": draft.problem,
                    "solution": draft.solution,
                    "target_audience": draft.target_audience,
                    "monetization": draft.monetization,
                    "why_match": draft.why_match,
                },
            )
            for position, draft in enumerate(drafts.ideas)
        ]
        await self._persist(db, history, rows)
        return idea_set_from_rows(history.id, rows)

    # -- Business plan ------------------------------------------------------

    async def generate_plan(
        self, db: AsyncSession, user_id: str, request: PlanRequest
    ) -> PlanSections:
        base_idea = ""
        if request.idea_context:
            base_idea = (
                f"Base Idea: {request.idea_context.name} - "
                f"{request.idea_context.description}\n\n"
            )
        user_prompt = (
            "BUSINESS CONTEXT:\n"
            f"{base_idea}"
            "FOUNDER'S INPUTS:\n"
            f"- Target Customer: {request.target_customer}\n"
            f"- Unique Advantage: {request.unique_advantage}\n"
            f"- Solution Details: {request.solution_details}\n"
            f"- Revenue Channels: {request.revenue_channels}\n\n"
            "Write the business plan as a JSON object."
        )
        parsed, _ = await self._complete_json(
            "business-plan",
            PLAN_SYSTEM_PROMPT,
            user_prompt,
            temperature=0.7,
            max_tokens=3000,
        )
        try:
            sections: Dict[str, str] = PLAN_DRAFT_ADAPTER.validate_python(parsed)
        except ValidationError as e:
            logger.error("AI output for business-plan did not match schema: %s", e)
            raise MalformedResponse(
                "AI response did not match expected business-plan schema"
            ) from e
        sections = {k.strip(): v.strip() for k, v in sections.items() if v and v.strip()}
        if not sections:
            raise MalformedResponse("AI returned a business plan with no sections")

        owner = uuid.UUID(user_id)
        history = self._history(
            owner,
            "business-plan",
            f"Customer: {request.target_customer} | Advantage: "
            f"{request.unique_advantage} | Solution: {request.solution_details} | "
            f"Revenue: {request.revenue_channels}",
            parsed,
        )
        row = BusinessPlan(
            id=uuid.uuid4(),
            user_id=owner,
            business_name=(
                request.idea_context.name
                if request.idea_context and request.idea_context.name
                else DEFAULT_BUSINESS_NAME
            ),
            target_market=request.target_customer,
            problem=sections.get("Problem Statement", ""),
            solution=request.solution_details,
            revenue_model=request.revenue_channels,
            competition=sections.get("Competitive Landscape"),
            plan_content=sections,
        )
        await self._persist(db, history, [row])
        return plan_sections_from_row(row)

    # -- Launch toolkit -----------------------------------------------------

    async def generate_toolkit(
        self, db: AsyncSession, user_id: str, request: ToolkitRequest
    ) -> ToolkitBundle:
        user_prompt = (
            "BUSINESS CONTEXT:\n"
            f'- Business Name: "{request.business_name}"\n'
            f'- Business Type: "{request.business_type}"\n'
            f'- Target Customer: "{request.target_customer}"\n'
            f'- Brand Vibe: "{request.brand_vibe}"\n'
            f'- Style Inspiration: "{request.style_inspiration or "Open to creative suggestions"}"\n'
            f'- Color Preferences: "{request.color_preferences or "Suggest colors that match the brand vibe"}"\n\n'
            "Respond with the brand package as a JSON object."
        )
        parsed, _ = await self._complete_json(
            "launch-toolkit",
            TOOLKIT_SYSTEM_PROMPT,
            user_prompt,
            temperature=0.9,
            max_tokens=2000,
        )
        draft = self._validate_draft("launch-toolkit", ToolkitDraft, parsed)

        owner = uuid.UUID(user_id)
        history = self._history(
            owner,
            "launch-toolkit",
            f"Business: {request.business_name}, Type: {request.business_type}, "
            f"Customer: {request.target_customer}, Vibe: {request.brand_vibe}",
            parsed,
        )
        row = LaunchAsset(
            id=uuid.uuid4(),
            user_id=owner,
            business_name=request.business_name,
            industry=request.business_type,
            name_suggestions=[n.model_dump() for n in draft.name_alternatives],
            logo_concepts=[logo.model_dump() for logo in draft.logo_ideas],
            brand_colors=[c.model_dump() for c in draft.brand_colors],
            taglines=list(draft.taglines),
            brand_voice=draft.brand_voice.model_dump(),
        )
        await self._persist(db, history, [row])
        return toolkit_bundle_from_row(row)

    # -- Tasks --------------------------------------------------------------

    async def generate_tasks(
        self, db: AsyncSession, user_id: str, request: TasksRequest
    ) -> TaskList:
        extras = ""
        if request.available_hours:
            extras += f"- Available hours: {request.available_hours}\n"
        if request.focus_type:
            extras += f"- Focus: {request.focus_type}\n"
        user_prompt = (
            f'Business goal: "{request.business_goal}"\n'
            f"- Timeframe: {request.timeframe}\n"
            f"{extras}\n"
            "Return the task list as a JSON object."
        )
        parsed, _ = await self._complete_json(
            "tasks",
            TASKS_SYSTEM_PROMPT,
            user_prompt,
            temperature=0.7,
            max_tokens=2000,
        )
        drafts = self._validate_draft("tasks", TaskDrafts, parsed)

        owner = uuid.UUID(user_id)
        history = self._history(
            owner,
            "tasks",
            f"Goal: {request.business_goal}, Timeframe: {request.timeframe}",
            parsed,
        )
        rows = [
            UserTask(
                id=uuid.uuid4(),
                user_id=owner,
                title=draft.title,
                description=draft.description,
                priority=draft.priority,
                due_date=draft.due_date,
                sort_order=position,
                completed=False,
            )
            for position, draft in enumerate(drafts.tasks)
        ]
        await self._persist(db, history, rows)
        return task_list_from_rows(history.id, rows)

    # -- Dispatch -----------------------------------------------------------

    async def generate(
        self, db: AsyncSession, user_id: str, tool_name: str, request: BaseModel
    ):
        """Run the tool named *tool_name* with an already validated request."""
        handlers = {
            "idea-generator": self.generate_ideas,
            "business-plan": self.generate_plan,
            "launch-toolkit": self.generate_toolkit,
            "tasks": self.generate_tasks,
        }
        tool = get_tool(tool_name)
        return await handlers[tool.name](db, user_id, request)

    # -- Reload -------------------------------------------------------------

    async def load_generation(
        self, db: AsyncSession, user_id: str, generation_id: uuid.UUID
    ):
        """Rebuild a generated entity from the rows linked to *generation_id*.

        Returns ``None`` when the generation does not exist, is owned by
        another user, or all of its records have been deleted.
        """
        owner = uuid.UUID(user_id)
        history = (
            await db.execute(
                select(PromptHistory).where(
                    PromptHistory.id == generation_id,
                    PromptHistory.user_id == owner,
                )
            )
        ).scalar_one_or_none()
        if history is None:
            return None

        tool = get_tool(history.tool_name)

        if tool.name == "idea-generator":
            rows = list(
                (
                    await db.execute(
                        select(BusinessIdeaRow)
                        .where(
                            BusinessIdeaRow.prompt_history_id == generation_id,
                            BusinessIdeaRow.user_id == owner,
                        )
                        .order_by(BusinessIdeaRow.sort_order)
                    )
                )
                .scalars()
                .all()
            )
            return idea_set_from_rows(generation_id, rows) if rows else None

        if tool.name == "tasks":
            rows = list(
                (
                    await db.execute(
                        select(UserTask)
                        .where(
                            UserTask.prompt_history_id == generation_id,
                            UserTask.user_id == owner,
                        )
                        .order_by(UserTask.sort_order)
                    )
                )
                .scalars()
                .all()
            )
            return task_list_from_rows(generation_id, rows) if rows else None

        model = BusinessPlan if tool.name == "business-plan" else LaunchAsset
        row = (
            await db.execute(
                select(model).where(
                    model.prompt_history_id == generation_id,
                    model.user_id == owner,
                )
            )
        ).scalar_one_or_none()
        if row is None:
            return None
        if tool.name == "business-plan":
            return plan_sections_from_row(row)
        return toolkit_bundle_from_row(row)
