"""Generation models shared by the function endpoints and the wizard client.

Three layers live here:

- Request bodies accepted by each generation function endpoint.
- Draft models used to decode the raw LLM JSON.  They are strict on purpose:
  anything the model returns that does not fit raises a ``ValidationError``
  which the service reports as ``MalformedResponse``.
- The ``GeneratedEntity`` tagged union (``IdeaSet``, ``PlanSections``,
  ``ToolkitBundle``, ``TaskList``) returned to clients and rebuilt from the
  store.

The ``TOOLS`` registry ties a tool name to its function endpoint, request
model and entity model so that the four flows are configured as data.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Annotated, Dict, List, Literal, Optional, Type, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

_Text = Annotated[str, Field(min_length=1, max_length=2000)]
_OptionalText = Annotated[str, Field(max_length=2000)]


class _RequestBase(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class IdeaRequest(_RequestBase):
    """Inputs for the idea generator."""

    skills: _Text
    problems: _Text
    industries: _Text


class IdeaContext(BaseModel):
    """A previously generated idea handed to the plan builder."""

    name: str = Field(..., max_length=500)
    description: str = Field("", max_length=2000)


class PlanRequest(_RequestBase):
    """Inputs for the business plan builder."""

    target_customer: _Text
    unique_advantage: _Text
    solution_details: _Text
    revenue_channels: _Text
    idea_context: Optional[IdeaContext] = None


class ToolkitRequest(_RequestBase):
    """Inputs for the launch toolkit builder."""

    business_name: _Text
    business_type: _Text
    target_customer: _Text
    brand_vibe: _Text
    style_inspiration: _OptionalText = ""
    color_preferences: _OptionalText = ""


class TasksRequest(_RequestBase):
    """Inputs for the weekly task generator."""

    business_goal: _Text
    timeframe: _Text
    available_hours: _OptionalText = ""
    focus_type: _OptionalText = "execution"


# ---------------------------------------------------------------------------
# LLM draft decoders
# ---------------------------------------------------------------------------


class _Draft(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class IdeaDraft(_Draft):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    problem: str = ""
    solution: str = ""
    target_audience: str = ""
    monetization: str = ""
    why_match: str = ""


class IdeaDrafts(_Draft):
    ideas: List[IdeaDraft] = Field(..., min_length=1)


class NameAlternative(BaseModel):
    name: str = Field(..., min_length=1)
    domain: str = ""
    available: Optional[bool] = None
    rationale: str = ""


class LogoIdea(BaseModel):
    concept: str = Field(..., min_length=1)
    style: str = ""
    elements: str = ""


class BrandColor(BaseModel):
    name: str = Field(..., min_length=1)
    hex: str = Field(..., pattern=r"^#[0-9A-Fa-f]{3,8}$")
    usage: str = ""


class BrandVoice(BaseModel):
    tone: str = ""
    style: str = ""


class ToolkitDraft(_Draft):
    name_alternatives: List[NameAlternative] = Field(..., min_length=1)
    logo_ideas: List[LogoIdea] = Field(default_factory=list)
    brand_colors: List[BrandColor] = Field(default_factory=list)
    taglines: List[str] = Field(default_factory=list)
    brand_voice: BrandVoice = Field(default_factory=BrandVoice)


Priority = Literal["high", "medium", "low"]


class TaskDraft(_Draft):
    title: str = Field(..., min_length=1)
    description: str = ""
    priority: Priority = "medium"
    due_date: Optional[date] = None

    @field_validator("priority", mode="before")
    @classmethod
    def _lower_priority(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class TaskDrafts(_Draft):
    tasks: List[TaskDraft] = Field(..., min_length=1)


PLAN_DRAFT_ADAPTER = TypeAdapter(Dict[str, str])


# ---------------------------------------------------------------------------
# Generated entities (tagged variant)
# ---------------------------------------------------------------------------


class BusinessIdea(BaseModel):
    id: UUID
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    problem: str = ""
    solution: str = ""
    target_audience: str = ""
    monetization: str = ""
    why_match: str = ""
    created_at: Optional[datetime] = None


class IdeaSet(BaseModel):
    kind: Literal["ideas"] = "ideas"
    generation_id: UUID
    tool_name: str = "idea-generator"
    ideas: List[BusinessIdea] = Field(..., min_length=1)


class PlanSections(BaseModel):
    kind: Literal["plan"] = "plan"
    id: UUID
    generation_id: UUID
    business_name: str
    sections: Dict[str, str] = Field(..., min_length=1)
    created_at: Optional[datetime] = None


class ToolkitBundle(BaseModel):
    kind: Literal["toolkit"] = "toolkit"
    id: UUID
    generation_id: UUID
    business_name: str
    name_alternatives: List[NameAlternative] = Field(..., min_length=1)
    logo_ideas: List[LogoIdea] = Field(default_factory=list)
    brand_colors: List[BrandColor] = Field(default_factory=list)
    taglines: List[str] = Field(default_factory=list)
    brand_voice: BrandVoice = Field(default_factory=BrandVoice)
    created_at: Optional[datetime] = None


class TaskItem(BaseModel):
    id: UUID
    title: str = Field(..., min_length=1)
    description: str = ""
    priority: Priority = "medium"
    due_date: Optional[date] = None
    completed: bool = False


class TaskList(BaseModel):
    kind: Literal["tasks"] = "tasks"
    generation_id: UUID
    tasks: List[TaskItem] = Field(..., min_length=1)


GeneratedEntity = Annotated[
    Union[IdeaSet, PlanSections, ToolkitBundle, TaskList],
    Field(discriminator="kind"),
]

ENTITY_ADAPTER: TypeAdapter = TypeAdapter(GeneratedEntity)


# ---------------------------------------------------------------------------
# Tool registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ToolSpec:
    """Static description of one generation tool."""

    name: str
    function_name: str
    request_model: Type[BaseModel]
    entity_model: Type[BaseModel]
    collection: str


TOOLS: Dict[str, ToolSpec] = {
    "idea-generator": ToolSpec(
        name="idea-generator",
        function_name="generate-business-ideas",
        request_model=IdeaRequest,
        entity_model=IdeaSet,
        collection="ideas",
    ),
    "business-plan": ToolSpec(
        name="business-plan",
        function_name="generate-business-plan",
        request_model=PlanRequest,
        entity_model=PlanSections,
        collection="plans",
    ),
    "launch-toolkit": ToolSpec(
        name="launch-toolkit",
        function_name="generate-launch-toolkit",
        request_model=ToolkitRequest,
        entity_model=ToolkitBundle,
        collection="launch-assets",
    ),
    "tasks": ToolSpec(
        name="tasks",
        function_name="generate-tasks",
        request_model=TasksRequest,
        entity_model=TaskList,
        collection="tasks",
    ),
}

TOOLS_BY_FUNCTION: Dict[str, ToolSpec] = {t.function_name: t for t in TOOLS.values()}


def get_tool(tool_name: str) -> ToolSpec:
    """Look up a tool by name, raising ``ValueError`` for unknown tools."""
    try:
        return TOOLS[tool_name]
    except KeyError:
        raise ValueError(
            f"Unknown generation tool: {tool_name}. Available: {sorted(TOOLS)}"
        ) from None
