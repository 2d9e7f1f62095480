"""
BuildAura API Models

Pydantic models for data validation and serialization.
"""

from .generation import (
    ENTITY_ADAPTER,
    TOOLS,
    BusinessIdea,
    GeneratedEntity,
    IdeaSet,
    PlanSections,
    TaskItem,
    TaskList,
    ToolkitBundle,
    ToolSpec,
    get_tool,
)
