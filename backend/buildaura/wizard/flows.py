"""The four guided flows, one per generation tool."""

from typing import Dict

from buildaura.wizard.steps import FlowDefinition, StepDefinition

IDEA_FLOW = FlowDefinition(
    name="ideas",
    tool_name="idea-generator",
    title="Idea Generator",
    steps=(
        StepDefinition("skills", "What are your skills and experience?", required=("skills",)),
        StepDefinition("problems", "What problems do you want to solve?", required=("problems",)),
        StepDefinition("industries", "Which industries interest you?", required=("industries",)),
    ),
    success_title="Ideas Generated!",
    success_description="Your personalized business ideas are ready.",
)

PLAN_FLOW = FlowDefinition(
    name="plan",
    tool_name="business-plan",
    title="Business Plan Builder",
    steps=(
        StepDefinition(
            "target_customer", "Who is your target customer?", required=("target_customer",)
        ),
        StepDefinition(
            "unique_advantage", "What is your unique advantage?", required=("unique_advantage",)
        ),
        StepDefinition(
            "solution_details", "How does your solution work?", required=("solution_details",)
        ),
        StepDefinition(
            "revenue_channels", "How will you make money?", required=("revenue_channels",)
        ),
    ),
    success_title="Business Plan Generated!",
    success_description="Your business plan has been created.",
)

TOOLKIT_FLOW = FlowDefinition(
    name="toolkit",
    tool_name="launch-toolkit",
    title="Launch Toolkit",
    steps=(
        StepDefinition(
            "business",
            "Tell us about your business",
            required=("business_name", "business_type"),
        ),
        StepDefinition(
            "audience",
            "Who are you building for?",
            required=("target_customer", "brand_vibe"),
        ),
        StepDefinition(
            "style",
            "Any style preferences?",
            optional=("style_inspiration", "color_preferences"),
        ),
    ),
    success_title="Launch Toolkit Generated!",
    success_description="Your brand package is ready.",
)

TASKS_FLOW = FlowDefinition(
    name="tasks",
    tool_name="tasks",
    title="Weekly Tasks",
    steps=(
        StepDefinition(
            "goal",
            "What do you want to accomplish this week?",
            required=("business_goal",),
        ),
        StepDefinition(
            "time",
            "How much time do you have?",
            required=("timeframe",),
            optional=("available_hours",),
        ),
        StepDefinition(
            "focus",
            "What should this week focus on?",
            optional=("focus_type",),
            defaults={"focus_type": "execution"},
        ),
    ),
    success_title="Weekly Tasks Generated!",
    success_description="Your action plan has been created.",
)

FLOWS: Dict[str, FlowDefinition] = {
    flow.name: flow for flow in (IDEA_FLOW, PLAN_FLOW, TOOLKIT_FLOW, TASKS_FLOW)
}


def get_flow(name: str) -> FlowDefinition:
    try:
        return FLOWS[name]
    except KeyError:
        raise ValueError(f"Unknown flow: {name}. Available: {sorted(FLOWS)}") from None
