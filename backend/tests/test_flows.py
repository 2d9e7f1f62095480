"""
Unit Tests for the Wizard Flow Definitions

Usage:
    pytest backend/tests/test_flows.py -v
"""

import os
import sys

import pytest

# Add backend to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from buildaura.models.generation import TOOLS
from buildaura.wizard.flows import FLOWS, TASKS_FLOW, TOOLKIT_FLOW, get_flow
from buildaura.wizard.steps import FlowDefinition, StepDefinition


class TestFlowRegistry:
    def test_every_flow_targets_a_registered_tool(self):
        assert {flow.tool_name for flow in FLOWS.values()} == set(TOOLS)

    @pytest.mark.parametrize("name", sorted(FLOWS))
    def test_flow_fields_are_accepted_by_the_request_model(self, name):
        flow = FLOWS[name]
        request_fields = set(TOOLS[flow.tool_name].request_model.model_fields)
        assert set(flow.field_names) <= request_fields

    def test_get_flow(self):
        assert get_flow("tasks") is TASKS_FLOW
        with pytest.raises(ValueError):
            get_flow("poems")


class TestFlowDefinition:
    def test_initial_fields_apply_defaults(self):
        fields = TASKS_FLOW.initial_fields()

        assert fields["focus_type"] == "execution"
        assert fields["business_goal"] == ""
        assert set(fields) == set(TASKS_FLOW.field_names)

    def test_missing_lists_blank_required_fields(self):
        fields = TOOLKIT_FLOW.initial_fields()
        fields.update(business_name="GreenSpace", business_type="  ")

        assert TOOLKIT_FLOW.missing(fields) == ["business_type", "target_customer", "brand_vibe"]

    def test_optional_only_step_is_never_missing(self):
        style_step = TOOLKIT_FLOW.steps[-1]
        assert style_step.missing({}) == []

    def test_too_long_lists_overlong_fields(self):
        step = StepDefinition("s", "S", required=("a",), optional=("b",), max_length=5)

        assert step.too_long({"a": "12345", "b": ""}) == []
        assert step.too_long({"a": "123456", "b": "1234567", "c": "x" * 99}) == ["a", "b"]

    def test_flow_too_long_covers_every_step(self):
        fields = TOOLKIT_FLOW.initial_fields()
        fields["color_preferences"] = "blue " * 500

        assert TOOLKIT_FLOW.too_long(fields) == ["color_preferences"]

    def test_duplicate_field_rejected(self):
        with pytest.raises(ValueError):
            FlowDefinition(
                name="broken",
                tool_name="tasks",
                title="Broken",
                steps=(
                    StepDefinition("a", "A", required=("business_goal",)),
                    StepDefinition("b", "B", optional=("business_goal",)),
                ),
            )

    def test_empty_flow_rejected(self):
        with pytest.raises(ValueError):
            FlowDefinition(name="empty", tool_name="tasks", title="Empty", steps=())
