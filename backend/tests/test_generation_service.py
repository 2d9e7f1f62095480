"""
Unit Tests for GenerationService

Covers prompt dispatch, strict decoding of the model output and the
single-transaction persistence of records plus their prompt-history row.

Usage:
    pytest backend/tests/test_generation_service.py -v
"""

import json
import os
import sys
import uuid

import httpx
import openai
import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

# Add backend to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from buildaura.errors import GenerationFailed, MalformedResponse, PersistenceFailed
from buildaura.generation_service import GenerationService, _strip_code_fences
from buildaura.models.db.business_idea import BusinessIdea as BusinessIdeaRow
from buildaura.models.db.business_plan import BusinessPlan
from buildaura.models.db.launch_asset import LaunchAsset
from buildaura.models.db.prompt_history import PromptHistory
from buildaura.models.db.user_task import UserTask
from buildaura.models.generation import (
    IdeaContext,
    IdeaRequest,
    IdeaSet,
    PlanRequest,
    PlanSections,
    TaskList,
    TasksRequest,
    ToolkitBundle,
    ToolkitRequest,
)

from factories import (
    PLAN_SECTION_HEADINGS,
    FakeChatClient,
    generate_uuid,
    make_idea_fields,
    make_idea_payload,
    make_plan_fields,
    make_plan_payload,
    make_tasks_fields,
    make_tasks_payload,
    make_toolkit_fields,
    make_toolkit_payload,
)

_OPENAI_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


async def _count(session_factory, model) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar()


# ============================================================================
# CODE FENCE STRIPPING
# ============================================================================


class TestStripCodeFences:
    def test_plain_json_unchanged(self):
        assert _strip_code_fences('{"a": 1}') == '{"a": 1}'

    def test_fenced_json_unwrapped(self):
        raw = '```json\n{"a": 1}\n```'
        assert json.loads(_strip_code_fences(raw)) == {"a": 1}

    def test_whitespace_only_becomes_empty(self):
        assert _strip_code_fences("   \n ") == ""


# ============================================================================
# IDEAS
# ============================================================================


class TestGenerateIdeas:
    async def test_returns_idea_set_with_upstream_cardinality(self, session_factory):
        llm = FakeChatClient(make_idea_payload(count=5))
        service = GenerationService(client=llm, model="test-model")
        user_id = generate_uuid()

        async with session_factory() as db:
            entity = await service.generate_ideas(db, user_id, IdeaRequest(**make_idea_fields()))

        assert isinstance(entity, IdeaSet)
        assert len(entity.ideas) == 5
        assert all(idea.name and idea.description for idea in entity.ideas)
        assert [idea.name for idea in entity.ideas] == [f"Idea {n}" for n in range(1, 6)]

    async def test_persists_rows_and_history_in_one_generation(self, session_factory, service):
        user_id = generate_uuid()
        async with session_factory() as db:
            entity = await service.generate_ideas(db, user_id, IdeaRequest(**make_idea_fields()))

        async with session_factory() as db:
            history = await db.get(PromptHistory, entity.generation_id)
            rows = (
                await db.execute(
                    select(BusinessIdeaRow).order_by(BusinessIdeaRow.sort_order)
                )
            ).scalars().all()

        assert history is not None
        assert history.tool_name == "idea-generator"
        assert history.prompt_summary == (
            "Skills: cooking | Problems: meal planning | Industries: food tech"
        )
        assert json.loads(history.response_body) == make_idea_payload()
        assert len(rows) == 4
        assert {r.prompt_history_id for r in rows} == {entity.generation_id}
        assert all(str(r.user_id) == user_id for r in rows)
        assert rows[0].difficulty == "Medium"
        assert rows[0].time_to_market == "6-12 months"
        assert rows[0].interests_input == "meal planning | food tech"
        assert rows[0].details["why_match"] == "Uses the founder's skills (1)"

    async def test_prompt_uses_json_mode_and_inputs(self, session_factory, service, fake_llm):
        async with session_factory() as db:
            await service.generate_ideas(db, generate_uuid(), IdeaRequest(**make_idea_fields()))

        call = fake_llm.calls[0]
        assert call["model"] == "test-model"
        assert call["response_format"] == {"type": "json_object"}
        user_prompt = call["messages"][1]["content"]
        assert "cooking" in user_prompt
        assert "food tech" in user_prompt

    async def test_fenced_output_is_accepted(self, session_factory):
        fenced = "```json\n" + json.dumps(make_idea_payload(count=2)) + "\n```"
        service = GenerationService(client=FakeChatClient(fenced), model="m")
        async with session_factory() as db:
            entity = await service.generate_ideas(db, generate_uuid(), IdeaRequest(**make_idea_fields()))
        assert len(entity.ideas) == 2


# ============================================================================
# FAIL-CLOSED DECODING
# ============================================================================


class TestMalformedOutput:
    @pytest.mark.parametrize(
        "content",
        [
            "not json at all",
            "",
            None,
            json.dumps({"ideas": []}),
            json.dumps({"ideas": [{"name": "", "description": "x"}]}),
            json.dumps({"something_else": 1}),
        ],
    )
    async def test_raises_and_persists_nothing(self, session_factory, content):
        service = GenerationService(client=FakeChatClient(content), model="m")
        async with session_factory() as db:
            with pytest.raises(MalformedResponse):
                await service.generate_ideas(db, generate_uuid(), IdeaRequest(**make_idea_fields()))

        assert await _count(session_factory, BusinessIdeaRow) == 0
        assert await _count(session_factory, PromptHistory) == 0

    async def test_plan_with_non_string_sections_rejected(self, session_factory):
        service = GenerationService(client=FakeChatClient({"Executive Summary": {"x": 1}}), model="m")
        async with session_factory() as db:
            with pytest.raises(MalformedResponse):
                await service.generate_plan(db, generate_uuid(), PlanRequest(**make_plan_fields()))

    async def test_plan_with_only_blank_sections_rejected(self, session_factory):
        service = GenerationService(client=FakeChatClient({"Executive Summary": "  "}), model="m")
        async with session_factory() as db:
            with pytest.raises(MalformedResponse):
                await service.generate_plan(db, generate_uuid(), PlanRequest(**make_plan_fields()))

    async def test_toolkit_with_bad_hex_rejected(self, session_factory):
        payload = make_toolkit_payload()
        payload["brand_colors"][0]["hex"] = "green"
        service = GenerationService(client=FakeChatClient(payload), model="m")
        async with session_factory() as db:
            with pytest.raises(MalformedResponse):
                await service.generate_toolkit(
                    db, generate_uuid(), ToolkitRequest(**make_toolkit_fields())
                )
        assert await _count(session_factory, LaunchAsset) == 0


# ============================================================================
# UPSTREAM FAILURES
# ============================================================================


class TestUpstreamFailures:
    async def test_status_error_maps_to_generation_failed(self, session_factory):
        error = openai.InternalServerError(
            "upstream exploded",
            response=httpx.Response(500, request=_OPENAI_REQUEST),
            body=None,
        )
        service = GenerationService(client=FakeChatClient(error), model="m")
        async with session_factory() as db:
            with pytest.raises(GenerationFailed) as exc_info:
                await service.generate_ideas(db, generate_uuid(), IdeaRequest(**make_idea_fields()))
        assert exc_info.value.status == 500
        assert await _count(session_factory, PromptHistory) == 0

    async def test_connection_error_maps_to_generation_failed(self, session_factory):
        error = openai.APIConnectionError(request=_OPENAI_REQUEST)
        service = GenerationService(client=FakeChatClient(error), model="m")
        async with session_factory() as db:
            with pytest.raises(GenerationFailed) as exc_info:
                await service.generate_ideas(db, generate_uuid(), IdeaRequest(**make_idea_fields()))
        assert exc_info.value.status is None

    async def test_no_retry_after_failure(self, session_factory):
        error = openai.APIConnectionError(request=_OPENAI_REQUEST)
        llm = FakeChatClient(error)
        service = GenerationService(client=llm, model="m")
        async with session_factory() as db:
            with pytest.raises(GenerationFailed):
                await service.generate_ideas(db, generate_uuid(), IdeaRequest(**make_idea_fields()))
        assert len(llm.calls) == 1


# ============================================================================
# PERSISTENCE FAILURES
# ============================================================================


class TestPersistenceFailure:
    async def test_flush_error_rolls_back_everything(self, session_factory, service, monkeypatch):
        async def failing_flush(self, objects=None):
            raise OperationalError("INSERT", {}, Exception("disk full"))

        monkeypatch.setattr(AsyncSession, "flush", failing_flush)
        async with session_factory() as db:
            with pytest.raises(PersistenceFailed):
                await service.generate_ideas(db, generate_uuid(), IdeaRequest(**make_idea_fields()))

        assert await _count(session_factory, BusinessIdeaRow) == 0
        assert await _count(session_factory, PromptHistory) == 0


# ============================================================================
# PLAN / TOOLKIT / TASKS
# ============================================================================


class TestOtherTools:
    async def test_plan_uses_idea_context_name(self, session_factory):
        service = GenerationService(client=FakeChatClient(make_plan_payload()), model="m")
        request = PlanRequest(
            **make_plan_fields(),
            idea_context=IdeaContext(name="MealMate", description="Meal kits"),
        )
        async with session_factory() as db:
            entity = await service.generate_plan(db, generate_uuid(), request)

        assert isinstance(entity, PlanSections)
        assert entity.business_name == "MealMate"
        assert list(entity.sections) == PLAN_SECTION_HEADINGS
        assert "Base Idea: MealMate - Meal kits" in service.async_client.calls[0]["messages"][1]["content"]

    async def test_plan_without_context_uses_default_name(self, session_factory):
        service = GenerationService(client=FakeChatClient(make_plan_payload()), model="m")
        async with session_factory() as db:
            entity = await service.generate_plan(db, generate_uuid(), PlanRequest(**make_plan_fields()))
        assert entity.business_name == "New Business"

        async with session_factory() as db:
            row = await db.get(BusinessPlan, entity.id)
        assert row.problem == "Problem Statement text."
        assert row.plan_content == make_plan_payload()

    async def test_toolkit_round_trips_structured_fields(self, session_factory):
        service = GenerationService(client=FakeChatClient(make_toolkit_payload()), model="m")
        async with session_factory() as db:
            entity = await service.generate_toolkit(
                db, generate_uuid(), ToolkitRequest(**make_toolkit_fields())
            )

        assert isinstance(entity, ToolkitBundle)
        assert entity.business_name == "GreenSpace"
        assert len(entity.name_alternatives) == 5
        assert len(entity.logo_ideas) == 3
        assert entity.brand_colors[0].hex == "#1B4D3E"
        assert entity.brand_voice.tone == "Warm"

    async def test_tasks_normalise_priority_and_start_open(self, session_factory):
        service = GenerationService(client=FakeChatClient(make_tasks_payload()), model="m")
        async with session_factory() as db:
            entity = await service.generate_tasks(
                db, generate_uuid(), TasksRequest(**make_tasks_fields())
            )

        assert isinstance(entity, TaskList)
        assert len(entity.tasks) == 5
        assert {t.priority for t in entity.tasks} <= {"high", "medium", "low"}
        assert not any(t.completed for t in entity.tasks)
        assert await _count(session_factory, UserTask) == 5

    async def test_dispatch_by_tool_name(self, session_factory, service):
        async with session_factory() as db:
            entity = await service.generate(
                db, generate_uuid(), "idea-generator", IdeaRequest(**make_idea_fields())
            )
        assert entity.kind == "ideas"

    async def test_dispatch_unknown_tool(self, session_factory, service):
        async with session_factory() as db:
            with pytest.raises(ValueError):
                await service.generate(db, generate_uuid(), "nope", IdeaRequest(**make_idea_fields()))


# ============================================================================
# RELOAD
# ============================================================================


class TestLoadGeneration:
    async def test_reload_matches_generated_entity(self, session_factory, service):
        user_id = generate_uuid()
        async with session_factory() as db:
            created = await service.generate_ideas(db, user_id, IdeaRequest(**make_idea_fields()))
        async with session_factory() as db:
            loaded = await service.load_generation(db, user_id, created.generation_id)

        assert loaded.kind == "ideas"
        assert [i.id for i in loaded.ideas] == [i.id for i in created.ideas]
        assert [i.name for i in loaded.ideas] == [i.name for i in created.ideas]

    async def test_reload_is_scoped_to_owner(self, session_factory, service):
        async with session_factory() as db:
            created = await service.generate_ideas(db, generate_uuid(), IdeaRequest(**make_idea_fields()))
        async with session_factory() as db:
            assert await service.load_generation(db, generate_uuid(), created.generation_id) is None

    async def test_reload_unknown_id(self, session_factory, service):
        async with session_factory() as db:
            assert await service.load_generation(db, generate_uuid(), uuid.uuid4()) is None
