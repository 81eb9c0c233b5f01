"""Tests for the pipeline state machine."""

import pytest

from uiforge.agents import PLACEHOLDER_CODE, StageEvent
from uiforge.agents.pipeline import BLOCKED_PLAN, EXPLAIN_ONLY_PLAN, GENERATION_FAILURE_ITEM
from uiforge.core import ModelCallError, PlannerError


def stages(events):
    return [(e.stage, e.status) for e in events]


FULL_RUN = [
    ("intent", "running"),
    ("intent", "done"),
    ("planning", "running"),
    ("planning", "done"),
    ("generating", "running"),
    ("generating", "done"),
    ("explaining", "running"),
    ("explaining", "done"),
]


# ============================================================================
# Proceed branch
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
async def test_fresh_create(scripted_model, build_pipeline, intent_answer, plan_answer, valid_code):
    """Test a first request on an empty session."""
    model = scripted_model(
        intent=[intent_answer()],
        planner=[plan_answer()],
        generator=[valid_code],
        explainer=["I built a card with a button."],
    )
    events = []

    result = await build_pipeline(model).run("build a page", None, on_stage=events.append)

    assert result.code == valid_code
    assert result.plan.action == "create"
    assert result.explanation == "I built a card with a button."
    assert stages(events) == FULL_RUN
    assert all(isinstance(e, StageEvent) for e in events)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_stage_payloads(scripted_model, build_pipeline, intent_answer, plan_answer, valid_code):
    model = scripted_model(
        intent=[intent_answer()],
        planner=[plan_answer()],
        generator=[valid_code],
        explainer=["Done."],
    )
    events = []

    result = await build_pipeline(model).run("build a page", None, on_stage=events.append)

    by_stage = {(e.stage, e.status): e for e in events}
    assert by_stage[("planning", "done")].plan == result.plan
    assert by_stage[("generating", "done")].code == valid_code
    assert by_stage[("explaining", "done")].explanation == "Done."
    assert by_stage[("intent", "running")].to_payload() == {"stage": "intent", "status": "running"}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_retry_then_success(scripted_model, build_pipeline, intent_answer, plan_answer, valid_code, invalid_code):
    """Test invalid output is regenerated until it validates."""
    model = scripted_model(
        intent=[intent_answer()],
        planner=[plan_answer()],
        generator=[invalid_code, invalid_code, valid_code],
        explainer=["Built."],
    )

    result = await build_pipeline(model).run("build a page", None)

    assert result.code == valid_code
    assert len(model.calls_for("generator")) == 3
    assert "BLOCKED ITEMS: None" in model.calls_for("explainer")[0].user_instruction


@pytest.mark.unit
@pytest.mark.asyncio
async def test_generation_capped_at_three(scripted_model, build_pipeline, intent_answer, plan_answer, invalid_code):
    """Test the generator is called at most three times and the placeholder is used."""
    model = scripted_model(
        intent=[intent_answer()],
        planner=[plan_answer()],
        generator=[invalid_code] * 5,
        explainer=["Sorry."],
    )

    result = await build_pipeline(model).run("build a page", None)

    assert len(model.calls_for("generator")) == 3
    assert result.code == PLACEHOLDER_CODE
    assert GENERATION_FAILURE_ITEM in model.calls_for("explainer")[0].user_instruction
    assert GENERATION_FAILURE_ITEM in result.explanation


@pytest.mark.unit
@pytest.mark.asyncio
async def test_configured_attempts(scripted_model, build_pipeline, intent_answer, plan_answer, invalid_code):
    model = scripted_model(
        intent=[intent_answer()],
        planner=[plan_answer()],
        generator=[invalid_code] * 3,
        explainer=["Sorry."],
    )

    await build_pipeline(model, max_attempts=1).run("build a page", None)

    assert len(model.calls_for("generator")) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_exhausted_edit_keeps_prior_code(
    scripted_model, build_pipeline, intent_answer, plan_answer, invalid_code, prior_code, prior_plan
):
    """Test a failed edit returns the previous code unchanged."""
    model = scripted_model(
        intent=[intent_answer(intent="modify", action="add", cleaned="add a table")],
        planner=[plan_answer(action="modify")],
        generator=[invalid_code] * 3,
        explainer=["Could not apply."],
    )

    result = await build_pipeline(model).run("add a table", prior_code, prior_plan)

    assert result.code == prior_code
    assert GENERATION_FAILURE_ITEM in result.explanation


@pytest.mark.unit
@pytest.mark.asyncio
async def test_empty_generation_counts_as_attempt(
    scripted_model, build_pipeline, intent_answer, plan_answer, valid_code
):
    model = scripted_model(
        intent=[intent_answer()],
        planner=[plan_answer()],
        generator=["", "```\n```", valid_code],
        explainer=["Built."],
    )

    result = await build_pipeline(model).run("build a page", None)

    assert result.code == valid_code
    assert len(model.calls_for("generator")) == 3


@pytest.mark.unit
@pytest.mark.asyncio
async def test_edit_uses_current_context(
    scripted_model, build_pipeline, intent_answer, plan_answer, valid_code, prior_code, prior_plan
):
    model = scripted_model(
        intent=[intent_answer(intent="modify", action="add", cleaned="add a button")],
        planner=[plan_answer(action="modify")],
        generator=[valid_code],
        explainer=["Added a button."],
    )

    result = await build_pipeline(model).run("add a button", prior_code, prior_plan)

    assert result.plan.action == "modify"
    assert prior_code in model.calls_for("planner")[0].user_instruction
    assert prior_code in model.calls_for("generator")[0].user_instruction
    assert "EXISTING UI DETECTED." in model.calls_for("intent")[0].user_instruction


@pytest.mark.unit
@pytest.mark.asyncio
async def test_discard_drops_context(
    scripted_model, build_pipeline, intent_answer, plan_answer, valid_code, prior_code, prior_plan
):
    """Test a start-over request plans and generates without the old code."""
    model = scripted_model(
        intent=[intent_answer(intent="modify", action="update", cleaned="a login form")],
        planner=[plan_answer(action="modify")],
        generator=[valid_code],
        explainer=["Fresh login form."],
    )

    result = await build_pipeline(model).run("start over with a login form", prior_code, prior_plan)

    assert result.plan.action == "create"
    assert [c.type for c in result.plan.components] == ["Button"]
    assert result.code == valid_code
    assert prior_code not in model.calls_for("planner")[0].user_instruction
    generator_prompt = model.calls_for("generator")[0].user_instruction
    assert "Generate FRESH code" in generator_prompt
    assert '"type": "Button"' in generator_prompt


@pytest.mark.unit
@pytest.mark.asyncio
async def test_out_of_vocabulary_plan_is_disclosed(
    scripted_model, build_pipeline, intent_answer, plan_answer, valid_code
):
    model = scripted_model(
        intent=[intent_answer()],
        planner=[plan_answer(components='[{"type": "Card", "children": [{"type": "Slider"}]}]')],
        generator=[valid_code],
        explainer=["Built a card."],
    )

    result = await build_pipeline(model).run("build a card with a slider", None)

    assert 'Invalid component: "Slider" is not in the whitelist' in result.explanation


# ============================================================================
# Blocked and explain branches
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
async def test_completely_blocked_fresh(scripted_model, build_pipeline, intent_answer):
    """Test a fully forbidden request skips planning and generation."""
    model = scripted_model(
        intent=[intent_answer(cleaned="NONE", blocked="raw HTML div", completely=True)],
        explainer=["I can't use raw HTML div elements."],
    )
    events = []

    result = await build_pipeline(model).run("use a raw div", None, on_stage=events.append)

    assert result.code == ""
    assert result.plan == BLOCKED_PLAN
    assert model.calls_for("planner") == []
    assert model.calls_for("generator") == []
    assert stages(events) == [
        ("intent", "running"),
        ("intent", "done"),
        ("explaining", "running"),
        ("explaining", "done"),
    ]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_completely_blocked_keeps_existing(
    scripted_model, build_pipeline, intent_answer, prior_code, prior_plan
):
    model = scripted_model(
        intent=[intent_answer(intent="modify", cleaned="NONE", blocked="inline styles", completely=True)],
        explainer=["Inline styles are not available."],
    )

    result = await build_pipeline(model).run("add inline styles", prior_code, prior_plan)

    assert result.code == prior_code
    assert result.plan == prior_plan


@pytest.mark.unit
@pytest.mark.asyncio
async def test_explain_keeps_code(scripted_model, build_pipeline, intent_answer, prior_code, prior_plan):
    """Test a question about the UI leaves code untouched."""
    model = scripted_model(
        intent=[intent_answer(intent="explain", action="none", cleaned="what does this do")],
        explainer=["It collects an email address."],
    )

    result = await build_pipeline(model).run("what does this do?", prior_code, prior_plan)

    assert result.code == prior_code
    assert result.plan == prior_plan
    assert result.explanation == "It collects an email address."
    assert "Email capture card" in model.calls_for("explainer")[0].user_instruction


@pytest.mark.unit
@pytest.mark.asyncio
async def test_explain_without_ui(scripted_model, build_pipeline, intent_answer):
    model = scripted_model(
        intent=[intent_answer(intent="explain", action="none", cleaned="what can you build")],
        explainer=["I can build cards, tables and charts."],
    )

    result = await build_pipeline(model).run("what can you build?", None)

    assert result.code == ""
    assert result.plan == EXPLAIN_ONLY_PLAN


# ============================================================================
# Failures
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
async def test_model_error_propagates(scripted_model, build_pipeline, intent_answer, plan_answer):
    model = scripted_model(
        intent=[intent_answer()],
        planner=[plan_answer()],
        generator=[ModelCallError("quota exceeded", stage="generator")],
    )

    with pytest.raises(ModelCallError):
        await build_pipeline(model).run("build a page", None)
    assert len(model.calls_for("generator")) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unstructured_plan_fails(scripted_model, build_pipeline, intent_answer):
    model = scripted_model(intent=[intent_answer()], planner=["Let me think about it..."])

    with pytest.raises(PlannerError):
        await build_pipeline(model).run("build a page", None)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_failing_listener_does_not_break_run(
    scripted_model, build_pipeline, intent_answer, plan_answer, valid_code
):
    """Test a listener that raises is dropped and the run completes."""
    model = scripted_model(
        intent=[intent_answer()],
        planner=[plan_answer()],
        generator=[valid_code],
        explainer=["Built."],
    )
    seen = []

    def listener(event):
        seen.append(event)
        raise RuntimeError("client went away")

    result = await build_pipeline(model).run("build a page", None, on_stage=listener)

    assert result.code == valid_code
    assert len(seen) == 1
