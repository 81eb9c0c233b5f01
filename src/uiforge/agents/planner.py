"""Planner - turns a sanitized request into a structured UIPlan."""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from uiforge.core import (
    JSONParseError,
    PlannerError,
    Settings,
    extract_json_array,
    extract_tags,
    get_logger,
    has_any_tag,
)
from uiforge.models import CompletionModel, CompletionRequest
from uiforge.monitoring import metrics_collector
from .models import PlanChange, PlanComponent, UIPlan, UserIntent
from .prompts import PLANNER_SYSTEM_PROMPT, PromptBuilder


logger = get_logger(__name__)

PLAN_TAGS = ("action", "description", "components", "changes")
DEFAULT_DESCRIPTION = "No description provided"


class Planner:
    """Produces a component tree (create) or an ordered change list (modify)."""

    def __init__(self, llm: CompletionModel, settings: Settings) -> None:
        self.llm = llm
        self.temperature = settings.planner_temperature
        self.max_tokens = settings.planner_max_tokens

    async def plan(
        self,
        sanitized_request: str,
        current_code: str | None,
        current_plan: UIPlan | None,
        intent: UserIntent,
    ) -> UIPlan:
        """
        Plan the next UI.

        Args:
            sanitized_request: Request with forbidden content removed
            current_code: Existing code, or None when building fresh
            current_plan: Plan behind current_code, if known
            intent: Classified intent

        Returns:
            UIPlan, possibly without components/changes if their JSON was unusable

        Raises:
            PlannerError: If the response has no recognisable structure
            ModelCallError: If the provider call fails
        """
        request = CompletionRequest(
            stage="planner",
            system_instruction=PLANNER_SYSTEM_PROMPT,
            user_instruction=PromptBuilder.planner(sanitized_request, current_code, current_plan, intent),
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
        )
        text = (await self.llm.ainvoke(request)).strip()
        logger.debug("planner_raw", preview=text[:500])

        plan = self.parse(
            text,
            has_existing_code=current_code is not None,
            force_create=intent.discard_existing,
        )
        logger.info(
            "plan_ready",
            action=plan.action,
            components=len(plan.components or []),
            changes=len(plan.changes or []),
        )
        return plan

    @staticmethod
    def parse(text: str, has_existing_code: bool, force_create: bool = False) -> UIPlan:
        """
        Parse tagged planner output; field-level failures are tolerated.

        Whichever of ``<components>``/``<changes>`` is present is read. A
        create plan without a usable tree falls back to the components its
        add/update changes introduce, and force_create turns a modify answer
        into such a plan.
        """
        if not has_any_tag(text, PLAN_TAGS):
            logger.error("planner_unstructured", preview=text[:500])
            raise PlannerError("Planner output contained none of the expected sections")

        fields = extract_tags(text, *PLAN_TAGS)

        action = fields["action"].lower()
        if action not in ("create", "modify"):
            action = "modify" if has_existing_code else "create"
        if force_create and action != "create":
            logger.info("plan_forced_create", planned_action=action)
            action = "create"

        components = _parse_field(fields["components"], "components", PlanComponent) if fields["components"] else None
        changes = _parse_field(fields["changes"], "changes", PlanChange) if fields["changes"] else None

        if action == "create" and not components and changes:
            components = [c for c in (change.as_component() for change in changes) if c is not None] or None
            logger.info("plan_components_from_changes", components=len(components or []))

        return UIPlan(
            action=action,
            description=fields["description"] or DEFAULT_DESCRIPTION,
            components=components,
            changes=changes,
        )


def _parse_field(raw: str, name: str, model: Any) -> list[Any] | None:
    """Decode one JSON array section; None (plus a warning) when unusable."""
    try:
        items = extract_json_array(raw)
        return [model.model_validate(item) for item in items]
    except (JSONParseError, PydanticValidationError) as e:
        logger.warning("plan_field_unparsable", field=name, error=str(e))
        metrics_collector.record_parse_warning("planner", name)
        return None
