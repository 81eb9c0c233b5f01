"""Explainer - narrates what was built, changed or blocked."""

from uiforge.core import Settings, get_logger
from uiforge.models import CompletionModel, CompletionRequest
from .models import UIPlan
from .prompts import EXPLAINER_SYSTEM_PROMPT, PromptBuilder


logger = get_logger(__name__)

DEFAULT_EXPLANATION = "Action completed."
LIBRARY_NOTICE = (
    "I can only use the predefined component library, so inline styles, generated CSS, "
    "arbitrary classes and raw HTML are not applied."
)


def disclosure(blocked_items: list[str]) -> str:
    """Sentence naming every rejected item."""
    return f"The following requests were rejected: {', '.join(blocked_items)}. {LIBRARY_NOTICE}"


class Explainer:
    """Explains results in prose and discloses anything that was rejected."""

    def __init__(self, llm: CompletionModel, settings: Settings) -> None:
        self.llm = llm
        self.temperature = settings.explainer_temperature
        self.max_tokens = settings.explainer_max_tokens

    async def explain(
        self,
        user_message: str,
        plan: UIPlan | None,
        is_edit: bool,
        blocked_items: list[str],
    ) -> str:
        """
        Explain the outcome of a run.

        Args:
            user_message: Original user text
            plan: Plan that was executed (or the current plan for questions)
            is_edit: Whether an existing UI was modified
            blocked_items: Rejected requests that must be disclosed

        Returns:
            Explanation text, never empty
        """
        request = CompletionRequest(
            stage="explainer",
            system_instruction=EXPLAINER_SYSTEM_PROMPT,
            user_instruction=PromptBuilder.explainer(user_message, plan, blocked_items),
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
        )
        text = (await self.llm.ainvoke(request)).strip()

        if blocked_items:
            lowered = text.lower()
            missing = [item for item in blocked_items if item.lower() not in lowered]
            if missing:
                # model skipped some rejected items; append them verbatim
                text = f"{text}\n\n{disclosure(missing)}".strip()
        elif not text:
            text = DEFAULT_EXPLANATION

        logger.info("explained", chars=len(text), edit=is_edit, blocked=len(blocked_items))
        return text
