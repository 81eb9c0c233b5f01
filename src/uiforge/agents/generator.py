"""Code Generator - renders a plan into vocabulary-only source."""

from uiforge.core import GenerationError, Settings, get_logger, strip_code_fences
from uiforge.models import CompletionModel, CompletionRequest
from .models import UIPlan
from .prompts import GENERATOR_SYSTEM_PROMPT, PromptBuilder


logger = get_logger(__name__)


class CodeGenerator:
    """Produces code only; judging it is the validator's job."""

    def __init__(self, llm: CompletionModel, settings: Settings) -> None:
        self.llm = llm
        self.temperature = settings.generator_temperature
        self.max_tokens = settings.generator_max_tokens

    async def generate(self, plan: UIPlan, current_code: str | None) -> str:
        """Generate code for a plan, raising GenerationError on empty output."""
        request = CompletionRequest(
            stage="generator",
            system_instruction=GENERATOR_SYSTEM_PROMPT,
            user_instruction=PromptBuilder.generator(plan, current_code),
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
        )
        text = await self.llm.ainvoke(request)

        code = strip_code_fences(text)
        if not code:
            raise GenerationError("Generator produced empty output")

        logger.info("code_generated", chars=len(code), edit=current_code is not None)
        return code
