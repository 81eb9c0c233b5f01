"""Model client - Gemini API behind a stateless completion interface."""

import asyncio
import time
from typing import Protocol

import google.generativeai as genai

from uiforge.core import get_logger, ModelCallError
from uiforge.monitoring import metrics_collector
from .config import CompletionRequest, GeminiConfig


logger = get_logger(__name__)


class CompletionModel(Protocol):
    """Anything that can answer a CompletionRequest asynchronously."""

    async def ainvoke(self, request: CompletionRequest) -> str:
        ...


class GeminiModel:
    """Gemini API wrapper.

    Holds only read-only configuration; a GenerativeModel is built per call so
    one instance can serve concurrent pipeline runs without locking.
    """

    def __init__(self, config: GeminiConfig):
        self.config = config
        genai.configure(api_key=config.api_key)
        logger.info("model_configured", model=config.model_name)

    def _build(self, request: CompletionRequest) -> genai.GenerativeModel:
        generation_config = genai.GenerationConfig(
            temperature=request.temperature,
            max_output_tokens=request.max_output_tokens,
        )
        return genai.GenerativeModel(
            model_name=self.config.model_name,
            generation_config=generation_config,
            system_instruction=request.system_instruction,
        )

    def invoke(self, request: CompletionRequest) -> str:
        """Blocking completion."""
        start = time.time()
        try:
            response = self._build(request).generate_content(
                request.user_instruction,
                request_options={"timeout": self.config.timeout},
            )
            text = response.text
        except Exception as e:
            metrics_collector.record_llm_call(request.stage, "error", time.time() - start)
            logger.error("invoke_error", stage=request.stage, error=str(e))
            raise ModelCallError(f"{request.stage} model call failed: {e}", stage=request.stage) from e

        metrics_collector.record_llm_call(request.stage, "success", time.time() - start)
        logger.debug("invoke_complete", stage=request.stage, chars=len(text or ""))
        return text or ""

    async def ainvoke(self, request: CompletionRequest) -> str:
        """Async completion (runs sync API in thread pool)."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.invoke, request)


class ModelLoader:
    """Builds the shared model client."""

    @staticmethod
    def load(config: GeminiConfig) -> GeminiModel:
        """Load model with config."""
        logger.info("loading", model=config.model_name)
        if not config.api_key:
            logger.warning("api_key_missing", model=config.model_name)
        return GeminiModel(config)
