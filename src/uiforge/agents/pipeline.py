"""
Pipeline Orchestrator

Sequences intent classification, planning, generation and explanation for a
single request:

    intent -> (blocked | explain | proceed)
    proceed: planning -> generating (validated, at most 3 calls) -> explaining

Stages run strictly one after another. The pipeline keeps no state between
runs, so one instance serves concurrent requests.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Callable

from returns.pipeline import is_successful

from uiforge.core import GenerationError, get_logger, trace_operation_async
from uiforge.monitoring import metrics_collector
from .explainer import Explainer
from .generator import CodeGenerator
from .intent import IntentClassifier, wants_discard
from .models import PipelineResult, StageEvent, StageName, UIPlan
from .planner import Planner
from .validator import check_code, validate_plan


logger = get_logger(__name__)

MAX_GENERATION_ATTEMPTS = 3

PLACEHOLDER_CODE = (
    'const App = () => <Card title="Error"><Row>Failed to generate safe UI.</Row></Card>;\n'
    "render(<App />);"
)
GENERATION_FAILURE_ITEM = "Generation failed compilation safety checks."

BLOCKED_PLAN = UIPlan(action="modify", description="Blocked", changes=[])
EXPLAIN_ONLY_PLAN = UIPlan(action="modify", description="Explanation only", changes=[])

StageListener = Callable[[StageEvent], None]


class _Emitter:
    """Delivers stage events without letting a failing listener affect the run."""

    def __init__(self, listener: StageListener | None) -> None:
        self.listener = listener

    def __call__(self, stage: StageName, status: str, **payload) -> None:
        if self.listener is None:
            return
        event = StageEvent(stage=stage, status=status, **payload)
        try:
            self.listener(event)
        except Exception as e:
            logger.warning("stage_listener_failed", stage=stage, error=str(e))
            self.listener = None


class Pipeline:
    """The request state machine."""

    def __init__(
        self,
        classifier: IntentClassifier,
        planner: Planner,
        generator: CodeGenerator,
        explainer: Explainer,
        max_attempts: int = MAX_GENERATION_ATTEMPTS,
    ) -> None:
        self.classifier = classifier
        self.planner = planner
        self.generator = generator
        self.explainer = explainer
        self.max_attempts = max(1, min(max_attempts, MAX_GENERATION_ATTEMPTS))

    async def run(
        self,
        user_message: str,
        current_code: str | None,
        current_plan: UIPlan | None = None,
        on_stage: StageListener | None = None,
    ) -> PipelineResult:
        """
        Run every stage for one request.

        Args:
            user_message: Raw user text
            current_code: Code of the active version, None for a fresh session
            current_plan: Plan of the active version, if any
            on_stage: Optional listener receiving StageEvents as they happen

        Returns:
            Complete PipelineResult

        Raises:
            ModelCallError: A provider call failed at any stage
            PlannerError: The plan response had no usable structure
        """
        emit = _Emitter(on_stage)
        branch = "proceed"
        try:
            result, branch = await self._run(user_message, current_code, current_plan, emit)
        except Exception as e:
            metrics_collector.record_pipeline_run(branch, "error")
            metrics_collector.record_error(type(e).__name__, "pipeline")
            logger.error("pipeline_failed", error=str(e), error_type=type(e).__name__)
            raise

        metrics_collector.record_pipeline_run(branch, "success")
        logger.info("pipeline_complete", branch=branch)
        return result

    async def _run(
        self,
        user_message: str,
        current_code: str | None,
        current_plan: UIPlan | None,
        emit: _Emitter,
    ) -> tuple[PipelineResult, str]:
        has_code = current_code is not None

        emit("intent", "running")
        async with self._stage("intent"):
            intent = await self.classifier.classify(user_message, has_code)
        emit("intent", "done")

        blocked = list(intent.blocked_items)

        if intent.is_completely_blocked:
            explanation = await self._explain(emit, user_message, None, has_code, blocked)
            result = PipelineResult(
                plan=current_plan or BLOCKED_PLAN,
                code=current_code or "",
                explanation=explanation,
            )
            return result, "blocked"

        if intent.intent == "explain":
            explanation = await self._explain(emit, user_message, current_plan, True, blocked)
            result = PipelineResult(
                plan=current_plan or EXPLAIN_ONLY_PLAN,
                code=current_code or "",
                explanation=explanation,
            )
            return result, "explain"

        # Keyword check also catches start-over requests the classifier missed
        discard = wants_discard(user_message) or intent.discard_existing
        if discard:
            logger.info("discard_detected", classifier_flag=intent.discard_existing)
            intent = intent.model_copy(update={"intent": "create", "action": "create", "discard_existing": True})
        code_context = None if discard else current_code
        plan_context = None if discard else current_plan

        emit("planning", "running")
        async with self._stage("planning"):
            plan = await self.planner.plan(intent.sanitized_request, code_context, plan_context, intent)

        plan_check = validate_plan(plan)
        if not plan_check.valid:
            logger.warning("plan_out_of_vocabulary", errors=plan_check.errors)
            blocked.extend(plan_check.errors)
        emit("planning", "done", plan=plan)

        emit("generating", "running")
        async with self._stage("generating"):
            code = await self._generate(plan, code_context, current_code, blocked)
        emit("generating", "done", code=code)

        explanation = await self._explain(emit, user_message, plan, intent.intent == "modify", blocked)
        return PipelineResult(plan=plan, code=code, explanation=explanation), "proceed"

    async def _generate(
        self,
        plan: UIPlan,
        code_context: str | None,
        previous_code: str | None,
        blocked: list[str],
    ) -> str:
        """Generate/validate loop; falls back to prior code or the placeholder."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                candidate = await self.generator.generate(plan, code_context)
            except GenerationError as e:
                logger.warning("generation_empty", attempt=attempt, error=str(e))
                metrics_collector.record_validation_failure(attempt)
                continue

            outcome = check_code(candidate)
            if is_successful(outcome):
                metrics_collector.record_generation(attempt)
                if code_context is not None and candidate == code_context:
                    logger.warning("generation_unchanged", attempt=attempt)
                return outcome.unwrap()

            logger.warning("validation_failed", attempt=attempt, errors=outcome.failure().errors)
            metrics_collector.record_validation_failure(attempt)

        fallback = "previous" if previous_code else "placeholder"
        metrics_collector.record_generation(self.max_attempts, fallback=fallback)
        logger.error("generation_exhausted", attempts=self.max_attempts, fallback=fallback)
        blocked.append(GENERATION_FAILURE_ITEM)
        return previous_code if previous_code else PLACEHOLDER_CODE

    async def _explain(
        self,
        emit: _Emitter,
        user_message: str,
        plan: UIPlan | None,
        is_edit: bool,
        blocked: list[str],
    ) -> str:
        emit("explaining", "running")
        async with self._stage("explaining"):
            explanation = await self.explainer.explain(user_message, plan, is_edit, blocked)
        emit("explaining", "done", explanation=explanation)
        return explanation

    @asynccontextmanager
    async def _stage(self, stage: StageName) -> AsyncGenerator[None, None]:
        start = time.time()
        async with trace_operation_async(f"pipeline.{stage}", stage=stage):
            yield
        metrics_collector.record_stage(stage, time.time() - start)
