"""Chat Handler - runs the pipeline for one request and streams progress as SSE."""

import asyncio
from typing import Any, AsyncIterator, Callable

from pydantic import ValidationError as PydanticValidationError

from uiforge.agents import Pipeline, PipelineResult, StageEvent, UIPlan
from uiforge.core import ChatRequest, LogContext, get_logger, get_settings, safe_json_dumps
from uiforge.core.validate import MISSING_MESSAGE
from uiforge.monitoring import metrics_collector
from uiforge.services import ConversationStore


logger = get_logger(__name__)

GENERIC_ERROR = "Generation failed. Please try again."

Frame = tuple[str, dict[str, Any]]


def format_sse(event: str, data: dict[str, Any]) -> str:
    """Encode one server-sent event frame."""
    return f"event: {event}\ndata: {safe_json_dumps(data)}\n\n"


def describe_invalid_request(error: PydanticValidationError) -> str:
    """Client-facing text for the first problem in a rejected request."""
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "request"
    if field == "message" and first["type"] == "missing":
        return MISSING_MESSAGE
    if first["type"] == "value_error":
        return str(first["ctx"]["error"])
    return f"Invalid {field}: {first['msg']}"


class ChatHandler:
    """Bridges HTTP requests, the pipeline and the conversation store."""

    def __init__(
        self,
        pipeline: Pipeline,
        store: ConversationStore,
        max_message_length: int | None = None,
    ) -> None:
        self.pipeline = pipeline
        self.store = store
        self.max_message_length = max_message_length or get_settings().max_message_length
        self._tasks: set[asyncio.Task] = set()

    async def stream(self, body: Any, session_id: str) -> AsyncIterator[str]:
        """
        Stream SSE frames for one chat request.

        The run itself happens in a separate task, so it completes (and is
        persisted) even when the client stops reading.

        Args:
            body: Decoded JSON request body
            session_id: Caller's session

        Yields:
            ``stage`` frames, then exactly one ``done`` or ``error`` frame
        """
        try:
            request = ChatRequest.model_validate(
                body if isinstance(body, dict) else {},
                context={"max_message_length": self.max_message_length},
            )
        except PydanticValidationError as e:
            logger.warning("invalid_request", error=str(e))
            metrics_collector.record_stream_event("error")
            yield format_sse("error", {"error": describe_invalid_request(e)})
            return

        queue: asyncio.Queue[Frame] = asyncio.Queue()
        task = asyncio.create_task(self.process(request, session_id, queue.put_nowait))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        while True:
            event, data = await queue.get()
            yield format_sse(event, data)
            if event in ("done", "error"):
                break

    async def process(
        self,
        request: ChatRequest,
        session_id: str,
        send: Callable[[Frame], None],
    ) -> dict[str, Any] | None:
        """Run the pipeline, persist the outcome and report it through send."""

        def on_stage(event: StageEvent) -> None:
            metrics_collector.record_stream_event("stage")
            send(("stage", event.to_payload()))

        with LogContext(session_id=session_id):
            try:
                result = await self.pipeline.run(
                    request.message,
                    request.current_code,
                    self._load_plan(request.current_plan),
                    on_stage=on_stage,
                )
                version = await self._persist(session_id, request.message, result)
            except Exception as e:
                logger.error("chat_failed", error=str(e), error_type=type(e).__name__)
                metrics_collector.record_stream_event("error")
                send(("error", {"error": GENERIC_ERROR}))
                return None

            payload = {
                "code": result.code,
                "explanation": result.explanation,
                "plan": result.plan.to_payload(),
                "version": version,
            }
            metrics_collector.record_stream_event("done")
            send(("done", payload))
            return payload

    async def _persist(self, session_id: str, message: str, result: PipelineResult) -> int:
        """Store the exchange and the new active version; returns its number."""
        await self.store.append_message(session_id, "user", message)
        version = await self.store.next_version_number(session_id)
        await self.store.deactivate_all_versions(session_id)
        await self.store.insert_version(
            session_id,
            version,
            result.code,
            result.plan.to_payload(),
            result.explanation,
            active=True,
        )
        await self.store.append_message(session_id, "assistant", result.explanation)
        return version

    @staticmethod
    def _load_plan(raw: dict[str, Any] | None) -> UIPlan | None:
        if not raw:
            return None
        try:
            return UIPlan.model_validate(raw)
        except PydanticValidationError as e:
            logger.warning("plan_context_dropped", error=str(e))
            return None
