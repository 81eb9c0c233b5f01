"""
Tracing
Span-based tracing of pipeline operations over structured logging.
"""

import time
import uuid
from contextlib import asynccontextmanager, contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, Generator

from .logging_config import get_logger

_trace_id: ContextVar[str] = ContextVar("trace_id", default="")
_span_id: ContextVar[str] = ContextVar("span_id", default="")


def _get_logger() -> Any:
    return get_logger(__name__)


@dataclass
class Span:
    """One traced operation."""

    trace_id: str
    span_id: str
    parent_id: str
    name: str
    service: str
    start_time: float
    end_time: float = 0.0
    tags: dict[str, str] = field(default_factory=dict)
    error: Exception | None = None

    @property
    def duration(self) -> float:
        end = self.end_time or time.time()
        return end - self.start_time

    def finish(self) -> None:
        self.end_time = time.time()

    def set_error(self, error: Exception) -> None:
        """Record an error in the span."""
        self.error = error


class Tracer:
    """Creates spans and reports them when they complete."""

    def __init__(self, service: str) -> None:
        self.service = service

    def start_span(self, name: str, **tags: str) -> Span:
        """Create a new span, child of the current one if any."""
        trace_id = _trace_id.get() or str(uuid.uuid4())
        parent_id = _span_id.get()

        span = Span(
            trace_id=trace_id,
            span_id=str(uuid.uuid4()),
            parent_id=parent_id,
            name=name,
            service=self.service,
            start_time=time.time(),
            tags=tags,
        )

        _trace_id.set(trace_id)
        _span_id.set(span.span_id)
        return span

    def submit(self, span: Span) -> None:
        """Log the completed span and restore the parent span."""
        _span_id.set(span.parent_id)

        log = _get_logger()
        fields = {
            "trace_id": span.trace_id,
            "span_id": span.span_id,
            "operation": span.name,
            "duration_ms": round(span.duration * 1000, 2),
            "service": span.service,
            **span.tags,
        }
        if span.parent_id:
            fields["parent_id"] = span.parent_id

        if span.error:
            log.error("span_completed_with_error", error=str(span.error), **fields)
        elif span.duration > 10.0:
            log.warning("span_completed_slow", **fields)
        else:
            log.info("span_completed", **fields)


_tracer: Tracer | None = None


def init_tracer(service: str) -> Tracer:
    """Initialize global tracer."""
    global _tracer
    _tracer = Tracer(service)
    return _tracer


@contextmanager
def trace_operation(operation: str, **kwargs: Any) -> Generator[Span | None, None, None]:
    """Context manager for tracing operations."""
    if _tracer is None:
        yield None
        return

    span = _tracer.start_span(operation, **{k: str(v) for k, v in kwargs.items()})
    try:
        yield span
    except Exception as e:
        span.set_error(e)
        raise
    finally:
        span.finish()
        _tracer.submit(span)


@asynccontextmanager
async def trace_operation_async(operation: str, **kwargs: Any) -> AsyncGenerator[Span | None, None]:
    """Async context manager for tracing operations."""
    if _tracer is None:
        yield None
        return

    span = _tracer.start_span(operation, **{k: str(v) for k, v in kwargs.items()})
    try:
        yield span
    except Exception as e:
        span.set_error(e)
        raise
    finally:
        span.finish()
        _tracer.submit(span)
