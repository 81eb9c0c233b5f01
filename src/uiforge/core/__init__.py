"""Core utilities and infrastructure."""

from .config import Settings, get_settings
from .errors import (
    UIForgeError,
    ModelCallError,
    PlannerError,
    GenerationError,
    ValidationError,
)
from .logging_config import configure_logging, get_logger, LogContext
from .parsers import extract_tag, extract_tags, has_any_tag, strip_code_fences, parse_bool, parse_list
from .json import extract_json_array, safe_json_dumps, JSONParseError
from .validate import ChatRequest, validate_json_depth
from .tracing import init_tracer, trace_operation, trace_operation_async


def create_container(settings: Settings | None = None, llm=None):
    """Create dependency injection container (lazy import to avoid circular deps)."""
    from .container import create_container as _create_container

    return _create_container(settings, llm)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "UIForgeError",
    "ModelCallError",
    "PlannerError",
    "GenerationError",
    "ValidationError",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # Structured output
    "extract_tag",
    "extract_tags",
    "has_any_tag",
    "strip_code_fences",
    "parse_bool",
    "parse_list",
    # JSON
    "extract_json_array",
    "safe_json_dumps",
    "JSONParseError",
    # Validation
    "ChatRequest",
    "validate_json_depth",
    # Tracing
    "init_tracer",
    "trace_operation",
    "trace_operation_async",
    # DI
    "create_container",
]
