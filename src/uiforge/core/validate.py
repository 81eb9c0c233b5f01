"""Inbound request validation."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .config import get_settings
from .errors import ValidationError


# Validation limits
MAX_CODE_SIZE = 256 * 1024  # 256KB
MAX_JSON_DEPTH = 20

MISSING_MESSAGE = "Message is required"


class RequestValidator(BaseModel):
    """Base validator with strict configuration."""

    model_config = ConfigDict(
        validate_assignment=True, extra="ignore", frozen=True, populate_by_name=True
    )


class ChatRequest(RequestValidator):
    """
    Validated chat request as posted by the browser.

    The message length limit comes from validation context
    (``{"max_message_length": n}``), falling back to the service settings.
    """

    message: str
    current_code: str | None = Field(default=None, alias="currentCode", max_length=MAX_CODE_SIZE)
    current_plan: dict[str, Any] | None = Field(default=None, alias="currentPlan")

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str, info: ValidationInfo) -> str:
        """Ensure message is non-empty after stripping and within the length limit."""
        stripped = v.strip()
        if not stripped:
            raise ValueError(MISSING_MESSAGE)
        limit = (info.context or {}).get("max_message_length") or get_settings().max_message_length
        if len(stripped) > limit:
            raise ValueError(f"Message is too long (max {limit} characters)")
        return stripped

    @field_validator("current_code")
    @classmethod
    def validate_code(cls, v: str | None) -> str | None:
        """Treat blank code as no code."""
        if v is None or not v.strip():
            return None
        return v

    @field_validator("current_plan")
    @classmethod
    def validate_plan_depth(cls, v: dict[str, Any] | None) -> dict[str, Any] | None:
        """Reject pathologically nested plan context."""
        if v:
            try:
                validate_json_depth(v)
            except ValidationError as e:
                raise ValueError(str(e)) from e
        return v or None


def validate_json_depth(obj: Any, max_depth: int = MAX_JSON_DEPTH, current_depth: int = 0) -> None:
    """
    Validate JSON nesting depth to prevent stack overflow.

    Args:
        obj: Object to validate
        max_depth: Maximum allowed nesting depth
        current_depth: Current depth (internal)

    Raises:
        ValidationError: If depth exceeds limit
    """
    if current_depth > max_depth:
        raise ValidationError(f"JSON nesting depth {current_depth} exceeds maximum {max_depth}")

    if isinstance(obj, dict):
        for value in obj.values():
            validate_json_depth(value, max_depth, current_depth + 1)
    elif isinstance(obj, list):
        for item in obj:
            validate_json_depth(item, max_depth, current_depth + 1)
