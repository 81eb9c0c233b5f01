"""
Model configuration with strong typing.
Centralized settings for the Gemini API.
"""

import os

from pydantic import BaseModel, ConfigDict, Field


# Fast enough for four calls per request
DEFAULT_MODEL = "gemini-2.0-flash"


class GeminiConfig(BaseModel):
    """Type-safe Gemini API configuration."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())  # Immutable for thread safety

    model_name: str = Field(default=DEFAULT_MODEL)
    api_key: str | None = Field(default=None)
    timeout: float = Field(default=60.0, gt=0)

    def __init__(self, **data):
        """Initialize config with API key from environment if not provided."""
        if not data.get("api_key"):
            data["api_key"] = os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
        super().__init__(**data)


class CompletionRequest(BaseModel):
    """One text-completion exchange with the provider."""

    model_config = ConfigDict(frozen=True)

    stage: str = Field(default="unknown", description="Pipeline stage label for logs/metrics")
    system_instruction: str
    user_instruction: str
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=1024, ge=1)
