"""Configuration Management."""

import os
from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="UIFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # Server
    host: str = Field(default="0.0.0.0", description="HTTP bind address")
    port: int = Field(default=8000, description="HTTP port")

    # Model
    gemini_api_key: str = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY", ""), description="Gemini API key"
    )
    gemini_model: str = Field(default="gemini-2.0-flash", description="Gemini model name")
    gemini_timeout: float = Field(default=60.0, gt=0, description="Model request timeout (seconds)")

    # Per-stage sampling
    intent_temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    intent_max_tokens: int = Field(default=512, gt=0)
    planner_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    planner_max_tokens: int = Field(default=8192, gt=0)
    generator_temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    generator_max_tokens: int = Field(default=8192, gt=0)
    explainer_temperature: float = Field(default=0.5, ge=0.0, le=2.0)
    explainer_max_tokens: int = Field(default=1024, gt=0)

    # Pipeline
    max_generation_attempts: int = Field(
        default=3, ge=1, le=3, description="Generator calls per run (initial + retries)"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")

    # Monitoring
    enable_metrics: bool = Field(default=True, description="Expose /metrics")

    # Validation
    max_message_length: int = Field(default=10_000, gt=0, description="Max message length")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
