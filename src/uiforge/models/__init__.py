"""
Models package - Gemini API integration.
Unified interface for completion calls made by the pipeline stages.
"""

from .config import GeminiConfig, CompletionRequest
from .loader import CompletionModel, GeminiModel, ModelLoader

__all__ = [
    "GeminiConfig",
    "CompletionRequest",
    "CompletionModel",
    "GeminiModel",
    "ModelLoader",
]
