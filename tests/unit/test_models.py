"""Tests for the Gemini model client."""

import pytest
from unittest.mock import MagicMock, patch

from uiforge.core import ModelCallError
from uiforge.models import CompletionRequest, GeminiConfig, GeminiModel, ModelLoader


@pytest.fixture
def gemini_config():
    """Gemini config for testing."""
    return GeminiConfig(model_name="gemini-2.0-flash", api_key="test-api-key", timeout=5.0)


@pytest.fixture
def completion_request():
    return CompletionRequest(
        stage="planner",
        system_instruction="You plan UIs.",
        user_instruction="Plan a card.",
        temperature=0.3,
        max_output_tokens=8192,
    )


@pytest.fixture
def mock_genai():
    """Patch the google.generativeai module used by the loader."""
    with patch("uiforge.models.loader.genai") as genai:
        yield genai


@pytest.mark.unit
def test_invoke_passes_request_settings(mock_genai, gemini_config, completion_request):
    """Test system instruction and sampling reach the provider."""
    mock_genai.GenerativeModel.return_value.generate_content.return_value = MagicMock(text="<action>create</action>")

    text = GeminiModel(gemini_config).invoke(completion_request)

    assert text == "<action>create</action>"
    mock_genai.configure.assert_called_once_with(api_key="test-api-key")
    mock_genai.GenerationConfig.assert_called_once_with(temperature=0.3, max_output_tokens=8192)
    kwargs = mock_genai.GenerativeModel.call_args.kwargs
    assert kwargs["model_name"] == "gemini-2.0-flash"
    assert kwargs["system_instruction"] == "You plan UIs."
    mock_genai.GenerativeModel.return_value.generate_content.assert_called_once_with(
        "Plan a card.", request_options={"timeout": 5.0}
    )


@pytest.mark.unit
def test_invoke_wraps_provider_errors(mock_genai, gemini_config, completion_request):
    mock_genai.GenerativeModel.return_value.generate_content.side_effect = TimeoutError("deadline")

    with pytest.raises(ModelCallError) as exc_info:
        GeminiModel(gemini_config).invoke(completion_request)

    assert exc_info.value.stage == "planner"
    assert "deadline" in str(exc_info.value)


@pytest.mark.unit
def test_invoke_empty_text(mock_genai, gemini_config, completion_request):
    mock_genai.GenerativeModel.return_value.generate_content.return_value = MagicMock(text=None)
    assert GeminiModel(gemini_config).invoke(completion_request) == ""


@pytest.mark.unit
@pytest.mark.asyncio
async def test_ainvoke_runs_in_executor(mock_genai, gemini_config, completion_request):
    mock_genai.GenerativeModel.return_value.generate_content.return_value = MagicMock(text="ok")
    assert await GeminiModel(gemini_config).ainvoke(completion_request) == "ok"


@pytest.mark.unit
def test_loader_builds_model(mock_genai, gemini_config):
    model = ModelLoader.load(gemini_config)
    assert isinstance(model, GeminiModel)
    assert model.config is gemini_config
