"""Pytest configuration and fixtures."""

import os
import pytest

from uiforge.core import Settings
from uiforge.agents import CodeGenerator, Explainer, IntentClassifier, Pipeline, Planner, UIPlan
from uiforge.handlers import ChatHandler
from uiforge.services import InMemoryConversationStore


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ['UIFORGE_LOG_LEVEL'] = 'DEBUG'
    os.environ['UIFORGE_GEMINI_MODEL'] = 'gemini-2.0-flash'
    os.environ['GOOGLE_API_KEY'] = 'test-api-key'  # Mock API key


# ============================================================================
# Fake model
# ============================================================================

class ScriptedModel:
    """
    Completion model that replays canned answers per stage.

    Each stage ("intent", "planner", "generator", "explainer") has its own
    queue; an Exception in a queue is raised instead of returned.
    """

    def __init__(self, **scripts):
        self.scripts = {stage: list(answers) for stage, answers in scripts.items()}
        self.calls = []

    async def ainvoke(self, request):
        self.calls.append(request)
        queue = self.scripts.get(request.stage)
        if not queue:
            raise AssertionError(f"unexpected {request.stage} call")
        answer = queue.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def calls_for(self, stage):
        return [c for c in self.calls if c.stage == stage]


def intent_text(
    intent="create",
    action="create",
    target="page",
    discard=False,
    cleaned="build a page",
    blocked="NONE",
    completely=False,
):
    """Tagged classifier answer."""
    return (
        f"<intent>{intent}</intent>\n"
        f"<action>{action}</action>\n"
        f"<target>{target}</target>\n"
        f"<discard_existing>{str(discard).lower()}</discard_existing>\n"
        f"<cleaned_request>{cleaned}</cleaned_request>\n"
        f"<blocked_items>{blocked}</blocked_items>\n"
        f"<is_completely_blocked>{str(completely).lower()}</is_completely_blocked>"
    )


def plan_text(action="create", description="A card with a button", components=None, changes=None):
    """Tagged planner answer."""
    parts = [f"<action>{action}</action>", f"<description>{description}</description>"]
    if action == "create":
        body = components or '[{"type": "Card", "props": {"title": "Hello"}, "children": [{"type": "Button"}]}]'
        parts.append(f"<components>{body}</components>")
    else:
        body = changes or '[{"type": "add", "component": "Button", "location": "INSIDE Card"}]'
        parts.append(f"<changes>{body}</changes>")
    return "\n".join(parts)


VALID_CODE = (
    "const App = () => (\n"
    '  <Card title="Hello">\n'
    '    <Button label="Go" variant="primary" />\n'
    "  </Card>\n"
    ");\n"
    "render(<App />);"
)

PRIOR_CODE = (
    "const App = () => (\n"
    '  <Card title="Prior">\n'
    '    <Input placeholder="Email" />\n'
    "  </Card>\n"
    ");\n"
    "render(<App />);"
)

INVALID_CODE = '<div className="box">Hello</div>\nrender(<App />);'


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Test settings."""
    return Settings()


@pytest.fixture
def scripted_model():
    """Factory for ScriptedModel instances."""
    return ScriptedModel


@pytest.fixture
def intent_answer():
    return intent_text


@pytest.fixture
def plan_answer():
    return plan_text


@pytest.fixture
def valid_code():
    return VALID_CODE


@pytest.fixture
def prior_code():
    return PRIOR_CODE


@pytest.fixture
def invalid_code():
    return INVALID_CODE


@pytest.fixture
def prior_plan():
    """Plan that produced PRIOR_CODE."""
    return UIPlan(
        action="create",
        description="Email capture card",
        components=[{"type": "Card", "props": {"title": "Prior"}, "children": [{"type": "Input"}]}],
    )


# ============================================================================
# Pipeline Fixtures
# ============================================================================

@pytest.fixture
def build_pipeline(settings):
    """Build a pipeline whose stages all share one model."""

    def _build(model, max_attempts=3):
        return Pipeline(
            classifier=IntentClassifier(model, settings),
            planner=Planner(model, settings),
            generator=CodeGenerator(model, settings),
            explainer=Explainer(model, settings),
            max_attempts=max_attempts,
        )

    return _build


@pytest.fixture
def store():
    """Empty in-memory conversation store."""
    return InMemoryConversationStore()


@pytest.fixture
def build_handler(build_pipeline, store):
    """Build a chat handler over a scripted model and the shared store."""

    def _build(model):
        return ChatHandler(build_pipeline(model), store)

    return _build
